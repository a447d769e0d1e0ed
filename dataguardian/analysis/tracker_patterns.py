"""
Tracker detection patterns for outbound request classification.

Three independent signals decide whether a request is tracking;
any one is sufficient:

1. the hostname contains a curated tracker domain,
2. the hostname matches a tracker host pattern,
3. the full URL matches a tracker path/keyword pattern.
"""

from __future__ import annotations

import re

# ============================================================================
# Curated tracker domains (substring match against the hostname)
# ============================================================================

TRACKER_DOMAINS: tuple[str, ...] = (
    # Analytics & tag management
    "google-analytics.com",
    "googletagmanager.com",
    "googleadservices.com",
    # Social media
    "facebook.net",
    "connect.facebook.net",
    "facebook.com",
    "twitter.com",
    "ads-twitter.com",
    "linkedin.com",
    "snapchat.com",
    "pinterest.com",
    "tiktok.com",
    # Ad networks
    "doubleclick.net",
    "googlesyndication.com",
    "adservice.google.com",
    "ads.google.com",
    "adnxs.com",
    "amazon-adsystem.com",
    "criteo.com",
    "outbrain.com",
    "taboola.com",
    "adroll.com",
    "rubiconproject.com",
    "pubmatic.com",
    "openx.net",
    "adsystem.com",
    # Analytics platforms
    "segment.com",
    "mixpanel.com",
    "amplitude.com",
    "hotjar.com",
    "fullstory.com",
    "logrocket.com",
    "optimizely.com",
    "mouseflow.com",
    # Data brokers & audience
    "scorecardresearch.com",
    "quantserve.com",
    "comscore.com",
    "demdex.net",
    "adsrvr.org",
    "turn.com",
    "eyeota.net",
    "bluekai.com",
    # Other common trackers
    "chartbeat.com",
    "clicktale.net",
    "doubleverify.com",
    "mathtag.com",
    "sharethis.com",
    "addthis.com",
    "trustarc.com",
    "adform.net",
    "bing.com",
    "yahoo.com",
)

# ============================================================================
# Host patterns for dynamically named tracker hosts
# ============================================================================

TRACKER_HOST_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\.ads\."),
    re.compile(r"\.analytics\."),
    re.compile(r"\.tracking\."),
    re.compile(r"\.metrics\."),
    re.compile(r"\.telemetry\."),
    re.compile(r"ads\d+\."),
    re.compile(r"track\d*\."),
    re.compile(r"collect\."),
    re.compile(r"pixel\."),
    re.compile(r"beacon\."),
)

# ============================================================================
# Full-URL path / keyword patterns
# ============================================================================

TRACKER_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/analytics", re.I),
    re.compile(r"/tracking", re.I),
    re.compile(r"/collect", re.I),
    re.compile(r"/beacon", re.I),
    re.compile(r"/pixel", re.I),
    re.compile(r"/track", re.I),
    re.compile(r"/metric", re.I),
    re.compile(r"/telemetry", re.I),
    re.compile(r"gtag|gtm", re.I),
    re.compile(r"fbevents", re.I),
    re.compile(r"doubleclick", re.I),
)


def matches_tracker_domain(hostname: str) -> bool:
    """Whether *hostname* contains any curated tracker domain."""
    return any(domain in hostname for domain in TRACKER_DOMAINS)


def matches_tracker_host(hostname: str) -> bool:
    """Whether *hostname* matches a dynamic tracker host pattern."""
    return any(p.search(hostname) for p in TRACKER_HOST_PATTERNS)


def matches_tracker_url(url: str) -> bool:
    """Whether the full request *url* matches a tracker path pattern."""
    return any(p.search(url) for p in TRACKER_URL_PATTERNS)


def is_tracker_request(
    url: str,
    hostname: str,
    main_hostname: str,
    include_first_party: bool = False,
) -> bool:
    """Decide whether one outbound request is a tracker.

    Args:
        url: Full request URL.
        hostname: Lowercased request hostname.
        main_hostname: Hostname of the page being analysed.
        include_first_party: Keep requests to the page's own
            hostname instead of skipping them.

    Returns:
        ``True`` when any of the three signals fires.
    """
    hostname = hostname.lower()
    if not include_first_party and hostname == main_hostname.lower():
        return False
    return matches_tracker_domain(hostname) or matches_tracker_host(hostname) or matches_tracker_url(url)
