"""
Tracker vendor classification.

Maps a tracker hostname to ``{name, category, company}`` using an
ordered rule table.  Rules are evaluated top to bottom and the first
match wins, so more specific patterns (Google Tag Manager) must stay
above broader ones (generic ``.google.`` services).  The table is
plain data so its precedence can be audited, tested, and exported to
the browser extension unchanged.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable

from dataguardian.models import tracking
from dataguardian.utils import logger, url

log = logger.create_logger("Classifier")


@dataclasses.dataclass(frozen=True)
class ClassificationRule:
    """One ``(pattern, attribution)`` row of the rule table."""

    pattern: re.Pattern[str]
    name: str
    category: tracking.TrackerCategory
    company: str

    def matches(self, hostname: str) -> bool:
        return self.pattern.search(hostname) is not None


def _rule(pattern: str, name: str, category: tracking.TrackerCategory, company: str) -> ClassificationRule:
    return ClassificationRule(re.compile(pattern), name, category, company)


# ============================================================================
# Rule table, ORDER MATTERS (first match wins)
# ============================================================================

RULES: tuple[ClassificationRule, ...] = (
    # Google, most specific first
    _rule(r"doubleclick|googlesyndication|googleadservices|ads\.google|adservice\.google", "Google Ads", "Advertising", "Google"),
    _rule(r"googletagmanager|gtm", "Google Tag Manager", "Tag Manager", "Google"),
    _rule(r"google-analytics|analytics\.google", "Google Analytics", "Analytics", "Google"),
    _rule(r"gstatic|googleapis", "Google Static/Services", "CDN/Utility", "Google"),
    _rule(r"\.google\.", "Google Services", "CDN/Utility", "Google"),
    # Meta
    _rule(r"facebook|fbcdn|fbevents|connect\.facebook\.net", "Meta Pixel", "Advertising", "Meta"),
    _rule(r"instagram\.com", "Instagram", "Social", "Meta"),
    # Microsoft / LinkedIn
    _rule(r"linkedin|licdn|bat\.bing\.com|bingads", "Microsoft Ads/LinkedIn", "Advertising", "Microsoft"),
    # Other social networks
    _rule(r"twitter|tiktok|snapchat|pinterest", "Social Network", "Social", "Various"),
    # Ad exchanges and networks
    _rule(r"adnxs|appnexus", "AppNexus (Adnxs)", "Advertising", "Microsoft (Xandr)"),
    _rule(r"rubiconproject", "Rubicon Project (Magnite)", "Advertising", "Magnite"),
    _rule(r"pubmatic", "PubMatic", "Advertising", "PubMatic"),
    _rule(r"criteo", "Criteo", "Advertising", "Criteo"),
    _rule(r"taboola", "Taboola", "Advertising", "Taboola"),
    _rule(r"outbrain", "Outbrain", "Advertising", "Outbrain"),
    _rule(r"openx", "OpenX", "Advertising", "OpenX"),
    _rule(r"adroll", "AdRoll", "Advertising", "NextRoll"),
    # Analytics SaaS
    _rule(r"mixpanel", "Mixpanel", "Analytics", "Mixpanel"),
    _rule(r"segment\.com", "Segment", "Analytics", "Twilio Segment"),
    _rule(r"amplitude", "Amplitude", "Analytics", "Amplitude"),
    _rule(r"hotjar", "Hotjar", "Analytics", "Hotjar"),
    _rule(r"fullstory", "FullStory", "Analytics", "FullStory"),
    _rule(r"logrocket", "LogRocket", "Analytics", "LogRocket"),
    _rule(r"optimizely", "Optimizely", "Analytics", "Optimizely"),
    _rule(r"mouseflow", "Mouseflow", "Analytics", "Mouseflow"),
    _rule(r"chartbeat", "Chartbeat", "Analytics", "Chartbeat"),
    _rule(r"clicktale", "Clicktale", "Analytics", "Clicktale"),
    _rule(r"mathtag", "MediaMath (mathtag)", "Advertising", "MediaMath"),
    _rule(r"doubleverify", "DoubleVerify", "Advertising", "DoubleVerify"),
    # Data brokers and audience platforms
    _rule(r"scorecardresearch\.com", "ScorecardResearch", "Advertising", "Comscore"),
    _rule(r"comscore\.com", "Comscore", "Advertising", "Comscore"),
    _rule(r"quantserve\.com", "Quantserve", "Advertising", "Quantcast"),
    _rule(r"demdex\.net", "Adobe Experience Cloud (Demdex)", "Advertising", "Adobe"),
    _rule(r"adsrvr\.org", "The Trade Desk", "Advertising", "The Trade Desk"),
    _rule(r"eyeota\.net", "Eyeota", "Advertising", "Eyeota"),
    _rule(r"bluekai\.com", "Oracle BlueKai", "Advertising", "Oracle"),
    # Everything else we have seen often enough to name
    _rule(r"amazon-adsystem\.com", "Amazon Advertising", "Advertising", "Amazon"),
    _rule(r"bouncex\.net|wunderkind\.co", "Wunderkind (BounceX)", "Advertising", "Wunderkind"),
    _rule(r"onetag\.com|s-onetag\.com", "OneTag", "Advertising", "OneTag"),
    _rule(r"permutive", "Permutive", "Advertising", "Permutive"),
    _rule(r"turner\.com|warnermediacdn\.com", "Turner/Warner CDN", "CDN/Utility", "Warner Bros. Discovery"),
    _rule(r"collector\.github\.com", "GitHub Telemetry", "Analytics", "GitHub"),
    _rule(r"cloudflareinsights\.com", "Cloudflare Web Analytics", "Analytics", "Cloudflare"),
    _rule(r"dubcdn\.com", "Dub CDN", "CDN/Utility", "Dub"),
)

# Applied only when no rule matches.
GENERIC_TRACKER_PATTERN = re.compile(r"analytics|track|collect|pixel|beacon|telemetry|metrics")


# ============================================================================
# Public API
# ============================================================================


def classify(hostname: str) -> tracking.TrackerClassification:
    """Classify a tracker hostname.

    Total over all strings: never raises, and unmatched input
    resolves to ``Unknown`` rather than an error.
    """
    domain = hostname if isinstance(hostname, str) else str(hostname)
    lower = domain.lower()
    for rule in RULES:
        if rule.matches(lower):
            return tracking.TrackerClassification(
                domain=domain, name=rule.name, category=rule.category, company=rule.company
            )
    if GENERIC_TRACKER_PATTERN.search(lower):
        return tracking.TrackerClassification(domain=domain, name="Tracker", category="Analytics", company="Unknown")
    return tracking.TrackerClassification(domain=domain, name=lower, category="Unknown", company="Unknown")


def classify_for_site(hostname: str, site_domain: str) -> tracking.TrackerClassification:
    """Classify *hostname* as seen on a page hosted at *site_domain*.

    Hostnames under the site's own registrable domain are reported
    as first-party before the vendor table is consulted, so a
    ``metrics.example.com`` on ``www.example.com`` is never
    attributed to a third party.

    Args:
        hostname: Tracker hostname.
        site_domain: The site's hostname (or a full site URL).
    """
    site_host = url.extract_hostname(site_domain) or site_domain
    if url.is_same_site(hostname.lower(), site_host.lower()):
        return tracking.TrackerClassification(
            domain=hostname, name=hostname, category="First-Party/Analytics", company="First-Party"
        )
    return classify(hostname)


def build_tracker_details(trackers: Iterable[str]) -> list[tracking.TrackerClassification]:
    """Classify every hostname in *trackers*, preserving order."""
    details = [classify(t) for t in trackers]
    log.debug(
        "Classified trackers",
        {"count": len(details), "unknown": sum(1 for d in details if d.category == "Unknown")},
    )
    return details


def category_counts(details: Iterable[tracking.TrackerClassification]) -> dict[str, int]:
    """Bucket classifications into analytics / advertising / social / other."""
    counts = {"analytics": 0, "advertising": 0, "social": 0, "other": 0}
    for detail in details:
        category = detail.category.lower()
        if "analytic" in category:
            counts["analytics"] += 1
        elif "advertising" in category:
            counts["advertising"] += 1
        elif "social" in category:
            counts["social"] += 1
        else:
            counts["other"] += 1
    return counts


def export_rules() -> list[dict[str, str]]:
    """Return the rule table as plain data, in precedence order.

    The final two rows describe the keyword heuristic and the
    ``Unknown`` default so a consumer can reproduce ``classify``.
    """
    rows = [
        {"pattern": r.pattern.pattern, "name": r.name, "category": r.category, "company": r.company}
        for r in RULES
    ]
    rows.append({"pattern": GENERIC_TRACKER_PATTERN.pattern, "name": "Tracker", "category": "Analytics", "company": "Unknown"})
    rows.append({"pattern": "", "name": "<hostname>", "category": "Unknown", "company": "Unknown"})
    return rows
