"""
URL and hostname helpers shared by the crawler, classifier and scorer.
"""

from __future__ import annotations

import re
from urllib import parse

_TWO_PART_TLDS = frozenset([
    "co.uk", "com.au", "co.nz", "co.jp", "com.br",
    "co.in", "org.uk", "net.uk", "gov.uk", "ac.uk",
])


def extract_hostname(url: str) -> str | None:
    """Return the lowercased hostname of *url*, or ``None`` when it has none.

    ``data:``, ``blob:`` and malformed URLs have no hostname.
    """
    try:
        hostname = parse.urlparse(url).hostname
    except ValueError:
        return None
    return hostname.lower() if hostname else None


def get_base_domain(domain: str) -> str:
    """Extract the registrable base domain from a full hostname.

    Handles common multi-part TLDs (e.g. ``co.uk``,
    ``com.au``) and strips a leading ``www.`` prefix.

    Args:
        domain: A hostname like ``"www.example.co.uk"``.

    Returns:
        The base domain, e.g. ``"example.co.uk"``.
    """
    clean = re.sub(r"^www\.", "", domain.strip().lower().rstrip("."))
    parts = [p for p in clean.split(".") if p]
    if len(parts) >= 2:
        last_two = ".".join(parts[-2:])
        if last_two in _TWO_PART_TLDS and len(parts) >= 3:
            return ".".join(parts[-3:])
        return last_two
    return ".".join(parts)


def is_same_site(hostname: str, site_domain: str) -> bool:
    """Whether *hostname* shares a registrable domain with *site_domain*."""
    if not hostname or not site_domain:
        return False
    return get_base_domain(hostname) == get_base_domain(site_domain)


def is_secure_url(url: str) -> bool:
    """Whether *url* uses the ``https`` scheme."""
    return url.strip().lower().startswith("https://")
