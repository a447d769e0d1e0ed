"""Tests for dataguardian.analysis.classifier."""

from __future__ import annotations

import pytest

from dataguardian.analysis import classifier
from dataguardian.models import tracking

# ── classify ───────────────────────────────────────────────────


class TestClassify:
    """Rule-table lookups."""

    @pytest.mark.parametrize(
        ("hostname", "name", "category", "company"),
        [
            ("stats.g.doubleclick.net", "Google Ads", "Advertising", "Google"),
            ("www.googletagmanager.com", "Google Tag Manager", "Tag Manager", "Google"),
            ("www.google-analytics.com", "Google Analytics", "Analytics", "Google"),
            ("fonts.gstatic.com", "Google Static/Services", "CDN/Utility", "Google"),
            ("connect.facebook.net", "Meta Pixel", "Advertising", "Meta"),
            ("bat.bing.com", "Microsoft Ads/LinkedIn", "Advertising", "Microsoft"),
            ("ib.adnxs.com", "AppNexus (Adnxs)", "Advertising", "Microsoft (Xandr)"),
            ("static.hotjar.com", "Hotjar", "Analytics", "Hotjar"),
            ("cdn.segment.com", "Segment", "Analytics", "Twilio Segment"),
            ("aax.amazon-adsystem.com", "Amazon Advertising", "Advertising", "Amazon"),
        ],
    )
    def test_known_vendors(self, hostname: str, name: str, category: str, company: str) -> None:
        result = classifier.classify(hostname)
        assert (result.name, result.category, result.company) == (name, category, company)
        assert result.domain == hostname

    def test_first_match_wins_for_tag_manager(self) -> None:
        assert classifier.classify("googletagmanager.com").category == "Tag Manager"

    def test_doubleclick_beats_generic_google(self) -> None:
        assert classifier.classify("ad.doubleclick.google.com").name == "Google Ads"

    def test_matching_is_case_insensitive(self) -> None:
        result = classifier.classify("WWW.Google-Analytics.COM")
        assert result.name == "Google Analytics"
        assert result.domain == "WWW.Google-Analytics.COM"

    def test_generic_keyword_fallback(self) -> None:
        result = classifier.classify("pixel.shopvendor.io")
        assert (result.name, result.category, result.company) == ("Tracker", "Analytics", "Unknown")

    def test_unknown_host(self) -> None:
        result = classifier.classify("cdn.example-widgets.io")
        assert result.category == "Unknown"
        assert result.company == "Unknown"
        assert result.name == "cdn.example-widgets.io"

    def test_empty_string_is_unknown(self) -> None:
        assert classifier.classify("").category == "Unknown"

    def test_deterministic(self) -> None:
        assert classifier.classify("cdn.mxpnl.mixpanel.com") == classifier.classify("cdn.mxpnl.mixpanel.com")


# ── classify_for_site ──────────────────────────────────────────


class TestClassifyForSite:
    """Root-domain-aware classification."""

    def test_same_site_is_first_party(self) -> None:
        result = classifier.classify_for_site("metrics.example.com", "www.example.com")
        assert result.category == "First-Party/Analytics"
        assert result.company == "First-Party"

    def test_accepts_full_site_url(self) -> None:
        result = classifier.classify_for_site("metrics.example.co.uk", "https://shop.example.co.uk/cart")
        assert result.category == "First-Party/Analytics"

    def test_third_party_uses_rule_table(self) -> None:
        result = classifier.classify_for_site("www.google-analytics.com", "example.com")
        assert result.name == "Google Analytics"


# ── Aggregates ─────────────────────────────────────────────────


class TestAggregates:
    """build_tracker_details, category_counts and export_rules."""

    def test_build_tracker_details_preserves_order(self) -> None:
        details = classifier.build_tracker_details(["b.hotjar.com", "a.criteo.com"])
        assert [d.domain for d in details] == ["b.hotjar.com", "a.criteo.com"]

    def test_category_counts(self) -> None:
        details = [
            tracking.TrackerClassification(domain="a", name="a", category="Analytics", company="x"),
            tracking.TrackerClassification(domain="b", name="b", category="Advertising", company="x"),
            tracking.TrackerClassification(domain="c", name="c", category="Social", company="x"),
            tracking.TrackerClassification(domain="d", name="d", category="CDN/Utility", company="x"),
            tracking.TrackerClassification(domain="e", name="e", category="First-Party/Analytics", company="x"),
        ]
        assert classifier.category_counts(details) == {
            "analytics": 2,
            "advertising": 1,
            "social": 1,
            "other": 1,
        }

    def test_export_rules_keeps_precedence(self) -> None:
        rows = classifier.export_rules()
        assert len(rows) == len(classifier.RULES) + 2
        assert rows[0]["name"] == "Google Ads"
        assert rows[1]["name"] == "Google Tag Manager"
        assert rows[-1]["category"] == "Unknown"
        assert set(rows[0]) == {"pattern", "name", "category", "company"}
