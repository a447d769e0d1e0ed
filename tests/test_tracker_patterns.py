"""Tests for dataguardian.analysis.tracker_patterns."""

from __future__ import annotations

from dataguardian.analysis import tracker_patterns


class TestIsTrackerRequest:
    """The three independent tracker signals."""

    def test_curated_domain(self) -> None:
        assert tracker_patterns.is_tracker_request(
            "https://www.google-analytics.com/g/collect", "www.google-analytics.com", "example.com"
        )

    def test_host_pattern(self) -> None:
        assert tracker_patterns.is_tracker_request(
            "https://cdn.metrics.vendor.io/lib.js", "cdn.metrics.vendor.io", "example.com"
        )

    def test_url_pattern(self) -> None:
        assert tracker_patterns.is_tracker_request(
            "https://api.vendor.io/v1/beacon?id=1", "api.vendor.io", "example.com"
        )

    def test_plain_third_party_asset_is_not_tracker(self) -> None:
        assert not tracker_patterns.is_tracker_request(
            "https://cdn.jsdelivr.net/npm/lib.js", "cdn.jsdelivr.net", "example.com"
        )

    def test_first_party_excluded_by_default(self) -> None:
        assert not tracker_patterns.is_tracker_request(
            "https://example.com/analytics.js", "example.com", "example.com"
        )

    def test_first_party_included_on_request(self) -> None:
        assert tracker_patterns.is_tracker_request(
            "https://example.com/analytics.js", "example.com", "example.com", include_first_party=True
        )

    def test_subdomain_of_site_is_not_first_party(self) -> None:
        # Only the exact page hostname is excluded.
        assert tracker_patterns.is_tracker_request(
            "https://stats.example.com/collect", "stats.example.com", "example.com"
        )


class TestMatchers:

    def test_domain_substring(self) -> None:
        assert tracker_patterns.matches_tracker_domain("px.ads.linkedin.com")

    def test_host_digits(self) -> None:
        assert tracker_patterns.matches_tracker_host("ads12.vendor.net")
        assert tracker_patterns.matches_tracker_host("track3.vendor.net")

    def test_url_case_insensitive(self) -> None:
        assert tracker_patterns.matches_tracker_url("https://x.io/TRACKING/ping")
        assert tracker_patterns.matches_tracker_url("https://x.io/js/fbevents.js")
