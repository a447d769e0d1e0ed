"""Tests for dataguardian.utils.url."""

from __future__ import annotations

import pytest

from dataguardian.utils import url


class TestExtractHostname:

    def test_lowercases(self) -> None:
        assert url.extract_hostname("https://WWW.Example.COM/path") == "www.example.com"

    @pytest.mark.parametrize("value", ["data:text/plain,hi", "not a url", ""])
    def test_no_hostname(self, value: str) -> None:
        assert url.extract_hostname(value) is None


class TestGetBaseDomain:

    @pytest.mark.parametrize(
        ("domain", "expected"),
        [
            ("www.example.com", "example.com"),
            ("a.b.example.com", "example.com"),
            ("shop.example.co.uk", "example.co.uk"),
            ("example.com.", "example.com"),
            ("localhost", "localhost"),
        ],
    )
    def test_base_domain(self, domain: str, expected: str) -> None:
        assert url.get_base_domain(domain) == expected


class TestSameSiteAndScheme:

    def test_same_site(self) -> None:
        assert url.is_same_site("metrics.example.com", "www.example.com")
        assert not url.is_same_site("example.org", "example.com")
        assert not url.is_same_site("", "example.com")

    def test_is_secure_url(self) -> None:
        assert url.is_secure_url("https://example.com")
        assert url.is_secure_url("  HTTPS://example.com")
        assert not url.is_secure_url("http://example.com")
