"""
Unit tests for the URL and host utilities.

Tests cover:
  - Scheme validation
  - Advisory URL well-formedness
  - Host cleaning
  - Domain allow-list matching
  - Preview host stripping
"""

import pytest

from durablelinks.core.exceptions import (
    InvalidHostError,
    InvalidSchemeError,
    InvalidURLFormatError,
    MissingHostError,
)
from durablelinks.utils.url_utils import (
    clean_host,
    is_domain_allowed,
    is_well_formed_url,
    remove_preview,
    validate_scheme,
)


class TestValidateScheme:
    """Tests for validate_scheme."""

    @pytest.mark.parametrize(
        "url", ["https://example.com/target", "http://example.com", "HTTPS://example.com"]
    )
    def test_accepts_http_and_https(self, url):
        validate_scheme(url)

    @pytest.mark.parametrize(
        "url", ["ftp://example.com/file", "mailto:someone@example.com", "example.com/path"]
    )
    def test_rejects_other_schemes(self, url):
        with pytest.raises(InvalidSchemeError):
            validate_scheme(url)

    def test_space_in_path_is_accepted(self):
        validate_scheme("https://example.com/spring sale")

    def test_space_in_host_is_format_error(self):
        with pytest.raises(InvalidURLFormatError):
            validate_scheme("https://exa mple.com/x")

    def test_unparsable_url_is_format_error(self):
        """Should raise a plain format error, not a scheme error."""
        with pytest.raises(InvalidURLFormatError) as exc_info:
            validate_scheme("not a valid url://")

        assert not isinstance(exc_info.value, InvalidSchemeError)


class TestIsWellFormedUrl:
    """Tests for is_well_formed_url."""

    @pytest.mark.parametrize(
        "value",
        [
            "https://example.com/image.png",
            "http://example.com",
            "myapp://open/item",
            "https://cdn.example.com/my image.png",
            "https://example.com/search?q=spring sale",
            "https://user@example.com/x",
        ],
    )
    def test_well_formed(self, value):
        assert is_well_formed_url(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-valid-url",
            "",
            "https://",
            "/relative/path",
            "https://exa mple.com",
            "http://[::1",
            "https://user@/x",
            "https://example.com/\x00",
            "https://example.com/tab\there",
        ],
    )
    def test_not_well_formed(self, value):
        assert is_well_formed_url(value) is False


class TestCleanHost:
    """Tests for clean_host."""

    def test_trims_whitespace(self):
        assert clean_host("  example.com  ") == "example.com"

    def test_strips_scheme_port_and_path(self):
        assert clean_host("https://example.com:8080/path?x=1") == "example.com"

    def test_assumes_https_without_scheme(self):
        assert clean_host("acme.short.link/abc") == "acme.short.link"

    def test_lowercases_host(self):
        assert clean_host("Acme.Short.LINK") == "acme.short.link"

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_empty_host_is_missing(self, raw):
        with pytest.raises(MissingHostError):
            clean_host(raw)

    def test_missing_host_is_invalid_host(self):
        """MissingHostError is reported through the InvalidHostError branch."""
        with pytest.raises(InvalidHostError):
            clean_host("")

    @pytest.mark.parametrize("raw", ["not a valid host://", "https://", "https://example.com:port"])
    def test_unparsable_host(self, raw):
        with pytest.raises(InvalidHostError):
            clean_host(raw)

    @pytest.mark.parametrize(
        "raw", ["example.com", "https://acme.short.link:443/x", " preview.acme.link "]
    )
    def test_idempotent(self, raw):
        """Cleaning an already clean host returns it unchanged."""
        host = clean_host(raw)
        assert clean_host(host) == host
        assert clean_host(f"https://{host}") == host


class TestIsDomainAllowed:
    """Tests for is_domain_allowed."""

    def test_exact_match(self):
        assert is_domain_allowed(["example.com"], "https://example.com/target") is True

    def test_case_insensitive_and_trimmed(self):
        assert is_domain_allowed([" Example.COM "], "HTTPS://EXAMPLE.com/x") is True

    def test_subdomain_not_allowed(self):
        assert is_domain_allowed(["example.com"], "https://sub.example.com/x") is False

    def test_substring_not_allowed(self):
        assert is_domain_allowed(["example.com"], "https://notexample.com/x") is False

    def test_any_entry_matches(self):
        allow_list = ["other.com", "example.com"]
        assert is_domain_allowed(allow_list, "https://example.com") is True

    def test_empty_allow_list(self):
        assert is_domain_allowed([], "https://example.com") is False

    def test_unparsable_candidate(self):
        assert is_domain_allowed(["example.com"], "http://[::1") is False


class TestRemovePreview:
    """Tests for remove_preview."""

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("preview.acme.short.link", "acme.short.link"),
            ("acme-preview.short.link", "acme.short.link"),
            ("acme.short.link", "acme.short.link"),
            ("preview.staging.acme.short.link", "staging.acme.short.link"),
            ("myapp-preview.dev.short.link", "myapp.dev.short.link"),
            ("notpreview.acme.short.link", "notpreview.acme.short.link"),
            ("acme-somethingelse.short.link", "acme-somethingelse.short.link"),
            ("acme.short-preview.link", "acme.short-preview.link"),
        ],
    )
    def test_remove_preview(self, host, expected):
        assert remove_preview(host) == expected
