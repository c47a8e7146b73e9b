"""Tests for input sanitization and validation."""

import pytest

from streamtoshelf.domain.exceptions import ValidationError
from streamtoshelf.domain.value_objects.search_input import (
    MAX_QUERY_LENGTH,
    is_absolute_url,
    require_text,
    sanitize_text,
    validate_release_url,
)


class TestSanitizeText:
    def test_trims_whitespace(self) -> None:
        assert sanitize_text("  Radiohead  ") == "Radiohead"

    def test_truncates_to_max_length(self) -> None:
        result = sanitize_text("x" * 250)
        assert result is not None
        assert len(result) == MAX_QUERY_LENGTH

    def test_blank_becomes_none(self) -> None:
        assert sanitize_text("   ") is None
        assert sanitize_text(None) is None


class TestRequireText:
    def test_missing_value(self) -> None:
        with pytest.raises(ValidationError, match="Artist parameter is required"):
            require_text(None, "Artist")

    def test_whitespace_only_value(self) -> None:
        with pytest.raises(ValidationError, match="Artist parameter cannot be empty"):
            require_text("   ", "Artist")

    def test_returns_sanitized_value(self) -> None:
        assert require_text(" Björk ", "Artist") == "Björk"


class TestReleaseUrl:
    def test_missing_url(self) -> None:
        with pytest.raises(ValidationError, match="URL parameter is required"):
            validate_release_url("  ")

    @pytest.mark.parametrize("value", ["not a url", "open.spotify.com/album/1", "/album/1"])
    def test_relative_or_bare_text_is_rejected(self, value: str) -> None:
        with pytest.raises(ValidationError, match="Invalid URL format"):
            validate_release_url(value)

    @pytest.mark.parametrize(
        "value",
        [
            "https://open.spotify.com/album/1DFixLWuPkv3KT3TnV35m3",
            "https://music.apple.com/us/album/ok-computer/1097861387",
            "spotify:album:1DFixLWuPkv3KT3TnV35m3",
        ],
    )
    def test_absolute_urls_are_accepted(self, value: str) -> None:
        assert validate_release_url(f" {value} ") == value


class TestIsAbsoluteUrl:
    def test_http_and_https(self) -> None:
        assert is_absolute_url("https://itunes.apple.com/album/1")
        assert is_absolute_url("http://example.com")

    def test_other_schemes_and_relative(self) -> None:
        assert not is_absolute_url("javascript:alert(1)")
        assert not is_absolute_url("/s?k=x")
        assert not is_absolute_url("")
        assert not is_absolute_url(None)
