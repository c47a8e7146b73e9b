"""Tests for the platform catalog and artist plausibility matching."""

import pytest

from streamtoshelf.domain.value_objects.artist_matching import is_plausible_artist_match
from streamtoshelf.domain.value_objects.platforms import (
    PLATFORM_CATALOG,
    LinkCategory,
    Platform,
    category_for,
    display_name_for,
    resolver_platform,
)


class TestPlatformCatalog:
    """Fixed platform -> category table."""

    def test_every_platform_is_catalogued(self) -> None:
        assert set(PLATFORM_CATALOG) == set(Platform)

    @pytest.mark.parametrize(
        ("platform", "category"),
        [
            (Platform.ITUNES, LinkCategory.DOWNLOAD),
            (Platform.AMAZON_STORE, LinkCategory.DOWNLOAD),
            (Platform.BANDCAMP, LinkCategory.DOWNLOAD),
            (Platform.GOOGLE_STORE, LinkCategory.DOWNLOAD),
            (Platform.AMAZON_DIGITAL, LinkCategory.DOWNLOAD),
            (Platform.HDTRACKS, LinkCategory.DOWNLOAD),
            (Platform.AMAZON_PHYSICAL, LinkCategory.PHYSICAL),
            (Platform.DISCOGS, LinkCategory.PHYSICAL),
        ],
    )
    def test_categories(self, platform: Platform, category: LinkCategory) -> None:
        assert category_for(platform) is category

    def test_display_names(self) -> None:
        assert display_name_for(Platform.ITUNES) == "iTunes"
        assert display_name_for(Platform.AMAZON_DIGITAL) == "Amazon Music"
        assert display_name_for(Platform.AMAZON_PHYSICAL) == "Amazon"
        assert display_name_for(Platform.HDTRACKS) == "HDtracks"


class TestResolverPlatform:
    """Which resolver keys survive the allow-list."""

    @pytest.mark.parametrize("key", ["itunes", "bandcamp", "googleStore"])
    def test_allow_listed_keys(self, key: str) -> None:
        assert resolver_platform(key) is Platform(key)

    @pytest.mark.parametrize("key", ["spotify", "deezer", "youtubeMusic", "tidal", "", "ITUNES"])
    def test_streaming_and_unknown_keys_are_dropped(self, key: str) -> None:
        assert resolver_platform(key) is None

    def test_unreliable_amazon_store_is_dropped(self) -> None:
        assert resolver_platform("amazonStore") is None

    def test_synthesized_keys_are_not_resolver_platforms(self) -> None:
        assert resolver_platform("amazonDigital") is None
        assert resolver_platform("discogs") is None


class TestArtistMatching:
    """Case-insensitive substring match in either direction."""

    def test_exact_match(self) -> None:
        assert is_plausible_artist_match("Radiohead", ["Radiohead"])

    def test_case_insensitive(self) -> None:
        assert is_plausible_artist_match("radiohead", ["RADIOHEAD"])

    def test_candidate_contains_query(self) -> None:
        assert is_plausible_artist_match("Queen", ["Queens of the Stone Age"])

    def test_query_contains_candidate(self) -> None:
        assert is_plausible_artist_match("Simon & Garfunkel", ["Garfunkel"])

    def test_any_credited_artist_is_enough(self) -> None:
        assert is_plausible_artist_match("Jay-Z", ["Kanye West", "JAY-Z"])

    def test_unrelated_artist_is_rejected(self) -> None:
        assert not is_plausible_artist_match("Radiohead", ["Vitamin String Quartet"])

    def test_no_artists_is_rejected(self) -> None:
        assert not is_plausible_artist_match("Radiohead", [])

    def test_empty_candidate_name_is_ignored(self) -> None:
        assert not is_plausible_artist_match("Radiohead", [""])
