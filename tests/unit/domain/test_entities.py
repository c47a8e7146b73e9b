"""Tests for domain entities."""

from streamtoshelf.domain.entities import (
    PlatformLink,
    ReleaseCandidate,
    ResolvedEntity,
    ResolvedLinks,
)
from streamtoshelf.domain.value_objects.platforms import LinkCategory, Platform

SONGLINK_PAYLOAD = {
    "entityUniqueId": "SPOTIFY_ALBUM::123",
    "userCountry": "US",
    "pageUrl": "https://album.link/s/123",
    "linksByPlatform": {
        "spotify": {"url": "https://open.spotify.com/album/123", "entityUniqueId": "SPOTIFY_ALBUM::123"},
        "itunes": {"url": "https://geo.music.apple.com/album/123", "entityUniqueId": "ITUNES_ALBUM::123"},
        "bandcamp": {"entityUniqueId": "BANDCAMP_ALBUM::123"},
    },
    "entitiesByUniqueId": {
        "ITUNES_ALBUM::123": {
            "id": "123",
            "type": "album",
            "title": "OK Computer",
            "artistName": "Radiohead",
            "thumbnailUrl": "https://is1-ssl.mzstatic.com/image/thumb/ok.jpg",
            "apiProvider": "itunes",
        },
        "SPOTIFY_ALBUM::123": {
            "id": "123",
            "title": "OK Computer (Spotify)",
            "artistName": "Radiohead",
            "apiProvider": "spotify",
        },
    },
}


class TestResolvedLinks:
    """Parsing the song.link payload."""

    def test_parses_links_and_entities(self) -> None:
        resolved = ResolvedLinks.from_payload(SONGLINK_PAYLOAD)

        assert set(resolved.links_by_platform) == {"spotify", "itunes"}
        assert resolved.links_by_platform["itunes"].url == "https://geo.music.apple.com/album/123"
        assert resolved.page_url == "https://album.link/s/123"
        assert len(resolved.entities_by_unique_id) == 2

    def test_link_without_url_is_dropped(self) -> None:
        resolved = ResolvedLinks.from_payload(SONGLINK_PAYLOAD)
        assert "bandcamp" not in resolved.links_by_platform

    def test_first_entity_follows_payload_order(self) -> None:
        entity = ResolvedLinks.from_payload(SONGLINK_PAYLOAD).first_entity()

        assert entity is not None
        assert entity.title == "OK Computer"
        assert entity.thumbnail_url == "https://is1-ssl.mzstatic.com/image/thumb/ok.jpg"

    def test_empty_payload(self) -> None:
        resolved = ResolvedLinks.from_payload({})
        assert resolved.links_by_platform == {}
        assert resolved.first_entity() is None


class TestResolvedEntity:
    """Field-level artwork merge."""

    def test_fills_missing_artwork(self) -> None:
        entity = ResolvedEntity(title="Kid A", artist_name="Radiohead")
        merged = entity.with_fallback_artwork("https://i.scdn.co/image/kida")

        assert merged.artwork_url == "https://i.scdn.co/image/kida"
        assert merged.title == "Kid A"
        assert merged.artist_name == "Radiohead"

    def test_keeps_existing_artwork(self) -> None:
        entity = ResolvedEntity("Kid A", "Radiohead", "https://is1-ssl.mzstatic.com/kida.jpg")
        assert entity.with_fallback_artwork("https://i.scdn.co/image/kida") is entity

    def test_ignores_empty_fallback(self) -> None:
        entity = ResolvedEntity(title="Kid A", artist_name="Radiohead")
        assert entity.with_fallback_artwork(None) is entity


class TestReleaseCandidate:
    def test_to_entity_joins_artists(self) -> None:
        candidate = ReleaseCandidate(
            id="1",
            name="Watch the Throne",
            artist_names=("JAY-Z", "Kanye West"),
            image_url="https://i.scdn.co/image/wtt",
        )
        entity = candidate.to_entity()

        assert entity.title == "Watch the Throne"
        assert entity.artist_name == "JAY-Z, Kanye West"
        assert entity.artwork_url == "https://i.scdn.co/image/wtt"


def test_platform_link_to_dict() -> None:
    link = PlatformLink(Platform.HDTRACKS, "HDtracks", "https://www.hdtracks.com/", LinkCategory.DOWNLOAD)
    assert link.to_dict() == {
        "platform": "hdtracks",
        "display_name": "HDtracks",
        "url": "https://www.hdtracks.com/",
        "category": "download",
    }
