"""Domain entities."""

from dataclasses import dataclass, field, replace
from typing import Any

from streamtoshelf.domain.value_objects.platforms import LinkCategory, Platform

UNKNOWN = "Unknown"


# Hey future me, PlatformLink is what the user finally clicks. platform/category come from the
# catalog table (value_objects/platforms.py), never from parsing the URL. Frozen because the
# aggregator sorts and returns them, nothing downstream should mutate a link.
@dataclass(frozen=True)
class PlatformLink:
    """A single purchase destination."""

    platform: Platform
    display_name: str
    url: str
    category: LinkCategory

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-friendly dict."""
        return {
            "platform": self.platform.value,
            "display_name": self.display_name,
            "url": self.url,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class ResolverLink:
    """One platform entry from the resolver's linksByPlatform map."""

    url: str
    entity_unique_id: str | None = None


@dataclass(frozen=True)
class ResolverEntity:
    """One entry from the resolver's entitiesByUniqueId map."""

    unique_id: str
    title: str | None = None
    artist_name: str | None = None
    thumbnail_url: str | None = None
    api_provider: str | None = None


# Hey future me - song.link returns a LOT more than this (every streaming platform, native app
# URIs, thumbnails per entity). We keep the raw platform keys as strings here. Filtering down to
# the storefronts we show is the aggregator's job, not the parser's.
@dataclass
class ResolvedLinks:
    """Parsed cross-platform resolution result."""

    links_by_platform: dict[str, ResolverLink] = field(default_factory=dict)
    entities_by_unique_id: dict[str, ResolverEntity] = field(default_factory=dict)
    page_url: str | None = None
    entity_unique_id: str | None = None

    def first_entity(self) -> ResolverEntity | None:
        """First entity in payload order, None when there are none."""
        return next(iter(self.entities_by_unique_id.values()), None)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ResolvedLinks":
        """Build from a raw song.link JSON body.

        Unknown fields are ignored, links without a URL are dropped.
        """
        links: dict[str, ResolverLink] = {}
        for key, raw in (payload.get("linksByPlatform") or {}).items():
            if not isinstance(raw, dict) or not raw.get("url"):
                continue
            links[key] = ResolverLink(
                url=raw["url"], entity_unique_id=raw.get("entityUniqueId")
            )

        entities: dict[str, ResolverEntity] = {}
        for unique_id, raw in (payload.get("entitiesByUniqueId") or {}).items():
            if not isinstance(raw, dict):
                continue
            entities[unique_id] = ResolverEntity(
                unique_id=unique_id,
                title=raw.get("title"),
                artist_name=raw.get("artistName"),
                thumbnail_url=raw.get("thumbnailUrl"),
                api_provider=raw.get("apiProvider"),
            )

        return cls(
            links_by_platform=links,
            entities_by_unique_id=entities,
            page_url=payload.get("pageUrl"),
            entity_unique_id=payload.get("entityUniqueId"),
        )


@dataclass(frozen=True)
class ResolvedEntity:
    """Display metadata for the release (title, artist, artwork)."""

    title: str
    artist_name: str
    artwork_url: str | None = None

    def with_fallback_artwork(self, artwork_url: str | None) -> "ResolvedEntity":
        """Fill artwork_url only when it is missing. Other fields are kept."""
        if self.artwork_url or not artwork_url:
            return self
        return replace(self, artwork_url=artwork_url)

    def to_dict(self) -> dict[str, str | None]:
        """Convert to a JSON-friendly dict."""
        return {
            "title": self.title,
            "artist_name": self.artist_name,
            "artwork_url": self.artwork_url,
        }


@dataclass(frozen=True)
class ReleaseCandidate:
    """Album hit from the metadata search."""

    id: str
    name: str
    artist_names: tuple[str, ...]
    release_date: str | None = None
    album_type: str | None = None
    total_tracks: int | None = None
    image_url: str | None = None
    spotify_url: str | None = None

    def to_entity(self) -> ResolvedEntity:
        """Use this candidate as display metadata."""
        return ResolvedEntity(
            title=self.name or UNKNOWN,
            artist_name=", ".join(self.artist_names) or UNKNOWN,
            artwork_url=self.image_url,
        )


@dataclass(frozen=True)
class ArtistSuggestion:
    """Artist entry for search-box autocomplete."""

    id: str
    name: str
    image_url: str | None = None


@dataclass
class AggregationResult:
    """Everything the buy-links endpoints return."""

    artist: str | None
    album: str | None
    links: list[PlatformLink] = field(default_factory=list)
    metadata: ResolvedEntity | None = None


__all__ = [
    "UNKNOWN",
    "AggregationResult",
    "ArtistSuggestion",
    "PlatformLink",
    "ReleaseCandidate",
    "ResolvedEntity",
    "ResolvedLinks",
    "ResolverEntity",
    "ResolverLink",
]
