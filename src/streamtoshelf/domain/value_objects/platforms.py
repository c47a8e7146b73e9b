"""Storefront platform catalog.

Hey future me - THIS table is the single source of truth for which platforms we show
and which category ("download" vs "physical") each one lands in. The aggregator never
guesses a category from a URL or a name. Adding a storefront = one entry here.

Two kinds of keys live in the catalog:
- resolver keys: names song.link uses in linksByPlatform (itunes, bandcamp, ...)
- synthesized keys: links we build ourselves from artist+album text (amazonDigital, ...)
They never collide, so the aggregator needs no dedup beyond the allow-list.

Streaming-only services (spotify, deezer, tidal, youtube, ...) are NOT in here. The
product is "buy, don't stream" so they get dropped on purpose.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class LinkCategory(str, Enum):
    """Purchase category shown to the user."""

    DOWNLOAD = "download"
    PHYSICAL = "physical"


class Platform(str, Enum):
    """Known storefront keys."""

    # Resolver-sourced (song.link keys)
    ITUNES = "itunes"
    AMAZON_STORE = "amazonStore"
    BANDCAMP = "bandcamp"
    GOOGLE_STORE = "googleStore"

    # Synthesized from artist + album text
    AMAZON_DIGITAL = "amazonDigital"
    AMAZON_PHYSICAL = "amazonPhysical"
    DISCOGS = "discogs"
    HDTRACKS = "hdtracks"


@dataclass(frozen=True)
class PlatformInfo:
    """Display name and category for a catalog entry."""

    display_name: str
    category: LinkCategory


PLATFORM_CATALOG: MappingProxyType[Platform, PlatformInfo] = MappingProxyType(
    {
        Platform.ITUNES: PlatformInfo("iTunes", LinkCategory.DOWNLOAD),
        Platform.AMAZON_STORE: PlatformInfo("Amazon Music", LinkCategory.DOWNLOAD),
        Platform.BANDCAMP: PlatformInfo("Bandcamp", LinkCategory.DOWNLOAD),
        Platform.GOOGLE_STORE: PlatformInfo("Google Play", LinkCategory.DOWNLOAD),
        Platform.AMAZON_DIGITAL: PlatformInfo("Amazon Music", LinkCategory.DOWNLOAD),
        Platform.AMAZON_PHYSICAL: PlatformInfo("Amazon", LinkCategory.PHYSICAL),
        Platform.DISCOGS: PlatformInfo("Discogs", LinkCategory.PHYSICAL),
        Platform.HDTRACKS: PlatformInfo("HDtracks", LinkCategory.DOWNLOAD),
    }
)

RESOLVER_ALLOW_LIST: frozenset[Platform] = frozenset(
    {
        Platform.ITUNES,
        Platform.AMAZON_STORE,
        Platform.BANDCAMP,
        Platform.GOOGLE_STORE,
    }
)

# Allow-listed, but song.link's affiliate redirect for Amazon 404s too often. The
# synthesized amazonDigital search link replaces it. Revisit if song.link fixes it.
UNRELIABLE_RESOLVER_PLATFORMS: frozenset[Platform] = frozenset({Platform.AMAZON_STORE})


def resolver_platform(key: str) -> Platform | None:
    """Map a song.link platform key to a catalog platform we display.

    Returns None for unknown keys, streaming services and the unreliable
    resolver platforms, i.e. everything the aggregator must drop.
    """
    try:
        platform = Platform(key)
    except ValueError:
        return None
    if platform not in RESOLVER_ALLOW_LIST or platform in UNRELIABLE_RESOLVER_PLATFORMS:
        return None
    return platform


def category_for(platform: Platform) -> LinkCategory:
    """Category of a platform according to the catalog."""
    return PLATFORM_CATALOG[platform].category


def display_name_for(platform: Platform) -> str:
    """Display name of a platform according to the catalog."""
    return PLATFORM_CATALOG[platform].display_name
