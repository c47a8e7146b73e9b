"""Domain value objects."""

from streamtoshelf.domain.value_objects.artist_matching import is_plausible_artist_match
from streamtoshelf.domain.value_objects.platforms import (
    PLATFORM_CATALOG,
    RESOLVER_ALLOW_LIST,
    UNRELIABLE_RESOLVER_PLATFORMS,
    LinkCategory,
    Platform,
    PlatformInfo,
    category_for,
    display_name_for,
    resolver_platform,
)
from streamtoshelf.domain.value_objects.region import (
    DEFAULT_REGION,
    MARKETPLACE_DOMAINS,
    Region,
    marketplace_domain,
    parse_region,
    region_from_accept_language,
    region_from_language,
)

__all__ = [
    "DEFAULT_REGION",
    "MARKETPLACE_DOMAINS",
    "PLATFORM_CATALOG",
    "RESOLVER_ALLOW_LIST",
    "UNRELIABLE_RESOLVER_PLATFORMS",
    "LinkCategory",
    "Platform",
    "PlatformInfo",
    "Region",
    "category_for",
    "display_name_for",
    "is_plausible_artist_match",
    "marketplace_domain",
    "parse_region",
    "region_from_accept_language",
    "region_from_language",
    "resolver_platform",
]
