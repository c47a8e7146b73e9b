"""Link aggregation and categorization.

Hey future me - this is the heart of the app. It merges two sources of purchase links:

1. resolver links: whatever song.link found for the release, filtered through the platform
   allow-list (streaming services dropped, amazonStore dropped as unreliable)
2. synthesized links: search URLs we build from artist + album text (Amazon digital and
   physical on the region's marketplace, HDtracks, plus the Discogs release page if the
   catalog lookup finds one)

Category and display name come ONLY from the platform catalog. Output order is fixed:
every "download" link before every "physical" link, alphabetical by display name inside
each group. Resolver keys and synthesized keys never overlap, so there is at most one link
per platform without any dedup pass.

Upstream trouble never fails aggregation. A Discogs timeout or error just means no Discogs
link. The ONE exception that escapes is RequestCancelledError: if the caller is gone we stop
and return nothing at all.
"""

import logging
from collections.abc import Iterable
from urllib.parse import quote

from streamtoshelf.domain.entities import PlatformLink, ResolvedLinks
from streamtoshelf.domain.exceptions import (
    DomainException,
    RequestCancelledError,
)
from streamtoshelf.domain.ports import ICatalogSearch
from streamtoshelf.domain.value_objects.platforms import (
    LinkCategory,
    Platform,
    category_for,
    display_name_for,
    resolver_platform,
)
from streamtoshelf.domain.value_objects.region import Region, marketplace_domain
from streamtoshelf.domain.value_objects.search_input import is_absolute_url
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken

logger = logging.getLogger(__name__)

_CATEGORY_ORDER = {LinkCategory.DOWNLOAD: 0, LinkCategory.PHYSICAL: 1}


def _keyword_query(artist: str, album: str) -> str:
    # Same encoding as JS encodeURIComponent: spaces become %20, nothing is left unescaped
    # except the unreserved set.
    return quote(f"{artist} {album}", safe="-_.!~*'()")


def _link(platform: Platform, url: str) -> PlatformLink:
    return PlatformLink(
        platform=platform,
        display_name=display_name_for(platform),
        url=url,
        category=category_for(platform),
    )


def sort_links(links: Iterable[PlatformLink]) -> list[PlatformLink]:
    """Download before physical, then by display name. Stable for equal names."""
    return sorted(links, key=lambda link: (_CATEGORY_ORDER[link.category], link.display_name))


def resolver_links(resolved: ResolvedLinks | None) -> list[PlatformLink]:
    """Resolver links that survive the allow-list and have a usable URL."""
    if resolved is None:
        return []

    links = []
    for key, raw in resolved.links_by_platform.items():
        platform = resolver_platform(key)
        if platform is None:
            continue
        if not is_absolute_url(raw.url):
            logger.debug("Dropping %s link with unusable URL %r", key, raw.url)
            continue
        links.append(_link(platform, raw.url))
    return links


def marketplace_search_links(artist: str, album: str, region: Region) -> list[PlatformLink]:
    """Search links that need no lookup: Amazon digital, Amazon physical, HDtracks."""
    query = _keyword_query(artist, album)
    domain = marketplace_domain(region)
    return [
        _link(
            Platform.AMAZON_DIGITAL,
            f"https://www.{domain}/s?k={query}&i=digital-music",
        ),
        _link(
            Platform.AMAZON_PHYSICAL,
            f"https://www.{domain}/s?k={query}&i=popular",
        ),
        _link(
            Platform.HDTRACKS,
            f"https://www.hdtracks.com/#/search?q={query}",
        ),
    ]


class LinkAggregator:
    """Build the sorted, categorized purchase link list for a release."""

    def __init__(self, catalog: ICatalogSearch | None = None) -> None:
        self.catalog = catalog

    async def _catalog_link(
        self,
        artist: str,
        album: str,
        cancel_token: CancellationToken | None,
    ) -> PlatformLink | None:
        if self.catalog is None:
            return None
        try:
            url = await self.catalog.find_release_url(artist, album, cancel_token)
        except RequestCancelledError:
            raise
        except DomainException as e:
            # Timeout or upstream failure: treat as "no match"
            logger.warning("Catalog lookup failed for '%s - %s': %s", artist, album, e.message)
            return None
        if not url or not is_absolute_url(url):
            return None
        return _link(Platform.DISCOGS, url)

    async def aggregate(
        self,
        resolved: ResolvedLinks | None,
        region: Region,
        artist: str | None = None,
        album: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[PlatformLink]:
        """Merge, filter, categorize and sort purchase links.

        Args:
            resolved: Resolver payload, None when resolution failed
            region: Marketplace region for synthesized Amazon links
            artist: Artist text supplied by the caller
            album: Album text supplied by the caller
            cancel_token: Request-scoped cancel signal

        Returns:
            Sorted links, possibly empty

        Raises:
            RequestCancelledError: Caller went away during the catalog lookup
        """
        links = resolver_links(resolved)

        # Synthesized links need keyword text. Without both parts we only return resolver links.
        if artist and album:
            links.extend(marketplace_search_links(artist, album, region))
            catalog_link = await self._catalog_link(artist, album, cancel_token)
            if catalog_link is not None:
                links.append(catalog_link)

        result = sort_links(links)
        logger.debug(
            "Aggregated %d links (region=%s, resolver=%s)",
            len(result),
            region.value,
            "yes" if resolved is not None else "no",
        )
        return result
