"""Share / Open Graph metadata for album pages."""

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from streamtoshelf.domain.exceptions import DomainException, RequestCancelledError
from streamtoshelf.domain.ports import IMetadataProvider
from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)

logger = logging.getLogger(__name__)

ARTWORK_SIZE = 640
CARD_WIDTH = 1200
CARD_HEIGHT = 630


def _encode(value: str) -> str:
    return quote(value, safe="-_.!~*'()")


@dataclass(frozen=True)
class OpenGraphImage:
    url: str
    width: int
    height: int
    alt: str


@dataclass(frozen=True)
class OpenGraph:
    title: str
    description: str
    url: str
    site_name: str
    images: list[OpenGraphImage] = field(default_factory=list)
    type: str = "website"


@dataclass(frozen=True)
class TwitterCard:
    title: str
    description: str
    images: list[str] = field(default_factory=list)
    card: str = "summary_large_image"


@dataclass(frozen=True)
class ShareMetadata:
    """Page title, description and optional social cards."""

    title: str
    description: str
    url: str
    open_graph: OpenGraph | None = None
    twitter: TwitterCard | None = None


def build_share_metadata(
    artist: str | None,
    album: str | None,
    artwork_url: str | None,
    site_url: str,
    site_name: str,
) -> ShareMetadata:
    """Build share metadata for an album page.

    Without both artist and album only a generic title and description are
    returned, no social cards. The generated card image is always listed,
    real artwork (if known) goes first.
    """
    site_url = site_url.rstrip("/")
    if not (artist and album):
        return ShareMetadata(
            title=f"Album Details – {site_name}",
            description="Find where to buy this album from legitimate music stores.",
            url=f"{site_url}/album",
        )

    title = f"{album} by {artist} – {site_name}"
    description = f"Find where to buy {album} by {artist} from legitimate music stores."
    page_url = f"{site_url}/album?artist={_encode(artist)}&album={_encode(album)}"
    card_url = f"{site_url}/api/og?title={_encode(album)}&artist={_encode(artist)}"
    alt = f"{album} by {artist}"

    images = []
    if artwork_url:
        images.append(OpenGraphImage(artwork_url, ARTWORK_SIZE, ARTWORK_SIZE, alt))
    images.append(OpenGraphImage(card_url, CARD_WIDTH, CARD_HEIGHT, alt))

    return ShareMetadata(
        title=title,
        description=description,
        url=page_url,
        open_graph=OpenGraph(
            title=title,
            description=description,
            url=page_url,
            site_name=site_name,
            images=images,
        ),
        twitter=TwitterCard(
            title=title,
            description=description,
            images=[artwork_url or card_url],
        ),
    )


# Hey future me, artwork for share cards is pure garnish. If Spotify is slow, unconfigured or
# broken we just ship the generated card. 5s budget because crawlers (Slack, Twitter) give up
# quickly on their own.
class ShareMetadataService:
    """Share metadata with best-effort artwork lookup."""

    def __init__(
        self,
        metadata_provider: IMetadataProvider | None,
        site_url: str,
        site_name: str,
        artwork_timeout: float = 5.0,
    ) -> None:
        self.metadata_provider = metadata_provider
        self.site_url = site_url
        self.site_name = site_name
        self.artwork_timeout = artwork_timeout

    async def _find_artwork(
        self, artist: str, album: str, cancel_token: CancellationToken | None
    ) -> str | None:
        if self.metadata_provider is None:
            return None
        provider = self.metadata_provider
        try:
            candidates = await call_with_deadline(
                lambda: provider.search_albums(artist, album, cancel_token=cancel_token),
                timeout=self.artwork_timeout,
                cancel_token=cancel_token,
                service="share-artwork",
            )
        except RequestCancelledError:
            raise
        except DomainException as e:
            logger.info("No share artwork for '%s - %s': %s", artist, album, e.message)
            return None
        return candidates[0].image_url if candidates else None

    async def build(
        self,
        artist: str | None,
        album: str | None,
        cancel_token: CancellationToken | None = None,
    ) -> ShareMetadata:
        """Build share metadata, looking up artwork when artist and album are known."""
        artwork_url = None
        if artist and album:
            artwork_url = await self._find_artwork(artist, album, cancel_token)
        return build_share_metadata(artist, album, artwork_url, self.site_url, self.site_name)
