"""Buy-links endpoints: resolve a release into purchase links.

Two ways in:
- GET /api/songlink?url=...        user pasted a streaming link
- GET /api/buy-links?artist=&album= user typed the release

Both answer with the same AggregationResponse and are never cached by browsers or CDNs.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from streamtoshelf.api.dependencies import (
    get_buy_links_service,
    get_cancellation_token,
    get_region,
)
from streamtoshelf.api.headers import NO_STORE_HEADERS
from streamtoshelf.application.services.buy_links_service import BuyLinksService
from streamtoshelf.domain.entities import AggregationResult, PlatformLink, ResolvedEntity
from streamtoshelf.domain.value_objects.image_ref import optimal_image_url
from streamtoshelf.domain.value_objects.region import Region
from streamtoshelf.domain.value_objects.search_input import (
    require_text,
    sanitize_text,
    validate_release_url,
)
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Buy Links"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class PlatformLinkResult(BaseModel):
    """One purchase destination."""

    platform: str = Field(..., description="Platform key (itunes, amazonDigital, ...)")
    display_name: str = Field(..., description="Human readable store name")
    url: str = Field(..., description="Absolute store URL")
    category: str = Field(..., description="download or physical")

    @classmethod
    def from_entity(cls, link: PlatformLink) -> "PlatformLinkResult":
        return cls(**link.to_dict())


class ReleaseMetadata(BaseModel):
    """Display metadata for the release."""

    title: str
    artist_name: str
    artwork_url: str | None = Field(None, description="Artwork URL as reported upstream")
    artwork_display_url: str | None = Field(
        None, description="Artwork URL to load (direct CDN or image proxy)"
    )

    @classmethod
    def from_entity(cls, entity: ResolvedEntity) -> "ReleaseMetadata":
        return cls(
            **entity.to_dict(),
            artwork_display_url=optimal_image_url(entity.artwork_url),
        )


class AggregationResponse(BaseModel):
    """Sorted purchase links plus metadata."""

    artist: str | None = None
    album: str | None = None
    links: list[PlatformLinkResult] = Field(default_factory=list)
    metadata: ReleaseMetadata | None = None

    @classmethod
    def from_result(cls, result: AggregationResult) -> "AggregationResponse":
        return cls(
            artist=result.artist,
            album=result.album,
            links=[PlatformLinkResult.from_entity(link) for link in result.links],
            metadata=ReleaseMetadata.from_entity(result.metadata) if result.metadata else None,
        )


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.get("/songlink", response_model=AggregationResponse)
async def resolve_release_url(
    response: Response,
    url: str | None = Query(None, description="Release URL on any streaming platform"),
    artist: str | None = Query(None, description="Artist name, enables search links"),
    album: str | None = Query(None, description="Album title, enables search links"),
    region: Region = Depends(get_region),
    service: BuyLinksService = Depends(get_buy_links_service),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> AggregationResponse:
    """Resolve a streaming link into purchase links.

    Resolver links are filtered to purchase platforms. With artist and album
    supplied, marketplace search links are added as well (also when the
    resolver could not resolve the URL).
    """
    release_url = validate_release_url(url)
    result = await service.resolve_by_url(
        release_url,
        region,
        artist=sanitize_text(artist),
        album=sanitize_text(album),
        cancel_token=cancel_token,
    )
    response.headers.update(NO_STORE_HEADERS)
    return AggregationResponse.from_result(result)


@router.get("/buy-links", response_model=AggregationResponse)
async def find_buy_links(
    response: Response,
    artist: str | None = Query(None, description="Artist name"),
    album: str | None = Query(None, description="Album title"),
    region: Region = Depends(get_region),
    service: BuyLinksService = Depends(get_buy_links_service),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> AggregationResponse:
    """Find purchase links for an artist + album.

    Searches the metadata provider first. Token exchange failure aborts the
    request before any aggregation happens.
    """
    artist_text = require_text(artist, "Artist")
    album_text = require_text(album, "Album")
    result = await service.resolve_by_search(
        artist_text, album_text, region, cancel_token=cancel_token
    )
    response.headers.update(NO_STORE_HEADERS)
    return AggregationResponse.from_result(result)
