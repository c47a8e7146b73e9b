"""Share metadata endpoint (page title, Open Graph and Twitter card data)."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from streamtoshelf.api.dependencies import get_cancellation_token, get_share_metadata_service
from streamtoshelf.application.services.share_metadata import ShareMetadata, ShareMetadataService
from streamtoshelf.domain.value_objects.search_input import sanitize_text
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken

router = APIRouter(tags=["Share"])


class OpenGraphImageModel(BaseModel):
    url: str
    width: int
    height: int
    alt: str


class OpenGraphModel(BaseModel):
    title: str
    description: str
    url: str
    site_name: str
    images: list[OpenGraphImageModel] = Field(default_factory=list)
    type: str = "website"


class TwitterCardModel(BaseModel):
    card: str = "summary_large_image"
    title: str
    description: str
    images: list[str] = Field(default_factory=list)


class ShareMetadataResponse(BaseModel):
    """Metadata a page renderer puts into <head>."""

    title: str
    description: str
    url: str = Field(..., description="Canonical page URL")
    open_graph: OpenGraphModel | None = None
    twitter: TwitterCardModel | None = None

    @classmethod
    def from_entity(cls, meta: ShareMetadata) -> "ShareMetadataResponse":
        open_graph = None
        if meta.open_graph is not None:
            og = meta.open_graph
            open_graph = OpenGraphModel(
                title=og.title,
                description=og.description,
                url=og.url,
                site_name=og.site_name,
                images=[
                    OpenGraphImageModel(url=i.url, width=i.width, height=i.height, alt=i.alt)
                    for i in og.images
                ],
                type=og.type,
            )
        twitter = None
        if meta.twitter is not None:
            twitter = TwitterCardModel(
                card=meta.twitter.card,
                title=meta.twitter.title,
                description=meta.twitter.description,
                images=list(meta.twitter.images),
            )
        return cls(
            title=meta.title,
            description=meta.description,
            url=meta.url,
            open_graph=open_graph,
            twitter=twitter,
        )


@router.get("/share-metadata", response_model=ShareMetadataResponse)
async def get_share_metadata(
    artist: str | None = Query(None),
    album: str | None = Query(None),
    service: ShareMetadataService = Depends(get_share_metadata_service),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> ShareMetadataResponse:
    """Share metadata for an album page, with real artwork when it can be found quickly."""
    meta = await service.build(
        sanitize_text(artist), sanitize_text(album), cancel_token=cancel_token
    )
    return ShareMetadataResponse.from_entity(meta)
