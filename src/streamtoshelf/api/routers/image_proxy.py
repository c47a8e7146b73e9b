"""Image proxy endpoint for artwork from hosts we don't link directly."""

from fastapi import APIRouter, Depends, Query, Response

from streamtoshelf.api.dependencies import (
    get_app_settings,
    get_cancellation_token,
    get_image_fetcher,
)
from streamtoshelf.api.headers import NOSNIFF_HEADER
from streamtoshelf.config import Settings
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken
from streamtoshelf.infrastructure.integrations.image_fetcher import ImageFetcher

router = APIRouter(tags=["Images"])


@router.get(
    "/image-proxy",
    response_class=Response,
    responses={200: {"content": {"image/*": {}}}},
)
async def proxy_image(
    url: str | None = Query(None, description="Absolute http(s) image URL"),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
    settings: Settings = Depends(get_app_settings),
    cancel_token: CancellationToken = Depends(get_cancellation_token),
) -> Response:
    """Fetch a remote image and serve it with long-lived cache headers.

    Private and loopback hosts are refused, only image/* content up to the
    configured size is passed through.
    """
    image = await fetcher.fetch(url, cancel_token=cancel_token)
    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={
            "Cache-Control": settings.image_proxy.cache_control,
            **NOSNIFF_HEADER,
        },
    )
