"""FastAPI dependencies: services from app.state, request cancellation, region."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import suppress
from typing import Any

from fastapi import Header, Query, Request

from streamtoshelf.application.services.buy_links_service import BuyLinksService
from streamtoshelf.application.services.share_metadata import ShareMetadataService
from streamtoshelf.config import Settings, get_settings
from streamtoshelf.domain.exceptions import ConfigurationError
from streamtoshelf.domain.value_objects.region import Region, parse_region
from streamtoshelf.infrastructure.integrations.cancellation import CancellationToken
from streamtoshelf.infrastructure.integrations.image_fetcher import ImageFetcher
from streamtoshelf.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.25


def _from_state(request: Request, name: str) -> Any:
    # Missing state means the lifespan didn't run (or failed half way)
    if not hasattr(request.app.state, name):
        raise ConfigurationError(f"{name} is not initialized")
    return getattr(request.app.state, name)


def get_app_settings(request: Request) -> Settings:
    """Settings the app was started with, falling back to the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_buy_links_service(request: Request) -> BuyLinksService:
    """Get the buy-links service from app state."""
    service: BuyLinksService = _from_state(request, "buy_links_service")
    return service


def get_spotify_client(request: Request) -> SpotifyClient:
    """Get the shared Spotify client from app state."""
    client: SpotifyClient = _from_state(request, "spotify_client")
    return client


def get_share_metadata_service(request: Request) -> ShareMetadataService:
    """Get the share metadata service from app state."""
    service: ShareMetadataService = _from_state(request, "share_metadata_service")
    return service


def get_image_fetcher(request: Request) -> ImageFetcher:
    """Get the image fetcher from app state."""
    fetcher: ImageFetcher = _from_state(request, "image_fetcher")
    return fetcher


async def _watch_disconnect(request: Request, token: CancellationToken) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            logger.debug("Client disconnected from %s", request.url.path)
            token.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


# Hey future me, ONE token per request, shared by every provider call made for it. A small
# background task polls request.is_disconnected() and fires the token when the browser goes
# away (user navigated or changed the query). call_with_deadline() then aborts whatever is in
# flight. The watcher is always torn down when the request finishes.
async def get_cancellation_token(request: Request) -> AsyncGenerator[CancellationToken, None]:
    """Per-request cancellation token fired on client disconnect."""
    token = CancellationToken()
    watcher = asyncio.create_task(_watch_disconnect(request, token))
    try:
        yield token
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher


def get_region(
    region: str | None = Query(
        None, description="Country code (US, GB, CA, AU, DE, FR, JP), detected if omitted"
    ),
    accept_language: str | None = Header(None),
) -> Region:
    """Validated region, detected from Accept-Language when not given.

    Raises:
        ValidationError: Explicit region is not supported
    """
    return parse_region(region, accept_language)
