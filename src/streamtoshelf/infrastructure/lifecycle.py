"""Application lifecycle: wiring at startup, cleanup at shutdown."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI

from streamtoshelf.application.cache.token_cache import TokenCache
from streamtoshelf.application.services.buy_links_service import BuyLinksService
from streamtoshelf.application.services.link_aggregator import LinkAggregator
from streamtoshelf.application.services.share_metadata import ShareMetadataService
from streamtoshelf.config import Settings, get_settings
from streamtoshelf.infrastructure.integrations.discogs_client import DiscogsClient
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool
from streamtoshelf.infrastructure.integrations.image_fetcher import ImageFetcher
from streamtoshelf.infrastructure.integrations.songlink_client import SonglinkClient
from streamtoshelf.infrastructure.integrations.spotify_client import SpotifyClient
from streamtoshelf.infrastructure.observability import configure_logging

logger = logging.getLogger(__name__)


def wire_services(app: FastAPI, settings: Settings) -> None:
    """Build clients and services and put them on app.state.

    The clients borrow the shared HTTP pool client lazily, so nothing here
    does I/O.
    """
    token_cache = TokenCache(safety_margin_seconds=settings.spotify.token_safety_margin)
    spotify = SpotifyClient(settings.spotify, token_cache)
    songlink = SonglinkClient(settings.songlink)
    discogs = DiscogsClient(settings.discogs)

    app.state.token_cache = token_cache
    app.state.spotify_client = spotify
    app.state.songlink_client = songlink
    app.state.discogs_client = discogs
    app.state.buy_links_service = BuyLinksService(
        resolver=songlink,
        aggregator=LinkAggregator(catalog=discogs),
        metadata_provider=spotify,
    )
    app.state.share_metadata_service = ShareMetadataService(
        metadata_provider=spotify,
        site_url=settings.site_url,
        site_name=settings.app_name,
        artwork_timeout=settings.spotify.autocomplete_timeout,
    )
    app.state.image_fetcher = ImageFetcher(settings.image_proxy, referer=settings.site_url)


# Listen future me, everything before `yield` runs at startup, after it at shutdown. This app
# has no database and no workers, so startup is just logging + wiring. The HTTP pool is opened
# here so the first user request doesn't pay for it.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.log_json,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s (%s)", settings.app_name, settings.app_env)

    if not settings.spotify.is_configured:
        logger.warning("Spotify credentials missing, search endpoints will answer 500")
    if not settings.discogs.is_configured:
        logger.info("Discogs token missing, catalog links disabled")

    await HttpClientPool.get_client()
    wire_services(app, settings)
    app.state.startup_time = datetime.now(UTC)

    try:
        yield
    finally:
        logger.info("Shutting down application")
        try:
            await HttpClientPool.close()
        except Exception as e:
            logger.exception("Error closing HTTP client pool: %s", e)
