"""Discogs database search client for physical release pages."""

import logging

import httpx

from streamtoshelf.config.settings import DiscogsSettings
from streamtoshelf.domain.ports import ICatalogSearch
from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

SERVICE_NAME = "discogs"


class DiscogsClient(ICatalogSearch):
    """Find the Discogs release page for an artist + album."""

    # Hey future me, Discogs REQUIRES a User-Agent or it answers 403, and database/search needs
    # a token. No token configured = feature silently off (returns None, logged once per call
    # at debug). We take the FIRST result, Discogs orders by relevance and per_page=5 is only
    # there to keep the payload small.
    def __init__(
        self,
        settings: DiscogsSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    async def find_release_url(
        self,
        artist: str,
        album: str,
        cancel_token: CancellationToken | None = None,
    ) -> str | None:
        """Return the release page URL of the best match, or None.

        Raises:
            UpstreamTimeoutError: Lookup exceeded its budget
            RequestCancelledError: Caller went away
        """
        if not self.settings.is_configured:
            logger.debug("Discogs token not configured, skipping catalog lookup")
            return None

        client = await self._get_client()
        params: dict[str, str | int] = {
            "q": f"{artist} {album}",
            "type": "release",
            "artist": artist,
            "per_page": self.settings.per_page,
        }
        headers = {
            "Authorization": f"Discogs token={self.settings.token}",
            "User-Agent": self.settings.user_agent,
        }

        try:
            response = await call_with_deadline(
                lambda: client.get(self.settings.search_url, params=params, headers=headers),
                timeout=self.settings.timeout,
                cancel_token=cancel_token,
                service=SERVICE_NAME,
            )
        except httpx.HTTPError as e:
            logger.error("Discogs search error: %s", e)
            return None

        if not response.is_success:
            logger.error("Discogs API error: %d", response.status_code)
            return None

        try:
            results = response.json().get("results") or []
        except (ValueError, AttributeError) as e:
            logger.error("Discogs returned an unexpected body: %s", e)
            return None

        if (
            not isinstance(results, list)
            or not results
            or not isinstance(results[0], dict)
            or not results[0].get("uri")
        ):
            logger.debug("Discogs found no release for '%s - %s'", artist, album)
            return None

        return f"{self.settings.site_url}{results[0]['uri']}"
