"""Spotify Web API client (client-credentials flow, search only)."""

import logging
from typing import Any

import httpx

from streamtoshelf.application.cache.token_cache import TokenCache
from streamtoshelf.config.settings import SpotifySettings
from streamtoshelf.domain.entities import ArtistSuggestion, ReleaseCandidate
from streamtoshelf.domain.exceptions import AuthenticationError, ExternalServiceError
from streamtoshelf.domain.ports import IMetadataProvider
from streamtoshelf.domain.value_objects.artist_matching import is_plausible_artist_match
from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

SERVICE_NAME = "spotify"
SEARCH_FAILED_MESSAGE = "Spotify search failed"


class SpotifyClient(IMetadataProvider):
    """HTTP client for Spotify album and artist search."""

    # Hey future me, we DON'T own an httpx client here. Production passes nothing and we borrow
    # the shared pool client on first use. Tests pass their own AsyncClient (pytest-httpx
    # intercepts it). The token cache is shared app state, NOT per client instance.
    def __init__(
        self,
        settings: SpotifySettings,
        token_cache: TokenCache,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            token_cache: Process-wide token slot
            client: Optional httpx client, the shared pool client is used otherwise
        """
        self.settings = settings
        self.token_cache = token_cache
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    # Yo future me, client-credentials is the "app only" flow: no user, no refresh token, no PKCE.
    # We POST our id:secret as Basic auth and get a bearer token valid for ~1h. Any failure here
    # (bad creds, Spotify down, garbage body) becomes the SAME AuthenticationError and the cache
    # is left untouched. Timeout and cancellation keep their own types though!
    async def get_access_token(
        self,
        cancel_token: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> str:
        """Return a valid bearer token, exchanging credentials if needed.

        Args:
            cancel_token: Request-scoped cancel signal
            timeout: Budget for the exchange (default: search timeout)

        Returns:
            Access token

        Raises:
            AuthenticationError: If credentials are missing or the exchange fails
            UpstreamTimeoutError: If the token endpoint did not answer in time
            RequestCancelledError: If the caller went away
        """
        cached = self.token_cache.get()
        if cached is not None:
            return cached

        if not self.settings.is_configured:
            logger.error("Spotify credentials are not configured")
            raise AuthenticationError()

        client = await self._get_client()
        budget = timeout or self.settings.search_timeout

        try:
            response = await call_with_deadline(
                lambda: client.post(
                    self.settings.token_url,
                    data={"grant_type": "client_credentials"},
                    auth=(self.settings.client_id, self.settings.client_secret),
                ),
                timeout=budget,
                cancel_token=cancel_token,
                service=SERVICE_NAME,
            )
        except httpx.HTTPError as e:
            logger.error("Spotify token request failed: %s", e)
            raise AuthenticationError() from e

        if not response.is_success:
            logger.error("Spotify token endpoint returned %d", response.status_code)
            raise AuthenticationError(http_status=response.status_code)

        try:
            data = response.json()
            token = data["access_token"]
            expires_in = float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Spotify token response is malformed: %s", e)
            raise AuthenticationError(http_status=response.status_code) from e

        self.token_cache.store(token, expires_in)
        logger.debug("Spotify access token refreshed (expires_in=%ds)", int(expires_in))
        return str(token)

    async def _search(
        self,
        params: dict[str, str | int],
        timeout: float,
        cancel_token: CancellationToken | None,
    ) -> dict[str, Any]:
        """Run one /search call and return the decoded body.

        Raises:
            ExternalServiceError: Non-2xx status, transport error or undecodable body
        """
        access_token = await self.get_access_token(cancel_token, timeout)
        client = await self._get_client()

        try:
            response = await call_with_deadline(
                lambda: client.get(
                    f"{self.settings.api_base_url}/search",
                    params=params,
                    headers={"Authorization": f"Bearer {access_token}"},
                ),
                timeout=timeout,
                cancel_token=cancel_token,
                service=SERVICE_NAME,
            )
        except httpx.HTTPError as e:
            logger.error("Spotify search request failed: %s", e)
            raise ExternalServiceError(SEARCH_FAILED_MESSAGE, service=SERVICE_NAME) from e

        if response.status_code == 401:
            # Token revoked or expired early, next request exchanges a new one.
            self.token_cache.clear()

        if not response.is_success:
            logger.warning(
                "Spotify search returned %d (type=%s)", response.status_code, params["type"]
            )
            raise ExternalServiceError(
                SEARCH_FAILED_MESSAGE,
                status_code=response.status_code,
                service=SERVICE_NAME,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Spotify search returned invalid JSON: %s", e)
            raise ExternalServiceError(
                SEARCH_FAILED_MESSAGE,
                status_code=response.status_code,
                service=SERVICE_NAME,
            ) from e
        return data if isinstance(data, dict) else {}

    # Hey future me - Spotify's field filters (artist:/album:) narrow the search but it's still
    # fuzzy, so every hit goes through is_plausible_artist_match(). Missing albums.items is a
    # normal empty result, NOT an error.
    async def search_albums(
        self,
        artist: str,
        album: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[ReleaseCandidate]:
        """Search albums by artist (and optionally album title).

        Args:
            artist: Sanitized artist text
            album: Sanitized album text
            cancel_token: Request-scoped cancel signal

        Returns:
            Candidates whose credited artists plausibly match the query artist

        Raises:
            AuthenticationError: Token exchange failed
            ExternalServiceError: Search returned non-2xx
            UpstreamTimeoutError: Search exceeded its budget
            RequestCancelledError: Caller went away
        """
        query = f"artist:{artist} album:{album}" if album else f"artist:{artist}"
        data = await self._search(
            {"q": query, "type": "album", "limit": self.settings.search_limit},
            timeout=self.settings.search_timeout,
            cancel_token=cancel_token,
        )

        items = _section_items(data, "albums")
        candidates = []
        for item in items:
            if not isinstance(item, dict):
                continue
            candidate = _to_release_candidate(item)
            if is_plausible_artist_match(artist, candidate.artist_names):
                candidates.append(candidate)

        logger.debug(
            "Spotify album search '%s': %d hits, %d plausible",
            query,
            len(items),
            len(candidates),
        )
        return candidates

    async def search_artists(
        self,
        query: str,
        limit: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[ArtistSuggestion]:
        """Search artists for autocomplete (short budget)."""
        data = await self._search(
            {
                "q": query,
                "type": "artist",
                "limit": limit or self.settings.autocomplete_limit,
            },
            timeout=self.settings.autocomplete_timeout,
            cancel_token=cancel_token,
        )

        items = _section_items(data, "artists")
        return [
            ArtistSuggestion(
                id=item.get("id", ""),
                name=item.get("name", ""),
                image_url=_smallest_image_url(item.get("images")),
            )
            for item in items
            if isinstance(item, dict)
        ]


# Hey future me, Spotify bodies are trusted only as far as their shape. A section or image
# that isn't the expected dict/list reads as "nothing there" instead of an AttributeError.
def _section_items(data: dict[str, Any], section: str) -> list[Any]:
    block = data.get(section)
    if not isinstance(block, dict):
        return []
    items = block.get("items")
    return items if isinstance(items, list) else []


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _image_url(images: Any, index: int) -> str | None:
    images = _as_list(images)
    if not images or not isinstance(images[index], dict):
        return None
    url = images[index].get("url")
    return url if isinstance(url, str) else None


def _to_release_candidate(item: dict[str, Any]) -> ReleaseCandidate:
    artists = _as_list(item.get("artists"))
    external_urls = item.get("external_urls")
    return ReleaseCandidate(
        id=item.get("id", ""),
        name=item.get("name", ""),
        artist_names=tuple(
            a.get("name") or "" for a in artists if isinstance(a, dict)
        ),
        release_date=item.get("release_date"),
        album_type=item.get("album_type"),
        total_tracks=item.get("total_tracks"),
        # Spotify lists images largest first
        image_url=_image_url(item.get("images"), 0),
        spotify_url=(
            external_urls.get("spotify") if isinstance(external_urls, dict) else None
        ),
    )


def _smallest_image_url(images: Any) -> str | None:
    # Largest first, so the last one is the smallest (fine for a 40px avatar).
    return _image_url(images, -1)
