"""Odesli / song.link client for cross-platform link resolution."""

import logging

import httpx

from streamtoshelf.config.settings import SonglinkSettings
from streamtoshelf.domain.entities import ResolvedLinks
from streamtoshelf.domain.ports import ILinkResolver
from streamtoshelf.domain.value_objects.region import Region
from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

SERVICE_NAME = "songlink"


# Hey future me, song.link needs no API key (anonymous tier is rate limited to ~10 req/min per
# IP). A failed resolution is NOT fatal for the request: the aggregator still builds the
# synthesized search links from artist/album text. So everything except timeout and
# cancellation collapses into None here.
class SonglinkClient(ILinkResolver):
    """Resolve one platform's release URL into links on other platforms."""

    def __init__(
        self,
        settings: SonglinkSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    async def resolve(
        self,
        url: str,
        region: Region,
        cancel_token: CancellationToken | None = None,
    ) -> ResolvedLinks | None:
        """Resolve a release URL.

        Args:
            url: Release URL on any supported platform (validated by the caller)
            region: User country, affects which storefront links song.link returns
            cancel_token: Request-scoped cancel signal

        Returns:
            Parsed links and entities, None if song.link could not resolve the URL

        Raises:
            UpstreamTimeoutError: Resolution exceeded its budget
            RequestCancelledError: Caller went away
        """
        client = await self._get_client()

        try:
            response = await call_with_deadline(
                lambda: client.get(
                    self.settings.api_url,
                    params={"url": url, "userCountry": region.value},
                ),
                timeout=self.settings.timeout,
                cancel_token=cancel_token,
                service=SERVICE_NAME,
            )
        except httpx.HTTPError as e:
            logger.error("Songlink request failed for %s: %s", url, e)
            return None

        if not response.is_success:
            logger.error(
                "Songlink API error: %d %s", response.status_code, response.reason_phrase
            )
            return None

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Songlink returned invalid JSON for %s: %s", url, e)
            return None
        if not isinstance(payload, dict):
            logger.error("Songlink returned unexpected payload type %s", type(payload).__name__)
            return None

        resolved = ResolvedLinks.from_payload(payload)
        logger.debug(
            "Songlink resolved %s: %d platforms, %d entities",
            url,
            len(resolved.links_by_platform),
            len(resolved.entities_by_unique_id),
        )
        return resolved
