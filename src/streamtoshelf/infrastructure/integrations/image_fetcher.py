"""Artwork fetcher behind /api/image-proxy."""

import logging
from dataclasses import dataclass

import httpx

from streamtoshelf.config.settings import ImageProxySettings
from streamtoshelf.domain.exceptions import ImageProxyError, UpstreamTimeoutError
from streamtoshelf.domain.value_objects.image_ref import is_safe_proxy_target
from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

SERVICE_NAME = "image-proxy"
UNSAFE_URL_MESSAGE = "Invalid or unsafe image URL"
TOO_LARGE_MESSAGE = "Image file too large"


@dataclass(frozen=True)
class FetchedImage:
    """Image bytes plus the upstream content type."""

    content: bytes
    content_type: str


# Hey future me, this is an open fetcher on the public internet, so treat every URL as hostile:
# - target must pass is_safe_proxy_target() BEFORE we connect, and the final URL after
#   redirects is checked again
# - body is streamed and cut off at max_bytes, Content-Length alone is a hint, not a promise
# - anything that is not image/* is refused, we never proxy HTML
class ImageFetcher:
    """Fetch remote artwork with SSRF, type and size checks."""

    def __init__(
        self,
        settings: ImageProxySettings,
        referer: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.referer = referer
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    async def fetch(
        self, url: str | None, cancel_token: CancellationToken | None = None
    ) -> FetchedImage:
        """Fetch an image for proxying.

        Raises:
            ImageProxyError: With the HTTP status to answer with
            RequestCancelledError: Caller went away
        """
        if not url:
            raise ImageProxyError("Missing url parameter", 400)
        if not is_safe_proxy_target(url):
            logger.warning("Rejected image proxy request for %s", url)
            raise ImageProxyError(UNSAFE_URL_MESSAGE, 400)

        client = await self._get_client()
        try:
            return await call_with_deadline(
                lambda: self._download(client, url),
                timeout=self.settings.timeout,
                cancel_token=cancel_token,
                service=SERVICE_NAME,
            )
        except (httpx.HTTPError, UpstreamTimeoutError) as e:
            logger.warning("Failed to fetch image %s: %s", url, e)
            raise ImageProxyError("Failed to fetch image", 503) from e

    async def _download(self, client: httpx.AsyncClient, url: str) -> FetchedImage:
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "image/*",
            "Referer": self.referer,
        }
        async with client.stream("GET", url, headers=headers) as response:
            if not is_safe_proxy_target(str(response.url)):
                logger.warning("Image %s redirected to unsafe %s", url, response.url)
                raise ImageProxyError(UNSAFE_URL_MESSAGE, 400)

            if not response.is_success:
                raise ImageProxyError(
                    f"Image server returned {response.status_code}", response.status_code
                )

            content_type = response.headers.get("content-type", "")
            if not content_type.startswith("image/"):
                logger.warning(
                    "Rejected non-image content from %s: %s",
                    response.url.host,
                    content_type or "<none>",
                )
                raise ImageProxyError("URL does not return an image", 400)

            content_length = response.headers.get("content-length", "")
            if content_length.isdigit() and int(content_length) > self.settings.max_bytes:
                raise ImageProxyError(TOO_LARGE_MESSAGE, 413)

            chunks: list[bytes] = []
            size = 0
            async for chunk in response.aiter_bytes():
                size += len(chunk)
                if size > self.settings.max_bytes:
                    raise ImageProxyError(TOO_LARGE_MESSAGE, 413)
                chunks.append(chunk)

        return FetchedImage(content=b"".join(chunks), content_type=content_type)
