"""Shared HTTP client pool for all outbound provider calls.

Hey future me - Spotify, song.link, Discogs and the image proxy all talk through ONE
httpx.AsyncClient. The lifespan (infrastructure/lifecycle.py) opens it on startup and
closes it on shutdown. Per-call time budgets are NOT configured here, they come from
call_with_deadline() in cancellation.py. The client timeout below is only a backstop so
a socket can never hang forever if someone forgets the guard.

Usage:
    client = await HttpClientPool.get_client()
    response = await client.get("https://api.song.link/v1-alpha.1/links", params=...)
"""

import asyncio
import logging
from typing import Any, ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Process-wide shared httpx.AsyncClient.

    Lazily created on first use, closed once at shutdown. Configuration passed to
    get_client() only applies to the call that creates the client.
    """

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    # Backstop only, the real budgets are 5s/10s per call.
    DEFAULT_TIMEOUT: ClassVar[float] = 30.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 20
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 50

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        # asyncio.Lock must be created inside a running loop, not at import time.
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(
        cls,
        timeout: float | None = None,
        max_keepalive: int | None = None,
        max_connections: int | None = None,
    ) -> httpx.AsyncClient:
        """Get (and on first call create) the shared client.

        Args:
            timeout: Backstop timeout in seconds (default: 30.0)
            max_keepalive: Max idle connections kept open (default: 20)
            max_connections: Max concurrent connections (default: 50)

        Returns:
            Shared httpx.AsyncClient instance
        """
        async with cls._ensure_lock():
            if cls._client is None:
                effective_timeout = timeout or cls.DEFAULT_TIMEOUT
                effective_keepalive = max_keepalive or cls.DEFAULT_MAX_KEEPALIVE
                effective_max_conn = max_connections or cls.DEFAULT_MAX_CONNECTIONS

                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(effective_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=effective_keepalive,
                        max_connections=effective_max_conn,
                    ),
                    http2=True,
                    # Image CDNs and Discogs redirect a lot
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    effective_timeout,
                    effective_keepalive,
                    effective_max_conn,
                )

            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client. A later get_client() creates a new one."""
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if the shared client exists (used by the health endpoint)."""
        return cls._client is not None

    @classmethod
    def get_pool_stats(cls) -> dict[str, Any]:
        """Static pool information for the health endpoint."""
        if cls._client is None:
            return {"initialized": False}
        return {
            "initialized": True,
            "max_connections": cls.DEFAULT_MAX_CONNECTIONS,
            "max_keepalive": cls.DEFAULT_MAX_KEEPALIVE,
        }
