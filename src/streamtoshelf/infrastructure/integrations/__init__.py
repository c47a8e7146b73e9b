"""External service integrations."""

from streamtoshelf.infrastructure.integrations.cancellation import (
    CancellationToken,
    call_with_deadline,
)
from streamtoshelf.infrastructure.integrations.discogs_client import DiscogsClient
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool
from streamtoshelf.infrastructure.integrations.image_fetcher import FetchedImage, ImageFetcher
from streamtoshelf.infrastructure.integrations.songlink_client import SonglinkClient
from streamtoshelf.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = [
    "CancellationToken",
    "DiscogsClient",
    "FetchedImage",
    "HttpClientPool",
    "ImageFetcher",
    "SonglinkClient",
    "SpotifyClient",
    "call_with_deadline",
]
