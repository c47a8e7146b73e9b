"""Caching layer - in-memory caches for reducing API calls."""

from streamtoshelf.application.cache.token_cache import CachedToken, TokenCache

__all__ = ["CachedToken", "TokenCache"]
