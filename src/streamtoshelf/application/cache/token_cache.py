"""Single-slot bearer token cache."""

import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_SAFETY_MARGIN_SECONDS = 60


@dataclass
class CachedToken:
    """Bearer token with absolute expiry (epoch seconds)."""

    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """Strictly before expiry. At expires_at the token is already stale."""
        return now < self.expires_at


# Hey future me, this is deliberately NOT a BaseCache. There is exactly one client-credentials
# token per process, so one slot, no keys, overwritten on every refresh. The safety margin is
# subtracted at store time so get() never hands out a token that dies mid-request.
# There is no lock either! Two requests that both see an expired token will both refresh and the
# last store() wins. Both tokens are valid, so that's only a wasted round trip.
class TokenCache:
    """Process-wide cache for the metadata provider's access token."""

    def __init__(
        self,
        safety_margin_seconds: float = DEFAULT_SAFETY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._safety_margin = safety_margin_seconds
        self._clock = clock
        self._slot: CachedToken | None = None

    def get(self) -> str | None:
        """Return the cached token if it is still valid."""
        slot = self._slot
        if slot is None or not slot.is_valid(self._clock()):
            return None
        return slot.token

    def store(self, token: str, expires_in: float) -> CachedToken:
        """Cache a fresh token.

        Args:
            token: Bearer token from the token endpoint
            expires_in: Lifetime in seconds as reported by the token endpoint

        Returns:
            The stored slot
        """
        self._slot = CachedToken(
            token=token,
            expires_at=self._clock() + expires_in - self._safety_margin,
        )
        return self._slot

    def peek(self) -> CachedToken | None:
        """Current slot regardless of validity."""
        return self._slot

    def clear(self) -> None:
        """Drop the cached token."""
        self._slot = None
