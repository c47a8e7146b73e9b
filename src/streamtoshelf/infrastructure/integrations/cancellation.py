"""Cooperative cancellation and per-call time budgets for outbound requests.

Hey future me - EVERY provider call goes through call_with_deadline(). It races three things:
the call itself, its time budget, and the request's CancellationToken (set when the browser
disconnects, see api/dependencies.py). Whichever loses gets its in-flight task cancelled, so a
dropped request never keeps an httpx connection busy.

Timeout and cancellation are DIFFERENT outcomes on purpose:
- budget expired           -> UpstreamTimeoutError (user sees 504 "please try again")
- caller went away         -> RequestCancelledError (nobody is listening, empty 499)
Never merge them, never return a partial result after cancellation.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from streamtoshelf.domain.exceptions import RequestCancelledError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Per-request cancel signal shared by all calls made for that request."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Check if cancel() has been called."""
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self, service: str | None = None) -> None:
        """Raise RequestCancelledError if the token has fired."""
        if self.cancelled:
            raise RequestCancelledError(service)


async def call_with_deadline(
    op: Callable[[], Awaitable[T]],
    *,
    timeout: float,
    cancel_token: CancellationToken | None = None,
    service: str,
) -> T:
    """Run an outbound call under a time budget and an optional cancel signal.

    Args:
        op: Zero-argument callable returning the awaitable to run
        timeout: Budget in seconds
        cancel_token: Request-scoped cancel signal
        service: Name used in errors and logs ("spotify", "songlink", ...)

    Returns:
        Whatever op returns

    Raises:
        UpstreamTimeoutError: Budget expired, or httpx gave up with a timeout
        RequestCancelledError: cancel_token fired before op completed
    """
    if cancel_token is not None:
        cancel_token.raise_if_cancelled(service)

    task: asyncio.Task[T] = asyncio.ensure_future(op())
    cancel_waiter: asyncio.Task[None] | None = None
    waiters: set[asyncio.Future] = {task}
    if cancel_token is not None:
        cancel_waiter = asyncio.ensure_future(cancel_token.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        # Our own task got cancelled (server shutdown), take the call down with us.
        task.cancel()
        raise
    finally:
        if cancel_waiter is not None:
            cancel_waiter.cancel()

    if task in done:
        try:
            return task.result()
        except httpx.TimeoutException as e:
            logger.warning("%s request timed out in transport: %s", service, e)
            raise UpstreamTimeoutError(service, timeout) from e

    task.cancel()
    # Let the cancelled call unwind so the connection goes back to the pool.
    await asyncio.gather(task, return_exceptions=True)

    if cancel_waiter is not None and cancel_waiter in done:
        logger.debug("%s request cancelled by caller", service)
        raise RequestCancelledError(service)

    logger.warning("%s request exceeded %.1fs budget", service, timeout)
    raise UpstreamTimeoutError(service, timeout)
