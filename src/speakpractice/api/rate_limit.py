"""Per-client request counting for the HTTP layer."""

import asyncio
import time
from collections.abc import Callable

from fastapi import Request

from speakpractice.exceptions import RateLimitExceededError
from speakpractice.logger import get_logger

logger = get_logger(__name__)


class FixedWindowRateLimiter:
    """Fixed-window request counter keyed by client.

    Each client gets ``max_requests`` within a window of ``window_s``
    seconds that starts with its first request. State lives in process
    memory and is guarded by an asyncio lock.

    Attributes:
        max_requests: Requests allowed per client per window.
        window_s: Window length in seconds.
        message: Caller-facing message when the limit is hit.
    """

    def __init__(
        self,
        max_requests: int,
        window_s: float,
        message: str = "Too many requests, please try again later",
        clock: Callable[[], float] = time.monotonic,
        max_tracked_clients: int = 10_000,
    ):
        """Initialize the limiter.

        Args:
            max_requests: Requests allowed per client per window.
            window_s: Window length in seconds.
            message: Caller-facing message when the limit is hit.
            clock: Monotonic time source.
            max_tracked_clients: Client count above which expired windows
                are pruned.
        """
        self.max_requests = max_requests
        self.window_s = window_s
        self.message = message
        self._clock = clock
        self._max_tracked_clients = max_tracked_clients
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def acquire(self, client_id: str) -> None:
        """Count one request for a client.

        Args:
            client_id: Client key (usually the remote address).

        Raises:
            RateLimitExceededError: If the client used up its window.
        """
        async with self._lock:
            now = self._clock()
            start, count = self._windows.get(client_id, (now, 0))

            if now - start >= self.window_s:
                start, count = now, 0

            if count >= self.max_requests:
                retry_after = self.window_s - (now - start)
                logger.warning(
                    "Rate limit exceeded: client=%s, max_requests=%d, window_s=%.0f",
                    client_id,
                    self.max_requests,
                    self.window_s,
                )
                raise RateLimitExceededError(self.message, retry_after_s=retry_after)

            self._windows[client_id] = (start, count + 1)

            if len(self._windows) > self._max_tracked_clients:
                self._prune(now)

    def _prune(self, now: float) -> None:
        expired = [
            client
            for client, (start, _) in self._windows.items()
            if now - start >= self.window_s
        ]
        for client in expired:
            del self._windows[client]
        logger.debug("Rate limit windows pruned: removed=%d", len(expired))

    def reset(self) -> None:
        """Forget every client window."""
        self._windows.clear()


def client_key(request: Request) -> str:
    """Identify the client of a request by its remote address."""
    return request.client.host if request.client else "unknown"


async def enforce_upload_limit(request: Request) -> None:
    """Route dependency applying the stricter upload limiter.

    Raises:
        RateLimitExceededError: If the client sent too many uploads.
    """
    limiter: FixedWindowRateLimiter | None = getattr(
        request.app.state, "upload_limiter", None
    )
    if limiter is not None:
        await limiter.acquire(client_key(request))
