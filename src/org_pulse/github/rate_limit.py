"""Rate limit tracking from GitHub response headers."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

# Never block longer than this on a single rate limit window.
MAX_WAIT_SECONDS = 900


class RateLimitMonitor:
    """Pauses requests when the remaining quota drops to ``threshold``."""

    def __init__(self, threshold: int = 10) -> None:
        self.threshold = threshold
        self._remaining: int | None = None
        self._reset_at: float | None = None

    def update(self, response: httpx.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._remaining = int(remaining)
        if reset is not None:
            self._reset_at = float(reset)

    @property
    def is_exhausted(self) -> bool:
        return self._remaining is not None and self._remaining == 0

    @property
    def reset_timestamp(self) -> int | None:
        return int(self._reset_at) if self._reset_at is not None else None

    async def wait_if_needed(self) -> None:
        if self._remaining is None or self._reset_at is None:
            return
        if self._remaining > self.threshold:
            return
        wait = min(max(0.0, self._reset_at - time.time()) + 1, MAX_WAIT_SECONDS)
        logger.warning(
            "Rate limit low (%d remaining), waiting %.0fs for reset", self._remaining, wait
        )
        await asyncio.sleep(wait)
        # Quota is refreshed after the reset; the next response updates it.
        self._remaining = None
