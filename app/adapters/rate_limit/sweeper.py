"""Background eviction of stale rate limit records.

The sweeper is an asyncio task owned by the application lifespan, so its
start and stop follow the app rather than an ambient timer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from app.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)


class RateLimitSweeper:
    """Periodically calls ``sweep()`` on a rate limiter."""

    def __init__(self, limiter: AbstractRateLimiter, *, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._limiter = limiter
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._interval})

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("rate_limit.sweeper_stopped")

    def run_once(self) -> int:
        """Run a single sweep, logging instead of raising on failure.

        Returns:
            Number of records removed (0 if the sweep failed).
        """
        try:
            removed = self._limiter.sweep()
        except Exception:
            logger.exception("rate_limit.sweep_failed")
            return 0

        logger.debug(
            "rate_limit.swept",
            extra={"removed": removed, "tracked": len(self._limiter)},
        )
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.run_once()
