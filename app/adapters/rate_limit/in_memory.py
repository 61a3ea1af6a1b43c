"""In-memory fixed-window rate limiter with temporary blocking.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock serializes every read-modify-write on the records,
  so concurrent requests from the same client can't slip past the threshold.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)


@dataclass
class ClientRecord:
    """Admission state for a single client identifier."""

    count: int
    window_start: float
    blocked_until: float | None = None


class InMemoryBlockingRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per client in a window that starts
    at the client's first request.

    Once a client sends more than ``max_requests`` requests inside the
    window it is blocked for ``block_seconds``; every request during the
    block is denied without being counted.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        max_requests: int = 3,
        window_seconds: float = 3600,
        block_seconds: float = 3600,
        sweep_window_multiplier: int = 2,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            max_requests: Maximum number of admitted requests per window.
            window_seconds: Length of the counting window in seconds.
            block_seconds: Length of the block once the limit is exceeded.
            sweep_window_multiplier: Records whose window started more than
                this many windows ago are evicted by ``sweep()``.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any limit or duration is invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if block_seconds <= 0:
            raise ValueError("block_seconds must be > 0")
        if sweep_window_multiplier < 1:
            raise ValueError("sweep_window_multiplier must be >= 1")

        if block_seconds > window_seconds * sweep_window_multiplier:
            logger.warning(
                "rate_limit.block_exceeds_sweep_threshold",
                extra={
                    "block_s": block_seconds,
                    "window_s": window_seconds,
                    "sweep_threshold_s": window_seconds * sweep_window_multiplier,
                },
            )

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._block_seconds = block_seconds
        self._sweep_threshold = window_seconds * sweep_window_multiplier
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[str, ClientRecord] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def block_seconds(self) -> float:
        return self._block_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get_record(self, client_id: str) -> ClientRecord | None:
        """Return a copy of the record for ``client_id`` (for inspection)."""
        with self._lock:
            record = self._records.get(client_id)
            if record is None:
                return None
            return ClientRecord(record.count, record.window_start, record.blocked_until)

    def _start_window(self, client_id: str, now: float) -> RateLimitDecision:
        """Open a fresh window for ``client_id`` and admit the request."""
        self._records[client_id] = ClientRecord(count=1, window_start=now)
        return self._allowed(remaining=self._max_requests - 1)

    def _allowed(self, *, remaining: int) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            limit=self._max_requests,
            remaining=max(0, remaining),
        )

    def _denied(self, *, now: float, blocked_until: float, reason: str) -> RateLimitDecision:
        retry_after = max(0, int(math.ceil(blocked_until - now)))
        return RateLimitDecision(
            allowed=False,
            limit=self._max_requests,
            remaining=0,
            retry_after_seconds=retry_after,
            reason=reason,  # type: ignore[arg-type]
            blocked_until=blocked_until,
        )

    def check(self, client_id: str) -> RateLimitDecision:
        """Count a request from ``client_id`` and decide whether to admit it.

        Decision order:
        1. Unknown client: start a window, allow.
        2. Active block: deny with the time left on the block.
        3. Expired window (or block that has run out): start a new window, allow.
        4. Otherwise count the request; going over the limit starts a block.

        Args:
            client_id: Client identifier (e.g., IP address).

        Returns:
            RateLimitDecision with allowance decision and retry hint.

        Raises:
            ValueError: If client_id is empty.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")

        with self._lock:
            now = self._clock()
            record = self._records.get(client_id)

            if record is None:
                return self._start_window(client_id, now)

            if record.blocked_until is not None:
                if now < record.blocked_until:
                    return self._denied(
                        now=now,
                        blocked_until=record.blocked_until,
                        reason="blocked",
                    )
                return self._start_window(client_id, now)

            if now - record.window_start > self._window_seconds:
                return self._start_window(client_id, now)

            record.count += 1
            if record.count > self._max_requests:
                record.blocked_until = now + self._block_seconds
                return self._denied(
                    now=now,
                    blocked_until=record.blocked_until,
                    reason="limit exceeded",
                )

            return self._allowed(remaining=self._max_requests - record.count)

    def sweep(self) -> int:
        """Drop records whose window started more than the sweep threshold ago.

        A record that is still inside an active block is kept even when it is
        past the threshold, so a long block is never lifted by eviction.

        Returns:
            Number of records removed.
        """
        with self._lock:
            now = self._clock()
            stale = [
                client_id
                for client_id, record in self._records.items()
                if now - record.window_start > self._sweep_threshold
                and (record.blocked_until is None or record.blocked_until <= now)
            ]
            for client_id in stale:
                del self._records[client_id]
            return len(stale)

    def reset(self) -> None:
        """Forget every client record."""
        with self._lock:
            self._records.clear()
