"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the in-process store can be replaced without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

DenyReason = Literal["blocked", "limit exceeded"]


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of an admission check.

    Attributes:
        allowed: Whether the request may proceed to the dispatcher.
        limit: Max requests admitted per window.
        remaining: Requests left in the current window (0 when denied).
        retry_after_seconds: Whole seconds until the block ends, when denied.
        reason: Why the request was denied, None when allowed.
        blocked_until: UNIX epoch seconds when the block ends, when denied.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None = None
    reason: DenyReason | None = None
    blocked_until: float | None = None


class AbstractRateLimiter(ABC):
    """Interface for per-client admission control."""

    @abstractmethod
    def check(self, client_id: str) -> RateLimitDecision:
        """Record a request from ``client_id`` and decide whether to admit it.

        Args:
            client_id: Client identifier (usually an IP address).

        Returns:
            RateLimitDecision describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Evict stale client records.

        Returns:
            Number of records removed.
        """
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        """Number of client records currently tracked."""
        raise NotImplementedError
