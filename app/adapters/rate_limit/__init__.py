"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
an in-process limiter and later migrate to a shared store without changing
the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import ClientRecord, InMemoryBlockingRateLimiter
from app.adapters.rate_limit.sweeper import RateLimitSweeper

__all__ = [
    "AbstractRateLimiter",
    "ClientRecord",
    "InMemoryBlockingRateLimiter",
    "RateLimitDecision",
    "RateLimitSweeper",
]
