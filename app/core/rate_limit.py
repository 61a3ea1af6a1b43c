"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- No module-level limiter: the instance is built by the app factory and
  lives on ``app.state`` for the lifetime of the process.

Rate limiting strategy:
- Fixed window per client address with a temporary block once exceeded.
- Client address comes from X-Forwarded-For / X-Real-IP (when trusted),
  then the direct peer, then the "unknown" sentinel.
"""

from __future__ import annotations

import logging
import math

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.core.config import AppSettings
from app.core.errors import RateLimitAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter the app factory attached to ``app.state``."""

    return request.app.state.rate_limiter


def resolve_client_id(request: Request, *, trust_forwarded: bool = True) -> str:
    """Derive the client identifier used to key rate limit state.

    Args:
        request: FastAPI request.
        trust_forwarded: Whether proxy headers may be used.

    Returns:
        str: Client address, or "unknown" when none can be determined.
    """

    if trust_forwarded:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def _retry_message(retry_after: int) -> str:
    minutes = max(1, math.ceil(retry_after / 60))
    unit = "minute" if minutes == 1 else "minutes"
    return f"Too many requests. Please try again in {minutes} {unit}."


async def enforce_rate_limit(request: Request) -> RateLimitDecision | None:
    """FastAPI dependency enforcing the per-client limit.

    When enabled, counts the request against the client's window. Denied
    requests raise ``RateLimitAppError`` (rendered as HTTP 429); admitted
    requests return the decision so the route can report remaining quota.

    Args:
        request: FastAPI request.

    Returns:
        The admission decision, or None when rate limiting is disabled.

    Raises:
        RateLimitAppError: When the client is over its limit or blocked.
    """

    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.rate_limit_enabled:
        return None

    limiter = get_rate_limiter(request)
    client_id = resolve_client_id(request, trust_forwarded=app_settings.trust_forwarded_headers)
    key_hash = hash_identifier(client_id)

    decision = limiter.check(client_id)
    if decision.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": decision.limit,
                "remaining": decision.remaining,
                "window_s": app_settings.rate_limit_window_seconds,
            },
        )
        return decision

    retry_after = decision.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "reason": decision.reason,
            "limit": decision.limit,
            "retry_after_s": retry_after,
        },
    )

    raise RateLimitAppError(
        code="rate_limit_exceeded" if decision.reason == "limit exceeded" else "rate_limit_blocked",
        message=_retry_message(retry_after),
        retry_after=retry_after,
        limit=decision.limit,
        context={"hint": decision.reason or ""},
    )
