"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for server-side observability.

    Never rendered to callers; see ``AppError.details`` for the
    caller-visible diagnostic string.
    """

    code: str
    hint: str
    http_status: int
    error_type: str
    content_type: str
    provider_description: str
    missing: list[str]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional diagnostic string safe to return to the caller.
        context: Optional structured details for logs only.
    """

    code: str
    message: str
    details: str | None = None
    context: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when required input fields are missing or malformed."""


class ConfigurationAppError(AppError):
    """Raised when required server configuration (credentials) is missing."""


@dataclass
class RateLimitAppError(AppError):
    """Raised when a client is denied by the rate limiter."""

    retry_after: int = 0
    limit: int = 0


class UpstreamDeliveryAppError(AppError):
    """Raised when the messaging provider rejects or fails a delivery."""


class UpstreamProtocolAppError(AppError):
    """Raised when the messaging provider answers with unparseable data."""
