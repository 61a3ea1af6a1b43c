"""Pydantic schemas for the submission endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

NO_URL_SENTINEL = "-"


class SubmissionRequest(BaseModel):
    """Request submitted by a user of the site.

    Every field is optional at the schema level so missing values reach
    the dispatcher, which reports them with a single human-readable error.
    """

    email: str | None = Field(
        default=None,
        description="Contact email of the requester (required).",
    )
    url: str | None = Field(
        default=None,
        description="Target URL; '-' means the requester gave none.",
    )
    description: str | None = Field(
        default=None,
        description="Free-text description of the request (required).",
    )
    timestamp: str | None = Field(
        default=None,
        description="Client-side timestamp, forwarded verbatim.",
    )

    @property
    def has_url(self) -> bool:
        return bool(self.url and self.url.strip() and self.url.strip() != NO_URL_SENTINEL)


class SubmissionResponse(BaseModel):
    """Successful delivery acknowledgment."""

    success: bool = Field(True, description="Always true on HTTP 200.")
    message: str = Field(..., description="Human-readable confirmation.")
    remaining: int | None = Field(
        default=None,
        description="Requests left in the current rate limit window.",
    )


class ErrorResponse(BaseModel):
    """Error body for 400, 405 and 500 responses."""

    error: str
    details: str | None = None


class RateLimitedResponse(BaseModel):
    """Error body for 429 responses."""

    success: bool = False
    error: str
    retryAfter: int = Field(..., description="Seconds to wait before retrying.")
