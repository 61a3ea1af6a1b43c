"""Pydantic schemas for messaging provider responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProviderResponse(BaseModel):
    """Envelope returned by the Telegram Bot API.

    Only ``ok`` and ``description`` drive behavior; other fields
    (``result``, ``parameters``) are kept for logging.
    """

    model_config = ConfigDict(extra="allow")

    ok: bool = Field(..., description="True when the provider accepted the message.")
    description: str | None = Field(
        default=None,
        description="Provider explanation, present on failures.",
    )
    error_code: int | None = Field(
        default=None,
        description="Provider error code mirroring the HTTP status.",
    )
