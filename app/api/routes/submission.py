from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.adapters.rate_limit.base import RateLimitDecision
from app.core.rate_limit import enforce_rate_limit
from app.schemas.submission import (
    ErrorResponse,
    RateLimitedResponse,
    SubmissionRequest,
    SubmissionResponse,
)
from app.services.notification_service import NotificationService

router = APIRouter(tags=["Submission"])


def get_notification_service(request: Request) -> NotificationService:
    """Return the dispatcher the app factory attached to ``app.state``."""
    return request.app.state.notification_service


@router.post(
    "/send-telegram",
    response_model=SubmissionResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Missing required fields"},
        405: {"model": ErrorResponse, "description": "Method not allowed"},
        429: {"model": RateLimitedResponse, "description": "Rate limited"},
        500: {"model": ErrorResponse, "description": "Configuration or delivery failure"},
    },
)
async def send_telegram(
    submission: SubmissionRequest,
    decision: Annotated[RateLimitDecision | None, Depends(enforce_rate_limit)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> SubmissionResponse:
    """Forward a user request to the Telegram chat.

    The rate limit dependency runs before the body is inspected, so a
    submission rejected for missing fields still counts against the
    caller's quota.

    Args:
        submission: Email, target URL, description and client timestamp.
        decision: Admission decision (None when rate limiting is disabled).
        service: Notification dispatcher.

    Returns:
        SubmissionResponse: Confirmation with the caller's remaining quota.
    """
    remaining = decision.remaining if decision is not None else None
    return await service.submit(submission, remaining=remaining)
