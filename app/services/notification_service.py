"""Notification dispatcher turning validated submissions into Telegram messages.

This service is the business logic behind the submission endpoint. It handles:
- Required-field validation
- Lazy construction of the messaging client (credentials checked on first use)
- Message formatting with markup escaping
- Translation of provider failures into caller-facing errors
"""

import logging
from typing import Callable

import httpx

from app.adapters.messaging.base import AbstractMessagingClient
from app.adapters.messaging.factory import create_messaging_client
from app.core.config import TelegramSettings
from app.core.errors import UpstreamDeliveryAppError, ValidationAppError
from app.schemas.submission import SubmissionRequest, SubmissionResponse
from app.services.message_formatter import build_notification_message

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Request sent to Telegram successfully"
GENERIC_DELIVERY_ERROR = "Failed to send to Telegram"

# Substring of the provider description -> message shown to the caller
KNOWN_PROVIDER_ERRORS: tuple[tuple[str, str], ...] = (
    (
        "chat not found",
        "Invalid chat ID. Make sure you have sent /start to the bot "
        "or invited the bot to the group.",
    ),
    (
        "bot was blocked",
        "The bot was blocked. Please unblock the bot in Telegram.",
    ),
    (
        "Unauthorized",
        "Invalid bot token. Check TELEGRAM_BOT_TOKEN.",
    ),
)


def translate_provider_error(description: str | None) -> str:
    """Map a provider failure description to a user-facing message.

    Args:
        description: ``description`` field of the provider response, if any.

    Returns:
        A specific message for known failures, the description itself for
        unknown ones, or a generic message when there is no description.
    """
    if not description:
        return GENERIC_DELIVERY_ERROR

    for needle, message in KNOWN_PROVIDER_ERRORS:
        if needle in description:
            return message
    return description


class NotificationService:
    """Service delivering submissions to the configured Telegram chat.

    Attributes:
        telegram: Telegram settings used to build the client on first use.
    """

    def __init__(
        self,
        telegram: TelegramSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client_factory: Callable[..., AbstractMessagingClient] = create_messaging_client,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            telegram: Telegram settings (credentials may still be missing).
            transport: Optional httpx transport passed to the client factory.
            client_factory: Builds the messaging client from settings.
        """
        self.telegram = telegram
        self._transport = transport
        self._client_factory = client_factory
        self._client: AbstractMessagingClient | None = None

    def _validate(self, submission: SubmissionRequest) -> None:
        """Ensure the required fields are present and non-empty.

        Raises:
            ValidationAppError: If email or description is missing.
        """
        missing = [
            field
            for field in ("email", "description")
            if not getattr(submission, field)
        ]
        if missing:
            raise ValidationAppError(
                code="missing_required_fields",
                message="Email and description are required",
                context={"missing": missing},
            )

    def _get_client(self) -> AbstractMessagingClient:
        """Return the messaging client, building it on first use.

        Raises:
            ConfigurationAppError: If credentials are not configured.
        """
        if self._client is None:
            self._client = self._client_factory(self.telegram, transport=self._transport)
        return self._client

    async def submit(
        self,
        submission: SubmissionRequest,
        *,
        remaining: int | None = None,
    ) -> SubmissionResponse:
        """Validate, format and deliver a submission.

        Args:
            submission: Parsed request body.
            remaining: Quota left for the caller, echoed on success.

        Returns:
            SubmissionResponse acknowledging delivery.

        Raises:
            ValidationAppError: If required fields are missing.
            ConfigurationAppError: If credentials are not configured.
            UpstreamDeliveryAppError: If Telegram rejects or can't take the message.
            UpstreamProtocolAppError: If Telegram's answer can't be parsed.
        """
        # Step 1: Required fields, before anything else is touched
        self._validate(submission)

        # Step 2: Credentials (checked lazily, on the first submission)
        client = self._get_client()

        # Step 3: Escape and format
        text = build_notification_message(submission)

        # Step 4: Single delivery attempt
        result = await client.send_message(text)

        # Step 5: Translate the provider verdict
        if not result.ok:
            logger.error(
                "submission.delivery_rejected",
                extra={
                    "provider_error_code": result.error_code,
                    "provider_description": result.description,
                },
            )
            raise UpstreamDeliveryAppError(
                code="upstream_rejected",
                message=translate_provider_error(result.description),
                details=result.description,
                context={"provider_description": result.description or ""},
            )

        logger.info(
            "submission.sent",
            extra={"has_url": submission.has_url, "remaining": remaining},
        )
        return SubmissionResponse(success=True, message=SUCCESS_MESSAGE, remaining=remaining)
