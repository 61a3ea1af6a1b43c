"""Telegram Bot API client adapter."""

import logging
from typing import Any, NoReturn

import httpx
from pydantic import ValidationError

from app.adapters.messaging.base import AbstractMessagingClient
from app.core.errors import UpstreamDeliveryAppError, UpstreamProtocolAppError
from app.core.logging import truncate_for_log
from app.schemas.messaging import ProviderResponse

logger = logging.getLogger(__name__)

PROTOCOL_ERROR_MESSAGE = "Telegram API error (non-JSON response)"
PROTOCOL_ERROR_HINT = "Please check your bot token and chat ID"


class TelegramClient(AbstractMessagingClient):
    """Client for the Telegram ``sendMessage`` method.

    Uses ``httpx.AsyncClient`` with a bounded timeout; a transport can be
    injected (e.g. ``httpx.MockTransport``) for tests.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_base_url: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
        disable_web_page_preview: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Telegram client.

        Args:
            bot_token: Bot token (secret, embedded in the request path).
            chat_id: Destination chat id.
            api_base_url: Telegram Bot API base URL.
            timeout_seconds: Timeout for the sendMessage call in seconds.
            disable_web_page_preview: Forwarded to Telegram as-is.
            transport: Optional httpx transport override.
        """
        self._url = f"{api_base_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self.chat_id = chat_id
        self._timeout = timeout_seconds
        self._disable_web_page_preview = disable_web_page_preview
        self._transport = transport

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": self._disable_web_page_preview,
        }

    async def send_message(self, text: str) -> ProviderResponse:
        """Send an HTML-formatted message and parse Telegram's JSON envelope.

        Args:
            text: Message text using Telegram's HTML subset.

        Returns:
            ProviderResponse: Parsed envelope; ``ok`` is False on provider errors.

        Raises:
            UpstreamDeliveryAppError: On timeouts and transport failures.
            UpstreamProtocolAppError: If the body isn't a JSON object.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(self._url, json=self.build_payload(text))
        except httpx.TimeoutException as exc:
            # str(exc) may contain the request URL, which embeds the token
            logger.error(
                "telegram.timeout",
                extra={"error_type": type(exc).__name__, "timeout_s": self._timeout},
            )
            raise UpstreamDeliveryAppError(
                code="upstream_timeout",
                message="Telegram API did not respond in time",
                details=f"Timed out after {self._timeout:g}s",
                context={"error_type": type(exc).__name__},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "telegram.transport_error",
                extra={"error_type": type(exc).__name__},
            )
            raise UpstreamDeliveryAppError(
                code="upstream_unreachable",
                message="Failed to reach Telegram API",
                details=type(exc).__name__,
                context={"error_type": type(exc).__name__},
            ) from exc

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> ProviderResponse:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            self._raise_protocol_error(response, reason="non_json_content_type")

        try:
            data = response.json()
        except ValueError:
            self._raise_protocol_error(response, reason="invalid_json")

        if not isinstance(data, dict):
            self._raise_protocol_error(response, reason="unexpected_json_shape")

        try:
            parsed = ProviderResponse.model_validate(data)
        except ValidationError:
            self._raise_protocol_error(response, reason="missing_ok_field")

        logger.debug(
            "telegram.response",
            extra={"http_status": response.status_code, "ok": parsed.ok},
        )
        return parsed

    def _raise_protocol_error(self, response: httpx.Response, *, reason: str) -> NoReturn:
        content_type = response.headers.get("content-type", "")
        logger.error(
            "telegram.protocol_error",
            extra={
                "reason": reason,
                "http_status": response.status_code,
                "content_type": content_type,
                "raw_response": truncate_for_log(response.text),
            },
        )
        raise UpstreamProtocolAppError(
            code="upstream_protocol_error",
            message=PROTOCOL_ERROR_MESSAGE,
            details=PROTOCOL_ERROR_HINT,
            context={
                "http_status": response.status_code,
                "content_type": content_type,
                "hint": reason,
            },
        )
