"""Factory for creating messaging client instances."""

import logging

import httpx

from app.adapters.messaging.base import AbstractMessagingClient
from app.adapters.messaging.telegram_client import TelegramClient
from app.core.config import TelegramSettings
from app.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_messaging_client(
    telegram: TelegramSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AbstractMessagingClient:
    """Build the Telegram client from settings.

    Args:
        telegram: Telegram settings (token, chat id, timeouts).
        transport: Optional httpx transport override, used by tests.

    Returns:
        AbstractMessagingClient: Configured Telegram client.

    Raises:
        ConfigurationAppError: If the bot token or chat id is not configured.
    """
    missing = [
        name
        for name, value in (
            ("TELEGRAM_BOT_TOKEN", telegram.bot_token),
            ("TELEGRAM_CHAT_ID", telegram.chat_id),
        )
        if not value
    ]
    if missing:
        # Log which settings are absent, never their values
        logger.error(
            "messaging.missing_credentials",
            extra={
                "bot_token_present": bool(telegram.bot_token),
                "chat_id_present": bool(telegram.chat_id),
            },
        )
        raise ConfigurationAppError(
            code="messaging_not_configured",
            message="Server configuration error. Please check environment variables.",
            context={"missing": missing},
        )

    return TelegramClient(
        bot_token=telegram.bot_token,
        chat_id=telegram.chat_id,
        api_base_url=telegram.api_base_url,
        timeout_seconds=telegram.timeout_seconds,
        disable_web_page_preview=telegram.disable_web_page_preview,
        transport=transport,
    )
