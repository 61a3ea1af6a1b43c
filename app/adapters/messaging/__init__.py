"""Messaging adapter layer - delivers notifications to the chat provider."""

from app.adapters.messaging.base import AbstractMessagingClient
from app.adapters.messaging.factory import create_messaging_client
from app.adapters.messaging.telegram_client import TelegramClient

__all__ = [
    "AbstractMessagingClient",
    "TelegramClient",
    "create_messaging_client",
]
