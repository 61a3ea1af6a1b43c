"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It seeds the environment before any import that might load settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-bot-token")
os.environ.setdefault("TELEGRAM_CHAT_ID", "-100987654321")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")

import json
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import AppSettings, LogSettings, Settings, TelegramSettings


class TelegramStub:
    """Records outbound sendMessage calls and answers with a canned response.

    A new ``httpx.Response`` is built per call so the stub can serve any
    number of requests.
    """

    def __init__(
        self,
        body: Any = None,
        *,
        status_code: int = 200,
        text: str | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self.body = {"ok": True, "result": {"message_id": 1}} if body is None else body
        self.status_code = status_code
        self.text = text

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(req.content) for req in self.requests]


def build_settings(
    *,
    bot_token: str | None = "123456:test-bot-token",
    chat_id: str | None = "-100987654321",
    **app_overrides: Any,
) -> Settings:
    return Settings(
        app_env="testing",
        telegram=TelegramSettings(bot_token=bot_token, chat_id=chat_id),
        app=AppSettings(**app_overrides),
        log=LogSettings(),
    )


@pytest.fixture
def telegram_stub() -> TelegramStub:
    return TelegramStub()


@pytest.fixture
def make_client(telegram_stub: TelegramStub) -> Callable[..., TestClient]:
    """Build a TestClient around a fresh app (fresh limiter state)."""

    def _make(settings: Settings | None = None, stub: TelegramStub | None = None) -> TestClient:
        app = create_app(
            settings or build_settings(),
            messaging_transport=(stub or telegram_stub).transport,
            configure_logs=False,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def valid_submission() -> dict[str, str]:
    return {
        "email": "user@example.com",
        "url": "https://example.com/products",
        "description": "Scrape product prices daily",
        "timestamp": "19/10/2026 10:00:00",
    }
