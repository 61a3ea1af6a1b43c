"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    hash_identifier,
    truncate_for_log,
)


@pytest.fixture
def capture_logger():
    """Logger wired to a StringIO through the redaction filter and JSON formatter."""

    def _make(name: str) -> tuple[logging.Logger, StringIO]:
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.handlers.clear()
        logger.propagate = False

        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(SensitiveDataFilter())
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        return logger, stream

    return _make


def test_sensitive_filter_redacts_bot_token(capture_logger):
    logger, stream = capture_logger("test_token_redaction")

    logger.info(
        "telegram_event",
        extra={
            "bot_token": "123456:secret",
            "authorization": "Bearer abc",
            "chat_id_present": True,
        },
    )

    output = stream.getvalue()
    assert "123456:secret" not in output
    assert "Bearer abc" not in output
    assert "[REDACTED]" in output
    assert "chat_id_present" in output


def test_sensitive_filter_redacts_submitter_data(capture_logger):
    logger, stream = capture_logger("test_submitter_redaction")

    logger.info(
        "submission_event",
        extra={
            "email": "someone@example.com",
            "description": "secret project details",
            "has_url": True,
        },
    )

    output = stream.getvalue()
    assert "someone@example.com" not in output
    assert "secret project details" not in output
    assert "has_url" in output


def test_sensitive_filter_allows_safe_fields(capture_logger):
    logger, stream = capture_logger("test_safe_fields")

    logger.info(
        "rate_limit.allowed",
        extra={
            "request_id": "req-123",
            "key_hash": "abcdef0123456789",
            "remaining": 2,
        },
    )

    record = json.loads(stream.getvalue())
    assert record["message"] == "rate_limit.allowed"
    assert record["request_id"] == "req-123"
    assert record["remaining"] == 2
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts(capture_logger):
    logger, stream = capture_logger("test_nested")

    logger.info(
        "nested_event",
        extra={
            "payload": {
                "token": "secret-key",
                "chat": "visible-chat",
            },
        },
    )

    output = stream.getvalue()
    assert "secret-key" not in output
    assert "visible-chat" in output


def test_hash_identifier_is_stable_and_opaque():
    digest = hash_identifier("1.2.3.4")

    assert digest == hash_identifier("1.2.3.4")
    assert digest != hash_identifier("1.2.3.5")
    assert len(digest) == 16
    assert "1.2.3.4" not in digest


def test_truncate_for_log():
    assert truncate_for_log("short") == "short"

    truncated = truncate_for_log("x" * 600, limit=100)
    assert truncated.startswith("x" * 100)
    assert "truncated 500 chars" in truncated
