"""Unit tests for the notification dispatcher."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import TelegramSettings
from app.core.errors import (
    ConfigurationAppError,
    UpstreamDeliveryAppError,
    UpstreamProtocolAppError,
    ValidationAppError,
)
from app.schemas.messaging import ProviderResponse
from app.schemas.submission import SubmissionRequest
from app.services.notification_service import (
    GENERIC_DELIVERY_ERROR,
    SUCCESS_MESSAGE,
    NotificationService,
    translate_provider_error,
)


def make_service(response: ProviderResponse | Exception | None = None):
    client = MagicMock()
    if isinstance(response, Exception):
        client.send_message = AsyncMock(side_effect=response)
    else:
        client.send_message = AsyncMock(return_value=response or ProviderResponse(ok=True))
    factory = MagicMock(return_value=client)
    service = NotificationService(
        TelegramSettings(bot_token="t", chat_id="c"),
        client_factory=factory,
    )
    return service, client, factory


@pytest.fixture
def submission() -> SubmissionRequest:
    return SubmissionRequest(
        email="user@example.com",
        url="-",
        description="Please add CSV export",
        timestamp="now",
    )


class TestTranslateProviderError:
    @pytest.mark.parametrize(
        ("description", "expected"),
        [
            ("Bad Request: chat not found", "Invalid chat ID"),
            ("Forbidden: bot was blocked by the user", "bot was blocked"),
            ("Unauthorized", "Invalid bot token"),
        ],
    )
    def test_known_failures(self, description: str, expected: str) -> None:
        assert expected in translate_provider_error(description)

    def test_unknown_failure_passes_through(self) -> None:
        description = "Bad Request: message is too long"
        assert translate_provider_error(description) == description

    @pytest.mark.parametrize("description", [None, ""])
    def test_missing_description_is_generic(self, description) -> None:
        assert translate_provider_error(description) == GENERIC_DELIVERY_ERROR


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_returns_remaining(self, submission: SubmissionRequest) -> None:
        service, client, _ = make_service()

        result = await service.submit(submission, remaining=1)

        assert result.success is True
        assert result.message == SUCCESS_MESSAGE
        assert result.remaining == 1
        client.send_message.assert_awaited_once()
        sent_text = client.send_message.await_args.args[0]
        assert "user@example.com" in sent_text
        assert "<i>None</i>" in sent_text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "description"),
        [("", "test"), ("a@b.c", ""), (None, "x"), ("a@b.c", None)],
    )
    async def test_missing_fields_raise_before_any_call(self, email, description) -> None:
        service, client, factory = make_service()

        with pytest.raises(ValidationAppError) as exc_info:
            await service.submit(SubmissionRequest(email=email, description=description))

        assert "required" in exc_info.value.message
        factory.assert_not_called()
        client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_whitespace_fields_are_accepted(self) -> None:
        service, client, factory = make_service()

        result = await service.submit(SubmissionRequest(email=" ", description=" "))

        assert result.success is True
        factory.assert_called_once()
        client.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_credentials_raise_configuration_error(self, submission) -> None:
        service = NotificationService(TelegramSettings(bot_token=None, chat_id=None))

        with pytest.raises(ConfigurationAppError):
            await service.submit(submission)

    @pytest.mark.asyncio
    async def test_client_is_built_once(self, submission: SubmissionRequest) -> None:
        service, _, factory = make_service()

        await service.submit(submission)
        await service.submit(submission)

        factory.assert_called_once()

    @pytest.mark.asyncio
    async def test_provider_rejection_is_translated(self, submission) -> None:
        service, _, _ = make_service(
            ProviderResponse(ok=False, error_code=400, description="Bad Request: chat not found")
        )

        with pytest.raises(UpstreamDeliveryAppError) as exc_info:
            await service.submit(submission)

        assert "Invalid chat ID" in exc_info.value.message
        assert exc_info.value.details == "Bad Request: chat not found"

    @pytest.mark.asyncio
    async def test_protocol_errors_propagate(self, submission) -> None:
        service, _, _ = make_service(
            UpstreamProtocolAppError(code="upstream_protocol_error", message="bad")
        )

        with pytest.raises(UpstreamProtocolAppError):
            await service.submit(submission)

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, submission) -> None:
        service, client, _ = make_service(ProviderResponse(ok=False, description="Too Many Requests"))

        with pytest.raises(UpstreamDeliveryAppError):
            await service.submit(submission)

        assert client.send_message.await_count == 1
