from abc import ABC, abstractmethod

from app.schemas.messaging import ProviderResponse


class AbstractMessagingClient(ABC):
	"""Interface for clients that deliver a formatted notification."""

	@abstractmethod
	async def send_message(self, text: str) -> ProviderResponse:
		"""Deliver ``text`` to the configured destination.

		Args:
			text: Message body, already formatted and escaped for the provider.

		Returns:
			ProviderResponse: Parsed provider envelope (``ok`` may be False).

		Raises:
			UpstreamDeliveryAppError: If the provider can't be reached.
			UpstreamProtocolAppError: If the provider answer can't be parsed.
		"""
		...
