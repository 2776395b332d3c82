"""Telegram notifier for signal and outcome alerts."""

import logging

import httpx

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a message could not be delivered."""


class TelegramNotifier:
    """Send HTML messages to a Telegram chat through the Bot API.

    notify() is best effort: missing credentials and delivery failures are
    logged and never raised. send_message() raises NotificationError and is
    meant for callers that report the failure (e.g. the manual send route).
    """

    API_URL = "https://api.telegram.org"

    def __init__(self, token: str = "", chat_id: str = "", timeout: float = 10.0):
        self.token = token
        self.chat_id = chat_id
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.chat_id)

    def configure(self, token: str | None = None, chat_id: str | None = None) -> None:
        """Update credentials; None leaves a value unchanged."""
        if token is not None:
            self.token = token
        if chat_id is not None:
            self.chat_id = chat_id

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.API_URL, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send_message(
        self,
        text: str,
        token: str | None = None,
        chat_id: str | None = None,
    ) -> dict:
        """
        Send a message, overriding stored credentials if given.

        Returns:
            Telegram API response payload

        Raises:
            NotificationError: If credentials are missing or delivery fails
        """
        token = token or self.token
        chat_id = chat_id or self.chat_id
        if not token or not chat_id:
            raise NotificationError("Telegram credentials not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                f"/bot{token}/sendMessage",
                json={"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NotificationError(f"Telegram request failed: {e}") from e

        if not response.is_success:
            raise NotificationError(
                f"Telegram API error ({data.get('error_code', response.status_code)}): "
                f"{data.get('description', 'unknown error')}"
            )
        return data

    async def notify(self, text: str) -> bool:
        """Deliver a message if credentials are configured.

        Returns:
            True if the message was delivered
        """
        if not self.is_configured:
            logger.info("Telegram credentials not set, skipping message")
            return False

        try:
            await self.send_message(text)
        except NotificationError as e:
            logger.warning(f"Telegram send failed: {e}")
            return False

        logger.debug("Telegram message sent")
        return True
