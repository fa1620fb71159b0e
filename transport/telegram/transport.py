"""
Telegram Transport Layer for the voice relay

Pure I/O transport for Telegram messaging.
Handles:
- Text replies (sendMessage)
- Voice replies as multipart uploads (sendVoice)
- Webhook registration with a self-signed certificate (setWebhook)
"""

import logging
from pathlib import Path
from typing import Optional

import httpx
import requests

from config import Config
from transport.notifier import Notifier

logger = logging.getLogger(__name__)

# Telegram max message length
MAX_MESSAGE_CHARS = 4096


class WebhookRegistrationError(Exception):
    """Telegram refused or never received the webhook registration."""


class TelegramTransport(Notifier):
    """
    Telegram transport layer.

    Pure I/O: sends responses and registers the webhook.
    No relay logic, no state beyond the HTTP client.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize with token from .env unless one is given."""
        self.token = token or Config.BOT_TOKEN
        if not self.token:
            raise ValueError("BOT_TOKEN not set in .env")

        self.timeout_s = timeout_s or Config.TELEGRAM_TIMEOUT_S
        self.api_url = f"https://api.telegram.org/bot{self.token}"
        self.http_client = client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.timeout_s)
        return self.http_client

    async def send_text(self, chat_id: int, text: str) -> bool:
        """
        Send text message via Telegram API.

        Args:
            chat_id: Telegram chat ID
            text: Message text to send

        Returns:
            True if successful
        """
        if len(text) > MAX_MESSAGE_CHARS:
            text = text[:MAX_MESSAGE_CHARS - 6] + "…"

        try:
            client = await self._get_http_client()
            response = await client.post(
                f"{self.api_url}/sendMessage",
                json={"chat_id": chat_id, "text": text},
                timeout=self.timeout_s,
            )
            if response.status_code != 200:
                logger.error(f"Failed to send message to {chat_id}: {response.status_code} {response.text}")
                return False
            return True
        except httpx.HTTPError as e:
            logger.error(f"Error sending message to {chat_id}: {e}", exc_info=True)
            return False

    async def send_audio(self, chat_id: int, audio: bytes, filename: str = "voice.wav") -> bool:
        """
        Send a voice message via Telegram sendVoice API.

        Args:
            chat_id: Telegram chat ID
            audio: Raw audio bytes, sent unmodified
            filename: Attachment name

        Returns:
            True if successful
        """
        try:
            client = await self._get_http_client()
            response = await client.post(
                f"{self.api_url}/sendVoice",
                data={"chat_id": str(chat_id)},
                files={"voice": (filename, audio, "application/octet-stream")},
                timeout=self.timeout_s,
            )
            if response.status_code != 200:
                logger.error(f"Failed to send voice to {chat_id}: {response.status_code} {response.text}")
                return False
            return True
        except httpx.HTTPError as e:
            logger.error(f"Error sending voice to {chat_id}: {e}", exc_info=True)
            return False

    def set_webhook(self, webhook_url: str, cert_path: Optional[str] = None) -> dict:
        """
        Register the webhook, uploading the certificate if one is given.

        Runs once at startup before the server accepts traffic, so it is
        a plain blocking call.

        Raises:
            WebhookRegistrationError: certificate unreadable, request failed,
                or Telegram answered non-200 or non-JSON
        """
        data = {"url": webhook_url}
        try:
            if cert_path:
                path = Path(cert_path)
                with path.open("rb") as cert:
                    response = requests.post(
                        f"{self.api_url}/setWebhook",
                        data=data,
                        files={"certificate": (path.name, cert)},
                        timeout=self.timeout_s,
                    )
            else:
                response = requests.post(
                    f"{self.api_url}/setWebhook",
                    data=data,
                    timeout=self.timeout_s,
                )
        except OSError as e:
            # requests' RequestException derives from OSError as well
            raise WebhookRegistrationError(f"failed to register webhook: {e}") from e

        if response.status_code != 200:
            raise WebhookRegistrationError(
                f"failed to set webhook: {response.status_code} {response.text}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise WebhookRegistrationError(
                f"unreadable setWebhook response: {response.text[:200]}"
            ) from e

        logger.info("Webhook set successfully")
        return result

    async def close(self):
        """Close HTTP client."""
        if self.http_client:
            await self.http_client.aclose()