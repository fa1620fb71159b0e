"""
Infrastructure initialization and bootstrap.

Builds the relay's collaborators from Config, acquires the first speech
credential and registers the Telegram webhook. Startup stops here if any
of that fails.
"""

import asyncio
import logging
from typing import Optional, Type

from config import Config
from relay.handler import RelayHandler
from services.tts import (
    CredentialAcquisitionFailed,
    CredentialCell,
    SaluteAuthClient,
    SaluteSpeechBackend,
    SpeechServiceError,
    StubTTSBackend,
    TTSBackend,
)
from transport.telegram import TelegramTransport

logger = logging.getLogger(__name__)


def create_tts_backend(config: Type[Config] = Config) -> TTSBackend:
    """Create the configured TTS backend (salute or stub)."""
    if config.TTS_BACKEND == "stub":
        return StubTTSBackend()
    if config.TTS_BACKEND == "salute":
        return SaluteSpeechBackend(
            synthesis_url=config.SBER_SYNTHESIS_URL,
            timeout_s=config.SBER_TIMEOUT_S,
            verify_tls=config.SBER_VERIFY_TLS,
        )
    raise ValueError(f"Unknown TTS_BACKEND: {config.TTS_BACKEND}")


def create_auth_client(config: Type[Config] = Config) -> SaluteAuthClient:
    """Create the SaluteSpeech credential provider."""
    return SaluteAuthClient(
        oauth_url=config.SBER_OAUTH_URL,
        scope=config.SBER_SCOPE,
        rq_uid=config.SBER_RQUID or None,
        timeout_s=config.SBER_TIMEOUT_S,
        verify_tls=config.SBER_VERIFY_TLS,
    )


async def acquire_initial_credential(auth: SaluteAuthClient, auth_key: str) -> CredentialCell:
    """
    Acquire the first token. There is no service without one.

    Raises:
        CredentialAcquisitionFailed: wrapping the classified speech error
    """
    try:
        token = await auth.acquire(auth_key)
    except SpeechServiceError as e:
        logger.error(f"Failed to get initial speech token: {e}")
        raise CredentialAcquisitionFailed(e) from e
    logger.info("Initial speech token acquired")
    return CredentialCell(token)


class RelayBootstrap:
    """
    Owns every long-lived collaborator of the relay.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["RelayBootstrap"] = None

    def __init__(self, config: Type[Config] = Config):
        """Create backends; no network calls yet."""
        self.config = config
        self.tts_backend = create_tts_backend(config)
        self.auth_client = create_auth_client(config)
        self.transport = TelegramTransport(
            token=config.BOT_TOKEN, timeout_s=config.TELEGRAM_TIMEOUT_S
        )
        self.credentials: Optional[CredentialCell] = None
        self.handler: Optional[RelayHandler] = None

    @classmethod
    def get_instance(cls, config: Type[Config] = Config) -> "RelayBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton RelayBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    async def start(self) -> RelayHandler:
        """
        Acquire the first credential, register the webhook, build the handler.

        Raises:
            CredentialAcquisitionFailed: initial token unavailable
            WebhookRegistrationError: Telegram refused the webhook
        """
        if self.config.TTS_BACKEND == "stub":
            # Offline development: the stub ignores the token
            self.credentials = CredentialCell("stub")
        else:
            self.credentials = await acquire_initial_credential(
                self.auth_client, self.config.SBER_AUTH_KEY
            )

        if self.config.REGISTER_WEBHOOK:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None,
                self.transport.set_webhook,
                self.config.BOT_WEBHOOK_URL,
                self.config.BOT_CERT_PATH or None,
            )

        self.handler = RelayHandler(
            tts=self.tts_backend,
            auth=self.auth_client,
            auth_key=self.config.SBER_AUTH_KEY,
            credentials=self.credentials,
            notifier=self.transport,
            reply_mode=self.config.REPLY_MODE,
            refresh_on=self.config.SBER_REFRESH_ON,
        )
        return self.handler

    async def close(self):
        """Close every HTTP client."""
        await self.tts_backend.close()
        await self.auth_client.close()
        await self.transport.close()

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"RelayBootstrap(tts={self.config.TTS_BACKEND}, "
            f"reply_mode={self.config.REPLY_MODE}, "
            f"refresh_on={self.config.SBER_REFRESH_ON})"
        )
