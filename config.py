"""
Configuration management for the voice relay bot.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class ConfigMissing(Exception):
    """Required environment variables are not set."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class Config:
    """Configuration class for the voice relay bot."""

    # Telegram Bot Configuration
    BOT_TOKEN = os.getenv("BOT_TOKEN", "")
    BOT_WEBHOOK_URL = os.getenv("BOT_WEBHOOK_URL", "")
    BOT_SERVER_PORT = os.getenv("BOT_SERVER_PORT", "")
    BOT_CERT_PATH = os.getenv("BOT_CERT_PATH", "")
    BOT_KEY_PATH = os.getenv("BOT_KEY_PATH", "")
    REGISTER_WEBHOOK = _flag("REGISTER_WEBHOOK", "true")
    TELEGRAM_TIMEOUT_S = float(os.getenv("TELEGRAM_TIMEOUT_S", "30"))

    # SaluteSpeech Configuration
    SBER_AUTH_KEY = os.getenv("SBER_AUTH_KEY", "")
    SBER_RQUID = os.getenv("SBER_RQUID", "")
    SBER_SCOPE = os.getenv("SBER_SCOPE", "SALUTE_SPEECH_PERS")
    SBER_OAUTH_URL = os.getenv(
        "SBER_OAUTH_URL", "https://ngw.devices.sberbank.ru:9443/api/v2/oauth"
    )
    SBER_SYNTHESIS_URL = os.getenv(
        "SBER_SYNTHESIS_URL", "https://smartspeech.sber.ru/rest/v1/text:synthesize"
    )
    SBER_TIMEOUT_S = float(os.getenv("SBER_TIMEOUT_S", "30"))
    SBER_VERIFY_TLS = _flag("SBER_VERIFY_TLS", "true")
    SBER_REFRESH_ON = os.getenv("SBER_REFRESH_ON", "any")  # any | auth

    # Relay behaviour
    REPLY_MODE = os.getenv("REPLY_MODE", "voice")  # voice | echo
    TTS_BACKEND = os.getenv("TTS_BACKEND", "salute")  # salute | stub

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    REQUIRED = [
        "BOT_TOKEN",
        "BOT_WEBHOOK_URL",
        "BOT_SERVER_PORT",
        "BOT_CERT_PATH",
        "SBER_AUTH_KEY",
        "SBER_RQUID",
    ]

    @classmethod
    def missing(cls) -> List[str]:
        """Return the names of required settings that are empty."""
        return [key for key in cls.REQUIRED if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        return not cls.missing()

    @classmethod
    def require(cls) -> None:
        """
        Raise ConfigMissing if any required setting is empty.

        Raises:
            ConfigMissing: listing every missing variable
        """
        missing = cls.missing()
        if missing:
            raise ConfigMissing(missing)


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Bot Token: {'✓ Set' if Config.BOT_TOKEN else '✗ Missing'}")
    print(f"  Webhook URL: {Config.BOT_WEBHOOK_URL}")
    print(f"  Server Port: {Config.BOT_SERVER_PORT}")
    print(f"  Reply Mode: {Config.REPLY_MODE}")
    print(f"  TTS Backend: {Config.TTS_BACKEND}")
    missing = Config.missing()
    print(f"\n  Validation: {'✓ PASSED' if not missing else '✗ FAILED: ' + ', '.join(missing)}")
