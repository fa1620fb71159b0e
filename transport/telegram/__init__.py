"""
Telegram Transport Module

Pure I/O layer for Telegram messaging.
Exports: TelegramTransport, WebhookRegistrationError
"""

from transport.telegram.transport import (
    TelegramTransport,
    WebhookRegistrationError,
)

__all__ = [
    "TelegramTransport",
    "WebhookRegistrationError",
]
