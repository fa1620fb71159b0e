"""
Outbound delivery capability.

The relay handler only knows this interface. Implementations report
success as a bool and never raise for delivery failures.
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Sends replies back to a chat."""

    @abstractmethod
    async def send_text(self, chat_id: int, text: str) -> bool:
        """Send a plain text message."""
        raise NotImplementedError

    @abstractmethod
    async def send_audio(self, chat_id: int, audio: bytes, filename: str = "voice.wav") -> bool:
        """Send raw audio bytes as a named voice attachment."""
        raise NotImplementedError
