"""
Text-to-Speech (TTS) abstract interface.

Role: Text → audio rendering only.

Rules:
- Token is supplied by the caller; backends never refresh it
- Audio bytes are returned untouched
- All failures are explicit and typed (see errors.py)
"""

from abc import ABC, abstractmethod


class TTSBackend(ABC):
    """
    Abstract TTS boundary.
    The relay handler depends ONLY on this interface.
    """

    # File name used when the audio is delivered as an attachment
    audio_filename: str = "voice.wav"

    @abstractmethod
    async def synthesize(self, text: str, token: str) -> bytes:
        """
        Synthesize text to audio.

        Args:
            text: Text to speak
            token: Bearer credential currently in hand

        Returns:
            Raw audio bytes

        Raises:
            SpeechServiceError: TransportError, UpstreamRejected or DecodeError
        """
        raise NotImplementedError

    async def close(self):
        """Release network resources, if any."""
