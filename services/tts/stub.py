"""
Stub TTS backend for testing and offline development.

Deterministic, fast, and never fails silently.
"""

from .base import TTSBackend
from .errors import UpstreamRejected


class StubTTSBackend(TTSBackend):
    """
    Deterministic fake TTS for testing and CI.

    Converts text to deterministic WAV-looking bytes and ignores the token.
    """

    async def synthesize(self, text: str, token: str) -> bytes:
        """
        Synthesize text to audio (stubbed).

        Raises:
            UpstreamRejected: 400 for empty text, like the real endpoint
        """
        if not text:
            raise UpstreamRejected("synthesize", 400, "empty text")

        # Stub audio: RIFF header followed by 10 bytes per character
        audio_len = len(text) * 10
        return b"RIFF" + bytes([i % 256 for i in range(audio_len)])
