"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import List, Tuple, Union

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from services.tts import TTSBackend, CredentialCell  # noqa: E402
from transport.notifier import Notifier  # noqa: E402

WAV_BYTES = b"RIFF\x24\x08\x00\x00WAVEfmt "


class ScriptedTTS(TTSBackend):
    """TTS fake that plays back a script of results (bytes or exceptions)."""

    def __init__(self, script: List[Union[bytes, Exception]]):
        self.script = list(script)
        self.calls: List[Tuple[str, str]] = []

    async def synthesize(self, text: str, token: str) -> bytes:
        self.calls.append((text, token))
        result = self.script.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class ScriptedAuth:
    """Credential provider fake: returns tokens or raises from a script."""

    def __init__(self, script: List[Union[str, Exception]]):
        self.script = list(script)
        self.calls: List[str] = []

    async def acquire(self, auth_key: str) -> str:
        self.calls.append(auth_key)
        result = self.script.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class RecordingNotifier(Notifier):
    """Notifier fake that records every delivery."""

    def __init__(self):
        self.texts: List[Tuple[int, str]] = []
        self.audio: List[Tuple[int, bytes, str]] = []

    async def send_text(self, chat_id: int, text: str) -> bool:
        self.texts.append((chat_id, text))
        return True

    async def send_audio(self, chat_id: int, audio: bytes, filename: str = "voice.wav") -> bool:
        self.audio.append((chat_id, audio, filename))
        return True


@pytest.fixture
def wav_bytes():
    return WAV_BYTES


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def scripted_tts():
    return ScriptedTTS


@pytest.fixture
def scripted_auth():
    return ScriptedAuth


@pytest.fixture
def credentials():
    return CredentialCell("T1")
