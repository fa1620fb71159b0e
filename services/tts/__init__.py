"""
Text-to-Speech service exports.

Clean interface for the relay handler to import TTS components.
"""

from .base import TTSBackend
from .stub import StubTTSBackend
from .salute import SaluteSpeechBackend
from .auth import SaluteAuthClient
from .credentials import CredentialCell, CredentialSnapshot, RefreshResult
from .errors import (
    SpeechServiceError,
    TransportError,
    UpstreamRejected,
    DecodeError,
    CredentialAcquisitionFailed,
)

__all__ = [
    "TTSBackend",
    "StubTTSBackend",
    "SaluteSpeechBackend",
    "SaluteAuthClient",
    "CredentialCell",
    "CredentialSnapshot",
    "RefreshResult",
    "SpeechServiceError",
    "TransportError",
    "UpstreamRejected",
    "DecodeError",
    "CredentialAcquisitionFailed",
]
