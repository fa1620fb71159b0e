"""
Infrastructure module exports.

Bootstrap for the relay's backends and transports.
"""

from .bootstrap import (
    RelayBootstrap,
    acquire_initial_credential,
    create_auth_client,
    create_tts_backend,
)

__all__ = [
    "RelayBootstrap",
    "acquire_initial_credential",
    "create_auth_client",
    "create_tts_backend",
]
