"""
Relay module - turns inbound chat text into voice (or echo) replies.
"""

from relay.handler import (
    FAILURE_NOTICE,
    RelayHandler,
    RelayOutcome,
    RelayState,
    ReplyMode,
    RefreshPolicy,
)

__all__ = [
    "FAILURE_NOTICE",
    "RelayHandler",
    "RelayOutcome",
    "RelayState",
    "ReplyMode",
    "RefreshPolicy",
]
