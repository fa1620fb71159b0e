"""
Inbound message handler.

Turns one inbound chat message into exactly one reply:

    IDLE → SYNTHESIZING → SUCCESS → DELIVERED
                        ↘ REFRESHING_THEN_RETRYING → SUCCESS → DELIVERED
                                                   ↘ FAILED

A failed synthesis triggers at most one credential refresh and one retry.
Per message that is never more than 2 synthesis calls and 1 refresh call.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from services.tts import (
    CredentialCell,
    SaluteAuthClient,
    SpeechServiceError,
    TTSBackend,
    UpstreamRejected,
)
from transport.notifier import Notifier

logger = logging.getLogger(__name__)

FAILURE_NOTICE = "Sorry, I couldn't convert your text to speech."


class RelayState(str, Enum):
    IDLE = "idle"
    SYNTHESIZING = "synthesizing"
    SUCCESS = "success"  # audio in hand, not yet handed to the notifier
    REFRESHING_THEN_RETRYING = "refreshing_then_retrying"
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


class ReplyMode(str, Enum):
    VOICE = "voice"
    ECHO = "echo"


class RefreshPolicy(str, Enum):
    ANY = "any"  # refresh after any synthesis failure
    AUTH = "auth"  # refresh only after a 401/403 rejection


@dataclass
class RelayOutcome:
    """What happened to one inbound message."""

    chat_id: int
    state: RelayState = RelayState.IDLE
    synthesis_calls: int = 0
    refresh_calls: int = 0
    acknowledged: bool = False  # notifier reported success
    error: Optional[SpeechServiceError] = None


class RelayHandler:
    """
    Orchestrates synthesis, the refresh-and-retry protocol and delivery.

    All collaborators are injected: the TTS backend, the credential
    provider with its static key, the credential cell and the notifier.
    """

    def __init__(
        self,
        tts: TTSBackend,
        auth: SaluteAuthClient,
        auth_key: str,
        credentials: CredentialCell,
        notifier: Notifier,
        reply_mode: str = ReplyMode.VOICE,
        refresh_on: str = RefreshPolicy.ANY,
    ):
        self.tts = tts
        self.auth = auth
        self.auth_key = auth_key
        self.credentials = credentials
        self.notifier = notifier
        self.reply_mode = ReplyMode(reply_mode)
        self.refresh_on = RefreshPolicy(refresh_on)

    async def handle(self, chat_id: int, text: str) -> RelayOutcome:
        """
        Relay one message to its chat.

        Args:
            chat_id: Destination chat
            text: Inbound message text

        Returns:
            RelayOutcome in a terminal state (DELIVERED, FAILED or SKIPPED)
        """
        outcome = RelayOutcome(chat_id=chat_id)

        if not text or not text.strip():
            outcome.state = RelayState.SKIPPED
            logger.debug(f"Empty text for chat {chat_id}, skipping")
            return outcome

        if self.reply_mode is ReplyMode.ECHO:
            outcome.acknowledged = await self.notifier.send_text(chat_id, text)
            outcome.state = RelayState.DELIVERED
            logger.info(f"Echoed text to chat {chat_id}")
            return outcome

        seen = self.credentials.snapshot()
        outcome.state = RelayState.SYNTHESIZING
        try:
            audio = await self._synthesize(outcome, text, seen.token)
        except SpeechServiceError as e:
            outcome.error = e
            logger.error(f"Failed to synthesize speech for chat {chat_id}: {e}")
            if not self._should_refresh(e):
                return await self._fail(outcome)
        else:
            return await self._deliver_audio(outcome, audio)

        outcome.state = RelayState.REFRESHING_THEN_RETRYING
        try:
            refreshed = await self.credentials.refresh(seen, lambda: self._acquire(outcome))
        except SpeechServiceError as e:
            outcome.error = e
            logger.error(f"Failed to refresh speech token: {e}")
            return await self._fail(outcome)

        try:
            audio = await self._synthesize(outcome, text, refreshed.snapshot.token)
        except SpeechServiceError as e:
            outcome.error = e
            logger.error(f"Failed to synthesize speech after token refresh for chat {chat_id}: {e}")
            return await self._fail(outcome)

        return await self._deliver_audio(outcome, audio)

    def _should_refresh(self, error: SpeechServiceError) -> bool:
        if self.refresh_on is RefreshPolicy.ANY:
            return True
        return isinstance(error, UpstreamRejected) and error.is_auth_rejection

    async def _synthesize(self, outcome: RelayOutcome, text: str, token: str) -> bytes:
        outcome.synthesis_calls += 1
        return await self.tts.synthesize(text, token)

    async def _acquire(self, outcome: RelayOutcome) -> str:
        outcome.refresh_calls += 1
        return await self.auth.acquire(self.auth_key)

    async def _deliver_audio(self, outcome: RelayOutcome, audio: bytes) -> RelayOutcome:
        outcome.state = RelayState.SUCCESS
        outcome.acknowledged = await self.notifier.send_audio(
            outcome.chat_id, audio, filename=self.tts.audio_filename
        )
        outcome.state = RelayState.DELIVERED
        outcome.error = None
        logger.info(
            f"Delivered voice to chat {outcome.chat_id} "
            f"(synthesis_calls={outcome.synthesis_calls}, refresh_calls={outcome.refresh_calls})"
        )
        return outcome

    async def _fail(self, outcome: RelayOutcome) -> RelayOutcome:
        outcome.acknowledged = await self.notifier.send_text(outcome.chat_id, FAILURE_NOTICE)
        outcome.state = RelayState.FAILED
        logger.warning(
            f"Relay failed for chat {outcome.chat_id} "
            f"(synthesis_calls={outcome.synthesis_calls}, refresh_calls={outcome.refresh_calls}): "
            f"{outcome.error}"
        )
        return outcome
