"""
Owned holder for the speech service bearer token.

One token is live at a time. Writers go through ``refresh``, which only
replaces the token when nobody else replaced it since the caller read it.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialSnapshot:
    """Token together with the generation it was read at."""

    token: str
    generation: int


class CredentialCell:
    """
    Single-writer cell for the cached credential.

    The generation counter increases on every replacement. ``refresh``
    compares the caller's snapshot generation with the current one under
    a lock: if they match, it calls the acquirer and swaps in the result;
    if another task already swapped, the newer token is returned without
    a network call. The stale token is kept when the acquirer raises.
    """

    def __init__(self, token: str):
        self._token = token
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def token(self) -> str:
        return self._token

    @property
    def generation(self) -> int:
        return self._generation

    def snapshot(self) -> CredentialSnapshot:
        return CredentialSnapshot(token=self._token, generation=self._generation)

    def replace(self, token: str) -> CredentialSnapshot:
        """Unconditionally install a new token."""
        self._token = token
        self._generation += 1
        return self.snapshot()

    async def refresh(
        self,
        seen: CredentialSnapshot,
        acquire: Callable[[], Awaitable[str]],
    ) -> "RefreshResult":
        """
        Replace the token if it is still the one ``seen`` was taken from.

        Args:
            seen: Snapshot the failed call used
            acquire: Coroutine factory returning a fresh token

        Returns:
            RefreshResult with the snapshot to retry with and whether
            ``acquire`` was actually called

        Raises:
            SpeechServiceError: whatever ``acquire`` raises; cell unchanged
        """
        async with self._lock:
            if self._generation != seen.generation:
                logger.info(
                    f"Credential already refreshed to generation {self._generation}, "
                    f"skipping refresh"
                )
                return RefreshResult(snapshot=self.snapshot(), acquired=False)

            token = await acquire()
            snapshot = self.replace(token)
            logger.info(f"Credential refreshed (generation {snapshot.generation})")
            return RefreshResult(snapshot=snapshot, acquired=True)


@dataclass(frozen=True)
class RefreshResult:
    snapshot: CredentialSnapshot
    acquired: bool
