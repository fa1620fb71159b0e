"""
Credential Cell Tests

Single-writer token holder:
  - Snapshot / replace
  - Compare-and-swap refresh
  - Failed refresh leaves the cell untouched
"""

import pytest

from services.tts import CredentialCell, TransportError


class TestCredentialCell:
    """Token ownership."""

    def test_initial_state(self):
        cell = CredentialCell("T1")

        assert cell.token == "T1"
        assert cell.generation == 0
        assert cell.snapshot().token == "T1"

    def test_replace_bumps_generation(self):
        cell = CredentialCell("T1")

        snapshot = cell.replace("T2")

        assert cell.token == "T2"
        assert snapshot.generation == 1


class TestRefresh:
    """Compare-and-swap semantics."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_current_token(self):
        cell = CredentialCell("T1")
        seen = cell.snapshot()

        async def acquire():
            return "T2"

        result = await cell.refresh(seen, acquire)

        assert result.acquired is True
        assert result.snapshot.token == "T2"
        assert cell.token == "T2"
        assert cell.generation == 1

    @pytest.mark.asyncio
    async def test_stale_snapshot_reuses_newer_token(self):
        cell = CredentialCell("T1")
        seen = cell.snapshot()
        cell.replace("T2")
        calls = []

        async def acquire():
            calls.append(1)
            return "T3"

        result = await cell.refresh(seen, acquire)

        assert result.acquired is False
        assert result.snapshot.token == "T2"
        assert calls == []
        assert cell.token == "T2"

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_old_token(self):
        cell = CredentialCell("T1")

        async def acquire():
            raise TransportError("acquire_token", "connection refused")

        with pytest.raises(TransportError):
            await cell.refresh(cell.snapshot(), acquire)

        assert cell.token == "T1"
        assert cell.generation == 0
