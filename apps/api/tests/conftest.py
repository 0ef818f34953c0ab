"""Shared fixtures: a scripted egress service and a fresh tracker per test."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from huddle.core.config import settings
from huddle.services.recordings import RecordingTracker
from huddle.services.session_store import RecordingRegistry

API_KEY = "APItestkey"
API_SECRET = "test-secret-that-is-long-enough-for-hs256"
FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


class FakeEgress:
    """Stand-in for ``EgressClient`` that records calls instead of contacting LiveKit."""

    def __init__(self) -> None:
        self.started: list[tuple[str, str]] = []
        self.stopped: list[str] = []
        self.start_error: Exception | None = None
        self.stop_error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self._counter = 0

    async def start_audio_recording(self, room: str, filepath: str) -> str:
        if self.gate is not None:
            await self.gate.wait()
        if self.start_error is not None:
            raise self.start_error
        self._counter += 1
        self.started.append((room, filepath))
        return f"EG_{self._counter}"

    async def stop(self, egress_id: str) -> None:
        if self.stop_error is not None:
            raise self.stop_error
        self.stopped.append(egress_id)


@pytest.fixture
def egress() -> FakeEgress:
    return FakeEgress()


@pytest.fixture
def tracker(egress: FakeEgress) -> RecordingTracker:
    return RecordingTracker(egress, RecordingRegistry(), path_prefix="recordings", clock=lambda: FIXED_NOW)


@pytest.fixture
def configured(monkeypatch):
    """Populate every credential the API checks before serving a request."""

    monkeypatch.setattr(settings, "livekit_api_key", API_KEY)
    monkeypatch.setattr(settings, "livekit_api_secret", API_SECRET)
    monkeypatch.setattr(settings, "azure_account_name", "account")
    monkeypatch.setattr(settings, "azure_account_key", "key")
    monkeypatch.setattr(settings, "azure_container_name", "container")
    return settings
