"""In-memory registry of active room recordings."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Dict, Optional


@dataclass(slots=True)
class RecordingSession:
    room: str
    egress_id: str
    started_by: str
    started_at: datetime
    filepath: str


@dataclass(slots=True)
class _RoomLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class RecordingRegistry:
    """Very small process-local map of room name to active recording.

    Callers hold ``locked(room)`` around any check-then-act sequence so two
    requests for the same room cannot both pass the membership check. A room's
    lock exists only while some request holds or waits for it.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, RecordingSession] = {}
        self._locks: Dict[str, _RoomLock] = {}

    @asynccontextmanager
    async def locked(self, room: str) -> AsyncIterator[None]:
        entry = self._locks.get(room)
        if entry is None:
            entry = self._locks[room] = _RoomLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(room) is entry:
                del self._locks[room]

    @property
    def lock_count(self) -> int:
        """Number of rooms with a request holding or waiting on their lock."""

        return len(self._locks)

    def get(self, room: str) -> Optional[RecordingSession]:
        return self._sessions.get(room)

    def find_by_egress_id(self, egress_id: str) -> Optional[RecordingSession]:
        for session in self._sessions.values():
            if session.egress_id == egress_id:
                return session
        return None

    def add(self, session: RecordingSession) -> None:
        if session.room in self._sessions:
            raise KeyError(f"room {session.room!r} already has an active recording")
        self._sessions[session.room] = session

    def remove(self, room: str) -> Optional[RecordingSession]:
        return self._sessions.pop(room, None)

    def __contains__(self, room: object) -> bool:
        return room in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


registry = RecordingRegistry()
