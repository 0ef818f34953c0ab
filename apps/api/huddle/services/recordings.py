"""Room recording lifecycle: at most one active egress per room.

Per room the tracker moves between two states. ``start`` takes an idle room to
recording and reports a conflict if it is already recording; ``stop`` takes it
back to idle and reports not-found when nothing can be resolved. Both hold the
room lock across the egress call, so concurrent requests for one room are
serialised instead of racing past the membership check.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from ..core.config import settings
from ..core.errors import RecordingConflict, RecordingNotFound, ValidationError
from .egress import EgressClient
from .session_store import RecordingRegistry, RecordingSession, registry as default_registry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(slots=True)
class StoppedRecording:
    egress_id: str
    filepath: str | None = None


@dataclass(slots=True)
class RecordingStatus:
    is_recording: bool
    egress_id: str | None = None
    started_by: str | None = None
    started_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as a filename-safe UTC timestamp, e.g. ``2025-01-02T03-04-05-678Z``."""

    moment = moment.astimezone(timezone.utc)
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def build_output_path(room: str, started_at: datetime, prefix: str = "recordings") -> str:
    """Return the blob path for a recording of ``room`` started at ``started_at``."""

    return f"{prefix.strip('/')}/{room}/{format_timestamp(started_at)}.ogg"


class RecordingTracker:
    """Start, stop and report audio recordings keyed by room name."""

    def __init__(
        self,
        egress: EgressClient,
        registry: RecordingRegistry | None = None,
        *,
        path_prefix: str | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._egress = egress
        self._registry = registry if registry is not None else RecordingRegistry()
        self._path_prefix = path_prefix or settings.recording_path_prefix
        self._clock = clock

    @property
    def registry(self) -> RecordingRegistry:
        return self._registry

    async def start(self, room: str | None, identity: str | None = None) -> RecordingSession:
        room = _clean(room)
        if room is None:
            raise ValidationError("Missing room parameter")
        started_by = _clean(identity) or "unknown"

        async with self._registry.locked(room):
            existing = self._registry.get(room)
            if existing is not None:
                logger.warning(
                    "Recording already in progress for room: %s (egressId: %s, startedBy: %s)",
                    room,
                    existing.egress_id,
                    existing.started_by,
                )
                raise RecordingConflict(
                    "Recording already in progress",
                    egress_id=existing.egress_id,
                    started_by=existing.started_by,
                )

            started_at = self._clock()
            filepath = build_output_path(room, started_at, self._path_prefix)
            egress_id = await self._egress.start_audio_recording(room, filepath)

            session = RecordingSession(
                room=room,
                egress_id=egress_id,
                started_by=started_by,
                started_at=started_at,
                filepath=filepath,
            )
            self._registry.add(session)

        logger.info("Recording started for room: %s, egressId: %s", room, egress_id)
        return session

    async def stop(self, room: str | None = None, egress_id: str | None = None) -> StoppedRecording:
        """Stop the recording for ``room``, or the egress named by ``egress_id``.

        A tracked room is authoritative over a supplied egress ID. Any tracked
        record whose egress ID was stopped is dropped, whichever key was given.
        """

        room = _clean(room)
        egress_id = _clean(egress_id)
        if room is None and egress_id is None:
            raise ValidationError("Missing room or egressId parameter")

        lock_room = room
        if lock_room is None:
            match = self._registry.find_by_egress_id(egress_id)
            lock_room = match.room if match else None

        if lock_room is None:
            await self._egress.stop(egress_id)
            stopped = StoppedRecording(egress_id=egress_id)
        else:
            async with self._registry.locked(lock_room):
                record = self._registry.get(lock_room)
                if record is not None and room is None and record.egress_id != egress_id:
                    # replaced while waiting for the lock
                    record = None
                target = record.egress_id if record is not None else egress_id
                if target is None:
                    raise RecordingNotFound("No active recording found for this room")
                await self._egress.stop(target)
                if record is not None:
                    self._registry.remove(record.room)
                stopped = StoppedRecording(egress_id=target, filepath=record.filepath if record else None)

        if stopped.filepath is None:
            stopped.filepath = await self._forget_egress(stopped.egress_id)

        logger.info("Recording stopped for egressId: %s", stopped.egress_id)
        return stopped

    def status(self, room: str | None) -> RecordingStatus:
        room = _clean(room)
        if room is None:
            raise ValidationError("Missing room parameter")

        session = self._registry.get(room)
        if session is None:
            return RecordingStatus(is_recording=False)
        return RecordingStatus(
            is_recording=True,
            egress_id=session.egress_id,
            started_by=session.started_by,
            started_at=session.started_at,
        )

    async def _forget_egress(self, egress_id: str) -> str | None:
        """Drop a record tracked under another room whose egress was stopped."""

        owner = self._registry.find_by_egress_id(egress_id)
        if owner is None:
            return None
        async with self._registry.locked(owner.room):
            current = self._registry.get(owner.room)
            if current is None or current.egress_id != egress_id:
                return None
            self._registry.remove(owner.room)
            return current.filepath


tracker = RecordingTracker(EgressClient(), default_registry)


def get_tracker() -> RecordingTracker:
    """FastAPI dependency returning the process-wide tracker."""

    return tracker
