"""Data contracts for the recording control endpoint."""
from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer


class RecordingAction(str, enum.Enum):
    START = "start"
    STOP = "stop"
    STATUS = "status"


class RecordingControlRequest(BaseModel):
    """Parameters merged from the query string and the optional JSON body."""

    model_config = ConfigDict(extra="ignore")

    action: str | None = None
    room: str | None = None
    identity: str | None = None
    egress_id: str | None = Field(default=None, validation_alias=AliasChoices("egressId", "sessionId", "egress_id"))


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StartRecordingResponse(_CamelModel):
    success: bool = True
    egress_id: str = Field(..., alias="egressId")
    filepath: str
    message: str = "Recording started"


class StopRecordingResponse(_CamelModel):
    success: bool = True
    egress_id: str = Field(..., alias="egressId")
    filepath: str | None = None
    message: str = "Recording stopped"


class RecordingStatusResponse(_CamelModel):
    is_recording: bool = Field(..., alias="isRecording")
    egress_id: str | None = Field(default=None, alias="egressId")
    started_by: str | None = Field(default=None, alias="startedBy")
    started_at: datetime | None = Field(default=None, alias="startedAt")

    @field_serializer("started_at")
    def _serialize_started_at(self, value: datetime | None) -> str | None:
        """Millisecond UTC form, as JavaScript's ``toISOString`` renders it."""

        if value is None:
            return None
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
