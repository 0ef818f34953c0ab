"""Error taxonomy shared by the token and recording services.

Every error carries the HTTP status it maps to and any extra fields the client
needs in the JSON body, so routers can surface them without translating.
"""
from __future__ import annotations

from typing import Any

from fastapi import status


class HuddleError(Exception):
    """Base class for errors reported to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = {key: value for key, value in extra.items() if value is not None}

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(HuddleError):
    """Caller input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(HuddleError):
    """Server-side secrets or storage settings are unset."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class RecordingConflict(HuddleError):
    """The room already has an active recording."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, *, egress_id: str, started_by: str) -> None:
        super().__init__(message, startedBy=started_by, egressId=egress_id)
        self.egress_id = egress_id
        self.started_by = started_by


class RecordingNotFound(HuddleError):
    """No session could be resolved for the request."""

    status_code = status.HTTP_404_NOT_FOUND


class RecordingServiceError(HuddleError):
    """The egress service rejected or failed the request."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message, details=details)
        self.details = details
