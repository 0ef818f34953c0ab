"""Recording control endpoint: ``/api/recording?action=start|stop|status``."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.errors import HuddleError, ValidationError
from ..schemas import recordings as schemas
from ..services.egress import ensure_configured
from ..services.recordings import RecordingTracker, get_tracker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.api_route("/recording", methods=["GET", "POST"])
async def control_recording(
    request: Request,
    tracker: RecordingTracker = Depends(get_tracker),
) -> JSONResponse:
    """Start, stop or report the recording of a room."""

    ensure_configured(settings)
    try:
        params = schemas.RecordingControlRequest.model_validate(
            {**dict(request.query_params), **await _read_body(request)}
        )
    except PydanticValidationError as exc:
        raise ValidationError("Invalid recording parameters") from exc

    try:
        action = schemas.RecordingAction(params.action)
    except ValueError:
        raise ValidationError("Invalid action. Use: start, stop, or status") from None

    try:
        if action is schemas.RecordingAction.START:
            if not params.room:
                raise ValidationError("Missing room parameter")
            session = await tracker.start(params.room, params.identity)
            return _json(schemas.StartRecordingResponse(egress_id=session.egress_id, filepath=session.filepath))

        if action is schemas.RecordingAction.STOP:
            if not params.room and not params.egress_id:
                raise ValidationError("Missing room or egressId parameter")
            stopped = await tracker.stop(params.room, params.egress_id)
            return _json(schemas.StopRecordingResponse(egress_id=stopped.egress_id, filepath=stopped.filepath))

        if not params.room:
            raise ValidationError("Missing room parameter")
        current = tracker.status(params.room)
        return _json(
            schemas.RecordingStatusResponse(
                is_recording=current.is_recording,
                egress_id=current.egress_id,
                started_by=current.started_by,
                started_at=current.started_at,
            )
        )
    except HuddleError:
        raise
    except Exception as exc:  # noqa: BLE001 - single fallback path for the client
        logger.exception("Recording error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Recording operation failed", "details": str(exc)},
        )


async def _read_body(request: Request) -> dict[str, Any]:
    """Return the JSON object body, or an empty dict when there is none."""

    if request.method != "POST":
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("Request body must be a JSON object") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _json(model: BaseModel) -> JSONResponse:
    return JSONResponse(
        content=model.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
