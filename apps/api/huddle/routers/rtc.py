"""RTC token issuance endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ..core.config import settings
from ..core.errors import HuddleError
from ..schemas.rtc import RtcTokenResponse
from ..services import rtc as rtc_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/token", response_model=RtcTokenResponse)
async def create_rtc_token(identity: str | None = None, room: str | None = None) -> RtcTokenResponse:
    """Return a room access token for the given participant."""

    try:
        token = rtc_service.issue_token(
            identity or "",
            room or "",
            api_key=settings.livekit_api_key,
            api_secret=settings.livekit_api_secret,
        )
    except HuddleError:
        raise
    except Exception as exc:  # noqa: BLE001 - never leak signing failures
        logger.exception("Error generating token: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate token") from exc

    return RtcTokenResponse(token=token.token, expires_in=token.expires_in)
