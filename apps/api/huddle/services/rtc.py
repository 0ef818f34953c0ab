"""RTC access token issuance.

Tokens are LiveKit-compatible JWTs: an HS256 header, the participant claims and a
``video`` grant scoped to a single room, signed with the shared API secret.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..core.errors import ConfigurationError, ValidationError

TOKEN_TTL = timedelta(hours=24)
TOKEN_ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RtcToken:
    token: str
    expires_in: int


def build_claims(identity: str, room: str, *, api_key: str, issued_at: int) -> dict[str, object]:
    """Return the claim set granting full participant rights in ``room``."""

    return {
        "exp": issued_at + int(TOKEN_TTL.total_seconds()),
        "iss": api_key,
        "name": identity,
        "nbf": issued_at,
        "sub": identity,
        "video": {
            "room": room,
            "roomJoin": True,
            "canPublish": True,
            "canSubscribe": True,
            "canPublishData": True,
        },
    }


def issue_token(
    identity: str,
    room: str,
    *,
    api_key: str,
    api_secret: str,
    now: datetime | None = None,
) -> RtcToken:
    """Produce a signed room access token valid for 24 hours from ``now``."""

    identity = (identity or "").strip()
    room = (room or "").strip()
    if not identity or not room:
        raise ValidationError("Missing identity or room parameter")
    if not api_key or not api_secret:
        raise ConfigurationError(
            "Server not configured. Missing LIVEKIT_API_KEY or LIVEKIT_API_SECRET environment variables."
        )

    issued = now or datetime.now(timezone.utc)
    issued_at = int(issued.timestamp())
    claims = build_claims(identity, room, api_key=api_key, issued_at=issued_at)
    token = jwt.encode(claims, api_secret, algorithm=TOKEN_ALGORITHM)

    logger.info("Token generated for user: %s, room: %s", identity, room)
    return RtcToken(token=token, expires_in=int(TOKEN_TTL.total_seconds()))
