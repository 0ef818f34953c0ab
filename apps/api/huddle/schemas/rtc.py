"""Data contracts for RTC token endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field


class RtcTokenResponse(BaseModel):
    token: str = Field(..., description="Signed JWT granting access to one room")
    expires_in: int = Field(..., ge=1, description="Seconds until expiration")
