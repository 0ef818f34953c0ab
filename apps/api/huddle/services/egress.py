"""LiveKit egress client for audio-only room recordings written to Azure blob storage."""
from __future__ import annotations

import asyncio
import logging

import aiohttp
from livekit import api

from ..core.config import Settings, settings as default_settings
from ..core.errors import ConfigurationError, RecordingServiceError

RECORDING_LAYOUT = "single-speaker"

logger = logging.getLogger(__name__)


def ensure_configured(config: Settings) -> None:
    """Raise ``ConfigurationError`` when LiveKit or Azure settings are unset."""

    if config.missing_livekit_credentials():
        raise ConfigurationError("Server not configured. Missing LiveKit credentials.")
    if config.missing_storage_credentials():
        raise ConfigurationError("Server not configured. Missing Azure Blob Storage credentials.")


class EgressClient:
    """Start and stop room composite egress through the LiveKit server API."""

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings

    def ensure_configured(self) -> None:
        ensure_configured(self._settings)

    def build_request(self, room: str, filepath: str) -> api.RoomCompositeEgressRequest:
        output = api.EncodedFileOutput(
            file_type=api.EncodedFileType.OGG,
            filepath=filepath,
            azure=api.AzureBlobUpload(
                account_name=self._settings.azure_account_name,
                account_key=self._settings.azure_account_key,
                container_name=self._settings.azure_container_name,
            ),
        )
        return api.RoomCompositeEgressRequest(
            room_name=room,
            layout=RECORDING_LAYOUT,
            audio_only=True,
            preset=api.EncodingOptionsPreset.H264_720P_30,
            file_outputs=[output],
        )

    async def start_audio_recording(self, room: str, filepath: str) -> str:
        """Begin capturing the room's audio to ``filepath`` and return the egress ID."""

        self.ensure_configured()
        request = self.build_request(room, filepath)
        info = await self._call("start", lambda lkapi: lkapi.egress.start_room_composite_egress(request))
        return info.egress_id

    async def stop(self, egress_id: str) -> None:
        """Terminate the egress identified by ``egress_id``."""

        self.ensure_configured()
        await self._call("stop", lambda lkapi: lkapi.egress.stop_egress(api.StopEgressRequest(egress_id=egress_id)))

    def _client(self) -> api.LiveKitAPI:
        return api.LiveKitAPI(
            url=self._settings.livekit_url,
            api_key=self._settings.livekit_api_key,
            api_secret=self._settings.livekit_api_secret,
        )

    async def _call(self, operation, request_factory):
        lkapi = self._client()
        try:
            return await request_factory(lkapi)
        except api.TwirpError as exc:
            logger.error("Egress %s rejected by LiveKit: %s", operation, exc.message)
            raise RecordingServiceError("Recording operation failed", details=exc.message) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Egress %s could not reach LiveKit: %s", operation, exc)
            raise RecordingServiceError("Recording operation failed", details=str(exc) or type(exc).__name__) from exc
        finally:
            await lkapi.aclose()
