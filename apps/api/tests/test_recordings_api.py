"""Tests for the recording control endpoint."""
from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from huddle.core.errors import RecordingServiceError
from huddle.main import app
from huddle.services.recordings import get_tracker


@pytest_asyncio.fixture
async def client(configured, tracker):
    app.dependency_overrides[get_tracker] = lambda: tracker
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as http:
            yield http
    finally:
        app.dependency_overrides.pop(get_tracker, None)


@pytest.mark.asyncio
async def test_start_status_stop_round(client, egress) -> None:
    started = await client.post("/api/recording", params={"action": "start"}, json={"room": "room-A", "identity": "alice"})
    assert started.status_code == 200
    body = started.json()
    assert body["success"] is True
    assert body["egressId"] == "EG_1"
    assert body["filepath"] == "recordings/room-A/2025-01-02T03-04-05-678Z.ogg"

    status = await client.get("/api/recording", params={"action": "status", "room": "room-A"})
    assert status.status_code == 200
    assert status.json() == {
        "isRecording": True,
        "egressId": "EG_1",
        "startedBy": "alice",
        "startedAt": "2025-01-02T03:04:05.678Z",
    }

    stopped = await client.post("/api/recording", params={"action": "stop"}, json={"room": "room-A", "egressId": "EG_1"})
    assert stopped.status_code == 200
    assert stopped.json()["egressId"] == "EG_1"
    assert stopped.json()["filepath"] == body["filepath"]
    assert egress.stopped == ["EG_1"]

    after = await client.get("/api/recording", params={"action": "status", "room": "room-A"})
    assert after.json() == {"isRecording": False}


@pytest.mark.asyncio
async def test_status_before_start_only_reports_flag(client) -> None:
    response = await client.get("/api/recording", params={"action": "status", "room": "room-A"})

    assert response.status_code == 200
    assert response.json() == {"isRecording": False}


@pytest.mark.asyncio
async def test_duplicate_start_returns_conflict(client, egress) -> None:
    await client.post("/api/recording?action=start", json={"room": "room-A", "identity": "alice"})

    response = await client.post("/api/recording?action=start", json={"room": "room-A", "identity": "bob"})

    assert response.status_code == 409
    assert response.json() == {
        "error": "Recording already in progress",
        "startedBy": "alice",
        "egressId": "EG_1",
    }
    assert len(egress.started) == 1


@pytest.mark.asyncio
async def test_start_with_empty_room_is_rejected(client, egress) -> None:
    response = await client.post("/api/recording?action=start", json={"room": "", "identity": "alice"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing room parameter"}
    assert egress.started == []


@pytest.mark.asyncio
async def test_stop_unknown_room_is_not_found(client) -> None:
    response = await client.post("/api/recording?action=stop", json={"room": "room-B"})

    assert response.status_code == 404
    assert response.json() == {"error": "No active recording found for this room"}


@pytest.mark.asyncio
async def test_stop_requires_room_or_egress_id(client) -> None:
    response = await client.post("/api/recording?action=stop", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing room or egressId parameter"}


@pytest.mark.asyncio
async def test_stop_accepts_session_id_alias(client, egress) -> None:
    response = await client.post("/api/recording?action=stop", json={"sessionId": "EG_external"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "egressId": "EG_external", "message": "Recording stopped"}
    assert egress.stopped == ["EG_external"]


@pytest.mark.asyncio
@pytest.mark.parametrize("action", [None, "pause"])
async def test_invalid_action_is_rejected(client, action) -> None:
    params = {"room": "room-A"}
    if action is not None:
        params["action"] = action

    response = await client.get("/api/recording", params=params)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid action. Use: start, stop, or status"}


@pytest.mark.asyncio
async def test_egress_failure_is_reported_with_details(client, egress) -> None:
    egress.start_error = RecordingServiceError("Recording operation failed", details="room does not exist")

    response = await client.post("/api/recording?action=start", json={"room": "room-A"})

    assert response.status_code == 500
    assert response.json() == {"error": "Recording operation failed", "details": "room does not exist"}

    status = await client.get("/api/recording", params={"action": "status", "room": "room-A"})
    assert status.json() == {"isRecording": False}


@pytest.mark.asyncio
async def test_unexpected_failure_is_generic_server_error(client, egress) -> None:
    egress.start_error = RuntimeError("boom")

    response = await client.post("/api/recording?action=start", json={"room": "room-A"})

    assert response.status_code == 500
    assert response.json() == {"error": "Recording operation failed", "details": "boom"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, message",
    [
        ("livekit_api_key", "Missing LiveKit credentials"),
        ("azure_account_key", "Missing Azure Blob Storage credentials"),
    ],
)
async def test_missing_configuration_is_server_error(client, configured, monkeypatch, field, message) -> None:
    monkeypatch.setattr(configured, field, "")

    response = await client.get("/api/recording", params={"action": "status", "room": "room-A"})

    assert response.status_code == 500
    assert message in response.json()["error"]


@pytest.mark.asyncio
async def test_non_object_body_is_rejected(client) -> None:
    response = await client.post(
        "/api/recording?action=start",
        content=b"[1, 2]",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_stop_untracked_room_uses_supplied_egress_id(client, egress) -> None:
    response = await client.post("/api/recording?action=stop", json={"room": "room-B", "egressId": "EG_x"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "egressId": "EG_x", "message": "Recording stopped"}
    assert egress.stopped == ["EG_x"]


@pytest.mark.asyncio
async def test_stop_with_other_rooms_egress_id_clears_that_room(client, egress) -> None:
    await client.post("/api/recording?action=start", json={"room": "room-A", "identity": "alice"})

    response = await client.post("/api/recording?action=stop", json={"room": "room-B", "egressId": "EG_1"})

    assert response.status_code == 200
    assert response.json()["filepath"] == "recordings/room-A/2025-01-02T03-04-05-678Z.ogg"
    status = await client.get("/api/recording", params={"action": "status", "room": "room-A"})
    assert status.json() == {"isRecording": False}
