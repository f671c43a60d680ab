"""Tests for the scan session HTTP API."""

from __future__ import annotations

from fastapi.testclient import TestClient

from receiptscan.receipt.options import ScanOptions
from receiptscan.runtime.receipt_server import create_app


def _client() -> TestClient:
    return TestClient(create_app(ScanOptions(video_feed=False)))


def _frame(timestamp: str, total: str | None = "3.78") -> dict:
    frame: dict = {
        "timestamp": timestamp,
        "positions": [
            {"product": {"value": "MILK 1L"}, "price": {"value": "1.29"}, "confidence": 90},
            {"product": {"value": "BREAD"}, "price": {"value": "2.49"}, "confidence": 85},
        ],
    }
    if total is not None:
        frame["sum"] = {"value": total}
    return frame


def test_health() -> None:
    response = _client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_frame_round_trip_completes_scan() -> None:
    client = _client()
    session_id = client.post("/sessions").json()["session_id"]

    response = client.post(f"/sessions/{session_id}/frames", json=_frame("2026-01-01T10:00:00"))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "complete"
    assert body["is_valid"] is True
    assert body["sum"] == "3.78"
    assert [p["product"] for p in body["positions"]] == ["MILK 1L", "BREAD"]
    assert body["skew_degrees"] == 0.0


def test_incomplete_frame_reports_progress() -> None:
    client = _client()
    session_id = client.post("/sessions").json()["session_id"]

    body = client.post(f"/sessions/{session_id}/frames", json=_frame("2026-01-01T10:00:00", total="9.99")).json()

    assert body["status"] == "in_progress"
    assert body["is_valid"] is False
    assert body["estimated_percentage"] == 37


def test_session_accepts_option_overrides() -> None:
    client = _client()

    response = client.post("/sessions", json={"video_feed": True, "scan_timeout": 10})

    assert response.status_code == 200
    session = client.app.state.sessions.get(response.json()["session_id"])
    assert session.options.video_feed is True
    assert session.options.scan_timeout.total_seconds() == 10


def test_invalid_option_overrides_are_rejected() -> None:
    client = _client()

    assert client.post("/sessions", json={"similarity_threshold": 150}).status_code == 422
    assert client.post("/sessions", json={"colour": "blue"}).status_code == 422


def test_unknown_session_is_404() -> None:
    client = _client()

    assert client.post("/sessions/nope/frames", json=_frame("2026-01-01T10:00:00")).status_code == 404
    assert client.delete("/sessions/nope").status_code == 404


def test_malformed_frame_is_422() -> None:
    client = _client()
    session_id = client.post("/sessions").json()["session_id"]

    response = client.post(f"/sessions/{session_id}/frames", json={"positions": []})

    assert response.status_code == 422
    assert "timestamp" in response.json()["detail"]


def test_delete_discards_session() -> None:
    client = _client()
    session_id = client.post("/sessions").json()["session_id"]

    assert client.delete(f"/sessions/{session_id}").status_code == 200
    assert client.post(f"/sessions/{session_id}/frames", json=_frame("2026-01-01T10:00:00")).status_code == 404


def test_offset_timestamps_are_accepted() -> None:
    # Video mode ages young groups against the session clock on every pass.
    client = TestClient(create_app(ScanOptions()))
    session_id = client.post("/sessions").json()["session_id"]

    response = client.post(f"/sessions/{session_id}/frames", json=_frame("2026-01-01T10:00:00+00:00"))

    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
