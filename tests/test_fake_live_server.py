"""Tests for api/fake_live.py and api/main.py.

Covers:
- GET /health and GET /metrics
- WebSocket: welcome frame, request snapshots, set/command replies,
  echo of unrecognised frames, non-JSON frames ignored
- Frames served by the fake decode cleanly with the real codec
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.fake_live import FakeLiveSet
from api.main import create_app
from core.ableton.codec import decode
from core.ableton.events import TracksSnapshot, TransportSnapshot


@pytest.fixture()
def live_set() -> FakeLiveSet:
    return FakeLiveSet()


@pytest.fixture()
def client(live_set: FakeLiveSet) -> TestClient:
    return TestClient(create_app(live_set))


class TestHttp:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["port"] == 9001
        assert "timestamp" in body

    def test_metrics(self, client: TestClient) -> None:
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "live_frames_received_total" in resp.text


class TestWebSocket:
    def test_welcome_on_connect(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "welcome"

    def test_request_tracks(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "request", "target": "song", "property": "tracks"})
            reply = ws.receive_json()
        assert reply["type"] == "tracks"
        assert [t["name"] for t in reply["data"]] == ["Drums", "Bass", "Piano", "Vocal"]

    def test_is_playing_answers_with_transport(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "request", "target": "song", "property": "is_playing"})
            reply = ws.receive_json()
        assert reply == {
            "type": "transport",
            "data": {"is_playing": False, "is_recording": False, "current_time": 0.0},
        }

    def test_set_volume_echoes_update(self, client: TestClient, live_set: FakeLiveSet) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "set", "target": "track", "track_id": 2, "property": "volume", "value": 0.3})
            reply = ws.receive_json()
        assert reply == {"type": "track_volume", "track_id": 2, "value": 0.3}
        assert live_set.tracks[2].volume == 0.3

    def test_set_mute(self, client: TestClient, live_set: FakeLiveSet) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "set", "target": "track", "track_id": 0, "property": "mute", "value": True})
            assert ws.receive_json()["type"] == "track_mute"
        assert live_set.tracks[0].muted is True

    def test_set_tempo(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "set", "target": "song", "property": "tempo", "value": 140})
            assert ws.receive_json() == {"type": "tempo", "data": 140}

    def test_play_command(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "command", "action": "play"})
            reply = ws.receive_json()
        assert reply["type"] == "transport"
        assert reply["data"]["is_playing"] is True

    def test_unknown_frame_echoed(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            reply = ws.receive_json()
        assert reply["type"] == "response"
        assert reply["original"] == {"type": "ping"}

    def test_non_json_ignored(self, client: TestClient) -> None:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_text("not json")
            ws.send_json({"type": "request", "target": "song", "property": "tempo"})
            assert ws.receive_json() == {"type": "tempo", "data": 120}


class TestFakeLiveSet:
    def test_frames_decode_with_real_codec(self, live_set: FakeLiveSet) -> None:
        import json

        tracks = decode(json.dumps(live_set.snapshot_frame("tracks")))
        transport = decode(json.dumps(live_set.snapshot_frame("is_playing")))
        assert isinstance(tracks, TracksSnapshot)
        assert len(tracks.tracks) == 4
        assert isinstance(transport, TransportSnapshot)

    def test_unknown_track_echoed(self, live_set: FakeLiveSet) -> None:
        frame = {"type": "set", "target": "track", "track_id": 42, "property": "pan", "value": 0.1}
        assert live_set.handle(frame)["type"] == "response"

    def test_stop_keeps_position(self, live_set: FakeLiveSet) -> None:
        live_set.handle({"type": "command", "action": "record"})
        reply = live_set.handle({"type": "command", "action": "stop"})
        assert reply["data"]["is_playing"] is False
        assert reply["data"]["is_recording"] is False
