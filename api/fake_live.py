"""api/fake_live.py — In-process stand-in for the Live companion bridge.

Lets the supervisor, the CLI and the integration tests run without Ableton.
Speaks the same one-JSON-object-per-frame protocol on ``ws://<host>:<port>/``.

Frame handling
==============
    on connect                       → {"type": "welcome", "message": ..., "timestamp": ...}
    request  tracks|master_track|    → tracks | master_track | transport | tempo snapshot
             is_playing|tempo
    set      track volume|pan|       → track_volume | track_pan | track_mute | track_solo
             mute|solo
    set      song tempo              → tempo
    command  play|stop|record        → transport
    anything else (valid JSON)       → {"type": "response", "original": ..., "timestamp": ...}
    not JSON                         → logged, ignored

All state lives in :class:`FakeLiveSet`, one per application.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from core.ableton.types import Device, TempoState, Track, TransportState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["fake-live"])

# Wire property name → Track attribute, and the update frame Live answers with.
_TRACK_PROPERTIES: dict[str, tuple[str, str]] = {
    "volume": ("volume", "track_volume"),
    "pan": ("pan", "track_pan"),
    "mute": ("muted", "track_mute"),
    "solo": ("soloed", "track_solo"),
}


def _demo_tracks() -> list[Track]:
    return [
        Track(id=0, name="Drums", volume=0.8, pan=0.0),
        Track(id=1, name="Bass", volume=0.75, pan=-0.1),
        Track(id=2, name="Piano", volume=0.7, pan=0.2),
        Track(id=3, name="Vocal", volume=0.85, pan=0.0),
    ]


def _device_payload(device: Device) -> dict[str, Any]:
    return {
        "id": device.id,
        "name": device.name,
        "type": device.type,
        "parameters": [
            {"id": p.id, "name": p.name, "value": p.value, "min": p.min_value, "max": p.max_value}
            for p in device.parameters
        ],
    }


def _track_payload(track: Track) -> dict[str, Any]:
    return {
        "id": track.id,
        "name": track.name,
        "volume": track.volume,
        "pan": track.pan,
        "muted": track.muted,
        "soloed": track.soloed,
        "armed": track.armed,
        "devices": [_device_payload(d) for d in track.devices],
    }


@dataclass
class FakeLiveSet:
    """Mutable song state served by the fake bridge.  Thread-safe."""

    tracks: list[Track] = field(default_factory=_demo_tracks)
    master_track: Track = field(default_factory=lambda: Track(id=-1, name="Master", volume=0.85, pan=0.0))
    transport: TransportState = field(default_factory=TransportState)
    tempo: TempoState = field(default_factory=TempoState)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    # ── Snapshots ───────────────────────────────────────────────────────────

    def snapshot_frame(self, prop: str) -> dict[str, Any] | None:
        """Frame answering ``{"type": "request", "property": prop}``, or ``None``."""
        with self._lock:
            if prop == "tracks":
                return {"type": "tracks", "data": [_track_payload(t) for t in self.tracks]}
            if prop == "master_track":
                return {"type": "master_track", "data": _track_payload(self.master_track)}
            if prop in ("is_playing", "transport"):
                return {"type": "transport", "data": asdict(self.transport)}
            if prop == "tempo":
                return {"type": "tempo", "data": self.tempo.bpm}
        return None

    # ── Mutations ───────────────────────────────────────────────────────────

    def set_track_property(self, track_id: int, prop: str, value: Any) -> dict[str, Any] | None:
        mapping = _TRACK_PROPERTIES.get(prop)
        if mapping is None:
            return None
        attr, frame_type = mapping
        with self._lock:
            for idx, track in enumerate(self.tracks):
                if track.id == track_id:
                    self.tracks[idx] = replace(track, **{attr: value})
                    return {"type": frame_type, "track_id": track_id, "value": value}
        return None

    def set_tempo(self, bpm: Any) -> dict[str, Any]:
        with self._lock:
            self.tempo = TempoState(bpm=int(round(float(bpm))))
            return {"type": "tempo", "data": self.tempo.bpm}

    def run_command(self, action: str) -> dict[str, Any] | None:
        with self._lock:
            if action == "play":
                self.transport = replace(self.transport, is_playing=True)
            elif action == "stop":
                self.transport = TransportState(current_time=self.transport.current_time)
            elif action == "record":
                self.transport = replace(self.transport, is_playing=True, is_recording=True)
            else:
                return None
            return {"type": "transport", "data": asdict(self.transport)}

    # ── Dispatch ────────────────────────────────────────────────────────────

    def handle(self, frame: Any) -> dict[str, Any]:
        """Return the reply for one decoded inbound frame."""
        reply: dict[str, Any] | None = None
        if isinstance(frame, dict):
            msg_type = frame.get("type")
            if msg_type == "request":
                reply = self.snapshot_frame(str(frame.get("property")))
            elif msg_type == "set" and frame.get("target") == "track":
                reply = self.set_track_property(frame.get("track_id"), str(frame.get("property")), frame.get("value"))
            elif msg_type == "set" and frame.get("target") == "song" and frame.get("property") == "tempo":
                try:
                    reply = self.set_tempo(frame.get("value"))
                except (TypeError, ValueError):
                    reply = None
            elif msg_type == "command":
                reply = self.run_command(str(frame.get("action")))

        if reply is None:
            reply = {"type": "response", "original": frame, "timestamp": _timestamp()}
        return reply


def _timestamp() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def welcome_frame() -> dict[str, Any]:
    return {"type": "welcome", "message": "Connected to fake Live bridge", "timestamp": _timestamp()}


# ---------------------------------------------------------------------------
# WebSocket endpoint
# ---------------------------------------------------------------------------


@router.websocket("/")
async def live_socket(websocket: WebSocket) -> None:
    """Serve one bridge client until it disconnects."""
    live_set: FakeLiveSet = websocket.app.state.live_set
    await websocket.accept()
    logger.info("fake_live: client connected")
    await websocket.send_text(json.dumps(welcome_frame()))
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                logger.warning("fake_live: ignoring non-JSON frame %r", raw[:80])
                continue
            reply = live_set.handle(frame)
            await websocket.send_text(json.dumps(reply))
    except WebSocketDisconnect:
        logger.info("fake_live: client disconnected")
