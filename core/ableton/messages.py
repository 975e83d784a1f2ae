"""core/ableton/messages.py — Outbound envelope generators.

Each function returns an :class:`OutboundMessage` ready to be encoded by
:func:`core.ableton.codec.encode` and handed to the connection supervisor.

Pure module — no I/O, no env vars, no imports from ableton_bridge/ or api/.

Wire protocol (one JSON object per WebSocket text frame)
────────────────────────────────────────────────────────
::

    {"type": "command", "action": "play"}
    {"type": "command", "action": "fire_clip", "track_id": 2, "clip_index": 0}
    {"type": "set", "target": "track", "track_id": 2, "property": "volume", "value": 0.7}
    {"type": "set", "target": "song", "property": "tempo", "value": 128}
    {"type": "request", "target": "song", "property": "tracks"}

Usage
─────
::

    supervisor.send(set_track_volume(2, 0.7))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutboundMessage:
    """A single envelope sent to the Live bridge.

    Optional fields left as ``None`` are omitted from the wire format, so
    ``{"type": "command", "action": "play"}`` carries no ``target`` key.
    """

    type: str
    """Envelope type: ``"command"`` | ``"set"`` | ``"request"``."""

    action: str | None = None
    target: str | None = None
    property: str | None = None
    track_id: int | None = None
    clip_index: int | None = None
    value: float | int | bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire format, dropping unset fields."""
        payload: dict[str, Any] = {"type": self.type}
        for key in ("action", "target", "track_id", "clip_index", "property", "value"):
            attr = getattr(self, key)
            if attr is not None:
                payload[key] = attr
        return payload


# ---------------------------------------------------------------------------
# Transport commands
# ---------------------------------------------------------------------------


def _command(action: str, **kwargs: Any) -> OutboundMessage:
    return OutboundMessage(type="command", action=action, **kwargs)


def play() -> OutboundMessage:
    return _command("play")


def stop() -> OutboundMessage:
    return _command("stop")


def record() -> OutboundMessage:
    return _command("record")


def fire_clip(track_id: int, clip_index: int) -> OutboundMessage:
    """Launch the clip in slot ``clip_index`` of track ``track_id``."""
    return _command("fire_clip", track_id=track_id, clip_index=clip_index)


def stop_clip(track_id: int, clip_index: int) -> OutboundMessage:
    """Stop the clip in slot ``clip_index`` of track ``track_id``."""
    return _command("stop_clip", track_id=track_id, clip_index=clip_index)


# ---------------------------------------------------------------------------
# Property writes
# ---------------------------------------------------------------------------


def _set_track(track_id: int, prop: str, value: float | bool) -> OutboundMessage:
    return OutboundMessage(
        type="set",
        target="track",
        track_id=track_id,
        property=prop,
        value=value,
    )


def set_track_volume(track_id: int, volume: float) -> OutboundMessage:
    return _set_track(track_id, "volume", volume)


def set_track_pan(track_id: int, pan: float) -> OutboundMessage:
    return _set_track(track_id, "pan", pan)


def set_track_mute(track_id: int, muted: bool) -> OutboundMessage:
    return _set_track(track_id, "mute", muted)


def set_track_solo(track_id: int, soloed: bool) -> OutboundMessage:
    return _set_track(track_id, "solo", soloed)


def set_tempo(bpm: int) -> OutboundMessage:
    """Set the song tempo.  No range check here; the UI edge validates."""
    return OutboundMessage(type="set", target="song", property="tempo", value=bpm)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

INITIAL_DATA_PROPERTIES: tuple[str, ...] = ("tracks", "master_track", "is_playing", "tempo")
"""Song properties requested, in this order, right after every successful open."""


def request(prop: str) -> OutboundMessage:
    """Ask the bridge to push the current value of a song property."""
    return OutboundMessage(type="request", target="song", property=prop)


def initial_data_requests() -> list[OutboundMessage]:
    """Return the query burst sent after each transition into CONNECTED."""
    return [request(prop) for prop in INITIAL_DATA_PROPERTIES]
