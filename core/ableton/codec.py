"""core/ableton/codec.py — JSON envelope codec for the Live bridge protocol.

``encode`` turns an :class:`~core.ableton.messages.OutboundMessage` into the
bytes of one text frame.  ``decode`` turns one inbound frame into a typed
:class:`~core.ableton.events.InboundEvent`.

Both are pure functions.

Decode outcomes
───────────────
=====================================  ===================================
Frame                                  Result
=====================================  ===================================
known ``type``, well-formed            ``InboundEvent`` subclass
unknown ``type`` (``welcome``, …)      ``None`` — ignored, not an error
not JSON / not an object / no type     ``DecodeError``
known ``type`` missing a field         ``DecodeError``
=====================================  ===================================

The connection supervisor logs and discards ``DecodeError``; a bad frame
never tears down the connection.

Track payloads are read leniently (missing fields take defaults) except
for ``id``, which is required: without it the mirror could not keep track
identities unique.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from core.ableton.events import (
    InboundEvent,
    MasterTrackSnapshot,
    TempoSnapshot,
    TrackMuteChanged,
    TrackPanChanged,
    TracksSnapshot,
    TrackSoloChanged,
    TrackVolumeChanged,
    TransportSnapshot,
)
from core.ableton.messages import OutboundMessage
from core.ableton.types import Device, Parameter, TempoState, Track, TransportState

_DEFAULT_VOLUME: float = 0.85
"""Live's unity-gain fader position, used when a track payload omits ``volume``."""


class DecodeError(ValueError):
    """An inbound frame could not be turned into a domain event.

    Args:
        reason: What was wrong with the frame.
        frame_type: The envelope ``type`` when it could be read, else ``None``.
    """

    def __init__(self, reason: str, frame_type: str | None = None) -> None:
        self.reason = reason
        self.frame_type = frame_type
        prefix = f"{frame_type!r} frame: " if frame_type else ""
        super().__init__(f"{prefix}{reason}")


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def encode(message: OutboundMessage) -> bytes:
    """Serialise ``message`` as compact UTF-8 JSON (no trailing newline)."""
    return json.dumps(message.to_dict(), separators=(",", ":")).encode("utf-8")


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------


def _require(data: dict[str, Any], key: str, frame_type: str) -> Any:
    if key not in data:
        raise DecodeError(f"missing required field {key!r}", frame_type)
    return data[key]


def _as_int(value: Any, what: str, frame_type: str) -> int:
    # bool is an int subclass; reject it so ``true`` is never read as track 1
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{what} must be an integer, got {value!r}", frame_type)
    if isinstance(value, float) and not value.is_integer():
        raise DecodeError(f"{what} must be an integer, got {value!r}", frame_type)
    return int(value)


def _as_float(value: Any, what: str, frame_type: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{what} must be a number, got {value!r}", frame_type)
    return float(value)


def _as_bool(value: Any, what: str, frame_type: str) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"{what} must be a boolean, got {value!r}", frame_type)
    return value


def _as_object(value: Any, what: str, frame_type: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{what} must be an object, got {type(value).__name__}", frame_type)
    return value


# ---------------------------------------------------------------------------
# JSON → domain type deserialisers
# ---------------------------------------------------------------------------


def _parse_parameter(data: Any, frame_type: str) -> Parameter:
    data = _as_object(data, "parameter", frame_type)
    return Parameter(
        id=_as_int(_require(data, "id", frame_type), "parameter id", frame_type),
        name=str(data.get("name", "")),
        value=_as_float(data.get("value", 0.0), "parameter value", frame_type),
        min_value=_as_float(data.get("min", 0.0), "parameter min", frame_type),
        max_value=_as_float(data.get("max", 1.0), "parameter max", frame_type),
    )


def _parse_device(data: Any, frame_type: str) -> Device:
    data = _as_object(data, "device", frame_type)
    device_id = _as_int(_require(data, "id", frame_type), "device id", frame_type)
    params = data.get("parameters", [])
    if not isinstance(params, list):
        raise DecodeError("device parameters must be an array", frame_type)
    return Device(
        id=device_id,
        name=str(data.get("name", f"Device {device_id}")),
        type=str(data.get("type", "")),
        parameters=tuple(_parse_parameter(p, frame_type) for p in params),
    )


def _parse_track(data: Any, frame_type: str) -> Track:
    data = _as_object(data, "track", frame_type)
    track_id = _as_int(_require(data, "id", frame_type), "track id", frame_type)
    devices = data.get("devices", [])
    if not isinstance(devices, list):
        raise DecodeError("track devices must be an array", frame_type)
    return Track(
        id=track_id,
        name=str(data.get("name", f"Track {track_id}")),
        volume=_as_float(data.get("volume", _DEFAULT_VOLUME), "track volume", frame_type),
        pan=_as_float(data.get("pan", 0.0), "track pan", frame_type),
        muted=_as_bool(data.get("muted", False), "track muted", frame_type),
        soloed=_as_bool(data.get("soloed", False), "track soloed", frame_type),
        armed=_as_bool(data.get("armed", False), "track armed", frame_type),
        devices=tuple(_parse_device(d, frame_type) for d in devices),
    )


# ---------------------------------------------------------------------------
# Per-type decoders
# ---------------------------------------------------------------------------


def _decode_tracks(frame: dict[str, Any]) -> InboundEvent:
    data = _require(frame, "data", "tracks")
    if not isinstance(data, list):
        raise DecodeError("data must be an array of tracks", "tracks")
    tracks = tuple(_parse_track(t, "tracks") for t in data)
    ids = [t.id for t in tracks]
    if len(set(ids)) != len(ids):
        raise DecodeError(f"duplicate track ids in {ids}", "tracks")
    return TracksSnapshot(tracks=tracks)


def _decode_master_track(frame: dict[str, Any]) -> InboundEvent:
    data = _require(frame, "data", "master_track")
    if data is None:
        return MasterTrackSnapshot(track=None)
    return MasterTrackSnapshot(track=_parse_track(data, "master_track"))


def _decode_transport(frame: dict[str, Any]) -> InboundEvent:
    data = _as_object(_require(frame, "data", "transport"), "data", "transport")
    return TransportSnapshot(
        transport=TransportState(
            is_playing=_as_bool(_require(data, "is_playing", "transport"), "is_playing", "transport"),
            is_recording=_as_bool(
                _require(data, "is_recording", "transport"), "is_recording", "transport"
            ),
            current_time=_as_float(
                _require(data, "current_time", "transport"), "current_time", "transport"
            ),
        )
    )


def _decode_tempo(frame: dict[str, Any]) -> InboundEvent:
    bpm = _as_float(_require(frame, "data", "tempo"), "data", "tempo")
    return TempoSnapshot(tempo=TempoState(bpm=int(round(bpm))))


def _track_id(frame: dict[str, Any], frame_type: str) -> int:
    return _as_int(_require(frame, "track_id", frame_type), "track_id", frame_type)


def _decode_track_volume(frame: dict[str, Any]) -> InboundEvent:
    return TrackVolumeChanged(
        track_id=_track_id(frame, "track_volume"),
        value=_as_float(_require(frame, "value", "track_volume"), "value", "track_volume"),
    )


def _decode_track_pan(frame: dict[str, Any]) -> InboundEvent:
    return TrackPanChanged(
        track_id=_track_id(frame, "track_pan"),
        value=_as_float(_require(frame, "value", "track_pan"), "value", "track_pan"),
    )


def _decode_track_mute(frame: dict[str, Any]) -> InboundEvent:
    return TrackMuteChanged(
        track_id=_track_id(frame, "track_mute"),
        value=_as_bool(_require(frame, "value", "track_mute"), "value", "track_mute"),
    )


def _decode_track_solo(frame: dict[str, Any]) -> InboundEvent:
    return TrackSoloChanged(
        track_id=_track_id(frame, "track_solo"),
        value=_as_bool(_require(frame, "value", "track_solo"), "value", "track_solo"),
    )


_DECODERS: dict[str, Callable[[dict[str, Any]], InboundEvent]] = {
    "tracks": _decode_tracks,
    "master_track": _decode_master_track,
    "transport": _decode_transport,
    "tempo": _decode_tempo,
    "track_volume": _decode_track_volume,
    "track_pan": _decode_track_pan,
    "track_mute": _decode_track_mute,
    "track_solo": _decode_track_solo,
}

KNOWN_TYPES: frozenset[str] = frozenset(_DECODERS)
"""Inbound envelope types the mirror understands."""


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def frame_type(raw: bytes | str) -> str | None:
    """Best-effort peek at an inbound frame's ``type`` (for logs and metrics)."""
    try:
        frame = json.loads(raw)
    except (ValueError, TypeError):
        return None
    if isinstance(frame, dict) and isinstance(frame.get("type"), str):
        return frame["type"]
    return None


def decode(raw: bytes | str) -> InboundEvent | None:
    """Decode one inbound frame.

    Args:
        raw: Frame payload as received (text frames arrive as ``str``).

    Returns:
        The decoded event, or ``None`` when the envelope ``type`` is not one
        the mirror handles.

    Raises:
        DecodeError: The frame is not JSON, not an object, has no string
            ``type``, or lacks a required field for its (known) type.
    """
    try:
        frame = json.loads(raw)
    except (ValueError, TypeError) as exc:
        raise DecodeError(f"not valid JSON ({exc})") from exc

    if not isinstance(frame, dict):
        raise DecodeError(f"expected a JSON object, got {type(frame).__name__}")

    msg_type = frame.get("type")
    if not isinstance(msg_type, str):
        raise DecodeError("missing string field 'type'")

    decoder = _DECODERS.get(msg_type)
    if decoder is None:
        return None
    return decoder(frame)
