"""core/ableton/types.py — Immutable value objects for the mirrored Live set.

Hierarchy mirroring what the Live companion bridge reports:

    Live set
    ├── Track (N regular tracks + one master track)
    │   └── Device (M devices per track)
    │       └── Parameter (P params per device)
    ├── TransportState (play / record / playhead)
    └── TempoState (song tempo)

Every type is a frozen dataclass.  No I/O, no timestamps, no env vars.
The only writer of these objects is :class:`core.ableton.mirror.StateMirror`,
which swaps whole values in and out; subscribers always receive complete,
read-only snapshots.

Wire field names
────────────────
The bridge speaks snake_case JSON::

    {"id": 1, "name": "Drums", "volume": 0.8, "pan": 0, "muted": false,
     "soloed": false, "armed": false, "devices": []}

Deserialisation lives in :mod:`core.ableton.codec`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ConnectionState(str, Enum):
    """Lifecycle of the socket owned by the connection supervisor."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class TrackField(str, Enum):
    """Track fields that the bridge updates one at a time.

    Values are the Python attribute names on :class:`Track`.
    """

    VOLUME = "volume"
    PAN = "pan"
    MUTED = "muted"
    SOLOED = "soloed"


# ---------------------------------------------------------------------------
# Parameter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parameter:
    """A single device parameter.

    ``min_value <= value <= max_value`` is expected but not enforced: the
    remote is authoritative and the mirror stores what it is told.
    """

    id: int
    name: str
    value: float
    min_value: float
    """Wire name ``min``."""

    max_value: float
    """Wire name ``max``."""


# ---------------------------------------------------------------------------
# Device
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Device:
    """A device loaded on a track.  No lifecycle of its own."""

    id: int
    name: str
    type: str
    """Free-form device tag reported by the bridge (e.g. ``"instrument"``)."""

    parameters: tuple[Parameter, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Track
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Track:
    """A Live track as mirrored from the bridge."""

    id: int
    """Unique and stable for the lifetime of one connection."""

    name: str
    volume: float
    """Fader position in [0.0, 1.0]."""

    pan: float
    """Pan position in [-1.0 (full left) … +1.0 (full right)].  Centre = 0."""

    muted: bool = False
    soloed: bool = False
    armed: bool = False
    devices: tuple[Device, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Song-level singletons
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransportState:
    """Transport snapshot.  ``current_time`` is in seconds and owned by Live."""

    is_playing: bool = False
    is_recording: bool = False
    current_time: float = 0.0


@dataclass(frozen=True)
class TempoState:
    """Song tempo.  The [60, 200] BPM range is checked at the UI edge only."""

    bpm: int = 120


# ---------------------------------------------------------------------------
# Simulated MIDI devices
# ---------------------------------------------------------------------------


class MidiDeviceKind(str, Enum):
    """Direction of a MIDI port."""

    INPUT = "input"
    OUTPUT = "output"


@dataclass(frozen=True)
class MidiDevice:
    """A (simulated) MIDI port known to :mod:`ableton_bridge.midi`."""

    id: str
    name: str
    kind: MidiDeviceKind
    connected: bool = True
