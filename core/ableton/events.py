"""core/ableton/events.py — Inbound domain events and outbound notifications.

Two tagged unions live here:

``InboundEvent``
    What the codec produces from one bridge frame.  One class per inbound
    wire ``type``; the four per-field track updates are separate classes so
    the mirror dispatches on the class instead of on a property-name string.

``Notification``
    What the state mirror (and the MIDI simulator) hand to the event bus.
    Every notification class is bound to exactly one :class:`Channel`.

Pure module — frozen dataclasses only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from core.ableton.types import (
    ConnectionState,
    MidiDevice,
    TempoState,
    Track,
    TrackField,
    TransportState,
)

# ---------------------------------------------------------------------------
# Inbound events (codec → mirror)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InboundEvent:
    """Base class for decoded bridge frames."""

    wire_type: ClassVar[str]


@dataclass(frozen=True)
class TracksSnapshot(InboundEvent):
    """``{"type": "tracks", "data": [...]}`` — full, authoritative track list."""

    wire_type: ClassVar[str] = "tracks"

    tracks: tuple[Track, ...]


@dataclass(frozen=True)
class MasterTrackSnapshot(InboundEvent):
    """``{"type": "master_track", "data": {...} | null}``; ``None`` when the set has no master."""

    wire_type: ClassVar[str] = "master_track"

    track: Track | None


@dataclass(frozen=True)
class TransportSnapshot(InboundEvent):
    """``{"type": "transport", "data": {"is_playing", "is_recording", "current_time"}}``."""

    wire_type: ClassVar[str] = "transport"

    transport: TransportState


@dataclass(frozen=True)
class TempoSnapshot(InboundEvent):
    """``{"type": "tempo", "data": 128}``."""

    wire_type: ClassVar[str] = "tempo"

    tempo: TempoState


@dataclass(frozen=True)
class TrackPropertyChanged(InboundEvent):
    """Base for single-field track updates (``track_id`` + ``value``)."""

    field: ClassVar[TrackField]

    track_id: int
    value: float | bool


@dataclass(frozen=True)
class TrackVolumeChanged(TrackPropertyChanged):
    wire_type: ClassVar[str] = "track_volume"
    field: ClassVar[TrackField] = TrackField.VOLUME
    value: float


@dataclass(frozen=True)
class TrackPanChanged(TrackPropertyChanged):
    wire_type: ClassVar[str] = "track_pan"
    field: ClassVar[TrackField] = TrackField.PAN
    value: float


@dataclass(frozen=True)
class TrackMuteChanged(TrackPropertyChanged):
    wire_type: ClassVar[str] = "track_mute"
    field: ClassVar[TrackField] = TrackField.MUTED
    value: bool


@dataclass(frozen=True)
class TrackSoloChanged(TrackPropertyChanged):
    wire_type: ClassVar[str] = "track_solo"
    field: ClassVar[TrackField] = TrackField.SOLOED
    value: bool


# ---------------------------------------------------------------------------
# Notifications (mirror → event bus → subscribers)
# ---------------------------------------------------------------------------


class Channel(str, Enum):
    """One event-bus channel per :class:`Notification` subclass."""

    CONNECTION_CHANGED = "connectionChanged"
    TRACKS_UPDATED = "tracksUpdated"
    MASTER_TRACK_UPDATED = "masterTrackUpdated"
    TRACK_UPDATED = "trackUpdated"
    TRANSPORT_UPDATED = "transportUpdated"
    TEMPO_UPDATED = "tempoUpdated"
    DEVICE_CONNECTED = "deviceConnected"
    DEVICE_DISCONNECTED = "deviceDisconnected"
    DEVICES_UPDATED = "devicesUpdated"
    MIDI_MESSAGE = "midiMessage"


@dataclass(frozen=True)
class Notification:
    """Base class for everything published on the event bus."""

    channel: ClassVar[Channel]


@dataclass(frozen=True)
class ConnectionChanged(Notification):
    channel: ClassVar[Channel] = Channel.CONNECTION_CHANGED

    state: ConnectionState

    @property
    def connected(self) -> bool:
        """Status-indicator view of :attr:`state`."""
        return self.state is ConnectionState.CONNECTED


@dataclass(frozen=True)
class TracksUpdated(Notification):
    channel: ClassVar[Channel] = Channel.TRACKS_UPDATED

    tracks: tuple[Track, ...]


@dataclass(frozen=True)
class MasterTrackUpdated(Notification):
    channel: ClassVar[Channel] = Channel.MASTER_TRACK_UPDATED

    track: Track | None


@dataclass(frozen=True)
class TrackUpdated(Notification):
    """One field of one track changed.  ``track`` is the post-update snapshot."""

    channel: ClassVar[Channel] = Channel.TRACK_UPDATED

    track: Track
    field: TrackField
    value: float | bool


@dataclass(frozen=True)
class TransportUpdated(Notification):
    channel: ClassVar[Channel] = Channel.TRANSPORT_UPDATED

    transport: TransportState


@dataclass(frozen=True)
class TempoUpdated(Notification):
    channel: ClassVar[Channel] = Channel.TEMPO_UPDATED

    tempo: TempoState


@dataclass(frozen=True)
class DeviceConnected(Notification):
    channel: ClassVar[Channel] = Channel.DEVICE_CONNECTED

    device: MidiDevice


@dataclass(frozen=True)
class DeviceDisconnected(Notification):
    channel: ClassVar[Channel] = Channel.DEVICE_DISCONNECTED

    device: MidiDevice


@dataclass(frozen=True)
class DevicesUpdated(Notification):
    channel: ClassVar[Channel] = Channel.DEVICES_UPDATED

    devices: tuple[MidiDevice, ...]


@dataclass(frozen=True)
class MidiMessageReceived(Notification):
    """A message arrived on a (simulated) MIDI input.

    ``message`` is a ``mido.Message``; typed loosely so this module stays
    free of third-party imports.
    """

    channel: ClassVar[Channel] = Channel.MIDI_MESSAGE

    device: MidiDevice
    message: object
    timestamp: float
