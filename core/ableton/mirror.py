"""core/ableton/mirror.py — Local read model of the remote Live set.

The mirror is *authoritative by mirroring*: it holds exactly what the bridge
last reported and nothing else.  It is written only through :meth:`apply`
(one decoded inbound event at a time) and :meth:`clear` (on disconnect).
Local intent — a fader the user just moved — never touches it; the change
shows up only once Live echoes it back.

Apply rules
───────────
==========================  ==============================================
Event                       Effect / notification
==========================  ==============================================
TracksSnapshot              replace whole list → ``TracksUpdated``
MasterTrackSnapshot         replace master     → ``MasterTrackUpdated``
Track*Changed (known id)    replace one field  → ``TrackUpdated``
Track*Changed (unknown id)  no-op, DEBUG log   → ``None``
TransportSnapshot           replace            → ``TransportUpdated``
TempoSnapshot               replace            → ``TempoUpdated``
==========================  ==============================================

Thread safety
─────────────
The socket callbacks run on websocket-client's thread, so all reads and
writes go through one lock.  A reader never sees a half-applied event.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from core.ableton.events import (
    InboundEvent,
    MasterTrackSnapshot,
    MasterTrackUpdated,
    Notification,
    TempoSnapshot,
    TempoUpdated,
    TrackPropertyChanged,
    TracksSnapshot,
    TracksUpdated,
    TrackUpdated,
    TransportSnapshot,
    TransportUpdated,
)
from core.ableton.types import TempoState, Track, TransportState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorSnapshot:
    """Consistent point-in-time copy of everything the mirror holds."""

    tracks: tuple[Track, ...]
    master_track: Track | None
    transport: TransportState
    tempo: TempoState


class StateMirror:
    """Thread-safe cache of remote tracks, master track, transport and tempo.

    Example::

        mirror = StateMirror()
        note = mirror.apply(codec.decode(frame))
        if note is not None:
            bus.publish(note)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._tracks: tuple[Track, ...] = ()
        self._master_track: Track | None = None
        self._transport = TransportState()
        self._transport_received_at: float | None = None
        self._tempo = TempoState()

    # ── Read side ───────────────────────────────────────────────────────────

    @property
    def tracks(self) -> tuple[Track, ...]:
        with self._lock:
            return self._tracks

    @property
    def master_track(self) -> Track | None:
        with self._lock:
            return self._master_track

    @property
    def transport(self) -> TransportState:
        with self._lock:
            return self._transport

    @property
    def tempo(self) -> TempoState:
        with self._lock:
            return self._tempo

    def get_track(self, track_id: int) -> Track | None:
        """Return the track with ``track_id``, or ``None`` if not mirrored."""
        with self._lock:
            return self._find(track_id)[1]

    def snapshot(self) -> MirrorSnapshot:
        """Return every mirrored value, read under a single lock acquisition."""
        with self._lock:
            return MirrorSnapshot(
                tracks=self._tracks,
                master_track=self._master_track,
                transport=self._transport,
                tempo=self._tempo,
            )

    def extrapolated_time(self, now: float | None = None) -> float:
        """Playhead estimate for display between two transport snapshots.

        While playing, adds the wall time elapsed since the last snapshot to
        its ``current_time``.  Presentation only: the mirror is not modified.
        """
        with self._lock:
            transport = self._transport
            received_at = self._transport_received_at
        if not transport.is_playing or received_at is None:
            return transport.current_time
        if now is None:
            now = self._clock()
        return transport.current_time + max(0.0, now - received_at)

    # ── Write side ──────────────────────────────────────────────────────────

    def apply(self, event: InboundEvent) -> Notification | None:
        """Apply one decoded event atomically.

        Args:
            event: Output of :func:`core.ableton.codec.decode`.

        Returns:
            Exactly one notification describing the change, or ``None`` when
            a track-property event references an id the mirror has not seen.
        """
        with self._lock:
            if isinstance(event, TracksSnapshot):
                self._tracks = tuple(event.tracks)
                return TracksUpdated(tracks=self._tracks)

            if isinstance(event, TrackPropertyChanged):
                return self._apply_track_property(event)

            if isinstance(event, MasterTrackSnapshot):
                self._master_track = event.track
                return MasterTrackUpdated(track=event.track)

            if isinstance(event, TransportSnapshot):
                self._transport = event.transport
                self._transport_received_at = self._clock()
                return TransportUpdated(transport=event.transport)

            if isinstance(event, TempoSnapshot):
                self._tempo = event.tempo
                return TempoUpdated(tempo=event.tempo)

        raise TypeError(f"StateMirror cannot apply {type(event).__name__}")

    def clear(self) -> None:
        """Forget everything; the mirror does not outlive a connection."""
        with self._lock:
            self._tracks = ()
            self._master_track = None
            self._transport = TransportState()
            self._transport_received_at = None
            self._tempo = TempoState()

    # ── Internals (lock held) ───────────────────────────────────────────────

    def _find(self, track_id: int) -> tuple[int, Track | None]:
        for idx, track in enumerate(self._tracks):
            if track.id == track_id:
                return idx, track
        return -1, None

    def _apply_track_property(self, event: TrackPropertyChanged) -> Notification | None:
        idx, track = self._find(event.track_id)
        if track is None:
            logger.debug(
                "mirror: %s for unknown track id %d ignored",
                type(event).__name__,
                event.track_id,
            )
            return None

        updated = replace(track, **{event.field.value: event.value})
        self._tracks = self._tracks[:idx] + (updated,) + self._tracks[idx + 1 :]
        return TrackUpdated(track=updated, field=event.field, value=event.value)
