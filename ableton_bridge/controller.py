"""
ableton_bridge/controller.py — Command facade used by the control panels.

Translates user intent into outbound envelopes and hands them to the
connection supervisor.  The facade is deliberately thin:

- no range validation (the UI edge calls core/ableton/validation.py first);
- no optimistic update of the mirror: a moved fader only shows its new
  position once Live echoes the change back as ``track_volume``;
- every command returns the supervisor's ``send()`` result, so ``False``
  means "dropped while offline", not an error.
"""

from __future__ import annotations

import logging

from ableton_bridge.connection import ConnectionSupervisor
from core.ableton import messages
from core.ableton.mirror import StateMirror
from core.ableton.types import Track, TransportState

logger = logging.getLogger(__name__)


class LiveController:
    """Transport, mixer and clip commands for one Live connection.

    Args:
        supervisor: Connection that transmits the commands.
        mirror: Mirror read by the pass-through accessors.  Defaults to the
            supervisor's own mirror.
    """

    def __init__(self, supervisor: ConnectionSupervisor, mirror: StateMirror | None = None) -> None:
        self._supervisor = supervisor
        self._mirror = mirror if mirror is not None else supervisor.mirror

    # ── Transport ───────────────────────────────────────────────────────────

    def play(self) -> bool:
        return self._supervisor.send(messages.play())

    def stop(self) -> bool:
        return self._supervisor.send(messages.stop())

    def record(self) -> bool:
        return self._supervisor.send(messages.record())

    def set_bpm(self, bpm: int) -> bool:
        return self._supervisor.send(messages.set_tempo(bpm))

    # ── Mixer ───────────────────────────────────────────────────────────────

    def set_track_volume(self, track_id: int, volume: float) -> bool:
        return self._supervisor.send(messages.set_track_volume(track_id, volume))

    def set_track_pan(self, track_id: int, pan: float) -> bool:
        return self._supervisor.send(messages.set_track_pan(track_id, pan))

    def set_track_mute(self, track_id: int, muted: bool) -> bool:
        return self._supervisor.send(messages.set_track_mute(track_id, muted))

    def set_track_solo(self, track_id: int, soloed: bool) -> bool:
        return self._supervisor.send(messages.set_track_solo(track_id, soloed))

    # ── Clips ───────────────────────────────────────────────────────────────

    def trigger_clip(self, track_id: int, clip_index: int) -> bool:
        return self._supervisor.send(messages.fire_clip(track_id, clip_index))

    def stop_clip(self, track_id: int, clip_index: int) -> bool:
        return self._supervisor.send(messages.stop_clip(track_id, clip_index))

    # ── Read-only pass-throughs ─────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._supervisor.is_connected

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._mirror.tracks

    @property
    def master_track(self) -> Track | None:
        return self._mirror.master_track

    @property
    def play_state(self) -> TransportState:
        return self._mirror.transport
