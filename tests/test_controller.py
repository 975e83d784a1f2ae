"""Tests for ableton_bridge/controller.py.

Covers:
- Each command produces the right envelope and returns send()'s result
- Values pass through unvalidated
- No optimistic update: the mirror only changes when Live echoes back
- Read-only pass-throughs
"""

from __future__ import annotations

import pytest

from ableton_bridge.controller import LiveController
from core.ableton.types import TransportState

_TRACKS_FRAME = {"type": "tracks", "data": [{"id": 1, "name": "Drums", "volume": 0.8}]}


@pytest.fixture()
def controller(connected) -> LiveController:
    return LiveController(connected)


class TestCommands:
    @pytest.mark.parametrize("call,expected", [
        (lambda c: c.play(), {"type": "command", "action": "play"}),
        (lambda c: c.stop(), {"type": "command", "action": "stop"}),
        (lambda c: c.record(), {"type": "command", "action": "record"}),
        (lambda c: c.set_bpm(128), {"type": "set", "target": "song", "property": "tempo", "value": 128}),
        (
            lambda c: c.set_track_volume(1, 0.5),
            {"type": "set", "target": "track", "track_id": 1, "property": "volume", "value": 0.5},
        ),
        (
            lambda c: c.set_track_pan(1, -0.25),
            {"type": "set", "target": "track", "track_id": 1, "property": "pan", "value": -0.25},
        ),
        (
            lambda c: c.set_track_mute(1, True),
            {"type": "set", "target": "track", "track_id": 1, "property": "mute", "value": True},
        ),
        (
            lambda c: c.set_track_solo(1, False),
            {"type": "set", "target": "track", "track_id": 1, "property": "solo", "value": False},
        ),
        (
            lambda c: c.trigger_clip(2, 0),
            {"type": "command", "action": "fire_clip", "track_id": 2, "clip_index": 0},
        ),
        (
            lambda c: c.stop_clip(2, 1),
            {"type": "command", "action": "stop_clip", "track_id": 2, "clip_index": 1},
        ),
    ])
    def test_envelope(self, controller: LiveController, apps, call, expected: dict) -> None:
        assert call(controller) is True
        assert apps.last.sent_frames[-1] == expected

    def test_out_of_range_values_passed_through(self, controller: LiveController, apps) -> None:
        controller.set_bpm(999)
        controller.set_track_volume(1, 1.5)
        frames = apps.last.sent_frames
        assert frames[-2]["value"] == 999
        assert frames[-1]["value"] == 1.5

    def test_returns_false_when_disconnected(self, supervisor, apps) -> None:
        controller = LiveController(supervisor)
        assert controller.play() is False
        assert controller.set_track_volume(1, 0.2) is False
        assert apps.apps == []


class TestNoOptimisticUpdate:
    def test_volume_change_waits_for_echo(self, controller: LiveController, connected, apps) -> None:
        apps.last.fire_message(_TRACKS_FRAME)
        controller.set_track_volume(1, 0.2)
        assert connected.mirror.get_track(1).volume == 0.8

        apps.last.fire_message({"type": "track_volume", "track_id": 1, "value": 0.2})
        assert connected.mirror.get_track(1).volume == 0.2

    def test_play_does_not_touch_transport(self, controller: LiveController) -> None:
        controller.play()
        assert controller.play_state == TransportState()


class TestPassThroughs:
    def test_is_connected(self, controller: LiveController, connected) -> None:
        assert controller.is_connected is True
        connected.disconnect()
        assert controller.is_connected is False

    def test_tracks_and_master(self, controller: LiveController, apps) -> None:
        apps.last.fire_message(_TRACKS_FRAME)
        apps.last.fire_message({"type": "master_track", "data": {"id": 0, "name": "Master"}})
        assert [t.name for t in controller.tracks] == ["Drums"]
        assert controller.master_track.name == "Master"

    def test_play_state(self, controller: LiveController, apps) -> None:
        apps.last.fire_message(
            {"type": "transport", "data": {"is_playing": True, "is_recording": False, "current_time": 2.0}}
        )
        assert controller.play_state.is_playing is True
