"""Tests for scripts/live_cli.py (argument handling and edge validation)."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import live_cli  # noqa: E402

from ableton_bridge.controller import LiveController  # noqa: E402


def _prepare(*argv: str):
    return live_cli._prepare_command(live_cli.parse_args(list(argv)))


class TestPrepareCommand:
    def test_volume_sends_validated_value(self, connected, apps) -> None:
        action = _prepare("volume", "2", "0.7")
        assert action(LiveController(connected)) is True
        assert apps.last.sent_frames[-1]["value"] == 0.7

    def test_mute_on_off(self, connected, apps) -> None:
        _prepare("mute", "1", "on")(LiveController(connected))
        assert apps.last.sent_frames[-1]["value"] is True

    def test_fire(self, connected, apps) -> None:
        _prepare("fire", "1", "3")(LiveController(connected))
        assert apps.last.sent_frames[-1] == {
            "type": "command",
            "action": "fire_clip",
            "track_id": 1,
            "clip_index": 3,
        }

    @pytest.mark.parametrize("argv", [
        ("tempo", "250"),
        ("volume", "1", "2.0"),
        ("pan", "1", "-3"),
        ("solo", "-1", "on"),
        ("stop-clip", "1", "-2"),
    ])
    def test_invalid_input_rejected_before_sending(self, argv: tuple[str, ...]) -> None:
        with pytest.raises(ValueError):
            _prepare(*argv)


class TestMain:
    def test_invalid_args_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(live_cli, "configure_logging", lambda level: None)
        assert live_cli.main(["tempo", "10"]) == 2

    def test_unreachable_bridge_exit_code(self, monkeypatch: pytest.MonkeyPatch, apps, threads, timers) -> None:
        from ableton_bridge import context

        monkeypatch.setattr(live_cli, "configure_logging", lambda level: None)
        monkeypatch.setattr(
            live_cli,
            "build_context",
            lambda config: context.build_context(
                config, app_factory=apps, thread_starter=threads, timer_factory=timers
            ),
        )
        assert live_cli.main(["--timeout", "0", "play"]) == 1
        assert apps.last.closed is True
