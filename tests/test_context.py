"""Tests for ableton_bridge/context.py."""

from __future__ import annotations

from ableton_bridge.context import build_context
from core.ableton.events import Channel
from core.ableton.types import ConnectionState
from core.config import BridgeConfig


def _make_context(apps, threads, timers, **config):
    return build_context(
        BridgeConfig(**config),
        app_factory=apps,
        thread_starter=threads,
        timer_factory=timers,
    )


class TestWiring:
    def test_members_share_bus_and_mirror(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers)
        assert ctx.supervisor.bus is ctx.bus
        assert ctx.supervisor.mirror is ctx.mirror
        assert ctx.controller.tracks == ctx.mirror.tracks

    def test_default_config(self) -> None:
        ctx = build_context()
        assert ctx.config.port == 9001

    def test_separate_contexts_are_independent(self, apps, threads, timers) -> None:
        a = _make_context(apps, threads, timers)
        b = _make_context(apps, threads, timers)
        assert a.bus is not b.bus
        assert a.mirror is not b.mirror


class TestStart:
    def test_start_initialises_midi(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers)
        got: list = []
        ctx.bus.subscribe(Channel.DEVICES_UPDATED, got.append)
        ctx.start()
        assert len(got) == 1
        assert len(ctx.midi.get_devices()) == 3

    def test_no_auto_connect_by_default(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers)
        ctx.start()
        assert timers.timers == []
        assert apps.apps == []

    def test_auto_connect_after_delay(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers, auto_connect=True, auto_connect_delay_ms=2000)
        ctx.start()
        assert timers.last.interval == 2.0
        assert apps.apps == []
        timers.last.fire()
        assert ctx.supervisor.state is ConnectionState.CONNECTING


class TestClose:
    def test_close_cancels_auto_connect(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers, auto_connect=True)
        ctx.start()
        ctx.close()
        assert timers.last.cancelled is True
        assert apps.apps == []

    def test_close_disconnects_and_disposes_midi(self, apps, threads, timers) -> None:
        ctx = _make_context(apps, threads, timers)
        ctx.start()
        ctx.supervisor.connect()
        apps.last.fire_open()
        ctx.close()
        assert ctx.supervisor.state is ConnectionState.DISCONNECTED
        assert apps.last.closed is True
        assert ctx.midi.get_devices() == ()

    def test_context_manager(self, apps, threads, timers) -> None:
        with _make_context(apps, threads, timers) as ctx:
            assert len(ctx.midi.get_devices()) == 3
        assert ctx.midi.get_devices() == ()
