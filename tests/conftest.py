"""
Shared fixtures for the test suite.

The supervisor never touches a real socket here: ``FakeWebSocketApp``
stands in for ``websocket.WebSocketApp`` and exposes ``fire_*`` helpers that
invoke the callbacks the supervisor registered, the thread starter only
records the socket loop, and ``ManualTimer`` replaces ``threading.Timer``
so reconnects happen when a test says so.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from ableton_bridge.connection import ConnectionSupervisor
from core.ableton.events import Channel, Notification
from core.ableton.mirror import StateMirror
from core.config import BridgeConfig
from core.event_bus import EventBus

# ---------------------------------------------------------------------------
# Fake websocket-client app
# ---------------------------------------------------------------------------


class FakeWebSocketApp:
    """Records outbound frames; tests drive the callbacks by hand."""

    def __init__(
        self,
        url: str,
        on_open: Callable[..., None] | None = None,
        on_message: Callable[..., None] | None = None,
        on_error: Callable[..., None] | None = None,
        on_close: Callable[..., None] | None = None,
    ) -> None:
        self.url = url
        self.on_open = on_open
        self.on_message = on_message
        self.on_error = on_error
        self.on_close = on_close
        self.sent: list[bytes] = []
        self.closed = False
        self.run_count = 0
        self.send_error: Exception | None = None
        self.run_error: Exception | None = None

    # websocket-client surface
    def run_forever(self) -> None:
        self.run_count += 1
        if self.run_error is not None:
            raise self.run_error

    def send(self, data: bytes) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    def close(self) -> None:
        self.closed = True

    # test helpers
    def fire_open(self) -> None:
        self.on_open(self)

    def fire_message(self, frame: dict[str, Any] | str) -> None:
        raw = frame if isinstance(frame, str) else json.dumps(frame)
        self.on_message(self, raw)

    def fire_error(self, error: Exception) -> None:
        self.on_error(self, error)

    def fire_close(self, code: int | None = 1006, reason: str | None = "") -> None:
        self.on_close(self, code, reason)

    @property
    def sent_frames(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]


class FakeAppFactory:
    """Callable passed as ``app_factory``; keeps every app it built."""

    def __init__(self) -> None:
        self.apps: list[FakeWebSocketApp] = []

    def __call__(self, url: str, **callbacks: Any) -> FakeWebSocketApp:
        app = FakeWebSocketApp(url, **callbacks)
        self.apps.append(app)
        return app

    @property
    def last(self) -> FakeWebSocketApp:
        return self.apps[-1]


# ---------------------------------------------------------------------------
# Threads and timers
# ---------------------------------------------------------------------------


class RecordingThreadStarter:
    """Stores socket-loop targets instead of running them."""

    def __init__(self) -> None:
        self.started: list[tuple[str, Callable[[], None]]] = []

    def __call__(self, target: Callable[[], None], name: str) -> None:
        self.started.append((name, target))

    def run_last(self) -> None:
        """Run the most recent loop to completion (its socket 'exits')."""
        self.started[-1][1]()

    def run(self, index: int) -> None:
        self.started[index][1]()


class ManualTimer:
    """``threading.Timer`` look-alike that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self, force: bool = False) -> None:
        """Run the callback; ``force`` simulates a cancel that lost the race."""
        if self.cancelled and not force:
            return
        self.fired = True
        self.function()


class ManualTimerFactory:
    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]


# ---------------------------------------------------------------------------
# Bus recorder
# ---------------------------------------------------------------------------


class BusRecorder:
    """Subscribes to every channel and keeps notifications in arrival order."""

    def __init__(self, bus: EventBus) -> None:
        self.received: list[Notification] = []
        self._subs = [bus.subscribe(ch, self.received.append) for ch in Channel]

    def of(self, channel: Channel) -> list[Notification]:
        return [n for n in self.received if n.channel is channel]

    def clear(self) -> None:
        self.received.clear()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def mirror() -> StateMirror:
    return StateMirror()


@pytest.fixture()
def recorder(bus: EventBus) -> BusRecorder:
    return BusRecorder(bus)


@pytest.fixture()
def apps() -> FakeAppFactory:
    return FakeAppFactory()


@pytest.fixture()
def threads() -> RecordingThreadStarter:
    return RecordingThreadStarter()


@pytest.fixture()
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture()
def make_supervisor(
    mirror: StateMirror,
    bus: EventBus,
    apps: FakeAppFactory,
    threads: RecordingThreadStarter,
    timers: ManualTimerFactory,
) -> Callable[..., ConnectionSupervisor]:
    """Factory: ``make_supervisor(max_reconnect_attempts=2)`` → wired supervisor."""

    def _make(**config_overrides: Any) -> ConnectionSupervisor:
        config = BridgeConfig(**config_overrides)
        return ConnectionSupervisor(
            config,
            mirror,
            bus,
            app_factory=apps,
            thread_starter=threads,
            timer_factory=timers,
        )

    return _make


@pytest.fixture()
def supervisor(make_supervisor: Callable[..., ConnectionSupervisor]) -> ConnectionSupervisor:
    return make_supervisor()


@pytest.fixture()
def connected(supervisor: ConnectionSupervisor, apps: FakeAppFactory) -> ConnectionSupervisor:
    """A supervisor that has completed its first open."""
    supervisor.connect()
    apps.last.fire_open()
    return supervisor
