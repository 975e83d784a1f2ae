"""ableton_bridge/connection.py — Supervised WebSocket link to the Live bridge.

This module is the I/O boundary between the control panels and Ableton Live.
All socket calls live here; core/ stays pure.

Architecture
────────────
::

    Ableton Live
        └── companion bridge (port 9001)
                │   WebSocket (ws://localhost:9001), one JSON object per frame
                ▼
    ableton_bridge/connection.py (this module)
        │
        ├── inbound:  frame → codec.decode → StateMirror.apply → EventBus.publish
        └── outbound: OutboundMessage → codec.encode → socket (or dropped)

Connection model
────────────────
``ConnectionSupervisor`` keeps one *persistent* socket, unlike a
stateless-per-call client: Live pushes transport and mixer changes at any
time, so the link has to stay open.  websocket-client's ``WebSocketApp``
runs its read loop on a daemon thread and calls back into the supervisor::

    DISCONNECTED ──connect()──→ CONNECTING ──on_open──→ CONNECTED
         ↑                          │                       │
         └─────────on_close / on_error (passive)────────────┘

Every transition is published as ``ConnectionChanged``.

Reconnect
─────────
A *passive* drop (Live quit, bridge crashed, refused connection) schedules
one reconnect after a fixed delay, as long as the
:class:`~infrastructure.reconnect.ReconnectPolicy` ceiling is not reached.
An explicit :meth:`ConnectionSupervisor.disconnect` cancels any pending
timer and never reconnects.  Each socket carries a *generation* number;
callbacks and timers from a superseded generation are ignored, which is
what keeps a late ``on_close`` from an explicitly closed socket from
starting the reconnect cycle.

Outbound while offline
──────────────────────
``send()`` drops messages when not CONNECTED.  Nothing is queued, so a
command issued while Live is unreachable is never replayed later.

Error handling
──────────────
Socket errors never propagate to callers.  They are logged, kept in
:attr:`ConnectionSupervisor.last_error` for a one-shot user message, and
surface as a ``ConnectionChanged(DISCONNECTED)`` notification.  Malformed
inbound frames are logged and discarded without touching the connection.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

import websocket

from core.ableton import codec
from core.ableton.codec import DecodeError
from core.ableton.events import ConnectionChanged
from core.ableton.messages import OutboundMessage, initial_data_requests
from core.ableton.mirror import StateMirror
from core.ableton.types import ConnectionState
from core.config import DEFAULT_CONFIG, BridgeConfig
from core.event_bus import EventBus
from infrastructure import metrics
from infrastructure.reconnect import ReconnectPolicy

logger = logging.getLogger(__name__)

AppFactory = Callable[..., Any]
"""Builds a ``websocket.WebSocketApp``-compatible object: ``(url, on_open=…, …)``."""

ThreadStarter = Callable[[Callable[[], None], str], None]
"""Runs ``target`` on a background thread named ``name``."""

TimerFactory = Callable[[float, Callable[[], None]], Any]
"""Builds a ``threading.Timer``-compatible object (``start()`` / ``cancel()``)."""

# Errors websocket-client raises from send()/close() on a dead socket.
_SOCKET_ERRORS: tuple[type[Exception], ...] = (websocket.WebSocketException, OSError)


def _start_daemon_thread(target: Callable[[], None], name: str) -> None:
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()


class ConnectionSupervisor:
    """Owns the bridge socket, its state machine and the reconnect policy.

    Usage::

        bus = EventBus()
        mirror = StateMirror()
        supervisor = ConnectionSupervisor(BridgeConfig(port=9001), mirror, bus)
        supervisor.connect()
        ...
        supervisor.send(messages.play())
        supervisor.disconnect()

    Args:
        config: Host, port and reconnect settings.
        mirror: State mirror fed by inbound frames; cleared on disconnect.
        bus: Event bus that receives ``ConnectionChanged`` and every
            notification returned by the mirror.
        app_factory: WebSocketApp constructor (injectable for tests).
        thread_starter: Runs the socket loop in the background.
        timer_factory: Builds the reconnect timer.
    """

    def __init__(
        self,
        config: BridgeConfig = DEFAULT_CONFIG,
        mirror: StateMirror | None = None,
        bus: EventBus | None = None,
        *,
        app_factory: AppFactory = websocket.WebSocketApp,
        thread_starter: ThreadStarter = _start_daemon_thread,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.config = config
        self.mirror = mirror if mirror is not None else StateMirror()
        self.bus = bus if bus is not None else EventBus()
        self._app_factory = app_factory
        self._thread_starter = thread_starter
        self._timer_factory = timer_factory

        self._policy = ReconnectPolicy(
            max_attempts=config.max_reconnect_attempts,
            delay_seconds=config.reconnect_delay_seconds,
        )
        self._lock = threading.RLock()
        self._state = ConnectionState.DISCONNECTED
        self._generation = 0
        self._app: Any = None
        self._reconnect_timer: Any = None
        self._last_error: str | None = None

    # ── Read side ───────────────────────────────────────────────────────────

    @property
    def url(self) -> str:
        return self.config.ws_url

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def attempts(self) -> int:
        """Automatic reconnects scheduled since the last successful open."""
        with self._lock:
            return self._policy.attempts

    @property
    def reconnect_pending(self) -> bool:
        with self._lock:
            return self._reconnect_timer is not None

    @property
    def last_error(self) -> str | None:
        """Text of the most recent transport error, for a one-shot user message."""
        with self._lock:
            return self._last_error

    def status(self) -> dict[str, Any]:
        """Return a snapshot of the connection status.

        Returns:
            Dict with state, url, reconnect policy state and last error.
        """
        with self._lock:
            return {
                "state": self._state.value,
                "url": self.url,
                "reconnect_pending": self._reconnect_timer is not None,
                "last_error": self._last_error,
                "reconnect": self._policy.status(),
            }

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def connect(self) -> bool:
        """Start a connection attempt.

        A no-op when already CONNECTING or CONNECTED.  Cancels a pending
        automatic reconnect, since this call supersedes it.  Does not reset
        the reconnect counter; only a successful open does.

        Returns:
            ``True`` once an attempt is in flight (the open itself completes
            asynchronously and is reported through ``ConnectionChanged``).
        """
        with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                logger.debug("connect() ignored: already %s", self._state.value)
                return True
            self._cancel_reconnect_timer()
        return self._open()

    def disconnect(self) -> None:
        """Close the socket and stay disconnected.

        Deterministic: on return the state is DISCONNECTED, the mirror is
        empty and no reconnect is pending or will be scheduled for the
        closed socket.
        """
        with self._lock:
            self._cancel_reconnect_timer()
            self._generation += 1
            app, self._app = self._app, None
            previous = self._state
            self._state = ConnectionState.DISCONNECTED
            self.mirror.clear()

        if app is not None:
            try:
                app.close()
            except _SOCKET_ERRORS as exc:
                logger.debug("error while closing bridge socket: %s", exc)

        if previous is not ConnectionState.DISCONNECTED:
            logger.info("Disconnected from Live bridge at %s", self.url)
            self._announce(ConnectionState.DISCONNECTED)

    # ── Outbound ────────────────────────────────────────────────────────────

    def send(self, message: OutboundMessage) -> bool:
        """Transmit ``message`` if connected; otherwise drop it.

        Returns:
            ``True`` if the frame was handed to the socket, ``False`` if it
            was dropped (not connected) or the socket rejected it.
        """
        payload = codec.encode(message)
        with self._lock:
            app = self._app if self._state is ConnectionState.CONNECTED else None
            if app is None:
                logger.debug("dropped %s while %s: %s", message.type, self._state.value, payload)
                metrics.record_frame_dropped()
                return False

        # Outside the lock: inbound frames keep flowing during a slow write.
        try:
            app.send(payload)
        except _SOCKET_ERRORS as exc:
            with self._lock:
                if self._app is app:
                    self._last_error = str(exc)
            logger.warning("send to Live bridge failed: %s", exc)
            return False

        metrics.record_frame_sent(message.type)
        return True

    # ── Internals ───────────────────────────────────────────────────────────

    def _open(self) -> bool:
        with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                return True
            self._generation += 1
            generation = self._generation
            app = self._app_factory(
                self.url,
                on_open=lambda _ws: self._handle_open(generation),
                on_message=lambda _ws, message: self._handle_message(generation, message),
                on_error=lambda _ws, error: self._handle_error(generation, error),
                on_close=lambda _ws, code, reason: self._handle_close(generation, code, reason),
            )
            self._app = app
            self._state = ConnectionState.CONNECTING

        logger.info("Connecting to Live bridge at %s", self.url)
        self._announce(ConnectionState.CONNECTING)

        try:
            self._thread_starter(lambda: self._run(app, generation), f"live-bridge-{generation}")
        except RuntimeError as exc:
            # Thread creation failed; treat like a refused connection.
            self._handle_error(generation, exc)
            self._handle_close(generation, None, str(exc))
        return True

    def _run(self, app: Any, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
        try:
            app.run_forever()
        except _SOCKET_ERRORS as exc:
            self._handle_error(generation, exc)
        # run_forever normally reports through on_close; this covers loops
        # that return without it and is a no-op otherwise.
        self._handle_close(generation, None, "socket loop exited")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _handle_open(self, generation: int) -> None:
        with self._lock:
            if not self._is_current(generation) or self._state is not ConnectionState.CONNECTING:
                return
            self._state = ConnectionState.CONNECTED
            self._last_error = None
            self._policy.reset()

        logger.info("Connected to Live bridge at %s", self.url)
        self._announce(ConnectionState.CONNECTED)

        for request in initial_data_requests():
            self.send(request)

    def _handle_message(self, generation: int, raw: str | bytes) -> None:
        with self._lock:
            if not self._is_current(generation) or self._state is not ConnectionState.CONNECTED:
                return
            try:
                event = codec.decode(raw)
            except DecodeError as exc:
                metrics.record_frame_received(exc.frame_type)
                metrics.record_decode_error()
                logger.warning("discarding malformed frame from Live bridge: %s", exc)
                return

            if event is None:
                frame_type = codec.frame_type(raw)
                metrics.record_frame_received(frame_type)
                logger.debug("ignoring %r frame from Live bridge", frame_type)
                return

            metrics.record_frame_received(event.wire_type)
            notification = self.mirror.apply(event)

        if notification is not None:
            self.bus.publish(notification)

    def _handle_error(self, generation: int, error: object) -> None:
        with self._lock:
            if not self._is_current(generation):
                return
            self._last_error = str(error)
        logger.warning("Live bridge connection error: %s", error)

    def _handle_close(self, generation: int, code: int | None, reason: str | None) -> None:
        with self._lock:
            if not self._is_current(generation) or self._state is ConnectionState.DISCONNECTED:
                return
            self._state = ConnectionState.DISCONNECTED
            self._app = None
            self.mirror.clear()
            delay = self._policy.next_delay()
            if delay is None:
                metrics.record_reconnect_exhausted()
            else:
                metrics.record_reconnect_attempt()
                self._schedule_reconnect(delay, generation)

        logger.info("Disconnected from Live bridge (code=%s, reason=%r)", code, reason)
        self._announce(ConnectionState.DISCONNECTED)

    def _schedule_reconnect(self, delay: float, generation: int) -> None:
        """Arm the reconnect timer.  Lock held."""
        timer = self._timer_factory(delay, lambda: self._handle_reconnect_timer(generation))
        timer.daemon = True
        self._reconnect_timer = timer
        timer.start()

    def _cancel_reconnect_timer(self) -> None:
        """Lock held."""
        timer, self._reconnect_timer = self._reconnect_timer, None
        if timer is not None:
            timer.cancel()
            logger.debug("pending reconnect cancelled")

    def _handle_reconnect_timer(self, generation: int) -> None:
        with self._lock:
            if (
                not self._is_current(generation)
                or self._state is not ConnectionState.DISCONNECTED
                or self._reconnect_timer is None
            ):
                return
            self._reconnect_timer = None
            attempt, ceiling = self._policy.attempts, self._policy.max_attempts

        logger.info("Attempting to reconnect to Live bridge (%d/%d)", attempt, ceiling)
        self._open()

    def _announce(self, state: ConnectionState) -> None:
        metrics.record_connection_state(state)
        self.bus.publish(ConnectionChanged(state=state))
