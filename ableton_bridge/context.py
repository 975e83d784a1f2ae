"""
ableton_bridge/context.py — One explicit object owning a Live session's parts.

There are no module-level singletons: an entry point builds a
:class:`LiveContext` once and passes it (or its members) to whatever needs
the bus, the mirror or the controller.

Usage::

    ctx = build_context(BridgeConfig.from_env())
    ctx.start()
    try:
        ...
    finally:
        ctx.close()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ableton_bridge.connection import ConnectionSupervisor, TimerFactory
from ableton_bridge.controller import LiveController
from ableton_bridge.midi import SimulatedMidiController
from core.ableton.mirror import StateMirror
from core.config import DEFAULT_CONFIG, BridgeConfig
from core.event_bus import EventBus

logger = logging.getLogger(__name__)


@dataclass
class LiveContext:
    config: BridgeConfig
    bus: EventBus
    mirror: StateMirror
    supervisor: ConnectionSupervisor
    controller: LiveController
    midi: SimulatedMidiController
    timer_factory: TimerFactory = threading.Timer
    _auto_connect_timer: Any = field(default=None, repr=False)

    def start(self) -> None:
        """Register the MIDI ports and arm auto-connect if configured."""
        self.midi.initialize()
        if not self.config.auto_connect:
            return
        delay = self.config.auto_connect_delay_seconds
        logger.info("Auto-connecting to Live bridge in %.1fs", delay)
        timer = self.timer_factory(delay, self.supervisor.connect)
        timer.daemon = True
        self._auto_connect_timer = timer
        timer.start()

    def close(self) -> None:
        """Cancel auto-connect, disconnect and release the MIDI ports."""
        timer, self._auto_connect_timer = self._auto_connect_timer, None
        if timer is not None:
            timer.cancel()
        self.supervisor.disconnect()
        self.midi.dispose()

    def __enter__(self) -> LiveContext:
        self.start()
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def build_context(config: BridgeConfig | None = None, **supervisor_kwargs: Any) -> LiveContext:
    """Wire bus, mirror, supervisor, controller and MIDI for ``config``.

    Args:
        config: Connection settings (default: :data:`DEFAULT_CONFIG`).
        **supervisor_kwargs: Factories forwarded to :class:`ConnectionSupervisor`
            (``app_factory``, ``thread_starter``, ``timer_factory``); the timer
            factory is also used for auto-connect.
    """
    config = config if config is not None else DEFAULT_CONFIG
    bus = EventBus()
    mirror = StateMirror()
    supervisor = ConnectionSupervisor(config, mirror, bus, **supervisor_kwargs)
    return LiveContext(
        config=config,
        bus=bus,
        mirror=mirror,
        supervisor=supervisor,
        controller=LiveController(supervisor, mirror),
        midi=SimulatedMidiController(bus),
        timer_factory=supervisor_kwargs.get("timer_factory", threading.Timer),
    )
