"""core/event_bus.py — Typed publish/subscribe fan-out for mirror changes.

Panels subscribe to the channel they care about and never see the
connection supervisor.  The set of channels is closed: one
:class:`~core.ableton.events.Channel` member per notification class, so a
typo in a channel name is an ``AttributeError`` at import time rather than
a handler that silently never fires.

Delivery semantics
──────────────────
- Synchronous, on the thread that called :meth:`EventBus.publish`.
- Insertion order per channel.
- A handler that raises is logged and skipped; later handlers still run.
- :meth:`Subscription.dispose` drops the bus's reference to the handler;
  a disposed handler is never called again, even by a publish already in
  progress on another thread.

Usage::

    bus = EventBus()
    sub = bus.subscribe(Channel.TRACK_UPDATED, lambda n: redraw(n.track))
    ...
    sub.dispose()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from core.ableton.events import Channel, Notification

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`.

    Also a context manager: the handler is removed on exit.
    """

    def __init__(self, bus: EventBus, channel: Channel, handler: Handler) -> None:
        self._bus: EventBus | None = bus
        self.channel = channel
        self._handler: Handler | None = handler

    @property
    def active(self) -> bool:
        return self._handler is not None

    def dispose(self) -> None:
        """Unsubscribe.  Safe to call more than once."""
        bus = self._bus
        if bus is None:
            return
        bus._remove(self)
        self._bus = None
        self._handler = None

    def _deliver(self, notification: Notification) -> bool:
        handler = self._handler
        if handler is None:
            return False
        handler(notification)
        return True

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *_: object) -> None:
        self.dispose()


class EventBus:
    """Thread-safe registry of handlers, one list per :class:`Channel`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: dict[Channel, list[Subscription]] = {ch: [] for ch in Channel}

    def subscribe(self, channel: Channel, handler: Handler) -> Subscription:
        """Register ``handler`` for every notification published on ``channel``.

        Args:
            channel: Channel to listen on.
            handler: Called with the notification instance.

        Returns:
            A :class:`Subscription`; call ``dispose()`` to stop receiving.
        """
        sub = Subscription(self, Channel(channel), handler)
        with self._lock:
            self._subscriptions[sub.channel].append(sub)
        return sub

    def publish(self, notification: Notification) -> int:
        """Deliver ``notification`` to the subscribers of its channel.

        Returns:
            Number of handlers that completed without raising.
        """
        channel = notification.channel
        with self._lock:
            subs = list(self._subscriptions[channel])

        delivered = 0
        for sub in subs:
            try:
                called = sub._deliver(notification)
            except Exception:
                logger.exception(
                    "event_bus: handler on %s failed for %s",
                    channel.value,
                    type(notification).__name__,
                )
                continue
            if called:
                delivered += 1
        return delivered

    def subscriber_count(self, channel: Channel) -> int:
        with self._lock:
            return len(self._subscriptions[channel])

    def clear(self) -> None:
        """Dispose every subscription on every channel."""
        with self._lock:
            subs = [s for ch_subs in self._subscriptions.values() for s in ch_subs]
        for sub in subs:
            sub.dispose()

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            ch_subs = self._subscriptions[sub.channel]
            if sub in ch_subs:
                ch_subs.remove(sub)
