"""Bounded fixed-delay reconnect policy for the Live bridge socket.

The connection supervisor asks this policy, every time the socket drops
without an explicit ``disconnect()``, whether another attempt is allowed and
how long to wait before it.

    attempts < max_attempts  →  attempts += 1, wait ``delay_seconds``
    attempts == max_attempts →  exhausted: stay disconnected

The counter goes back to zero only on a *successful* open (``reset()``).
An explicit ``connect()`` from the UI does not reset it, so a bridge that is
still down after exhaustion is tried once per user action and no more.

Delay is fixed, not exponential: the bridge is a local process that is either
running or not, so backing off buys nothing.

Usage::

    policy = ReconnectPolicy(max_attempts=5, delay_seconds=3.0)
    delay = policy.next_delay()
    if delay is None:
        ...  # exhausted
    else:
        schedule(delay, reconnect)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ReconnectStats:
    """Runtime statistics for a reconnect policy instance."""

    scheduled: int = 0
    exhausted: int = 0
    resets: int = 0
    last_exhausted_at: float | None = None


class ReconnectPolicy:
    """Attempt counter with a ceiling and a fixed delay.

    Not thread-safe on its own; the supervisor calls it with its lock held.

    Args:
        max_attempts: Automatic reconnects allowed between two successful
            opens (default: 5). ``0`` disables automatic reconnection.
        delay_seconds: Wait before each automatic reconnect (default: 3.0).
    """

    def __init__(self, max_attempts: int = 5, delay_seconds: float = 3.0) -> None:
        if max_attempts < 0:
            raise ValueError(f"max_attempts must be non-negative, got {max_attempts}")
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be non-negative, got {delay_seconds}")
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self._attempts = 0
        self.stats = ReconnectStats()

    @property
    def attempts(self) -> int:
        """Automatic reconnects scheduled since the last successful open."""
        return self._attempts

    @property
    def exhausted(self) -> bool:
        return self._attempts >= self.max_attempts

    def next_delay(self) -> float | None:
        """Consume one attempt and return the delay, or ``None`` when exhausted."""
        if self.exhausted:
            self.stats.exhausted += 1
            self.stats.last_exhausted_at = time.time()
            logger.warning(
                "reconnect: giving up after %d/%d attempts — call connect() to retry",
                self._attempts,
                self.max_attempts,
            )
            return None

        self._attempts += 1
        self.stats.scheduled += 1
        logger.info(
            "reconnect: attempt %d/%d in %.1fs",
            self._attempts,
            self.max_attempts,
            self.delay_seconds,
        )
        return self.delay_seconds

    def reset(self) -> None:
        """Zero the counter after a successful open."""
        if self._attempts:
            logger.info("reconnect: connected after %d attempt(s), counter reset", self._attempts)
        self._attempts = 0
        self.stats.resets += 1

    def status(self) -> dict[str, Any]:
        """Return a snapshot of the policy state.

        Returns:
            Dict with attempts, ceiling, delay and stats.
        """
        return {
            "attempts": self._attempts,
            "max_attempts": self.max_attempts,
            "delay_seconds": self.delay_seconds,
            "exhausted": self.exhausted,
            "stats": {
                "scheduled": self.stats.scheduled,
                "exhausted": self.stats.exhausted,
                "resets": self.stats.resets,
            },
        }
