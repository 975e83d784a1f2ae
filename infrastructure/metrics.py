"""Prometheus metrics for the Live bridge connection.

Puts protocol context in metrics so a dashboard shows how the bridge link
behaves during a session (reconnect storms, malformed frames, commands sent
while offline), not just that the process is up.

Metrics:
    live_frames_received_total        Counter of inbound frames by envelope type
    live_frames_sent_total            Counter of outbound frames by envelope type
    live_frames_dropped_total         Outbound frames dropped while not connected
    live_decode_errors_total          Inbound frames rejected by the codec
    live_reconnect_attempts_total     Automatic reconnects scheduled
    live_reconnects_exhausted_total   Times the reconnect ceiling was hit
    live_connection_state             Gauge: 0 disconnected, 1 connecting, 2 connected

All metrics live in a private ``CollectorRegistry`` so tests and multiple
contexts in one process never collide with the global default registry.

Usage::

    from infrastructure.metrics import record_frame_received, record_decode_error
"""

from __future__ import annotations

import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

from core.ableton.types import ConnectionState

logger = logging.getLogger(__name__)

_REGISTRY = CollectorRegistry()

frames_received_total = Counter(
    "live_frames_received_total",
    "Inbound bridge frames by envelope type",
    ["type"],
    registry=_REGISTRY,
)

frames_sent_total = Counter(
    "live_frames_sent_total",
    "Outbound bridge frames by envelope type",
    ["type"],
    registry=_REGISTRY,
)

frames_dropped_total = Counter(
    "live_frames_dropped_total",
    "Outbound frames dropped because the bridge was not connected",
    registry=_REGISTRY,
)

decode_errors_total = Counter(
    "live_decode_errors_total",
    "Inbound frames discarded as malformed",
    registry=_REGISTRY,
)

reconnect_attempts_total = Counter(
    "live_reconnect_attempts_total",
    "Automatic reconnects scheduled after a passive disconnect",
    registry=_REGISTRY,
)

reconnects_exhausted_total = Counter(
    "live_reconnects_exhausted_total",
    "Times the supervisor stopped retrying at the attempt ceiling",
    registry=_REGISTRY,
)

connection_state = Gauge(
    "live_connection_state",
    "Bridge connection state (0 disconnected, 1 connecting, 2 connected)",
    registry=_REGISTRY,
)

_STATE_VALUES: dict[ConnectionState, int] = {
    ConnectionState.DISCONNECTED: 0,
    ConnectionState.CONNECTING: 1,
    ConnectionState.CONNECTED: 2,
}


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def record_frame_received(frame_type: str | None) -> None:
    """Count one inbound frame; unreadable frames are labelled ``"invalid"``."""
    frames_received_total.labels(type=frame_type or "invalid").inc()


def record_frame_sent(frame_type: str) -> None:
    frames_sent_total.labels(type=frame_type).inc()


def record_frame_dropped() -> None:
    frames_dropped_total.inc()


def record_decode_error() -> None:
    decode_errors_total.inc()


def record_reconnect_attempt() -> None:
    reconnect_attempts_total.inc()


def record_reconnect_exhausted() -> None:
    reconnects_exhausted_total.inc()


def record_connection_state(state: ConnectionState) -> None:
    """Set the connection-state gauge.

    Args:
        state: New supervisor state.
    """
    connection_state.set(_STATE_VALUES[state])


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST
