"""Tests for infrastructure/metrics.py.

Counters live in a module-level registry, so every assertion compares a
before/after delta instead of an absolute value.
"""

from __future__ import annotations

from core.ableton.types import ConnectionState
from infrastructure import metrics
from infrastructure.metrics import _REGISTRY, get_metrics_response


def _value(name: str, **labels: str) -> float:
    return _REGISTRY.get_sample_value(name, labels) or 0.0


class TestCounters:
    def test_frame_received_by_type(self) -> None:
        before = _value("live_frames_received_total", type="tracks")
        metrics.record_frame_received("tracks")
        assert _value("live_frames_received_total", type="tracks") == before + 1

    def test_unreadable_frame_labelled_invalid(self) -> None:
        before = _value("live_frames_received_total", type="invalid")
        metrics.record_frame_received(None)
        assert _value("live_frames_received_total", type="invalid") == before + 1

    def test_frame_sent(self) -> None:
        before = _value("live_frames_sent_total", type="set")
        metrics.record_frame_sent("set")
        assert _value("live_frames_sent_total", type="set") == before + 1

    def test_simple_counters(self) -> None:
        names = {
            "live_frames_dropped_total": metrics.record_frame_dropped,
            "live_decode_errors_total": metrics.record_decode_error,
            "live_reconnect_attempts_total": metrics.record_reconnect_attempt,
            "live_reconnects_exhausted_total": metrics.record_reconnect_exhausted,
        }
        for name, record in names.items():
            before = _value(name)
            record()
            assert _value(name) == before + 1, name


class TestGauge:
    def test_connection_state(self) -> None:
        metrics.record_connection_state(ConnectionState.CONNECTED)
        assert _value("live_connection_state") == 2
        metrics.record_connection_state(ConnectionState.DISCONNECTED)
        assert _value("live_connection_state") == 0


class TestExposition:
    def test_response(self) -> None:
        body, content_type = get_metrics_response()
        assert b"live_decode_errors_total" in body
        assert content_type.startswith("text/plain")
