"""core/ableton/validation.py — Input checks for the UI edge.

The command facade passes values through untouched; panels and the CLI call
these helpers before they build a command.  Each returns the normalised
value or raises ``ValueError`` with a user-facing message.
"""

from __future__ import annotations

MIN_BPM: int = 60
MAX_BPM: int = 200


def _whole_number(raw: int | float | str, message: str) -> int:
    # Fractions are refused rather than truncated: "120.9" is not 120 BPM.
    if isinstance(raw, bool):
        raise ValueError(f"{message}, got {raw!r}")
    try:
        value = float(raw) if isinstance(raw, str) else raw
        whole = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"{message}, got {raw!r}") from exc
    if whole != value:
        raise ValueError(f"{message}, got {raw!r}")
    return whole


def validate_bpm(bpm: int | float | str) -> int:
    """Parse and range-check a tempo in whole BPM."""
    value = _whole_number(bpm, "tempo must be a whole number of BPM")
    if not MIN_BPM <= value <= MAX_BPM:
        raise ValueError(f"tempo must be between {MIN_BPM} and {MAX_BPM} BPM, got {value}")
    return value


def _bounded_float(raw: float | str, low: float, high: float, what: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{what} must be a number, got {raw!r}") from exc
    if not low <= value <= high:
        raise ValueError(f"{what} must be between {low} and {high}, got {value}")
    return value


def validate_volume(volume: float | str) -> float:
    """Fader position in [0.0, 1.0]."""
    return _bounded_float(volume, 0.0, 1.0, "volume")


def validate_pan(pan: float | str) -> float:
    """Pan position in [-1.0, 1.0]."""
    return _bounded_float(pan, -1.0, 1.0, "pan")


def validate_track_id(track_id: int | str) -> int:
    value = _whole_number(track_id, "track id must be an integer")
    if value < 0:
        raise ValueError(f"track id must be non-negative, got {value}")
    return value
