"""Slack timestamp markers.

Markers are decimal strings such as ``"1735579200.123456"``. They are only
ever compared as decimals, never through floats, so two messages in the same
second keep their order.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation


def format_marker(epoch_seconds: float) -> str:
    """Return a marker for a wall-clock time, with six fractional digits."""

    return f"{epoch_seconds:.6f}"


def marker_value(marker: str) -> Decimal:
    try:
        return Decimal(marker)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid timestamp marker: {marker!r}") from exc


def later_marker(current: str | None, candidate: str) -> str:
    """Return whichever of the two markers is later; ``candidate`` wins ties."""

    if current is None or marker_value(candidate) >= marker_value(current):
        return candidate
    return current
