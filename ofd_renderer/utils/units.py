"""Unit conversion helpers for OFD measurements."""
from __future__ import annotations

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72
MM_TO_PT = POINTS_PER_INCH / MM_PER_INCH


def points_to_pixels(value: float, dpi: float) -> float:
    """Return the pixel count covering ``value`` points at ``dpi``."""
    return value / POINTS_PER_INCH * dpi
