"""Path command variants decoded from OFD abbreviated path data."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class CubicTo:
    """Cubic Bézier (``B`` in abbreviated data)."""

    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class QuadTo:
    x1: float
    y1: float
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class ArcTo:
    """Elliptical arc in endpoint parameterization."""

    rx: float
    ry: float
    rotation: float
    large_arc: bool
    sweep: bool
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class ClosePath:
    pass


PathCommand = Union[MoveTo, LineTo, CubicTo, QuadTo, ArcTo, ClosePath]
