"""Drawing operations collected per page before PDF serialization."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from ofd_renderer.model.path_commands import ClosePath, CubicTo, LineTo, MoveTo

# Only these commands survive lowering; coordinates are in PDF points.
PathSegment = Union[MoveTo, LineTo, CubicTo, ClosePath]
RGB = Tuple[float, float, float]

LINE_JOINS = {"miter": 0, "round": 1, "bevel": 2}
LINE_CAPS = {"butt": 0, "round": 1, "square": 2}


@dataclass(frozen=True, slots=True)
class SaveState:
    pass


@dataclass(frozen=True, slots=True)
class RestoreState:
    pass


@dataclass(frozen=True, slots=True)
class SetLineStyle:
    width: float
    dash: Optional[Tuple[float, ...]] = None
    dash_phase: float = 0.0
    join: Optional[int] = None
    cap: Optional[int] = None
    miter_limit: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SetFillColor:
    rgb: RGB


@dataclass(frozen=True, slots=True)
class SetStrokeColor:
    rgb: RGB


@dataclass(frozen=True, slots=True)
class SetAlpha:
    """Constant opacity (0..1) for fills, strokes, text and images."""

    fill: Optional[float] = None
    stroke: Optional[float] = None


@dataclass(frozen=True, slots=True)
class DrawPath:
    segments: Tuple[PathSegment, ...]
    fill: bool = False
    stroke: bool = True


@dataclass(frozen=True, slots=True)
class DrawText:
    """Place ``text`` with its baseline origin at (x, y)."""

    text: str
    x: float
    y: float
    font_name: str
    size: float


@dataclass(frozen=True, slots=True)
class DrawImage:
    image: Any
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[SaveState, RestoreState, SetLineStyle, SetFillColor, SetStrokeColor, SetAlpha, DrawPath, DrawText, DrawImage]


@dataclass(slots=True)
class PageDrawing:
    """Display list of one output page; sizes are in points."""

    width: float
    height: float
    operations: List[DrawOp] = field(default_factory=list)
    page_id: Optional[str] = None
