"""In-memory representation of page objects and their value types."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from ofd_renderer.model.path_commands import PathCommand

A4_BOX = (0.0, 0.0, 210.0, 297.0)


def _split_numbers(value: str) -> List[float]:
    numbers: List[float] = []
    for token in value.split():
        try:
            numbers.append(float(token))
        except ValueError:
            numbers.append(0.0)
    return numbers


@dataclass(slots=True)
class Box:
    """Rectangle in millimeters: origin plus size."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def parse(cls, value: Optional[str]) -> "Box":
        """Parse ``"x y w h"``; absent slots fall back to an A4 page box."""
        if not value or not value.strip():
            return cls(*A4_BOX)
        numbers = _split_numbers(value)
        slots = [numbers[i] if i < len(numbers) else A4_BOX[i] for i in range(4)]
        return cls(*slots)


@dataclass(slots=True)
class Matrix:
    """Affine transform ``[a b c d e f]`` (x' = a·x + c·y + e, y' = b·x + d·y + f)."""

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Matrix"]:
        if not value:
            return None
        numbers = _split_numbers(value)
        if len(numbers) < 6:
            return None
        return cls(*numbers[:6])


@dataclass(slots=True)
class Color:
    """OFD color: space separated 0-255 channels plus optional alpha."""

    value: Optional[str] = None
    alpha: Optional[float] = None
    color_space: Optional[str] = None

    def rgb(self) -> Tuple[float, float, float]:
        """Return normalized channels; a missing value is black."""
        if not self.value or not self.value.strip():
            return (0.0, 0.0, 0.0)
        raw = self.value.strip()
        if raw.startswith("#") and len(raw) == 7:
            try:
                channels = [int(raw[i : i + 2], 16) for i in (1, 3, 5)]
            except ValueError:
                return (0.0, 0.0, 0.0)
        else:
            channels = _split_numbers(raw)
        padded = list(channels[:3]) + [0.0] * (3 - min(len(channels), 3))
        return (padded[0] / 255, padded[1] / 255, padded[2] / 255)


@dataclass(slots=True)
class TextRun:
    """One ``TextCode``: optional start point, expanded deltas and text."""

    text: str
    x: Optional[float] = None
    y: Optional[float] = None
    delta_x: List[float] = field(default_factory=list)
    delta_y: List[float] = field(default_factory=list)


@dataclass(slots=True)
class TextObject:
    id: str
    boundary: Box
    font: str = ""
    size: float = 10.0
    fill_color: Optional[Color] = None
    stroke_color: Optional[Color] = None
    weight: Optional[float] = None
    italic: bool = False
    ctm: Optional[Matrix] = None
    alpha: Optional[float] = None
    text_runs: List[TextRun] = field(default_factory=list)


@dataclass(slots=True)
class PathObject:
    id: str
    boundary: Box
    abbreviated_data: str = ""
    commands: Sequence[PathCommand] = field(default_factory=list)
    fill_color: Optional[Color] = None
    stroke_color: Optional[Color] = None
    line_width: Optional[float] = None
    ctm: Optional[Matrix] = None
    fill: bool = False
    stroke: bool = True
    dash_pattern: Optional[List[float]] = None
    dash_offset: Optional[float] = None
    join: Optional[str] = None
    cap: Optional[str] = None
    miter_limit: Optional[float] = None
    alpha: Optional[float] = None


@dataclass(slots=True)
class ImageObject:
    id: str
    boundary: Box
    resource_id: str = ""
    ctm: Optional[Matrix] = None
    alpha: Optional[float] = None


PageObject = Union[TextObject, PathObject, ImageObject]
