"""Lay out OFD text runs and turn them into text drawing operations."""
from __future__ import annotations

from typing import List, Optional, Tuple

from ofd_renderer.model.elements import Matrix, TextObject, TextRun
from ofd_renderer.renderer.fonts import ResolvedFont
from ofd_renderer.renderer.geometry import PageSpace, rotation_angle, transform_point, vertical_scale
from ofd_renderer.renderer.operations import DrawOp, DrawText, RestoreState, SaveState, SetAlpha, SetFillColor

# Estimated glyph width when no horizontal deltas are supplied.
DEFAULT_ADVANCE_RATIO = 0.6
REPLACEMENT_CHAR = "?"

Placement = Tuple[str, float, float]


def font_size_points(obj: TextObject, space: PageSpace) -> float:
    """Font size in points, scaled by the vertical factor of the CTM."""
    size = obj.size
    if obj.ctm is not None:
        scale = vertical_scale(obj.ctm)
        if scale > 0:
            size *= scale
    return space.length(size)


def transform_delta(dx: float, dy: float, ctm: Optional[Matrix]) -> Tuple[float, float]:
    """Adjust glyph advances for a CTM.

    Unrotated transforms map the deltas as points (translation included);
    rotated ones leave them untouched.
    """
    if ctm is None or rotation_angle(ctm) != 0:
        return dx, dy
    if dx != 0:
        dx = transform_point(dx, 0, ctm)[0]
    if dy != 0:
        dy = transform_point(0, dy, ctm)[1]
    return dx, dy


def _delta_at(values: List[float], index: int) -> float:
    return values[min(index, len(values) - 1)]


def layout_run(run: TextRun, obj: TextObject, space: PageSpace, font_size: float) -> List[Placement]:
    """Return ``(text, x, y)`` baseline placements for one text run.

    A run without deltas yields a single placement for the whole string;
    otherwise one placement per code point.
    """
    text = run.text
    if not text:
        return []

    start_x, start_y = space.point(run.x or 0.0, run.y or 0.0, obj.boundary, obj.ctm)
    if not run.delta_x and not run.delta_y:
        return [(text, start_x, start_y - font_size)]

    placements: List[Placement] = []
    x, y = start_x, start_y
    for index, char in enumerate(text):
        placements.append((char, x, y - font_size))
        if run.delta_x:
            dx = _delta_at(run.delta_x, index)
        else:
            dx = font_size * DEFAULT_ADVANCE_RATIO / space.scale
        dy = _delta_at(run.delta_y, index) if run.delta_y else 0.0
        dx, dy = transform_delta(dx, dy, obj.ctm)
        x += space.length(dx)
        # OFD y grows downward
        y -= space.length(dy)
    return placements


def _substitute(text: str, font: ResolvedFont) -> str:
    return "".join(char if font.can_render(char) else REPLACEMENT_CHAR for char in text)


def render_text_object(obj: TextObject, font: ResolvedFont, space: PageSpace) -> List[DrawOp]:
    """Return the operations drawing every run of ``obj`` with ``font``."""
    font_size = font_size_points(obj, space)
    draws: List[DrawOp] = []
    for run in obj.text_runs:
        for text, x, y in layout_run(run, obj, space, font_size):
            if len(text) > 1 and not all(font.can_render(char) for char in text):
                # split so unsupported glyphs keep their own slot
                for offset, char in enumerate(text):
                    draws.append(
                        DrawText(_substitute(char, font), x + offset * font_size * DEFAULT_ADVANCE_RATIO, y, font.name, font_size)
                    )
                continue
            draws.append(DrawText(_substitute(text, font), x, y, font.name, font_size))

    if not draws:
        return []

    operations: List[DrawOp] = [SaveState()]
    alpha = obj.alpha
    if alpha is None and obj.fill_color is not None:
        alpha = obj.fill_color.alpha
    if alpha is not None and alpha < 255:
        operations.append(SetAlpha(fill=max(alpha, 0.0) / 255))
    fill_rgb = obj.fill_color.rgb() if obj.fill_color is not None else (0.0, 0.0, 0.0)
    operations.append(SetFillColor(fill_rgb))
    operations.extend(draws)
    operations.append(RestoreState())
    return operations
