"""Convert OFD path objects into PDF path drawing operations."""
from __future__ import annotations

from typing import List, Sequence

from ofd_renderer.model.elements import PathObject
from ofd_renderer.model.path_commands import ArcTo, ClosePath, CubicTo, LineTo, MoveTo, PathCommand, QuadTo
from ofd_renderer.renderer.geometry import PageSpace, Point, arc_to_cubics, quad_to_cubic, transformed_stroke_width
from ofd_renderer.renderer.operations import (
    LINE_CAPS,
    LINE_JOINS,
    DrawOp,
    DrawPath,
    PathSegment,
    RestoreState,
    SaveState,
    SetAlpha,
    SetFillColor,
    SetLineStyle,
    SetStrokeColor,
)

DEFAULT_LINE_WIDTH_MM = 0.353


def lower_path(commands: Sequence[PathCommand]) -> List[PathSegment]:
    """Reduce commands to move/line/cubic/close in the same coordinate space.

    Quadratic curves and arcs continue from the current point; closing a
    sub-path returns the current point to the sub-path start.
    """
    segments: List[PathSegment] = []
    current: Point = (0.0, 0.0)
    start: Point = (0.0, 0.0)
    open_subpath = False

    def ensure_subpath() -> None:
        nonlocal open_subpath
        if not open_subpath:
            segments.append(MoveTo(*current))
            open_subpath = True

    for command in commands:
        if isinstance(command, MoveTo):
            current = start = (command.x, command.y)
            segments.append(MoveTo(command.x, command.y))
            open_subpath = True
        elif isinstance(command, LineTo):
            ensure_subpath()
            current = (command.x, command.y)
            segments.append(LineTo(command.x, command.y))
        elif isinstance(command, CubicTo):
            ensure_subpath()
            current = (command.x, command.y)
            segments.append(command)
        elif isinstance(command, QuadTo):
            ensure_subpath()
            cp1, cp2, end = quad_to_cubic(current, (command.x1, command.y1), (command.x, command.y))
            segments.append(CubicTo(cp1[0], cp1[1], cp2[0], cp2[1], end[0], end[1]))
            current = end
        elif isinstance(command, ArcTo):
            ensure_subpath()
            end = (command.x, command.y)
            cubics = arc_to_cubics(
                current, command.rx, command.ry, command.rotation, command.large_arc, command.sweep, end
            )
            if not cubics:
                segments.append(LineTo(*end))
            for cp1, cp2, point in cubics:
                segments.append(CubicTo(cp1[0], cp1[1], cp2[0], cp2[1], point[0], point[1]))
            current = end
        elif isinstance(command, ClosePath):
            if open_subpath:
                segments.append(ClosePath())
            current = start
            open_subpath = False
        else:
            raise TypeError(f"Unknown path command: {command!r}")
    return segments


def map_segments(segments: Sequence[PathSegment], obj: PathObject, space: PageSpace) -> List[PathSegment]:
    """Move lowered segments from object-local mm into page points."""
    mapped: List[PathSegment] = []
    for segment in segments:
        if isinstance(segment, (MoveTo, LineTo)):
            x, y = space.point(segment.x, segment.y, obj.boundary, obj.ctm)
            mapped.append(type(segment)(x, y))
        elif isinstance(segment, CubicTo):
            x1, y1 = space.point(segment.x1, segment.y1, obj.boundary, obj.ctm)
            x2, y2 = space.point(segment.x2, segment.y2, obj.boundary, obj.ctm)
            x, y = space.point(segment.x, segment.y, obj.boundary, obj.ctm)
            mapped.append(CubicTo(x1, y1, x2, y2, x, y))
        else:
            mapped.append(segment)
    return mapped


def render_path_object(obj: PathObject, space: PageSpace) -> List[DrawOp]:
    """Return the drawing operations for ``obj``; empty paths draw nothing."""
    if not obj.commands:
        return []
    segments = map_segments(lower_path(obj.commands), obj, space)
    if not segments:
        return []

    operations: List[DrawOp] = [SaveState()]

    if obj.alpha is not None and obj.alpha < 255:
        opacity = max(obj.alpha, 0.0) / 255
        operations.append(SetAlpha(fill=opacity, stroke=opacity))

    line_width = space.length(obj.line_width if obj.line_width is not None else DEFAULT_LINE_WIDTH_MM)
    if obj.ctm is not None and obj.line_width is not None:
        line_width = transformed_stroke_width(line_width, obj.ctm)

    dash = None
    if obj.dash_pattern and len(obj.dash_pattern) >= 2:
        dash = (space.length(obj.dash_pattern[0]), space.length(obj.dash_pattern[1]))
    operations.append(
        SetLineStyle(
            width=line_width,
            dash=dash,
            dash_phase=space.length(obj.dash_offset or 0.0),
            join=LINE_JOINS.get(obj.join) if obj.join else None,
            cap=LINE_CAPS.get(obj.cap) if obj.cap else None,
            miter_limit=obj.miter_limit,
        )
    )

    if obj.fill and obj.fill_color is not None:
        operations.append(SetFillColor(obj.fill_color.rgb()))
    if obj.stroke:
        stroke_rgb = obj.stroke_color.rgb() if obj.stroke_color is not None else (0.0, 0.0, 0.0)
        operations.append(SetStrokeColor(stroke_rgb))

    if obj.fill and obj.stroke and obj.stroke_color is not None:
        paint = DrawPath(tuple(segments), fill=True, stroke=True)
    elif obj.fill:
        paint = DrawPath(tuple(segments), fill=True, stroke=False)
    elif obj.stroke:
        paint = DrawPath(tuple(segments), fill=False, stroke=True)
    else:
        # nothing to paint
        return []
    operations.append(paint)
    operations.append(RestoreState())
    return operations
