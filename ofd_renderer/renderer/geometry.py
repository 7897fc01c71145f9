"""Affine transform and curve conversion helpers.

Every function here is pure; points are ``(x, y)`` tuples.
"""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

from ofd_renderer.model.elements import Box, Matrix
from ofd_renderer.utils.units import MM_TO_PT

Point = Tuple[float, float]
CubicSegment = Tuple[Point, Point, Point]

HALF_PI = math.pi / 2


def transform_point(x: float, y: float, m: Matrix) -> Point:
    """Apply ``m``: x' = a·x + c·y + e, y' = b·x + d·y + f."""
    return (m.a * x + m.c * y + m.e, m.b * x + m.d * y + m.f)


def transformed_stroke_width(width: float, m: Matrix) -> float:
    """Scale a line width by the transform's horizontal scale component."""
    # |sign(a)·sqrt(a² + c²)|; the sign drops out under abs
    return width * math.sqrt(m.a * m.a + m.c * m.c)


def rotation_angle(m: Matrix) -> float:
    return math.atan2(-m.b, m.d)


def vertical_scale(m: Matrix) -> float:
    return math.sqrt(m.b * m.b + m.d * m.d)


def quad_to_cubic(p0: Point, p1: Point, p2: Point) -> CubicSegment:
    """Promote a quadratic Bézier to the equivalent cubic control points."""
    cp1 = (p0[0] + 2 / 3 * (p1[0] - p0[0]), p0[1] + 2 / 3 * (p1[1] - p0[1]))
    cp2 = (p2[0] + 2 / 3 * (p1[0] - p2[0]), p2[1] + 2 / 3 * (p1[1] - p2[1]))
    return (cp1, cp2, p2)


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    length = math.hypot(ux, uy) * math.hypot(vx, vy)
    if length == 0:
        return 0.0
    cos_a = max(-1.0, min(1.0, (ux * vx + uy * vy) / length))
    angle = math.acos(cos_a)
    return -angle if ux * vy - uy * vx < 0 else angle


def arc_to_cubics(
    p0: Point,
    rx: float,
    ry: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    p1: Point,
) -> List[CubicSegment]:
    """Approximate an endpoint-parameterized elliptical arc with cubics.

    Follows the W3C SVG arc implementation notes. Returns an empty list for
    a zero radius or coincident endpoints; callers draw a line instead.
    """
    if rx == 0 or ry == 0:
        return []
    x0, y0 = p0
    x, y = p1
    if x0 == x and y0 == y:
        return []

    phi = math.radians(rotation_deg)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    # endpoint midpoint in the ellipse's frame
    dx2 = (x0 - x) / 2
    dy2 = (y0 - y) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    rx = abs(rx)
    ry = abs(ry)
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        root = math.sqrt(lam)
        rx *= root
        ry *= root

    rx2 = rx * rx
    ry2 = ry * ry
    x1p2 = x1p * x1p
    y1p2 = y1p * y1p
    sq = math.sqrt(max(0.0, (rx2 * ry2 - rx2 * y1p2 - ry2 * x1p2) / (rx2 * y1p2 + ry2 * x1p2)))
    if large_arc == sweep:
        sq = -sq

    cxp = sq * (rx * y1p) / ry
    cyp = sq * -(ry * x1p) / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x0 + x) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y0 + y) / 2

    ux = (x1p - cxp) / rx
    uy = (y1p - cyp) / ry
    vx = (-x1p - cxp) / rx
    vy = (-y1p - cyp) / ry
    theta1 = _vector_angle(1.0, 0.0, ux, uy)
    delta = _vector_angle(ux, uy, vx, vy)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    segments = max(1, math.ceil(abs(delta) / HALF_PI))
    step = delta / segments
    alpha = 4 / 3 * math.tan(step / 4)

    def to_user(px: float, py: float) -> Point:
        sx = px * rx
        sy = py * ry
        return (cos_phi * sx - sin_phi * sy + cx, sin_phi * sx + cos_phi * sy + cy)

    result: List[CubicSegment] = []
    for i in range(segments):
        start = theta1 + i * step
        end = start + step
        cos_s, sin_s = math.cos(start), math.sin(start)
        cos_e, sin_e = math.cos(end), math.sin(end)
        result.append(
            (
                to_user(cos_s - alpha * sin_s, sin_s + alpha * cos_s),
                to_user(cos_e + alpha * sin_e, sin_e - alpha * cos_e),
                to_user(cos_e, sin_e),
            )
        )
    return result


class PageSpace:
    """Maps object-local millimeters onto bottom-up PDF points for one page."""

    def __init__(self, height_mm: float, scale: float = MM_TO_PT) -> None:
        self.height_mm = height_mm
        self.scale = scale

    def point(self, x: float, y: float, boundary: Box, ctm: Optional[Matrix] = None) -> Point:
        """Transform, then offset by the boundary origin, then flip vertically."""
        if ctm is not None:
            x, y = transform_point(x, y, ctm)
        return ((boundary.x + x) * self.scale, (self.height_mm - boundary.y - y) * self.scale)

    def length(self, value_mm: float) -> float:
        return value_mm * self.scale
