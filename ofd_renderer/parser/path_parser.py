"""Decode OFD abbreviated path data into path commands.

The grammar is a whitespace separated token stream::

    M x y               move to
    L x y               line to
    B x1 y1 x2 y2 x y   cubic Bézier
    Q x1 y1 x y         quadratic Bézier
    A rx ry angle large sweep x y
    C | S               close sub-path

Tokens that are not command letters are skipped one by one, so malformed
data degrades to the commands that could be read.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence

from ofd_renderer.model.path_commands import (
    ArcTo,
    ClosePath,
    CubicTo,
    LineTo,
    MoveTo,
    PathCommand,
    QuadTo,
)
from ofd_renderer.utils.logger import get_logger

LOGGER = get_logger(__name__)


def _number(token: str) -> float:
    try:
        value = float(token)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _flag(token: str) -> bool:
    return token == "1"


def _move(ops: Sequence[str]) -> PathCommand:
    return MoveTo(_number(ops[0]), _number(ops[1]))


def _line(ops: Sequence[str]) -> PathCommand:
    return LineTo(_number(ops[0]), _number(ops[1]))


def _cubic(ops: Sequence[str]) -> PathCommand:
    return CubicTo(*(_number(token) for token in ops))


def _quad(ops: Sequence[str]) -> PathCommand:
    return QuadTo(*(_number(token) for token in ops))


def _arc(ops: Sequence[str]) -> PathCommand:
    return ArcTo(
        rx=_number(ops[0]),
        ry=_number(ops[1]),
        rotation=_number(ops[2]),
        large_arc=_flag(ops[3]),
        sweep=_flag(ops[4]),
        x=_number(ops[5]),
        y=_number(ops[6]),
    )


def _close(ops: Sequence[str]) -> PathCommand:
    return ClosePath()


# command letter -> (operand count, builder)
COMMANDS: Dict[str, tuple[int, Callable[[Sequence[str]], PathCommand]]] = {
    "M": (2, _move),
    "L": (2, _line),
    "B": (6, _cubic),
    "Q": (4, _quad),
    "A": (7, _arc),
    "C": (0, _close),
    "S": (0, _close),
}


def parse_abbreviated_data(data: str | None) -> List[PathCommand]:
    """Return the ordered commands encoded in ``data``."""
    if not data:
        return []

    tokens = data.split()
    commands: List[PathCommand] = []
    index = 0
    while index < len(tokens):
        spec = COMMANDS.get(tokens[index])
        if spec is None:
            index += 1
            continue
        count, build = spec
        operands = tokens[index + 1 : index + 1 + count]
        if len(operands) < count:
            LOGGER.debug("Dropping truncated %s command in path data", tokens[index])
            break
        commands.append(build(operands))
        index += 1 + count
    return commands
