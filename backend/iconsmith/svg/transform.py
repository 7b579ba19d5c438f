"""Affine transforms: coordinate rewriting and ``transform`` attribute math.

``apply_transform`` rewrites path data under ``coord * scale + translate``
while keeping each command's absolute/relative form: relative offsets are
scaled but never translated.
"""

from __future__ import annotations

import logging
import math
import re

import numpy as np
from numpy.typing import NDArray

from iconsmith.models.geometry import BoundingBox
from iconsmith.models.path import CommandKind, PathCommand, Point
from iconsmith.svg.bbox import parse_points
from iconsmith.svg.elements import to_float
from iconsmith.svg.path_parser import format_number, parse_path

logger = logging.getLogger(__name__)

_TRANSFORM_FN_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _transform_operands(cmd: PathCommand, scale: float, tx: float, ty: float, translate: bool) -> list[float]:
    ops = list(cmd.operands)
    kind = cmd.kind

    if kind is CommandKind.ARC_TO:
        rx, ry, angle, large_arc, sweep, x, y = ops
        if translate:
            x, y = x * scale + tx, y * scale + ty
        else:
            x, y = x * scale, y * scale
        return [rx * scale, ry * scale, angle, large_arc, sweep, x, y]

    if not translate:
        return [v * scale for v in ops]
    if kind is CommandKind.HORIZONTAL_LINE_TO:
        return [ops[0] * scale + tx]
    if kind is CommandKind.VERTICAL_LINE_TO:
        return [ops[0] * scale + ty]
    # Remaining kinds are flat x,y pairs
    return [v * scale + (tx if i % 2 == 0 else ty) for i, v in enumerate(ops)]


def apply_transform(path_data: str, scale: float, translate_x: float = 0.0, translate_y: float = 0.0) -> str:
    """Rewrite path data under a uniform scale followed by a translation.

    Absolute coordinates become ``coord * scale + translate``. Relative
    operands are only scaled. Arc radii scale while the rotation angle and
    both flags are copied unchanged. A leading relative ``m`` is resolved
    from the origin, so it is treated as absolute.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    parts: list[str] = []
    for index, cmd in enumerate(parse_path(path_data)):
        if cmd.kind is CommandKind.CLOSE_PATH:
            parts.append(cmd.letter)
            continue
        translate = not cmd.relative or (index == 0 and cmd.kind is CommandKind.MOVE_TO)
        ops = _transform_operands(cmd, scale, translate_x, translate_y, translate)
        parts.append(cmd.letter + " ".join(format_number(v) for v in ops))
    return " ".join(parts)


def _scale_attr(attrs: dict[str, str], name: str, scale: float, offset: float = 0.0) -> str | None:
    if name not in attrs:
        return None
    return format_number(to_float(attrs[name]) * scale + offset)


def transform_element_attrs(
    name: str,
    attrs: dict[str, str],
    scale: float,
    translate_x: float = 0.0,
    translate_y: float = 0.0,
) -> dict[str, str]:
    """Attribute updates that move one drawing element under scale + translate.

    Returns only the attributes that change. Absent position attributes
    default to 0 and are written out when the translation moves them.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    tag = name.lower()
    updates: dict[str, str] = {}

    def position(attr: str, offset: float) -> None:
        updates[attr] = format_number(to_float(attrs.get(attr)) * scale + offset)

    def size(attr: str) -> None:
        value = _scale_attr(attrs, attr, scale)
        if value is not None:
            updates[attr] = value

    if tag == "path":
        updates["d"] = apply_transform(attrs.get("d", ""), scale, translate_x, translate_y)
    elif tag in ("circle", "ellipse"):
        position("cx", translate_x)
        position("cy", translate_y)
        for attr in ("r", "rx", "ry"):
            size(attr)
    elif tag == "rect":
        position("x", translate_x)
        position("y", translate_y)
        for attr in ("width", "height", "rx", "ry"):
            size(attr)
    elif tag == "line":
        position("x1", translate_x)
        position("y1", translate_y)
        position("x2", translate_x)
        position("y2", translate_y)
    elif tag in ("polyline", "polygon"):
        points = parse_points(attrs.get("points", ""))
        updates["points"] = " ".join(
            f"{format_number(x * scale + translate_x)},{format_number(y * scale + translate_y)}"
            for x, y in points
        )
    else:
        logger.debug("No coordinate rewrite for <%s>", name)
    return updates


def format_transform(scale: float, translate_x: float, translate_y: float) -> str:
    return (
        f"translate({format_number(translate_x)}, {format_number(translate_y)}) "
        f"scale({format_number(scale)})"
    )


def parse_transform(value: str | None) -> NDArray[np.float64]:
    """Parse a ``transform`` attribute into a 3×3 affine matrix."""
    matrix = np.eye(3)
    if not value:
        return matrix

    for fn, raw_args in _TRANSFORM_FN_RE.findall(value):
        args = [float(a) for a in _NUMBER_RE.findall(raw_args)]
        step = np.eye(3)
        if fn == "matrix" and len(args) == 6:
            a, b, c, d, e, f = args
            step = np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])
        elif fn == "translate" and args:
            step[0, 2] = args[0]
            step[1, 2] = args[1] if len(args) > 1 else 0.0
        elif fn == "scale" and args:
            step[0, 0] = args[0]
            step[1, 1] = args[1] if len(args) > 1 else args[0]
        elif fn == "rotate" and args:
            theta = math.radians(args[0])
            cos_t, sin_t = math.cos(theta), math.sin(theta)
            step = np.array([[cos_t, -sin_t, 0.0], [sin_t, cos_t, 0.0], [0.0, 0.0, 1.0]])
            if len(args) == 3:
                cx, cy = args[1], args[2]
                step = _translation(cx, cy) @ step @ _translation(-cx, -cy)
        elif fn == "skewX" and args:
            step[0, 1] = math.tan(math.radians(args[0]))
        elif fn == "skewY" and args:
            step[1, 0] = math.tan(math.radians(args[0]))
        else:
            logger.warning("Ignoring malformed transform function %s(%s)", fn, raw_args)
            continue
        matrix = matrix @ step
    return matrix


def _translation(tx: float, ty: float) -> NDArray[np.float64]:
    step = np.eye(3)
    step[0, 2] = tx
    step[1, 2] = ty
    return step


def compose_transforms(chain: list[str]) -> NDArray[np.float64]:
    """Matrix for a chain of transform attributes listed outermost first."""
    matrix = np.eye(3)
    for value in chain:
        matrix = matrix @ parse_transform(value)
    return matrix


def transform_points(points: list[Point], matrix: NDArray[np.float64]) -> list[Point]:
    if not points:
        return []
    pts = np.hstack([np.asarray(points, dtype=float), np.ones((len(points), 1))])
    out = pts @ matrix.T
    return [(float(x), float(y)) for x, y in out[:, :2]]


def transform_box(box: BoundingBox, matrix: NDArray[np.float64]) -> BoundingBox:
    """Box around the transformed corners of ``box``."""
    corners = [
        (box.min_x, box.min_y),
        (box.max_x, box.min_y),
        (box.max_x, box.max_y),
        (box.min_x, box.max_y),
    ]
    moved = transform_points(corners, matrix)
    xs = [p[0] for p in moved]
    ys = [p[1] for p in moved]
    return BoundingBox.from_extents(min(xs), min(ys), max(xs), max(ys))
