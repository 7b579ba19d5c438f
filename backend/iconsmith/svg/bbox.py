"""Bounding box extraction for path commands and primitive shape elements.

Curve boxes are built from endpoints plus Bézier control points, a
conservative over-approximation: the box always contains the curve but may
be larger than its true extrema. Arcs contribute their endpoints only.
Pass ``exact=True`` to compute true curve extrema with svgpathtools instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from svgpathtools import parse_path as parse_exact_path

from iconsmith.errors import MalformedPathError
from iconsmith.models.geometry import BoundingBox
from iconsmith.models.path import PathCommand, Point
from iconsmith.svg.elements import SvgElement
from iconsmith.svg.path_parser import parse_path

logger = logging.getLogger(__name__)

DEFAULT_CANVAS = 24.0


def points_bounding_box(points: Iterable[Point], canvas_size: float = DEFAULT_CANVAS) -> BoundingBox:
    """Box around ``points``; no points at all gives the full-canvas fallback."""
    xs: list[float] = []
    ys: list[float] = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    if not xs:
        return BoundingBox.canvas(canvas_size)
    return BoundingBox.from_extents(min(xs), min(ys), max(xs), max(ys))


def command_points(commands: Sequence[PathCommand]) -> list[Point]:
    points: list[Point] = []
    for cmd in commands:
        points.extend(cmd.points)
    return points


def element_points(element: SvgElement) -> list[Point]:
    """Points whose box equals the element's box, in the element's own space."""
    name = element.name.lower()
    if name == "path":
        return command_points(parse_path(element.attrs.get("d", "")))
    if name == "circle":
        cx, cy, r = element.number("cx"), element.number("cy"), element.number("r")
        return _corners(cx - r, cy - r, cx + r, cy + r)
    if name == "ellipse":
        cx, cy = element.number("cx"), element.number("cy")
        rx, ry = element.number("rx"), element.number("ry")
        return _corners(cx - rx, cy - ry, cx + rx, cy + ry)
    if name == "rect":
        x, y = element.number("x"), element.number("y")
        return _corners(x, y, x + element.number("width"), y + element.number("height"))
    if name == "line":
        return [
            (element.number("x1"), element.number("y1")),
            (element.number("x2"), element.number("y2")),
        ]
    if name in ("polyline", "polygon"):
        return parse_points(element.attrs.get("points", ""))
    return []


def parse_points(value: str) -> list[Point]:
    numbers = [float(n) for n in re.findall(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", value)]
    return list(zip(numbers[0::2], numbers[1::2]))


def _corners(min_x: float, min_y: float, max_x: float, max_y: float) -> list[Point]:
    return [(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)]


def exact_path_bounding_box(path_data: str, canvas_size: float = DEFAULT_CANVAS) -> BoundingBox:
    """True curve extrema via svgpathtools; falls back to the approximation for segment-less paths."""
    # Raises MalformedPathError before svgpathtools sees the data
    commands = parse_path(path_data)
    try:
        path = parse_exact_path(path_data)
    except ValueError as e:
        raise MalformedPathError(str(e), path_data=path_data) from e
    if len(path) == 0:
        return points_bounding_box(command_points(commands), canvas_size)
    x_min, x_max, y_min, y_max = path.bbox()
    return BoundingBox.from_extents(x_min, y_min, x_max, y_max)


def bounding_box_of(
    source: str | Sequence[PathCommand] | SvgElement,
    canvas_size: float = DEFAULT_CANVAS,
    exact: bool = False,
) -> BoundingBox:
    """Bounding box of path data, parsed commands, or a primitive shape element."""
    if isinstance(source, SvgElement):
        if exact and source.name.lower() == "path":
            return exact_path_bounding_box(source.attrs.get("d", ""), canvas_size)
        return points_bounding_box(element_points(source), canvas_size)
    if isinstance(source, str):
        if exact:
            return exact_path_bounding_box(source, canvas_size)
        source = parse_path(source)
    return points_bounding_box(command_points(source), canvas_size)
