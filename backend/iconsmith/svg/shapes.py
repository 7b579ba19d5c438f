"""Primitive shape → path data conversion."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from iconsmith.svg.bbox import parse_points
from iconsmith.svg.elements import SvgElement, find_drawables, find_root
from iconsmith.svg.path_parser import format_number as _n

logger = logging.getLogger(__name__)


def circle_to_path(cx: float, cy: float, r: float) -> str:
    return ellipse_to_path(cx, cy, r, r)


def ellipse_to_path(cx: float, cy: float, rx: float, ry: float) -> str:
    # Two half-arcs; a single arc cannot draw a full ellipse
    return (
        f"M{_n(cx - rx)} {_n(cy)} "
        f"a{_n(rx)} {_n(ry)} 0 1 0 {_n(rx * 2)} 0 "
        f"a{_n(rx)} {_n(ry)} 0 1 0 {_n(-rx * 2)} 0"
    )


def rect_to_path(x: float, y: float, width: float, height: float, rx: float = 0.0, ry: float = 0.0) -> str:
    """Rectangle outline; corner radii are mirrored when only one is given and clamped to half-size."""
    rx = rx or ry
    ry = ry or rx
    rx = min(rx, width / 2)
    ry = min(ry, height / 2)

    if rx == 0 and ry == 0:
        return f"M{_n(x)} {_n(y)} h{_n(width)} v{_n(height)} h{_n(-width)} z"

    inner_w = width - 2 * rx
    inner_h = height - 2 * ry
    return (
        f"M{_n(x + rx)} {_n(y)} h{_n(inner_w)} "
        f"a{_n(rx)} {_n(ry)} 0 0 1 {_n(rx)} {_n(ry)} v{_n(inner_h)} "
        f"a{_n(rx)} {_n(ry)} 0 0 1 {_n(-rx)} {_n(ry)} h{_n(-inner_w)} "
        f"a{_n(rx)} {_n(ry)} 0 0 1 {_n(-rx)} {_n(-ry)} v{_n(-inner_h)} "
        f"a{_n(rx)} {_n(ry)} 0 0 1 {_n(rx)} {_n(-ry)} z"
    )


def line_to_path(x1: float, y1: float, x2: float, y2: float) -> str:
    return f"M{_n(x1)} {_n(y1)} L{_n(x2)} {_n(y2)}"


def polyline_to_path(points: str, closed: bool = False) -> str:
    coords = parse_points(points)
    if not coords:
        return ""
    (x0, y0), rest = coords[0], coords[1:]
    parts = [f"M{_n(x0)} {_n(y0)}"] + [f"L{_n(x)} {_n(y)}" for x, y in rest]
    if closed:
        parts.append("z")
    return " ".join(parts)


_NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_LEADING_MOVE_RE = re.compile(rf"^m[\s,]*({_NUMBER})[\s,]*({_NUMBER})")
_IMPLICIT_PAIR_RE = re.compile(r"^[\s,]*[+\-.\d]")
_SEPARATORS = " \t\r\n\f,"


def normalize_path_start(path_data: str) -> str:
    """Make a leading relative ``m`` absolute so the path survives concatenation.

    Pairs after the first one in that group stay relative lineto:
    ``m5 5 3 3`` becomes ``M5 5 l3 3``.
    """
    trimmed = path_data.strip()
    match = _LEADING_MOVE_RE.match(trimmed)
    if match is None:
        return "M" + trimmed[1:] if trimmed.startswith("m") else trimmed
    head = f"M{match.group(1)} {match.group(2)}"
    rest = trimmed[match.end() :]
    if _IMPLICIT_PAIR_RE.match(rest):
        return f"{head} l{rest.lstrip(_SEPARATORS)}"
    return head + rest


def element_to_path(element: SvgElement) -> str | None:
    """Path data equivalent to a drawing element, or None when it has no usable geometry."""
    name = element.name.lower()
    attrs = element.attrs
    if name == "path":
        d = attrs.get("d", "").strip()
        return normalize_path_start(d) if d else None
    if name == "circle":
        if "r" not in attrs:
            return None
        return circle_to_path(element.number("cx"), element.number("cy"), element.number("r"))
    if name == "ellipse":
        if "rx" not in attrs and "ry" not in attrs:
            return None
        rx = element.number("rx", element.number("ry"))
        ry = element.number("ry", rx)
        return ellipse_to_path(element.number("cx"), element.number("cy"), rx, ry)
    if name == "rect":
        if "width" not in attrs or "height" not in attrs:
            return None
        return rect_to_path(
            element.number("x"),
            element.number("y"),
            element.number("width"),
            element.number("height"),
            element.number("rx"),
            element.number("ry"),
        )
    if name == "line":
        return line_to_path(
            element.number("x1"), element.number("y1"), element.number("x2"), element.number("y2")
        )
    if name in ("polyline", "polygon"):
        return polyline_to_path(attrs.get("points", ""), closed=name == "polygon") or None
    return None


@dataclass(frozen=True)
class CombinedPath:
    path_data: str
    view_box: str
    fill_rule: str | None = None


def extract_combined_path_data(svg: str) -> CombinedPath:
    """Join every drawing element of an icon into one path string, in document order."""
    root = find_root(svg)
    view_box = "0 0 24 24"
    fill_rule = None
    if root is not None:
        view_box = root.attrs.get("viewBox", view_box)
        fill_rule = root.attrs.get("fill-rule")

    paths: list[str] = []
    for element in find_drawables(svg):
        if fill_rule is None:
            fill_rule = element.attrs.get("fill-rule")
        d = element_to_path(element)
        if d is None:
            logger.debug("Skipping <%s> without geometry", element.name)
            continue
        paths.append(d)

    return CombinedPath(path_data=" ".join(paths), view_box=view_box, fill_rule=fill_rule)
