"""Coordinate validator and auto-fixer.

The whole-icon box is the union over every rendered drawing element, with
group and element ``transform`` attributes composed in. When that box leaves
the canvas, auto-fix computes ONE uniform scale + translate that fits it into
the padded canvas and applies it identically to every drawing element:
untransformed elements get their coordinates rewritten, structurally
transformed subtrees get the correction prefixed onto their outermost
``transform``. Fixes never compound.
"""

from __future__ import annotations

import logging

from iconsmith.errors import (
    InvalidIconError,
    MalformedPathError,
    NearBoundaryWarning,
    OutOfBoundsError,
    OutOfBoundsWarning,
)
from iconsmith.models.geometry import BoundingBox
from iconsmith.models.path import Point
from iconsmith.models.results import Edge, FixTransform, ValidationReport
from iconsmith.svg.bbox import element_points, exact_path_bounding_box, points_bounding_box
from iconsmith.svg.elements import (
    SvgElement,
    apply_splices,
    find_drawables,
    find_root,
    has_closing_svg,
    set_attrs,
    view_box_size,
)
from iconsmith.svg.transform import (
    compose_transforms,
    format_transform,
    transform_element_attrs,
    transform_points,
)

logger = logging.getLogger(__name__)

# Tolerance for float noise when comparing edges against the canvas
_EPSILON = 1e-6


def _element_box_points(element: SvgElement, exact: bool) -> list[Point]:
    if exact and element.name.lower() == "path":
        box = exact_path_bounding_box(element.attrs.get("d", ""))
        return [(box.min_x, box.min_y), (box.max_x, box.max_y), (box.min_x, box.max_y), (box.max_x, box.min_y)]
    return element_points(element)


def collect_bounds(
    svg: str,
    drawables: list[SvgElement] | None = None,
    exact: bool = False,
) -> tuple[BoundingBox | None, list[str]]:
    """Union box of all drawing elements in canvas space plus skip notes.

    Returns None for the box when no element contributes a coordinate.
    """
    if drawables is None:
        drawables = find_drawables(svg)

    notes: list[str] = []
    points: list[Point] = []
    for element in drawables:
        try:
            own = _element_box_points(element, exact)
        except MalformedPathError as e:
            notes.append(f"skipped malformed <{element.name}>: {e}")
            logger.warning("Skipping malformed <%s> in bounds: %s", element.name, e)
            continue
        chain = element.transform_chain
        if chain and own:
            own = transform_points(own, compose_transforms(chain))
        points.extend(own)

    if not points:
        return None, notes
    return points_bounding_box(points), notes


def icon_bounding_box(svg: str, exact: bool = False) -> BoundingBox | None:
    box, _ = collect_bounds(svg, exact=exact)
    return box


def out_of_bounds_amount(box: BoundingBox, canvas_size: float) -> float:
    """Largest distance any edge sits outside ``[0, canvas_size]``; 0 when inside."""
    return max(
        0.0,
        -box.min_x,
        -box.min_y,
        box.max_x - canvas_size,
        box.max_y - canvas_size,
    )


def near_boundary_edges(box: BoundingBox, canvas_size: float, margin: float) -> tuple[Edge, ...]:
    """Edges that are inside the canvas but closer than ``margin`` to it."""
    edges: list[Edge] = []
    if 0 <= box.min_x < margin:
        edges.append("left")
    if 0 <= box.min_y < margin:
        edges.append("top")
    if canvas_size - margin < box.max_x <= canvas_size:
        edges.append("right")
    if canvas_size - margin < box.max_y <= canvas_size:
        edges.append("bottom")
    return tuple(edges)


def is_within_bounds(svg: str, canvas_size: float = 24.0) -> bool:
    box = icon_bounding_box(svg)
    return box is not None and out_of_bounds_amount(box, canvas_size) <= _EPSILON


def compute_fix(box: BoundingBox, canvas_size: float = 24.0, padding: float = 2.0) -> FixTransform:
    """Uniform scale + translate that centers ``box`` inside the padded canvas."""
    target = canvas_size - 2 * padding
    if target <= 0:
        raise ValueError(f"padding {padding} leaves no room on a {canvas_size} canvas")

    size = max(box.width, box.height)
    if size <= 0:
        # A point or empty box cannot be scaled; just move it to the center
        return FixTransform(
            scale=1.0,
            translate_x=canvas_size / 2 - box.center_x,
            translate_y=canvas_size / 2 - box.center_y,
        )

    scale = target / size
    return FixTransform(
        scale=scale,
        translate_x=padding + (target - box.width * scale) / 2 - box.min_x * scale,
        translate_y=padding + (target - box.height * scale) / 2 - box.min_y * scale,
    )


def apply_fix(svg: str, fix: FixTransform, drawables: list[SvgElement] | None = None) -> str:
    """Apply one corrective transform to every drawing element of ``svg``."""
    if drawables is None:
        drawables = find_drawables(svg)

    splices: list[tuple[int, int, str]] = []
    owners_done: set[tuple[int, int]] = set()
    correction = format_transform(fix.scale, fix.translate_x, fix.translate_y)

    for element in drawables:
        owner = element.transform_owner
        if owner is not None:
            if owner.source_span in owners_done:
                continue
            owners_done.add(owner.source_span)
            new_tag = set_attrs(owner.source_tag, {"transform": f"{correction} {owner.transform}"})
            start, end = owner.source_span
            splices.append((start, end - start, new_tag))
            continue

        try:
            updates = transform_element_attrs(
                element.name, element.attrs, fix.scale, fix.translate_x, fix.translate_y
            )
        except MalformedPathError as e:
            logger.warning("Leaving malformed <%s> untouched: %s", element.name, e)
            continue
        start, end = element.source_span
        splices.append((start, end - start, set_attrs(element.source_tag, updates)))

    return apply_splices(svg, splices)


def validate(
    svg: str,
    canvas_size: float = 24.0,
    margin_warn_threshold: float = 1.0,
    auto_fix: bool = True,
    padding: float = 2.0,
    strict: bool = False,
    exact: bool = False,
) -> ValidationReport:
    """Check an icon's geometry against ``[0, canvas_size]`` and optionally fix it.

    ``fixed_svg`` is set only when the icon was out of bounds and auto-fix
    ran. With ``strict=True`` structural problems raise InvalidIconError, and
    an out-of-bounds icon raises OutOfBoundsError when auto-fix is off.
    """
    warnings: list[str] = []

    root = find_root(svg)
    if strict:
        if root is None:
            raise InvalidIconError("Missing <svg> root element")
        if not has_closing_svg(svg):
            raise InvalidIconError("Missing </svg> closing tag")

    declared = view_box_size(svg)
    if root is not None and "viewBox" not in root.attrs:
        warnings.append("icon should have a viewBox attribute")
    elif declared is not None and abs(declared - canvas_size) > _EPSILON:
        warnings.append(f"viewBox size {declared:g} differs from canvas size {canvas_size:g}")

    drawables = find_drawables(svg)
    if not drawables:
        if strict:
            raise InvalidIconError("Icon has no drawable elements")
        warnings.append("icon has no drawable elements")
        return ValidationReport(valid=False, bounding_box=None, canvas_size=canvas_size, warnings=tuple(warnings))

    box, notes = collect_bounds(svg, drawables, exact=exact)
    warnings.extend(notes)
    if box is None:
        warnings.append("icon has no measurable geometry")
        return ValidationReport(valid=False, bounding_box=None, canvas_size=canvas_size, warnings=tuple(warnings))

    overshoot = out_of_bounds_amount(box, canvas_size)
    valid = overshoot <= _EPSILON
    edges = near_boundary_edges(box, canvas_size, margin_warn_threshold)
    if edges:
        warning = NearBoundaryWarning(f"geometry within {margin_warn_threshold:g} of the {', '.join(edges)} edge(s)", edges=edges)
        logger.debug("%s", warning)
        warnings.append(str(warning))

    if valid:
        return ValidationReport(
            valid=True,
            bounding_box=box,
            canvas_size=canvas_size,
            near_boundary_edges=edges,
            warnings=tuple(warnings),
        )

    oob = OutOfBoundsWarning(
        f"geometry extends {overshoot:.2f} units outside the {canvas_size:g}x{canvas_size:g} canvas",
        amount=overshoot,
    )
    logger.info("%s", oob)
    warnings.append(str(oob))

    fixed_svg = None
    fix = None
    if auto_fix:
        fix = compute_fix(box, canvas_size, padding)
        fixed_svg = apply_fix(svg, fix, drawables)
        logger.info(
            "Auto-fix applied: scale=%.4f translate=(%.4f, %.4f)", fix.scale, fix.translate_x, fix.translate_y
        )

    report = ValidationReport(
        valid=False,
        bounding_box=box,
        canvas_size=canvas_size,
        out_of_bounds_amount=overshoot,
        near_boundary_edges=edges,
        fixed_svg=fixed_svg,
        fix=fix,
        warnings=tuple(warnings),
    )
    if strict and not auto_fix:
        raise OutOfBoundsError(str(oob), report=report)
    return report


def format_validation(report: ValidationReport) -> str:
    lines = [f"Validation: {'valid' if report.valid else 'OUT OF BOUNDS'} (canvas {report.canvas_size:g})"]
    if report.bounding_box is not None:
        b = report.bounding_box
        lines.append(f"  box: x={b.x:.2f} y={b.y:.2f} w={b.width:.2f} h={b.height:.2f}")
    if not report.valid and report.out_of_bounds_amount:
        lines.append(f"  overshoot: {report.out_of_bounds_amount:.2f}")
    if report.near_boundary_edges:
        lines.append(f"  near edges: {', '.join(report.near_boundary_edges)}")
    if report.fix is not None:
        f = report.fix
        lines.append(f"  fix: scale={f.scale:.4f} translate=({f.translate_x:.4f}, {f.translate_y:.4f})")
    for warning in report.warnings:
        lines.append(f"  - {warning}")
    return "\n".join(lines)
