"""S5: Optimization.

Hands the icon to the pipeline's optimizer, configured by the profile: number
precision always applies, while path merging and shape→path conversion are
only used when the profile allows them (generated icons keep kitbash
components independently addressable). An optimizer failure is a warning,
never an error: the unoptimized icon continues down the pipeline.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile
from iconsmith.errors import MalformedPathError
from iconsmith.models.icon import IconState, Optimizer
from iconsmith.svg.elements import SvgElement, apply_splices, find_drawables, set_attrs, to_float
from iconsmith.svg.path_parser import format_number, parse_path, round_commands
from iconsmith.svg.serializer import build_tag
from iconsmith.svg.shapes import element_to_path, normalize_path_start

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_METADATA_RE = re.compile(r"<metadata\b[\s\S]*?(?:</metadata\s*>|/>)", re.IGNORECASE)
_EMPTY_ATTR_RE = re.compile(r"""\s[A-Za-z_:][\w:.-]*\s*=\s*(?:""|'')""")
_BLANK_LINES_RE = re.compile(r"\n[ \t]*(?=\n)")
_PURE_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")

_GEOMETRY_ATTRS = ("cx", "cy", "r", "rx", "ry", "x", "y", "width", "height", "x1", "y1", "x2", "y2")
_SHAPE_GEOMETRY = {
    "circle": {"cx", "cy", "r"},
    "ellipse": {"cx", "cy", "rx", "ry"},
    "rect": {"x", "y", "width", "height", "rx", "ry"},
    "line": {"x1", "y1", "x2", "y2"},
    "polyline": {"points"},
    "polygon": {"points"},
}


class BasicOptimizer:
    """Deterministic size optimizer for stroke icons."""

    def optimize(self, svg: str, profile: StyleProfile) -> str:
        svg = _COMMENT_RE.sub("", svg)
        svg = _METADATA_RE.sub("", svg)
        svg = _EMPTY_ATTR_RE.sub("", svg)
        svg = self._round_numbers(svg, profile.float_precision)
        if profile.allow_shape_to_path:
            svg = self._shapes_to_paths(svg)
        if profile.allow_path_merging:
            svg = self._merge_paths(svg)
        return _BLANK_LINES_RE.sub("", svg)

    def _round_numbers(self, svg: str, precision: int) -> str:
        too_precise = re.compile(r"\d\.\d{%d,}" % (precision + 1))
        splices: list[tuple[int, int, str]] = []

        for element in find_drawables(svg):
            updates: dict[str, str | None] = {}
            d = element.attrs.get("d")
            if d and too_precise.search(d):
                try:
                    updates["d"] = round_commands(parse_path(d), precision)
                except MalformedPathError as e:
                    logger.warning("Not rounding malformed path data: %s", e)
            for attr in _GEOMETRY_ATTRS:
                value = element.attrs.get(attr)
                if value and _PURE_NUMBER_RE.match(value) and too_precise.search(value):
                    updates[attr] = format_number(to_float(value), precision)
            if updates:
                start, end = element.source_span
                splices.append((start, end - start, set_attrs(element.source_tag, updates)))

        return apply_splices(svg, splices)

    def _shapes_to_paths(self, svg: str) -> str:
        splices: list[tuple[int, int, str]] = []
        for element in find_drawables(svg):
            name = element.name.lower()
            if name == "path" or not element.self_closing:
                continue
            d = element_to_path(element)
            if d is None:
                continue
            geometry = _SHAPE_GEOMETRY.get(name, set())
            attrs = {"d": d, **{k: v for k, v in element.attrs.items() if k not in geometry}}
            start, end = element.source_span
            splices.append((start, end - start, build_tag("path", attrs)))
        return apply_splices(svg, splices)

    def _merge_paths(self, svg: str) -> str:
        """Merge runs of adjacent sibling paths that share every other attribute."""
        runs: list[list[SvgElement]] = []
        for element in find_drawables(svg):
            if element.name.lower() != "path" or not element.self_closing or "d" not in element.attrs:
                continue
            if runs:
                prev = runs[-1][-1]
                between = svg[prev.source_span[1] : element.source_span[0]]
                if (
                    not between.strip()
                    and prev.ancestors == element.ancestors
                    and _style_key(prev) == _style_key(element)
                    and "transform" not in element.attrs
                ):
                    runs[-1].append(element)
                    continue
            runs.append([element])

        splices: list[tuple[int, int, str]] = []
        for run in runs:
            if len(run) < 2:
                continue
            merged_d = " ".join(normalize_path_start(el.attrs["d"]) for el in run)
            first, last = run[0], run[-1]
            new_tag = set_attrs(first.source_tag, {"d": merged_d})
            splices.append((first.source_span[0], last.source_span[1] - first.source_span[0], new_tag))
        return apply_splices(svg, splices)


def _style_key(element: SvgElement) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((k, v) for k, v in element.attrs.items() if k not in ("d", "id")))


@stage(id="optimize", dependencies=["normalize"], description="Size optimization per profile")
def optimize(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    try:
        optimizer: Optimizer = state.optimizer or BasicOptimizer()
        svg = optimizer.optimize(state.svg, profile)
    except Exception as e:
        logger.warning("Optimizer failed, continuing unoptimized: %s", e)
        return state, [f"[optimize] optimization failed: {e}"]
    return replace(state, svg=svg), []
