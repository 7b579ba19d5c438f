"""Style profiles and deterministic style enforcement.

Enforcement does not hope an icon matches its library: it rewrites the
root stroke attributes, the viewBox and every element's fill to match the
active profile, and reports each change it made.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from iconsmith.models.icon import ProcessingMode
from iconsmith.models.results import Change, ComplianceReport, Violation
from iconsmith.svg.elements import (
    DRAWABLE_TAGS,
    SvgElement,
    apply_splices,
    find_drawables,
    find_root,
    parse_view_box,
    scan_elements,
    set_attrs,
    to_float,
)
from iconsmith.svg.path_parser import format_number

logger = logging.getLogger(__name__)

_COMMAND_LETTER_RE = re.compile(r"[MLHVCSQTAZmlhvcsqtaz]")


@dataclass(frozen=True)
class StyleProfile:
    """Canvas and stroke configuration an icon must conform to.

    Rule fields set to None are not enforced.
    """

    stroke_width: float | None = None
    stroke_linecap: str | None = None
    stroke_linejoin: str | None = None
    view_box_size: float | None = None
    stroke_color: str | None = None
    require_fill_none: bool = False
    max_optical_weight: float | None = None
    max_path_complexity: int | None = None
    # Optimizer constraints
    allow_path_merging: bool = True
    allow_shape_to_path: bool = True
    float_precision: int = 2

    @property
    def view_box(self) -> str | None:
        if self.view_box_size is None:
            return None
        size = format_number(self.view_box_size)
        return f"0 0 {size} {size}"

    @property
    def has_enforcement_rules(self) -> bool:
        return (
            self.stroke_width is not None
            or self.stroke_linecap is not None
            or self.stroke_linejoin is not None
            or self.view_box_size is not None
            or self.stroke_color is not None
            or self.require_fill_none
        )


FEATHER_RULES = StyleProfile(
    stroke_width=2,
    stroke_linecap="round",
    stroke_linejoin="round",
    view_box_size=24,
    require_fill_none=True,
    max_optical_weight=0.4,
    max_path_complexity=40,
)

TABLER_RULES = replace(FEATHER_RULES, max_optical_weight=0.5, max_path_complexity=60)

LUCIDE_RULES = replace(FEATHER_RULES, max_path_complexity=45)

# Generated icons: strict, components stay separate and primitives stay editable
GENERATION_PROFILE = replace(
    FEATHER_RULES,
    stroke_color="currentColor",
    allow_path_merging=False,
    allow_shape_to_path=False,
    float_precision=2,
)

# Ingested icons: no style rules, standard size optimizations allowed
INGESTION_PROFILE = StyleProfile(allow_path_merging=True, allow_shape_to_path=True, float_precision=2)


def default_profile(mode: ProcessingMode | str) -> StyleProfile:
    return GENERATION_PROFILE if ProcessingMode(mode) is ProcessingMode.GENERATE else INGESTION_PROFILE


def _manifest_value(manifest: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = manifest.get(key)
        if value not in (None, ""):
            return value
    return None


def profile_from_manifest(manifest: Mapping[str, Any], mode: ProcessingMode | str) -> StyleProfile:
    """Derive a profile from a library's extracted style manifest.

    Accepts camelCase or snake_case keys. Path merging and shape→path
    conversion are only allowed when ingesting.
    """
    mode = ProcessingMode(mode)
    stroke_width = _manifest_value(manifest, "strokeWidth", "stroke_width")
    view_box_size = _manifest_value(manifest, "viewBoxSize", "view_box_size")
    ingest = mode is ProcessingMode.INGEST
    return StyleProfile(
        stroke_width=float(stroke_width) if stroke_width is not None else None,
        stroke_linecap=_manifest_value(manifest, "strokeLinecap", "stroke_linecap"),
        stroke_linejoin=_manifest_value(manifest, "strokeLinejoin", "stroke_linejoin"),
        view_box_size=float(view_box_size) if view_box_size is not None else None,
        stroke_color=_manifest_value(manifest, "stroke", "strokeColor", "stroke_color") or "currentColor",
        require_fill_none=True,
        max_optical_weight=0.5,
        max_path_complexity=50,
        allow_path_merging=ingest,
        allow_shape_to_path=ingest,
        float_precision=2,
    )


def optical_weight(svg: str) -> float:
    """Path-data length as a rough density proxy, normalized to 0..1."""
    total = sum(len(el.attrs.get("d", "")) for el in find_drawables(svg))
    return min(1.0, total / 1000)


def path_complexity(svg: str) -> int:
    """Number of command letters across all path data."""
    return sum(len(_COMMAND_LETTER_RE.findall(el.attrs.get("d", ""))) for el in find_drawables(svg))


class _Edits:
    """Attribute updates collected per tag, applied as one splice each."""

    def __init__(self) -> None:
        self._tags: dict[tuple[int, int], tuple[SvgElement, dict[str, str | None]]] = {}
        self.changes: list[Change] = []

    def set(self, element: SvgElement, attribute: str, value: str, reason: str) -> None:
        before = element.attrs.get(attribute)
        _, updates = self._tags.setdefault(element.source_span, (element, {}))
        updates[attribute] = value
        self.changes.append(
            Change(attribute=attribute, before=before, after=value, reason=reason, element=element.name)
        )

    def apply(self, svg: str) -> str:
        splices = []
        for (start, end), (element, updates) in self._tags.items():
            splices.append((start, end - start, set_attrs(element.source_tag, updates)))
        return apply_splices(svg, splices)


def _enforce_stroke_attr(
    root: SvgElement,
    others: list[SvgElement],
    attribute: str,
    expected: str,
    same: Any,
    edits: _Edits,
    violations: list[Violation],
) -> None:
    actual = root.attrs.get(attribute)
    conflicting = [el for el in others if attribute in el.attrs and not same(el.attrs[attribute], expected)]
    if actual is not None and same(actual, expected) and not conflicting:
        return

    violations.append(
        Violation(
            rule=attribute,
            expected=expected,
            actual=actual if actual is not None else "not set",
            severity="error",
            auto_fixable=True,
        )
    )
    if actual is None or not same(actual, expected):
        edits.set(root, attribute, expected, "Library standard enforcement")
    for el in conflicting:
        edits.set(el, attribute, expected, "Child override conflicts with library standard")


def _same_number(actual: str, expected: str) -> bool:
    return abs(to_float(actual, float("nan")) - float(expected)) < 1e-9


def _same_text(actual: str, expected: str) -> bool:
    return actual.strip() == expected


def _same_view_box(actual: str, expected: str) -> bool:
    return parse_view_box(actual) == parse_view_box(expected)


def enforce_style(svg: str, profile: StyleProfile) -> tuple[str, ComplianceReport]:
    """Rewrite ``svg`` to satisfy ``profile`` and report every violation and change."""
    violations: list[Violation] = []
    edits = _Edits()

    root = find_root(svg)
    if root is None:
        missing = Violation(rule="structure", expected="<svg> root", actual="missing", auto_fixable=False)
        return svg, ComplianceReport(passed=False, score=0, violations=(missing,))

    elements = [el for el in scan_elements(svg) if el.source_span != root.source_span]
    styled = [el for el in elements if el.name.lower() in DRAWABLE_TAGS or el.name.lower() == "g"]

    if profile.stroke_width is not None:
        _enforce_stroke_attr(root, styled, "stroke-width", format_number(profile.stroke_width), _same_number, edits, violations)
    if profile.stroke_linecap is not None:
        _enforce_stroke_attr(root, styled, "stroke-linecap", profile.stroke_linecap, _same_text, edits, violations)
    if profile.stroke_linejoin is not None:
        _enforce_stroke_attr(root, styled, "stroke-linejoin", profile.stroke_linejoin, _same_text, edits, violations)
    if profile.stroke_color is not None:
        # stroke="none" on a child is a deliberate cut-out, not a conflict
        colored = [el for el in styled if el.attrs.get("stroke", "").strip() != "none"]
        _enforce_stroke_attr(root, colored, "stroke", profile.stroke_color, _same_text, edits, violations)

    expected_view_box = profile.view_box
    if expected_view_box is not None:
        actual = root.attrs.get("viewBox")
        if actual is None or not _same_view_box(actual, expected_view_box):
            violations.append(
                Violation(rule="viewBox", expected=expected_view_box, actual=actual or "not set")
            )
            edits.set(root, "viewBox", expected_view_box, "Library standard enforcement")

    if profile.require_fill_none:
        drawables = find_drawables(svg)
        filled = [el for el in drawables if el.attrs.get("fill", "").strip() != "none"]
        root_fill = root.attrs.get("fill", "").strip()
        if filled or root_fill != "none":
            violations.append(
                Violation(
                    rule="element-fill",
                    expected='fill="none" on all elements',
                    actual=f"{len(filled)} element(s) without fill=\"none\"",
                    element=", ".join(el.name for el in filled[:3]) or "svg",
                )
            )
            if root_fill != "none":
                edits.set(root, "fill", "none", "Stroke-only icon enforcement")
            for el in filled:
                edits.set(el, "fill", "none", "Stroke-only icon enforcement")

    if profile.max_optical_weight is not None:
        weight = optical_weight(svg)
        if weight > profile.max_optical_weight:
            violations.append(
                Violation(
                    rule="optical-weight",
                    expected=f"<{profile.max_optical_weight:.2f}",
                    actual=f"{weight:.2f}",
                    severity="warning",
                    auto_fixable=False,
                )
            )

    if profile.max_path_complexity is not None:
        complexity = path_complexity(svg)
        if complexity > profile.max_path_complexity:
            violations.append(
                Violation(
                    rule="path-complexity",
                    expected=f"<{profile.max_path_complexity} commands",
                    actual=f"{complexity} commands",
                    severity="warning",
                    auto_fixable=False,
                )
            )

    errors = sum(1 for v in violations if v.severity == "error")
    warnings = len(violations) - errors
    report = ComplianceReport(
        passed=errors == 0,
        score=max(0, 100 - errors * 20 - warnings * 5),
        violations=tuple(violations),
        changes=tuple(edits.changes),
    )
    logger.debug("Style enforcement: %d violation(s), %d change(s)", len(violations), len(edits.changes))
    return edits.apply(svg), report


def format_compliance(report: ComplianceReport) -> str:
    lines = [f"{'COMPLIANT' if report.passed else 'NON-COMPLIANT'} (Score: {report.score}/100)"]
    if report.violations:
        lines.append("Violations:")
        for v in report.violations:
            fixed = " [auto-fixed]" if v.auto_fixable else ""
            lines.append(f"  [{v.severity}] {v.rule}: expected {v.expected}, got {v.actual}{fixed}")
    if report.changes:
        lines.append("Changes applied:")
        for c in report.changes:
            lines.append(f'  {c.element}.{c.attribute}: "{c.before or "not set"}" -> "{c.after}"')
    return "\n".join(lines)
