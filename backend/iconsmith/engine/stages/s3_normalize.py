"""S3: Normalize.

Folds inline ``style`` declarations into native presentation attributes so
later stages only ever read attributes. A declaration wins over an existing
attribute of the same name, matching CSS precedence.
"""

from __future__ import annotations

from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile
from iconsmith.models.icon import IconState
from iconsmith.svg.elements import apply_splices, scan_elements, set_attrs

PRESENTATION_ATTRIBUTES = frozenset({
    "fill", "stroke", "stroke-width", "stroke-linecap", "stroke-linejoin",
    "stroke-dasharray", "stroke-dashoffset", "stroke-miterlimit", "stroke-opacity",
    "fill-opacity", "fill-rule", "clip-rule", "opacity", "visibility", "display", "color",
    "font-family", "font-size", "font-weight", "text-anchor", "dominant-baseline",
})


def parse_style(style: str) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for item in style.split(";"):
        prop, sep, value = item.partition(":")
        prop, value = prop.strip().lower(), value.strip()
        if sep and prop and value:
            declarations[prop] = value
    return declarations


def normalize_styles(svg: str) -> tuple[str, list[str]]:
    splices: list[tuple[int, int, str]] = []
    dropped: set[str] = set()

    for element in scan_elements(svg):
        style = element.attrs.get("style")
        if style is None:
            continue
        updates: dict[str, str | None] = {"style": None}
        for prop, value in parse_style(style).items():
            if prop in PRESENTATION_ATTRIBUTES:
                updates[prop] = value
            else:
                dropped.add(prop)
        start, end = element.source_span
        splices.append((start, end - start, set_attrs(element.source_tag, updates)))

    notes = [f"[normalize] dropped non-presentation style properties: {', '.join(sorted(dropped))}"] if dropped else []
    return apply_splices(svg, splices), notes


@stage(id="normalize", dependencies=["sanitize"], description="Fold inline styles into attributes")
def normalize(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    svg, notes = normalize_styles(state.svg)
    return replace(state, svg=svg), notes
