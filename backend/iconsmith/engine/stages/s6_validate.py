"""S6: Final validation.

Re-runs the coordinate validator against the profile's canvas (falling back
to the icon's own viewBox, then the configured canvas) and applies any
last-mile auto-fix.
"""

from __future__ import annotations

from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile
from iconsmith.engine.validator import validate as validate_bounds
from iconsmith.models.icon import IconState
from iconsmith.svg.elements import view_box_size


def canvas_size_for(state: IconState, profile: StyleProfile) -> float:
    if profile.view_box_size is not None:
        return float(profile.view_box_size)
    return view_box_size(state.svg) or state.canvas_size


@stage(
    id="validate",
    dependencies=["normalize", "optimize"],
    terminal=True,
    description="Bounds check with last-mile auto-fix",
)
def validate(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    report = validate_bounds(
        state.svg,
        canvas_size=canvas_size_for(state, profile),
        margin_warn_threshold=state.warning_margin,
        auto_fix=True,
        padding=state.fix_padding,
    )
    svg = report.fixed_svg if report.fixed_svg is not None else state.svg
    return replace(state, svg=svg, validation=report), list(report.warnings)
