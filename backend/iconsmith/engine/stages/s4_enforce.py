"""S4: Style enforcement.

Rewrites stroke, viewBox and fill attributes to the active profile and
attaches the compliance report. Profiles without rules skip the stage.
"""

from __future__ import annotations

from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile, enforce_style
from iconsmith.models.icon import IconState


@stage(id="enforce", dependencies=["normalize"], description="Enforce profile stroke and fill rules")
def enforce(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    if not profile.has_enforcement_rules:
        return state, []

    svg, report = enforce_style(state.svg, profile)
    warnings = []
    if report.changes:
        warnings.append(f"[style] enforcement applied {len(report.changes)} fix(es)")
    warnings.extend(
        f"[style] {v.rule}: expected {v.expected}, got {v.actual}"
        for v in report.violations
        if v.severity == "warning"
    )
    return replace(state, svg=svg, compliance=report), warnings
