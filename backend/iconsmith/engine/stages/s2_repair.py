"""S2: Path repair (generation mode).

Generated path data often carries malformed idioms: dangling numbers, stray
characters, a leading relative ``m`` or no initial MoveTo. Each path is
repaired before any later stage parses it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile
from iconsmith.models.icon import IconState
from iconsmith.svg.elements import apply_splices, find_drawables, set_attrs
from iconsmith.svg.path_parser import repair_path

logger = logging.getLogger(__name__)


@stage(id="repair", dependencies=["sanitize"], description="Repair malformed path data")
def repair(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    warnings: list[str] = []
    splices: list[tuple[int, int, str]] = []

    for element in find_drawables(state.svg):
        if element.name.lower() != "path" or "d" not in element.attrs:
            continue
        fixed, notes = repair_path(element.attrs["d"])
        if not notes:
            continue
        warnings.extend(f"[path-repair] {note}" for note in notes)
        start, end = element.source_span
        if fixed:
            splices.append((start, end - start, set_attrs(element.source_tag, {"d": fixed})))
        else:
            # Nothing drawable survived; drop the element
            logger.warning("Dropping <path> with unrecoverable data %r", element.attrs["d"][:40])
            splices.append((start, end - start, ""))

    if not splices:
        return state, warnings
    return replace(state, svg=apply_splices(state.svg, splices)), warnings
