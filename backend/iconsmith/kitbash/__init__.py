"""Kitbash: assemble new icons from fragments of existing ones.

Steps:
  1. Plan -- decompose the concept, match each part to an index fragment, pick a strategy
  2. Layout -- a complete placement for every part, suggested or default
  3. Execute -- wrap each fragment in a positioned group, leave gaps for generation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from iconsmith.cache import AnalysisCache
from iconsmith.engine.pipeline import StylePipeline
from iconsmith.kitbash.assembler import AssemblyResult, KitbashAssembler, RenderMode
from iconsmith.kitbash.collaborators import ConceptDecomposer, GapFiller, LayoutSuggester
from iconsmith.kitbash.index import FragmentIndex, FragmentIndexBuilder
from iconsmith.kitbash.planner import format_plan, plan_assembly, plan_layouts
from iconsmith.models.plan import AssemblyPlan, Layout, ShapePrimitiveRequirement, Strategy

logger = logging.getLogger(__name__)


async def run_kitbash(
    concept: str,
    index: FragmentIndex,
    requirements: list[ShapePrimitiveRequirement] | None = None,
    layout: Layout | None = None,
    decomposer: ConceptDecomposer | None = None,
    suggester: LayoutSuggester | None = None,
    gap_filler: GapFiller | None = None,
    render_mode: RenderMode | str = RenderMode.DRAFT,
    canvas_size: float = 24.0,
    pipeline: StylePipeline | None = None,
    cache: AnalysisCache | None = None,
    timeout: float | None = None,
) -> AssemblyResult:
    """Plan, lay out and execute ``concept`` in one call.

    An explicit ``layout`` replaces the suggester and default layouts; if
    it leaves a role unplaced the defaults are used instead.
    """
    plan = await plan_assembly(concept, index, requirements, decomposer, timeout=timeout, cache=cache)
    notes: list[str] = []
    if layout is not None:
        layouts = [layout]
    else:
        layouts, notes = await plan_layouts(plan, suggester, canvas_size, timeout=timeout)
    logger.debug("%s", format_plan(plan, layouts))

    assembler = KitbashAssembler(pipeline=pipeline, gap_filler=gap_filler, canvas_size=canvas_size, timeout=timeout)
    result = await assembler.execute(plan, layouts=layouts, render_mode=render_mode)
    if notes:
        result = replace(result, warnings=(*notes, *result.warnings))
    return result


@dataclass(frozen=True)
class KitbashCheck:
    plan: AssemblyPlan

    @property
    def kitbashable(self) -> bool:
        return self.plan.strategy is not Strategy.GENERATE

    @property
    def coverage(self) -> float:
        return self.plan.coverage

    @property
    def strategy(self) -> Strategy:
        return self.plan.strategy


async def is_kitbashable(
    concept: str,
    index: FragmentIndex,
    requirements: list[ShapePrimitiveRequirement] | None = None,
    decomposer: ConceptDecomposer | None = None,
    timeout: float | None = None,
    cache: AnalysisCache | None = None,
) -> KitbashCheck:
    """Plan only: can ``concept`` be built from library fragments at all?"""
    plan = await plan_assembly(concept, index, requirements, decomposer, timeout=timeout, cache=cache)
    return KitbashCheck(plan)


__all__ = [
    "AssemblyResult",
    "FragmentIndex",
    "FragmentIndexBuilder",
    "KitbashAssembler",
    "KitbashCheck",
    "RenderMode",
    "is_kitbashable",
    "run_kitbash",
]
