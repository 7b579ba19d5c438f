"""POST /api/kitbash — plan and assemble an icon from library fragments."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter

from iconsmith.config import settings
from iconsmith.dependencies import get_analysis_cache, get_collaborator, get_index_builder, get_pipeline
from iconsmith.errors import NoLayoutAvailableError
from iconsmith.kitbash import run_kitbash
from iconsmith.kitbash.index import gather_classifications
from iconsmith.models.fragment import FragmentClassification, LibraryIcon
from iconsmith.models.requests import KitbashRequest
from iconsmith.models.responses import GapSummary, KitbashResponse, MatchSummary

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/kitbash", response_model=KitbashResponse)
async def kitbash(req: KitbashRequest) -> KitbashResponse:
    start = time.perf_counter()
    collaborator = get_collaborator()
    builder = get_index_builder()
    icons = [
        LibraryIcon(id=i.id, svg=i.svg, name=i.name, tags=frozenset(t.lower() for t in i.tags)) for i in req.library
    ]

    warnings: list[str] = []
    labels: dict[str, FragmentClassification] = {}
    # Classify only when the library is not indexed yet
    if builder.cache_key(req.library_id) not in builder.cache:
        labels, notes = await gather_classifications(icons, collaborator, settings.external_timeout_s)
        warnings.extend(notes)
    index = builder.build(req.library_id, icons, labels)

    try:
        result = await run_kitbash(
            req.concept,
            index,
            requirements=req.primitives,
            layout=req.layout,
            decomposer=collaborator,
            suggester=collaborator,
            gap_filler=collaborator,
            render_mode=req.render_mode,
            canvas_size=settings.canvas_size,
            pipeline=get_pipeline(),
            cache=get_analysis_cache(),
        )
    except NoLayoutAvailableError as e:
        return KitbashResponse(concept=req.concept, warnings=warnings, error=str(e))

    plan = result.plan
    elapsed = (time.perf_counter() - start) * 1000
    logger.info("Kitbash %r finished in %.0fms (%s)", req.concept, elapsed, plan.strategy.value)

    return KitbashResponse(
        svg=result.svg,
        concept=plan.concept,
        strategy=plan.strategy.value,
        coverage=plan.coverage,
        found=[
            MatchSummary(
                role=m.requirement.role,
                fragment_id=m.fragment.id,
                source_icon_id=m.fragment.source_icon_id,
                geometric_type=m.fragment.geometric_type.value,
                confidence=m.confidence,
            )
            for m in plan.found_matches
        ],
        missing=list(plan.missing_roles),
        layout=result.layout,
        gaps=[
            GapSummary(role=g.role, shape=g.shape.value, x=g.position.x, y=g.position.y, scale=g.position.scale)
            for g in result.gaps
        ],
        warnings=warnings + list(result.warnings),
    )
