"""Assembly planning: match required shape primitives to library fragments.

A plan moves through ``planned → strategy chosen → layout chosen →
executed``. This module covers the first three; execution lives in the
assembler. Everything here is a pure function of its inputs except the
optional collaborator calls, which are bounded by a timeout and degrade to
deterministic fallbacks.
"""

from __future__ import annotations

import asyncio
import logging

from iconsmith.cache import AnalysisCache
from iconsmith.config import settings
from iconsmith.errors import MissingExternalDataWarning
from iconsmith.kitbash.collaborators import ConceptDecomposer, LayoutSuggester
from iconsmith.kitbash.index import FragmentIndex
from iconsmith.kitbash.layout import choose_layouts
from iconsmith.models.fragment import GeometricType, ShapeFragment
from iconsmith.models.plan import (
    Aspect,
    AssemblyPlan,
    FragmentMatch,
    Layout,
    ShapePrimitiveRequirement,
    Strategy,
)

logger = logging.getLogger(__name__)

GRAFT_THRESHOLD = 0.9
HYBRID_THRESHOLD = 0.5

# Width/height ratio accepted as "square"
_SQUARE_RANGE = (0.7, 1.4)
_STRUCTURAL_CATEGORIES = frozenset({"body", "container"})


def _fits_aspect(fragment: ShapeFragment, aspect: Aspect) -> bool:
    ratio = fragment.bounding_box.aspect_ratio
    if aspect is Aspect.TALL:
        return ratio <= 1.0
    if aspect is Aspect.WIDE:
        return ratio >= 1.0
    if aspect is Aspect.SQUARE:
        return _SQUARE_RANGE[0] <= ratio <= _SQUARE_RANGE[1]
    return True


def find_geometric_matches(
    requirement: ShapePrimitiveRequirement,
    index: FragmentIndex,
    exclude: set[str] | None = None,
) -> list[ShapeFragment]:
    """Candidates of the requested shape type, narrowed by aspect when possible.

    Complex requirements have no ``geometric:`` key, so they are looked up by
    role name instead. If the aspect filter leaves nothing, the unfiltered
    candidates are returned.
    """
    if requirement.shape is GeometricType.COMPLEX:
        candidates = index.search(requirement.role)
    else:
        candidates = index.by_geometry(requirement.shape)
    if exclude:
        candidates = [f for f in candidates if f.id not in exclude]

    if requirement.aspect is Aspect.NONE or not candidates:
        return candidates
    narrowed = [f for f in candidates if _fits_aspect(f, requirement.aspect)]
    return narrowed or candidates


def score_fragment(requirement: ShapePrimitiveRequirement, fragment: ShapeFragment) -> float:
    score = 50.0
    if fragment.geometric_type is requirement.shape:
        score += 30
    if fragment.semantic_category in _STRUCTURAL_CATEGORIES:
        score += 20
    # Visually simpler fragments suit structural roles
    score += (1.0 - fragment.visual_weight) * 30
    if fragment.geometric_type is GeometricType.COMPLEX:
        score -= 50
    return score


def select_best_match(
    requirement: ShapePrimitiveRequirement,
    candidates: list[ShapeFragment],
) -> FragmentMatch | None:
    """Highest-scoring candidate; the first one wins a tie."""
    if not candidates:
        return None
    best = max(candidates, key=lambda f: score_fragment(requirement, f))
    confidence = max(0.0, min(1.0, score_fragment(requirement, best) / 100))
    return FragmentMatch(requirement=requirement, fragment=best, confidence=confidence)


def select_strategy(coverage: float, found_count: int) -> Strategy:
    if coverage >= GRAFT_THRESHOLD:
        return Strategy.GRAFT
    if coverage >= HYBRID_THRESHOLD:
        return Strategy.HYBRID
    if found_count == 1:
        return Strategy.ADAPT
    return Strategy.GENERATE


def build_plan(
    concept: str,
    requirements: list[ShapePrimitiveRequirement],
    index: FragmentIndex,
    warnings: list[str] | None = None,
) -> AssemblyPlan:
    """Match every requirement in order. A fragment fills at most one role."""
    used: set[str] = set()
    found: list[FragmentMatch] = []
    missing: list[str] = []

    for requirement in requirements:
        match = select_best_match(requirement, find_geometric_matches(requirement, index, exclude=used))
        if match is None:
            missing.append(requirement.role)
            continue
        used.add(match.fragment.id)
        found.append(match)

    coverage = len(found) / len(requirements) if requirements else 0.0
    plan = AssemblyPlan(
        concept=concept,
        required_primitives=tuple(requirements),
        found_matches=tuple(found),
        missing_roles=tuple(missing),
        coverage=coverage,
        strategy=select_strategy(coverage, len(found)),
        warnings=tuple(warnings or ()),
    )
    logger.info(
        "Plan %r: %d/%d roles found, coverage %.2f, strategy %s",
        concept,
        len(found),
        len(requirements),
        coverage,
        plan.strategy.value,
    )
    return plan


def trivial_requirements(concept: str) -> list[ShapePrimitiveRequirement]:
    return [ShapePrimitiveRequirement(role=concept.strip() or "concept", shape=GeometricType.COMPLEX)]


async def _decompose(
    concept: str,
    decomposer: ConceptDecomposer | None,
    timeout: float,
    cache: AnalysisCache | None,
) -> tuple[list[ShapePrimitiveRequirement] | None, list[str]]:
    key = f"decompose:{concept.strip().lower()}"
    if cache is not None and key in cache:
        return cache.get(key), []
    if decomposer is None:
        warning = MissingExternalDataWarning("no concept decomposer; using a single-part plan", concept=concept)
        logger.warning("%s", warning)
        return None, [str(warning)]

    try:
        requirements = await asyncio.wait_for(decomposer.decompose(concept), timeout)
    except asyncio.TimeoutError:
        requirements = None
        logger.warning("Concept decomposition timed out after %.1fs", timeout)
    except Exception as e:
        requirements = None
        logger.warning("Concept decomposition failed: %s", e)

    if not requirements:
        warning = MissingExternalDataWarning("concept decomposition unavailable; using a single-part plan", concept=concept)
        return None, [str(warning)]
    if cache is not None:
        cache.set(key, requirements)
    return requirements, []


async def plan_assembly(
    concept: str,
    index: FragmentIndex,
    requirements: list[ShapePrimitiveRequirement] | None = None,
    decomposer: ConceptDecomposer | None = None,
    timeout: float | None = None,
    cache: AnalysisCache | None = None,
) -> AssemblyPlan:
    """Plan ``concept`` against ``index``.

    Explicit ``requirements`` skip the decomposer. Without either, the plan
    has a single complex primitive named after the concept.
    """
    warnings: list[str] = []
    if requirements is None:
        limit = settings.external_timeout_s if timeout is None else timeout
        requirements, notes = await _decompose(concept, decomposer, limit, cache)
        warnings.extend(notes)
    if not requirements:
        requirements = trivial_requirements(concept)
    return build_plan(concept, list(requirements), index, warnings)


async def plan_layouts(
    plan: AssemblyPlan,
    suggester: LayoutSuggester | None = None,
    canvas_size: float = 24.0,
    timeout: float | None = None,
) -> tuple[list[Layout], list[str]]:
    """Candidate layouts for every role of ``plan``, found and missing alike."""
    roles = plan.roles
    suggestion: Layout | None = None
    warnings: list[str] = []
    if suggester is not None and roles:
        limit = settings.external_timeout_s if timeout is None else timeout
        try:
            suggestion = await asyncio.wait_for(suggester.suggest_layout(plan.concept, roles, canvas_size), limit)
        except asyncio.TimeoutError:
            logger.warning("Layout suggestion timed out after %.1fs", limit)
        except Exception as e:
            logger.warning("Layout suggestion failed: %s", e)
        if suggestion is None:
            warnings.append(str(MissingExternalDataWarning("no layout suggestion; using default layouts")))

    layouts, notes = choose_layouts(roles, suggestion, canvas_size)
    return layouts, warnings + notes


def format_plan(plan: AssemblyPlan, layouts: list[Layout] | None = None) -> str:
    lines = [
        f"Concept: {plan.concept}",
        f"Strategy: {plan.strategy.value.upper()} ({plan.coverage * 100:.0f}% coverage)",
    ]
    if plan.found_matches:
        lines.append("Found parts:")
        for match in plan.found_matches:
            lines.append(
                f"  + {match.requirement.role} ({match.confidence * 100:.0f}% confidence) "
                f"from {match.fragment.source_icon_id} [{match.fragment.geometric_type.value}]"
            )
    if plan.missing_roles:
        lines.append("Missing parts:")
        lines.extend(f"  - {role}" for role in plan.missing_roles)
    if layouts:
        lines.append("Layouts:")
        lines.extend(f"  * {layout.name}: {layout.description}" for layout in layouts)
    for warning in plan.warnings:
        lines.append(f"  ! {warning}")
    return "\n".join(lines)
