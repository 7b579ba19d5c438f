"""Tests for assembly planning and strategy selection."""

import asyncio

import pytest

from iconsmith.cache import AnalysisCache
from iconsmith.kitbash.planner import (
    build_plan,
    find_geometric_matches,
    format_plan,
    plan_assembly,
    plan_layouts,
    select_best_match,
    select_strategy,
)
from iconsmith.models.fragment import GeometricType
from iconsmith.models.plan import Aspect, Layout, Position, ShapePrimitiveRequirement, Strategy
from tests.conftest import index_of, make_fragment

ROCKET = [
    ShapePrimitiveRequirement(role="body", shape="capsule", aspect="tall"),
    ShapePrimitiveRequirement(role="nose", shape="triangle"),
    ShapePrimitiveRequirement(role="fins", shape="triangle"),
]


class FakeDecomposer:
    def __init__(self, answer=None, delay=0.0, error=None):
        self.answer = answer
        self.delay = delay
        self.error = error
        self.calls = 0

    async def decompose(self, concept):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.answer


class FakeSuggester:
    def __init__(self, layout):
        self.layout = layout

    async def suggest_layout(self, concept, roles, canvas_size):
        return self.layout


@pytest.mark.parametrize(
    "coverage,found,strategy",
    [
        (1.0, 3, Strategy.GRAFT),
        (0.95, 19, Strategy.GRAFT),
        (0.9, 9, Strategy.GRAFT),
        (0.7, 2, Strategy.HYBRID),
        (0.5, 1, Strategy.HYBRID),
        (0.3, 1, Strategy.ADAPT),
        (0.3, 2, Strategy.GENERATE),
        (0.0, 0, Strategy.GENERATE),
    ],
)
def test_strategy_thresholds(coverage, found, strategy):
    assert select_strategy(coverage, found) is strategy


def test_rocket_plan(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    assert plan.coverage == pytest.approx(2 / 3)
    assert plan.strategy is Strategy.HYBRID
    assert [m.requirement.role for m in plan.found_matches] == ["body", "nose"]
    assert plan.match_for("body").fragment.id == "battery-case"
    assert plan.match_for("nose").fragment.id == "play-triangle"
    assert plan.missing_roles == ("fins",)
    assert plan.roles == ["body", "nose", "fins"]


def test_fragment_fills_one_role(rocket_index):
    plan = build_plan("arrows", ROCKET[1:], rocket_index)
    assert len(plan.found_matches) == 1
    assert plan.missing_roles == ("fins",)


def test_confidence_is_clamped(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    assert all(0.0 <= m.confidence <= 1.0 for m in plan.found_matches)


def test_empty_requirements():
    plan = build_plan("nothing", [], index_of())
    assert plan.coverage == 0.0
    assert plan.strategy is Strategy.GENERATE


def test_aspect_narrows_candidates():
    tall = make_fragment("tall", GeometricType.RECT, box=(0, 0, 2, 10))
    wide = make_fragment("wide", GeometricType.RECT, box=(0, 0, 10, 2))
    index = index_of(tall, wide)

    req = ShapePrimitiveRequirement(role="pole", shape="rect", aspect=Aspect.TALL)
    assert [f.id for f in find_geometric_matches(req, index)] == ["tall"]
    req = ShapePrimitiveRequirement(role="bar", shape="rect", aspect="wide")
    assert [f.id for f in find_geometric_matches(req, index)] == ["wide"]
    # Nothing square: fall back to every rect
    req = ShapePrimitiveRequirement(role="tile", shape="rect", aspect="square")
    assert len(find_geometric_matches(req, index)) == 2


def test_complex_requirement_found_by_role():
    handle = make_fragment("handle", GeometricType.COMPLEX)
    index = index_of(handle)
    req = ShapePrimitiveRequirement(role="handle")
    match = select_best_match(req, find_geometric_matches(req, index))
    assert match.fragment is handle
    # +30 exact type, -50 complex, (1 - 0.2) * 30
    assert match.confidence == pytest.approx(0.54)


def test_first_candidate_wins_tie():
    a = make_fragment("a", GeometricType.CIRCLE)
    b = make_fragment("b", GeometricType.CIRCLE)
    req = ShapePrimitiveRequirement(role="wheel", shape="circle")
    assert select_best_match(req, [a, b]).fragment is a
    assert select_best_match(req, []) is None


def test_structural_category_preferred():
    plain = make_fragment("plain", GeometricType.RECT, weight=0.1)
    body = make_fragment("shell", GeometricType.RECT, category="body", weight=0.5)
    req = ShapePrimitiveRequirement(role="hull", shape="rect")
    assert select_best_match(req, [plain, body]).fragment is body


def test_lenient_requirement_fields():
    req = ShapePrimitiveRequirement(role="x", shape="L_shape", aspect="sideways")
    assert req.shape is GeometricType.L_SHAPE
    assert req.aspect is Aspect.NONE
    assert ShapePrimitiveRequirement(role="y", shape="blob").shape is GeometricType.COMPLEX


def test_plan_without_decomposer(rocket_index):
    plan = asyncio.run(plan_assembly("Rocket", rocket_index))
    assert [r.role for r in plan.required_primitives] == ["Rocket"]
    assert plan.required_primitives[0].shape is GeometricType.COMPLEX
    assert plan.strategy is Strategy.GENERATE
    assert any(w.startswith("[missing-external-data]") for w in plan.warnings)


def test_plan_with_decomposer_is_cached(rocket_index):
    cache = AnalysisCache()
    decomposer = FakeDecomposer(answer=ROCKET)
    first = asyncio.run(plan_assembly("rocket", rocket_index, decomposer=decomposer, cache=cache))
    assert first.strategy is Strategy.HYBRID
    assert first.warnings == ()

    failing = FakeDecomposer(error=RuntimeError("offline"))
    second = asyncio.run(plan_assembly("Rocket ", rocket_index, decomposer=failing, cache=cache))
    assert failing.calls == 0
    assert second.roles == first.roles


def test_explicit_requirements_skip_decomposer(rocket_index):
    decomposer = FakeDecomposer(answer=[])
    plan = asyncio.run(plan_assembly("rocket", rocket_index, requirements=ROCKET, decomposer=decomposer))
    assert decomposer.calls == 0
    assert plan.coverage == pytest.approx(2 / 3)


@pytest.mark.parametrize(
    "decomposer",
    [
        FakeDecomposer(answer=ROCKET, delay=1.0),
        FakeDecomposer(error=RuntimeError("offline")),
        FakeDecomposer(answer=None),
    ],
)
def test_decomposer_failures_fall_back(rocket_index, decomposer):
    plan = asyncio.run(plan_assembly("rocket", rocket_index, decomposer=decomposer, timeout=0.05))
    assert plan.roles == ["rocket"]
    assert plan.warnings


def test_layouts_for_plan(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    layouts, warnings = asyncio.run(plan_layouts(plan))
    assert warnings == []
    assert [layout.name for layout in layouts] == ["anchored", "radial"]
    assert all(layout.covers(plan.roles) for layout in layouts)


def test_complete_suggestion_comes_first(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    suggested = Layout(
        name="tilted",
        positions={role: Position(x=12, y=4 + 8 * i, scale=0.5, z_index=i) for i, role in enumerate(plan.roles)},
    )
    layouts, warnings = asyncio.run(plan_layouts(plan, FakeSuggester(suggested)))
    assert layouts[0] is suggested
    assert warnings == []


def test_incomplete_suggestion_is_replaced(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    partial = Layout(name="partial", positions={"body": Position(x=12, y=12)})
    layouts, warnings = asyncio.run(plan_layouts(plan, FakeSuggester(partial)))
    assert layouts[0].name == "anchored"
    assert "does not place nose, fins" in warnings[0]


def test_no_suggestion_warns(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    _, warnings = asyncio.run(plan_layouts(plan, FakeSuggester(None)))
    assert warnings == ["[missing-external-data] no layout suggestion; using default layouts"]


def test_format_plan(rocket_index):
    plan = build_plan("rocket", ROCKET, rocket_index)
    text = format_plan(plan)
    assert "Strategy: HYBRID (67% coverage)" in text
    assert "  + body (100% confidence) from battery [capsule]" in text
    assert "  - fins" in text
