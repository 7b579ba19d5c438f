"""Tests for the LLM collaborator adapter (replies are canned, no network)."""

import asyncio

from iconsmith.kitbash.collaborators import ConceptDecomposer, FragmentClassifier, GapFiller, LayoutSuggester
from iconsmith.llm.client import (
    LLMCollaborator,
    extract_json,
    parse_classifications,
    parse_layout,
    parse_path_elements,
    parse_requirements,
)
from iconsmith.llm.model_router import get_model_for_task
from iconsmith.llm.prompts import get_all_templates, get_prompt_template
from iconsmith.models.fragment import GeometricType, LibraryIcon
from iconsmith.models.plan import Aspect, Gap, Position
from tests.conftest import CIRCLE_SVG


class CannedCollaborator(LLMCollaborator):
    def __init__(self, reply):
        super().__init__(api_key="test-key")
        self.reply = reply
        self.prompts = []

    async def _ask(self, task, prompt):
        self.prompts.append((task, prompt))
        return self.reply


def test_extract_json_strips_fences():
    assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}
    assert extract_json('Sure! Here it is: {"a": [1, 2]} Hope that helps.') == {"a": [1, 2]}
    assert extract_json("no json here") is None
    assert extract_json("[1, 2]") is None


def test_parse_requirements():
    reqs = parse_requirements('{"primitives": [{"role": "body", "shape": "Capsule", "aspect": "TALL"}, {"role": "nose"}]}')
    assert reqs[0].shape is GeometricType.CAPSULE
    assert reqs[0].aspect is Aspect.TALL
    assert reqs[1].shape is GeometricType.COMPLEX
    assert parse_requirements('{"primitives": []}') is None
    assert parse_requirements('{"primitives": [{"shape": "circle"}]}') is None


def test_parse_layout():
    layout = parse_layout('{"layouts": [{"name": "standard", "positions": {"body": {"x": 12, "y": 12, "scale": 0.8, "zIndex": 1}}}]}')
    assert layout.name == "standard"
    assert layout.positions["body"].z_index == 1
    assert parse_layout('{"layouts": []}') is None
    assert parse_layout('{"layouts": [{"positions": {}}]}') is None


def test_parse_classifications():
    [label] = parse_classifications('{"components": [{"name": "ring", "category": "body", "geometricType": "Circle", "tags": ["round"]}]}')
    assert label.geometric_type is GeometricType.CIRCLE
    assert label.semantic_category == "body"
    assert parse_classifications('{"components": "nope"}') is None


def test_parse_path_elements():
    reply = 'Here you go:\n<path d="M12 2v4" />\n<path d="M4 20h16"/>\n<circle r="1"/>'
    assert parse_path_elements(reply) == ['<path d="M12 2v4" />', '<path d="M4 20h16"/>']
    assert parse_path_elements("nothing") is None


def test_collaborator_satisfies_protocols():
    collaborator = LLMCollaborator(api_key="x")
    for protocol in (ConceptDecomposer, LayoutSuggester, FragmentClassifier, GapFiller):
        assert isinstance(collaborator, protocol)


def test_without_key_every_call_is_empty():
    collaborator = LLMCollaborator(api_key="")
    assert not collaborator.available
    assert asyncio.run(collaborator.decompose("rocket")) is None
    assert asyncio.run(collaborator.suggest_layout("rocket", ["body"], 24)) is None
    assert asyncio.run(collaborator.fill_gaps("rocket", [], 24)) is None


def test_decompose_prompt_and_reply():
    collaborator = CannedCollaborator('{"primitives": [{"role": "body", "shape": "capsule"}]}')
    reqs = asyncio.run(collaborator.decompose("rocket"))
    assert [r.role for r in reqs] == ["body"]
    task, prompt = collaborator.prompts[0]
    assert task == "decompose"
    assert 'concept "rocket"' in prompt
    assert '{"primitives": [{"role": "body"' in prompt


def test_layout_prompt_lists_roles():
    collaborator = CannedCollaborator("not json")
    assert asyncio.run(collaborator.suggest_layout("rocket", ["body", "fins"], 24)) is None
    prompt = collaborator.prompts[0][1]
    assert "position ALL of these parts: body, fins" in prompt
    assert "usable area: 2-22" in prompt


def test_classify_numbers_elements():
    collaborator = CannedCollaborator('{"components": [{"name": "ring", "geometricType": "circle"}]}')
    icon = LibraryIcon(id="circle", svg=CIRCLE_SVG)
    labels = asyncio.run(collaborator.classify(icon, ['<circle cx="12" cy="12" r="10"/>']))
    assert labels[0].name == "ring"
    assert '1. <circle cx="12" cy="12" r="10"/>' in collaborator.prompts[0][1]


def test_fill_gaps_describes_positions():
    collaborator = CannedCollaborator('<path d="M9 18l3 4 3-4"/>')
    gap = Gap(role="fins", shape=GeometricType.TRIANGLE, aspect=Aspect.NONE, position=Position(x=12, y=19.2, scale=0.4))
    paths = asyncio.run(collaborator.fill_gaps("rocket", [gap], 24))
    assert paths == ['<path d="M9 18l3 4 3-4"/>']
    assert "- fins (triangle): centered at (12, 19.2), scale 0.4" in collaborator.prompts[0][1]


def test_model_routing():
    assert get_model_for_task("layout") == get_model_for_task("fill_gaps")
    assert get_model_for_task("classify") == get_model_for_task("unknown")


def test_templates():
    templates = get_all_templates()
    assert set(templates) == {"decompose", "layout", "classify", "fill_gaps"}
    templates.clear()
    assert get_prompt_template("classify")
