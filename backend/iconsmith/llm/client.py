"""LangChain ChatAnthropic implementation of the kitbash collaborators.

Without an API key every call answers ``None`` and the engine uses its
deterministic fallbacks. Replies that do not parse also answer ``None``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from iconsmith.config import settings
from iconsmith.llm.model_router import get_model_for_task
from iconsmith.llm.prompts import get_prompt_template
from iconsmith.models.fragment import FragmentClassification, LibraryIcon
from iconsmith.models.plan import Gap, Layout, ShapePrimitiveRequirement

logger = logging.getLogger(__name__)

_PATH_ELEMENT_RE = re.compile(r"<path\b[^>]*/>")


def extract_json(text: str) -> dict[str, Any] | None:
    """First JSON object in an LLM reply, tolerating markdown fences and chatter."""
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned).strip()

    json_match = re.search(r"\{[\s\S]*\}", cleaned)
    if json_match:
        cleaned = json_match.group(0)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("LLM reply is not JSON: %s", e)
        return None
    return data if isinstance(data, dict) else None


def parse_requirements(text: str) -> list[ShapePrimitiveRequirement] | None:
    data = extract_json(text)
    if data is None:
        return None
    try:
        requirements = [ShapePrimitiveRequirement.model_validate(p) for p in data.get("primitives", [])]
    except (ValidationError, TypeError) as e:
        logger.warning("Unusable decomposition: %s", e)
        return None
    return requirements or None


def parse_layout(text: str) -> Layout | None:
    data = extract_json(text)
    if data is None:
        return None
    layouts = data.get("layouts") or []
    if not isinstance(layouts, list) or not layouts:
        return None
    try:
        return Layout.model_validate(layouts[0])
    except (ValidationError, TypeError) as e:
        logger.warning("Unusable layout suggestion: %s", e)
        return None


def parse_classifications(text: str) -> list[FragmentClassification] | None:
    data = extract_json(text)
    if data is None:
        return None
    try:
        return [FragmentClassification.model_validate(c) for c in data.get("components", [])] or None
    except (ValidationError, TypeError) as e:
        logger.warning("Unusable classification: %s", e)
        return None


def parse_path_elements(text: str) -> list[str] | None:
    return _PATH_ELEMENT_RE.findall(text) or None


class LLMCollaborator:
    """Decomposer, layout suggester, classifier and gap filler in one adapter."""

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = settings.anthropic_api_key if api_key is None else api_key

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def _ask(self, task: str, prompt: str) -> str | None:
        if not self.available:
            return None

        from langchain_anthropic import ChatAnthropic
        from langchain_core.messages import HumanMessage

        llm = ChatAnthropic(
            model=get_model_for_task(task),
            api_key=self.api_key,
            max_tokens=2048,
        )
        response = await llm.ainvoke([HumanMessage(content=prompt)])
        return str(response.content)

    async def decompose(self, concept: str) -> list[ShapePrimitiveRequirement] | None:
        reply = await self._ask("decompose", get_prompt_template("decompose").format(concept=concept))
        return parse_requirements(reply) if reply else None

    async def suggest_layout(self, concept: str, roles: list[str], canvas_size: float) -> Layout | None:
        prompt = get_prompt_template("layout").format(
            concept=concept,
            roles=", ".join(roles),
            canvas=f"{canvas_size:g}",
            usable_max=f"{canvas_size - 2:g}",
        )
        reply = await self._ask("layout", prompt)
        return parse_layout(reply) if reply else None

    async def classify(self, icon: LibraryIcon, elements: list[str]) -> list[FragmentClassification] | None:
        listing = "\n".join(f"{i + 1}. {markup}" for i, markup in enumerate(elements))
        prompt = get_prompt_template("classify").format(
            icon_name=icon.display_name,
            count=len(elements),
            elements=listing,
        )
        reply = await self._ask("classify", prompt)
        return parse_classifications(reply) if reply else None

    async def fill_gaps(self, concept: str, gaps: list[Gap], canvas_size: float) -> list[str] | None:
        listing = "\n".join(
            f"- {g.role} ({g.shape.value}): centered at ({g.position.x:g}, {g.position.y:g}), "
            f"scale {g.position.scale:g}"
            for g in gaps
        )
        prompt = get_prompt_template("fill_gaps").format(concept=concept, gaps=listing, canvas=f"{canvas_size:g}")
        reply = await self._ask("fill_gaps", prompt)
        return parse_path_elements(reply) if reply else None
