"""Interfaces of the external collaborators the planner consumes.

Every method may return ``None`` to mean "no data": the engine then falls
back to its deterministic defaults. Implementations do their own I/O; the
engine only awaits them, bounded by a timeout.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iconsmith.models.fragment import FragmentClassification, LibraryIcon
from iconsmith.models.plan import Gap, Layout, ShapePrimitiveRequirement


@runtime_checkable
class ConceptDecomposer(Protocol):
    async def decompose(self, concept: str) -> list[ShapePrimitiveRequirement] | None: ...


@runtime_checkable
class LayoutSuggester(Protocol):
    async def suggest_layout(
        self,
        concept: str,
        roles: list[str],
        canvas_size: float,
    ) -> Layout | None: ...


@runtime_checkable
class FragmentClassifier(Protocol):
    async def classify(self, icon: LibraryIcon, elements: list[str]) -> list[FragmentClassification] | None:
        """One classification per element markup, in the given order."""
        ...


@runtime_checkable
class GapFiller(Protocol):
    async def fill_gaps(self, concept: str, gaps: list[Gap], canvas_size: float) -> list[str] | None:
        """Drawing elements (markup) covering the requested gaps."""
        ...
