"""Stage registry: every pipeline stage is a pure function registered via decorator.

Usage:
    @stage(id="normalize", dependencies=["sanitize"])
    def normalize(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
        return replace(state, svg=fold_styles(state.svg)), []

Adding a new stage = creating one module with the decorator. Which stages a
mode runs, and in what order, is configuration (see PipelineConfig).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from iconsmith.engine.style import StyleProfile
    from iconsmith.models.icon import IconState

logger = logging.getLogger(__name__)

StageFn = Callable[["IconState", "StyleProfile"], "tuple[IconState, list[str]]"]


@dataclass
class StageSpec:
    id: str
    fn: StageFn
    dependencies: list[str] = field(default_factory=list)
    # A terminal stage must run last in any order that includes it
    terminal: bool = False
    description: str = ""


class StageRegistry:
    """Registry of all pipeline stages."""

    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s", spec.id)

    def get(self, stage_id: str) -> StageSpec:
        try:
            return self._stages[stage_id]
        except KeyError:
            raise ValueError(f"Unknown stage: {stage_id}") from None

    def all(self) -> list[StageSpec]:
        return sorted(self._stages.values(), key=lambda s: s.id)

    def resolve_order(self, requested_ids: set[str] | None = None) -> list[StageSpec]:
        """Topological sort respecting dependencies. If requested_ids is None, run all."""
        pool = self._stages
        if requested_ids is not None:
            # Expand with transitive dependencies
            expanded: set[str] = set()
            stack = list(requested_ids)
            while stack:
                sid = stack.pop()
                if sid in expanded:
                    continue
                expanded.add(sid)
                spec = pool.get(sid)
                if spec:
                    stack.extend(spec.dependencies)
            pool = {k: v for k, v in pool.items() if k in expanded}

        # Kahn's algorithm
        in_degree: dict[str, int] = {sid: 0 for sid in pool}
        for sid, spec in pool.items():
            for dep in spec.dependencies:
                if dep in pool:
                    in_degree[sid] += 1

        queue = sorted([sid for sid, d in in_degree.items() if d == 0])
        ordered: list[StageSpec] = []

        while queue:
            sid = queue.pop(0)
            ordered.append(pool[sid])
            for other_id, other_spec in pool.items():
                if sid in other_spec.dependencies:
                    in_degree[other_id] -= 1
                    if in_degree[other_id] == 0:
                        queue.append(other_id)
                        queue.sort()

        if len(ordered) != len(pool):
            missing = set(pool.keys()) - {s.id for s in ordered}
            raise ValueError(f"Circular dependency detected among: {missing}")

        return ordered

    def validate_order(self, stage_ids: list[str]) -> list[StageSpec]:
        """Check a configured stage order and return its specs.

        Every stage must be registered, every dependency must be present and
        run earlier, and a terminal stage must come last.
        """
        specs = [self.get(sid) for sid in stage_ids]
        if len(set(stage_ids)) != len(stage_ids):
            raise ValueError(f"Stage listed twice in {stage_ids}")

        closure = {s.id for s in self.resolve_order(set(stage_ids))}
        missing = closure - set(stage_ids)
        if missing:
            raise ValueError(f"Stage order {stage_ids} is missing required stage(s): {sorted(missing)}")

        position = {sid: i for i, sid in enumerate(stage_ids)}
        for spec in specs:
            for dep in spec.dependencies:
                if position[dep] > position[spec.id]:
                    raise ValueError(f"Stage {spec.id} must run after {dep}")
            if spec.terminal and position[spec.id] != len(stage_ids) - 1:
                raise ValueError(f"Stage {spec.id} must run last")
        return specs

    @property
    def count(self) -> int:
        return len(self._stages)


# Module-level singleton
_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def stage(
    *,
    id: str,
    dependencies: list[str] | None = None,
    terminal: bool = False,
    description: str = "",
):
    """Decorator to register a stage function."""

    def decorator(fn: StageFn):
        spec = StageSpec(
            id=id,
            fn=fn,
            dependencies=dependencies or [],
            terminal=terminal,
            description=description,
        )
        _registry.register(spec)
        return fn

    return decorator
