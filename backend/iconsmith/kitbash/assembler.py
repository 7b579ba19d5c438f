"""Plan execution: place fragments on the canvas and emit one icon.

Each fragment is wrapped in a group whose ``translate(...) scale(...)``
moves its bounding-box center onto its layout position. Coordinates inside
the fragment are never rewritten, so several fragments never accumulate
rounding error and the index keeps its fragments untouched.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass

from iconsmith.config import settings
from iconsmith.engine.pipeline import StylePipeline
from iconsmith.errors import InvalidIconError, MissingExternalDataWarning, NoLayoutAvailableError
from iconsmith.kitbash.collaborators import GapFiller
from iconsmith.kitbash.layout import choose_layouts
from iconsmith.models.fragment import ShapeFragment
from iconsmith.models.icon import ProcessingMode
from iconsmith.models.plan import AssemblyPlan, Gap, Layout, Position, Strategy
from iconsmith.models.results import ProcessResult
from iconsmith.svg.elements import apply_splices, find_drawables, set_attrs
from iconsmith.svg.serializer import build_group, serialize_icon
from iconsmith.svg.transform import format_transform

logger = logging.getLogger(__name__)


class RenderMode(str, enum.Enum):
    # Raw assembly, straight from the layout
    DRAFT = "draft"
    # Assembly passed through the style pipeline in generation mode
    FINAL = "final"


@dataclass(frozen=True)
class AssemblyResult:
    svg: str
    plan: AssemblyPlan
    layout: Layout | None
    gaps: tuple[Gap, ...] = ()
    warnings: tuple[str, ...] = ()
    render_mode: RenderMode = RenderMode.DRAFT
    processed: ProcessResult | None = None

    @property
    def strategy(self) -> Strategy:
        return self.plan.strategy


def placement_transform(fragment: ShapeFragment, position: Position) -> str:
    """Transform that scales ``fragment`` and centers it on ``position``."""
    box = fragment.bounding_box
    s = position.scale
    return format_transform(s, position.x - box.center_x * s, position.y - box.center_y * s)


def with_fill_none(markup: str) -> str:
    """Copy of ``markup`` where every drawing element carries fill="none"."""
    splices = []
    for element in find_drawables(markup):
        if element.attrs.get("fill") == "none":
            continue
        start, end = element.source_span
        splices.append((start, end - start, set_attrs(element.source_tag, {"fill": "none"})))
    return apply_splices(markup, splices)


def assemble(
    placements: list[tuple[ShapeFragment, Position]],
    canvas_size: float = 24.0,
    stroke_width: float = 2,
    extra_children: list[str] | None = None,
) -> str:
    """Icon markup with each fragment in its own positioned group, lowest z first."""
    ordered = sorted(placements, key=lambda item: item[1].z_index)
    children = [
        build_group([with_fill_none(fragment.raw_data)], placement_transform(fragment, position))
        for fragment, position in ordered
    ]
    children.extend(with_fill_none(child) for child in extra_children or [])
    return serialize_icon(children, size=canvas_size, stroke_width=stroke_width)


class KitbashAssembler:
    """Executes assembly plans against a chosen layout."""

    def __init__(
        self,
        pipeline: StylePipeline | None = None,
        gap_filler: GapFiller | None = None,
        canvas_size: float = 24.0,
        stroke_width: float = 2,
        timeout: float | None = None,
    ) -> None:
        self._pipeline = pipeline
        self.gap_filler = gap_filler
        self.canvas_size = canvas_size
        self.stroke_width = stroke_width
        self.timeout = settings.external_timeout_s if timeout is None else timeout

    @property
    def pipeline(self) -> StylePipeline:
        if self._pipeline is None:
            self._pipeline = StylePipeline()
        return self._pipeline

    def resolve_layout(
        self,
        plan: AssemblyPlan,
        layout: Layout | None = None,
        layouts: list[Layout] | None = None,
    ) -> tuple[Layout | None, list[str]]:
        """The layout to execute with; incomplete layouts fall back to the defaults.

        Passing an explicit, empty ``layouts`` list means no candidate exists
        and raises NoLayoutAvailableError.
        """
        roles = plan.roles
        if not roles:
            return None, []
        warnings: list[str] = []
        if layout is None and layouts is not None:
            if not layouts:
                raise NoLayoutAvailableError(f"No layout available for {plan.concept!r}")
            layout = layouts[0]
        candidates, notes = choose_layouts(roles, layout, self.canvas_size)
        warnings.extend(notes)
        if not candidates:
            raise NoLayoutAvailableError(f"No layout available for {plan.concept!r}")
        return candidates[0], warnings

    async def execute(
        self,
        plan: AssemblyPlan,
        layout: Layout | None = None,
        layouts: list[Layout] | None = None,
        render_mode: RenderMode | str = RenderMode.DRAFT,
    ) -> AssemblyResult:
        render_mode = RenderMode(render_mode)
        warnings = list(plan.warnings)
        chosen, notes = self.resolve_layout(plan, layout, layouts)
        warnings.extend(notes)

        if plan.strategy is Strategy.GENERATE or chosen is None:
            gaps = self._gaps(plan, plan.roles, chosen)
            logger.info("Plan %r needs full generation; returning an empty canvas", plan.concept)
            return AssemblyResult(
                svg=serialize_icon([], size=self.canvas_size, stroke_width=self.stroke_width),
                plan=plan,
                layout=chosen,
                gaps=tuple(gaps),
                warnings=tuple(warnings),
                render_mode=render_mode,
            )

        placements = [(m.fragment, chosen.positions[m.requirement.role]) for m in plan.found_matches]
        gaps = self._gaps(plan, list(plan.missing_roles), chosen)

        extra: list[str] = []
        if gaps and plan.strategy in (Strategy.HYBRID, Strategy.ADAPT):
            filled, fill_notes = await self._fill(plan, gaps)
            extra.extend(filled)
            warnings.extend(fill_notes)

        svg = assemble(placements, self.canvas_size, self.stroke_width, extra)
        logger.info(
            "Assembled %r with layout %s: %d fragment(s), %d gap(s), %d generated element(s)",
            plan.concept,
            chosen.name,
            len(placements),
            len(gaps),
            len(extra),
        )

        processed: ProcessResult | None = None
        if render_mode is RenderMode.FINAL:
            try:
                processed = self.pipeline.process(svg, ProcessingMode.GENERATE)
            except InvalidIconError as e:
                warnings.append(f"[render] final processing skipped: {e}")
            else:
                svg = processed.svg
                warnings.extend(processed.warnings)

        return AssemblyResult(
            svg=svg,
            plan=plan,
            layout=chosen,
            gaps=tuple(gaps),
            warnings=tuple(warnings),
            render_mode=render_mode,
            processed=processed,
        )

    def _gaps(self, plan: AssemblyPlan, roles: list[str], layout: Layout | None) -> list[Gap]:
        gaps: list[Gap] = []
        for requirement in plan.required_primitives:
            if requirement.role not in roles or layout is None:
                continue
            gaps.append(
                Gap(
                    role=requirement.role,
                    shape=requirement.shape,
                    aspect=requirement.aspect,
                    position=layout.positions[requirement.role],
                )
            )
        return gaps

    async def _fill(self, plan: AssemblyPlan, gaps: list[Gap]) -> tuple[list[str], list[str]]:
        if self.gap_filler is None:
            warning = MissingExternalDataWarning(
                f"no gap filler; {len(gaps)} role(s) left empty", roles=[g.role for g in gaps]
            )
            logger.warning("%s", warning)
            return [], [str(warning)]
        try:
            elements = await asyncio.wait_for(
                self.gap_filler.fill_gaps(plan.concept, gaps, self.canvas_size), self.timeout
            )
        except asyncio.TimeoutError:
            elements = None
            logger.warning("Gap filling timed out after %.1fs", self.timeout)
        except Exception as e:
            elements = None
            logger.warning("Gap filling failed: %s", e)
        if not elements:
            return [], [str(MissingExternalDataWarning("gap filling unavailable; missing roles left empty"))]
        return list(elements), []
