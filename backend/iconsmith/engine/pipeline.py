"""Style pipeline ("Iron Dome"): the one gateway every icon passes through.

Each mode runs its configured, ordered list of stage functions exactly once.
A stage that raises is recorded as a warning and the icon continues with the
state it had before that stage.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from iconsmith.engine.config import PipelineConfig
from iconsmith.engine.registry import StageRegistry, StageSpec, get_registry
from iconsmith.engine.stages import register_stages
from iconsmith.engine.stages.s5_optimize import BasicOptimizer
from iconsmith.engine.style import StyleProfile, default_profile, format_compliance, profile_from_manifest
from iconsmith.errors import IconEngineError, InvalidIconError
from iconsmith.models.icon import IconState, Optimizer, ProcessingMode
from iconsmith.models.results import ProcessMetrics, ProcessResult
from iconsmith.svg.elements import find_drawables, find_root

logger = logging.getLogger(__name__)


class StylePipeline:
    """Runs icons through the configured stages for their processing mode."""

    def __init__(
        self,
        registry: StageRegistry | None = None,
        config: PipelineConfig | None = None,
        optimizer: Optimizer | None = None,
    ) -> None:
        if registry is None:
            register_stages()
            registry = get_registry()
        self.registry = registry
        self.config = config or PipelineConfig()
        self.optimizer: Optimizer = optimizer or BasicOptimizer()
        # Fails fast on an invalid configured order
        self._plans: dict[ProcessingMode, list[StageSpec]] = {
            mode: self.registry.validate_order(self.config.stages_for(mode)) for mode in ProcessingMode
        }

    def stages(self, mode: ProcessingMode | str) -> list[str]:
        return [spec.id for spec in self._plans[ProcessingMode(mode)]]

    def process(
        self,
        svg: str,
        mode: ProcessingMode | str = ProcessingMode.GENERATE,
        profile: StyleProfile | None = None,
    ) -> ProcessResult:
        """Process one icon. Raises InvalidIconError for input that is not a drawable icon."""
        mode = ProcessingMode(mode)
        if find_root(svg) is None:
            raise InvalidIconError("Input has no <svg> root element")
        if not find_drawables(svg):
            raise InvalidIconError("Icon has no drawable elements")

        active = profile or default_profile(mode)
        start = time.perf_counter()
        state = IconState(
            svg=svg,
            mode=mode,
            canvas_size=self.config.canvas_size,
            fix_padding=self.config.fix_padding,
            warning_margin=self.config.warning_margin,
            optimizer=self.optimizer,
        )
        warnings: list[str] = []
        completed: list[str] = []

        for spec in self._plans[mode]:
            t0 = time.perf_counter()
            try:
                state, notes = spec.fn(state, active)
            except Exception as e:
                warnings.append(f"[{spec.id}] stage failed: {e}")
                logger.warning("  %s FAILED: %s", spec.id, e)
                continue
            warnings.extend(notes)
            completed.append(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        result = ProcessResult(
            svg=state.svg,
            modified=state.svg != svg,
            metrics=ProcessMetrics(original_size=len(svg), processed_size=len(state.svg), elapsed_ms=total),
            compliance=state.compliance,
            warnings=tuple(warnings),
            validation=state.validation,
            stages_run=tuple(completed),
        )
        logger.info(
            "Pipeline (%s): %d/%d stages in %.0fms, %d warning(s), modified=%s",
            mode.value,
            len(completed),
            len(self._plans[mode]),
            total,
            len(warnings),
            result.modified,
        )
        return result

    def process_batch(
        self,
        svgs: list[str],
        mode: ProcessingMode | str = ProcessingMode.GENERATE,
        profile: StyleProfile | None = None,
    ) -> list[ProcessResult]:
        """Process many icons; one icon's hard error never affects the others."""
        results: list[ProcessResult] = []
        for index, svg in enumerate(svgs):
            start = time.perf_counter()
            try:
                results.append(self.process(svg, mode, profile))
            except (IconEngineError, ValueError) as e:
                logger.warning("Batch item %d failed: %s", index, e)
                elapsed = (time.perf_counter() - start) * 1000
                results.append(
                    ProcessResult(
                        svg=svg,
                        modified=False,
                        metrics=ProcessMetrics(original_size=len(svg), processed_size=len(svg), elapsed_ms=elapsed),
                        error=str(e),
                    )
                )
        return results

    def process_with_manifest(
        self,
        svg: str,
        manifest: Mapping[str, Any],
        mode: ProcessingMode | str = ProcessingMode.GENERATE,
    ) -> ProcessResult:
        """Process with a profile derived from a library's style manifest."""
        return self.process(svg, mode, profile_from_manifest(manifest, mode))

    def quick(self, svg: str, mode: ProcessingMode | str = ProcessingMode.GENERATE) -> str:
        return self.process(svg, mode).svg


def format_process_result(result: ProcessResult) -> str:
    m = result.metrics
    lines = [
        f"Processed: modified={result.modified} size {m.original_size} -> {m.processed_size} "
        f"({m.savings_percent:+.1f}% saved) in {m.elapsed_ms:.1f}ms"
    ]
    if result.error:
        lines.append(f"  ERROR: {result.error}")
    if result.stages_run:
        lines.append(f"  stages: {' > '.join(result.stages_run)}")
    if result.compliance is not None:
        lines.extend(f"  {line}" for line in format_compliance(result.compliance).splitlines())
    for warning in result.warnings:
        lines.append(f"  - {warning}")
    return "\n".join(lines)
