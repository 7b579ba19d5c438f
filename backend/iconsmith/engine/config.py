"""Pipeline configuration: which stages each mode runs, and canvas defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from iconsmith.models.icon import ProcessingMode


@dataclass
class PipelineConfig:
    """Per-mode stage order plus the validator's canvas settings."""

    # Generated icons get their paths repaired before anything else reads them
    generate_stages: list[str] = field(
        default_factory=lambda: ["sanitize", "repair", "normalize", "enforce", "optimize", "validate"]
    )
    ingest_stages: list[str] = field(
        default_factory=lambda: ["sanitize", "normalize", "enforce", "optimize", "validate"]
    )

    # Final validation
    canvas_size: float = 24.0
    fix_padding: float = 2.0
    warning_margin: float = 1.0

    def stages_for(self, mode: ProcessingMode | str) -> list[str]:
        if ProcessingMode(mode) is ProcessingMode.GENERATE:
            return list(self.generate_stages)
        return list(self.ingest_stages)
