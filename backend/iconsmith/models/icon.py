"""The icon record that flows through the style pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from iconsmith.models.results import ComplianceReport, ValidationReport

if TYPE_CHECKING:
    from iconsmith.engine.style import StyleProfile


class ProcessingMode(str, enum.Enum):
    # Importing an external icon: permissive, optimize for size
    INGEST = "ingest"
    # Creating a new icon: strict, keep components editable
    GENERATE = "generate"


class Optimizer(Protocol):
    def optimize(self, svg: str, profile: StyleProfile) -> str: ...


@dataclass(frozen=True)
class IconState:
    """Immutable snapshot of an icon between two pipeline stages."""

    svg: str
    mode: ProcessingMode = ProcessingMode.GENERATE
    compliance: ComplianceReport | None = None
    validation: ValidationReport | None = None
    # Final-validation settings carried from the pipeline configuration
    canvas_size: float = 24.0
    fix_padding: float = 2.0
    warning_margin: float = 1.0
    # Size optimizer owned by the running pipeline; None means the built-in one
    optimizer: Optimizer | None = None
