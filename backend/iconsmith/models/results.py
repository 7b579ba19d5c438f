"""Results handed back by the validator, the enforce stage and the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from iconsmith.models.geometry import BoundingBox

Edge = Literal["left", "top", "right", "bottom"]


@dataclass(frozen=True)
class FixTransform:
    """The one corrective scale + translate applied by auto-fix."""

    scale: float
    translate_x: float
    translate_y: float


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    bounding_box: BoundingBox | None
    canvas_size: float
    out_of_bounds_amount: float = 0.0
    near_boundary_edges: tuple[Edge, ...] = ()
    fixed_svg: str | None = None
    fix: FixTransform | None = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class Violation:
    rule: str
    expected: str
    actual: str
    severity: Literal["error", "warning"] = "error"
    auto_fixable: bool = True
    element: str = "svg"


@dataclass(frozen=True)
class Change:
    attribute: str
    before: str | None
    after: str | None
    reason: str
    element: str = "svg"


@dataclass(frozen=True)
class ComplianceReport:
    passed: bool
    score: int
    violations: tuple[Violation, ...] = ()
    changes: tuple[Change, ...] = ()

    @property
    def errors(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == "warning"]


@dataclass(frozen=True)
class ProcessMetrics:
    original_size: int
    processed_size: int
    elapsed_ms: float

    @property
    def savings_percent(self) -> float:
        if self.original_size == 0:
            return 0.0
        return round((1 - self.processed_size / self.original_size) * 100, 1)


@dataclass(frozen=True)
class ProcessResult:
    svg: str
    modified: bool
    metrics: ProcessMetrics
    compliance: ComplianceReport | None = None
    warnings: tuple[str, ...] = ()
    validation: ValidationReport | None = None
    stages_run: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
