"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iconsmith.models.geometry import BoundingBox
from iconsmith.models.plan import Layout
from iconsmith.models.results import ComplianceReport, ProcessMetrics, ValidationReport


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    stages_registered: int = 0
    llm_configured: bool = False


class ProcessResponse(BaseModel):
    svg: str
    modified: bool = False
    warnings: list[str] = Field(default_factory=list)
    compliance: ComplianceReport | None = None
    validation: ValidationReport | None = None
    metrics: ProcessMetrics | None = None
    stages_run: list[str] = Field(default_factory=list)
    error: str | None = None


class BatchProcessResponse(BaseModel):
    results: list[ProcessResponse] = Field(default_factory=list)
    failed: int = 0


class ValidateResponse(BaseModel):
    report: ValidationReport | None = None
    error: str | None = None


class TransformResponse(BaseModel):
    path_data: str = ""
    bounding_box: BoundingBox | None = None
    error: str | None = None


class MatchSummary(BaseModel):
    role: str
    fragment_id: str
    source_icon_id: str
    geometric_type: str
    confidence: float


class GapSummary(BaseModel):
    role: str
    shape: str
    x: float
    y: float
    scale: float


class KitbashResponse(BaseModel):
    svg: str = ""
    concept: str
    strategy: str = ""
    coverage: float = 0.0
    found: list[MatchSummary] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    layout: Layout | None = None
    gaps: list[GapSummary] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None
