"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from iconsmith.models.icon import ProcessingMode
from iconsmith.models.plan import Layout, ShapePrimitiveRequirement


class ProcessRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    mode: ProcessingMode = Field(default=ProcessingMode.GENERATE, description="ingest or generate")
    manifest: dict[str, Any] | None = Field(
        default=None,
        description="Library style manifest (strokeWidth, strokeLinecap, ...) to derive the profile from",
    )


class BatchProcessRequest(BaseModel):
    svgs: list[str] = Field(..., description="Raw SVG codes, processed independently")
    mode: ProcessingMode = Field(default=ProcessingMode.GENERATE)


class ValidateRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    canvas_size: float = Field(default=24.0, gt=0)
    margin: float = Field(default=1.0, ge=0, description="Near-boundary warning threshold")
    auto_fix: bool = True
    padding: float = Field(default=2.0, ge=0)
    exact: bool = Field(default=False, description="True curve extrema instead of control points")
    strict: bool = Field(default=False, description="Structural problems and unfixed overflow become errors")


class TransformRequest(BaseModel):
    path_data: str = Field(..., description="SVG path data")
    scale: float = Field(default=1.0, gt=0)
    translate_x: float = 0.0
    translate_y: float = 0.0


class LibraryIconPayload(BaseModel):
    id: str
    svg: str
    name: str = ""
    tags: list[str] = Field(default_factory=list)


class KitbashRequest(BaseModel):
    concept: str = Field(..., min_length=1, description="What to assemble, e.g. 'rocket'")
    library_id: str = Field(default="default", description="Index cache key for the library")
    library: list[LibraryIconPayload] = Field(default_factory=list, description="Icons to cut fragments from")
    primitives: list[ShapePrimitiveRequirement] | None = Field(
        default=None,
        description="Required parts; decomposed from the concept when omitted",
    )
    layout: Layout | None = Field(default=None, description="Layout to use instead of the defaults")
    render_mode: str = Field(default="draft", pattern="^(draft|final)$")
