"""POST /api/process — run icons through the style pipeline."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from iconsmith.dependencies import get_pipeline
from iconsmith.engine.style import profile_from_manifest
from iconsmith.errors import InvalidIconError
from iconsmith.models.requests import BatchProcessRequest, ProcessRequest
from iconsmith.models.responses import BatchProcessResponse, ProcessResponse
from iconsmith.models.results import ProcessResult

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(result: ProcessResult) -> ProcessResponse:
    return ProcessResponse(
        svg=result.svg,
        modified=result.modified,
        warnings=list(result.warnings),
        compliance=result.compliance,
        validation=result.validation,
        metrics=result.metrics,
        stages_run=list(result.stages_run),
        error=result.error,
    )


@router.post("/process", response_model=ProcessResponse)
async def process(req: ProcessRequest) -> ProcessResponse:
    pipeline = get_pipeline()
    profile = profile_from_manifest(req.manifest, req.mode) if req.manifest else None
    try:
        result = pipeline.process(req.svg, req.mode, profile)
    except InvalidIconError as e:
        logger.warning("Rejected icon: %s", e)
        return ProcessResponse(svg=req.svg, error=str(e))
    return _to_response(result)


@router.post("/process/batch", response_model=BatchProcessResponse)
async def process_batch(req: BatchProcessRequest) -> BatchProcessResponse:
    results = get_pipeline().process_batch(req.svgs, req.mode)
    return BatchProcessResponse(
        results=[_to_response(r) for r in results],
        failed=sum(1 for r in results if not r.ok),
    )
