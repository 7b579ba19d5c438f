"""POST /api/validate — bounds check with optional auto-fix."""

from __future__ import annotations

from fastapi import APIRouter

from iconsmith.engine.validator import validate as validate_bounds
from iconsmith.errors import InvalidIconError, OutOfBoundsError
from iconsmith.models.requests import ValidateRequest
from iconsmith.models.responses import ValidateResponse

router = APIRouter()


@router.post("/validate", response_model=ValidateResponse)
async def validate(req: ValidateRequest) -> ValidateResponse:
    try:
        report = validate_bounds(
            req.svg,
            canvas_size=req.canvas_size,
            margin_warn_threshold=req.margin,
            auto_fix=req.auto_fix,
            padding=req.padding,
            strict=req.strict,
            exact=req.exact,
        )
    except OutOfBoundsError as e:
        return ValidateResponse(report=e.report, error=str(e))
    except (InvalidIconError, ValueError) as e:
        return ValidateResponse(error=str(e))
    return ValidateResponse(report=report)
