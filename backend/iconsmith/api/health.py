"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from iconsmith.config import settings
from iconsmith.engine.registry import get_registry
from iconsmith.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        stages_registered=get_registry().count,
        llm_configured=bool(settings.anthropic_api_key),
    )


@router.get("/prompts")
async def prompts() -> dict[str, str]:
    from iconsmith.llm.prompts import get_all_templates

    return get_all_templates()
