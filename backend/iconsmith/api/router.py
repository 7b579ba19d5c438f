"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from iconsmith.api import health, kitbash, process, transform, validate

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(process.router)
api_router.include_router(validate.router)
api_router.include_router(transform.router)
api_router.include_router(kitbash.router)
