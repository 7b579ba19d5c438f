"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iconsmith.config import settings
from iconsmith.engine.stages import register_stages

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.iconsmith_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="iconsmith",
        description="Stroke-icon engine: path geometry, bounds auto-fix, style pipeline and kitbash assembly",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all stage modules to trigger registration
    register_stages()

    from iconsmith.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
