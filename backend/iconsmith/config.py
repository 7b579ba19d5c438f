"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    iconsmith_env: str = "development"
    iconsmith_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Model routing for the external collaborators
    model_cheap: str = "claude-haiku-4-5-20251001"
    model_mid: str = "claude-sonnet-4-5-20250929"

    # Canvas / validation defaults
    canvas_size: float = 24.0
    fix_padding: float = 2.0
    warning_margin: float = 1.0

    # Upper bound on any single collaborator call, in seconds
    external_timeout_s: float = 20.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
