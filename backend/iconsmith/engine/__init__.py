"""Icon engine: bounds validation, style rules and the style pipeline."""

from iconsmith.engine.config import PipelineConfig
from iconsmith.engine.pipeline import StylePipeline, format_process_result
from iconsmith.engine.registry import get_registry, stage
from iconsmith.engine.style import GENERATION_PROFILE, INGESTION_PROFILE, StyleProfile, enforce_style
from iconsmith.engine.validator import validate

__all__ = [
    "PipelineConfig",
    "StylePipeline",
    "format_process_result",
    "get_registry",
    "stage",
    "GENERATION_PROFILE",
    "INGESTION_PROFILE",
    "StyleProfile",
    "enforce_style",
    "validate",
]
