"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from iconsmith.cache import AnalysisCache
from iconsmith.config import settings
from iconsmith.engine.config import PipelineConfig
from iconsmith.engine.pipeline import StylePipeline
from iconsmith.kitbash.index import FragmentIndexBuilder
from iconsmith.llm.client import LLMCollaborator


def get_settings():
    return settings


@lru_cache
def get_pipeline() -> StylePipeline:
    return StylePipeline(
        config=PipelineConfig(
            canvas_size=settings.canvas_size,
            fix_padding=settings.fix_padding,
            warning_margin=settings.warning_margin,
        )
    )


@lru_cache
def get_analysis_cache() -> AnalysisCache:
    return AnalysisCache("api")


@lru_cache
def get_index_builder() -> FragmentIndexBuilder:
    return FragmentIndexBuilder(cache=get_analysis_cache(), canvas_size=settings.canvas_size)


def get_collaborator() -> LLMCollaborator | None:
    """The LLM adapter, or None when no API key is configured."""
    collaborator = LLMCollaborator()
    return collaborator if collaborator.available else None
