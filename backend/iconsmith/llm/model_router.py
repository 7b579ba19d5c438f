"""Task → model selection. Cheap models for labelling, mid-tier for drawing."""

from __future__ import annotations

from iconsmith.config import settings

_TASK_MODEL_MAP = {
    "classify": "cheap",
    "decompose": "cheap",
    "layout": "mid",
    "fill_gaps": "mid",
}


def get_model_for_task(task: str) -> str:
    tier = _TASK_MODEL_MAP.get(task, "cheap")
    if tier == "mid":
        return settings.model_mid
    return settings.model_cheap
