"""The six style-pipeline stages, one module each."""

from __future__ import annotations

import importlib
import pkgutil


def register_stages() -> None:
    """Import every stage module so its @stage decorator fires (idempotent)."""
    for _, module_name, _ in pkgutil.iter_modules(__path__):
        importlib.import_module(f"{__name__}.{module_name}")
