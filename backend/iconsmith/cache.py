"""Caller-owned analysis cache.

Replaces process-wide maps: whoever needs memoization constructs one and
injects it (index builder, planner). Invalidation is explicit.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class AnalysisCache:
    """Thread-safe key → value store with explicit invalidation."""

    def __init__(self, name: str = "analysis") -> None:
        self.name = name
        self._items: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._items.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[key] = value

    def get_or_set(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the cached value, computing and storing it on a miss."""
        with self._lock:
            value = self._items.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache %s hit for %r", self.name, key)
            return value
        value = factory()
        with self._lock:
            # another thread may have filled it meanwhile; first writer wins
            return self._items.setdefault(key, value)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
        logger.debug("Cache %s cleared", self.name)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
