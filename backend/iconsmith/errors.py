"""Typed errors and warnings raised or collected by the icon engine.

Errors abort the operation on a single path, icon or plan. Warnings are never
raised: they are built, logged, and their text is handed back to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from iconsmith.models.results import ValidationReport


class IconEngineError(Exception):
    """Base error for the icon engine."""


class MalformedPathError(IconEngineError):
    """Path data whose token stream cannot be interpreted."""

    def __init__(self, message: str, path_data: str = "", command: str = "", position: int = -1) -> None:
        super().__init__(message)
        self.path_data = path_data
        self.command = command
        self.position = position


class InvalidIconError(IconEngineError):
    """Input that is not a drawable icon at all (no <svg> root, no drawing element)."""


class OutOfBoundsError(IconEngineError):
    """Geometry outside the canvas while auto-fix is disabled and strictness is requested."""

    def __init__(self, message: str, report: ValidationReport | None = None) -> None:
        super().__init__(message)
        self.report = report


class NoLayoutAvailableError(IconEngineError):
    """A plan has roles to place but no candidate layout to place them with."""


class IconEngineWarning(UserWarning):
    """Base class for recoverable conditions surfaced to the caller."""

    tag = "warning"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return f"[{self.tag}] {self.message}"


class OutOfBoundsWarning(IconEngineWarning):
    tag = "out-of-bounds"


class NearBoundaryWarning(IconEngineWarning):
    tag = "near-boundary"


class MissingExternalDataWarning(IconEngineWarning):
    tag = "missing-external-data"
