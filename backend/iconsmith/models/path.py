"""Path command model: one resolved command of the path mini-language."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

Point = tuple[float, float]


class CommandKind(str, enum.Enum):
    MOVE_TO = "M"
    LINE_TO = "L"
    HORIZONTAL_LINE_TO = "H"
    VERTICAL_LINE_TO = "V"
    CUBIC_BEZIER = "C"
    SMOOTH_CUBIC = "S"
    QUADRATIC_BEZIER = "Q"
    SMOOTH_QUADRATIC = "T"
    ARC_TO = "A"
    CLOSE_PATH = "Z"

    @property
    def arity(self) -> int:
        return ARITY[self]

    @classmethod
    def from_letter(cls, letter: str) -> CommandKind:
        return cls(letter.upper())


ARITY: dict[CommandKind, int] = {
    CommandKind.MOVE_TO: 2,
    CommandKind.LINE_TO: 2,
    CommandKind.HORIZONTAL_LINE_TO: 1,
    CommandKind.VERTICAL_LINE_TO: 1,
    CommandKind.CUBIC_BEZIER: 6,
    CommandKind.SMOOTH_CUBIC: 4,
    CommandKind.QUADRATIC_BEZIER: 4,
    CommandKind.SMOOTH_QUADRATIC: 2,
    CommandKind.ARC_TO: 7,
    CommandKind.CLOSE_PATH: 0,
}


@dataclass(frozen=True)
class PathCommand:
    """A single logical command with its coordinates resolved to absolute space.

    ``operands`` are exactly as written (relative offsets stay relative);
    ``start``/``end`` and ``controls`` are absolute.
    """

    kind: CommandKind
    relative: bool
    operands: tuple[float, ...] = ()
    # Current point before this command
    start: Point = (0.0, 0.0)
    # Current point after this command
    end: Point = (0.0, 0.0)
    # Absolute Bézier control points, including reflected ones for S/T
    controls: tuple[Point, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.operands) != self.kind.arity:
            raise ValueError(
                f"{self.kind.name} takes {self.kind.arity} operands, got {len(self.operands)}"
            )

    @property
    def letter(self) -> str:
        return self.kind.value.lower() if self.relative else self.kind.value

    @property
    def points(self) -> tuple[Point, ...]:
        """Every absolute point this command visits or is shaped by."""
        return (*self.controls, self.end)
