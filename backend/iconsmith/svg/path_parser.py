"""Path interpreter: SVG path mini-language → resolved PathCommand list.

A small state machine walks the string once. It tracks the current point and
the start of the current subpath, and expands repeated operand groups into
one logical command each (``L 1 1 2 2`` is two LineTo commands). Extra pairs
after a MoveTo become LineTo of the same relativity.
"""

from __future__ import annotations

import logging
import re

from iconsmith.errors import MalformedPathError
from iconsmith.models.path import CommandKind, PathCommand, Point

logger = logging.getLogger(__name__)

_COMMAND_LETTERS = frozenset("MmLlHhVvCcSsQqTtAaZz")
_SEPARATORS = frozenset(" \t\r\n\f,")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Operand slots of an arc group holding the large-arc and sweep flags
_ARC_FLAG_SLOTS = (3, 4)


def _scan(path_data: str, lenient: bool = False) -> list[tuple[str, list[float], int]]:
    """Split path data into (letter, numbers, position) groups.

    In lenient mode unexpected characters and numbers before the first
    command are skipped instead of raising.
    """
    groups: list[tuple[str, list[float], int]] = []
    current: tuple[str, list[float], int] | None = None
    pos = 0
    length = len(path_data)

    while pos < length:
        ch = path_data[pos]
        if ch in _SEPARATORS:
            pos += 1
            continue
        if ch in _COMMAND_LETTERS:
            current = (ch, [], pos)
            groups.append(current)
            pos += 1
            continue

        if current is None:
            if lenient:
                pos += 1
                continue
            raise MalformedPathError(
                f"Path data must start with a command letter, found {ch!r}",
                path_data=path_data,
                position=pos,
            )

        letter, numbers, _ = current
        # Flags may be written without separators: "a1 1 0 011 1"
        if letter in "Aa" and len(numbers) % 7 in _ARC_FLAG_SLOTS:
            if ch in "01":
                numbers.append(float(ch))
                pos += 1
                continue
            if not lenient:
                raise MalformedPathError(
                    f"Arc flag must be 0 or 1, found {ch!r}",
                    path_data=path_data,
                    command=letter,
                    position=pos,
                )

        match = _NUMBER_RE.match(path_data, pos)
        if match is None:
            if lenient:
                pos += 1
                continue
            raise MalformedPathError(
                f"Unexpected character {ch!r} in path data",
                path_data=path_data,
                command=letter,
                position=pos,
            )
        numbers.append(float(match.group()))
        pos = match.end()

    return groups


def _resolve(
    kind: CommandKind,
    relative: bool,
    ops: tuple[float, ...],
    current: Point,
    previous: PathCommand | None,
) -> PathCommand:
    """Resolve one operand group against the current point."""
    cx, cy = current

    def point(x: float, y: float) -> Point:
        return (cx + x, cy + y) if relative else (x, y)

    controls: tuple[Point, ...] = ()

    if kind in (CommandKind.MOVE_TO, CommandKind.LINE_TO, CommandKind.SMOOTH_QUADRATIC):
        end = point(ops[0], ops[1])
        if kind is CommandKind.SMOOTH_QUADRATIC:
            controls = (_reflect(previous, current, (CommandKind.QUADRATIC_BEZIER, CommandKind.SMOOTH_QUADRATIC), 0),)
    elif kind is CommandKind.HORIZONTAL_LINE_TO:
        end = (cx + ops[0] if relative else ops[0], cy)
    elif kind is CommandKind.VERTICAL_LINE_TO:
        end = (cx, cy + ops[0] if relative else ops[0])
    elif kind is CommandKind.CUBIC_BEZIER:
        controls = (point(ops[0], ops[1]), point(ops[2], ops[3]))
        end = point(ops[4], ops[5])
    elif kind is CommandKind.SMOOTH_CUBIC:
        first = _reflect(previous, current, (CommandKind.CUBIC_BEZIER, CommandKind.SMOOTH_CUBIC), 1)
        controls = (first, point(ops[0], ops[1]))
        end = point(ops[2], ops[3])
    elif kind is CommandKind.QUADRATIC_BEZIER:
        controls = (point(ops[0], ops[1]),)
        end = point(ops[2], ops[3])
    elif kind is CommandKind.ARC_TO:
        end = point(ops[5], ops[6])
    else:
        raise ValueError(f"Cannot resolve {kind.name} operands")

    return PathCommand(kind=kind, relative=relative, operands=ops, start=current, end=end, controls=controls)


def _reflect(
    previous: PathCommand | None,
    current: Point,
    kinds: tuple[CommandKind, ...],
    control_index: int,
) -> Point:
    """Reflect the previous command's last control point about the current point."""
    if previous is None or previous.kind not in kinds:
        return current
    px, py = previous.controls[control_index]
    return (2 * current[0] - px, 2 * current[1] - py)


def parse_path(path_data: str) -> list[PathCommand]:
    """Parse path data into logical commands with absolute coordinates resolved.

    Raises MalformedPathError when a command's number count is not a
    multiple of its arity, or when the string holds characters that are
    neither command letters nor numbers.
    """
    commands: list[PathCommand] = []
    current: Point = (0.0, 0.0)
    subpath_start: Point = (0.0, 0.0)
    previous: PathCommand | None = None

    for letter, numbers, position in _scan(path_data):
        kind = CommandKind.from_letter(letter)
        relative = letter.islower()
        arity = kind.arity

        if arity == 0:
            if numbers:
                raise MalformedPathError(
                    f"{letter} takes no operands, got {len(numbers)}",
                    path_data=path_data,
                    command=letter,
                    position=position,
                )
            previous = PathCommand(kind=kind, relative=relative, start=current, end=subpath_start)
            commands.append(previous)
            current = subpath_start
            continue

        if not numbers or len(numbers) % arity:
            raise MalformedPathError(
                f"{letter} expects a multiple of {arity} numbers, got {len(numbers)}",
                path_data=path_data,
                command=letter,
                position=position,
            )

        for i in range(0, len(numbers), arity):
            group_kind = kind
            if kind is CommandKind.MOVE_TO and i > 0:
                group_kind = CommandKind.LINE_TO
            previous = _resolve(group_kind, relative, tuple(numbers[i : i + arity]), current, previous)
            commands.append(previous)
            current = previous.end
            if group_kind is CommandKind.MOVE_TO:
                subpath_start = current

    return commands


def format_number(value: float, precision: int = 4) -> str:
    """Shortest decimal text for ``value`` rounded to ``precision`` places."""
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    text = f"{rounded:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def serialize_commands(commands: list[PathCommand], precision: int = 4) -> str:
    """Write commands back as path data, one letter per logical command."""
    parts: list[str] = []
    for cmd in commands:
        if cmd.operands:
            parts.append(cmd.letter + " ".join(format_number(v, precision) for v in cmd.operands))
        else:
            parts.append(cmd.letter)
    return " ".join(parts)


def round_commands(commands: list[PathCommand], precision: int = 4) -> str:
    """Write commands back with every resolved point rounded once.

    Relative operands are re-derived from the rounded previous point, so the
    rounding error stays within half a unit of the last place per coordinate
    instead of building up along a run of relative commands.
    """

    def rounded(p: Point) -> Point:
        return (round(p[0], precision), round(p[1], precision))

    parts: list[str] = []
    previous: Point = (0.0, 0.0)
    for cmd in commands:
        end = rounded(cmd.end)
        if cmd.kind is CommandKind.CLOSE_PATH:
            parts.append(cmd.letter)
            previous = end
            continue

        px, py = previous

        def operand(p: Point) -> tuple[float, float]:
            return (p[0] - px, p[1] - py) if cmd.relative else p

        if cmd.kind is CommandKind.HORIZONTAL_LINE_TO:
            values = [operand(end)[0]]
        elif cmd.kind is CommandKind.VERTICAL_LINE_TO:
            values = [operand(end)[1]]
        elif cmd.kind is CommandKind.ARC_TO:
            rx, ry, rotation, large_arc, sweep = cmd.operands[:5]
            values = [round(rx, precision), round(ry, precision), round(rotation, precision), large_arc, sweep]
            values.extend(operand(end))
        else:
            # Reflected S/T controls are implied, not written
            written = {
                CommandKind.CUBIC_BEZIER: cmd.controls,
                CommandKind.SMOOTH_CUBIC: cmd.controls[1:],
                CommandKind.QUADRATIC_BEZIER: cmd.controls,
            }.get(cmd.kind, ())
            values = []
            for p in (*written, end):
                values.extend(operand(rounded(p)))

        parts.append(cmd.letter + " ".join(format_number(v, precision) for v in values))
        previous = end
    return " ".join(parts)


def repair_path(path_data: str) -> tuple[str, list[str]]:
    """Fix common malformed idioms instead of failing.

    Well-formed data that already starts with an absolute ``M`` comes back
    untouched. Otherwise garbage characters and dangling numbers are dropped,
    a missing initial MoveTo is inserted, and a leading relative ``m`` becomes
    absolute. Returns the repaired data and a note per fix.
    """
    notes: list[str] = []
    try:
        parse_path(path_data)
    except MalformedPathError as e:
        notes.append(f"malformed path: {e}")
    else:
        if path_data.lstrip(" \t\r\n\f,")[:1] in ("", "M"):
            return path_data, []

    groups = _scan(path_data, lenient=True)
    if not groups:
        return "", notes

    parts: list[str] = []
    for index, (letter, numbers, _) in enumerate(groups):
        kind = CommandKind.from_letter(letter)
        arity = kind.arity

        if index == 0 and kind is not CommandKind.MOVE_TO:
            notes.append(f"path started with {letter!r}, inserted M0 0")
            parts.append("M0 0")

        if arity == 0:
            if numbers:
                notes.append(f"dropped {len(numbers)} number(s) after {letter}")
            parts.append(letter)
            continue

        usable = len(numbers) - len(numbers) % arity
        if usable < len(numbers):
            notes.append(f"dropped {len(numbers) - usable} dangling number(s) after {letter}")
        if usable == 0:
            notes.append(f"dropped empty {letter} command")
            continue

        for i in range(0, usable, arity):
            out_letter = letter
            if kind is CommandKind.MOVE_TO and i > 0:
                out_letter = "l" if letter == "m" else "L"
            elif index == 0 and i == 0 and letter == "m":
                # from (0,0) the first pair of a relative move is already absolute
                notes.append("leading relative m converted to M")
                out_letter = "M"
            parts.append(out_letter + " ".join(format_number(v) for v in numbers[i : i + arity]))

    repaired = " ".join(parts)
    logger.debug("Repaired path: %s", "; ".join(notes))
    return repaired, notes
