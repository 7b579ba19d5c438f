"""Tests for the path interpreter."""

import pytest
from svgpathtools import parse_path as oracle_parse

from iconsmith.errors import MalformedPathError
from iconsmith.models.path import CommandKind
from iconsmith.svg.path_parser import format_number, parse_path, repair_path, serialize_commands


def test_parse_absolute_line():
    cmds = parse_path("M10 10 L20 20")
    assert [c.kind for c in cmds] == [CommandKind.MOVE_TO, CommandKind.LINE_TO]
    assert cmds[0].end == (10, 10)
    assert cmds[1].start == (10, 10)
    assert cmds[1].end == (20, 20)


def test_relative_carry_over():
    cmds = parse_path("m1 1 l2 2 l3 3")
    assert [c.end for c in cmds] == [(1, 1), (3, 3), (6, 6)]
    assert all(c.relative for c in cmds)


def test_repeated_groups_expand():
    cmds = parse_path("M0 0 L1 1 2 2 3 3")
    assert len(cmds) == 4
    assert [c.kind for c in cmds[1:]] == [CommandKind.LINE_TO] * 3
    assert cmds[-1].end == (3, 3)


def test_extra_move_pairs_become_lines():
    cmds = parse_path("M1 1 2 2")
    assert cmds[1].kind is CommandKind.LINE_TO
    assert cmds[1].end == (2, 2)

    rel = parse_path("m1 1 2 2")
    assert rel[1].kind is CommandKind.LINE_TO
    assert rel[1].relative
    assert rel[1].end == (3, 3)


def test_close_path_resets_to_subpath_start():
    cmds = parse_path("M2 2 L5 5 Z l1 1")
    assert cmds[2].kind is CommandKind.CLOSE_PATH
    assert cmds[2].end == (2, 2)
    assert cmds[3].end == (3, 3)


def test_horizontal_and_vertical():
    cmds = parse_path("M1 1 H5 V7 h-2 v-3")
    assert [c.end for c in cmds] == [(1, 1), (5, 1), (5, 7), (3, 7), (3, 4)]


def test_arc_repetition():
    cmds = parse_path("M0 0 A5 5 0 0 1 10 0 5 5 0 0 1 20 0")
    arcs = [c for c in cmds if c.kind is CommandKind.ARC_TO]
    assert len(arcs) == 2
    assert arcs[1].end == (20, 0)
    assert arcs[0].controls == ()


def test_compact_arc_flags():
    cmds = parse_path("M3 18a9 9 0 0118 0")
    arc = cmds[1]
    assert arc.operands == (9, 9, 0, 0, 1, 18, 0)
    assert arc.end == (21, 18)


def test_cubic_controls_resolved():
    cmds = parse_path("M1 1 c1 2 3 4 5 6")
    assert cmds[1].controls == ((2, 3), (4, 5))
    assert cmds[1].end == (6, 7)


def test_smooth_cubic_reflects_previous_control():
    cmds = parse_path("M0 0 C0 10 10 10 10 0 S20 -10 20 0")
    smooth = cmds[2]
    assert smooth.kind is CommandKind.SMOOTH_CUBIC
    assert smooth.controls[0] == (10, -10)
    assert smooth.end == (20, 0)


def test_smooth_quadratic_without_previous_uses_current_point():
    cmds = parse_path("M4 4 T8 8")
    assert cmds[1].controls == ((4, 4),)


def test_exponent_numbers():
    cmds = parse_path("M1e1 2E-1")
    assert cmds[0].end == (10, pytest.approx(0.2))


def test_empty_path():
    assert parse_path("") == []


@pytest.mark.parametrize(
    "path_data,command",
    [
        ("M4 4 L 10", "L"),
        ("M0 0 C1 2 3", "C"),
        ("M0 0 Z5", "Z"),
        ("M0 0 L", "L"),
    ],
)
def test_wrong_operand_count_raises(path_data, command):
    with pytest.raises(MalformedPathError) as info:
        parse_path(path_data)
    assert info.value.command == command
    assert info.value.path_data == path_data


def test_numbers_before_command_raise():
    with pytest.raises(MalformedPathError):
        parse_path("10 10 L20 20")


def test_garbage_raises():
    with pytest.raises(MalformedPathError):
        parse_path("M0 0 L5 x")


@pytest.mark.parametrize(
    "path_data",
    [
        "M8 14s1.5 2 4 2 4-2 4-2",
        "M15 21v-8a1 1 0 0 0-1-1h-4a1 1 0 0 0-1 1v8",
        "M3 18v-6a9 9 0 0 1 18 0v6",
        "M2 2q5 8 10 0t10 0",
    ],
)
def test_endpoints_match_svgpathtools(path_data):
    cmds = parse_path(path_data)
    last = oracle_parse(path_data)[-1].end
    assert cmds[-1].end[0] == pytest.approx(last.real)
    assert cmds[-1].end[1] == pytest.approx(last.imag)


def test_format_number():
    assert format_number(1.0) == "1"
    assert format_number(2.5) == "2.5"
    assert format_number(-0.0) == "0"
    assert format_number(1.23456) == "1.2346"
    assert format_number(1.23456, precision=2) == "1.23"


def test_serialize_commands_one_letter_per_command():
    assert serialize_commands(parse_path("M1 1 2 2")) == "M1 1 L2 2"
    assert serialize_commands(parse_path("m0 0 h5 z")) == "m0 0 h5 z"


class TestRepairPath:
    def test_well_formed_untouched(self):
        assert repair_path("M1 1 L2 2") == ("M1 1 L2 2", [])

    def test_missing_move_inserted(self):
        fixed, notes = repair_path("L 5 5")
        assert fixed == "M0 0 L5 5"
        assert any("inserted M0 0" in n for n in notes)

    def test_leading_relative_move(self):
        fixed, notes = repair_path("m2 2 l3 3")
        assert fixed == "M2 2 l3 3"
        assert any("converted to M" in n for n in notes)

    def test_relative_move_pairs_stay_relative(self):
        fixed, _ = repair_path("m1 1 2 2")
        assert fixed == "M1 1 l2 2"
        assert parse_path(fixed)[-1].end == (3, 3)

    def test_dangling_numbers_dropped(self):
        fixed, notes = repair_path("M4 4 L 10")
        assert fixed == "M4 4"
        assert any("dangling" in n for n in notes)

    def test_repaired_output_parses(self):
        fixed, _ = repair_path("M4 4 L 10 12 14 C 1 2")
        parse_path(fixed)

    def test_nothing_drawable(self):
        assert repair_path("xyz")[0] == ""
