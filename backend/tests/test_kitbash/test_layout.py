import pytest

from iconsmith.kitbash.layout import (
    anchor_for,
    anchored_layout,
    choose_layouts,
    default_layouts,
    radial_positions,
)
from iconsmith.models.plan import Layout, Position


def test_anchor_keywords():
    assert anchor_for("Body") == (0.5, 0.8, 0)
    assert anchor_for("nose-cone") == (0.2, 0.4, 1)
    assert anchor_for("tail fins") == (0.8, 0.4, 1)
    assert anchor_for("wheel") is None


def test_rocket_anchored_layout():
    layout = anchored_layout(["body", "nose", "fins"])
    assert layout.name == "anchored"
    body, nose, fins = (layout.positions[r] for r in ("body", "nose", "fins"))
    assert (body.x, body.y, body.scale, body.z_index) == (12, 12, 0.8, 0)
    assert nose.y == pytest.approx(4.8)
    assert fins.y == pytest.approx(19.2)
    assert nose.z_index > body.z_index


def test_shared_anchor_spreads_horizontally():
    layout = anchored_layout(["left body", "right body"])
    xs = [layout.positions[r].x for r in ("left body", "right body")]
    assert xs == [9, 15]


def test_leftover_roles_go_on_top():
    layout = anchored_layout(["body", "window"])
    window = layout.positions["window"]
    assert window.z_index == 1
    assert (window.x, window.y) == pytest.approx((12, 6))


def test_no_anchor_no_layout():
    assert anchored_layout(["wheel", "spoke"]) is None


def test_radial_starts_at_twelve_o_clock():
    positions = radial_positions(["a", "b", "c", "d"])
    assert (positions["a"].x, positions["a"].y) == pytest.approx((12, 6))
    assert (positions["b"].x, positions["b"].y) == pytest.approx((18, 12))
    assert [p.z_index for p in positions.values()] == [0, 1, 2, 3]
    assert all(p.scale == 0.5 for p in positions.values())


def test_single_role_centered():
    [layout] = default_layouts(["star"])
    assert layout.name == "centered"
    assert layout.positions["star"] == Position(x=12, y=12, scale=0.9, z_index=0)


def test_two_roles():
    layouts = default_layouts(["cloud", "bolt"])
    assert [l.name for l in layouts] == ["side-by-side", "badge", "overlay"]
    side = layouts[0].positions
    assert (side["cloud"].x, side["bolt"].x) == (8, 16)
    badge = layouts[1].positions["bolt"]
    assert (badge.x, badge.y, badge.scale) == (17, 17, 0.4)


def test_many_roles_radial_and_scaled_canvas():
    layouts = default_layouts(["a", "b", "c"], canvas_size=48)
    assert [l.name for l in layouts] == ["radial"]
    assert layouts[0].positions["a"].y == pytest.approx(12)


def test_no_roles():
    assert default_layouts([]) == []
    assert choose_layouts([]) == ([], [])


def test_choose_layouts_incomplete_suggestion():
    partial = Layout(name="partial", positions={"a": Position(x=1, y=1)})
    layouts, warnings = choose_layouts(["a", "b"], partial)
    assert partial not in layouts
    assert len(warnings) == 1
    assert warnings[0].startswith("[missing-external-data] suggested layout 'partial' does not place b")


def test_position_alias():
    position = Position.model_validate({"x": 1, "y": 2, "zIndex": 3})
    assert position.z_index == 3
    with pytest.raises(ValueError):
        Position(x=1, y=2, scale=0)
