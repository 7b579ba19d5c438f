"""Shared test fixtures."""

from __future__ import annotations

import pytest

from iconsmith.kitbash.index import FragmentIndex
from iconsmith.models.fragment import ElementKind, GeometricType, ShapeFragment
from iconsmith.models.geometry import BoundingBox


# Feather-style sample icons

CIRCLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <circle cx="12" cy="12" r="10"/>
</svg>'''

SMILEY_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <circle cx="12" cy="12" r="10"/>
  <circle cx="8" cy="9" r="1"/>
  <circle cx="16" cy="9" r="1"/>
  <path d="M8 14s1.5 2 4 2 4-2 4-2"/>
</svg>'''

HOME_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <path d="M15 21v-8a1 1 0 0 0-1-1h-4a1 1 0 0 0-1 1v8"/>
  <path d="M3 10a2 2 0 0 1 .709-1.528l7-5.999a2 2 0 0 1 2.582 0l7 5.999A2 2 0 0 1 21 10v9a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2z"/>
</svg>'''

BAR_CHART_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <line x1="18" x2="18" y1="20" y2="10"/>
  <line x1="12" x2="12" y1="20" y2="4"/>
  <line x1="6" x2="6" y1="20" y2="14"/>
</svg>'''

# Headphones arch: box 3..21 x 12..18, inside the padded canvas
ARCH_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <path d="M3 18v-6a9 9 0 0 1 18 0v6" fill="none"/>
</svg>'''

# Generated icon overflowing the canvas by 4 units on the left and right
OVERFLOW_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <path d="M-4 12h32" fill="none"/>
  <circle cx="12" cy="12" r="6" fill="none"/>
</svg>'''

# Arrives with inline styles, an off-standard stroke and active content
GENERATED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" stroke="black" stroke-width="1.5" onload="alert(1)">
  <script>alert("x")</script>
  <path d="M4 4 L20 20" style="stroke-linecap:butt;fill:red"/>
  <rect x="6" y="6" width="12" height="12" fill="blue"/>
</svg>'''

# One path whose LineTo is missing a coordinate
MALFORMED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <path d="M4 4 L 10" fill="none"/>
  <circle cx="12" cy="12" r="4" fill="none"/>
</svg>'''


def make_fragment(
    fragment_id: str,
    geometric_type: GeometricType = GeometricType.COMPLEX,
    box: tuple[float, float, float, float] = (6.0, 6.0, 18.0, 18.0),
    category: str = "",
    weight: float = 0.2,
    source: str = "library",
    raw_data: str | None = None,
) -> ShapeFragment:
    """A fragment with a box given as (min_x, min_y, max_x, max_y)."""
    bounding_box = BoundingBox.from_extents(*box)
    if raw_data is None:
        raw_data = f'<rect x="{box[0]:g}" y="{box[1]:g}" width="{box[2] - box[0]:g}" height="{box[3] - box[1]:g}"/>'
    return ShapeFragment(
        id=fragment_id,
        source_icon_id=source,
        element_kind=ElementKind.PATH,
        raw_data=raw_data,
        bounding_box=bounding_box,
        geometric_type=geometric_type,
        semantic_category=category,
        visual_weight=weight,
        name=fragment_id,
    )


def index_of(*fragments: ShapeFragment) -> FragmentIndex:
    """Index keyed by name and geometric type only."""
    entries: dict[str, list[ShapeFragment]] = {}
    for fragment in fragments:
        entries.setdefault(fragment.name, []).append(fragment)
        if fragment.geometric_type is not GeometricType.COMPLEX:
            entries.setdefault(f"geometric:{fragment.geometric_type.value}", []).append(fragment)
    return FragmentIndex(entries, library_id="test")


@pytest.fixture
def circle_svg() -> str:
    return CIRCLE_SVG


@pytest.fixture
def smiley_svg() -> str:
    return SMILEY_SVG


@pytest.fixture
def home_svg() -> str:
    return HOME_SVG


@pytest.fixture
def overflow_svg() -> str:
    return OVERFLOW_SVG


@pytest.fixture
def rocket_index() -> FragmentIndex:
    """Capsule body and triangle nose available; nothing else triangular."""
    body = make_fragment(
        "battery-case",
        GeometricType.CAPSULE,
        box=(7.0, 2.0, 17.0, 22.0),
        category="body",
        weight=0.4,
        source="battery",
        raw_data='<rect x="7" y="2" width="10" height="20" rx="5"/>',
    )
    nose = make_fragment(
        "play-triangle",
        GeometricType.TRIANGLE,
        box=(5.0, 3.0, 19.0, 21.0),
        weight=0.3,
        source="play",
        raw_data='<path d="M5 3l14 9-14 9V3z"/>',
    )
    return index_of(body, nose)
