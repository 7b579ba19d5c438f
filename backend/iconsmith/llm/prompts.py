"""Prompt templates for the external collaborators, keyed by task."""

from __future__ import annotations

_GEOMETRIC_TYPES = """- circle: Perfect circle or ring
- square: Equal sides, sharp or rounded corners
- rect: Non-square rectangle
- capsule: Pill shape (rounded rectangle with semicircle ends)
- triangle: Three-sided polygon
- line: Straight stroke
- curve: Simple arc or squiggle
- L-shape: 90-degree bend
- U-shape: Open container/cup shape
- cross: Plus or X shape
- complex: Irregular or detailed shape"""

_DECOMPOSE_TEMPLATE = """You are an icon architect for a stroke-based, Feather-style icon library.

Break the concept "{concept}" into the 1-5 simple geometric parts a designer would draw it with.

For each part give:
- role: short lowercase-hyphenated name of what the part is (e.g. "body", "nose", "fins", "handle")
- shape: the part's VISUAL geometry, one of:
""" + _GEOMETRIC_TYPES + """
- aspect: tall, wide, square or none

Describe the shape, not the meaning: a battery case is a "capsule", a play button is a "triangle".
List the largest, most structural part first.

Respond with valid JSON only:
{{"primitives": [{{"role": "body", "shape": "capsule", "aspect": "tall"}}]}}"""

_LAYOUT_TEMPLATE = """You are an icon composition expert. Create a layout for the concept "{concept}".

You must position ALL of these parts: {roles}

The canvas is {canvas}x{canvas} with 2px padding (usable area: 2-{usable_max}).

For every part give x, y (center point), scale (0.3-1.0) and zIndex (0=back, 1=front).

Respond with valid JSON only:
{{"layouts": [{{"name": "standard", "description": "one sentence", "positions": {{"part": {{"x": 12, "y": 12, "scale": 0.7, "zIndex": 0}}}}}}]}}"""

_CLASSIFY_TEMPLATE = """You are an SVG icon analyst. Classify each drawing element of the icon "{icon_name}".

## ELEMENTS ({count} total)
{elements}

For EACH element, in order, give:
1. name: short lowercase-hyphenated semantic name (e.g. "arrow-head", "document-body")
2. category: one of body, head, modifier, container, indicator, detail, connector
3. geometricType: the actual shape topology, one of:
""" + _GEOMETRIC_TYPES + """
4. tags: 2-4 tags describing function or meaning

Match the element count exactly.

Respond with valid JSON only:
{{"components": [{{"name": "...", "category": "...", "geometricType": "...", "tags": ["..."]}}]}}"""

_FILL_GAPS_TEMPLATE = """Draw the missing parts of an icon.

Concept: "{concept}"

Need to generate:
{gaps}

Style requirements:
- stroke-width="2" stroke-linecap="round" stroke-linejoin="round" fill="none"
- Coordinate range: 0-{canvas} (keep 2px padding)
- Simple, clean strokes, no fills

Return ONLY the <path> elements needed, one per missing part.
Example: <path d="M12 2v4" />"""

_TEMPLATES = {
    "decompose": _DECOMPOSE_TEMPLATE,
    "layout": _LAYOUT_TEMPLATE,
    "classify": _CLASSIFY_TEMPLATE,
    "fill_gaps": _FILL_GAPS_TEMPLATE,
}


def get_prompt_template(task: str) -> str:
    return _TEMPLATES[task]


def get_all_templates() -> dict[str, str]:
    """Return all prompt templates keyed by task name."""
    return dict(_TEMPLATES)
