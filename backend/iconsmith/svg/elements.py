"""Regex-level SVG element scanning and surgical tag edits.

Icons are small and their markup is kept byte-stable, so elements are located
by character span and edited by splicing rather than through a DOM round trip.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DRAWABLE_TAGS = frozenset({"path", "circle", "ellipse", "rect", "line", "polyline", "polygon"})

# Containers whose content is never drawn directly
_NON_RENDERED = frozenset({"defs", "clippath", "mask", "symbol", "pattern", "marker"})

_TAG_RE = re.compile(r"""<(/?)([A-Za-z][\w:.-]*)((?:[^>"']|"[^"]*"|'[^']*')*?)(/?)>""")
_SKIP_RE = re.compile(r"<!--.*?-->|<!\[CDATA\[.*?\]\]>", re.DOTALL)
_ATTR_RE = re.compile(r"""([A-Za-z_:][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_NUMBER_PREFIX_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class SvgElement:
    """One opening (or self-closing) tag located in the source markup."""

    name: str
    attrs: dict[str, str]
    source_tag: str
    source_span: tuple[int, int]
    self_closing: bool = False
    # Open ancestors, outermost first
    ancestors: tuple[SvgElement, ...] = field(default_factory=tuple)

    @property
    def transform(self) -> str | None:
        value = self.attrs.get("transform", "").strip()
        return value or None

    @property
    def transform_chain(self) -> list[str]:
        """Every transform that applies to this element, outermost first."""
        chain = [a.transform for a in self.ancestors if a.transform]
        if self.transform:
            chain.append(self.transform)
        return chain

    @property
    def transform_owner(self) -> SvgElement | None:
        """The outermost element in the chain that carries a transform."""
        for node in (*self.ancestors, self):
            if node.transform:
                return node
        return None

    def number(self, name: str, default: float = 0.0) -> float:
        return to_float(self.attrs.get(name), default)


def extract_attrs(tag_text: str) -> dict[str, str]:
    """Extract key=value attributes from an SVG tag string."""
    attrs: dict[str, str] = {}
    body = re.sub(r"^<\s*/?\s*[A-Za-z][\w:.-]*", "", tag_text)
    for m in _ATTR_RE.finditer(body):
        attrs[m.group(1)] = m.group(2) if m.group(2) is not None else m.group(3)
    return attrs


def to_float(value: str | None, default: float = 0.0) -> float:
    """Leading number of an attribute value ("12px" → 12.0), else ``default``."""
    if value is None:
        return default
    m = _NUMBER_PREFIX_RE.match(value)
    if not m:
        return default
    return float(m.group(1))


def iter_tags(svg: str) -> Iterator[tuple[re.Match[str], bool]]:
    """Yield (match, is_closing) for every tag outside comments and CDATA."""
    skipped = [(m.start(), m.end()) for m in _SKIP_RE.finditer(svg)]
    for m in _TAG_RE.finditer(svg):
        if any(start <= m.start() < end for start, end in skipped):
            continue
        yield m, bool(m.group(1))


def scan_elements(svg: str) -> list[SvgElement]:
    """All opening tags in document order, each with its open ancestors."""
    elements: list[SvgElement] = []
    stack: list[SvgElement] = []

    for m, closing in iter_tags(svg):
        name = m.group(2)
        if closing:
            # Pop back to the matching open tag; tolerate unbalanced markup
            for depth in range(len(stack) - 1, -1, -1):
                if stack[depth].name == name:
                    del stack[depth:]
                    break
            continue

        element = SvgElement(
            name=name,
            attrs=extract_attrs(m.group(0)),
            source_tag=m.group(0),
            source_span=(m.start(), m.end()),
            self_closing=bool(m.group(4)),
            ancestors=tuple(stack),
        )
        elements.append(element)
        if not element.self_closing:
            stack.append(element)

    return elements


def find_drawables(svg: str) -> list[SvgElement]:
    """Drawing elements that are actually rendered (not inside defs, masks, …)."""
    drawables = []
    for element in scan_elements(svg):
        if element.name.lower() not in DRAWABLE_TAGS:
            continue
        if any(a.name.lower() in _NON_RENDERED for a in element.ancestors):
            continue
        drawables.append(element)
    return drawables


def find_root(svg: str) -> SvgElement | None:
    for element in scan_elements(svg):
        if element.name.lower() == "svg":
            return element
    return None


def has_closing_svg(svg: str) -> bool:
    return any(closing and m.group(2).lower() == "svg" for m, closing in iter_tags(svg))


def parse_view_box(value: str | None) -> tuple[float, float, float, float] | None:
    if not value:
        return None
    parts = [p for p in re.split(r"[\s,]+", value.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    return (x, y, w, h)


def view_box_size(svg: str) -> float | None:
    """The larger viewBox dimension of the root element, if it declares one."""
    root = find_root(svg)
    if root is None:
        return None
    box = parse_view_box(root.attrs.get("viewBox"))
    if box is None:
        return None
    return max(box[2], box[3])


def set_attrs(tag_text: str, updates: dict[str, str | None]) -> str:
    """Rewrite attributes of one tag in place.

    Existing attributes keep their position; new ones are appended before the
    closing ``>`` or ``/>``. A ``None`` value removes the attribute.
    """
    result = tag_text
    for name, value in updates.items():
        pattern = re.compile(r"""(\s)%s\s*=\s*(?:"[^"]*"|'[^']*')""" % re.escape(name))
        if value is None:
            result = pattern.sub("", result)
            continue
        safe = value.replace('"', "&quot;")
        if pattern.search(result):
            result = pattern.sub(lambda m: f'{m.group(1)}{name}="{safe}"', result, count=1)
        else:
            m = re.search(r"\s*/?>$", result)
            insert_at = m.start() if m else len(result)
            result = f'{result[:insert_at]} {name}="{safe}"{result[insert_at:]}'
    return result


def apply_splices(text: str, splices: list[tuple[int, int, str]]) -> str:
    """Apply (offset, length, replacement) splices to ``text``."""
    # Sort by offset descending so earlier splices don't shift later offsets
    for offset, length, replacement in sorted(splices, key=lambda s: s[0], reverse=True):
        text = text[:offset] + replacement + text[offset + length :]
    return text
