"""S1: Sanitize.

Strips executable and active content: script elements, event-handler
attributes, javascript:/data: hrefs, entity declarations and processing
instructions other than the XML declaration. Never fails, only strips.
"""

from __future__ import annotations

import html
import re
from dataclasses import replace

from iconsmith.engine.registry import stage
from iconsmith.engine.style import StyleProfile
from iconsmith.models.icon import IconState

# Quoted or bare attribute value; a bare value stops before "/>"
_VALUE = r"""(?:"[^"]*"|'[^']*'|(?:[^\s>/]|/(?!>))+)"""

_RULES: list[tuple[str, re.Pattern[str]]] = [
    ("script element", re.compile(r"<script\b[\s\S]*?(?:</script\s*>|/>)", re.IGNORECASE)),
    ("event handler", re.compile(rf"[\s/]+on\w+\s*=\s*{_VALUE}", re.IGNORECASE)),
    ("entity declaration", re.compile(r"<!ENTITY[^>]*>", re.IGNORECASE)),
    ("processing instruction", re.compile(r"<\?(?!xml\b)[\s\S]*?\?>", re.IGNORECASE)),
]

_HREF_RE = re.compile(rf"[\s/]+(?:xlink:)?href\s*=\s*({_VALUE})", re.IGNORECASE)
# Control characters and whitespace browsers ignore inside a URL scheme
_SCHEME_NOISE_RE = re.compile(r"[\x00-\x20]+")
_BLOCKED_SCHEMES = (
    ("javascript:", "script-scheme link"),
    ("vbscript:", "script-scheme link"),
    ("data:", "data: link"),
)


def _link_label(value: str) -> str | None:
    url = html.unescape(value.strip("\"'"))
    url = _SCHEME_NOISE_RE.sub("", url).lower()
    for scheme, label in _BLOCKED_SCHEMES:
        if url.startswith(scheme):
            return label
    return None


def sanitize_svg(svg: str) -> tuple[str, list[str]]:
    """Return the stripped markup and one note per kind of content removed."""
    notes: list[str] = []
    for label, pattern in _RULES:
        svg, count = pattern.subn("", svg)
        if count:
            notes.append(f"[sanitize] removed {count} {label}(s)")

    removed: dict[str, int] = {}

    def strip_link(match: re.Match[str]) -> str:
        label = _link_label(match.group(1))
        if label is None:
            return match.group(0)
        removed[label] = removed.get(label, 0) + 1
        return ""

    svg = _HREF_RE.sub(strip_link, svg)
    notes.extend(f"[sanitize] removed {count} {label}(s)" for label, count in removed.items())
    return svg, notes


@stage(id="sanitize", description="Strip scripts, event handlers and script-scheme links")
def sanitize(state: IconState, profile: StyleProfile) -> tuple[IconState, list[str]]:
    svg, notes = sanitize_svg(state.svg)
    return replace(state, svg=svg), notes
