"""Write icon markup in the wire format every engine output uses."""

from __future__ import annotations

from typing import Any

SVG_NS = "http://www.w3.org/2000/svg"


def _escape(value: Any) -> str:
    return str(value).replace('"', "&quot;")


def build_tag(name: str, attrs: dict[str, Any], self_closing: bool = True) -> str:
    attr_str = " ".join(f'{k}="{_escape(v)}"' for k, v in attrs.items())
    body = f"{name} {attr_str}" if attr_str else name
    return f"<{body} />" if self_closing else f"<{body}>"


def build_group(children: list[str], transform: str | None = None, indent: str = "  ") -> str:
    """Wrap child markup in a <g>, optionally carrying a transform."""
    attrs = {"transform": transform} if transform else {}
    lines = [indent + build_tag("g", attrs, self_closing=False)]
    lines.extend(f"{indent}  {child.strip()}" for child in children)
    lines.append(f"{indent}</g>")
    return "\n".join(lines)


def serialize_icon(
    children: list[str],
    size: float = 24.0,
    stroke_width: float | str = 2,
    stroke_linecap: str = "round",
    stroke_linejoin: str = "round",
    stroke: str = "currentColor",
    extra_attrs: dict[str, str] | None = None,
) -> str:
    """Root element with the canonical stroke attributes around ``children``."""
    size_text = f"{size:g}"
    root_attrs: dict[str, Any] = {
        "xmlns": SVG_NS,
        "width": size_text,
        "height": size_text,
        "viewBox": f"0 0 {size_text} {size_text}",
        "fill": "none",
        "stroke": stroke,
        "stroke-width": stroke_width,
        "stroke-linecap": stroke_linecap,
        "stroke-linejoin": stroke_linejoin,
    }
    if extra_attrs:
        root_attrs.update(extra_attrs)

    lines = [build_tag("svg", root_attrs, self_closing=False)]
    for child in children:
        text = child.rstrip()
        lines.append(text if text.startswith("  ") else f"  {text.strip()}")
    lines.append("</svg>")
    return "\n".join(lines)
