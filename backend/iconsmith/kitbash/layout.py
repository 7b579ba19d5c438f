"""Deterministic layouts and validation of suggested ones.

Positions are canvas coordinates of a fragment's center after scaling.
Coordinates below are written for any canvas size; on the 24-unit canvas
side-by-side puts its parts at x=8 and x=16.
"""

from __future__ import annotations

import logging
import math

from iconsmith.errors import MissingExternalDataWarning
from iconsmith.models.plan import Layout, Position

logger = logging.getLogger(__name__)

# Role-name anchors, checked in order: (keywords, relative y, scale, z)
_ANCHORS: list[tuple[tuple[str, ...], float, float, int]] = [
    (("body", "case"), 0.5, 0.8, 0),
    (("nose", "top", "terminal"), 0.2, 0.4, 1),
    (("fins", "base", "bottom"), 0.8, 0.4, 1),
]

# Horizontal spread between roles sharing one anchor, as a fraction of the canvas
_ANCHOR_SPREAD = 0.25


def anchor_for(role: str) -> tuple[float, float, int] | None:
    """(relative y, scale, z) for a role name that matches a known anchor."""
    name = role.lower()
    for keywords, rel_y, scale, z in _ANCHORS:
        if any(k in name for k in keywords):
            return rel_y, scale, z
    return None


def radial_positions(
    roles: list[str],
    canvas_size: float = 24.0,
    scale: float = 0.5,
    first_z: int = 0,
) -> dict[str, Position]:
    """Even angular division around the canvas center, starting at 12 o'clock."""
    center = canvas_size / 2
    radius = canvas_size / 4
    step = 2 * math.pi / len(roles) if roles else 0.0
    positions: dict[str, Position] = {}
    for i, role in enumerate(roles):
        angle = step * i - math.pi / 2
        positions[role] = Position(
            x=center + math.cos(angle) * radius,
            y=center + math.sin(angle) * radius,
            scale=scale,
            z_index=first_z + i,
        )
    return positions


def anchored_layout(roles: list[str], canvas_size: float = 24.0) -> Layout | None:
    """Layout from role-name heuristics; None when no role matches an anchor."""
    grouped: dict[tuple[float, float, int], list[str]] = {}
    leftovers: list[str] = []
    for role in roles:
        anchor = anchor_for(role)
        if anchor is None:
            leftovers.append(role)
        else:
            grouped.setdefault(anchor, []).append(role)
    if not grouped:
        return None

    center = canvas_size / 2
    positions: dict[str, Position] = {}
    for (rel_y, scale, z), members in grouped.items():
        for j, role in enumerate(members):
            offset = (j - (len(members) - 1) / 2) * canvas_size * _ANCHOR_SPREAD
            positions[role] = Position(x=center + offset, y=canvas_size * rel_y, scale=scale, z_index=z)

    if leftovers:
        top_z = max(p.z_index for p in positions.values()) + 1
        positions.update(radial_positions(leftovers, canvas_size, first_z=top_z))

    return Layout(name="anchored", positions=positions, description="Parts placed by role name")


def default_layouts(roles: list[str], canvas_size: float = 24.0) -> list[Layout]:
    """Every deterministic candidate for ``roles``, best first."""
    if not roles:
        return []

    c = canvas_size / 2
    layouts: list[Layout] = []
    anchored = anchored_layout(roles, canvas_size)
    if anchored is not None:
        layouts.append(anchored)

    if len(roles) == 1:
        layouts.append(
            Layout(
                name="centered",
                positions={roles[0]: Position(x=c, y=c, scale=0.9, z_index=0)},
                description="Single part centered",
            )
        )
    elif len(roles) == 2:
        a, b = roles
        layouts.extend(
            [
                Layout(
                    name="side-by-side",
                    positions={
                        a: Position(x=canvas_size / 3, y=c, scale=0.6, z_index=0),
                        b: Position(x=canvas_size * 2 / 3, y=c, scale=0.6, z_index=1),
                    },
                    description="Parts placed horizontally",
                ),
                Layout(
                    name="badge",
                    positions={
                        a: Position(x=canvas_size * 5 / 12, y=c, scale=0.8, z_index=0),
                        b: Position(x=canvas_size * 17 / 24, y=canvas_size * 17 / 24, scale=0.4, z_index=1),
                    },
                    description="Main part with a badge in the corner",
                ),
                Layout(
                    name="overlay",
                    positions={
                        a: Position(x=c, y=c, scale=0.7, z_index=0),
                        b: Position(x=c, y=c, scale=0.5, z_index=1),
                    },
                    description="Parts stacked on the center",
                ),
            ]
        )
    else:
        layouts.append(
            Layout(
                name="radial",
                positions=radial_positions(roles, canvas_size),
                description="Parts arranged in a circle",
            )
        )
    return layouts


def choose_layouts(
    roles: list[str],
    suggested: Layout | None = None,
    canvas_size: float = 24.0,
) -> tuple[list[Layout], list[str]]:
    """Candidate layouts, a complete suggestion first; plus warnings.

    An incomplete suggestion is dropped in favor of the defaults.
    """
    defaults = default_layouts(roles, canvas_size)
    if suggested is None:
        return defaults, []
    if suggested.covers(roles):
        return [suggested, *defaults], []

    warning = MissingExternalDataWarning(
        f"suggested layout {suggested.name!r} does not place {', '.join(suggested.missing(roles))}; "
        "using default layouts",
        layout=suggested.name,
    )
    logger.warning("%s", warning)
    return defaults, [str(warning)]
