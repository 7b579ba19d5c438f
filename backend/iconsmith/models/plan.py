"""Assembly plan, requirements and layouts."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from iconsmith.models.fragment import GeometricType, ShapeFragment


class Aspect(str, enum.Enum):
    TALL = "tall"
    WIDE = "wide"
    SQUARE = "square"
    NONE = "none"


class Strategy(str, enum.Enum):
    GRAFT = "graft"
    HYBRID = "hybrid"
    ADAPT = "adapt"
    GENERATE = "generate"


class ShapePrimitiveRequirement(BaseModel):
    """One slot in an assembly plan: a role filled by a shape of some type."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., min_length=1)
    shape: GeometricType = GeometricType.COMPLEX
    aspect: Aspect = Aspect.NONE

    @field_validator("shape", mode="before")
    @classmethod
    def _lenient_shape(cls, value: object) -> GeometricType:
        return GeometricType.parse(value if isinstance(value, (str, GeometricType)) else None)

    @field_validator("aspect", mode="before")
    @classmethod
    def _lenient_aspect(cls, value: object) -> Aspect:
        if isinstance(value, Aspect):
            return value
        try:
            return Aspect(str(value).strip().lower()) if value else Aspect.NONE
        except ValueError:
            return Aspect.NONE


class Position(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x: float
    y: float
    scale: float = Field(default=1.0, gt=0)
    z_index: int = Field(default=0, alias="zIndex")


class Layout(BaseModel):
    """Named placement of every role on the canvas."""

    model_config = ConfigDict(frozen=True)

    name: str
    positions: dict[str, Position] = Field(default_factory=dict)
    description: str = ""

    def covers(self, roles: list[str]) -> bool:
        return all(role in self.positions for role in roles)

    def missing(self, roles: list[str]) -> list[str]:
        return [role for role in roles if role not in self.positions]


@dataclass(frozen=True)
class FragmentMatch:
    requirement: ShapePrimitiveRequirement
    fragment: ShapeFragment
    confidence: float


@dataclass(frozen=True)
class AssemblyPlan:
    """Immutable plan; re-planning always builds a new one."""

    concept: str
    required_primitives: tuple[ShapePrimitiveRequirement, ...]
    found_matches: tuple[FragmentMatch, ...]
    missing_roles: tuple[str, ...]
    coverage: float
    strategy: Strategy
    warnings: tuple[str, ...] = ()

    @property
    def roles(self) -> list[str]:
        return [req.role for req in self.required_primitives]

    def match_for(self, role: str) -> FragmentMatch | None:
        for match in self.found_matches:
            if match.requirement.role == role:
                return match
        return None


@dataclass(frozen=True)
class Gap:
    """A role with no library fragment, reserved for external fill-in."""

    role: str
    shape: GeometricType
    aspect: Aspect
    position: Position
