"""Shape fragments: reusable drawing elements cut from library icons."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, field_validator

from iconsmith.models.geometry import BoundingBox


class GeometricType(str, enum.Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    RECT = "rect"
    CAPSULE = "capsule"
    TRIANGLE = "triangle"
    LINE = "line"
    CURVE = "curve"
    L_SHAPE = "L-shape"
    U_SHAPE = "U-shape"
    CROSS = "cross"
    COMPLEX = "complex"

    @classmethod
    def parse(cls, value: str | GeometricType | None) -> GeometricType:
        """Lenient lookup ("l_shape", "Circle", …); anything unknown is COMPLEX."""
        if isinstance(value, GeometricType):
            return value
        if not value:
            return cls.COMPLEX
        key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        for member in cls:
            if member.value.lower() == key:
                return member
        return cls.COMPLEX


class ElementKind(str, enum.Enum):
    PATH = "path"
    CIRCLE = "circle"
    RECT = "rect"
    LINE = "line"


@dataclass(frozen=True)
class ShapeFragment:
    """Immutable snapshot of one drawing element, taken at index-build time.

    ``raw_data`` is the element's markup as it appeared in its source icon,
    wrapped in a <g> when it inherited group transforms. Assembly never
    edits a fragment; it wraps it.
    """

    id: str
    source_icon_id: str
    element_kind: ElementKind
    raw_data: str
    bounding_box: BoundingBox
    geometric_type: GeometricType = GeometricType.COMPLEX
    semantic_category: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    visual_weight: float = 0.0
    name: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.visual_weight <= 1.0:
            raise ValueError(f"visual_weight must be within 0..1, got {self.visual_weight}")


@dataclass(frozen=True)
class LibraryIcon:
    """A library icon handed to the index builder."""

    id: str
    svg: str
    name: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class FragmentClassification(BaseModel):
    """What the external classifier says about one fragment."""

    name: str = ""
    geometric_type: GeometricType = Field(default=GeometricType.COMPLEX, alias="geometricType")
    semantic_category: str = Field(default="", alias="category")
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("geometric_type", mode="before")
    @classmethod
    def _lenient_type(cls, value: object) -> GeometricType:
        return GeometricType.parse(value if isinstance(value, (str, GeometricType)) else None)
