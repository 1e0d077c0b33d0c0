"""Renderable parts produced by the glyph part mapper.

A part is one visual slice of a shaped cluster that belongs to one semantic
unit. The renderer draws either the part's component or the part's outline,
masked by its clip rectangle.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from glyphlab.domain.geometry import Rect
from glyphlab.domain.glyph import GlyphCluster, GlyphComponent
from glyphlab.domain.unit import Category


class Zone(str, Enum):
    """Attachment region around the base consonant."""

    BASE = "BASE"
    TOP = "TOP"
    BOTTOM = "BOTTOM"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class Part:
    """One visual slice of a cluster.

    Attributes:
        part_id: Identifier unique within the cluster (``<cluster>-<suffix>``)
        char: Source text of the unit the slice belongs to
        category: Unit category, or ``full`` for whole-glyph parts
        zone: Semantic zone after normalization
        role: Label of the strategy that produced the slice
        color: Display color for the category
        component: Component the slice is cut from, if any
        clip_rect: Clip mask in the component's (or outline's) coordinates
        outline: Shared cluster outline when no component is used
    """

    part_id: str
    char: str
    category: Category
    zone: Zone = Zone.UNKNOWN
    role: str = ""
    color: str = "#9ca3af"
    component: GlyphComponent | None = None
    clip_rect: Rect | None = None
    outline: str | None = None

    @property
    def glyph_id(self) -> int | None:
        return self.component.glyph_id if self.component else None

    def has_geometry(self) -> bool:
        """Check whether a renderer can draw this part."""
        return self.component is not None or bool(self.outline) or self.clip_rect is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the renderer's part format."""
        return {
            "partId": self.part_id,
            "char": self.char,
            "category": self.category.value,
            "zone": self.zone.value,
            "role": self.role,
            "color": self.color,
            "hbGlyphId": self.glyph_id,
            "component": self.component.to_dict() if self.component else None,
            "clipRect": self.clip_rect.to_dict() if self.clip_rect else None,
            "pathData": self.outline,
        }


@dataclass(frozen=True)
class MappedCluster:
    """A shaped cluster together with its parts.

    Attributes:
        cluster: The shaped cluster
        parts: Ordered parts for the renderer
        strategy: Name of the strategy that produced the parts
        error: Message of the error that forced a full-glyph fallback
    """

    cluster: GlyphCluster
    parts: tuple[Part, ...] = field(default=())
    strategy: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.cluster.to_dict()
        data["parts"] = [part.to_dict() for part in self.parts]
        data["strategy"] = self.strategy
        return data


@dataclass(frozen=True, slots=True)
class UnitLink:
    """Link between a unit and a cluster that renders it.

    Attributes:
        unit_id: Linked unit
        cluster_id: Linked cluster
        shared: True when the cluster renders more than one unit
    """

    unit_id: str
    cluster_id: int
    shared: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"unitId": self.unit_id, "clusterId": self.cluster_id, "shared": self.shared}
