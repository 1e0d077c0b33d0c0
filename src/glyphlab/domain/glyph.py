"""Shaped glyph clusters and their positioned components.

This module defines the shaping engine's output as the segmentation core
sees it: a cluster of positioned sub-glyphs (components), each with its own
outline and bounding box.
"""

from dataclasses import dataclass, field
from typing import Any

from glyphlab.domain.geometry import EMPTY_BOX, BoundingBox
from glyphlab.exceptions import ClusterDataError


@dataclass(frozen=True)
class GlyphComponent:
    """One positioned sub-glyph within a shaped cluster.

    The outline and bounding box are local to the component's pen position;
    ``x``/``y`` place that pen position in cluster space.

    Attributes:
        glyph_id: Font glyph index reported by the shaper
        x: Horizontal pen position (advance so far plus x offset)
        y: Vertical offset, SVG orientation
        advance: Horizontal advance of the glyph
        outline: SVG path data of the glyph outline
        bounding_box: Ink box of the outline in local coordinates
        index: Position of the component within its cluster
    """

    glyph_id: int
    x: float = 0.0
    y: float = 0.0
    advance: float = 0.0
    outline: str = ""
    bounding_box: BoundingBox = EMPTY_BOX
    index: int = 0

    @property
    def absolute_box(self) -> BoundingBox:
        """Ink box in cluster space."""
        return self.bounding_box.translate(self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shaping API component format."""
        return {
            "hbGlyphId": self.glyph_id,
            "d": self.outline,
            "bb": self.bounding_box.to_dict(),
            "x": self.x,
            "y": self.y,
            "advance": self.advance,
            "clusterIndex": self.index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphComponent":
        """Deserialize from the shaping API component format.

        Raises:
            ClusterDataError: If the glyph id is missing
        """
        if data.get("hbGlyphId") is None:
            raise ClusterDataError("component without hbGlyphId")
        return cls(
            glyph_id=int(data["hbGlyphId"]),
            x=float(data.get("x") or 0.0),
            y=float(data.get("y") or 0.0),
            advance=float(data.get("advance") or 0.0),
            outline=data.get("d") or "",
            bounding_box=BoundingBox.from_dict(data.get("bb") or {}),
            index=int(data.get("clusterIndex") or 0),
        )


@dataclass(frozen=True)
class GlyphCluster:
    """A run of codepoints the shaper renders as one visual unit.

    Attributes:
        id: Cluster index within the shaped text
        code_points: Source codepoints covered by the cluster
        cluster_start: Start offset in the source text
        cluster_end: End offset in the source text (exclusive)
        outline: SVG path data of the whole cluster
        components: Positioned sub-glyphs, in shaping order
        bounding_box: Union of the components' boxes (computed when omitted)
        advance: Total horizontal advance of the cluster
    """

    id: int
    code_points: tuple[int, ...]
    cluster_start: int | None = None
    cluster_end: int | None = None
    outline: str = ""
    components: tuple[GlyphComponent, ...] = field(default=())
    bounding_box: BoundingBox | None = None
    advance: float = 0.0

    def __post_init__(self) -> None:
        if self.bounding_box is None:
            box = EMPTY_BOX
            for component in self.components:
                box = box.union(component.absolute_box)
            object.__setattr__(self, "bounding_box", box)

    @property
    def box(self) -> BoundingBox:
        """Cluster bounding box (never None after construction)."""
        return self.bounding_box or EMPTY_BOX

    @property
    def text(self) -> str:
        return "".join(chr(cp) for cp in self.code_points)

    @property
    def has_source_range(self) -> bool:
        return self.cluster_start is not None and self.cluster_end is not None

    def unique_glyph_ids(self) -> set[int]:
        return {component.glyph_id for component in self.components}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shaping API cluster format."""
        chars = [chr(cp) for cp in self.code_points]
        return {
            "id": self.id,
            "cluster": self.cluster_start,
            "clusterStart": self.cluster_start,
            "clusterEnd": self.cluster_end,
            "clusterText": self.text,
            "chars": chars,
            "codePoints": list(self.code_points),
            "components": [c.to_dict() for c in self.components],
            "d": self.outline,
            "bb": self.box.to_dict(),
            "advance": self.advance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphCluster":
        """Deserialize from the shaping API cluster format.

        Raises:
            ClusterDataError: If required fields are missing or malformed
        """
        try:
            code_points = data.get("codePoints")
            if code_points is None:
                code_points = [ord(ch) for ch in data.get("chars") or []]
            components = tuple(
                GlyphComponent.from_dict(c) for c in data.get("components") or []
            )
            # With components present the box is always their union
            bb = None if components else data.get("bb")
            return cls(
                id=int(data["id"]),
                code_points=tuple(int(cp) for cp in code_points),
                cluster_start=data.get("clusterStart"),
                cluster_end=data.get("clusterEnd"),
                outline=data.get("d") or "",
                components=components,
                bounding_box=BoundingBox.from_dict(bb) if bb else None,
                advance=float(data.get("advance") or 0.0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ClusterDataError(str(e)) from e
