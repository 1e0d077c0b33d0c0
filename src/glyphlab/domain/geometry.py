"""Rectangle types shared by glyphs, metrics, zones and parts.

All coordinates are font design units in SVG orientation: y grows downward,
so ``y1`` is the top edge of a box and ``y2`` its bottom edge.

- BoundingBox: edge-based box ``{x1, y1, x2, y2}`` enclosing glyph ink
- Rect: origin/size rectangle ``{x, y, width, height}`` used for zones and clips
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box enclosing a glyph or cluster's ink.

    Attributes:
        x1: Left edge
        y1: Top edge
        x2: Right edge
        y2: Bottom edge
    """

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    @property
    def width(self) -> float:
        """Box width, never negative."""
        return max(0.0, self.x2 - self.x1)

    @property
    def height(self) -> float:
        """Box height, never negative."""
        return max(0.0, self.y2 - self.y1)

    @property
    def area(self) -> float:
        """Box area, never negative."""
        return self.width * self.height

    @property
    def center_x(self) -> float:
        return (self.x1 + self.x2) / 2

    @property
    def center_y(self) -> float:
        return (self.y1 + self.y2) / 2

    def is_empty(self) -> bool:
        """Check whether the box encloses no area.

        Returns:
            True if width or height is zero
        """
        return self.width <= 0 or self.height <= 0

    def translate(self, dx: float, dy: float) -> "BoundingBox":
        """Return the box shifted by ``(dx, dy)``."""
        return BoundingBox(self.x1 + dx, self.y1 + dy, self.x2 + dx, self.y2 + dy)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Return the smallest box enclosing both boxes.

        Empty boxes are ignored so that blank glyphs (spaces, zero-width
        marks) never stretch a cluster's box towards the origin.

        Args:
            other: Box to merge with

        Returns:
            Enclosing bounding box
        """
        if other.is_empty():
            return self
        if self.is_empty():
            return other
        return BoundingBox(
            min(self.x1, other.x1),
            min(self.y1, other.y1),
            max(self.x2, other.x2),
            max(self.y2, other.y2),
        )

    def to_rect(self) -> "Rect":
        """Convert to an origin/size rectangle."""
        return Rect(self.x1, self.y1, self.width, self.height)

    def to_dict(self) -> dict[str, float]:
        """Serialize to the ``{x1, y1, x2, y2}`` wire format."""
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoundingBox":
        """Deserialize from the ``{x1, y1, x2, y2}`` wire format.

        Missing edges default to zero.
        """
        return cls(
            x1=float(data.get("x1") or 0.0),
            y1=float(data.get("y1") or 0.0),
            x2=float(data.get("x2") or 0.0),
            y2=float(data.get("y2") or 0.0),
        )


EMPTY_BOX = BoundingBox()


@dataclass(frozen=True, slots=True)
class Rect:
    """Origin/size rectangle used for zones and clip masks.

    Negative width or height is clamped to zero on construction, so every
    Rect is safe to hand to a renderer.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (>= 0)
        height: Vertical extent (>= 0)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0:
            object.__setattr__(self, "width", 0.0)
        if self.height < 0:
            object.__setattr__(self, "height", 0.0)

    @classmethod
    def from_edges(cls, x1: float, y1: float, x2: float, y2: float) -> "Rect":
        """Build a rectangle from its edges."""
        return cls(x1, y1, x2 - x1, y2 - y1)

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, other: "Rect") -> bool:
        """Check whether ``other`` lies fully inside this rectangle."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.x2 <= self.x2
            and other.y2 <= self.y2
        )

    def pad(self, fraction_x: float, fraction_y: float) -> "Rect":
        """Grow the rectangle symmetrically.

        Args:
            fraction_x: Total horizontal growth as a fraction of width
            fraction_y: Total vertical growth as a fraction of height

        Returns:
            Padded rectangle with the same center
        """
        dx = self.width * fraction_x / 2
        dy = self.height * fraction_y / 2
        return Rect(self.x - dx, self.y - dy, self.width + 2 * dx, self.height + 2 * dy)

    def to_dict(self) -> dict[str, float]:
        """Serialize to the ``{x, y, width, height}`` wire format."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rect":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )
