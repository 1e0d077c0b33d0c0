"""Domain models for glyphlab.

This module contains the data types passed between the shaper, the unit
builder, the metrics builder and the part mapper. All models are:

- Immutable (frozen dataclasses)
- Serializable to the JSON formats of the shaping and metrics APIs
- Independent of uharfbuzz and fontTools

Key classes:
- BoundingBox, Rect: Edge-based and origin/size rectangles
- Category, Unit: Semantic units of the source text
- GlyphComponent, GlyphCluster: Shaped glyph geometry
- FontMetrics: Per-font glyph measurements
- Zone, Part, MappedCluster, UnitLink: Mapper output
"""

from glyphlab.domain.geometry import EMPTY_BOX, BoundingBox, Rect
from glyphlab.domain.glyph import GlyphCluster, GlyphComponent
from glyphlab.domain.metrics import (
    FontMetrics,
    GlyphMetric,
    MarkComponent,
    MarkMetric,
    OverflowDelta,
    SubscriptMetric,
)
from glyphlab.domain.part import MappedCluster, Part, UnitLink, Zone
from glyphlab.domain.unit import COENG, Category, Unit

__all__: list[str] = [
    # Enums
    "Category",
    "Zone",
    # Geometry
    "EMPTY_BOX",
    "BoundingBox",
    "Rect",
    # Units
    "COENG",
    "Unit",
    # Shaped glyphs
    "GlyphComponent",
    "GlyphCluster",
    # Metrics
    "FontMetrics",
    "GlyphMetric",
    "MarkComponent",
    "MarkMetric",
    "OverflowDelta",
    "SubscriptMetric",
    # Mapper output
    "MappedCluster",
    "Part",
    "UnitLink",
]
