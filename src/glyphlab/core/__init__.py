"""Core segmentation algorithms for glyphlab.

This module contains the core algorithms for:

- Codepoint classification and unit building
- Font metrics probing
- Zone computation around the base consonant
- Mapping shaped glyph components to semantic parts

All algorithm services are:
- Pure (no I/O; fonts are reached through injected collaborators)
- Deterministic (same inputs, same parts)
- Free of module-level mutable state

Key functions:
- classify: Codepoint to unit category
- build_units: Text to ordered, gapless units
- link_units_to_clusters: Unit to cluster links
- compute_right_tail_split: Base/tail width arithmetic

Key classes:
- FontMetricsBuilder, MetricsCache: Per-font measurements
- ZoneEngine: BASE/TOP/BOTTOM/LEFT/RIGHT rectangles
- GlyphPartMapper: Clusters to parts
- ClusterDecoder: The whole pipeline for one text
"""

from glyphlab.core.classifier import classify, consonant_series
from glyphlab.core.geometry import (
    compute_right_biased_tail_split,
    compute_right_tail_split,
    pick_base_component,
)
from glyphlab.core.metrics import (
    FontMetricsBuilder,
    GlyphRecord,
    MetricsCache,
    Outline,
    Shaper,
)
from glyphlab.core.units import build_units, link_units_to_clusters, units_for_cluster
from glyphlab.core.zones import ZoneEngine, ZoneMap
from glyphlab.core.strategies import MappingContext, PartStrategy, default_strategies, full_part
from glyphlab.core.mapper import GlyphPartMapper
from glyphlab.core.decoder import ClusterDecoder, DecodeResult, FontProvider

__all__ = [
    # Decoder
    "ClusterDecoder",
    "DecodeResult",
    "FontProvider",
    # Metrics
    "FontMetricsBuilder",
    "GlyphRecord",
    "MetricsCache",
    "Outline",
    "Shaper",
    # Mapper
    "GlyphPartMapper",
    "MappingContext",
    "PartStrategy",
    "default_strategies",
    "full_part",
    # Zones
    "ZoneEngine",
    "ZoneMap",
    # Functions
    "build_units",
    "classify",
    "compute_right_biased_tail_split",
    "compute_right_tail_split",
    "consonant_series",
    "link_units_to_clusters",
    "pick_base_component",
    "units_for_cluster",
]
