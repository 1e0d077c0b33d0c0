"""Font I/O layer for glyphlab.

This module handles font files, HarfBuzz shaping and fontTools outlines.
It provides a clean abstraction layer between those libraries and the
domain models.

Key responsibilities:
- Check which catalog fonts are usable
- Shape text into positioned glyph clusters
- Draw glyph outlines as SVG path data (y down)
- Own the per-font shaper and metrics caches

Key classes:
- FontCatalog: Configured fonts and their availability
- FontService: Shapers and metrics per font
- HarfBuzzShaper: Shaping and outlines for one font file
"""

from glyphlab.io.fonts import FontCatalog, FontService, FontStatus
from glyphlab.io.shaper import HarfBuzzShaper

__all__ = [
    "FontCatalog",
    "FontService",
    "FontStatus",
    "HarfBuzzShaper",
]
