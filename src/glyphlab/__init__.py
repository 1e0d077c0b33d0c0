"""Glyph Lab - Break Khmer clusters down into their visual parts.

Glyph Lab shapes Khmer text with HarfBuzz, splits the source text into
teaching units (base consonant, coeng, subscript, vowel, diacritic) and works
out which slice of the rendered glyph geometry belongs to which unit.

Example:
    $ glyphlab decode "ក្ខុំ" --font noto-sans-khmer

This prints every shaped cluster with its parts, zones and clip rectangles.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
