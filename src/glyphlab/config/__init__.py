"""Configuration management for glyphlab.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- SegmentationConfig: Tuned zone and split constants
- StackedModeConfig: Narrow stacked cluster settings
- ShapingConfig: Default font, features and cluster level
- FontCatalogConfig: Known font files
- LoggingConfig: Logging settings
- GlyphLabSettings: Main application settings
"""

from glyphlab.config.settings import (
    FontCatalogConfig,
    FontEntry,
    GlyphLabSettings,
    LoggingConfig,
    SegmentationConfig,
    ShapingConfig,
    StackedModeConfig,
    get_default_settings,
    parse_features,
)

__all__ = [
    "FontCatalogConfig",
    "FontEntry",
    "GlyphLabSettings",
    "LoggingConfig",
    "SegmentationConfig",
    "ShapingConfig",
    "StackedModeConfig",
    "get_default_settings",
    "parse_features",
]
