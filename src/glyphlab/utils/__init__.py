"""Utility functions for glyphlab.

This module provides logging setup and decode statistics tracking.
"""

from glyphlab.utils.logging import (
    DecodeLogger,
    DecodeStats,
    configure_logging,
)

__all__ = [
    "DecodeLogger",
    "DecodeStats",
    "configure_logging",
]
