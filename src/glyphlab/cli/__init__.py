"""Command-line interface for glyphlab.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Unit, shaping, metrics and decode inspection commands
- Font catalog status
- JSON output for scripting
- Detailed error reporting
"""

from glyphlab.cli.app import cli, main

__all__ = ["cli", "main"]
