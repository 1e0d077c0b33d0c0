"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from glyphlab.domain import FontMetrics, GlyphCluster, MappedCluster, Unit

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def _codepoints(text: str) -> str:
    return " ".join(f"U+{ord(ch):04X}" for ch in text)


def _num(value: float) -> str:
    return f"{value:g}"


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Glyph Lab[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_json(data: Any) -> None:
    """Print machine-readable JSON without Rich wrapping."""
    console.file.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")


def print_units(units: list[Unit]) -> None:
    """Print the unit list of a text.

    Args:
        units: Units in text order
    """
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("id")
    table.add_column("text")
    table.add_column("codepoints")
    table.add_column("category")
    table.add_column("range", justify="right")
    for unit in units:
        table.add_row(
            unit.id,
            unit.text,
            _codepoints(unit.text),
            unit.category.value,
            f"{unit.source_start}-{unit.source_end}",
        )
    console.print(table)


def print_clusters(clusters: list[GlyphCluster]) -> None:
    """Print shaped clusters and their components.

    Args:
        clusters: Shaped clusters
    """
    for cluster in clusters:
        line = Text(f"  #{cluster.id} ")
        line.append(cluster.text, style="bold")
        line.append(f" {SYM_DOT} {_codepoints(cluster.text)} {SYM_DOT} ")
        line.append(f"{len(cluster.components)} components {SYM_DOT} advance {_num(cluster.advance)}")
        console.print(line)
        for component in cluster.components:
            bb = component.bounding_box
            console.print(
                f"    glyph {component.glyph_id} at ({_num(component.x)}, {_num(component.y)}) "
                f"{SYM_DOT} bb {_num(bb.x1)},{_num(bb.y1)} {_num(bb.x2)},{_num(bb.y2)}"
            )


def print_mapped(mapped: list[MappedCluster], verbose: bool = False) -> None:
    """Print clusters with their parts.

    Args:
        mapped: Mapped clusters
        verbose: Also print clip rectangles
    """
    for result in mapped:
        cluster = result.cluster
        line = Text(f"\n  #{cluster.id} ")
        line.append(cluster.text, style="bold")
        line.append(f" {SYM_DOT} {result.strategy} {SYM_DOT} {len(result.parts)} parts")
        console.print(line)
        if result.error:
            console.print(f"    [red]{SYM_ERR} {result.error}[/red]")

        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("part")
        table.add_column("char")
        table.add_column("category")
        table.add_column("zone")
        table.add_column("role")
        table.add_column("glyph", justify="right")
        if verbose:
            table.add_column("clip")
        for part in result.parts:
            row = [
                part.part_id,
                part.char,
                part.category.value,
                part.zone.value,
                part.role,
                "" if part.glyph_id is None else str(part.glyph_id),
            ]
            if verbose:
                clip = part.clip_rect
                row.append(
                    ""
                    if clip is None
                    else f"{_num(clip.x)},{_num(clip.y)} {_num(clip.width)}x{_num(clip.height)}"
                )
            table.add_row(*row)
        console.print(table)


def print_metrics_summary(metrics: FontMetrics, skipped: int | None = None) -> None:
    """Print how many glyphs of each kind were measured.

    Args:
        metrics: Font metrics
        skipped: Number of skipped probes, if known
    """
    console.print(f"  {metrics.font_id} {SYM_DOT} {metrics.units_per_em:,} UPM")
    if metrics.base_box is not None:
        bb = metrics.base_box
        console.print(f"  base body {_num(bb.x1)},{_num(bb.y1)} {_num(bb.x2)},{_num(bb.y2)}")
    console.print(
        f"  {len(metrics.consonants)} consonants {SYM_DOT} "
        f"{len(metrics.independent_vowels)} independent vowels {SYM_DOT} "
        f"{len(metrics.subscripts)} subscripts"
    )
    console.print(
        f"  {len(metrics.vowels)} vowels {SYM_DOT} {len(metrics.diacritics)} signs"
        + (f" {SYM_DOT} {skipped} probes skipped" if skipped is not None else "")
    )


def print_fonts(catalog: dict[str, Any]) -> None:
    """Print the font catalog with availability.

    Args:
        catalog: Catalog in the font list format
    """
    default = catalog.get("defaultFontId")
    for font in catalog["fonts"]:
        if font["available"]:
            mark = f"[green]{SYM_OK}[/green]"
            note = " (default)" if font["id"] == default else ""
        else:
            mark = f"[red]{SYM_ERR}[/red]"
            note = f" [dim]{font['reason']}[/dim]"
        line = Text.from_markup(f"  {mark} ")
        line.append(font["id"], style="bold")
        line.append(f" {SYM_DOT} {font['label']} {SYM_DOT} {font['file']}")
        line.append_text(Text.from_markup(note))
        console.print(line)


def print_summary(clusters: int, parts: int, fallbacks: int, errors: int) -> None:
    """Print decode summary.

    Args:
        clusters: Clusters decoded
        parts: Parts emitted
        fallbacks: Clusters drawn as one full glyph
        errors: Mapping errors recovered by the fallback
    """
    error_style = "red" if errors > 0 else "green"
    console.print(
        f"\n[bold green]{SYM_OK} Decoded[/bold green] {clusters} clusters {SYM_DOT} "
        f"{parts} parts {SYM_DOT} {fallbacks} fallbacks {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
