"""CLI application entry point for glyphlab.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated, NoReturn

import typer

from glyphlab import __version__
from glyphlab.cli.output import (
    console,
    print_clusters,
    print_error,
    print_fonts,
    print_header,
    print_json,
    print_mapped,
    print_metrics_summary,
    print_step,
    print_summary,
    print_units,
)
from glyphlab.config import GlyphLabSettings, LoggingConfig, parse_features
from glyphlab.core import ClusterDecoder, FontMetricsBuilder, build_units
from glyphlab.exceptions import (
    FontLoadError,
    FontNotFoundError,
    GlyphLabError,
    ShapingError,
)
from glyphlab.io import FontService
from glyphlab.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="glyphlab",
    help="Break Khmer clusters down into the visual parts of each character.",
    add_completion=False,
    no_args_is_help=True,
)

FontOption = Annotated[
    str,
    typer.Option(
        "--font",
        "-f",
        help="Font id from the catalog ('auto' = first available)",
    ),
]
FeaturesOption = Annotated[
    str | None,
    typer.Option(
        "--features",
        help="OpenType feature overrides, e.g. 'liga:0,ccmp:0'",
    ),
]
ClusterLevelOption = Annotated[
    int,
    typer.Option(
        "--cluster-level",
        help="HarfBuzz cluster level (0-2)",
        min=0,
        max=2,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Print machine-readable JSON",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Glyph Lab[/bold blue] v{__version__}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> GlyphLabSettings:
    return ctx.obj["settings"]


def _font_service(ctx: typer.Context) -> FontService:
    return FontService(_settings(ctx), base_dir=ctx.obj["font_dir"])


def _fail(error: Exception) -> NoReturn:
    """Print an error raised by the pipeline and exit with code 1."""
    if isinstance(error, FontNotFoundError):
        print_error(
            "No usable font",
            details="Place the catalog fonts under fonts/ or pass --font-dir. "
            "Run 'glyphlab fonts' to see what is missing.",
        )
    elif isinstance(error, FontLoadError):
        print_error(f"Could not load font: {error.reason}")
    elif isinstance(error, ShapingError):
        print_error(f"Could not shape text: {error.reason}")
    else:
        print_error(str(error))
    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    font_dir: Annotated[
        Path | None,
        typer.Option(
            "--font-dir",
            help="Directory the catalog's relative font paths resolve against",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Glyph Lab: which part of a Khmer glyph belongs to which character."""
    if log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        print_error(
            f"Invalid log level: {log_level}",
            details="Valid values: DEBUG, INFO, WARNING, ERROR",
        )
        raise typer.Exit(code=1)

    settings = GlyphLabSettings(
        logging=LoggingConfig(log_file=log_file, log_level=log_level.upper()),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
    )
    ctx.obj = {"settings": settings, "font_dir": font_dir}


@app.command()
def units(
    text: Annotated[str, typer.Argument(help="Khmer text", show_default=False)],
    as_json: JsonOption = False,
) -> None:
    """Split text into semantic units (base, coeng, subscript, vowel, sign).

    Example:
        glyphlab units "ក្ខុំ"
    """
    result = build_units(text)
    if as_json:
        print_json([unit.to_dict() for unit in result])
        return
    print_units(result)


@app.command()
def shape(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Khmer text", show_default=False)],
    font: FontOption = "auto",
    features: FeaturesOption = None,
    cluster_level: ClusterLevelOption = 0,
    as_json: JsonOption = False,
) -> None:
    """Shape text and list the clusters and their positioned glyphs."""
    service = _font_service(ctx)
    try:
        entry, shaper = service.shaper(font)
        clusters = shaper.shape_clusters(text, parse_features(features) or None, cluster_level)
    except GlyphLabError as e:
        _fail(e)
    finally:
        service.close()

    if as_json:
        print_json({"fontId": entry.id, "clusters": [c.to_dict() for c in clusters]})
        return
    print_header(__version__)
    print_step(f"Shaped with {entry.label}")
    print_clusters(clusters)


@app.command()
def metrics(
    ctx: typer.Context,
    font: FontOption = "auto",
    as_json: JsonOption = False,
) -> None:
    """Measure how a font draws every Khmer consonant, vowel and sign."""
    service = _font_service(ctx)
    try:
        entry, shaper = service.shaper(font)
        builder = FontMetricsBuilder(shaper, entry.id)
        measured = builder.build()
    except GlyphLabError as e:
        _fail(e)
    finally:
        service.close()

    if as_json:
        print_json(measured.to_dict())
        return
    print_header(__version__)
    print_step(f"Measured {entry.label}")
    print_metrics_summary(measured, skipped=len(builder.skipped))


@app.command()
def decode(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Khmer text", show_default=False)],
    font: FontOption = "auto",
    features: FeaturesOption = None,
    cluster_level: ClusterLevelOption = 0,
    no_segmentation: Annotated[
        bool,
        typer.Option(
            "--no-segmentation",
            help="Draw fused glyphs whole instead of splitting them",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show clip rectangles",
        ),
    ] = False,
    as_json: JsonOption = False,
) -> None:
    """Decode text into clusters and the parts each character owns.

    Example:
        glyphlab decode "ក្វា" --font noto-sans-khmer
    """
    settings = _settings(ctx)
    service = _font_service(ctx)
    decoder = ClusterDecoder(service, settings)
    try:
        result = decoder.decode(
            text,
            font_id=font,
            features=features,
            cluster_level=cluster_level,
            segmentation=not no_segmentation,
        )
    except GlyphLabError as e:
        _fail(e)
    finally:
        service.close()

    if as_json:
        print_json(result.to_dict())
        return

    print_header(__version__)
    print_step(f"Decoded with {result.font_id}")
    if result.metrics is None:
        console.print("  [yellow]No font metrics, zones use fallback proportions[/yellow]")
    print_units(list(result.units))
    print_mapped(list(result.clusters), verbose=verbose)
    stats = result.stats
    print_summary(
        clusters=stats.clusters_decoded,
        parts=stats.parts_emitted,
        fallbacks=stats.fallback_count,
        errors=stats.error_count,
    )


@app.command()
def fonts(
    ctx: typer.Context,
    as_json: JsonOption = False,
) -> None:
    """List catalog fonts and whether they can be used."""
    service = _font_service(ctx)
    catalog = service.catalog.to_dict()
    if as_json:
        print_json(catalog)
        return
    print_header(__version__)
    print_step("Fonts")
    print_fonts(catalog)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
