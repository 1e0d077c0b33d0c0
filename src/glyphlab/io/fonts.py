"""Font catalog and per-font services.

The catalog checks which configured font files are usable. The font service
owns one shaper and one metrics entry per font; it is created by the caller
and passed to the decoder, never kept as module state.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from fontTools.ttLib import TTFont

from glyphlab.config import FontCatalogConfig, FontEntry, GlyphLabSettings, get_default_settings
from glyphlab.core.metrics import FontMetricsBuilder, MetricsCache
from glyphlab.domain import FontMetrics
from glyphlab.exceptions import FontNotFoundError
from glyphlab.io.shaper import HarfBuzzShaper


@dataclass(frozen=True, slots=True)
class FontStatus:
    """Availability of one catalog entry.

    Attributes:
        id: Font id
        label: Display name
        file: File name of the font
        available: True if the file exists, is non-empty and parses
        reason: ``missing_file``, ``empty_file`` or ``invalid_font`` when unavailable
    """

    id: str
    label: str
    file: str
    available: bool
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "file": self.file,
            "available": self.available,
            "reason": self.reason,
        }


class FontCatalog:
    """Configured fonts and their availability.

    Parse results are cached per path; existence and size are checked on
    every call so fonts dropped in later are picked up.
    """

    def __init__(self, config: FontCatalogConfig, base_dir: Path | None = None) -> None:
        """Initialize the catalog.

        Args:
            config: Catalog entries
            base_dir: Directory relative font paths resolve against (cwd when None)
        """
        self.config = config
        self.base_dir = base_dir
        self._parsed: dict[Path, bool] = {}
        self._logger = structlog.get_logger("glyphlab.fonts")

    @property
    def entries(self) -> list[FontEntry]:
        return self.config.fonts

    def path_for(self, entry: FontEntry) -> Path:
        if self.base_dir is not None and not entry.path.is_absolute():
            return self.base_dir / entry.path
        return entry.path

    def _can_parse(self, path: Path) -> bool:
        if path not in self._parsed:
            try:
                TTFont(str(path), lazy=True).close()
                self._parsed[path] = True
            except Exception as e:
                self._logger.warning("Skipping unusable font", file=path.name, error=str(e))
                self._parsed[path] = False
        return self._parsed[path]

    def status(self, entry: FontEntry) -> FontStatus:
        """Check one entry's file."""
        path = self.path_for(entry)
        reason = None
        if not path.is_file():
            reason = "missing_file"
        elif path.stat().st_size == 0:
            reason = "empty_file"
        elif not self._can_parse(path):
            reason = "invalid_font"
        return FontStatus(entry.id, entry.label, path.name, reason is None, reason)

    def statuses(self) -> list[FontStatus]:
        return [self.status(entry) for entry in self.entries]

    def available(self) -> list[FontEntry]:
        return [entry for entry in self.entries if self.status(entry).available]

    def resolve(self, font_id: str | None = None) -> FontEntry:
        """Pick the font to shape with.

        ``None`` or ``"auto"`` selects the first available font. An unknown or
        unavailable id falls back to the first available font as well.

        Args:
            font_id: Requested font id

        Returns:
            Catalog entry of a usable font

        Raises:
            FontNotFoundError: If no catalog font is usable
        """
        available = self.available()
        if not available:
            raise FontNotFoundError(font_id or "auto")
        if font_id and font_id != "auto":
            match = next((entry for entry in available if entry.id == font_id), None)
            if match is not None:
                return match
            self._logger.warning(
                "Requested font unavailable, using fallback", font=font_id, fallback=available[0].id
            )
        return available[0]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the font list format."""
        statuses = self.statuses()
        default = next((s.id for s in statuses if s.available), None)
        return {"fonts": [s.to_dict() for s in statuses], "defaultFontId": default}


class FontService:
    """Shapers and metrics for the catalog's fonts.

    Example:
        fonts = FontService(settings)
        entry, shaper = fonts.shaper("auto")
        metrics = fonts.metrics(entry.id)
    """

    def __init__(
        self,
        settings: GlyphLabSettings | None = None,
        base_dir: Path | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.settings = settings or get_default_settings()
        self.catalog = FontCatalog(self.settings.fonts, base_dir)
        self.metrics_cache = MetricsCache()
        self._shapers: dict[str, HarfBuzzShaper] = {}
        self._lock = threading.Lock()
        self._logger = logger or structlog.get_logger("glyphlab.fonts")

    def resolve(self, font_id: str | None = None) -> FontEntry:
        return self.catalog.resolve(font_id)

    def shaper(self, font_id: str | None = None) -> tuple[FontEntry, HarfBuzzShaper]:
        """Get the resolved font entry and its (cached) shaper.

        Raises:
            FontNotFoundError: If no catalog font is usable
            FontLoadError: If the font file cannot be loaded
        """
        entry = self.resolve(font_id)
        with self._lock:
            shaper = self._shapers.get(entry.id)
            if shaper is None:
                self._logger.debug("Loading font", font=entry.id, path=str(self.catalog.path_for(entry)))
                shaper = HarfBuzzShaper(self.catalog.path_for(entry))
                self._shapers[entry.id] = shaper
        return entry, shaper

    def metrics(self, font_id: str | None = None) -> FontMetrics | None:
        """Get the font's metrics, measuring them on first use.

        Returns:
            Metrics, or None when the font cannot be loaded or measured
        """
        try:
            entry, shaper = self.shaper(font_id)
            return self.metrics_cache.get_or_build(
                entry.id, lambda: FontMetricsBuilder(shaper, entry.id).build()
            )
        except Exception as e:
            self._logger.error("Failed to build font metrics", font=font_id, error=str(e))
            return None

    def close(self) -> None:
        """Close every loaded font."""
        with self._lock:
            for shaper in self._shapers.values():
                shaper.close()
            self._shapers.clear()
