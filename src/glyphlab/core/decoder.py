"""Cluster decoding orchestration.

This module runs the whole pipeline for one text:

1. Build the semantic units of the text
2. Resolve the font and shape the text into clusters
3. Fetch (or measure) the font's metrics
4. Map every cluster to its parts
5. Link units to the clusters that render them

Key components:
- FontProvider: Protocol of the font service the decoder needs
- DecodeResult: Everything the renderer needs for one text
- ClusterDecoder: The orchestrator
"""

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

from glyphlab.config import FontEntry, GlyphLabSettings, get_default_settings, parse_features
from glyphlab.core.mapper import GlyphPartMapper
from glyphlab.core.units import build_units, link_units_to_clusters
from glyphlab.domain import FontMetrics, GlyphCluster, MappedCluster, Unit, UnitLink
from glyphlab.utils import DecodeLogger, DecodeStats


class ClusterShaper(Protocol):
    def shape_clusters(
        self,
        text: str,
        features: dict[str, int] | None = None,
        cluster_level: int = 0,
    ) -> list[GlyphCluster]: ...


class FontProvider(Protocol):
    """Font service interface used by the decoder."""

    def shaper(self, font_id: str | None = None) -> tuple[FontEntry, ClusterShaper]: ...

    def metrics(self, font_id: str | None = None) -> FontMetrics | None: ...


@dataclass(frozen=True)
class DecodeResult:
    """Decoded text.

    Attributes:
        text: NFC-normalized source text
        font_id: Id of the font actually used
        units: Semantic units tiling the text
        clusters: Shaped clusters with their parts
        links: Unit to cluster links
        metrics: Metrics used for the zones, None when unavailable
        stats: Decode statistics
    """

    text: str
    font_id: str
    units: tuple[Unit, ...]
    clusters: tuple[MappedCluster, ...]
    links: tuple[UnitLink, ...] = field(default=())
    metrics: FontMetrics | None = None
    stats: DecodeStats = field(default_factory=DecodeStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "fontId": self.font_id,
            "units": [unit.to_dict() for unit in self.units],
            "clusters": [cluster.to_dict() for cluster in self.clusters],
            "links": [link.to_dict() for link in self.links],
            "stats": self.stats.to_dict(),
        }


class ClusterDecoder:
    """Decodes Khmer text into units, clusters and parts.

    Example:
        fonts = FontService(settings)
        decoder = ClusterDecoder(fonts, settings)
        result = decoder.decode("ក្ខុំ", font_id="noto-sans-khmer")
        for mapped in result.clusters:
            print(mapped.cluster.text, [p.char for p in mapped.parts])
    """

    def __init__(
        self,
        fonts: FontProvider,
        settings: GlyphLabSettings | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the decoder.

        Args:
            fonts: Font service providing shapers and metrics
            settings: Application settings (defaults when omitted)
            logger: Structured logger (module logger when omitted)
        """
        self.fonts = fonts
        self.settings = settings or get_default_settings()
        self.mapper = GlyphPartMapper(self.settings)
        self._logger = logger or structlog.get_logger("glyphlab.decoder")

    def decode(
        self,
        text: str,
        font_id: str | None = None,
        features: dict[str, int] | str | None = None,
        cluster_level: int | None = None,
        segmentation: bool = True,
    ) -> DecodeResult:
        """Decode one text.

        Args:
            text: Source text
            font_id: Font id, ``"auto"`` or None for the configured default
            features: Feature overrides as a dict or ``"tag:value,..."`` string
            cluster_level: HarfBuzz cluster level (configured default when None)
            segmentation: Split fused glyphs into per-unit parts

        Returns:
            Decode result

        Raises:
            FontNotFoundError: If no font is usable
            FontLoadError: If the font cannot be loaded
            ShapingError: If the text cannot be shaped
        """
        shaping = self.settings.shaping
        text = unicodedata.normalize("NFC", text or "")
        if features is None:
            features = shaping.feature_map()
        elif isinstance(features, str):
            features = parse_features(features)
        if cluster_level is None:
            cluster_level = shaping.cluster_level

        entry, shaper = self.fonts.shaper(font_id or shaping.default_font)
        decode_logger = DecodeLogger(self._logger)
        decode_logger.start(text, entry.id)

        units = build_units(text)
        clusters = shaper.shape_clusters(text, features or None, cluster_level)
        metrics = self.fonts.metrics(entry.id)
        if metrics is None:
            decode_logger.log_metrics_missing(entry.id)

        mapped: list[MappedCluster] = []
        for cluster in clusters:
            result = self.mapper.map_cluster(cluster, units, metrics, segmentation)
            if result.error is not None:
                decode_logger.log_cluster_error(cluster.id, result.error)
            if result.strategy == "fallback":
                decode_logger.log_cluster_fallback(cluster.id, result.error or "no parts")
            decode_logger.log_cluster_mapped(
                cluster.id, cluster.text, result.strategy, len(result.parts)
            )
            mapped.append(result)

        links = link_units_to_clusters(clusters, units)
        decode_logger.finish()

        return DecodeResult(
            text=text,
            font_id=entry.id,
            units=tuple(units),
            clusters=tuple(mapped),
            links=tuple(links),
            metrics=metrics,
            stats=decode_logger.stats,
        )
