"""Glyph part mapper: shaped clusters to renderable parts.

The mapper filters the units a cluster renders, runs the part strategies in
order and normalizes what the winning strategy produced:

1. Zones: strategy zone, else the zone implied by the part's role, else the
   semantic zone of its category
2. Clips: parts with a component but no clip cover the whole component
3. Ghosts: parts with no text that are either unplaceable or undrawable are
   dropped
4. Subscripts: clips covering a whole, unshared component are padded so
   antialiased edges are not cut

Any error inside a strategy is logged and the cluster is returned as one
full-glyph part, so a single odd cluster never breaks a whole text.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from glyphlab.config import GlyphLabSettings, get_default_settings
from glyphlab.core.geometry import component_rect
from glyphlab.core.rules import semantic_zone
from glyphlab.core.strategies import (
    MappingContext,
    PartStrategy,
    default_strategies,
    full_part,
)
from glyphlab.core.units import units_for_cluster
from glyphlab.core.zones import ZoneEngine
from glyphlab.domain import (
    Category,
    FontMetrics,
    GlyphCluster,
    MappedCluster,
    Part,
    Unit,
    Zone,
)

logger = logging.getLogger(__name__)

ROLE_ZONES: dict[str, Zone] = {
    "split_base": Zone.BASE,
    "combo_base": Zone.BASE,
    "stack_base": Zone.BASE,
    "split_coeng": Zone.BOTTOM,
    "split_subscript": Zone.BOTTOM,
    "combo_coeng": Zone.BOTTOM,
    "combo_subscript": Zone.BOTTOM,
    "stack_coeng_low_left": Zone.BOTTOM,
    "stack_subscript_low": Zone.BOTTOM,
    "stack_dep_vowel_low": Zone.BOTTOM,
    "split_vowel_trailing": Zone.RIGHT,
    "combo_vowel": Zone.RIGHT,
    "split_vowel_leading": Zone.LEFT,
    "split_vowel_top": Zone.TOP,
    "stack_diacritic_top": Zone.TOP,
}


class GlyphPartMapper:
    """Maps shaped clusters to renderable parts.

    Example:
        mapper = GlyphPartMapper(settings)
        mapped = mapper.map_cluster(cluster, units, metrics=metrics)
        for part in mapped.parts:
            print(part.char, part.zone, part.clip_rect)
    """

    def __init__(
        self,
        settings: GlyphLabSettings | None = None,
        strategies: Sequence[PartStrategy] | None = None,
    ) -> None:
        """Initialize the mapper.

        Args:
            settings: Tuned constants (defaults when omitted)
            strategies: Strategies in evaluation order (the standard list when omitted)
        """
        self.settings = settings or get_default_settings()
        self.strategies = tuple(strategies) if strategies is not None else default_strategies()
        self.zone_engine = ZoneEngine(self.settings.segmentation)

    def map_cluster(
        self,
        cluster: GlyphCluster,
        units: Iterable[Unit],
        metrics: FontMetrics | None = None,
        segmentation: bool = True,
    ) -> MappedCluster:
        """Cut one cluster into parts.

        Args:
            cluster: Shaped cluster
            units: Units of the whole text; only those the cluster renders are used
            metrics: Font metrics, if measured
            segmentation: Split fused glyphs into per-unit parts

        Returns:
            Mapped cluster; never raises for geometry problems
        """
        own_units = tuple(units_for_cluster(cluster, list(units)))
        ctx = MappingContext(
            cluster=cluster,
            units=own_units,
            settings=self.settings,
            zone_engine=self.zone_engine,
            metrics=metrics,
            segmentation=segmentation,
        )

        try:
            for strategy in self.strategies:
                if not strategy.matches(ctx):
                    continue
                parts = strategy.build(ctx)
                if parts is None:
                    logger.debug("Strategy %s declined cluster %d", strategy.name, cluster.id)
                    continue
                parts = self._normalize(parts)
                if not parts:
                    break
                return MappedCluster(cluster, tuple(parts), strategy.name)
        except Exception as e:
            logger.warning(
                "Part mapping failed for cluster %d (%s): %s", cluster.id, cluster.text, e
            )
            return MappedCluster(cluster, (full_part(cluster),), "fallback", error=str(e))

        logger.debug("No parts for cluster %d (%s), using full glyph", cluster.id, cluster.text)
        return MappedCluster(cluster, (full_part(cluster),), "fallback")

    def map_clusters(
        self,
        clusters: Iterable[GlyphCluster],
        units: Sequence[Unit],
        metrics: FontMetrics | None = None,
        segmentation: bool = True,
    ) -> list[MappedCluster]:
        """Map every cluster of a shaped text."""
        return [self.map_cluster(c, units, metrics, segmentation) for c in clusters]

    def _normalize(self, parts: list[Part]) -> list[Part]:
        placed = [self._place(part) for part in parts]
        kept = [part for part in placed if not _is_ghost(part)]
        return self._pad_subscripts(kept)

    @staticmethod
    def _place(part: Part) -> Part:
        zone = part.zone
        if zone is Zone.UNKNOWN:
            zone = ROLE_ZONES.get(part.role) or semantic_zone(
                part.category, ord(part.char[0]) if part.char else None
            )
        clip = part.clip_rect
        if clip is None and part.component is not None:
            clip = component_rect(part.component)
        if zone is part.zone and clip is part.clip_rect:
            return part
        return replace(part, zone=zone, clip_rect=clip)

    def _pad_subscripts(self, parts: list[Part]) -> list[Part]:
        config = self.settings.segmentation
        result = []
        for part in parts:
            if (
                part.category is Category.SUBSCRIPT_CONSONANT
                and part.component is not None
                and part.clip_rect is not None
                and part.clip_rect.contains(component_rect(part.component))
                and not _is_sliced_elsewhere(part, parts)
            ):
                part = replace(
                    part, clip_rect=part.clip_rect.pad(config.subscript_pad_x, config.subscript_pad_y)
                )
            result.append(part)
        return result


def _is_ghost(part: Part) -> bool:
    return not part.char and part.category is Category.OTHER and not part.has_geometry()


def _is_sliced_elsewhere(part: Part, parts: list[Part]) -> bool:
    """Check whether another part cuts a slice from the same component."""
    whole = component_rect(part.component)
    for other in parts:
        if other is part or other.component is not part.component:
            continue
        if other.clip_rect is not None and not other.clip_rect.contains(whole):
            return True
    return False
