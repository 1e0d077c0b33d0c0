"""Per-font Khmer glyph measurements.

The builder shapes short probe strings against one font and records how the
font draws every Khmer consonant, subscript, vowel and sign next to the
neutral base consonant KA (U+1780). The measurements anchor the zone engine
and the part mapper to the font's real geometry.

Key classes:
- Shaper: Protocol of the shaping collaborator the builder probes
- FontMetricsBuilder: Runs the probes and assembles FontMetrics
- MetricsCache: Read-through cache keyed by font id
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from glyphlab.core.classifier import (
    CONSONANT_END,
    CONSONANT_START,
    DEPENDENT_VOWEL_END,
    DEPENDENT_VOWEL_START,
    DIACRITIC_RANGES,
    INDEPENDENT_VOWEL_END,
    INDEPENDENT_VOWEL_START,
)
from glyphlab.domain import (
    COENG,
    EMPTY_BOX,
    BoundingBox,
    FontMetrics,
    GlyphMetric,
    MarkComponent,
    MarkMetric,
    OverflowDelta,
    SubscriptMetric,
)
from glyphlab.exceptions import ShapingError

logger = logging.getLogger(__name__)

PROBE_BASE = 0x1780


@dataclass(frozen=True, slots=True)
class GlyphRecord:
    """One glyph of a shaping result.

    Attributes:
        glyph_id: Font glyph index (0 is .notdef)
        cluster_index: Codepoint offset of the glyph's cluster
        advance_x: Horizontal advance
        offset_x: Horizontal offset from the pen position
        offset_y: Vertical offset, y-up as reported by the shaper
    """

    glyph_id: int
    cluster_index: int
    advance_x: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0


@dataclass(frozen=True, slots=True)
class Outline:
    """SVG path data of one glyph with its box (y-down)."""

    path: str
    bounding_box: BoundingBox


class Shaper(Protocol):
    """Shaping collaborator for one font."""

    units_per_em: int

    def shape(
        self,
        text: str,
        features: dict[str, int] | None = None,
        cluster_level: int = 0,
    ) -> list[GlyphRecord]:
        """Shape text into glyph records.

        Raises:
            ShapingError: If the text cannot be shaped
        """
        ...

    def outline(self, glyph_id: int) -> Outline:
        """Outline of one glyph in local coordinates."""
        ...


@dataclass(frozen=True)
class _PlacedGlyph:
    glyph_id: int
    box: BoundingBox


@dataclass(frozen=True)
class _Probe:
    glyphs: tuple[_PlacedGlyph, ...]
    box: BoundingBox


def _codepoints(*ranges: tuple[int, int]) -> Iterable[int]:
    for start, end in ranges:
        yield from range(start, end + 1)


class FontMetricsBuilder:
    """Measures one font by shaping probe strings.

    Probes that fail to shape, resolve to .notdef or have no ink are logged
    and skipped; a missing entry simply sends the consumers to their
    fallbacks.

    Example:
        builder = FontMetricsBuilder(shaper, "noto-sans-khmer")
        metrics = builder.build()
    """

    def __init__(self, shaper: Shaper, font_id: str) -> None:
        self.shaper = shaper
        self.font_id = font_id
        self.skipped: list[tuple[str, str]] = []

    def _skip(self, text: str, reason: str) -> None:
        logger.debug(
            "Skipping probe %s (%s)", " ".join(f"U+{ord(ch):04X}" for ch in text), reason
        )
        self.skipped.append((text, reason))

    def probe(self, text: str) -> _Probe | None:
        """Shape a probe string and place its glyphs.

        Returns:
            Placed glyphs and their union box, or None when the probe is unusable
        """
        try:
            records = self.shaper.shape(text)
        except ShapingError as e:
            self._skip(text, e.reason)
            return None

        if not records:
            self._skip(text, "no glyphs")
            return None
        if any(record.glyph_id == 0 for record in records):
            self._skip(text, "notdef")
            return None

        placed: list[_PlacedGlyph] = []
        box = EMPTY_BOX
        pen = 0.0
        for record in records:
            local = self.shaper.outline(record.glyph_id).bounding_box
            glyph_box = local.translate(pen + record.offset_x, -record.offset_y)
            placed.append(_PlacedGlyph(record.glyph_id, glyph_box))
            box = box.union(glyph_box)
            pen += record.advance_x

        if box.width <= 0:
            self._skip(text, "zero width")
            return None
        return _Probe(tuple(placed), box)

    def build(self) -> FontMetrics:
        """Run every probe and assemble the font's metrics."""
        base = self.probe(chr(PROBE_BASE))
        base_box = base.box if base else None
        base_glyph = base.glyphs[0].glyph_id if base else None

        consonants = self._isolated(_codepoints((CONSONANT_START, CONSONANT_END)))
        independent = self._isolated(
            _codepoints((INDEPENDENT_VOWEL_START, INDEPENDENT_VOWEL_END))
        )
        subscripts = self._subscripts(base_box)
        vowels = self._marks(
            _codepoints((DEPENDENT_VOWEL_START, DEPENDENT_VOWEL_END)),
            base_box,
            base_glyph,
            top_only=False,
        )
        diacritics = self._marks(
            (cp for cp in _codepoints(*DIACRITIC_RANGES) if cp != COENG),
            base_box,
            base_glyph,
            top_only=True,
        )

        logger.debug(
            "Built metrics for %s: %d consonants, %d subscripts, %d vowels, %d signs, %d skipped",
            self.font_id,
            len(consonants),
            len(subscripts),
            len(vowels),
            len(diacritics),
            len(self.skipped),
        )
        return FontMetrics(
            font_id=self.font_id,
            units_per_em=int(getattr(self.shaper, "units_per_em", 1000) or 1000),
            base_box=base_box,
            consonants=consonants,
            independent_vowels=independent,
            subscripts=subscripts,
            vowels=vowels,
            diacritics=diacritics,
        )

    def _isolated(self, code_points: Iterable[int]) -> dict[int, GlyphMetric]:
        table: dict[int, GlyphMetric] = {}
        for cp in code_points:
            probe = self.probe(chr(cp))
            if probe is not None:
                table[cp] = GlyphMetric(probe.glyphs[0].glyph_id, probe.box)
        return table

    def _subscripts(self, base_box: BoundingBox | None) -> dict[int, SubscriptMetric]:
        table: dict[int, SubscriptMetric] = {}
        for cp in _codepoints((CONSONANT_START, CONSONANT_END)):
            text = chr(PROBE_BASE) + chr(COENG) + chr(cp)
            probe = self.probe(text)
            if probe is None:
                continue

            if len(probe.glyphs) >= 2:
                lowest = max(probe.glyphs, key=lambda g: g.box.y1)
                table[cp] = SubscriptMetric(lowest.glyph_id, lowest.box, probe.box)
                continue

            if base_box is None:
                self._skip(text, "fused without base reference")
                continue
            cluster = probe.box
            below = BoundingBox(cluster.x1, max(cluster.y1, base_box.y2), cluster.x2, cluster.y2)
            if below.is_empty():
                self._skip(text, "fused with nothing below the base")
                continue
            table[cp] = SubscriptMetric(probe.glyphs[0].glyph_id, below, cluster, merged=True)
        return table

    def _marks(
        self,
        code_points: Iterable[int],
        base_box: BoundingBox | None,
        base_glyph: int | None,
        top_only: bool,
    ) -> dict[int, MarkMetric]:
        table: dict[int, MarkMetric] = {}
        for cp in code_points:
            probe = self.probe(chr(PROBE_BASE) + chr(cp))
            if probe is None:
                continue
            components = tuple(MarkComponent(g.glyph_id, g.box) for g in probe.glyphs)

            if len(probe.glyphs) >= 2:
                non_base = [g for g in probe.glyphs if g.glyph_id != base_glyph]
                marks = non_base or list(probe.glyphs[1:])
                box = EMPTY_BOX
                for glyph in marks:
                    box = box.union(glyph.box)
                table[cp] = MarkMetric(
                    glyph_id=marks[0].glyph_id,
                    bounding_box=box,
                    cluster_box=probe.box,
                    components=components,
                    multipart=len(non_base) > 1,
                )
                continue

            delta = None
            if base_box is not None:
                delta = OverflowDelta.between(base_box, probe.box)
                if top_only:
                    delta = OverflowDelta(top=delta.top)
            table[cp] = MarkMetric(
                glyph_id=probe.glyphs[0].glyph_id,
                bounding_box=probe.box,
                cluster_box=probe.box,
                components=components,
                merged=True,
                delta=delta,
            )
        return table


class MetricsCache:
    """Read-through cache of font metrics keyed by font id.

    Each font is measured at most once; the fill path is guarded by a lock so
    concurrent first requests wait for a single build. Cached metrics are
    immutable.
    """

    def __init__(self) -> None:
        self._entries: dict[str, FontMetrics] = {}
        self._lock = threading.Lock()

    def get(self, font_id: str) -> FontMetrics | None:
        return self._entries.get(font_id)

    def get_or_build(self, font_id: str, factory: Callable[[], FontMetrics]) -> FontMetrics:
        """Return cached metrics, building them on first request.

        Args:
            font_id: Cache key
            factory: Called once to build the metrics on a miss

        Returns:
            Metrics for the font
        """
        cached = self._entries.get(font_id)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._entries.get(font_id)
            if cached is None:
                logger.debug("Metrics cache miss for %s", font_id)
                cached = factory()
                self._entries[font_id] = cached
            return cached

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, font_id: object) -> bool:
        return font_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
