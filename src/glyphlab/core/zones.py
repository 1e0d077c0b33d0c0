"""Zone engine: attachment regions around the base consonant.

Zones are anchored on the base consonant's measured body whenever font
metrics are available. Cluster boxes are inflated unpredictably by
ascenders, descenders and stacked marks, so fixed fractions of the cluster
box are only used as a fallback.

A zone is either a *region* outside the body (the mark is drawn beside the
base) or a *slice* carved from the cluster box (the font fused the mark into
the base outline). Slices are cut out of the body rectangle, so BASE never
overlaps them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from glyphlab.config import SegmentationConfig
from glyphlab.core.rules import BOTTOM_VOWELS, vowel_zones
from glyphlab.domain import (
    BoundingBox,
    Category,
    FontMetrics,
    MarkMetric,
    Rect,
    Unit,
    Zone,
)

logger = logging.getLogger(__name__)

PROBE_BASE = 0x1780


@dataclass(frozen=True)
class ZoneMap:
    """Named rectangles of one cluster; absent zones are None."""

    base: Rect
    top: Rect | None = None
    bottom: Rect | None = None
    left: Rect | None = None
    right: Rect | None = None

    def get(self, zone: Zone) -> Rect | None:
        return {
            Zone.BASE: self.base,
            Zone.TOP: self.top,
            Zone.BOTTOM: self.bottom,
            Zone.LEFT: self.left,
            Zone.RIGHT: self.right,
        }.get(zone)

    def to_dict(self) -> dict[str, Any]:
        return {
            zone.value: rect.to_dict() if rect else None
            for zone, rect in (
                (Zone.BASE, self.base),
                (Zone.TOP, self.top),
                (Zone.BOTTOM, self.bottom),
                (Zone.LEFT, self.left),
                (Zone.RIGHT, self.right),
            )
        }


class _Builder:
    """Mutable zone state for one compute() call."""

    def __init__(self, box: BoundingBox, body: Rect) -> None:
        self.box = box
        self.body = body
        self.zones: dict[Zone, Rect] = {}
        self.slices: set[Zone] = set()

    def put(self, zone: Zone, rect: Rect, *, sliced: bool = False, keep: bool = False) -> None:
        if keep and zone in self.zones:
            return
        self.zones[zone] = rect
        if sliced:
            self.slices.add(zone)
        else:
            self.slices.discard(zone)

    def carve_body(self) -> Rect:
        """Cut fused slices out of the body rectangle."""
        x1, y1, x2, y2 = self.body.x, self.body.y, self.body.x2, self.body.y2
        for zone in (Zone.LEFT, Zone.RIGHT, Zone.TOP, Zone.BOTTOM):
            if zone not in self.slices:
                continue
            rect = self.zones[zone]
            if zone is Zone.LEFT and x1 < rect.x2 < x2:
                x1 = rect.x2
            elif zone is Zone.RIGHT and x1 < rect.x < x2:
                x2 = rect.x
            elif zone is Zone.TOP and y1 < rect.y2 < y2:
                y1 = rect.y2
            elif zone is Zone.BOTTOM and y1 < rect.y < y2:
                y2 = rect.y
        return Rect.from_edges(x1, y1, x2, y2)


class ZoneEngine:
    """Computes BASE/TOP/BOTTOM/LEFT/RIGHT rectangles for a cluster.

    Example:
        engine = ZoneEngine(SegmentationConfig())
        zones = engine.compute(cluster.box, units, metrics=metrics)
        zones.get(Zone.BOTTOM)
    """

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self.config = config or SegmentationConfig()

    def body_rect(
        self,
        box: BoundingBox,
        base_codepoint: int | None,
        metrics: FontMetrics | None = None,
    ) -> Rect:
        """Rectangle of the base consonant's body inside a cluster box.

        With metrics, the vertical range is the isolated base box and the
        horizontal range starts at the cluster's left edge with the measured
        base width. Otherwise fixed shares of the cluster height are reserved
        above and below.
        """
        measured = metrics.base_metric(base_codepoint) if metrics else None
        if measured is not None and not measured.bounding_box.is_empty():
            bb = measured.bounding_box
            y1 = max(bb.y1, box.y1)
            y2 = min(bb.y2, box.y2)
            x2 = min(box.x1 + bb.width, box.x2)
            if y2 > y1 and x2 > box.x1:
                return Rect.from_edges(box.x1, y1, x2, y2)
            logger.debug("Measured body outside cluster box for U+%04X", base_codepoint)

        h = box.height
        return Rect.from_edges(
            box.x1,
            box.y1 + h * self.config.fallback_top_fraction,
            box.x2,
            box.y2 - h * self.config.fallback_bottom_fraction,
        )

    def compute(
        self,
        cluster_box: BoundingBox,
        units: Iterable[Unit],
        base_codepoint: int | None = None,
        metrics: FontMetrics | None = None,
    ) -> ZoneMap:
        """Compute the zones of one cluster.

        Args:
            cluster_box: Cluster bounding box
            units: Units rendered by the cluster
            base_codepoint: Base consonant; taken from the units when omitted
            metrics: Font metrics, if measured

        Returns:
            Zone map; BASE is always set
        """
        units = list(units)
        if base_codepoint is None:
            base = next((u for u in units if u.category.is_base), None)
            base_codepoint = base.code_point if base else None

        body = self.body_rect(cluster_box, base_codepoint, metrics)
        state = _Builder(cluster_box, body)

        for unit in units:
            cp = unit.code_point
            if cp is None or unit.category.is_base:
                continue
            if unit.category.is_subscript_chain:
                self._subscript(state, cp, metrics)
            elif unit.category is Category.DEPENDENT_VOWEL:
                self._vowel(state, cp, metrics)
            elif unit.category is Category.DIACRITIC_SIGN:
                self._diacritic(state, cp, metrics)

        return ZoneMap(
            base=state.carve_body(),
            top=state.zones.get(Zone.TOP),
            bottom=state.zones.get(Zone.BOTTOM),
            left=state.zones.get(Zone.LEFT),
            right=state.zones.get(Zone.RIGHT),
        )

    # Regions outside the body, or slices of the cluster when there is no room

    def _below(self, state: _Builder) -> tuple[Rect, bool]:
        box, body = state.box, state.body
        if box.y2 > body.y2:
            return Rect.from_edges(box.x1, body.y2, box.x2, box.y2), False
        h = box.height * self.config.fallback_bottom_fraction
        return Rect.from_edges(box.x1, box.y2 - h, box.x2, box.y2), True

    def _above(self, state: _Builder) -> tuple[Rect, bool]:
        box, body = state.box, state.body
        if body.y > box.y1:
            return Rect.from_edges(box.x1, box.y1, box.x2, body.y), False
        h = max(1.0, box.height * self.config.top_slice_fraction)
        return Rect(box.x1, box.y1, box.width, h), True

    def _right_of(self, state: _Builder) -> tuple[Rect, bool]:
        box, body = state.box, state.body
        if box.x2 > body.x2:
            return Rect.from_edges(body.x2, box.y1, box.x2, box.y2), False
        w = min(box.height * self.config.aa_height_fraction, box.width * self.config.aa_width_cap)
        return Rect.from_edges(box.x2 - w, box.y1, box.x2, box.y2), True

    def _left_of(self, state: _Builder) -> tuple[Rect, bool]:
        box, body = state.box, state.body
        if body.x > box.x1:
            return Rect.from_edges(box.x1, box.y1, body.x, box.y2), False
        w = box.width * self.config.left_slice_fraction
        return Rect.from_edges(box.x1, body.y, box.x1 + w, body.y2), True

    def _default(self, state: _Builder, zone: Zone, *, keep: bool = False) -> None:
        finder = {
            Zone.TOP: self._above,
            Zone.BOTTOM: self._below,
            Zone.LEFT: self._left_of,
            Zone.RIGHT: self._right_of,
        }[zone]
        rect, sliced = finder(state)
        state.put(zone, rect, sliced=sliced, keep=keep)

    # Per category

    def _subscript(self, state: _Builder, cp: int, metrics: FontMetrics | None) -> None:
        measured = metrics.subscript(cp) if metrics else None
        if measured is not None and not measured.merged and not measured.bounding_box.is_empty():
            bb = measured.bounding_box
            state.put(Zone.BOTTOM, Rect(state.box.x1, bb.y1, state.box.width, bb.height))
            return
        self._default(state, Zone.BOTTOM)

    def _vowel(self, state: _Builder, cp: int, metrics: FontMetrics | None) -> None:
        measured = metrics.vowel(cp) if metrics else None
        if measured is not None and not measured.merged and not measured.bounding_box.is_empty():
            self._measured_vowel(state, measured, metrics)
            return
        if measured is not None and measured.merged and measured.delta is not None:
            self._fused_vowel(state, measured)
            for zone in vowel_zones(cp):
                # Sides without measurable overflow get the proportional slice
                self._default(state, zone, keep=True)
            return

        for zone in vowel_zones(cp):
            # A low vowel shares the subscript's zone
            self._default(state, zone, keep=zone is Zone.BOTTOM and cp in BOTTOM_VOWELS)

    def _measured_vowel(
        self, state: _Builder, measured: MarkMetric, metrics: FontMetrics | None
    ) -> None:
        box, body = state.box, state.body
        dx = box.x1 - measured.cluster_box.x1
        mid_x = body.x + body.width / 2

        probe_base = metrics.base_metric(PROBE_BASE) if metrics else None
        parts = [
            c.bounding_box.translate(dx, 0)
            for c in measured.components
            if probe_base is None or c.glyph_id != probe_base.glyph_id
        ]
        if measured.multipart and len(parts) >= 2:
            for bb in parts:
                if bb.center_x < mid_x:
                    state.put(Zone.LEFT, Rect.from_edges(box.x1, bb.y1, bb.x2, bb.y2))
                else:
                    state.put(Zone.RIGHT, Rect.from_edges(bb.x1, box.y1, box.x2, box.y2))
            return

        bb = measured.bounding_box.translate(dx, 0)
        above = bb.center_y < body.y
        below = bb.center_y > body.y2
        if above:
            state.put(Zone.TOP, Rect.from_edges(box.x1, box.y1, box.x2, bb.y2))
        elif below:
            state.put(Zone.BOTTOM, Rect.from_edges(box.x1, bb.y1, box.x2, box.y2), keep=True)
        elif bb.center_x < mid_x:
            state.put(Zone.LEFT, Rect.from_edges(box.x1, bb.y1, bb.x2, bb.y2))
        else:
            state.put(Zone.RIGHT, Rect.from_edges(bb.x1, box.y1, box.x2, box.y2))

    def _fused_vowel(self, state: _Builder, measured: MarkMetric) -> None:
        box, body = state.box, state.body
        delta = measured.delta
        threshold = self.config.delta_threshold
        if delta.left > threshold:
            state.put(
                Zone.LEFT,
                Rect.from_edges(box.x1, body.y, box.x1 + delta.left, body.y2),
                sliced=True,
            )
        if delta.right > threshold:
            state.put(
                Zone.RIGHT,
                Rect.from_edges(box.x2 - delta.right, box.y1, box.x2, box.y2),
                sliced=True,
            )
        if delta.top > threshold:
            state.put(Zone.TOP, Rect(box.x1, box.y1, box.width, delta.top), sliced=True)
        if delta.bottom > threshold:
            state.put(
                Zone.BOTTOM,
                Rect.from_edges(box.x1, box.y2 - delta.bottom, box.x2, box.y2),
                sliced=True,
                keep=True,
            )

    def _diacritic(self, state: _Builder, cp: int, metrics: FontMetrics | None) -> None:
        zones = vowel_zones(cp)
        if Zone.TOP not in zones:
            for zone in zones:
                self._default(state, zone)
            return

        box = state.box
        measured = metrics.diacritic(cp) if metrics else None
        if measured is not None and not measured.merged and not measured.bounding_box.is_empty():
            bottom = measured.bounding_box.y2
            if bottom > box.y1:
                state.put(Zone.TOP, Rect.from_edges(box.x1, box.y1, box.x2, bottom))
                return
        if measured is not None and measured.delta is not None:
            if measured.delta.top > self.config.delta_threshold:
                state.put(Zone.TOP, Rect(box.x1, box.y1, box.width, measured.delta.top), sliced=True)
                return
        self._default(state, Zone.TOP)
