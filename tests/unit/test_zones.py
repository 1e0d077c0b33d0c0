"""Tests for the zone engine."""

import pytest

from glyphlab.config import SegmentationConfig
from glyphlab.core.units import build_units
from glyphlab.core.zones import ZoneEngine
from glyphlab.domain import (
    BoundingBox,
    FontMetrics,
    GlyphMetric,
    MarkMetric,
    OverflowDelta,
    Rect,
    SubscriptMetric,
    Zone,
)

BASE_BB = BoundingBox(0, -500, 600, 0)


@pytest.fixture
def engine() -> ZoneEngine:
    """Create a zone engine with default constants."""
    return ZoneEngine(SegmentationConfig())


def _metrics(**tables) -> FontMetrics:
    return FontMetrics(
        font_id="test",
        base_box=BASE_BB,
        consonants={0x1780: GlyphMetric(10, BASE_BB)},
        **tables,
    )


class TestFallbackZones:
    """Tests for zones computed without font metrics."""

    def test_body_uses_fixed_fractions(self, engine: ZoneEngine) -> None:
        """Test the body rectangle reserves shares above and below."""
        box = BoundingBox(0, -1000, 1000, 0)
        body = engine.body_rect(box, 0x1780)
        assert body == Rect.from_edges(0, -800, 1000, -360)

    def test_bottom_vowel(self, engine: ZoneEngine) -> None:
        """Test a low vowel gets the band under the body."""
        box = BoundingBox(0, -1000, 1000, 0)
        zones = engine.compute(box, build_units("កុ"))
        assert zones.bottom == Rect.from_edges(0, -360, 1000, 0)
        assert zones.base.y2 == zones.bottom.y
        assert zones.top is None

    def test_top_sign(self, engine: ZoneEngine) -> None:
        """Test a top sign gets the band above the body."""
        box = BoundingBox(0, -1000, 1000, 0)
        zones = engine.compute(box, build_units("កំ"))
        assert zones.top == Rect.from_edges(0, -1000, 1000, -800)
        assert zones.get(Zone.TOP) == zones.top

    def test_base_only(self, engine: ZoneEngine) -> None:
        """Test that a bare consonant only has a BASE zone."""
        zones = engine.compute(BoundingBox(0, -1000, 1000, 0), build_units("ក"))
        data = zones.to_dict()
        assert data["BASE"] is not None
        assert data["TOP"] is None
        assert data["LEFT"] is None


class TestMeasuredZones:
    """Tests for zones anchored on font metrics."""

    def test_body_from_metrics(self, engine: ZoneEngine) -> None:
        """Test the body takes the measured base box."""
        box = BoundingBox(0, -700, 900, 200)
        body = engine.body_rect(box, 0x1780, _metrics())
        assert body == Rect(0, -500, 600, 500)

    def test_body_outside_cluster_falls_back(self, engine: ZoneEngine) -> None:
        """Test that a measured body missing the cluster box is ignored."""
        box = BoundingBox(0, 100, 500, 300)
        body = engine.body_rect(box, 0x1780, _metrics())
        assert body.y == pytest.approx(140)

    def test_measured_subscript(self, engine: ZoneEngine) -> None:
        """Test that a measured subscript sets the BOTTOM zone."""
        metrics = _metrics(
            subscripts={0x1781: SubscriptMetric(30, BoundingBox(100, 50, 400, 300), BASE_BB)}
        )
        zones = engine.compute(BoundingBox(0, -700, 900, 300), build_units("ក្ខ"), metrics=metrics)
        assert zones.bottom == Rect(0, 50, 900, 250)

    def test_fused_vowel_carves_body(self, engine: ZoneEngine) -> None:
        """Test that a fused right tail is cut out of BASE."""
        metrics = _metrics(
            vowels={
                0x17B6: MarkMetric(
                    glyph_id=10,
                    bounding_box=BoundingBox(0, -500, 900, 0),
                    cluster_box=BoundingBox(0, -500, 900, 0),
                    merged=True,
                    delta=OverflowDelta(right=300),
                )
            }
        )
        box = BoundingBox(0, -500, 800, 0)
        zones = engine.compute(box, build_units("កា"), metrics=metrics)
        assert zones.right == Rect.from_edges(500, -500, 800, 0)
        assert zones.base.x2 == 500

    def test_small_delta_uses_default_slice(self, engine: ZoneEngine) -> None:
        """Test that a fused vowel with no measurable overflow still gets its zone."""
        metrics = _metrics(
            vowels={
                0x17B6: MarkMetric(
                    glyph_id=10,
                    bounding_box=BASE_BB,
                    cluster_box=BASE_BB,
                    merged=True,
                    delta=OverflowDelta(right=1),
                )
            }
        )
        zones = engine.compute(BoundingBox(0, -500, 600, 0), build_units("កា"), metrics=metrics)
        assert zones.right is not None
        assert zones.right.x == pytest.approx(470)
        assert zones.right.width == pytest.approx(130)
        assert zones.base.x2 == pytest.approx(470)

    def test_overlapping_slices_carve_in_fixed_order(self, engine: ZoneEngine) -> None:
        """Test that overlapping LEFT and RIGHT slices always give the same BASE."""
        metrics = _metrics(
            vowels={
                0x17C4: MarkMetric(
                    glyph_id=11,
                    bounding_box=BASE_BB,
                    cluster_box=BASE_BB,
                    merged=True,
                    delta=OverflowDelta(left=80, right=80),
                )
            }
        )
        box = BoundingBox(0, -500, 100, 0)
        results = {engine.compute(box, build_units("កោ"), metrics=metrics).base for _ in range(3)}
        assert results == {Rect(80, -500, 20, 500)}
        zones = engine.compute(box, build_units("កោ"), metrics=metrics)
        assert zones.left == Rect.from_edges(0, -500, 80, 0)
        assert zones.right == Rect.from_edges(20, -500, 100, 0)
