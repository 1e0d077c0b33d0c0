"""Tests for component geometry helpers and width splits."""

import pytest

from glyphlab.core.geometry import (
    center_x,
    center_y,
    component_rect,
    compute_right_biased_tail_split,
    compute_right_tail_split,
    pick_base_component,
    pick_base_for_coeng_split,
    pick_largest_component,
    pick_mark_component,
    preferred_left_head_width,
    preferred_right_tail_width,
    to_local_x,
)
from glyphlab.core.units import build_units
from glyphlab.domain import (
    BoundingBox,
    FontMetrics,
    GlyphComponent,
    GlyphMetric,
    MarkMetric,
    OverflowDelta,
    Rect,
)


def comp(glyph_id: int, x: float, bb: BoundingBox, advance: float = 0.0) -> GlyphComponent:
    return GlyphComponent(glyph_id=glyph_id, x=x, advance=advance, bounding_box=bb)


def _tail_metrics(right: float) -> FontMetrics:
    bb = BoundingBox(0, -500, 600, 0)
    return FontMetrics(
        font_id="test",
        vowels={
            0x17B6: MarkMetric(10, bb, bb, merged=True, delta=OverflowDelta(right=right)),
        },
    )


class TestComponentMeasures:
    """Tests for component position helpers."""

    def test_centers_include_pen_position(self) -> None:
        """Test that centers are in cluster space."""
        c = comp(1, 1400, BoundingBox(-1100, 50, -300, 650))
        assert center_x(c) == 700
        assert center_y(c) == 350

    def test_rect_is_local(self) -> None:
        """Test that the component clip stays in local coordinates."""
        c = comp(1, 1400, BoundingBox(-1100, 50, -300, 650))
        assert component_rect(c) == Rect(-1100, 50, 800, 600)
        assert component_rect(None) is None
        assert to_local_x(c, 700) == -700


class TestTailSplit:
    """Tests for right tail width splits."""

    def test_preferred_tail(self) -> None:
        """Test a split honoring the preferred width."""
        assert compute_right_tail_split(1000, 280) == (720, 280)

    def test_minimum_slices(self) -> None:
        """Test that both sides keep the minimum slice."""
        assert compute_right_tail_split(1000, 10) == (850, 150)
        assert compute_right_tail_split(1000, 5000) == (150, 850)

    @pytest.mark.parametrize("width", [1, 30, 47.5, 200, 1850])
    @pytest.mark.parametrize("preferred", [0, 90, 600, 3000])
    def test_widths_add_up(self, width: float, preferred: float) -> None:
        """Test that the slices always tile the width without going negative."""
        base, tail = compute_right_tail_split(width, preferred)
        assert base >= 0
        assert tail >= 0
        assert base + tail == pytest.approx(width)

    def test_zero_width(self) -> None:
        """Test that an empty width gives empty slices."""
        assert compute_right_tail_split(0, 100) == (0.0, 0.0)
        assert compute_right_biased_tail_split(-5, 100) == (0.0, 0.0)

    def test_biased_split(self) -> None:
        """Test that the biased split keeps most of the width on the base."""
        base, tail = compute_right_biased_tail_split(1000, 400, bias=0.66)
        assert base == pytest.approx(660)
        assert tail == pytest.approx(340)


class TestPreferredWidths:
    """Tests for typical tail and head widths."""

    def test_fallback_widths(self) -> None:
        """Test widths derived from the base width."""
        assert preferred_right_tail_width(0x17B6, 1000) == pytest.approx(280)
        assert preferred_right_tail_width(0x17C4, 100) == 110
        assert preferred_left_head_width(0x17C1, 1000) == pytest.approx(260)

    def test_measured_tail(self) -> None:
        """Test that a wide measured tail wins over the fallback."""
        assert preferred_right_tail_width(0x17B6, 1000, _tail_metrics(300)) == 300
        assert preferred_right_tail_width(0x17B6, 1000, _tail_metrics(5)) == pytest.approx(280)


class TestComponentPicking:
    """Tests for base and mark component selection."""

    def test_mark_prefers_smallest_advance(self) -> None:
        """Test that zero-advance components are taken as marks."""
        base = comp(1, 0, BoundingBox(0, -500, 600, 0), advance=600)
        mark = comp(2, 600, BoundingBox(-400, -800, -100, -600))
        assert pick_mark_component([base, mark]) is mark
        assert pick_mark_component([base, mark], exclude=mark) is base
        assert pick_mark_component([]) is None

    def test_largest(self) -> None:
        """Test the largest component."""
        small = comp(1, 0, BoundingBox(0, 0, 10, 10))
        large = comp(2, 0, BoundingBox(0, 0, 100, 10))
        assert pick_largest_component([small, large]) is large
        assert pick_largest_component([]) is None

    def test_base_by_glyph_id(self) -> None:
        """Test that the measured glyph id identifies the base."""
        left = comp(7, 0, BoundingBox(0, 0, 100, 100))
        right = comp(9, 200, BoundingBox(0, 0, 100, 100))
        metrics = FontMetrics(font_id="t", consonants={0x1780: GlyphMetric(9, BoundingBox(0, 0, 1, 1))})
        units = build_units("ក្ក")
        assert pick_base_component([left, right], 0x1780, units, metrics) is right

    def test_base_is_leftmost(self) -> None:
        """Test the leftmost rule without a prepositive vowel."""
        left = comp(7, 0, BoundingBox(0, 0, 50, 50))
        right = comp(9, 200, BoundingBox(0, 0, 100, 100))
        assert pick_base_component([right, left], 0x1780, build_units("កា")) is left

    def test_base_with_prepositive_is_largest(self) -> None:
        """Test that a left vowel makes the largest component the base."""
        vowel = comp(7, 0, BoundingBox(0, 0, 50, 100))
        base = comp(9, 100, BoundingBox(0, 0, 100, 100))
        assert pick_base_component([vowel, base], 0x1780, build_units("កេ")) is base

    def test_coeng_base_is_topmost(self) -> None:
        """Test that the topmost component is the base of a subscript chain."""
        top = comp(1, 0, BoundingBox(0, -500, 600, 0))
        low = comp(2, 0, BoundingBox(0, 50, 600, 300))
        empty = comp(3, 0, BoundingBox())
        assert pick_base_for_coeng_split([low, empty, top], 0x1780) is top
        assert pick_base_for_coeng_split([empty], 0x1780) is None
