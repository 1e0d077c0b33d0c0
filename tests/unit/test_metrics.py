"""Tests for the font metrics builder and cache."""

from unittest.mock import MagicMock

import pytest

from glyphlab.core.metrics import FontMetricsBuilder, GlyphRecord, MetricsCache, Outline
from glyphlab.domain import COENG, EMPTY_BOX, BoundingBox, FontMetrics, OverflowDelta
from glyphlab.exceptions import ShapingError

KA = "ក"
SUBSCRIPT_GLYPH_BASE = 2000

CONSONANT_BB = BoundingBox(0, -500, 600, 0)
MARK_BB = BoundingBox(-450, -800, -150, -600)
SUBSCRIPT_BB = BoundingBox(-500, 50, -100, 300)


class FakeShaper:
    """Shaper that draws every Khmer codepoint as its own glyph.

    Glyph ids are ``codepoint - 0x1700``; subscripts get ``2000 + codepoint``.
    Texts listed in ``fused`` shape to one glyph.
    """

    units_per_em = 2048

    def __init__(self) -> None:
        self.fused: dict[str, tuple[int, BoundingBox]] = {
            KA + "ា": (900, BoundingBox(0, -500, 800, 0)),
            KA + chr(COENG) + "ង": (901, BoundingBox(0, -500, 600, 300)),
            KA + "ំ": (902, BoundingBox(0, -700, 650, 0)),
        }
        self.broken = {KA + "័"}
        self.missing = {0x17A3}
        self.outlines: dict[int, BoundingBox] = {gid: bb for gid, bb in self.fused.values()}

    def shape(
        self,
        text: str,
        features: dict[str, int] | None = None,
        cluster_level: int = 0,
    ) -> list[GlyphRecord]:
        if text in self.broken:
            raise ShapingError(text, "boom")
        if text in self.fused:
            return [GlyphRecord(self.fused[text][0], 0, advance_x=800)]
        records = []
        for i, ch in enumerate(text):
            cp = ord(ch)
            if cp == COENG:
                continue
            if i > 0 and ord(text[i - 1]) == COENG:
                records.append(GlyphRecord(SUBSCRIPT_GLYPH_BASE + cp, i - 1))
            elif cp in self.missing:
                records.append(GlyphRecord(0, i))
            else:
                advance = 600 if cp < 0x17B6 else 0
                records.append(GlyphRecord(cp - 0x1700, i, advance_x=advance))
        return records

    def outline(self, glyph_id: int) -> Outline:
        if glyph_id in self.outlines:
            return Outline("M0 0Z", self.outlines[glyph_id])
        if glyph_id >= SUBSCRIPT_GLYPH_BASE:
            return Outline("M0 0Z", SUBSCRIPT_BB)
        if glyph_id < 0xB6:
            return Outline("M0 0Z", CONSONANT_BB)
        return Outline("M0 0Z", MARK_BB)


@pytest.fixture
def metrics() -> FontMetrics:
    """Build metrics from the fake shaper."""
    return FontMetricsBuilder(FakeShaper(), "fake").build()


class TestFontMetricsBuilder:
    """Tests for FontMetricsBuilder."""

    def test_base_box(self, metrics: FontMetrics) -> None:
        """Test that the neutral base is measured."""
        assert metrics.font_id == "fake"
        assert metrics.units_per_em == 2048
        assert metrics.base_box == CONSONANT_BB

    def test_isolated_glyphs(self, metrics: FontMetrics) -> None:
        """Test consonant and independent vowel tables."""
        assert len(metrics.consonants) == 35
        assert metrics.consonants[0x1780].glyph_id == 0x80
        assert 0x17A3 not in metrics.independent_vowels
        assert 0x17A5 in metrics.independent_vowels

    def test_notdef_is_skipped(self) -> None:
        """Test that probes resolving to .notdef are recorded as skipped."""
        builder = FontMetricsBuilder(FakeShaper(), "fake")
        builder.build()
        assert (chr(0x17A3), "notdef") in builder.skipped
        assert (KA + "័", "boom") in builder.skipped

    def test_separate_subscript(self, metrics: FontMetrics) -> None:
        """Test that the lowest glyph of a probe is the subscript."""
        sub = metrics.subscripts[0x1781]
        assert sub.glyph_id == SUBSCRIPT_GLYPH_BASE + 0x1781
        assert sub.bounding_box == BoundingBox(100, 50, 500, 300)
        assert not sub.merged

    def test_fused_subscript(self, metrics: FontMetrics) -> None:
        """Test that a fused subscript is clamped below the base."""
        sub = metrics.subscripts[0x1784]
        assert sub.merged
        assert sub.glyph_id == 901
        assert sub.bounding_box == BoundingBox(0, 0, 600, 300)

    def test_separate_vowel(self, metrics: FontMetrics) -> None:
        """Test a vowel drawn as its own glyph."""
        vowel = metrics.vowels[0x17B7]
        assert not vowel.merged
        assert not vowel.multipart
        assert vowel.glyph_id == 0xB7
        assert vowel.bounding_box == BoundingBox(150, -800, 450, -600)
        assert len(vowel.components) == 2

    def test_fused_vowel(self, metrics: FontMetrics) -> None:
        """Test that a fused vowel records its overflow."""
        vowel = metrics.vowels[0x17B6]
        assert vowel.merged
        assert vowel.delta == OverflowDelta(right=200)

    def test_fused_diacritic_keeps_top_only(self, metrics: FontMetrics) -> None:
        """Test that diacritic deltas only keep the top overflow."""
        sign = metrics.diacritics[0x17C6]
        assert sign.merged
        assert sign.delta == OverflowDelta(top=200)

    def test_coeng_is_not_a_diacritic(self, metrics: FontMetrics) -> None:
        """Test that the coeng mark is not measured as a sign."""
        assert COENG not in metrics.diacritics
        assert 0x17DD in metrics.diacritics

    def test_zero_width_probe(self) -> None:
        """Test that a probe without ink is skipped."""
        shaper = MagicMock()
        shaper.shape.return_value = [GlyphRecord(5, 0)]
        shaper.outline.return_value = Outline("", EMPTY_BOX)
        builder = FontMetricsBuilder(shaper, "blank")
        assert builder.probe(KA) is None
        assert builder.skipped == [(KA, "zero width")]

    def test_empty_result(self) -> None:
        """Test that a probe shaping to nothing is skipped."""
        shaper = MagicMock()
        shaper.shape.return_value = []
        builder = FontMetricsBuilder(shaper, "blank")
        assert builder.probe(KA) is None
        assert builder.skipped == [(KA, "no glyphs")]


class TestMetricsCache:
    """Tests for MetricsCache."""

    def test_builds_once(self) -> None:
        """Test that the factory runs only on the first request."""
        cache = MetricsCache()
        factory = MagicMock(return_value=FontMetrics(font_id="a"))
        first = cache.get_or_build("a", factory)
        second = cache.get_or_build("a", factory)
        assert first is second
        factory.assert_called_once()
        assert "a" in cache
        assert len(cache) == 1

    def test_get_and_clear(self) -> None:
        """Test lookups and clearing."""
        cache = MetricsCache()
        assert cache.get("a") is None
        cache.get_or_build("a", lambda: FontMetrics(font_id="a"))
        assert cache.get("a").font_id == "a"
        cache.clear()
        assert len(cache) == 0

    def test_factory_error_is_not_cached(self) -> None:
        """Test that a failing build leaves the cache empty."""
        cache = MetricsCache()
        with pytest.raises(RuntimeError):
            cache.get_or_build("a", MagicMock(side_effect=RuntimeError("bad font")))
        assert "a" not in cache
