"""Tests for font loading, shaping and the font catalog."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from glyphlab.config import FontCatalogConfig, FontEntry, GlyphLabSettings
from glyphlab.domain import EMPTY_BOX, BoundingBox, FontMetrics
from glyphlab.exceptions import FontLoadError, FontNotFoundError, ShapingError
from glyphlab.io import FontCatalog, FontService, HarfBuzzShaper


class FakeGlyph:
    """Glyph drawing a plain rectangle in font units (y up)."""

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def draw(self, pen) -> None:
        pen.moveTo((0, 0))
        pen.lineTo((self.width, 0))
        pen.lineTo((self.width, self.height))
        pen.lineTo((0, self.height))
        pen.closePath()


GLYPH_NAMES = {1: "ka", 2: "aa", 3: "coeng_kha"}


@pytest.fixture
def mock_ttfont() -> MagicMock:
    """Create a mock TTFont with two drawable glyphs."""
    font = MagicMock()
    font.getGlyphSet.return_value = {"ka": FakeGlyph(600, 500), "aa": FakeGlyph(200, 500)}
    font.getGlyphName.side_effect = lambda gid: GLYPH_NAMES.get(gid, f"glyph{gid:05d}")
    font.__getitem__.return_value.unitsPerEm = 1000
    return font


def _shaped(hb: MagicMock, glyphs: list[tuple[int, int, int, int, int]]) -> None:
    """Make hb.Buffer() report (glyph, cluster, x_advance, x_offset, y_offset) tuples."""
    buf = MagicMock()
    buf.glyph_infos = [SimpleNamespace(codepoint=g, cluster=c) for g, c, *_ in glyphs]
    buf.glyph_positions = [
        SimpleNamespace(x_advance=adv, x_offset=dx, y_offset=dy) for _, _, adv, dx, dy in glyphs
    ]
    hb.Buffer.return_value = buf


class TestHarfBuzzShaper:
    """Tests for HarfBuzzShaper."""

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_load_error(self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock) -> None:
        """Test that unreadable fonts raise FontLoadError."""
        mock_ttfont_cls.side_effect = OSError("not a font")
        with pytest.raises(FontLoadError) as exc_info:
            HarfBuzzShaper(Path("broken.ttf"))
        assert exc_info.value.reason == "not a font"

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_shape_records(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test conversion of HarfBuzz output to glyph records."""
        mock_ttfont_cls.return_value = mock_ttfont
        _shaped(mock_hb, [(1, 0, 600, 0, 0), (2, 1, 200, 10, 20)])
        shaper = HarfBuzzShaper(Path("font.ttf"))

        records = shaper.shape("កា", {"liga": 0})

        assert [r.glyph_id for r in records] == [1, 2]
        assert records[1].cluster_index == 1
        assert records[1].offset_y == 20
        assert shaper.units_per_em == 1000
        mock_hb.shape.assert_called_once()
        assert mock_hb.shape.call_args.args[2] == {"liga": 0}

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_shape_empty_text(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test that empty text is not sent to HarfBuzz."""
        mock_ttfont_cls.return_value = mock_ttfont
        shaper = HarfBuzzShaper(Path("font.ttf"))
        assert shaper.shape("") == []
        mock_hb.shape.assert_not_called()

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_shape_error(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test that HarfBuzz failures raise ShapingError."""
        mock_ttfont_cls.return_value = mock_ttfont
        mock_hb.shape.side_effect = RuntimeError("bad cluster level")
        shaper = HarfBuzzShaper(Path("font.ttf"))
        with pytest.raises(ShapingError) as exc_info:
            shaper.shape("ក")
        assert exc_info.value.reason == "bad cluster level"

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_outline_is_flipped(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test that outlines are returned in y-down coordinates and cached."""
        mock_ttfont_cls.return_value = mock_ttfont
        shaper = HarfBuzzShaper(Path("font.ttf"))

        outline = shaper.outline(1)

        assert outline.bounding_box == BoundingBox(0, -500, 600, 0)
        assert outline.path.startswith("M")
        assert shaper.outline(1) is outline

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_missing_glyph_outline(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test that a glyph missing from the glyph set has an empty outline."""
        mock_ttfont_cls.return_value = mock_ttfont
        shaper = HarfBuzzShaper(Path("font.ttf"))
        outline = shaper.outline(3)
        assert outline.path == ""
        assert outline.bounding_box == EMPTY_BOX

    @patch("glyphlab.io.shaper.hb")
    @patch("glyphlab.io.shaper.TTFont")
    def test_shape_clusters(
        self, mock_ttfont_cls: MagicMock, mock_hb: MagicMock, mock_ttfont: MagicMock
    ) -> None:
        """Test grouping glyphs into positioned clusters."""
        mock_ttfont_cls.return_value = mock_ttfont
        _shaped(
            mock_hb,
            [(1, 0, 600, 0, 0), (3, 0, 0, -50, -300), (2, 3, 200, 0, 0)],
        )
        shaper = HarfBuzzShaper(Path("font.ttf"))

        clusters = shaper.shape_clusters("ក្ខា")

        assert [c.id for c in clusters] == [0, 1]
        first, second = clusters
        assert first.text == "ក្ខ"
        assert (first.cluster_start, first.cluster_end) == (0, 3)
        assert second.text == "ា"
        assert second.cluster_end == 4

        ka, sub = first.components
        assert ka.bounding_box == BoundingBox(0, -500, 600, 0)
        assert (sub.x, sub.y) == (550, 300)
        assert sub.outline == ""
        assert first.advance == 600
        assert first.outline != ""

        (aa,) = second.components
        assert aa.x == 600
        assert aa.absolute_box == BoundingBox(600, -500, 800, 0)


class TestFontCatalog:
    """Tests for FontCatalog."""

    @pytest.fixture
    def catalog_config(self) -> FontCatalogConfig:
        """Create a catalog of a missing, an empty, a broken and a good font."""
        return FontCatalogConfig(
            fonts=[
                FontEntry(id="missing", label="Missing", path=Path("missing.ttf")),
                FontEntry(id="empty", label="Empty", path=Path("empty.ttf")),
                FontEntry(id="broken", label="Broken", path=Path("broken.ttf")),
                FontEntry(id="good", label="Good", path=Path("good.ttf")),
            ]
        )

    @pytest.fixture
    def font_dir(self, tmp_path: Path) -> Path:
        """Create font files in a temporary directory."""
        (tmp_path / "empty.ttf").write_bytes(b"")
        (tmp_path / "broken.ttf").write_bytes(b"definitely not a font")
        (tmp_path / "good.ttf").write_bytes(b"\x00\x01\x00\x00 good")
        return tmp_path

    @staticmethod
    def _fake_parse(path: str, lazy: bool = False) -> MagicMock:
        if path.endswith("broken.ttf"):
            raise OSError("bad sfnt version")
        return MagicMock()

    def test_statuses(self, catalog_config: FontCatalogConfig, font_dir: Path) -> None:
        """Test the availability reason of each entry."""
        with patch("glyphlab.io.fonts.TTFont", side_effect=self._fake_parse):
            catalog = FontCatalog(catalog_config, base_dir=font_dir)
            statuses = {s.id: s for s in catalog.statuses()}

        assert statuses["missing"].reason == "missing_file"
        assert statuses["empty"].reason == "empty_file"
        assert statuses["broken"].reason == "invalid_font"
        assert statuses["good"].available
        assert statuses["good"].reason is None
        assert statuses["good"].file == "good.ttf"

    def test_resolve(self, catalog_config: FontCatalogConfig, font_dir: Path) -> None:
        """Test resolution of auto, known and unknown ids."""
        with patch("glyphlab.io.fonts.TTFont", side_effect=self._fake_parse):
            catalog = FontCatalog(catalog_config, base_dir=font_dir)
            assert catalog.resolve("auto").id == "good"
            assert catalog.resolve(None).id == "good"
            assert catalog.resolve("good").id == "good"
            assert catalog.resolve("broken").id == "good"
            assert catalog.resolve("nope").id == "good"

    def test_resolve_without_fonts(self, catalog_config: FontCatalogConfig, tmp_path: Path) -> None:
        """Test that an empty font directory raises FontNotFoundError."""
        catalog = FontCatalog(catalog_config, base_dir=tmp_path)
        with pytest.raises(FontNotFoundError):
            catalog.resolve("auto")

    def test_to_dict(self, catalog_config: FontCatalogConfig, font_dir: Path) -> None:
        """Test the font list format."""
        with patch("glyphlab.io.fonts.TTFont", side_effect=self._fake_parse):
            data = FontCatalog(catalog_config, base_dir=font_dir).to_dict()
        assert data["defaultFontId"] == "good"
        assert [f["id"] for f in data["fonts"]] == ["missing", "empty", "broken", "good"]
        assert data["fonts"][0] == {
            "id": "missing",
            "label": "Missing",
            "file": "missing.ttf",
            "available": False,
            "reason": "missing_file",
        }

    def test_parse_result_is_cached(self, catalog_config: FontCatalogConfig, font_dir: Path) -> None:
        """Test that each font file is parsed once."""
        with patch("glyphlab.io.fonts.TTFont", side_effect=self._fake_parse) as mock_parse:
            catalog = FontCatalog(catalog_config, base_dir=font_dir)
            catalog.statuses()
            catalog.statuses()
        assert mock_parse.call_count == 2


class TestFontService:
    """Tests for FontService."""

    @pytest.fixture
    def settings(self) -> GlyphLabSettings:
        """Create settings with a single font."""
        return GlyphLabSettings(
            fonts=FontCatalogConfig(
                fonts=[FontEntry(id="good", label="Good", path=Path("good.ttf"))]
            )
        )

    @pytest.fixture
    def font_dir(self, tmp_path: Path) -> Path:
        """Create the font file."""
        (tmp_path / "good.ttf").write_bytes(b"\x00\x01\x00\x00 good")
        return tmp_path

    @patch("glyphlab.io.fonts.TTFont")
    @patch("glyphlab.io.fonts.HarfBuzzShaper")
    def test_shaper_is_cached(
        self,
        mock_shaper_cls: MagicMock,
        mock_ttfont_cls: MagicMock,
        settings: GlyphLabSettings,
        font_dir: Path,
    ) -> None:
        """Test that one shaper is created per font."""
        service = FontService(settings, base_dir=font_dir)
        entry, first = service.shaper("auto")
        _, second = service.shaper("good")

        assert entry.id == "good"
        assert first is second
        mock_shaper_cls.assert_called_once_with(font_dir / "good.ttf")

        service.close()
        first.close.assert_called_once()

    @patch("glyphlab.io.fonts.FontMetricsBuilder")
    @patch("glyphlab.io.fonts.TTFont")
    @patch("glyphlab.io.fonts.HarfBuzzShaper")
    def test_metrics_built_once(
        self,
        mock_shaper_cls: MagicMock,
        mock_ttfont_cls: MagicMock,
        mock_builder_cls: MagicMock,
        settings: GlyphLabSettings,
        font_dir: Path,
    ) -> None:
        """Test that metrics are measured on first use only."""
        mock_builder_cls.return_value.build.return_value = FontMetrics(font_id="good")
        service = FontService(settings, base_dir=font_dir)

        first = service.metrics("good")
        second = service.metrics("good")

        assert first is second
        assert first.font_id == "good"
        mock_builder_cls.assert_called_once()

    @patch("glyphlab.io.fonts.TTFont")
    @patch("glyphlab.io.fonts.HarfBuzzShaper")
    def test_metrics_failure_returns_none(
        self,
        mock_shaper_cls: MagicMock,
        mock_ttfont_cls: MagicMock,
        settings: GlyphLabSettings,
        font_dir: Path,
    ) -> None:
        """Test that a font that cannot be loaded yields no metrics."""
        mock_shaper_cls.side_effect = FontLoadError("good.ttf", "truncated")
        service = FontService(settings, base_dir=font_dir)
        assert service.metrics("good") is None

    def test_no_fonts(self, settings: GlyphLabSettings, tmp_path: Path) -> None:
        """Test that a missing font raises FontNotFoundError."""
        service = FontService(settings, base_dir=tmp_path)
        with pytest.raises(FontNotFoundError):
            service.shaper("auto")
