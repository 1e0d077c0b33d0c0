"""HarfBuzz shaping with fontTools outlines.

HarfBuzz positions the glyphs; fontTools draws them. Outlines are flipped
into SVG orientation (y down) as they are read, and HarfBuzz's y-up offsets
are negated, so every coordinate leaving this module is y-down.
"""

import logging
import unicodedata
from pathlib import Path

import uharfbuzz as hb
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from glyphlab.core.metrics import GlyphRecord, Outline
from glyphlab.domain import EMPTY_BOX, BoundingBox, GlyphCluster, GlyphComponent
from glyphlab.exceptions import FontLoadError, ShapingError

logger = logging.getLogger(__name__)

# y-up font space to y-down SVG space
FLIP_Y = (1, 0, 0, -1, 0, 0)


class HarfBuzzShaper:
    """Shapes text and draws glyph outlines for one font file.

    Example:
        shaper = HarfBuzzShaper(Path("fonts/NotoSansKhmer-Regular.ttf"))
        for cluster in shaper.shape_clusters("ក្វា"):
            print(cluster.id, cluster.text, len(cluster.components))
    """

    def __init__(self, font_path: Path) -> None:
        """Load the font into HarfBuzz and fontTools.

        Args:
            font_path: Path to a TTF/OTF file

        Raises:
            FontLoadError: If either library cannot read the file
        """
        self.font_path = Path(font_path)
        try:
            self._font = TTFont(str(self.font_path))
            self._glyph_set = self._font.getGlyphSet()
            blob = hb.Blob.from_file_path(str(self.font_path))
            self._hb_font = hb.Font(hb.Face(blob))
        except Exception as e:
            raise FontLoadError(str(self.font_path), str(e)) from e
        self._outlines: dict[int, Outline] = {}

    @property
    def units_per_em(self) -> int:
        return self._font["head"].unitsPerEm  # type: ignore[attr-defined]

    def shape(
        self,
        text: str,
        features: dict[str, int] | None = None,
        cluster_level: int = 0,
    ) -> list[GlyphRecord]:
        """Shape text into glyph records.

        Cluster indices are codepoint offsets into ``text``.

        Raises:
            ShapingError: If HarfBuzz rejects the request
        """
        if not text:
            return []
        try:
            buf = hb.Buffer()
            buf.add_codepoints([ord(ch) for ch in text])
            buf.guess_segment_properties()
            buf.cluster_level = hb.BufferClusterLevel(cluster_level)
            hb.shape(self._hb_font, buf, features or {})
        except Exception as e:
            raise ShapingError(text, str(e)) from e

        return [
            GlyphRecord(
                glyph_id=info.codepoint,
                cluster_index=info.cluster,
                advance_x=pos.x_advance,
                offset_x=pos.x_offset,
                offset_y=pos.y_offset,
            )
            for info, pos in zip(buf.glyph_infos, buf.glyph_positions)
        ]

    def _draw(self, glyph_id: int, pen: object, dx: float = 0.0, dy: float = 0.0) -> None:
        name = self._font.getGlyphName(glyph_id)
        xx, xy, yx, yy, _, _ = FLIP_Y
        self._glyph_set[name].draw(TransformPen(pen, (xx, xy, yx, yy, dx, dy)))

    def outline(self, glyph_id: int) -> Outline:
        """SVG path and box of one glyph in its local, y-down coordinates."""
        cached = self._outlines.get(glyph_id)
        if cached is not None:
            return cached

        svg_pen = SVGPathPen(self._glyph_set)
        bounds_pen = BoundsPen(self._glyph_set)
        try:
            self._draw(glyph_id, svg_pen)
            self._draw(glyph_id, bounds_pen)
        except KeyError:
            logger.warning("Glyph %d missing from %s", glyph_id, self.font_path.name)
            outline = Outline("", EMPTY_BOX)
        else:
            bounds = bounds_pen.bounds
            box = BoundingBox(*bounds) if bounds else EMPTY_BOX
            outline = Outline(svg_pen.getCommands(), box)

        self._outlines[glyph_id] = outline
        return outline

    def shape_clusters(
        self,
        text: str,
        features: dict[str, int] | None = None,
        cluster_level: int = 0,
    ) -> list[GlyphCluster]:
        """Shape text and group the glyphs into positioned clusters.

        The text is NFC-normalized first. A cluster ends where the next one
        starts (or at the end of the text); its outline is the union of its
        components' outlines placed at their pen positions.

        Args:
            text: Source text
            features: OpenType feature overrides
            cluster_level: HarfBuzz cluster level (0-2)

        Returns:
            Clusters in source order, ids counting from 0

        Raises:
            ShapingError: If HarfBuzz rejects the request
        """
        text = unicodedata.normalize("NFC", text or "")
        records = self.shape(text, features, cluster_level)

        groups: dict[int, list[GlyphRecord]] = {}
        for record in records:
            groups.setdefault(record.cluster_index, []).append(record)
        starts = sorted(groups)

        clusters: list[GlyphCluster] = []
        pen = 0.0
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else len(text)
            path_pen = SVGPathPen(self._glyph_set)
            components = []
            advance = 0.0
            for index, record in enumerate(groups[start]):
                x = pen + record.offset_x
                y = -record.offset_y
                outline = self.outline(record.glyph_id)
                if outline.path:
                    self._draw(record.glyph_id, path_pen, x, y)
                components.append(
                    GlyphComponent(
                        glyph_id=record.glyph_id,
                        x=x,
                        y=y,
                        advance=record.advance_x,
                        outline=outline.path,
                        bounding_box=outline.bounding_box,
                        index=index,
                    )
                )
                pen += record.advance_x
                advance += record.advance_x

            clusters.append(
                GlyphCluster(
                    id=len(clusters),
                    code_points=tuple(ord(ch) for ch in text[start:end]),
                    cluster_start=start,
                    cluster_end=end,
                    outline=path_pen.getCommands(),
                    components=tuple(components),
                    advance=advance,
                )
            )

        logger.debug("Shaped %d glyphs into %d clusters", len(records), len(clusters))
        return clusters

    def close(self) -> None:
        """Close the fontTools font."""
        self._font.close()
