"""Per-font measurements of Khmer glyphs.

Font metrics record how one font actually draws each Khmer codepoint next to
a neutral base consonant: isolated boxes for consonants, the subscript form's
box, and how far a vowel or diacritic stretches the base's box when the font
fuses them into one outline. They are built once per font and never change.
"""

from dataclasses import dataclass, field
from typing import Any

from glyphlab.domain.geometry import BoundingBox


@dataclass(frozen=True, slots=True)
class OverflowDelta:
    """How far a fused cluster's box overflows the isolated base box.

    All values are non-negative design units.
    """

    top: float = 0.0
    bottom: float = 0.0
    left: float = 0.0
    right: float = 0.0

    @classmethod
    def between(cls, base: BoundingBox, cluster: BoundingBox) -> "OverflowDelta":
        """Measure the overflow of ``cluster`` beyond ``base`` on each side."""
        return cls(
            top=max(0.0, base.y1 - cluster.y1),
            bottom=max(0.0, cluster.y2 - base.y2),
            left=max(0.0, base.x1 - cluster.x1),
            right=max(0.0, cluster.x2 - base.x2),
        )

    def to_dict(self) -> dict[str, float]:
        return {"top": self.top, "bottom": self.bottom, "left": self.left, "right": self.right}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OverflowDelta":
        return cls(
            top=float(data.get("top") or 0.0),
            bottom=float(data.get("bottom") or 0.0),
            left=float(data.get("left") or 0.0),
            right=float(data.get("right") or 0.0),
        )


@dataclass(frozen=True, slots=True)
class GlyphMetric:
    """Isolated glyph measurement (consonants, independent vowels)."""

    glyph_id: int
    bounding_box: BoundingBox

    def to_dict(self) -> dict[str, Any]:
        return {"glyphId": self.glyph_id, "bb": self.bounding_box.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphMetric":
        return cls(
            glyph_id=int(data["glyphId"]),
            bounding_box=BoundingBox.from_dict(data["bb"]),
        )


@dataclass(frozen=True, slots=True)
class SubscriptMetric:
    """Measurement of a consonant in subscript position.

    Attributes:
        glyph_id: Glyph drawn for the subscript form
        bounding_box: Box of the subscript form itself
        cluster_box: Box of the whole ``base + coeng + consonant`` probe
        merged: True when the font fused the probe into one glyph and the
            box was derived by clamping the cluster box below the base
    """

    glyph_id: int
    bounding_box: BoundingBox
    cluster_box: BoundingBox
    merged: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "glyphId": self.glyph_id,
            "bb": self.bounding_box.to_dict(),
            "clusterBB": self.cluster_box.to_dict(),
        }
        if self.merged:
            data["merged"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptMetric":
        return cls(
            glyph_id=int(data["glyphId"]),
            bounding_box=BoundingBox.from_dict(data["bb"]),
            cluster_box=BoundingBox.from_dict(data.get("clusterBB") or data["bb"]),
            merged=bool(data.get("merged", False)),
        )


@dataclass(frozen=True, slots=True)
class MarkComponent:
    """One glyph of a ``base + mark`` probe."""

    glyph_id: int
    bounding_box: BoundingBox

    def to_dict(self) -> dict[str, Any]:
        return {"glyphId": self.glyph_id, "bb": self.bounding_box.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarkComponent":
        return cls(
            glyph_id=int(data["glyphId"]),
            bounding_box=BoundingBox.from_dict(data["bb"]),
        )


@dataclass(frozen=True, slots=True)
class MarkMetric:
    """Measurement of a dependent vowel or diacritic next to the base.

    Attributes:
        glyph_id: Glyph of the mark (the fused glyph when merged)
        bounding_box: Box of the mark's own glyphs, or the fused cluster box
        cluster_box: Box of the whole ``base + mark`` probe
        components: Every glyph the probe shaped into
        multipart: True when more than one non-base glyph remains
        merged: True when the probe collapsed into a single glyph
        delta: Overflow beyond the isolated base box (merged marks only)
    """

    glyph_id: int
    bounding_box: BoundingBox
    cluster_box: BoundingBox
    components: tuple[MarkComponent, ...] = field(default=())
    multipart: bool = False
    merged: bool = False
    delta: OverflowDelta | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "glyphId": self.glyph_id,
            "bb": self.bounding_box.to_dict(),
            "clusterBB": self.cluster_box.to_dict(),
            "components": [c.to_dict() for c in self.components],
            "multipart": self.multipart,
        }
        if self.merged:
            data["merged"] = True
        if self.delta is not None:
            data["delta"] = self.delta.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarkMetric":
        delta = data.get("delta")
        return cls(
            glyph_id=int(data["glyphId"]),
            bounding_box=BoundingBox.from_dict(data["bb"]),
            cluster_box=BoundingBox.from_dict(data.get("clusterBB") or data["bb"]),
            components=tuple(MarkComponent.from_dict(c) for c in data.get("components") or []),
            multipart=bool(data.get("multipart", False)),
            merged=bool(data.get("merged", False)),
            delta=OverflowDelta.from_dict(delta) if delta else None,
        )


def _dump(table: dict[int, Any]) -> dict[str, Any]:
    return {str(cp): metric.to_dict() for cp, metric in sorted(table.items())}


@dataclass(frozen=True)
class FontMetrics:
    """Measured Khmer glyph geometry of one font.

    Attributes:
        font_id: Catalog id of the measured font
        units_per_em: Font design grid
        base_box: Isolated box of the neutral base consonant (U+1780)
        consonants: Isolated consonant measurements
        independent_vowels: Isolated independent vowel measurements
        subscripts: Subscript form measurements, keyed by consonant
        vowels: Dependent vowel measurements
        diacritics: Diacritic and sign measurements
    """

    font_id: str
    units_per_em: int = 1000
    base_box: BoundingBox | None = None
    consonants: dict[int, GlyphMetric] = field(default_factory=dict)
    independent_vowels: dict[int, GlyphMetric] = field(default_factory=dict)
    subscripts: dict[int, SubscriptMetric] = field(default_factory=dict)
    vowels: dict[int, MarkMetric] = field(default_factory=dict)
    diacritics: dict[int, MarkMetric] = field(default_factory=dict)

    def base_metric(self, code_point: int | None) -> GlyphMetric | None:
        """Isolated measurement of a base consonant or independent vowel."""
        if code_point is None:
            return None
        return self.consonants.get(code_point) or self.independent_vowels.get(code_point)

    def subscript(self, code_point: int | None) -> SubscriptMetric | None:
        return self.subscripts.get(code_point) if code_point is not None else None

    def vowel(self, code_point: int | None) -> MarkMetric | None:
        return self.vowels.get(code_point) if code_point is not None else None

    def diacritic(self, code_point: int | None) -> MarkMetric | None:
        return self.diacritics.get(code_point) if code_point is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the metrics API format."""
        return {
            "fontId": self.font_id,
            "unitsPerEm": self.units_per_em,
            "baseBB": self.base_box.to_dict() if self.base_box else None,
            "consonants": _dump(self.consonants),
            "subscripts": _dump(self.subscripts),
            "vowels": _dump(self.vowels),
            "indepVowels": _dump(self.independent_vowels),
            "diacritics": _dump(self.diacritics),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontMetrics":
        """Deserialize from the metrics API format."""
        base = data.get("baseBB")
        return cls(
            font_id=str(data.get("fontId") or "auto"),
            units_per_em=int(data.get("unitsPerEm") or 1000),
            base_box=BoundingBox.from_dict(base) if base else None,
            consonants={
                int(cp): GlyphMetric.from_dict(v) for cp, v in (data.get("consonants") or {}).items()
            },
            independent_vowels={
                int(cp): GlyphMetric.from_dict(v) for cp, v in (data.get("indepVowels") or {}).items()
            },
            subscripts={
                int(cp): SubscriptMetric.from_dict(v) for cp, v in (data.get("subscripts") or {}).items()
            },
            vowels={int(cp): MarkMetric.from_dict(v) for cp, v in (data.get("vowels") or {}).items()},
            diacritics={
                int(cp): MarkMetric.from_dict(v) for cp, v in (data.get("diacritics") or {}).items()
            },
        )
