"""Semantic units of Khmer source text.

A unit is one teaching element of a cluster: a base consonant, a coeng mark,
a subscript consonant, a vowel sign or a diacritic. The ordered unit list of
a text always tiles the text exactly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from glyphlab.exceptions import UnknownCategoryError

COENG = 0x17D2


class Category(str, Enum):
    """Semantic category of a unit or part.

    ``FULL`` is only used for whole-glyph parts; the classifier never
    returns it.
    """

    BASE_CONSONANT = "base_consonant"
    INDEPENDENT_VOWEL = "independent_vowel"
    DEPENDENT_VOWEL = "dependent_vowel"
    SUBSCRIPT_CONSONANT = "subscript_consonant"
    COENG = "coeng"
    DIACRITIC_SIGN = "diacritic_sign"
    NUMERAL = "numeral"
    OTHER = "other"
    FULL = "full"

    @classmethod
    def parse(cls, value: object) -> "Category":
        """Parse a category name received from outside the core.

        Args:
            value: Category name such as ``"base_consonant"``

        Returns:
            Matching Category

        Raises:
            UnknownCategoryError: If the value names no category
        """
        if isinstance(value, Category):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownCategoryError(value) from None

    @property
    def is_base(self) -> bool:
        """Base consonants and independent vowels anchor a cluster."""
        return self in (Category.BASE_CONSONANT, Category.INDEPENDENT_VOWEL)

    @property
    def is_subscript_chain(self) -> bool:
        """Coeng marks and subscript consonants sit below the base."""
        return self in (Category.COENG, Category.SUBSCRIPT_CONSONANT)


@dataclass(frozen=True)
class Unit:
    """One semantic unit of the source text.

    A unit tagged ``coeng`` whose codepoint is not U+17D2 is a consonant
    playing a subscript role, and is re-tagged ``subscript_consonant`` on
    construction.

    Attributes:
        id: Stable identifier (``unit-<index>``)
        text: Source substring covered by the unit
        category: Semantic category
        source_start: Start offset in the source text (codepoints)
        source_end: End offset in the source text (exclusive)
        code_points: Codepoints of ``text``
    """

    id: str
    text: str
    category: Category
    source_start: int
    source_end: int
    code_points: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.code_points:
            object.__setattr__(self, "code_points", tuple(ord(ch) for ch in self.text))
        if self.category is Category.COENG and self.code_point != COENG:
            object.__setattr__(self, "category", Category.SUBSCRIPT_CONSONANT)

    @property
    def code_point(self) -> int | None:
        """First codepoint of the unit, or None for an empty unit."""
        return self.code_points[0] if self.code_points else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary in the units wire format
        """
        return {
            "id": self.id,
            "text": self.text,
            "codePoints": list(self.code_points),
            "category": self.category.value,
            "sourceStart": self.source_start,
            "sourceEnd": self.source_end,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Unit":
        """Deserialize from dictionary.

        Args:
            data: Dictionary in the units wire format

        Returns:
            Unit instance

        Raises:
            UnknownCategoryError: If the category is not recognized
        """
        return cls(
            id=str(data["id"]),
            text=data["text"],
            category=Category.parse(data["category"]),
            source_start=int(data["sourceStart"]),
            source_end=int(data["sourceEnd"]),
            code_points=tuple(data.get("codePoints") or ()),
        )
