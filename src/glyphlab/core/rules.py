"""Static Khmer rendering tables.

- Vowel and sign attachment zones
- Dependent vowels that force a structural split of the base glyph
- Explicit subscript + vowel combinations that need a three-way split
- Display colors per category and consonant series
"""

from dataclasses import dataclass

from glyphlab.core.classifier import consonant_series
from glyphlab.domain import COENG, Category, Unit, Zone

AA = 0x17B6

# Vowels whose glyph wraps around or extends the base consonant
SPLIT_BASE_FOR_DEPENDENT_VOWELS = frozenset({0x17BE, 0x17BF, 0x17C0, 0x17C4, 0x17C5})

# Vowels that sit fully below the base
BOTTOM_VOWELS = frozenset({0x17BB, 0x17BC, 0x17BD})

# Vowels whose right-hand tail may be fused with the base or a subscript
RIGHT_TAIL_VOWELS = frozenset({AA, 0x17C4, 0x17C5})

_TOP_ONLY = (Zone.TOP,)
_LEFT_RIGHT = (Zone.LEFT, Zone.RIGHT)
_RICH = (Zone.LEFT, Zone.RIGHT, Zone.TOP, Zone.BOTTOM)

VOWEL_ZONES: dict[int, tuple[Zone, ...]] = {
    0x17B6: (Zone.RIGHT,),
    0x17B7: _TOP_ONLY,
    0x17B8: _TOP_ONLY,
    0x17B9: _TOP_ONLY,
    0x17BA: _TOP_ONLY,
    0x17BB: (Zone.BOTTOM,),
    0x17BC: (Zone.BOTTOM,),
    0x17BD: (Zone.BOTTOM,),
    0x17BE: (Zone.LEFT, Zone.TOP),
    0x17BF: _RICH,
    0x17C0: _RICH,
    0x17C1: (Zone.LEFT,),
    0x17C2: (Zone.LEFT,),
    0x17C3: (Zone.LEFT,),
    0x17C4: _LEFT_RIGHT,
    0x17C5: _LEFT_RIGHT,
    # Signs
    0x17C6: _TOP_ONLY,
    0x17C7: (Zone.RIGHT,),
    0x17C8: (Zone.RIGHT,),
    **{cp: _TOP_ONLY for cp in range(0x17C9, 0x17D2)},
    0x17D3: _TOP_ONLY,
    0x17DD: _TOP_ONLY,
}

# Vowels drawn (at least partly) before the base consonant
LEFT_ATTACHING = frozenset(cp for cp, zones in VOWEL_ZONES.items() if Zone.LEFT in zones)


def vowel_zones(code_point: int | None) -> tuple[Zone, ...]:
    """Zones a vowel or sign renders in; unknown codepoints go RIGHT."""
    if code_point is None:
        return (Zone.RIGHT,)
    return VOWEL_ZONES.get(code_point, (Zone.RIGHT,))


def should_split_base(code_point: int | None) -> bool:
    return code_point in SPLIT_BASE_FOR_DEPENDENT_VOWELS


def is_structural_vowel(code_point: int | None) -> bool:
    """AA or a vowel from the split set."""
    return code_point == AA or should_split_base(code_point)


def has_prepositive(units: list[Unit]) -> bool:
    """Check whether any unit is a vowel drawn left of the base."""
    return any(unit.code_point in LEFT_ATTACHING for unit in units)


def semantic_zone(category: Category, code_point: int | None) -> Zone:
    """Map a unit category (and codepoint) to the zone it renders in."""
    if category.is_base:
        return Zone.BASE
    if category.is_subscript_chain:
        return Zone.BOTTOM
    if category is Category.DIACRITIC_SIGN:
        return Zone.TOP
    if category is Category.DEPENDENT_VOWEL:
        if code_point in BOTTOM_VOWELS:
            return Zone.BOTTOM
        zones = vowel_zones(code_point)
        for zone in (Zone.LEFT, Zone.RIGHT, Zone.TOP, Zone.BOTTOM):
            if zone in zones:
                return zone
        return Zone.RIGHT
    return Zone.UNKNOWN


def primary_zone(unit: Unit) -> Zone | None:
    """Zone a unit occupies in an outline split, or None if it has no slice.

    Left-attaching vowels take LEFT even when they also reach right or top.
    ``other`` and numeral units get no slice.
    """
    cp = unit.code_point
    category = unit.category
    if category.is_base:
        return Zone.BASE
    if category.is_subscript_chain:
        return Zone.BOTTOM
    if cp in (AA, 0x17C7, 0x17C8):
        return Zone.RIGHT
    if cp in LEFT_ATTACHING:
        return Zone.LEFT
    if cp in BOTTOM_VOWELS:
        return Zone.BOTTOM
    if category is Category.DEPENDENT_VOWEL:
        return vowel_zones(cp)[0]
    if category is Category.DIACRITIC_SIGN:
        return Zone.TOP
    return None


@dataclass(frozen=True, slots=True)
class CombinationRule:
    """Bespoke split for a subscript + vowel pair."""

    split_mode: str
    description: str


SUBSCRIPT_VOWEL_COMBINATIONS: dict[tuple[str, int], CombinationRule] = {
    ("ប", AA): CombinationRule(
        split_mode="three-way",
        description="ក្បា pattern - base + subscript + vowel",
    ),
}


def subscript_vowel_rule(subscript_text: str, vowel_text: str) -> CombinationRule | None:
    """Look up the combination rule for a subscript and a vowel.

    Args:
        subscript_text: Subscript consonant, with or without its coeng mark
        vowel_text: Dependent vowel

    Returns:
        Matching rule, or None
    """
    if not subscript_text or not vowel_text:
        return None
    consonant = subscript_text.lstrip(chr(COENG))
    return SUBSCRIPT_VOWEL_COMBINATIONS.get((consonant, ord(vowel_text[0])))


FULL_PART_COLOR = "#111"


def color_for_category(category: Category, char: str) -> str:
    """Display color of a part.

    Consonants are colored by series: first-series bases orange with yellow
    subscripts, second-series bases purple with blue subscripts.
    """
    if category in (Category.BASE_CONSONANT, Category.SUBSCRIPT_CONSONANT):
        consonant = char.lstrip(chr(COENG))
        if consonant_series(consonant) == "a_series":
            return "#facc15" if category is Category.SUBSCRIPT_CONSONANT else "#f97316"
        return "#3b82f6" if category is Category.SUBSCRIPT_CONSONANT else "#a855f7"
    if category in (Category.DEPENDENT_VOWEL, Category.INDEPENDENT_VOWEL):
        return "#ef4444"
    if category is Category.DIACRITIC_SIGN:
        return "#facc15"
    if category is Category.NUMERAL:
        return "#22c55e"
    if category is Category.FULL:
        return FULL_PART_COLOR
    return "#9ca3af"
