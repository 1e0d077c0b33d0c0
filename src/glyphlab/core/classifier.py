"""Khmer codepoint classification.

Pure range lookups over the Khmer block (U+1780..U+17FF). Nothing here
fails: codepoints outside the recognized ranges are classified ``other``.
"""

from glyphlab.domain.unit import COENG, Category

CONSONANT_START = 0x1780
CONSONANT_END = 0x17A2
INDEPENDENT_VOWEL_START = 0x17A3
INDEPENDENT_VOWEL_END = 0x17B3
DEPENDENT_VOWEL_START = 0x17B6
DEPENDENT_VOWEL_END = 0x17C5
DIACRITIC_RANGES = ((0x17C6, 0x17D3), (0x17DD, 0x17DD))
NUMERAL_START = 0x17E0
NUMERAL_END = 0x17E9

# Second-register consonants; all other consonants belong to the first
O_SERIES = frozenset(
    {
        0x1782, 0x1784, 0x1786, 0x1788, 0x178A, 0x178C, 0x178E, 0x1790, 0x1792,
        0x1794, 0x1796, 0x1798, 0x179A, 0x179C, 0x179E, 0x17A0, 0x17A2,
    }
)


def _cp(char: str | int | None) -> int:
    if char is None or char == "":
        return -1
    if isinstance(char, int):
        return char
    return ord(char[0])


def is_consonant(char: str | int | None) -> bool:
    return CONSONANT_START <= _cp(char) <= CONSONANT_END


def is_independent_vowel(char: str | int | None) -> bool:
    return INDEPENDENT_VOWEL_START <= _cp(char) <= INDEPENDENT_VOWEL_END


def is_dependent_vowel(char: str | int | None) -> bool:
    return DEPENDENT_VOWEL_START <= _cp(char) <= DEPENDENT_VOWEL_END


def is_diacritic_or_sign(char: str | int | None) -> bool:
    code_point = _cp(char)
    return any(start <= code_point <= end for start, end in DIACRITIC_RANGES)


def is_numeral(char: str | int | None) -> bool:
    return NUMERAL_START <= _cp(char) <= NUMERAL_END


def classify(char: str | int, prev: str | int | None = "") -> Category:
    """Classify one Khmer character.

    Args:
        char: Character (or codepoint) to classify
        prev: Character immediately before it, if any

    Returns:
        Category of the character; consonants directly after a coeng mark
        are ``subscript_consonant``
    """
    code_point = _cp(char)
    if is_consonant(code_point):
        if _cp(prev) == COENG:
            return Category.SUBSCRIPT_CONSONANT
        return Category.BASE_CONSONANT
    if is_independent_vowel(code_point):
        return Category.INDEPENDENT_VOWEL
    if is_dependent_vowel(code_point):
        return Category.DEPENDENT_VOWEL
    if code_point == COENG:
        return Category.COENG
    if is_diacritic_or_sign(code_point):
        return Category.DIACRITIC_SIGN
    if is_numeral(code_point):
        return Category.NUMERAL
    return Category.OTHER


def consonant_series(char: str | int | None) -> str | None:
    """Return ``a_series`` or ``o_series`` for a consonant, else None."""
    if not is_consonant(char):
        return None
    return "o_series" if _cp(char) in O_SERIES else "a_series"
