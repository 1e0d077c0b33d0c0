"""Tests for the static Khmer rendering tables."""

from glyphlab.core.rules import (
    LEFT_ATTACHING,
    color_for_category,
    has_prepositive,
    is_structural_vowel,
    primary_zone,
    semantic_zone,
    should_split_base,
    subscript_vowel_rule,
    vowel_zones,
)
from glyphlab.core.units import build_units
from glyphlab.domain import Category, Zone


class TestVowelTables:
    """Tests for vowel zone lookups."""

    def test_zones(self) -> None:
        """Test representative vowel zones."""
        assert vowel_zones(0x17B6) == (Zone.RIGHT,)
        assert vowel_zones(0x17BB) == (Zone.BOTTOM,)
        assert vowel_zones(0x17C4) == (Zone.LEFT, Zone.RIGHT)
        assert vowel_zones(0x17C6) == (Zone.TOP,)

    def test_unknown_goes_right(self) -> None:
        """Test the default zone for unlisted codepoints."""
        assert vowel_zones(0x17E0) == (Zone.RIGHT,)
        assert vowel_zones(None) == (Zone.RIGHT,)

    def test_left_attaching(self) -> None:
        """Test the set of vowels drawn before the base."""
        assert {0x17BE, 0x17C1, 0x17C4, 0x17C5} <= LEFT_ATTACHING
        assert 0x17B6 not in LEFT_ATTACHING
        assert has_prepositive(build_units("កើ"))
        assert not has_prepositive(build_units("កា"))

    def test_structural(self) -> None:
        """Test the split-base and structural vowel sets."""
        assert should_split_base(0x17C4)
        assert not should_split_base(0x17B6)
        assert is_structural_vowel(0x17B6)
        assert not is_structural_vowel(0x17BB)


class TestZoneMapping:
    """Tests for semantic and primary zones."""

    def test_semantic_zone(self) -> None:
        """Test category to zone mapping."""
        assert semantic_zone(Category.BASE_CONSONANT, 0x1780) is Zone.BASE
        assert semantic_zone(Category.INDEPENDENT_VOWEL, 0x17A5) is Zone.BASE
        assert semantic_zone(Category.COENG, 0x17D2) is Zone.BOTTOM
        assert semantic_zone(Category.DIACRITIC_SIGN, 0x17C6) is Zone.TOP
        assert semantic_zone(Category.DEPENDENT_VOWEL, 0x17BB) is Zone.BOTTOM
        assert semantic_zone(Category.DEPENDENT_VOWEL, 0x17C1) is Zone.LEFT
        assert semantic_zone(Category.DEPENDENT_VOWEL, 0x17B7) is Zone.TOP
        assert semantic_zone(Category.OTHER, 0x41) is Zone.UNKNOWN

    def test_primary_zone(self) -> None:
        """Test zones used by outline splits."""
        units = {u.text: u for u in build_units("ក្ខាោុំ៣")}
        assert primary_zone(units["ក"]) is Zone.BASE
        assert primary_zone(units["្"]) is Zone.BOTTOM
        assert primary_zone(units["ខ"]) is Zone.BOTTOM
        assert primary_zone(units["ា"]) is Zone.RIGHT
        assert primary_zone(units["ោ"]) is Zone.LEFT
        assert primary_zone(units["ុ"]) is Zone.BOTTOM
        assert primary_zone(units["ំ"]) is Zone.TOP
        assert primary_zone(units["៣"]) is None


class TestCombinationRules:
    """Tests for subscript + vowel combinations."""

    def test_known_rule(self) -> None:
        """Test the three-way split rule."""
        rule = subscript_vowel_rule("្ប", "ា")
        assert rule is not None
        assert rule.split_mode == "three-way"
        assert subscript_vowel_rule("ប", "ា") == rule

    def test_no_rule(self) -> None:
        """Test pairs with no rule."""
        assert subscript_vowel_rule("្ក", "ា") is None
        assert subscript_vowel_rule("", "ា") is None


class TestColors:
    """Tests for part colors."""

    def test_series_colors(self) -> None:
        """Test consonant colors per series."""
        assert color_for_category(Category.BASE_CONSONANT, "ក") == "#f97316"
        assert color_for_category(Category.SUBSCRIPT_CONSONANT, "ក") == "#facc15"
        assert color_for_category(Category.BASE_CONSONANT, "គ") == "#a855f7"
        assert color_for_category(Category.SUBSCRIPT_CONSONANT, "្គ") == "#3b82f6"

    def test_other_colors(self) -> None:
        """Test the remaining categories."""
        assert color_for_category(Category.DEPENDENT_VOWEL, "ា") == "#ef4444"
        assert color_for_category(Category.NUMERAL, "៣") == "#22c55e"
        assert color_for_category(Category.FULL, "ក") == "#111"
        assert color_for_category(Category.OTHER, "a") == "#9ca3af"
