"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from glyphlab.config import (
    GlyphLabSettings,
    SegmentationConfig,
    ShapingConfig,
    StackedModeConfig,
    get_default_settings,
    parse_features,
)


class TestParseFeatures:
    """Tests for parse_features()."""

    def test_pairs(self) -> None:
        """Test a plain feature list."""
        assert parse_features("liga:0,ccmp:0") == {"liga": 0, "ccmp": 0}

    def test_whitespace_and_bad_values(self) -> None:
        """Test that spaces are trimmed and bad values count as 0."""
        assert parse_features(" kern : 1 , mark:x ") == {"kern": 1, "mark": 0}

    def test_pairs_without_value_are_ignored(self) -> None:
        """Test that entries without a separator or tag are dropped."""
        assert parse_features("liga,:1,,abvs:1") == {"abvs": 1}

    def test_empty(self) -> None:
        """Test empty input."""
        assert parse_features(None) == {}
        assert parse_features("") == {}


class TestSettings:
    """Tests for the settings models."""

    def test_defaults(self) -> None:
        """Test default settings."""
        settings = get_default_settings()
        assert settings.shaping.default_font == "auto"
        assert settings.shaping.cluster_level == 0
        assert settings.segmentation.subscript_pad_x == 0.40
        assert [f.id for f in settings.fonts.fonts] == [
            "khmer-os-battambang",
            "khmer-os-siemreap",
            "noto-sans-khmer",
        ]

    def test_feature_map(self) -> None:
        """Test the configured default features."""
        assert ShapingConfig(features="liga:0").feature_map() == {"liga": 0}
        assert ShapingConfig().feature_map() == {}

    def test_validation(self) -> None:
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            ShapingConfig(cluster_level=3)
        with pytest.raises(ValidationError):
            SegmentationConfig(tail_bias=0.2)

    def test_nested_override(self) -> None:
        """Test overriding nested sections."""
        settings = GlyphLabSettings(segmentation=SegmentationConfig(min_slice=10))
        assert settings.segmentation.min_slice == 10
        assert settings.stacked.enabled


class TestStackedModeConfig:
    """Tests for stacked mode white and black lists."""

    def test_allows_by_default(self) -> None:
        """Test that every cluster is allowed without lists."""
        assert StackedModeConfig().allows("ខ្ញុំ")

    def test_blacklist_wins(self) -> None:
        """Test that the blacklist overrides the whitelist."""
        config = StackedModeConfig(whitelist=["ខ្ញុំ"], blacklist=["ខ្ញុំ"])
        assert not config.allows("ខ្ញុំ")

    def test_whitelist(self) -> None:
        """Test that a whitelist restricts stacked mode."""
        config = StackedModeConfig(whitelist=["ខ្ញុំ"])
        assert config.allows("ខ្ញុំ")
        assert not config.allows("ក្ញុំ")
