"""Configuration settings for Glyph Lab."""

from pathlib import Path

from pydantic import BaseModel, Field


class SegmentationConfig(BaseModel):
    """Tuned constants for zone and part geometry.

    These values encode how Khmer fonts commonly draw their marks. They are
    only used where real font metrics are missing or need a floor, and all
    lengths are in font design units at a 1000 UPM scale.
    """

    fallback_top_fraction: float = Field(
        default=0.20,
        ge=0.0,
        le=0.5,
        description="Share of the cluster height reserved above the body when no metrics exist",
    )
    fallback_bottom_fraction: float = Field(
        default=0.36,
        ge=0.0,
        le=0.6,
        description="Share of the cluster height reserved below the body when no metrics exist",
    )
    top_slice_fraction: float = Field(
        default=0.22,
        ge=0.05,
        le=0.5,
        description="Default TOP slice height as a share of the cluster height",
    )
    left_slice_fraction: float = Field(
        default=0.28,
        ge=0.05,
        le=0.5,
        description="Default LEFT slice width as a share of the cluster width",
    )
    aa_height_fraction: float = Field(
        default=0.26,
        ge=0.05,
        le=0.6,
        description="Fused right-vowel slice width as a share of the cluster height",
    )
    aa_width_cap: float = Field(
        default=0.45,
        ge=0.1,
        le=0.9,
        description="Upper bound of the fused right-vowel slice as a share of the cluster width",
    )
    delta_threshold: float = Field(
        default=2.0,
        ge=0.0,
        description="Minimum overflow delta that counts as a fused mark",
    )
    metrics_tail_threshold: float = Field(
        default=10.0,
        ge=0.0,
        description="Minimum measured right delta trusted for tail widths",
    )
    min_slice: float = Field(
        default=24.0,
        ge=0.0,
        description="Smallest width kept for either side of a tail split",
    )
    min_slice_fraction: float = Field(
        default=0.15,
        ge=0.0,
        le=0.5,
        description="Smallest split side as a share of the component width",
    )
    tail_bias: float = Field(
        default=0.66,
        ge=0.5,
        le=0.9,
        description="Minimum base share when a vowel tail is fused with a subscript",
    )
    subscript_clamp: float = Field(
        default=0.64,
        ge=0.0,
        le=1.0,
        description="Share of the subscript width a right vowel tail may not start before",
    )
    trailing_edge_tolerance: float = Field(
        default=8.0,
        ge=0.0,
        description="Slack when testing whether a component reaches the base's right edge",
    )
    aa_area_ratio: float = Field(
        default=0.4,
        gt=0.0,
        le=1.0,
        description="Second component below this share of the base area marks an AA ligature",
    )
    split_tail_fraction: float = Field(
        default=0.35,
        gt=0.0,
        le=0.9,
        description="Fallback vowel tail width as a share of the base width",
    )
    split_tail_minimum: float = Field(
        default=120.0,
        ge=0.0,
        description="Fallback vowel tail minimum width",
    )
    max_split_components: int = Field(
        default=6,
        ge=1,
        le=12,
        description="Most components a structural vowel split will handle",
    )
    subscript_pad_x: float = Field(
        default=0.40,
        ge=0.0,
        le=1.0,
        description="Horizontal padding added to whole-component subscript clips",
    )
    subscript_pad_y: float = Field(
        default=0.30,
        ge=0.0,
        le=1.0,
        description="Vertical padding added to whole-component subscript clips",
    )


class StackedModeConfig(BaseModel):
    """Configuration for narrow stacked clusters such as ``ខ្ញុំ``."""

    enabled: bool = Field(
        default=True,
        description="Split collapsed base+subscript+vowel+sign stacks into bands",
    )
    area_ratio: float = Field(
        default=2.2,
        ge=1.0,
        description="Largest component area over the second that marks a collapsed shape",
    )
    max_components: int = Field(
        default=3,
        ge=1,
        le=6,
        description="Most components a collapsed stack may report",
    )
    coeng_width_fraction: float = Field(
        default=0.28,
        gt=0.0,
        lt=1.0,
        description="Share of the bottom band given to the coeng",
    )
    coeng_min_width: float = Field(
        default=50.0,
        ge=0.0,
        description="Smallest coeng slice width",
    )
    vowel_width_fraction: float = Field(
        default=0.45,
        gt=0.0,
        le=1.0,
        description="Width of the centered bottom-vowel slice as a share of the band",
    )
    vowel_min_width: float = Field(
        default=40.0,
        ge=0.0,
        description="Smallest bottom-vowel slice width",
    )
    whitelist: list[str] = Field(
        default_factory=list,
        description="If non-empty, only these cluster texts may use stacked mode",
    )
    blacklist: list[str] = Field(
        default_factory=list,
        description="Cluster texts that never use stacked mode",
    )

    def allows(self, cluster_text: str) -> bool:
        """Check the white and black lists for a cluster text."""
        if cluster_text in self.blacklist:
            return False
        return not self.whitelist or cluster_text in self.whitelist


def parse_features(features: str | None) -> dict[str, int]:
    """Parse a feature list such as ``"liga:0,ccmp:0"``.

    Pairs without a value are ignored and unparsable values count as 0.

    Args:
        features: Comma-separated ``tag:value`` pairs

    Returns:
        Feature dict for HarfBuzz
    """
    result: dict[str, int] = {}
    if not features:
        return result
    for pair in features.split(","):
        tag, sep, value = pair.strip().partition(":")
        tag = tag.strip()
        if not tag or not sep:
            continue
        try:
            result[tag] = int(value.strip())
        except ValueError:
            result[tag] = 0
    return result


class ShapingConfig(BaseModel):
    """Configuration for HarfBuzz shaping requests."""

    default_font: str = Field(
        default="auto",
        description="Font id used when none is given ('auto' = first available)",
    )
    features: str = Field(
        default="",
        description="Default OpenType features, e.g. 'liga:0,ccmp:0'",
    )
    cluster_level: int = Field(
        default=0,
        ge=0,
        le=2,
        description="HarfBuzz cluster level",
    )

    def feature_map(self) -> dict[str, int]:
        return parse_features(self.features)


class FontEntry(BaseModel):
    """One font of the catalog."""

    id: str
    label: str
    path: Path


class FontCatalogConfig(BaseModel):
    """Fonts the lab can shape with, in preference order."""

    fonts: list[FontEntry] = Field(
        default_factory=lambda: [
            FontEntry(
                id="khmer-os-battambang",
                label="Khmer OS Battambang",
                path=Path("fonts/KhmerOSBattambang.ttf"),
            ),
            FontEntry(
                id="khmer-os-siemreap",
                label="Khmer OS Siemreap",
                path=Path("fonts/KhmerOS_siemreap.ttf"),
            ),
            FontEntry(
                id="noto-sans-khmer",
                label="Noto Sans Khmer",
                path=Path("fonts/NotoSansKhmer-Regular.ttf"),
            ),
        ],
        description="Catalog entries; relative paths resolve against the working directory",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GlyphLabSettings(BaseModel):
    """Main application settings."""

    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    stacked: StackedModeConfig = Field(default_factory=StackedModeConfig)
    shaping: ShapingConfig = Field(default_factory=ShapingConfig)
    fonts: FontCatalogConfig = Field(default_factory=FontCatalogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GlyphLabSettings:
    """Get default application settings."""
    return GlyphLabSettings()
