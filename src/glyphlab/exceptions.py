"""Exception hierarchy for Glyph Lab."""


class GlyphLabError(Exception):
    """Base exception for all Glyph Lab errors."""

    pass


class FontError(GlyphLabError):
    """Errors related to font lookup or loading."""

    pass


class FontNotFoundError(FontError):
    """No usable font matches the requested id."""

    def __init__(self, font_id: str, reason: str = "no usable font in catalog") -> None:
        self.font_id = font_id
        self.reason = reason
        super().__init__(f"Font '{font_id}' not available: {reason}")


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class ShapingError(GlyphLabError):
    """The shaping engine could not shape a string."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Failed to shape {text!r}: {reason}")


class UnitError(GlyphLabError):
    """Errors building or validating semantic units."""

    pass


class UnknownCategoryError(UnitError):
    """A category string does not name a known unit category."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown unit category: {value!r}")


class ClusterDataError(GlyphLabError):
    """Malformed glyph cluster data received at the boundary."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid cluster data: {reason}")
