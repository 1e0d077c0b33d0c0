"""Geometry helpers for positioned glyph components.

Component boxes are local to the component's pen position. Horizontal
comparisons between components therefore add the pen offset ``x`` (and
vertical ones ``y``), while clip rectangles stay in local coordinates.

Key functions:
- component_area, center_x, center_y, left_edge, right_edge: Component measures
- compute_right_tail_split: Split a width into base and right-tail slices
- compute_right_biased_tail_split: Same, keeping most of the width on the base
- pick_base_component: Find the base consonant's component
"""

from collections.abc import Sequence

from glyphlab.core.rules import AA, has_prepositive
from glyphlab.domain import FontMetrics, GlyphComponent, Rect, Unit


def component_area(component: GlyphComponent | None) -> float:
    if component is None:
        return 0.0
    return component.bounding_box.area


def has_box(component: GlyphComponent | None) -> bool:
    """Check whether a component carries a non-degenerate ink box."""
    return component is not None and not component.bounding_box.is_empty()


def center_x(component: GlyphComponent) -> float:
    return component.x + component.bounding_box.center_x


def center_y(component: GlyphComponent) -> float:
    return component.y + component.bounding_box.center_y


def left_edge(component: GlyphComponent) -> float:
    return component.x + component.bounding_box.x1


def right_edge(component: GlyphComponent) -> float:
    return component.x + component.bounding_box.x2


def component_rect(component: GlyphComponent | None) -> Rect | None:
    """Clip rectangle covering a component's whole box (local coordinates)."""
    if component is None:
        return None
    return component.bounding_box.to_rect()


def to_local_x(component: GlyphComponent, absolute_x: float) -> float:
    """Convert a cluster-space x coordinate into the component's local space."""
    return absolute_x - component.x


def compute_right_tail_split(
    total_width: float,
    preferred_tail: float,
    min_slice: float = 24.0,
    min_slice_fraction: float = 0.15,
) -> tuple[float, float]:
    """Split a component width into a base slice and a right tail.

    Both slices keep a minimum width so that narrow boxes never lose a part
    entirely. The two widths always add up to the total width.

    Args:
        total_width: Width to split
        preferred_tail: Desired tail width
        min_slice: Absolute minimum slice width
        min_slice_fraction: Minimum slice width as a share of the total

    Returns:
        Tuple of (base width, tail width)
    """
    width = max(0.0, total_width)
    if width <= 0:
        return 0.0, 0.0

    smallest = max(min_slice, width * min_slice_fraction)
    max_tail = max(smallest, width - smallest)
    tail = min(max_tail, max(smallest, preferred_tail or 0.0))
    tail = min(tail, width)
    return width - tail, tail


def compute_right_biased_tail_split(
    total_width: float,
    preferred_tail: float,
    bias: float = 0.66,
    min_slice: float = 24.0,
    min_slice_fraction: float = 0.15,
) -> tuple[float, float]:
    """Split a width like compute_right_tail_split, keeping ``bias`` on the base.

    Used when a vowel tail is fused with a subscript, where a wide tail would
    swallow the subscript's ink.

    Returns:
        Tuple of (base width, tail width)
    """
    width = max(0.0, total_width)
    if width <= 0:
        return 0.0, 0.0

    base, _ = compute_right_tail_split(width, preferred_tail, min_slice, min_slice_fraction)
    base = max(base, width * bias)
    base = min(width - min_slice, max(min_slice, base))
    base = min(width, max(0.0, base))
    return base, width - base


def preferred_right_tail_width(
    vowel_cp: int | None,
    base_width: float,
    metrics: FontMetrics | None = None,
    threshold: float = 10.0,
) -> float:
    """Typical width of a right vowel tail fused with the base.

    Measured tails are trusted when wider than ``threshold`` but never made
    narrower than the typical width.
    """
    if vowel_cp == AA:
        fallback = max(90.0, base_width * 0.28)
    elif vowel_cp in (0x17C4, 0x17C5):
        fallback = max(110.0, base_width * 0.32)
    else:
        fallback = max(80.0, base_width * 0.26)

    vowel = metrics.vowel(vowel_cp) if metrics else None
    if vowel is not None and vowel.delta is not None and vowel.delta.right > threshold:
        return max(fallback, vowel.delta.right)
    return fallback


def preferred_left_head_width(
    vowel_cp: int | None,
    base_width: float,
    metrics: FontMetrics | None = None,
    threshold: float = 10.0,
) -> float:
    """Typical width of a prepositive vowel fused in front of the base."""
    fallback = max(80.0, base_width * 0.26)
    vowel = metrics.vowel(vowel_cp) if metrics else None
    if vowel is not None and vowel.delta is not None and vowel.delta.left > threshold:
        return max(fallback, vowel.delta.left)
    return fallback


def pick_mark_component(
    components: Sequence[GlyphComponent],
    exclude: GlyphComponent | None = None,
) -> GlyphComponent | None:
    """Component most likely to be a mark: smallest advance, then smallest area."""
    candidates = [c for c in components if c is not exclude] or list(components)
    if not candidates:
        return None
    return min(candidates, key=lambda c: (c.advance, component_area(c)))


def _by_glyph_id(
    components: Sequence[GlyphComponent],
    base_cp: int | None,
    metrics: FontMetrics | None,
) -> GlyphComponent | None:
    if metrics is None:
        return None
    known = metrics.base_metric(base_cp)
    if known is None:
        return None
    return next((c for c in components if c.glyph_id == known.glyph_id), None)


def pick_largest_component(components: Sequence[GlyphComponent]) -> GlyphComponent | None:
    if not components:
        return None
    return max(components, key=component_area)


def pick_base_component(
    components: Sequence[GlyphComponent],
    base_cp: int | None,
    units: list[Unit],
    metrics: FontMetrics | None = None,
) -> GlyphComponent | None:
    """Find the component drawing the base consonant.

    Order of preference:
    1. The component whose glyph id matches the measured isolated glyph
    2. The leftmost component, unless a vowel is drawn left of the base
    3. The largest component

    Args:
        components: Cluster components
        base_cp: Codepoint of the base consonant, if known
        units: Units of the cluster
        metrics: Font metrics, if measured

    Returns:
        Base component, or None when there are no components
    """
    if not components:
        return None
    if len(components) == 1:
        return components[0]

    match = _by_glyph_id(components, base_cp, metrics)
    if match is not None:
        return match

    if not has_prepositive(units):
        return min(components, key=left_edge)

    return max(components, key=component_area)


def pick_base_for_coeng_split(
    components: Sequence[GlyphComponent],
    base_cp: int | None,
    metrics: FontMetrics | None = None,
) -> GlyphComponent | None:
    """Find the base component of a ``base + coeng + subscript + vowel`` chain.

    The base sits above the subscript forms, so the topmost component wins
    when the glyph id is unknown; ties go to the larger component.
    """
    candidates = [c for c in components if has_box(c)]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    match = _by_glyph_id(candidates, base_cp, metrics)
    if match is not None:
        return match

    return min(candidates, key=lambda c: (center_y(c), -component_area(c)))
