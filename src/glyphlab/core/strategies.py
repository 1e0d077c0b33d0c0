"""Part strategies for the glyph part mapper.

Each strategy recognizes one shape of shaped cluster and cuts it into parts.
The mapper evaluates them in order and the first strategy that matches and
returns parts wins. ``build()`` may return None to decline, for example when
the component it needs has no ink box; evaluation then continues with the
next strategy.

Strategies, in evaluation order:
- FullGlyphStrategy: no components, segmentation off
- OutlineZoneSplitStrategy: no components, split the cluster outline by zones
- FusedComponentStrategy: one glyph drawing several characters
- NoBaseStrategy: subscript chains and marks without a base consonant
- NarrowStackedStrategy: collapsed base + subscript + low vowel + sign stacks
- CombinationRuleStrategy: explicit subscript + vowel combinations
- StructuralVowelStrategy: vowels that wrap around or extend the base
- CoengRightVowelStrategy: base + subscript + right-tailed vowel
- CoengLeftVowelStrategy: base + subscript + prepositive vowel
- DefaultAllocatorStrategy: one component per unit
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from glyphlab.config import GlyphLabSettings, SegmentationConfig
from glyphlab.core.geometry import (
    center_x,
    center_y,
    component_area,
    component_rect,
    compute_right_biased_tail_split,
    compute_right_tail_split,
    has_box,
    left_edge,
    pick_base_component,
    pick_base_for_coeng_split,
    pick_largest_component,
    pick_mark_component,
    preferred_left_head_width,
    preferred_right_tail_width,
    right_edge,
    to_local_x,
)
from glyphlab.core.rules import (
    AA,
    BOTTOM_VOWELS,
    FULL_PART_COLOR,
    RIGHT_TAIL_VOWELS,
    color_for_category,
    is_structural_vowel,
    primary_zone,
    should_split_base,
    subscript_vowel_rule,
    vowel_zones,
)
from glyphlab.core.zones import ZoneEngine
from glyphlab.domain import (
    Category,
    FontMetrics,
    GlyphCluster,
    GlyphComponent,
    Part,
    Rect,
    Unit,
    Zone,
)


def full_part(cluster: GlyphCluster) -> Part:
    """One part drawing the whole cluster outline."""
    return Part(
        part_id=f"{cluster.id}-full",
        char=cluster.text,
        category=Category.FULL,
        role="full",
        color=FULL_PART_COLOR,
        outline=cluster.outline,
        clip_rect=cluster.box.to_rect(),
    )


@dataclass(frozen=True)
class MappingContext:
    """Everything a strategy may look at for one cluster.

    Attributes:
        cluster: Shaped cluster being mapped
        units: Units rendered by the cluster, in text order
        settings: Tuned constants
        zone_engine: Zone engine sharing the same constants
        metrics: Font metrics, if measured
        segmentation: Whether fused glyphs should be split at all
    """

    cluster: GlyphCluster
    units: tuple[Unit, ...]
    settings: GlyphLabSettings
    zone_engine: ZoneEngine
    metrics: FontMetrics | None = None
    segmentation: bool = True

    @property
    def components(self) -> tuple[GlyphComponent, ...]:
        return self.cluster.components

    @property
    def config(self) -> SegmentationConfig:
        return self.settings.segmentation

    @property
    def text(self) -> str:
        return "".join(unit.text for unit in self.units)

    @property
    def main_units(self) -> list[Unit]:
        """Units other than diacritics and signs."""
        return [u for u in self.units if u.category is not Category.DIACRITIC_SIGN]

    @property
    def base_unit(self) -> Unit | None:
        return next((u for u in self.units if u.category.is_base), None)

    @property
    def base_cp(self) -> int | None:
        base = self.base_unit
        return base.code_point if base else None

    def first(self, category: Category) -> Unit | None:
        return next((u for u in self.units if u.category is category), None)

    def has(self, category: Category) -> bool:
        return self.first(category) is not None

    def base_component(self) -> GlyphComponent | None:
        return pick_base_component(self.components, self.base_cp, list(self.units), self.metrics)

    def part(
        self,
        suffix: str,
        unit: Unit,
        role: str,
        component: GlyphComponent | None = None,
        clip: Rect | None = None,
        outline: str | None = None,
        zone: Zone = Zone.UNKNOWN,
    ) -> Part:
        return Part(
            part_id=f"{self.cluster.id}-{suffix}",
            char=unit.text,
            category=unit.category,
            zone=zone,
            role=role,
            color=color_for_category(unit.category, unit.text),
            component=component,
            clip_rect=clip,
            outline=outline,
        )

    def mark_parts(self, prefix: str, base: GlyphComponent | None) -> list[Part]:
        """One part per diacritic, on the component most likely to be a mark.

        When the only candidate is the base component itself, the mark gets
        the TOP zone of that component instead of the whole glyph.
        """
        parts = []
        for idx, unit in enumerate(self.units):
            if unit.category is not Category.DIACRITIC_SIGN:
                continue
            component = pick_mark_component(self.components, exclude=base)
            clip = component_rect(component)
            if component is not None and component is base:
                zones = self.zone_engine.compute(
                    component.bounding_box, self.units, self.base_cp, self.metrics
                )
                clip = zones.get(primary_zone(unit) or Zone.TOP) or clip
            parts.append(self.part(f"{prefix}-{idx}", unit, "mark", component, clip))
        return parts


class PartStrategy(ABC):
    """Matcher and handler for one kind of cluster."""

    name: ClassVar[str] = ""

    @abstractmethod
    def matches(self, ctx: MappingContext) -> bool:
        """Check whether this strategy applies to the cluster."""

    @abstractmethod
    def build(self, ctx: MappingContext) -> list[Part] | None:
        """Cut the cluster into parts, or return None to decline."""


class FullGlyphStrategy(PartStrategy):
    """(a) Outline-only cluster with segmentation off: draw it whole."""

    name = "full"

    def matches(self, ctx: MappingContext) -> bool:
        return not ctx.components and not ctx.segmentation

    def build(self, ctx: MappingContext) -> list[Part] | None:
        return [full_part(ctx.cluster)]


class OutlineZoneSplitStrategy(PartStrategy):
    """(b) Outline-only cluster: clip the shared outline by unit zones."""

    name = "outline_zone_split"

    def matches(self, ctx: MappingContext) -> bool:
        return not ctx.components and ctx.segmentation

    def build(self, ctx: MappingContext) -> list[Part] | None:
        if not ctx.units:
            return None
        zones = ctx.zone_engine.compute(ctx.cluster.box, ctx.units, ctx.base_cp, ctx.metrics)
        parts = []
        for idx, unit in enumerate(ctx.units):
            zone = primary_zone(unit)
            rect = zones.get(zone) if zone else None
            if rect is None:
                continue
            parts.append(
                ctx.part(
                    f"geo-{idx}",
                    unit,
                    "topology_split",
                    clip=rect,
                    outline=ctx.cluster.outline,
                    zone=zone,
                )
            )
        return parts


def _is_structural_ligature(ctx: MappingContext) -> bool:
    main = ctx.main_units
    return (
        len(main) == 2
        and main[0].category.is_base
        and main[1].category is Category.DEPENDENT_VOWEL
        and is_structural_vowel(main[1].code_point)
    )


class FusedComponentStrategy(PartStrategy):
    """(c) One fused glyph for several characters: split it by zones.

    Base + AA and base + split-set vowel ligatures are left to the
    structural vowel split when segmentation is on.
    """

    name = "fused_component"

    def matches(self, ctx: MappingContext) -> bool:
        if len(ctx.components) != 1 or len(ctx.cluster.code_points) <= 1:
            return False
        if ctx.segmentation and _is_structural_ligature(ctx):
            return False
        return True

    def build(self, ctx: MappingContext) -> list[Part] | None:
        if not ctx.segmentation:
            return [full_part(ctx.cluster)]
        component = ctx.components[0]
        if not has_box(component) or not ctx.units:
            return None
        zones = ctx.zone_engine.compute(
            component.bounding_box, ctx.units, ctx.base_cp, ctx.metrics
        )
        parts = []
        for idx, unit in enumerate(ctx.units):
            zone = primary_zone(unit)
            rect = zones.get(zone) if zone else None
            if rect is None:
                continue
            parts.append(ctx.part(f"{idx}", unit, "fused_split", component, rect, zone=zone))
        return parts


class NoBaseStrategy(PartStrategy):
    """(d) No base consonant: components are already placed by the shaper."""

    name = "no_base"

    _PREFERENCE: ClassVar[tuple[Category, ...]] = (
        Category.SUBSCRIPT_CONSONANT,
        Category.DEPENDENT_VOWEL,
        Category.DIACRITIC_SIGN,
        Category.COENG,
    )

    def matches(self, ctx: MappingContext) -> bool:
        return bool(ctx.units) and ctx.base_unit is None and bool(ctx.components)

    def build(self, ctx: MappingContext) -> list[Part] | None:
        units = ctx.units
        fallback = next(
            (u for category in self._PREFERENCE for u in units if u.category is category),
            units[0],
        )
        parts = []
        for idx, component in enumerate(ctx.components):
            unit = units[idx] if len(units) == len(ctx.components) else fallback
            parts.append(
                ctx.part(f"direct-{idx}", unit, "direct", component, component_rect(component))
            )
        return parts


class NarrowStackedStrategy(PartStrategy):
    """(e) Collapsed stack such as ``ខ្ញុំ``: cut the main glyph into bands.

    TOP band for the sign, MID for the base, BOTTOM for the subscript chain;
    the coeng takes the left of the bottom band and the low vowel a centered
    slice of it.
    """

    name = "narrow_stacked"

    def matches(self, ctx: MappingContext) -> bool:
        stacked = ctx.settings.stacked
        if not stacked.enabled or not ctx.components:
            return False
        if not stacked.allows(ctx.text):
            return False
        if ctx.base_unit is None:
            return False
        if not all(
            ctx.has(c)
            for c in (Category.COENG, Category.SUBSCRIPT_CONSONANT, Category.DIACRITIC_SIGN)
        ):
            return False
        vowel = ctx.first(Category.DEPENDENT_VOWEL)
        if vowel is None or vowel.code_point not in BOTTOM_VOWELS:
            return False
        if len(ctx.components) > stacked.max_components:
            return False

        areas = sorted((component_area(c) for c in ctx.components), reverse=True)
        biggest = areas[0]
        second = areas[1] if len(areas) > 1 else 0.0
        return biggest > 0 and (second == 0 or biggest / max(1.0, second) >= stacked.area_ratio)

    def build(self, ctx: MappingContext) -> list[Part] | None:
        stacked = ctx.settings.stacked
        main = ctx.base_component() or pick_largest_component(ctx.components)
        if not has_box(main):
            return None

        bb = main.bounding_box
        w = bb.width
        body = ctx.zone_engine.body_rect(bb, ctx.base_cp, ctx.metrics)
        top_h = max(1.0, body.y - bb.y1)
        mid_h = max(1.0, body.height)
        low_y = body.y2
        low_h = max(1.0, bb.y2 - body.y2)
        coeng_w = min(w, max(stacked.coeng_min_width, w * stacked.coeng_width_fraction))
        vowel_w = min(w, max(stacked.vowel_min_width, w * stacked.vowel_width_fraction))

        parts = []
        for idx, unit in enumerate(ctx.units):
            category = unit.category
            if category.is_base:
                clip, role = Rect(bb.x1, body.y, w, mid_h), "stack_base"
            elif category is Category.DIACRITIC_SIGN:
                clip, role = Rect(bb.x1, bb.y1, w, top_h), "stack_diacritic_top"
            elif category is Category.COENG:
                clip, role = Rect(bb.x1, low_y, coeng_w, low_h), "stack_coeng_low_left"
            elif category is Category.SUBSCRIPT_CONSONANT:
                clip, role = Rect(bb.x1 + coeng_w, low_y, w - coeng_w, low_h), "stack_subscript_low"
            elif category is Category.DEPENDENT_VOWEL:
                clip = Rect(bb.x1 + (w - vowel_w) / 2, low_y, vowel_w, low_h)
                role = "stack_dep_vowel_low"
            else:
                clip, role = bb.to_rect(), "stack_full"
            parts.append(ctx.part(f"stack-{idx}", unit, role, main, clip))
        return parts


class CombinationRuleStrategy(PartStrategy):
    """(f) Explicit subscript + vowel combination: three-way split."""

    name = "combination_rule"

    def matches(self, ctx: MappingContext) -> bool:
        subscript = ctx.first(Category.SUBSCRIPT_CONSONANT)
        vowel = ctx.first(Category.DEPENDENT_VOWEL)
        if subscript is None or vowel is None or ctx.base_unit is None:
            return False
        rule = subscript_vowel_rule(subscript.text, vowel.text)
        return rule is not None and rule.split_mode == "three-way" and len(ctx.components) >= 2

    def build(self, ctx: MappingContext) -> list[Part] | None:
        base_unit = ctx.base_unit
        subscript = ctx.first(Category.SUBSCRIPT_CONSONANT)
        vowel = ctx.first(Category.DEPENDENT_VOWEL)
        coeng = ctx.first(Category.COENG)
        base = ctx.base_component()
        if base is None or base_unit is None or subscript is None or vowel is None:
            return None

        config = ctx.config
        base_clip = component_rect(base)
        vowel_part = None
        if has_box(base):
            bb = base.bounding_box
            measured = ctx.metrics.vowel(vowel.code_point) if ctx.metrics else None
            if (
                measured is not None
                and measured.delta is not None
                and measured.delta.right > config.metrics_tail_threshold
            ):
                preferred = measured.delta.right
            else:
                preferred = max(120.0, bb.width * 0.3)
            base_w, tail_w = compute_right_tail_split(
                bb.width, preferred, config.min_slice, config.min_slice_fraction
            )
            base_clip = Rect(bb.x1, bb.y1, base_w, bb.height)
            vowel_part = ctx.part(
                "vowel", vowel, "combo_vowel", base, Rect(bb.x1 + base_w, bb.y1, tail_w, bb.height)
            )

        parts = [ctx.part("base", base_unit, "combo_base", base, base_clip)]
        others = [c for c in ctx.components if c is not base]
        if coeng is not None and others:
            parts.append(ctx.part("coeng", coeng, "combo_coeng", others[0], component_rect(others[0])))
        for idx, component in enumerate(others):
            parts.append(
                ctx.part(
                    f"subscript-{idx}", subscript, "combo_subscript", component, component_rect(component)
                )
            )
        if vowel_part is not None:
            parts.append(vowel_part)
        parts.extend(ctx.mark_parts("mark", base))
        return parts


class StructuralVowelStrategy(PartStrategy):
    """(g) Base + a vowel that needs the base glyph split.

    Covers AA ligatures (AA fused into the base, or drawn as a sliver much
    smaller than the base) and the vowels that wrap around the base. The
    base keeps its main slice, the vowel gets a geometric tail when it has
    no glyph of its own, and separate vowel glyphs become leading parts
    (before the base) or trailing parts (after it).
    """

    name = "structural_vowel"

    def _analyze(
        self, ctx: MappingContext
    ) -> tuple[Unit, Unit, GlyphComponent | None, bool] | None:
        main = ctx.main_units
        if len(main) != 2:
            return None
        base_unit = next((u for u in main if u.category.is_base), None)
        vowel = next((u for u in main if u.category is Category.DEPENDENT_VOWEL), None)
        if base_unit is None or vowel is None:
            return None
        if not 1 <= len(ctx.components) <= ctx.config.max_split_components:
            return None

        base = ctx.base_component()
        dependent = next((c for c in ctx.components if c is not base), None)
        aa_ligature = vowel.code_point == AA and (
            dependent is None
            or component_area(dependent) < component_area(base) * ctx.config.aa_area_ratio
        )
        dependent_empty = dependent is not None and not dependent.outline
        if not (should_split_base(vowel.code_point) or aa_ligature or dependent_empty):
            return None
        return base_unit, vowel, base, aa_ligature

    def matches(self, ctx: MappingContext) -> bool:
        return self._analyze(ctx) is not None

    def build(self, ctx: MappingContext) -> list[Part] | None:
        analysis = self._analyze(ctx)
        if analysis is None:
            return None
        base_unit, vowel, base, aa_ligature = analysis
        if not has_box(base):
            return None

        config = ctx.config
        bb = base.bounding_box
        measured = ctx.metrics.vowel(vowel.code_point) if ctx.metrics else None
        if (
            measured is not None
            and measured.delta is not None
            and measured.delta.right > config.metrics_tail_threshold
        ):
            preferred = max(50.0, measured.delta.right)
        else:
            preferred = max(config.split_tail_minimum, bb.width * config.split_tail_fraction)
        base_w, tail_w = compute_right_tail_split(
            bb.width, preferred, config.min_slice, config.min_slice_fraction
        )

        others = [c for c in ctx.components if c is not base]
        zones = vowel_zones(vowel.code_point)
        leading: list[Part] = []
        trailing: list[Part] = []

        if aa_ligature or not others:
            if aa_ligature or Zone.RIGHT in zones:
                base_clip = Rect(bb.x1, bb.y1, base_w, bb.height)
                trailing.append(
                    ctx.part(
                        "vowel-trailing",
                        vowel,
                        "split_vowel_trailing",
                        base,
                        Rect(bb.x1 + base_w, bb.y1, tail_w, bb.height),
                    )
                )
            else:
                base_clip = Rect(bb.x1 + tail_w, bb.y1, base_w, bb.height)
                leading.append(
                    ctx.part(
                        "vowel-leading",
                        vowel,
                        "split_vowel_leading",
                        base,
                        Rect(bb.x1, bb.y1, tail_w, bb.height),
                    )
                )
        else:
            base_clip = component_rect(base)

        if not aa_ligature:
            has_left = Zone.LEFT in zones
            has_right = Zone.RIGHT in zones
            base_mid = center_x(base)
            for idx, component in enumerate(sorted(others, key=left_edge)):
                if has_left and not has_right:
                    is_left = True
                elif not has_left:
                    is_left = False
                else:
                    is_left = center_x(component) < base_mid
                if is_left:
                    leading.append(
                        ctx.part(
                            f"vowel-left-{idx}",
                            vowel,
                            "split_vowel_leading",
                            component,
                            component_rect(component),
                        )
                    )
                else:
                    trailing.append(
                        ctx.part(
                            f"vowel-right-{idx}",
                            vowel,
                            "split_vowel_trailing",
                            component,
                            component_rect(component),
                        )
                    )

        base_part = ctx.part("base-main", base_unit, "split_base", base, base_clip)
        return [*leading, base_part, *trailing, *ctx.mark_parts("mark", base)]


@dataclass(frozen=True)
class _Chain:
    """Components of a ``base + coeng + subscript + vowel`` cluster."""

    base_unit: Unit
    coeng: Unit
    subscript: Unit
    vowel: Unit
    base: GlyphComponent
    others: list[GlyphComponent]
    subscript_component: GlyphComponent

    def coeng_component(self, *taken: GlyphComponent | None) -> GlyphComponent:
        """A free non-base component for the coeng, else the subscript's own."""
        busy = {id(self.subscript_component), *(id(c) for c in taken if c is not None)}
        free = [c for c in sorted(self.others, key=center_x) if id(c) not in busy]
        return free[0] if free else self.subscript_component


def _chain(ctx: MappingContext) -> _Chain | None:
    base_unit = ctx.base_unit
    coeng = ctx.first(Category.COENG)
    subscript = ctx.first(Category.SUBSCRIPT_CONSONANT)
    vowel = ctx.first(Category.DEPENDENT_VOWEL)
    if base_unit is None or coeng is None or subscript is None or vowel is None:
        return None
    base = pick_base_for_coeng_split(ctx.components, ctx.base_cp, ctx.metrics)
    if base is None:
        return None
    others = [c for c in ctx.components if c is not base]
    lowest = max(others, key=center_y) if others else base
    return _Chain(base_unit, coeng, subscript, vowel, base, others, lowest)


class CoengRightVowelStrategy(PartStrategy):
    """(h) Base + coeng + subscript + a vowel with a right-hand tail.

    The vowel tail is taken from the rightmost non-base component when it
    reaches the base's right edge, otherwise sliced off the base. A tail
    sliced from a component shared with the subscript never starts left of
    the configured share of the subscript's width.
    """

    name = "coeng_right_vowel"

    def matches(self, ctx: MappingContext) -> bool:
        vowel = ctx.first(Category.DEPENDENT_VOWEL)
        return (
            bool(ctx.components)
            and vowel is not None
            and vowel.code_point in RIGHT_TAIL_VOWELS
            and ctx.base_unit is not None
            and ctx.has(Category.COENG)
            and ctx.has(Category.SUBSCRIPT_CONSONANT)
        )

    def build(self, ctx: MappingContext) -> list[Part] | None:
        chain = _chain(ctx)
        if chain is None:
            return None
        config = ctx.config
        base = chain.base
        bb = base.bounding_box
        sub = chain.subscript_component
        vowel_cp = chain.vowel.code_point

        with_box = [c for c in chain.others if has_box(c)]
        candidate = max(with_box, key=lambda c: (right_edge(c), center_y(c))) if with_box else None
        on_other = (
            candidate is not None
            and right_edge(candidate) >= right_edge(base) - config.trailing_edge_tolerance
        )

        base_clip = component_rect(base)
        if not on_other:
            preferred = preferred_right_tail_width(
                vowel_cp, bb.width, ctx.metrics, config.metrics_tail_threshold
            )
            base_w, tail_w = compute_right_tail_split(
                bb.width, preferred, config.min_slice, config.min_slice_fraction
            )
            base_clip = Rect(bb.x1, bb.y1, base_w, bb.height)
            tail_component = base
            tail_clip = Rect(bb.x1 + base_w, bb.y1, tail_w, bb.height)
        else:
            tail_component = candidate
            source = candidate.bounding_box.to_rect()
            preferred = preferred_right_tail_width(
                vowel_cp, max(1.0, source.width), ctx.metrics, config.metrics_tail_threshold
            )
            head_w, tail_w = compute_right_biased_tail_split(
                source.width, preferred, config.tail_bias, config.min_slice, config.min_slice_fraction
            )
            tail_x = source.x + head_w
            if sub is not base and has_box(sub):
                safe_x = to_local_x(
                    candidate, left_edge(sub) + sub.bounding_box.width * config.subscript_clamp
                )
                tail_x = max(tail_x, safe_x)
                tail_w = max(config.min_slice, source.x2 - tail_x)
            tail_clip = Rect(tail_x, source.y, tail_w, source.height)

        leading_part = None
        leading_component = None
        if Zone.LEFT in vowel_zones(vowel_cp):
            leading_component = next(
                (
                    c
                    for c in sorted(chain.others, key=center_x)
                    if center_x(c) < center_x(base) and c is not sub
                ),
                None,
            )
            if leading_component is not None:
                leading_clip = component_rect(leading_component)
                source_component = leading_component
            else:
                source_component = base
                leading_clip = Rect(
                    bb.x1,
                    bb.y1,
                    max(config.min_slice, bb.width * config.left_slice_fraction),
                    bb.height,
                )
            leading_part = ctx.part(
                "vowel-leading", chain.vowel, "split_vowel_leading", source_component, leading_clip
            )

        coeng_component = chain.coeng_component(
            tail_component if on_other else None, leading_component
        )
        parts = [
            ctx.part("coeng-base", chain.base_unit, "split_base", base, base_clip),
            ctx.part(
                "coeng-mark", chain.coeng, "split_coeng", coeng_component, component_rect(coeng_component)
            ),
            ctx.part("subscript-mark", chain.subscript, "split_subscript", sub, component_rect(sub)),
        ]
        if leading_part is not None:
            parts.append(leading_part)
        parts.append(
            ctx.part(
                "vowel-trailing-main", chain.vowel, "split_vowel_trailing", tail_component, tail_clip
            )
        )
        parts.extend(ctx.mark_parts("coeng-mark", base))
        return parts


class CoengLeftVowelStrategy(PartStrategy):
    """(i) Base + coeng + subscript + a prepositive vowel.

    Mirror of the right-vowel split. A vowel that also reaches above the
    base (U+17BE) gets a TOP part from the topmost unused component, or a
    strip off the top of the base.
    """

    name = "coeng_left_vowel"

    def matches(self, ctx: MappingContext) -> bool:
        vowel = ctx.first(Category.DEPENDENT_VOWEL)
        if vowel is None or not ctx.components:
            return False
        zones = vowel_zones(vowel.code_point)
        return (
            Zone.LEFT in zones
            and Zone.RIGHT not in zones
            and ctx.base_unit is not None
            and ctx.has(Category.COENG)
            and ctx.has(Category.SUBSCRIPT_CONSONANT)
        )

    def build(self, ctx: MappingContext) -> list[Part] | None:
        chain = _chain(ctx)
        if chain is None or not has_box(chain.base):
            return None
        config = ctx.config
        base = chain.base
        bb = base.bounding_box
        sub = chain.subscript_component
        vowel_cp = chain.vowel.code_point

        with_box = [c for c in chain.others if has_box(c)]
        candidate = min(with_box, key=lambda c: (left_edge(c), -center_y(c))) if with_box else None
        on_other = (
            candidate is not None
            and left_edge(candidate) <= left_edge(base) + config.trailing_edge_tolerance
        )

        base_clip = component_rect(base)
        leading_component = None
        if on_other and candidate is not sub:
            leading_component = candidate
            lead_source, lead_clip = candidate, component_rect(candidate)
        elif on_other:
            # The prepositive vowel is fused with the subscript
            source = candidate.bounding_box.to_rect()
            preferred = preferred_left_head_width(
                vowel_cp, max(1.0, source.width), ctx.metrics, config.metrics_tail_threshold
            )
            _, head_w = compute_right_biased_tail_split(
                source.width, preferred, config.tail_bias, config.min_slice, config.min_slice_fraction
            )
            limit = source.width * (1 - config.subscript_clamp)
            head_w = max(config.min_slice, min(head_w, limit))
            lead_source, lead_clip = candidate, Rect(source.x, source.y, head_w, source.height)
        else:
            preferred = preferred_left_head_width(
                vowel_cp, bb.width, ctx.metrics, config.metrics_tail_threshold
            )
            base_w, head_w = compute_right_tail_split(
                bb.width, preferred, config.min_slice, config.min_slice_fraction
            )
            base_clip = Rect(bb.x1 + head_w, bb.y1, base_w, bb.height)
            lead_source, lead_clip = base, Rect(bb.x1, bb.y1, head_w, bb.height)

        top_part = None
        top_component = None
        if Zone.TOP in vowel_zones(vowel_cp):
            taken = {id(sub), id(leading_component)}
            unused = [c for c in chain.others if id(c) not in taken and has_box(c)]
            if unused:
                top_component = min(unused, key=center_y)
                top_clip = component_rect(top_component)
                top_source = top_component
            else:
                strip_h = max(1.0, bb.height * config.top_slice_fraction)
                top_clip = Rect(bb.x1, bb.y1, bb.width, strip_h)
                top_source = base
                base_clip = Rect.from_edges(base_clip.x, bb.y1 + strip_h, base_clip.x2, base_clip.y2)
            top_part = ctx.part("vowel-top", chain.vowel, "split_vowel_top", top_source, top_clip)

        coeng_component = chain.coeng_component(leading_component, top_component)
        parts = [
            ctx.part("vowel-leading", chain.vowel, "split_vowel_leading", lead_source, lead_clip),
            ctx.part("coeng-base", chain.base_unit, "split_base", base, base_clip),
            ctx.part(
                "coeng-mark", chain.coeng, "split_coeng", coeng_component, component_rect(coeng_component)
            ),
            ctx.part("subscript-mark", chain.subscript, "split_subscript", sub, component_rect(sub)),
        ]
        if top_part is not None:
            parts.append(top_part)
        parts.extend(ctx.mark_parts("coeng-mark", base))
        return parts


class DefaultAllocatorStrategy(PartStrategy):
    """(j) One component per unit.

    - Base and independent vowels take the base component
    - Subscripts take the next unconsumed non-base component, lowest first;
      a coeng peeks at the slot its subscript will take
    - A vowel after a subscript takes the next unconsumed component
    - Diacritics take the component with the smallest advance, then area
    - Anything else falls back to its position
    """

    name = "default"

    def matches(self, ctx: MappingContext) -> bool:
        return True

    def build(self, ctx: MappingContext) -> list[Part] | None:
        components = ctx.components
        if not components:
            return None

        base = ctx.base_component()
        queue = sorted((c for c in components if c is not base), key=center_y, reverse=True)
        consumed = 0
        has_subscript = ctx.has(Category.SUBSCRIPT_CONSONANT)

        def peek() -> GlyphComponent | None:
            if not queue:
                return None
            return queue[min(consumed, len(queue) - 1)]

        parts = []
        for idx, unit in enumerate(ctx.units):
            category = unit.category
            if category.is_base:
                component = base
            elif category is Category.COENG:
                component = peek() or base
            elif category is Category.SUBSCRIPT_CONSONANT:
                component = peek() or base
                consumed += 1
            elif category is Category.DEPENDENT_VOWEL and has_subscript:
                component = peek() or base
                consumed += 1
            elif category is Category.DEPENDENT_VOWEL:
                component = next((c for c in reversed(components) if c is not base), base)
            elif category is Category.DIACRITIC_SIGN:
                component = pick_mark_component(components, exclude=base)
            else:
                component = components[min(idx, len(components) - 1)]
            parts.append(ctx.part(f"{idx}", unit, "component", component))
        return parts


def default_strategies() -> tuple[PartStrategy, ...]:
    """The strategy list in evaluation order."""
    return (
        FullGlyphStrategy(),
        OutlineZoneSplitStrategy(),
        FusedComponentStrategy(),
        NoBaseStrategy(),
        NarrowStackedStrategy(),
        CombinationRuleStrategy(),
        StructuralVowelStrategy(),
        CoengRightVowelStrategy(),
        CoengLeftVowelStrategy(),
        DefaultAllocatorStrategy(),
    )
