"""Split Khmer source text into semantic units.

The unit list of a text tiles it exactly: unit source ranges are contiguous,
start at 0 and end at ``len(text)``. A coeng mark followed by a consonant
always yields two adjacent units, ``coeng`` then ``subscript_consonant``.
"""

from collections import Counter
from collections.abc import Iterable, Sequence

from glyphlab.core.classifier import (
    classify,
    is_consonant,
    is_dependent_vowel,
    is_diacritic_or_sign,
)
from glyphlab.domain import COENG, Category, GlyphCluster, Unit, UnitLink
from glyphlab.exceptions import UnitError


def _token_categories(token: str) -> list[Category]:
    categories: list[Category] = []
    for i, ch in enumerate(token):
        prev = token[i - 1] if i > 0 else ""
        if ord(ch) == COENG:
            # Paired or lone, a coeng mark is always its own unit
            categories.append(Category.COENG)
        elif prev and ord(prev) == COENG and is_consonant(ch):
            categories.append(Category.SUBSCRIPT_CONSONANT)
        elif is_dependent_vowel(ch):
            categories.append(Category.DEPENDENT_VOWEL)
        elif is_diacritic_or_sign(ch):
            categories.append(Category.DIACRITIC_SIGN)
        else:
            categories.append(classify(ch, prev))
    return categories


def build_units(text: str, tokens: Sequence[str] | None = None) -> list[Unit]:
    """Build the ordered unit list of a text.

    Args:
        text: Source text
        tokens: Optional word split of the text; the tokens must concatenate
            to ``text``. Coeng pairing never crosses a token boundary.

    Returns:
        Units tiling ``text``, with ids ``unit-0``, ``unit-1``, ...

    Raises:
        UnitError: If the tokens do not reproduce the text
    """
    if tokens:
        if "".join(tokens) != text:
            raise UnitError("tokens do not concatenate to the source text")
        source: Sequence[str] = tokens
    else:
        source = [text] if text else []

    units: list[Unit] = []
    offset = 0
    for token in source:
        for i, category in enumerate(_token_categories(token)):
            units.append(
                Unit(
                    id=f"unit-{len(units)}",
                    text=token[i],
                    category=category,
                    source_start=offset + i,
                    source_end=offset + i + 1,
                )
            )
        offset += len(token)
    return units


def units_for_cluster(cluster: GlyphCluster, units: Iterable[Unit]) -> list[Unit]:
    """Select the units a cluster renders.

    A unit belongs to the cluster when one of its codepoints occurs in the
    cluster and, when both source ranges are known, the ranges intersect.

    Args:
        cluster: Shaped cluster
        units: Units of the whole text

    Returns:
        Matching units, in text order
    """
    cluster_cps = set(cluster.code_points)
    selected: list[Unit] = []
    for unit in units:
        if not any(cp in cluster_cps for cp in unit.code_points):
            continue
        if cluster.has_source_range and not (
            unit.source_start < cluster.cluster_end and unit.source_end > cluster.cluster_start
        ):
            continue
        selected.append(unit)
    return selected


def link_units_to_clusters(
    clusters: Sequence[GlyphCluster], units: Sequence[Unit]
) -> list[UnitLink]:
    """Link every unit to the clusters that render it.

    Returns:
        One link per (unit, cluster) pair; links to a cluster rendering more
        than one unit are flagged ``shared``
    """
    pairs: list[tuple[str, int]] = []
    for cluster in clusters:
        for unit in units_for_cluster(cluster, units):
            pairs.append((unit.id, cluster.id))
    hits = Counter(cluster_id for _, cluster_id in pairs)
    order = {unit.id: i for i, unit in enumerate(units)}
    pairs.sort(key=lambda pair: (order[pair[0]], pair[1]))
    return [UnitLink(unit_id, cluster_id, hits[cluster_id] > 1) for unit_id, cluster_id in pairs]
