"""
analysis/gene_range.py
----------------------
Map a gene onto index bounds within a sorted entropy profile, for
range-selection (brush) widgets.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from analysis.mutation_codes import parse_position_key
from reference.models import GeneRange, PositionEntropy, SequenceType


NOT_FOUND = -1


@dataclass(frozen=True)
class IndexRange:
    start_index: int
    stop_index: int


def _first_index_after(profile: Sequence[PositionEntropy], position: int) -> int:
    for i, p in enumerate(profile):
        if int(p.position_key) > position:
            return i
    return NOT_FOUND


def resolve_range(
    gene: Optional[GeneRange],
    profile: Sequence[PositionEntropy],
    sequence_type: SequenceType,
) -> IndexRange:
    """
    Index bounds of a gene within an already filtered and sorted profile.

    Nucleotide profiles are searched with a strict '>' on both gene
    boundaries: start is the first position after start_position, stop is
    one before the first position after end_position. Amino acid profiles
    are matched on the gene name of each position key.

    Either bound is NOT_FOUND (-1) when no position qualifies; see
    clamp_range() for turning that into "no restriction".
    """
    if gene is None or gene.is_all:
        return IndexRange(0, len(profile) - 1)

    if sequence_type == "aa":
        names = [parse_position_key(p.position_key)[0] for p in profile]
        if gene.name not in names:
            return IndexRange(NOT_FOUND, NOT_FOUND)
        start = names.index(gene.name)
        stop = len(names) - 1 - names[::-1].index(gene.name)
        return IndexRange(start, stop)

    start = _first_index_after(profile, gene.start_position)
    after_end = _first_index_after(profile, gene.end_position)
    stop = after_end - 1 if after_end != NOT_FOUND else NOT_FOUND
    return IndexRange(start, stop)


def clamp_range(index_range: IndexRange, profile: Sequence[PositionEntropy]) -> IndexRange:
    """Replace NOT_FOUND bounds with the full extent of the profile."""
    start = index_range.start_index
    stop = index_range.stop_index
    if start == NOT_FOUND:
        start = 0
    if stop == NOT_FOUND:
        stop = len(profile) - 1
    return IndexRange(start, stop)
