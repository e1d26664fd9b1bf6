"""
analysis/mean_entropy.py
------------------------
Reduce an entropy profile to a single mean value.

The gene-scoped mean is an average per *reference* position: the sum runs
over the positions present in the profile, but the count comes from the
reference table. Positions missing from the profile (never observed, or
filtered out for display) therefore dilute the mean instead of being
ignored.
"""

import logging
from typing import Sequence

import numpy as np

from analysis.mutation_codes import parse_position_key
from reference.models import GeneRange, PositionEntropy, ReferenceTable, SequenceType

logger = logging.getLogger(__name__)


def mean_entropy(profile: Sequence[PositionEntropy]) -> float:
    """Mean entropy over the positions of the profile; 0.0 for an empty profile."""
    if not profile:
        return 0.0
    return sum(p.entropy for p in profile) / len(profile)


def _positions_in_gene(
    profile: Sequence[PositionEntropy],
    sequence_type: SequenceType,
    gene: GeneRange,
) -> list:
    if sequence_type == "nuc":
        return [
            p for p in profile
            if gene.start_position <= int(p.position_key) <= gene.end_position
        ]
    if gene.is_all:
        return list(profile)
    return [p for p in profile if parse_position_key(p.position_key)[0] == gene.name]


def reference_length(
    sequence_type: SequenceType,
    gene: GeneRange,
    reference: ReferenceTable,
) -> int:
    """Number of reference positions a gene-scoped mean is divided by."""
    if sequence_type == "nuc":
        return gene.end_position - gene.start_position
    genes = reference.genes if gene.is_all else [g for g in reference.genes if g.name == gene.name]
    return sum(len(g.aa_sequence) for g in genes)


def gene_mean_entropy(
    profile: Sequence[PositionEntropy],
    sequence_type: SequenceType,
    gene: GeneRange,
    reference: ReferenceTable,
) -> float:
    """
    Mean entropy of a gene per reference position.

    Parameters
    ----------
    profile : sequence of PositionEntropy
        Output of compute_entropy(), possibly filtered.
    sequence_type : 'nuc' or 'aa'
    gene : GeneRange
        Gene to restrict to; the 'All' sentinel covers the whole genome.
    reference : ReferenceTable
        Source of the denominator.

    Returns
    -------
    float; NaN or inf when the gene has no reference length.
    """
    total = sum(p.entropy for p in _positions_in_gene(profile, sequence_type, gene))
    count = reference_length(sequence_type, gene, reference)

    if count == 0:
        logger.warning(f"Gene {gene.name!r} has no reference length ({sequence_type}); mean entropy is not finite.")
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(total, count))
