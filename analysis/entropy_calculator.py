"""
analysis/entropy_calculator.py
------------------------------
Per-position Shannon entropy from mutation proportion records.

Each record says what fraction of the selected sequences carries one
substitution (or deletion) at one position. Records are grouped by
position, the unobserved reference fraction is inferred as
1 - sum(observed) and the entropy of the resulting distribution is
computed in nats.

Everything here is a pure function of its inputs. The reference table is
only read, and only when unobserved positions are requested or positions
have to be put in genomic order.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from analysis.mutation_codes import decode_mutation, parse_position_key
from reference.models import (
    MutationRecord,
    PositionEntropy,
    PositionProportion,
    ReferenceTable,
    SequenceType,
)

logger = logging.getLogger(__name__)


# Nucleotide and amino acid views label the inferred reference row differently
NUC_REFERENCE_TAG = "ref"
AA_REFERENCE_SUFFIX = " (ref)"


def shannon_entropy(proportions: Iterable[float]) -> float:
    """
    -sum(p * ln p) over the given proportions.

    Proportions are not clamped: a negative value yields NaN so that
    inconsistent input stays visible downstream.
    """
    p = np.asarray(list(proportions), dtype=float)
    if p.size == 0:
        return 0.0
    with np.errstate(invalid="ignore", divide="ignore"):
        # + 0.0 turns the -0.0 of a single-row distribution into 0.0
        return float(-np.sum(p * np.log(p))) + 0.0


def reference_tag(original_base: Optional[str], sequence_type: SequenceType) -> str:
    if sequence_type == "aa":
        return f"{original_base}{AA_REFERENCE_SUFFIX}"
    return NUC_REFERENCE_TAG


def _reference_positions(
    sequence_type: SequenceType,
    reference: ReferenceTable,
) -> Dict[str, Optional[str]]:
    """Position key -> reference base for every position of the reference."""
    if sequence_type == "nuc":
        return {
            str(position): reference.reference_base(position)
            for position in range(1, reference.genome_length + 1)
        }

    positions: Dict[str, Optional[str]] = {}
    for gene in reference.genes:
        for codon, aa in enumerate(gene.aa_sequence, start=1):
            positions[f"{gene.name}:{aa}{codon}"] = aa
    return positions


def compute_entropy(
    records: Sequence[MutationRecord],
    sequence_type: SequenceType,
    reference: Optional[ReferenceTable] = None,
    include_deletions: bool = False,
    include_unobserved_positions: bool = False,
) -> List[PositionEntropy]:
    """
    Build the per-position entropy profile of one snapshot.

    Parameters
    ----------
    records : sequence of MutationRecord
        Mutation codes and proportions for one sample selection.
    sequence_type : 'nuc' or 'aa'
        Notation of the codes in records.
    reference : ReferenceTable, optional
        Required when include_unobserved_positions is True.
    include_deletions : bool
        Keep deletion records ('-' as mutated base). Dropped by default.
    include_unobserved_positions : bool
        Emit every reference position, including those with no record
        (they come out with entropy 0).

    Returns
    -------
    List of PositionEntropy in the order positions were first seen
    (reference order first when pre-populated). Profiles need
    sort_by_genomic_order() before display or range resolution.

    Raises
    ------
    MalformedCodeError if any code cannot be decoded. Skipping it would
    leave its position with a wrong reference remainder.
    """
    originals: Dict[str, Optional[str]] = {}
    rows: Dict[str, List[PositionProportion]] = {}

    if include_unobserved_positions:
        if reference is None:
            raise ValueError("A reference table is required to include unobserved positions.")
        for key, base in _reference_positions(sequence_type, reference).items():
            originals[key] = base
            rows[key] = []

    skipped_deletions = 0
    for record in records:
        decoded = decode_mutation(record.code, sequence_type)
        if decoded.is_deletion and not include_deletions:
            skipped_deletions += 1
            continue

        key = decoded.position_key
        if key not in rows:
            originals[key] = decoded.original_base
            rows[key] = []
        rows[key].append(PositionProportion(
            position_key=key,
            mutated_base=decoded.mutated_base,
            original_base=decoded.original_base,
            proportion=record.proportion,
        ))

    profile: List[PositionEntropy] = []
    negative_positions = 0

    for key, observed in rows.items():
        original = originals[key]
        proportions = list(observed)

        # Exact comparison: any drift from 1 becomes a reference row
        remainder = 1 - sum(p.proportion for p in observed)
        if remainder != 0:
            proportions.append(PositionProportion(
                position_key=key,
                mutated_base=reference_tag(original, sequence_type),
                original_base=original,
                proportion=remainder,
            ))
        if remainder < 0:
            negative_positions += 1

        proportions = [p for p in proportions if p.proportion != 0]

        profile.append(PositionEntropy(
            position_key=key,
            proportions=tuple(proportions),
            entropy=shannon_entropy(p.proportion for p in proportions),
        ))

    if negative_positions:
        logger.warning(
            f"{negative_positions} position(s) have observed proportions summing above 1; "
            "their entropy is NaN."
        )

    logger.debug(
        f"Entropy profile ({sequence_type}): {len(profile)} positions from "
        f"{len(records)} records ({skipped_deletions} deletions skipped)."
    )
    return profile


def sort_by_genomic_order(
    profile: Sequence[PositionEntropy],
    reference: ReferenceTable,
) -> List[PositionEntropy]:
    """
    Stable sort by (gene declaration order, codon index).

    Nucleotide keys have no gene and sort by position ahead of any gene.
    Genes missing from the reference table sort after the known ones.
    """
    gene_order = reference.gene_order
    unknown = len(gene_order)

    def sort_key(position: PositionEntropy):
        gene, index = parse_position_key(position.position_key)
        if gene is None:
            return (-1, index)
        return (gene_order.get(gene, unknown), index)

    return sorted(profile, key=sort_key)


def filter_by_threshold(
    profile: Sequence[PositionEntropy],
    threshold: float,
) -> List[PositionEntropy]:
    """Positions whose entropy reaches the display threshold (NaN never does)."""
    return [p for p in profile if p.entropy >= threshold]
