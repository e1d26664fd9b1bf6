"""
analysis/entropy_service.py
---------------------------
Orchestration layer: the one place where fetched snapshots, the reference
table and the entropy components meet.

Responsibility
--------------
1. Resolve the reference table and the requested genes
2. Build the whole-range entropy profile, in genomic order
3. Apply the display threshold and resolve the brush range for a gene
4. Build the merged weekly mean-entropy series for the requested genes
5. Return everything as a plain dict for the presentation layer

Retrieval of the snapshots is the caller's job; this module never fetches
anything and keeps no state between calls.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from analysis.config import Config
from analysis.entropy_calculator import compute_entropy, filter_by_threshold, sort_by_genomic_order
from analysis.errors import UnknownGeneError
from analysis.gene_range import clamp_range, resolve_range
from analysis.mean_entropy import mean_entropy
from analysis.weekly_series import build_weekly_series
from reference.loader import load_reference_table
from reference.models import (
    ALL_GENES,
    GeneRange,
    MutationRecord,
    ReferenceTable,
    SequenceType,
    WeekSnapshot,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_reference_table(path: str = None) -> ReferenceTable:
    """Load the reference table once per path; the table itself is immutable."""
    return load_reference_table(path or Config.REFERENCE_DATA_PATH)


def resolve_genes(names: Sequence[str], reference: ReferenceTable) -> List[GeneRange]:
    """
    Look up gene names in the reference table ('All' included).

    Raises UnknownGeneError for any name the table does not know.
    """
    genes: List[GeneRange] = []
    for name in names:
        gene = reference.gene(name)
        if gene is None:
            raise UnknownGeneError(
                f"Gene {name!r} is not in the reference table. "
                f"Known genes: {[g.name for g in reference.genes]}"
            )
        genes.append(gene)
    return genes


def run_entropy_analysis(
    records: Sequence[MutationRecord],
    weekly_snapshots: Sequence[WeekSnapshot],
    sequence_type: SequenceType = "nuc",
    gene_names: Sequence[str] = (ALL_GENES,),
    reference: Optional[ReferenceTable] = None,
    focus_gene: Optional[str] = None,
    include_deletions: Optional[bool] = None,
    include_unobserved_positions: bool = False,
    threshold: Optional[float] = None,
    drop_last_week: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Full entropy analysis of one sample selection.

    Parameters
    ----------
    records : sequence of MutationRecord
        Whole-range snapshot.
    weekly_snapshots : sequence of WeekSnapshot
        One snapshot per week, in any order.
    sequence_type : 'nuc' or 'aa'
    gene_names : sequence of str
        Genes to build weekly series for ('All' for the whole genome).
    reference : ReferenceTable, optional
        Loaded from Config.REFERENCE_DATA_PATH if not provided.
    focus_gene : str, optional
        Gene whose range the brush should cover. None means all positions.
    include_deletions, threshold, drop_last_week : optional
        Default to the values in Config.
    include_unobserved_positions : bool
        Keep positions without any record in the per-position profile.

    Returns
    -------
    dict with keys:
        sequence_type, position_entropy, display_entropy, brush,
        mean_entropy, time_data

    Raises
    ------
    UnknownGeneError if a gene name is not in the reference table.
    MalformedCodeError if a mutation code cannot be decoded.
    """
    if reference is None:
        reference = get_reference_table()
    if include_deletions is None:
        include_deletions = Config.INCLUDE_DELETIONS
    if threshold is None:
        threshold = Config.ENTROPY_DISPLAY_THRESHOLD
    if drop_last_week is None:
        drop_last_week = Config.DROP_LAST_WEEK

    # ------------------------------------------------------------------ #
    # Step 1 — Genes                                                      #
    # ------------------------------------------------------------------ #
    genes = resolve_genes(gene_names, reference)
    focus = resolve_genes([focus_gene], reference)[0] if focus_gene else None

    # ------------------------------------------------------------------ #
    # Step 2 — Whole-range profile                                        #
    # ------------------------------------------------------------------ #
    profile = compute_entropy(
        records,
        sequence_type,
        reference,
        include_deletions=include_deletions,
        include_unobserved_positions=include_unobserved_positions,
    )
    # resolve_range() searches assume ascending positions in both modes
    profile = sort_by_genomic_order(profile, reference)

    # ------------------------------------------------------------------ #
    # Step 3 — Display profile and brush range                            #
    # ------------------------------------------------------------------ #
    display = filter_by_threshold(profile, threshold)
    brush = clamp_range(resolve_range(focus, display, sequence_type), display)

    # ------------------------------------------------------------------ #
    # Step 4 — Weekly series                                              #
    # ------------------------------------------------------------------ #
    time_data = build_weekly_series(
        weekly_snapshots,
        sequence_type,
        genes,
        reference,
        include_deletions=include_deletions,
        drop_last_week=drop_last_week,
    )

    result = {
        "sequence_type": sequence_type,
        "position_entropy": profile,
        "display_entropy": display,
        "brush": {"start_index": brush.start_index, "stop_index": brush.stop_index},
        "mean_entropy": mean_entropy(profile),
        "time_data": time_data,
    }

    logger.info(
        f"Entropy analysis complete ({sequence_type}): {len(profile)} positions, "
        f"{len(display)} above threshold {threshold}, {len(time_data)} weeks "
        f"for genes {[g.name for g in genes]}."
    )
    return result
