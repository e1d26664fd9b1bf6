"""
analysis/weekly_series.py
-------------------------
Mean entropy over time, one value per week and gene.

Weekly snapshots are fetched independently (and usually in parallel) by
the caller, so they may arrive in any order. Chronological order is
rebuilt here from each snapshot's week, never from arrival order.
Nothing is cached: every call recomputes from the snapshots given.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from analysis.entropy_calculator import compute_entropy
from analysis.mean_entropy import gene_mean_entropy
from reference.models import GeneRange, ReferenceTable, SequenceType, WeekEntropy, WeekSnapshot

logger = logging.getLogger(__name__)


DAY_KEY = "day"


def weekly_mean_entropy(
    snapshots: Sequence[WeekSnapshot],
    sequence_type: SequenceType,
    gene: GeneRange,
    reference: ReferenceTable,
    include_deletions: bool = False,
) -> List[WeekEntropy]:
    """
    Gene-scoped mean entropy for each week, in chronological order.

    Weeks whose snapshot carries no records (records=None) are left out of
    the series. A week with an empty record list is a week without
    diversity and yields 0.
    """
    series: List[WeekEntropy] = []
    missing = 0

    for snapshot in sorted(snapshots, key=lambda s: s.week.start):
        if snapshot.records is None:
            missing += 1
            continue
        profile = compute_entropy(
            snapshot.records,
            sequence_type,
            reference,
            include_deletions=include_deletions,
            include_unobserved_positions=False,
        )
        series.append(WeekEntropy(
            week=snapshot.week,
            mean_entropy=gene_mean_entropy(profile, sequence_type, gene, reference),
        ))

    if missing:
        logger.warning(f"{missing} week(s) without data skipped for gene {gene.name!r}.")
    return series


def merge_weekly_series(
    series_by_gene: Mapping[str, Sequence[WeekEntropy]],
    drop_last_week: bool = False,
) -> List[Dict[str, Any]]:
    """
    Join per-gene series on the start day of each week.

    Returns rows like {'day': date(2021, 3, 1), 'S': 0.0021, 'N': 0.0017},
    sorted by day. A gene with no value for a week has no key in that
    week's row (it is not filled with 0).

    drop_last_week removes the final week of every gene series before
    merging; that week is normally still incomplete.
    """
    rows: Dict[Any, Dict[str, Any]] = {}

    for gene_name, series in series_by_gene.items():
        ordered = sorted(series, key=lambda w: w.week.start)
        if drop_last_week:
            ordered = ordered[:-1]
        for week in ordered:
            day = week.week.start
            row = rows.setdefault(day, {DAY_KEY: day})
            row[gene_name] = week.mean_entropy

    return [rows[day] for day in sorted(rows)]


def build_weekly_series(
    snapshots: Sequence[WeekSnapshot],
    sequence_type: SequenceType,
    genes: Sequence[GeneRange],
    reference: ReferenceTable,
    include_deletions: bool = False,
    drop_last_week: bool = False,
) -> List[Dict[str, Any]]:
    """Build each gene's weekly series independently, then merge them by week."""
    series_by_gene = {
        gene.name: weekly_mean_entropy(
            snapshots,
            sequence_type,
            gene,
            reference,
            include_deletions=include_deletions,
        )
        for gene in genes
    }

    rows = merge_weekly_series(series_by_gene, drop_last_week=drop_last_week)

    logger.info(
        f"Weekly entropy series ({sequence_type}): {len(rows)} weeks x "
        f"{len(series_by_gene)} gene(s)."
    )
    return rows
