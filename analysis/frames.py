"""
analysis/frames.py
------------------
pandas views of the engine's inputs and outputs, for notebooks and for
chart layers that consume tables.
"""

import logging
from typing import Any, Dict, List, Sequence

import pandas as pd

from analysis.weekly_series import DAY_KEY
from reference.models import MutationRecord, PositionEntropy

logger = logging.getLogger(__name__)


def records_from_frame(
    df: pd.DataFrame,
    code_column: str = "mutation",
    proportion_column: str = "proportion",
) -> List[MutationRecord]:
    """
    Convert a table of mutation proportions (one row per code) to records.

    Raises ValueError if a required column is missing.
    """
    required = {code_column, proportion_column}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing Required Columns: {sorted(missing)}")

    proportions = pd.to_numeric(df[proportion_column], errors="coerce")
    if proportions.isna().any():
        logger.warning(f"{int(proportions.isna().sum())} proportion(s) could not be parsed and are NaN.")

    return [
        MutationRecord(code=str(code), proportion=float(proportion))
        for code, proportion in zip(df[code_column], proportions)
    ]


def profile_to_frame(profile: Sequence[PositionEntropy]) -> pd.DataFrame:
    """
    One row per position.

    Columns: position, entropy, n_proportions, proportions
    ('proportions' maps mutated base -> proportion).
    """
    return pd.DataFrame(
        [
            {
                "position": p.position_key,
                "entropy": p.entropy,
                "n_proportions": len(p.proportions),
                "proportions": {pp.mutated_base: pp.proportion for pp in p.proportions},
            }
            for p in profile
        ],
        columns=["position", "entropy", "n_proportions", "proportions"],
    )


def weekly_series_to_frame(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    """
    Merged weekly rows as a table indexed by week start.

    A gene without a value in some week shows NaN there.
    """
    if not rows:
        return pd.DataFrame(index=pd.Index([], name=DAY_KEY))
    return pd.DataFrame(list(rows)).set_index(DAY_KEY).sort_index()
