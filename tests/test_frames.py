"""
tests/test_frames.py
--------------------
Unit tests for the pandas views.

Run with:  pytest tests/test_frames.py -v
"""

from datetime import date

import pandas as pd
import pytest

from analysis.entropy_calculator import compute_entropy
from analysis.frames import profile_to_frame, records_from_frame, weekly_series_to_frame
from reference.models import MutationRecord


class TestRecordsFromFrame:

    def test_converts_rows(self):
        df = pd.DataFrame({"mutation": ["A100T", "S:D614G"], "proportion": ["0.3", 0.2]})
        assert records_from_frame(df) == [
            MutationRecord("A100T", 0.3),
            MutationRecord("S:D614G", 0.2),
        ]

    def test_custom_columns(self):
        df = pd.DataFrame({"code": ["A100T"], "freq": [0.5]})
        records = records_from_frame(df, code_column="code", proportion_column="freq")
        assert records == [MutationRecord("A100T", 0.5)]

    def test_missing_column_raises(self):
        df = pd.DataFrame({"mutation": ["A100T"]})
        with pytest.raises(ValueError, match="Missing Required Columns"):
            records_from_frame(df)


class TestProfileToFrame:

    def test_one_row_per_position(self):
        profile = compute_entropy([MutationRecord("A100T", 0.25), MutationRecord("G200C", 1.0)], "nuc")
        df = profile_to_frame(profile)

        assert list(df.columns) == ["position", "entropy", "n_proportions", "proportions"]
        assert list(df["position"]) == ["100", "200"]
        assert list(df["n_proportions"]) == [2, 1]
        assert df.loc[0, "proportions"] == {"T": 0.25, "ref": 0.75}

    def test_empty_profile(self):
        df = profile_to_frame([])
        assert df.empty
        assert "entropy" in df.columns


class TestWeeklySeriesToFrame:

    def test_missing_values_become_nan(self):
        rows = [
            {"day": date(2021, 3, 8), "N": 0.3},
            {"day": date(2021, 3, 1), "S": 0.1, "N": 0.2},
        ]
        df = weekly_series_to_frame(rows)

        assert list(df.index) == [date(2021, 3, 1), date(2021, 3, 8)]
        assert df.loc[date(2021, 3, 8), "N"] == pytest.approx(0.3)
        assert pd.isna(df.loc[date(2021, 3, 8), "S"])

    def test_no_rows(self):
        df = weekly_series_to_frame([])
        assert df.empty
        assert df.index.name == "day"
