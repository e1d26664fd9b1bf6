"""
tests/test_entropy_service.py
-----------------------------
End-to-end tests for the orchestration layer.

The reference table is injected, so nothing is read from disk.

Run with:  pytest tests/test_entropy_service.py -v
"""

import math
from datetime import date, timedelta

import pytest

from analysis.errors import MalformedCodeError, UnknownGeneError
from analysis.entropy_service import resolve_genes, run_entropy_analysis
from reference.models import DateRange, MutationRecord, WeekSnapshot


def week(start: date) -> DateRange:
    return DateRange(start=start, end=start + timedelta(days=6))


W1 = week(date(2021, 3, 1))
W2 = week(date(2021, 3, 8))
W3 = week(date(2021, 3, 15))


def recs(*pairs):
    return [MutationRecord(c, p) for c, p in pairs]


class TestNucleotideAnalysis:

    def test_profile_brush_and_series(self, reference):
        records = recs(("C6T", 0.5), ("A21G", 0.01), ("C10T", 0.2))
        weekly = [
            WeekSnapshot(W2, recs(("C6T", 0.5))),
            WeekSnapshot(W1, recs(("A21G", 0.5))),
            WeekSnapshot(W3, recs()),
        ]

        result = run_entropy_analysis(
            records,
            weekly,
            sequence_type="nuc",
            gene_names=["GeneA", "All"],
            reference=reference,
            focus_gene="GeneA",
            threshold=0.01,
            drop_last_week=True,
        )

        assert result["sequence_type"] == "nuc"
        assert [p.position_key for p in result["position_entropy"]] == ["6", "10", "21"]
        assert [p.position_key for p in result["display_entropy"]] == ["6", "10", "21"]

        # GeneA spans 3..11, so the brush covers 6 and 10 but not 21
        assert result["brush"] == {"start_index": 0, "stop_index": 1}

        entropies = [p.entropy for p in result["position_entropy"]]
        assert result["mean_entropy"] == pytest.approx(sum(entropies) / 3)

        time_data = result["time_data"]
        assert [r["day"] for r in time_data] == [W1.start, W2.start]
        assert time_data[0]["GeneA"] == 0
        assert time_data[0]["All"] == pytest.approx(math.log(2) / 30)
        assert time_data[1]["GeneA"] == pytest.approx(math.log(2) / 8)

    def test_brush_covers_gene_positions_given_out_of_order(self, reference):
        records = recs(("C6T", 0.3), ("A21G", 0.3), ("C10T", 0.3))
        result = run_entropy_analysis(records, [], reference=reference, focus_gene="GeneA", threshold=0.0)

        display = result["display_entropy"]
        brush = result["brush"]
        covered = [p.position_key for p in display[brush["start_index"]:brush["stop_index"] + 1]]
        assert covered == ["6", "10"]

    def test_threshold_hides_low_entropy_positions(self, reference):
        records = recs(("C6T", 0.5), ("A21G", 0.000001))
        result = run_entropy_analysis(records, [], reference=reference, threshold=0.01)

        assert len(result["position_entropy"]) == 2
        assert [p.position_key for p in result["display_entropy"]] == ["6"]
        assert result["brush"] == {"start_index": 0, "stop_index": 0}

    def test_unresolved_brush_falls_back_to_full_range(self, reference):
        records = recs(("A1G", 0.5), ("C2T", 0.5))
        result = run_entropy_analysis(records, [], reference=reference, focus_gene="GeneB", threshold=0.0)
        assert result["brush"] == {"start_index": 0, "stop_index": 1}

    def test_unobserved_positions_kept_in_profile(self, reference):
        result = run_entropy_analysis(
            recs(("C6T", 0.5)),
            [],
            reference=reference,
            include_unobserved_positions=True,
            threshold=0.0,
        )
        assert len(result["position_entropy"]) == 30
        assert len(result["display_entropy"]) == 30


class TestAminoAcidAnalysis:

    def test_profile_in_genomic_order(self, reference):
        records = recs(("GeneB:D2N", 0.3), ("GeneA:K3R", 0.3), ("GeneB:M1I", 0.3))
        result = run_entropy_analysis(
            records,
            [WeekSnapshot(W1, records)],
            sequence_type="aa",
            gene_names=["GeneB"],
            reference=reference,
            focus_gene="GeneB",
            drop_last_week=False,
        )

        assert [p.position_key for p in result["position_entropy"]] == [
            "GeneA:K3", "GeneB:M1", "GeneB:D2",
        ]
        assert result["brush"] == {"start_index": 1, "stop_index": 2}

        entropy = -(0.3 * math.log(0.3) + 0.7 * math.log(0.7))
        assert result["time_data"] == [{"day": W1.start, "GeneB": pytest.approx(2 * entropy / 4)}]

    def test_nucleotide_codes_rejected(self, reference):
        with pytest.raises(MalformedCodeError):
            run_entropy_analysis(recs(("A1G", 0.5)), [], sequence_type="aa", reference=reference)


class TestGeneResolution:

    def test_unknown_gene_raises(self, reference):
        with pytest.raises(UnknownGeneError, match="ORF9"):
            run_entropy_analysis([], [], gene_names=["ORF9"], reference=reference)

    def test_resolves_all_sentinel(self, reference):
        genes = resolve_genes(["All", "GeneA"], reference)
        assert [g.name for g in genes] == ["All", "GeneA"]
        assert genes[0].end_position == 30
