"""
Shared fixtures: a tiny synthetic reference genome.

30 nt, two genes:
    GeneA  nt 3-11   MAK
    GeneB  nt 15-26  MDGL
"""

import pytest

from reference.models import GeneRange, ReferenceTable


REF_SEQ = "ACGTACGTAC" * 3

GENE_A = GeneRange(name="GeneA", start_position=3, end_position=11, aa_sequence="MAK")
GENE_B = GeneRange(name="GeneB", start_position=15, end_position=26, aa_sequence="MDGL")


@pytest.fixture
def reference() -> ReferenceTable:
    return ReferenceTable(
        genome_length=len(REF_SEQ),
        reference_sequence=REF_SEQ,
        genes=(GENE_A, GENE_B),
    )
