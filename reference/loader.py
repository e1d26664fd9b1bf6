"""
reference/loader.py
-------------------
Load the static reference table (genome sequence + gene coordinates).

This is the only module that reads reference data from disk. The table is
built once at start-up and handed, read-only, to every computation.

Expected JSON layout
--------------------
{
    "genomeLength": 29903,            # optional, defaults to len(nucSeq)
    "nucSeq": "ATTAAAGGTTTATACC...",
    "genes": [
        {"name": "ORF1a", "startPosition": 266, "endPosition": 13483, "aaSeq": "MESLVPG..."},
        ...
    ]
}

A gene without "aaSeq" gets its protein translated from the reference
sequence with Biopython.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from Bio.Seq import Seq

from analysis.errors import ReferenceDataError
from reference.models import ALL_GENES, GeneRange, ReferenceTable

logger = logging.getLogger(__name__)


def translate_gene(reference_sequence: str, start_position: int, end_position: int) -> str:
    """Translate a 1-based inclusive CDS to protein (stops at the first stop codon)."""
    cds = reference_sequence[start_position - 1:end_position]
    trimmed = cds[:len(cds) - len(cds) % 3]
    return str(Seq(trimmed).translate(to_stop=True))


def _gene_from_dict(d: Dict[str, Any], reference_sequence: str) -> GeneRange:
    required = ("name", "startPosition", "endPosition")
    missing = [k for k in required if k not in d]
    if missing:
        raise ReferenceDataError(f"Gene entry missing required keys: {missing}")

    name = str(d["name"])
    start = int(d["startPosition"])
    end = int(d["endPosition"])
    if start > end:
        raise ReferenceDataError(f"Gene {name!r}: startPosition {start} is after endPosition {end}.")

    aa_sequence = d.get("aaSeq")
    if not aa_sequence:
        aa_sequence = translate_gene(reference_sequence, start, end)
        logger.info(f"Gene {name!r}: no aaSeq given, translated {len(aa_sequence)} aa from the reference.")

    return GeneRange(
        name=name,
        start_position=start,
        end_position=end,
        aa_sequence=str(aa_sequence).upper(),
    )


def reference_from_dict(data: Dict[str, Any]) -> ReferenceTable:
    """Build a ReferenceTable from the parsed JSON document."""
    if "nucSeq" not in data:
        raise ReferenceDataError("Reference data has no 'nucSeq'.")

    reference_sequence = str(data["nucSeq"]).upper().strip()
    genome_length = int(data.get("genomeLength", len(reference_sequence)))
    if genome_length <= 0:
        raise ReferenceDataError("genomeLength must be > 0.")

    # 'All' is a selection sentinel, not a gene
    genes = tuple(
        _gene_from_dict(g, reference_sequence)
        for g in data.get("genes", [])
        if g.get("name") != ALL_GENES
    )

    names = [g.name for g in genes]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ReferenceDataError(f"Duplicate gene names in reference data: {duplicates}")

    return ReferenceTable(
        genome_length=genome_length,
        reference_sequence=reference_sequence,
        genes=genes,
    )


def load_reference_table(path: Union[str, Path]) -> ReferenceTable:
    """
    Read the reference table JSON.

    Raises
    ------
    ReferenceDataError if the file is missing, is not JSON, or lacks
    required fields.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ReferenceDataError(f"Reference data not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"Reference data is not valid JSON: {path} ({exc})") from exc

    table = reference_from_dict(data)
    logger.info(
        f"Reference loaded from {path}: genome_length={table.genome_length}, "
        f"{len(table.genes)} genes."
    )
    return table
