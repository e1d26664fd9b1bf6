"""
analysis/mutation_codes.py
--------------------------
Parse mutation codes into structured mutations.

Two notations are in use:

    nucleotide   <ref><position><alt>           A23403G, C241-
    amino acid   <gene>:<ref><codon><alt>       S:D614G, ORF1a:S3675-

The caller normally knows which notation it asked the data source for and
passes it as sequence_type. Only when it is left as None is the notation
inferred from the code itself (a ':' means amino acid). Nucleotide codes
never contain ':', so the inference holds for these two notations but would
misclassify any future notation that does.
"""

import re
from typing import Optional, Tuple

from analysis.errors import MalformedCodeError
from reference.models import AAMutation, DecodedMutation, NucMutation, SequenceType


NUC_CODE = re.compile(r"^(?P<ref>[A-Za-z])(?P<pos>\d+)(?P<alt>[A-Za-z*.\-])$")
AA_CODE = re.compile(r"^(?P<gene>[^:\s]+):(?P<ref>[A-Za-z*])(?P<pos>\d+)(?P<alt>[A-Za-z*\-])$")

AA_POSITION_KEY = re.compile(r"^(?P<gene>[^:\s]+):(?P<ref>[A-Za-z*])(?P<pos>\d+)$")
NUC_POSITION_KEY = re.compile(r"^(?P<pos>\d+)$")


def infer_sequence_type(code: str) -> SequenceType:
    """Lexical fallback: amino acid codes carry a gene/codon separator."""
    return "aa" if ":" in code else "nuc"


def decode_nuc_mutation(code: str) -> NucMutation:
    match = NUC_CODE.match(code.strip())
    if match is None:
        raise MalformedCodeError(code, "expected <ref><position><alt>, e.g. A23403G")

    position = int(match.group("pos"))
    if position < 1:
        raise MalformedCodeError(code, "positions are 1-based")

    return NucMutation(
        position=position,
        original_base=match.group("ref"),
        mutated_base=match.group("alt"),
    )


def decode_aa_mutation(code: str) -> AAMutation:
    match = AA_CODE.match(code.strip())
    if match is None:
        raise MalformedCodeError(code, "expected <gene>:<ref><codon><alt>, e.g. S:D614G")

    position = int(match.group("pos"))
    if position < 1:
        raise MalformedCodeError(code, "codon indices are 1-based")

    return AAMutation(
        gene=match.group("gene"),
        position=position,
        original_base=match.group("ref"),
        mutated_base=match.group("alt"),
    )


def decode_mutation(code: str, sequence_type: Optional[SequenceType] = None) -> DecodedMutation:
    """
    Decode a single mutation code.

    Parameters
    ----------
    code : str
        Mutation code as delivered by the data source.
    sequence_type : 'nuc', 'aa' or None
        Notation the caller requested. None falls back to inferring it
        from the code.

    Raises
    ------
    MalformedCodeError if the code does not follow the grammar, or if its
    notation contradicts the requested sequence_type.
    """
    if not isinstance(code, str) or not code.strip():
        raise MalformedCodeError(str(code), "empty code")

    lexical = infer_sequence_type(code)
    if sequence_type is not None and sequence_type != lexical:
        expected = "an amino acid" if sequence_type == "aa" else "a nucleotide"
        raise MalformedCodeError(code, f"not {expected} code")

    if lexical == "aa":
        return decode_aa_mutation(code)
    return decode_nuc_mutation(code)


def parse_position_key(key: str) -> Tuple[Optional[str], int]:
    """
    Split a position key into (gene, position).

    '23403'  -> (None, 23403)
    'S:D614' -> ('S', 614)
    """
    match = AA_POSITION_KEY.match(key)
    if match is not None:
        return match.group("gene"), int(match.group("pos"))

    match = NUC_POSITION_KEY.match(key)
    if match is not None:
        return None, int(match.group("pos"))

    raise MalformedCodeError(key, "not a position key")


def position_gene(key: str) -> Optional[str]:
    """Gene name of an amino acid position key, None for nucleotide keys."""
    return parse_position_key(key)[0]
