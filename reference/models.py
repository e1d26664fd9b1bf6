from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Literal, Optional, Sequence, Tuple, Union


SequenceType = Literal["nuc", "aa"]

ALL_GENES = "All"


@dataclass(frozen=True)
class MutationRecord:
    """One mutation code and the fraction of sequences in a selection that carry it."""
    code: str
    proportion: float


@dataclass(frozen=True)
class NucMutation:
    """Decoded nucleotide substitution/deletion, e.g. A23403G."""
    position: int
    original_base: str
    mutated_base: str

    @property
    def position_key(self) -> str:
        return str(self.position)

    @property
    def is_deletion(self) -> bool:
        return self.mutated_base == "-"

    def __str__(self):
        return f"{self.original_base}{self.position}{self.mutated_base}"


@dataclass(frozen=True)
class AAMutation:
    """Decoded amino acid substitution/deletion, e.g. S:D614G."""
    gene: str
    position: int  # 1-based codon index within the gene
    original_base: str
    mutated_base: str

    @property
    def position_key(self) -> str:
        return f"{self.gene}:{self.original_base}{self.position}"

    @property
    def is_deletion(self) -> bool:
        return self.mutated_base == "-"

    def __str__(self):
        return f"{self.gene}:{self.original_base}{self.position}{self.mutated_base}"


DecodedMutation = Union[NucMutation, AAMutation]


@dataclass(frozen=True)
class PositionProportion:
    """
    One row of the proportion distribution at a position.

    Fields
    ------
    position_key  : '23403' (nucleotide) or 'S:D614' (amino acid)
    mutated_base  : observed base, or the synthetic reference tag
                    ('ref' for nucleotides, '<base> (ref)' for amino acids)
    original_base : reference base at the position
    proportion    : fraction of sequences, normally within [0, 1]
    """
    position_key: str
    mutated_base: Optional[str]
    original_base: Optional[str]
    proportion: float


@dataclass(frozen=True)
class PositionEntropy:
    """Proportion distribution at one position and its Shannon entropy in nats."""
    position_key: str
    proportions: Tuple[PositionProportion, ...]
    entropy: float


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar range. start/end are whatever day type the caller uses
    (datetime.date in this package); they only need to be hashable and ordered.
    """
    start: Any
    end: Any


@dataclass(frozen=True)
class WeekSnapshot:
    """
    Mutation records already scoped to one week.
    records=None marks a week for which no data could be fetched.
    """
    week: DateRange
    records: Optional[Sequence[MutationRecord]]


@dataclass(frozen=True)
class WeekEntropy:
    week: DateRange
    mean_entropy: float


@dataclass(frozen=True)
class GeneRange:
    """
    Reference coordinates of a gene.

    Fields
    ------
    name           : gene name as used in amino acid mutation codes
    start_position : 1-based first nucleotide of the gene on the reference
    end_position   : 1-based last nucleotide of the gene on the reference
    aa_sequence    : reference protein sequence (empty for the 'All' sentinel)
    """
    name: str
    start_position: int
    end_position: int
    aa_sequence: str = ""

    @property
    def is_all(self) -> bool:
        return self.name == ALL_GENES


@dataclass(frozen=True)
class ReferenceTable:
    """
    Static reference genome metadata. Built once at start-up by
    reference.loader and shared read-only between computations.
    """
    genome_length: int
    reference_sequence: str
    genes: Tuple[GeneRange, ...] = field(default_factory=tuple)

    @cached_property
    def gene_order(self) -> Dict[str, int]:
        """Gene name -> declaration index, used for genomic ordering of aa positions."""
        return {g.name: i for i, g in enumerate(self.genes)}

    @cached_property
    def all_genes(self) -> GeneRange:
        """The 'All' sentinel spanning the whole genome."""
        return GeneRange(name=ALL_GENES, start_position=0, end_position=self.genome_length)

    def gene(self, name: str) -> Optional[GeneRange]:
        """Look up a gene by name; 'All' returns the whole-genome sentinel."""
        if name == ALL_GENES:
            return self.all_genes
        for g in self.genes:
            if g.name == name:
                return g
        return None

    def reference_base(self, position: int) -> Optional[str]:
        """Reference nucleotide at a 1-based position, None when out of range."""
        if 1 <= position <= len(self.reference_sequence):
            return self.reference_sequence[position - 1]
        return None
