"""exonmap: coordinate mapping for gene transcripts.

exonmap models a transcript as an ordered chain of exons and converts
positions between genomic, cDNA, CDS and peptide coordinates, accounting for
strand, exon boundaries, introns and UTRs.

Example:
    >>> import exonmap
    >>> exonmap.__version__
    '0.1.0'

Modules:
    core: Exon/Intron value types, CoordinateMapper and Transcript
    io: FASTA sequence provider and GFF3 transcript loader
    utils: Intervals, sequence utilities and logging
"""

__version__ = "0.1.0"

from exonmap.core.mapper import CoordinateMapper
from exonmap.core.models import CodingRegion, Exon, Intron, SeqRegion
from exonmap.core.transcript import Transcript, index_transcripts_by_exon
from exonmap.errors import (
    ExonMapError,
    InvalidArgumentError,
    InvariantViolationError,
    NotSupportedError,
    OutOfRangeError,
)

__all__ = [
    "__version__",
    "CodingRegion",
    "CoordinateMapper",
    "Exon",
    "ExonMapError",
    "Intron",
    "InvalidArgumentError",
    "InvariantViolationError",
    "NotSupportedError",
    "OutOfRangeError",
    "SeqRegion",
    "Transcript",
    "index_transcripts_by_exon",
]
