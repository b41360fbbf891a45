"""Core transcript model and coordinate mapping.

This package contains the pure, I/O-free part of exonmap:

- models: SeqRegion, Exon, CodingRegion and Intron value types
- mapper: CoordinateMapper, conversions among coordinate systems
- transcript: Transcript, the composition root with derived views
"""

from exonmap.core.mapper import CoordinateMapper
from exonmap.core.models import CodingRegion, Exon, Intron, SeqRegion, parse_strand
from exonmap.core.transcript import Transcript, index_transcripts_by_exon

__all__ = [
    "CodingRegion",
    "CoordinateMapper",
    "Exon",
    "Intron",
    "SeqRegion",
    "Transcript",
    "index_transcripts_by_exon",
    "parse_strand",
]
