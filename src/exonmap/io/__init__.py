"""Input handlers for exonmap.

- fasta: GenomeAccessor, a pyfaidx-backed sequence provider
- gff: GFF3TranscriptReader, builds Transcript objects from GFF3
"""

from exonmap.io.fasta import GenomeAccessor
from exonmap.io.gff import GFF3TranscriptReader, iter_transcripts, read_transcripts

__all__ = [
    "GFF3TranscriptReader",
    "GenomeAccessor",
    "iter_transcripts",
    "read_transcripts",
]
