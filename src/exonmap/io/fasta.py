"""FASTA sequence provider.

:class:`GenomeAccessor` opens an indexed FASTA file with pyfaidx and serves
exon sequences to :class:`exonmap.core.transcript.Transcript` through
:meth:`GenomeAccessor.fetch_sequence`.

Example:
    >>> from exonmap.io.fasta import GenomeAccessor
    >>> with GenomeAccessor("genome.fa") as genome:
    ...     tx = Transcript("T1", -1, exons, fetch_sequence=genome.fetch_sequence)
    ...     print(tx.seq())
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pyfaidx

from exonmap.core.models import FORWARD, SeqRegion
from exonmap.utils.sequences import reverse_complement

logger = logging.getLogger(__name__)


class GenomeAccessor:
    """Random access to a reference genome.

    The .fai index is built next to the FASTA file on first open. Soft-masked
    (lower case) bases are returned as stored.

    Attributes:
        path: Path to the FASTA file.
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Open the genome.

        Args:
            fasta_path: FASTA file, indexed or not.

        Raises:
            FileNotFoundError: If the FASTA file does not exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = pyfaidx.Fasta(
            str(self.path), sequence_always_upper=False, rebuild=False
        )
        self._lengths = {name: len(self._fasta[name]) for name in self._fasta.keys()}
        logger.info(f"Opened FASTA: {self.path.name}, {len(self._lengths)} sequences")

    def __enter__(self) -> GenomeAccessor:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __contains__(self, seqid: str) -> bool:
        return seqid in self._lengths

    def close(self) -> None:
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None

    def get_length(self, seqid: str) -> int:
        """Length of a sequence region.

        Raises:
            KeyError: If the genome has no such sequence.
        """
        if seqid not in self._lengths:
            raise KeyError(f"Unknown scaffold: {seqid}")
        return self._lengths[seqid]

    def get_sequence(self, seqid: str, start: int, end: int, strand: str = "+") -> str:
        """Slice a sequence region (0-based, half-open).

        Args:
            seqid: Sequence region name.
            start: First base, 0-based.
            end: One past the last base.
            strand: "+" or "-"; "-" returns the reverse complement.

        Raises:
            KeyError: If the genome has no such sequence.
            ValueError: If the slice is empty or runs off either end.
        """
        if self._fasta is None:
            raise RuntimeError(f"{self.path.name} is closed")

        length = self.get_length(seqid)
        if start < 0:
            raise ValueError(f"Start position cannot be negative: {start}")
        if end > length:
            raise ValueError(f"End position {end} exceeds scaffold length {length}")
        if start >= end:
            raise ValueError(f"Start ({start}) must be less than end ({end})")

        sequence = str(self._fasta[seqid][start:end])
        return reverse_complement(sequence) if strand == "-" else sequence

    def fetch_sequence(self, seq_region: SeqRegion | str, start: int, end: int, strand: int) -> str:
        """Sequence provider for transcripts (1-based, inclusive).

        Returns exactly ``end - start + 1`` bases, reverse-complemented when
        ``strand`` is -1.
        """
        seqid = seq_region.name if isinstance(seq_region, SeqRegion) else seq_region
        return self.get_sequence(seqid, start - 1, end, "+" if strand == FORWARD else "-")
