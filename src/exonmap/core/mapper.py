"""Coordinate conversion between genomic, cDNA, CDS and peptide space.

The mapper walks exons in transcription order: ascending genomic start on the
forward strand, descending on the reverse strand. cDNA position 1 is the first
transcribed base, so on the reverse strand it is the highest genomic
coordinate of the first exon.

Every strand-dependent step goes through two helpers, ``_to_genomic`` and
``_to_exon_offset``, which are exact inverses of each other for a given exon.

Example:
    >>> from exonmap.core.mapper import CoordinateMapper
    >>> mapper = CoordinateMapper(exons, strand=1, coding=coding)
    >>> mapper.cdna_to_genomic(1)
    100
    >>> mapper.genomic_to_cds(109)
    1
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from exonmap.core.models import FORWARD, CodingRegion, Exon, Strand, parse_strand
from exonmap.errors import (
    InvalidArgumentError,
    InvariantViolationError,
    NotSupportedError,
    OutOfRangeError,
)
from exonmap.utils.intervals import GenomicRange, span

logger = logging.getLogger(__name__)

GENOMIC = "genomic"
CDNA = "cdna"
CDS = "cds"
PEPTIDE = "peptide"

COORDINATE_SYSTEMS = (GENOMIC, CDNA, CDS, PEPTIDE)


def transcription_order(exons: Sequence[Exon], strand: int) -> list[Exon]:
    """Sort exons in the order they are transcribed on the given strand."""
    return sorted(exons, key=lambda e: e.seq_region_start, reverse=strand != FORWARD)


class CoordinateMapper:
    """Convert positions between coordinate systems of one transcript.

    Attributes:
        exons: Exons in transcription order.
        strand: Transcript strand (+1 or -1).
        coding: CDS boundary markers, or None for a non-coding transcript.
    """

    def __init__(
        self,
        exons: Sequence[Exon],
        strand: int,
        coding: CodingRegion | None = None,
    ) -> None:
        self.strand: Strand = parse_strand(strand)
        self.exons = transcription_order(exons, self.strand)
        self.coding = coding

        # ends[i] is the cDNA position of the last base of exons[i]
        self._cdna_ends = np.cumsum([e.length for e in self.exons], dtype=np.int64)
        self._index = {exon.id: i for i, exon in enumerate(self.exons)}
        self._bounds = span(e.range for e in self.exons)

    def __repr__(self) -> str:
        return (
            f"CoordinateMapper(n_exons={len(self.exons)}, strand={self.strand}, "
            f"coding={self.coding is not None})"
        )

    # =========================================================================
    # Strand-aware primitives
    # =========================================================================

    def _to_genomic(self, exon: Exon, offset: int) -> int:
        """Project a 0-based offset within an exon (transcription direction)."""
        if self.strand == FORWARD:
            return exon.seq_region_start + offset
        return exon.seq_region_end - offset

    def _to_exon_offset(self, exon: Exon, position: int) -> int:
        """Measure a genomic position as a 0-based offset within an exon."""
        if self.strand == FORWARD:
            return position - exon.seq_region_start
        return exon.seq_region_end - position

    def _cdna_before(self, index: int) -> int:
        """Total cDNA length of the exons preceding exons[index]."""
        return int(self._cdna_ends[index - 1]) if index > 0 else 0

    def _exon_index(self, exon: Exon) -> int:
        index = self._index.get(exon.id)
        if index is None:
            raise InvariantViolationError(f"Exon {exon.id} is not part of this transcript")
        return index

    # =========================================================================
    # Lengths and bounds
    # =========================================================================

    @property
    def bounds(self) -> GenomicRange | None:
        """Genomic span of all exons, or None without exons."""
        return self._bounds

    @property
    def cdna_length(self) -> int:
        return int(self._cdna_ends[-1]) if len(self._cdna_ends) else 0

    @property
    def cds_length(self) -> int | None:
        start = self.coding_region_cdna_start
        end = self.coding_region_cdna_end
        if start is None or end is None:
            return None
        return end - start + 1

    # =========================================================================
    # Exon lookup
    # =========================================================================

    def exon_for_genomic_position(self, position: int) -> Exon | None:
        """Find the exon covering a genomic position.

        Returns:
            The exon, or None if the position is intronic.

        Raises:
            OutOfRangeError: If the position lies outside the transcript.
        """
        if self._bounds is None or not self._bounds.start <= position <= self._bounds.end:
            raise OutOfRangeError(
                f"outside transcript bounds {self._bounds}", position, GENOMIC
            )
        for exon in self.exons:
            if exon.contains_genomic(position):
                return exon
        return None

    def _locate_cdna(self, position: int) -> int:
        if not 1 <= position <= self.cdna_length:
            raise OutOfRangeError(
                f"cDNA length is {self.cdna_length}", position, CDNA
            )
        return int(np.searchsorted(self._cdna_ends, position, side="left"))

    def exon_for_cdna_position(self, position: int) -> Exon:
        """Find the exon covering a cDNA position.

        Raises:
            OutOfRangeError: If the position is outside [1, cdna_length].
        """
        return self.exons[self._locate_cdna(position)]

    # =========================================================================
    # genomic <-> cDNA
    # =========================================================================

    def cdna_to_genomic(self, position: int) -> int:
        """Convert a cDNA position to a genomic position."""
        index = self._locate_cdna(position)
        offset = position - (self._cdna_before(index) + 1)
        return self._to_genomic(self.exons[index], offset)

    def genomic_to_cdna(self, position: int) -> int:
        """Convert a genomic position to a cDNA position.

        Raises:
            OutOfRangeError: If the position is outside the transcript or
                inside an intron.
        """
        exon = self.exon_for_genomic_position(position)
        if exon is None:
            raise OutOfRangeError("position is intronic", position, GENOMIC)
        index = self._index[exon.id]
        return self._cdna_before(index) + self._to_exon_offset(exon, position) + 1

    # =========================================================================
    # Coding region
    # =========================================================================

    def _cdna_of_marker(self, exon: Exon, offset: int) -> int:
        return self._cdna_before(self._exon_index(exon)) + offset

    @property
    def coding_region_cdna_start(self) -> int | None:
        """cDNA position of the first coding base (5' UTR border)."""
        if self.coding is None:
            return None
        return self._cdna_of_marker(self.coding.start_exon, self.coding.start_offset)

    @property
    def coding_region_cdna_end(self) -> int | None:
        """cDNA position of the last coding base (3' UTR border)."""
        if self.coding is None:
            return None
        return self._cdna_of_marker(self.coding.end_exon, self.coding.end_offset)

    @property
    def coding_region_genomic_start(self) -> int | None:
        """Lowest genomic coordinate of the CDS, whatever the strand."""
        if self.coding is None:
            return None
        c = self.coding
        if self.strand == FORWARD:
            return c.start_exon.seq_region_start + (c.start_offset - 1)
        return c.end_exon.seq_region_end - (c.end_offset - 1)

    @property
    def coding_region_genomic_end(self) -> int | None:
        """Highest genomic coordinate of the CDS, whatever the strand."""
        if self.coding is None:
            return None
        c = self.coding
        if self.strand == FORWARD:
            return c.end_exon.seq_region_start + (c.end_offset - 1)
        return c.start_exon.seq_region_end - (c.start_offset - 1)

    # =========================================================================
    # genomic <-> CDS
    # =========================================================================

    def _require_cds_start(self, position: int) -> int:
        start = self.coding_region_cdna_start
        if start is None:
            raise OutOfRangeError("transcript has no coding region", position, CDS)
        return start

    def cds_to_genomic(self, position: int) -> int:
        """Convert a CDS position (1 = first coding base) to genomic."""
        start = self._require_cds_start(position)
        return self.cdna_to_genomic(position + start - 1)

    def genomic_to_cds(self, position: int) -> int:
        """Convert a genomic position to a CDS position.

        Positions in the UTRs yield values below 1 or above cds_length.
        """
        start = self._require_cds_start(position)
        return self.genomic_to_cdna(position) - start + 1

    # =========================================================================
    # Peptide
    # =========================================================================

    def pep_to_genomic(self, position: int) -> int:
        raise NotSupportedError("Peptide to genomic conversion is not yet supported")

    def genomic_to_pep(self, position: int) -> int:
        raise NotSupportedError("Genomic to peptide conversion is not yet supported")

    # =========================================================================
    # Dispatch
    # =========================================================================

    def convert(self, position: int, source: str, target: str) -> int:
        """Convert a position between two named coordinate systems.

        Args:
            position: Position in the source system.
            source: One of "genomic", "cdna", "cds", "peptide".
            target: One of "genomic", "cdna", "cds", "peptide".

        Returns:
            Position in the target system.

        Raises:
            InvalidArgumentError: If either system name is unknown.
            NotSupportedError: If either system is "peptide".
        """
        for name in (source, target):
            if name not in COORDINATE_SYSTEMS:
                raise InvalidArgumentError(f"Unknown coordinate system: {name}")
        if PEPTIDE in (source, target):
            raise NotSupportedError(f"Conversion from {source} to {target} is not yet supported")
        if source == target:
            return position

        genomic = {
            GENOMIC: lambda p: p,
            CDNA: self.cdna_to_genomic,
            CDS: self.cds_to_genomic,
        }[source](position)
        return {
            GENOMIC: lambda p: p,
            CDNA: self.genomic_to_cdna,
            CDS: self.genomic_to_cds,
        }[target](genomic)
