"""Value types for transcript structure.

Exons, introns and coding-region markers are immutable attrs classes.
Coordinates are 1-based, inclusive, and strand is the integer +1 or -1.

Example:
    >>> from exonmap.core.models import Exon, SeqRegion
    >>> chr1 = SeqRegion("chr1")
    >>> exon = Exon("E1", chr1, 100, 149, 1, rank=1)
    >>> exon.length
    50
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Literal, Mapping

import attrs

from exonmap.errors import InvalidArgumentError
from exonmap.utils.intervals import GenomicRange

if TYPE_CHECKING:
    from exonmap.core.transcript import Transcript

logger = logging.getLogger(__name__)

# =============================================================================
# Strand
# =============================================================================

Strand = Literal[1, -1]

FORWARD: Strand = 1
REVERSE: Strand = -1

_STRAND_SYMBOLS = {"+": 1, "-": -1, "1": 1, "-1": -1, "+1": 1}


def parse_strand(value: int | str) -> Strand:
    """Normalise a strand given as +1/-1 or "+"/"-".

    Raises:
        InvalidArgumentError: If the value is not a recognised strand.
    """
    if isinstance(value, str):
        if value not in _STRAND_SYMBOLS:
            raise InvalidArgumentError(f"Invalid strand: {value!r}")
        value = _STRAND_SYMBOLS[value]
    if value not in (1, -1):
        raise InvalidArgumentError(f"Invalid strand: {value!r}")
    return value  # type: ignore[return-value]


def strand_symbol(strand: int) -> str:
    """Return "+" or "-" for a numeric strand."""
    return "+" if strand == FORWARD else "-"


# =============================================================================
# Sequence Regions and Exons
# =============================================================================


@attrs.frozen
class SeqRegion:
    """A chromosome or scaffold that features are located on.

    Attributes:
        name: Sequence region name (matches the FASTA/GFF seqid).
        length: Length in base pairs, if known.
    """

    name: str
    length: int | None = None

    def __str__(self) -> str:
        return self.name


def _check_exon_bounds(instance: Exon, attribute: attrs.Attribute, value: int) -> None:
    if instance.seq_region_start < 1:
        raise InvalidArgumentError(
            f"Exon {instance.id}: start must be >= 1, got {instance.seq_region_start}"
        )
    if value < instance.seq_region_start:
        raise InvalidArgumentError(
            f"Exon {instance.id}: end must be >= start: "
            f"{instance.seq_region_start}-{value}"
        )


@attrs.frozen
class Exon:
    """A contiguous transcribed genomic interval.

    Attributes:
        id: Exon identifier, unique within a dataset.
        seq_region: Sequence region the exon lies on.
        seq_region_start: Start position (1-based, inclusive).
        seq_region_end: End position (1-based, inclusive).
        seq_region_strand: Strand (+1 or -1).
        rank: Position of the exon in transcription order.
    """

    id: str
    seq_region: SeqRegion
    seq_region_start: int
    seq_region_end: int = attrs.field(validator=_check_exon_bounds)
    seq_region_strand: Strand = attrs.field(converter=parse_strand, default=FORWARD)
    rank: int = 0

    @property
    def start(self) -> int:
        return self.seq_region_start

    @property
    def end(self) -> int:
        return self.seq_region_end

    @property
    def strand(self) -> Strand:
        return self.seq_region_strand

    @property
    def length(self) -> int:
        """Exon length in base pairs."""
        return self.seq_region_end - self.seq_region_start + 1

    @property
    def range(self) -> GenomicRange:
        return GenomicRange(self.seq_region_start, self.seq_region_end)

    def contains_genomic(self, position: int) -> bool:
        """Check if a genomic position falls inside this exon."""
        return self.seq_region_start <= position <= self.seq_region_end


# =============================================================================
# Coding Region Markers
# =============================================================================


def _check_offset(exon_attribute: str):
    def validator(instance: CodingRegion, attribute: attrs.Attribute, value: int) -> None:
        exon = getattr(instance, exon_attribute)
        if not 1 <= value <= exon.length:
            raise InvalidArgumentError(
                f"{attribute.name} {value} outside exon {exon.id} (length {exon.length})"
            )

    return validator


@attrs.frozen
class CodingRegion:
    """Boundaries of the coding sequence within a transcript.

    Offsets are 1-based positions within the exon's own sequence, counted in
    transcription direction. On the reverse strand offset 1 is therefore the
    exon's highest genomic coordinate.

    Attributes:
        start_exon: Exon containing the first coding base.
        start_offset: Position of the first coding base within start_exon.
        end_exon: Exon containing the last coding base.
        end_offset: Position of the last coding base within end_exon.
    """

    start_exon: Exon
    start_offset: int = attrs.field(validator=_check_offset("start_exon"))
    end_exon: Exon
    end_offset: int = attrs.field(validator=_check_offset("end_exon"))


# =============================================================================
# Introns
# =============================================================================


@attrs.frozen(eq=False)
class Intron:
    """The genomic gap between two adjacent exons of a transcript.

    Introns are never stored; build them with :meth:`Intron.between` or
    :meth:`exonmap.core.transcript.Transcript.introns`.

    Attributes:
        seq_region: Sequence region of the flanking exons.
        seq_region_start: First intronic base (previous_exon.end + 1).
        seq_region_end: Last intronic base (next_exon.start - 1).
        seq_region_strand: Strand of the flanking exons.
        previous_exon: Flanking exon with the lower genomic start.
        next_exon: Flanking exon with the higher genomic start.
        transcript: Transcript in which the two exons are adjacent.
    """

    seq_region: SeqRegion
    seq_region_start: int
    seq_region_end: int
    seq_region_strand: Strand
    previous_exon: Exon
    next_exon: Exon
    transcript: Transcript

    @property
    def length(self) -> int:
        return self.seq_region_end - self.seq_region_start + 1

    @property
    def range(self) -> GenomicRange:
        return GenomicRange(self.seq_region_start, self.seq_region_end)

    @classmethod
    def between(
        cls,
        exon_1: Exon,
        exon_2: Exon,
        transcripts_by_exon: Mapping[str, Iterable[Transcript]],
    ) -> Intron:
        """Build the intron separating two exons.

        The two exons may be given in any order. They must both belong to at
        least one common transcript in which their ranks differ by exactly one.

        Args:
            exon_1: One flanking exon.
            exon_2: The other flanking exon.
            transcripts_by_exon: Mapping of exon id to the transcripts that
                contain that exon (see ``index_transcripts_by_exon``).

        Returns:
            The Intron between the two exons.

        Raises:
            InvalidArgumentError: If the exons share no transcript, are not
                adjacent in any shared transcript, lie on different sequence
                regions, or leave no bases between them.
        """
        second_ids = {t.id for t in transcripts_by_exon.get(exon_2.id, ())}
        candidates = [t for t in transcripts_by_exon.get(exon_1.id, ()) if t.id in second_ids]
        if not candidates:
            raise InvalidArgumentError(
                f"Exons {exon_1.id} and {exon_2.id} are not two exons of a common transcript"
            )

        transcript = None
        for candidate in candidates:
            rank_1 = candidate.rank_of(exon_1)
            rank_2 = candidate.rank_of(exon_2)
            if rank_1 is not None and rank_2 is not None and abs(rank_2 - rank_1) == 1:
                transcript = candidate
                break
        if transcript is None:
            raise InvalidArgumentError(
                f"Exons {exon_1.id} and {exon_2.id} are not adjacent in any common transcript"
            )

        if exon_1.seq_region != exon_2.seq_region:
            raise InvalidArgumentError(
                f"Exons {exon_1.id} and {exon_2.id} lie on different sequence regions"
            )

        previous_exon, next_exon = sorted((exon_1, exon_2), key=lambda e: e.seq_region_start)
        start = previous_exon.seq_region_end + 1
        end = next_exon.seq_region_start - 1
        if start > end:
            raise InvalidArgumentError(
                f"Exons {previous_exon.id} and {next_exon.id} leave no intronic "
                f"bases between them ({previous_exon.range} / {next_exon.range})"
            )

        return cls(
            seq_region=previous_exon.seq_region,
            seq_region_start=start,
            seq_region_end=end,
            seq_region_strand=previous_exon.seq_region_strand,
            previous_exon=previous_exon,
            next_exon=next_exon,
            transcript=transcript,
        )
