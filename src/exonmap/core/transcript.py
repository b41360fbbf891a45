"""Transcript model and derived views.

A Transcript owns its exons (in rank order) and the coding-region markers,
delegates all coordinate math to :class:`CoordinateMapper` and builds the
derived views: introns, UTR ranges and the spliced sequences.

Sequences are never read by the transcript itself. Callers inject a
``fetch_sequence(seq_region, start, end, strand)`` callable, for example
:meth:`exonmap.io.fasta.GenomeAccessor.fetch_sequence`.

Example:
    >>> from exonmap.core.transcript import Transcript
    >>> tx = Transcript("T1", 1, exons, coding=coding, fetch_sequence=genome.fetch_sequence)
    >>> tx.coding_region_cdna_start
    10
    >>> [str(i.range) for i in tx.introns()]
    ['150..199']
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Iterable, Iterator, Sequence

import attrs

from exonmap.core.mapper import CoordinateMapper, transcription_order
from exonmap.core.models import FORWARD, CodingRegion, Exon, Intron, SeqRegion, Strand
from exonmap.errors import (
    InvalidArgumentError,
    InvariantViolationError,
    NotSupportedError,
)
from exonmap.utils.intervals import GenomicRange, closed_range
from exonmap.utils.sequences import translate

logger = logging.getLogger(__name__)

FetchSequence = Callable[[SeqRegion, int, int, int], str]
Translator = Callable[[str], str]


# =============================================================================
# Introns View
# =============================================================================


class IntronView:
    """Lazy, restartable sequence of a transcript's introns.

    Each iteration rebuilds the introns from the exon list. Adjacent exons
    that fail intron validation indicate corrupt input and raise
    InvariantViolationError.
    """

    def __init__(self, transcript: Transcript) -> None:
        self._transcript = transcript

    def __len__(self) -> int:
        return max(len(self._transcript.exons) - 1, 0)

    def __iter__(self) -> Iterator[Intron]:
        tx = self._transcript
        membership = {exon.id: (tx,) for exon in tx.exons}
        for previous, exon in zip(tx.exons, tx.exons[1:]):
            try:
                yield Intron.between(previous, exon, membership)
            except InvalidArgumentError as e:
                raise InvariantViolationError(
                    f"Transcript {tx.id}: exons {previous.id} and {exon.id} "
                    f"do not bound an intron"
                ) from e

    def __repr__(self) -> str:
        return f"IntronView(transcript={self._transcript.id!r}, n={len(self)})"


# =============================================================================
# Transcript
# =============================================================================


class Transcript:
    """A transcript: an ordered chain of exons with an optional CDS.

    Attributes:
        id: Transcript identifier.
        strand: Transcript strand (+1 or -1).
        exons: Exons sorted by rank.
        coding: CDS boundary markers, or None if non-coding.
        mapper: Coordinate mapper built from the exons.
    """

    def __init__(
        self,
        id: str,
        strand: int | str,
        exons: Iterable[Exon] = (),
        coding: CodingRegion | None = None,
        fetch_sequence: FetchSequence | None = None,
        translator: Translator = translate,
        strict: bool = False,
    ) -> None:
        """Initialize the transcript.

        Args:
            id: Transcript identifier.
            strand: Strand, as +1/-1 or "+"/"-".
            exons: Member exons, in any order; they are sorted by rank.
            coding: CDS markers. Both exons must be members.
            fetch_sequence: Sequence provider used by seq() and friends.
            translator: Translation provider used by protein_seq().
            strict: Raise instead of warn when rank order disagrees with
                the strand-derived genomic order.

        Raises:
            InvalidArgumentError: On duplicate exon ids or foreign CDS exons,
                on exons whose strand or sequence region differs from the
                transcript, and on a coding region that ends before it starts.
            InvariantViolationError: In strict mode, on inconsistent ranks.
        """
        self.id = id
        self.exons: list[Exon] = sorted(exons, key=lambda e: e.rank)
        self.coding = coding
        self.fetch_sequence = fetch_sequence
        self.translator = translator

        self._ranks = {exon.id: i + 1 for i, exon in enumerate(self.exons)}
        if len(self._ranks) != len(self.exons):
            raise InvalidArgumentError(f"Transcript {id}: duplicate exon ids")
        if coding is not None:
            for exon in (coding.start_exon, coding.end_exon):
                if exon.id not in self._ranks:
                    raise InvalidArgumentError(
                        f"Transcript {id}: coding exon {exon.id} is not a member"
                    )

        self.mapper = CoordinateMapper(self.exons, strand, coding)
        self._check_exon_placement()
        self._check_coding_order()
        self._check_rank_order(strict)

        self._seq: str | None = None
        self._seq_lock = threading.Lock()

        logger.debug(
            f"Built transcript {id}: {len(self.exons)} exons, strand {self.strand}, "
            f"{'coding' if coding else 'non-coding'}"
        )

    def _check_exon_placement(self) -> None:
        # seq() fetches each exon on its own strand and region
        for exon in self.exons:
            if exon.seq_region_strand != self.strand:
                raise InvalidArgumentError(
                    f"Transcript {self.id}: exon {exon.id} is on strand "
                    f"{exon.seq_region_strand}, transcript is on strand {self.strand}"
                )
            if exon.seq_region != self.exons[0].seq_region:
                raise InvalidArgumentError(
                    f"Transcript {self.id}: exon {exon.id} lies on {exon.seq_region}, "
                    f"expected {self.exons[0].seq_region}"
                )

    def _check_coding_order(self) -> None:
        start = self.mapper.coding_region_cdna_start
        end = self.mapper.coding_region_cdna_end
        if start is not None and end is not None and start > end:
            raise InvalidArgumentError(
                f"Transcript {self.id}: coding region starts at cDNA {start} "
                f"after it ends at cDNA {end}"
            )

    def _check_rank_order(self, strict: bool) -> None:
        if [e.id for e in self.exons] == [e.id for e in self.mapper.exons]:
            return
        message = (
            f"Transcript {self.id}: exon rank order does not follow genomic "
            f"order on strand {self.strand}"
        )
        if strict:
            raise InvariantViolationError(message)
        logger.warning(message)

    def __repr__(self) -> str:
        return (
            f"Transcript(id={self.id!r}, strand={self.strand}, "
            f"n_exons={len(self.exons)}, coding={self.is_coding})"
        )

    # =========================================================================
    # Basic properties
    # =========================================================================

    @property
    def strand(self) -> Strand:
        return self.mapper.strand

    @property
    def is_coding(self) -> bool:
        return self.coding is not None

    @property
    def seq_region(self) -> SeqRegion | None:
        return self.exons[0].seq_region if self.exons else None

    @property
    def seq_region_start(self) -> int | None:
        bounds = self.mapper.bounds
        return bounds.start if bounds else None

    @property
    def seq_region_end(self) -> int | None:
        bounds = self.mapper.bounds
        return bounds.end if bounds else None

    @property
    def cds_start_exon(self) -> Exon | None:
        return self.coding.start_exon if self.coding else None

    @property
    def cds_start_offset(self) -> int | None:
        return self.coding.start_offset if self.coding else None

    @property
    def cds_end_exon(self) -> Exon | None:
        return self.coding.end_exon if self.coding else None

    @property
    def cds_end_offset(self) -> int | None:
        return self.coding.end_offset if self.coding else None

    @property
    def cdna_length(self) -> int:
        return self.mapper.cdna_length

    @property
    def cds_length(self) -> int | None:
        return self.mapper.cds_length

    def rank_of(self, exon: Exon) -> int | None:
        """Return the 1-based rank of an exon in this transcript, or None."""
        return self._ranks.get(exon.id)

    # =========================================================================
    # Coordinate conversions (delegated)
    # =========================================================================

    @property
    def coding_region_cdna_start(self) -> int | None:
        return self.mapper.coding_region_cdna_start

    @property
    def coding_region_cdna_end(self) -> int | None:
        return self.mapper.coding_region_cdna_end

    @property
    def coding_region_genomic_start(self) -> int | None:
        return self.mapper.coding_region_genomic_start

    @property
    def coding_region_genomic_end(self) -> int | None:
        return self.mapper.coding_region_genomic_end

    def exon_for_genomic_position(self, position: int) -> Exon | None:
        return self.mapper.exon_for_genomic_position(position)

    def exon_for_cdna_position(self, position: int) -> Exon:
        return self.mapper.exon_for_cdna_position(position)

    def cdna_to_genomic(self, position: int) -> int:
        return self.mapper.cdna_to_genomic(position)

    def genomic_to_cdna(self, position: int) -> int:
        return self.mapper.genomic_to_cdna(position)

    def cds_to_genomic(self, position: int) -> int:
        return self.mapper.cds_to_genomic(position)

    def genomic_to_cds(self, position: int) -> int:
        return self.mapper.genomic_to_cds(position)

    def pep_to_genomic(self, position: int) -> int:
        return self.mapper.pep_to_genomic(position)

    def genomic_to_pep(self, position: int) -> int:
        return self.mapper.genomic_to_pep(position)

    # =========================================================================
    # Structure views
    # =========================================================================

    def introns(self) -> IntronView:
        """Introns between consecutive exons, in rank order."""
        return IntronView(self)

    def five_prime_utr_range(self) -> GenomicRange | None:
        """Genomic range of the 5' UTR.

        On the reverse strand this is the high end of the transcript. The
        range includes any introns the UTR spans. None if there is no UTR.
        """
        if self.coding is None or not self.exons:
            return None
        first = self.mapper.exons[0]
        if self.strand == FORWARD:
            return closed_range(first.seq_region_start, self.coding_region_genomic_start - 1)
        return closed_range(self.coding_region_genomic_end + 1, first.seq_region_end)

    def three_prime_utr_range(self) -> GenomicRange | None:
        """Genomic range of the 3' UTR (low end on the reverse strand)."""
        if self.coding is None or not self.exons:
            return None
        last = self.mapper.exons[-1]
        if self.strand == FORWARD:
            return closed_range(self.coding_region_genomic_end + 1, last.seq_region_end)
        return closed_range(last.seq_region_start, self.coding_region_genomic_start - 1)

    # =========================================================================
    # Sequence views
    # =========================================================================

    def seq(self) -> str:
        """Spliced transcript sequence: all exons concatenated in rank order.

        Fetched once and cached.

        Raises:
            NotSupportedError: If no sequence provider was given.
        """
        if self._seq is not None:
            return self._seq
        with self._seq_lock:
            if self._seq is None:
                self._seq = self._fetch_seq()
        return self._seq

    def _fetch_seq(self) -> str:
        if not self.exons:
            return ""
        if self.fetch_sequence is None:
            raise NotSupportedError(f"Transcript {self.id} has no sequence provider")
        parts = []
        for exon in self.exons:
            part = self.fetch_sequence(
                exon.seq_region, exon.seq_region_start, exon.seq_region_end, exon.seq_region_strand
            )
            if len(part) != exon.length:
                raise InvariantViolationError(
                    f"Sequence provider returned {len(part)} bases for exon "
                    f"{exon.id} of length {exon.length}"
                )
            parts.append(part)
        return "".join(parts)

    def cds_seq(self) -> str | None:
        if self.coding is None:
            return None
        return self.seq()[self.coding_region_cdna_start - 1 : self.coding_region_cdna_end]

    def five_prime_utr_seq(self) -> str | None:
        if self.coding is None:
            return None
        return self.seq()[: self.coding_region_cdna_start - 1]

    def three_prime_utr_seq(self) -> str | None:
        if self.coding is None:
            return None
        return self.seq()[self.coding_region_cdna_end :]

    def protein_seq(self) -> str | None:
        cds = self.cds_seq()
        if cds is None:
            return None
        return self.translator(cds)


# =============================================================================
# Helpers
# =============================================================================


def index_transcripts_by_exon(transcripts: Iterable[Transcript]) -> dict[str, list[Transcript]]:
    """Map each exon id to the transcripts that contain it.

    The result is the membership table expected by :meth:`Intron.between`.
    """
    index: dict[str, list[Transcript]] = defaultdict(list)
    for transcript in transcripts:
        for exon in transcript.exons:
            index[exon.id].append(transcript)
    return dict(index)


def rank_exons(exons: Sequence[Exon], strand: int) -> list[Exon]:
    """Assign ranks to exons from their transcription order.

    Args:
        exons: Exons with arbitrary (or missing) ranks.
        strand: Transcript strand.

    Returns:
        New Exon objects ranked 1..n in transcription order.
    """
    return [
        attrs.evolve(exon, rank=rank)
        for rank, exon in enumerate(transcription_order(exons, strand), start=1)
    ]
