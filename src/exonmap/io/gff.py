"""GFF3 transcript loading.

This module reads transcripts and their exon/CDS children from GFF3 files
and builds :class:`exonmap.core.transcript.Transcript` objects.

GFF3 coordinates are 1-based inclusive, which is what exonmap uses
internally, so no coordinate conversion is applied.

Features:
    - Parent-child resolution (transcript -> exon, CDS)
    - Exon ranks assigned in transcription order
    - Coding region derived from the outermost CDS bases
    - Lazy parsing on first access
    - Malformed lines and invalid transcripts are logged and skipped

Example:
    >>> from exonmap.io.gff import GFF3TranscriptReader
    >>> reader = GFF3TranscriptReader("annotations.gff3")
    >>> for tx in reader.iter_transcripts():
    ...     print(tx.id, tx.coding_region_cdna_start)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Iterator

from exonmap.core.models import FORWARD, CodingRegion, Exon, SeqRegion, parse_strand
from exonmap.core.transcript import FetchSequence, Transcript, Translator, rank_exons
from exonmap.errors import ExonMapError, InvalidArgumentError
from exonmap.utils.sequences import translate

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3 column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_STRAND = 6
COL_ATTRIBUTES = 8

FEATURE_TYPES_TRANSCRIPT = {"mRNA", "transcript", "ncRNA", "lnc_RNA"}
FEATURE_TYPES_EXON = {"exon"}
FEATURE_TYPES_CDS = {"CDS"}


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse GFF3 attribute string into dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs, URL-decoded.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item or "=" not in item:
            continue
        key, value = item.split("=", 1)
        value = value.replace("%3B", ";").replace("%3D", "=").replace("%26", "&")
        attributes[key] = value.replace("%2C", ",")

    return attributes


def _parents(feature: dict[str, Any]) -> list[str]:
    parent = feature["attributes"].get("Parent", "")
    return parent.split(",") if parent else []


# =============================================================================
# Coding Region Derivation
# =============================================================================


def _exon_at(exons: list[Exon], position: int, transcript_id: str) -> Exon:
    for exon in exons:
        if exon.contains_genomic(position):
            return exon
    raise InvalidArgumentError(
        f"Transcript {transcript_id}: CDS boundary {position} is not inside any exon"
    )


def coding_region_from_cds(
    exons: list[Exon],
    cds_segments: list[tuple[int, int]],
    strand: int,
    transcript_id: str = "",
) -> CodingRegion | None:
    """Derive CDS boundary markers from CDS segments.

    The outermost coding bases are located in their exons and expressed as
    1-based offsets counted in transcription direction.

    Args:
        exons: Transcript exons.
        cds_segments: (start, end) pairs, 1-based inclusive.
        strand: Transcript strand.
        transcript_id: Used in error messages.

    Returns:
        CodingRegion, or None without CDS segments.

    Raises:
        InvalidArgumentError: If a CDS boundary lies outside every exon.
    """
    if not cds_segments:
        return None

    low = min(start for start, _ in cds_segments)
    high = max(end for _, end in cds_segments)
    low_exon = _exon_at(exons, low, transcript_id)
    high_exon = _exon_at(exons, high, transcript_id)

    if strand == FORWARD:
        return CodingRegion(
            start_exon=low_exon,
            start_offset=low - low_exon.start + 1,
            end_exon=high_exon,
            end_offset=high - high_exon.start + 1,
        )
    return CodingRegion(
        start_exon=high_exon,
        start_offset=high_exon.end - high + 1,
        end_exon=low_exon,
        end_offset=low_exon.end - low + 1,
    )


# =============================================================================
# GFF3 Reader
# =============================================================================


class GFF3TranscriptReader:
    """Build Transcript objects from a GFF3 file.

    Attributes:
        path: Path to the GFF3 file.
        transcript_count: Number of transcripts (after parsing).

    Example:
        >>> reader = GFF3TranscriptReader("annotations.gff3")
        >>> tx = reader.get_transcript("mRNA1")
        >>> tx.genomic_to_cdna(1050)
    """

    def __init__(
        self,
        gff_path: Path | str,
        fetch_sequence: FetchSequence | None = None,
        translator: Translator = translate,
        strict: bool = False,
    ) -> None:
        """Initialize the reader.

        Args:
            gff_path: Path to GFF3 file.
            fetch_sequence: Sequence provider passed to every Transcript.
            translator: Translation provider passed to every Transcript.
            strict: Passed to every Transcript (see Transcript).

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        self.path = Path(gff_path)
        if not self.path.exists():
            raise FileNotFoundError(f"GFF3 file not found: {self.path}")

        self.fetch_sequence = fetch_sequence
        self.translator = translator
        self.strict = strict
        self._transcripts: dict[str, Transcript] | None = None

    def _parse_line(self, line: str, line_number: int) -> dict[str, Any] | None:
        """Parse a single GFF3 line, or return None for comments/bad lines."""
        line = line.strip()
        if not line or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) < 9:
            logger.warning(
                f"{self.path.name}:{line_number}: expected 9 columns, got {len(parts)}"
            )
            return None

        try:
            return {
                "seqid": parts[COL_SEQID],
                "source": parts[COL_SOURCE],
                "type": parts[COL_TYPE],
                "start": int(parts[COL_START]),
                "end": int(parts[COL_END]),
                "strand": parse_strand(parts[COL_STRAND]),
                "attributes": parse_attributes(parts[COL_ATTRIBUTES]),
            }
        except (ValueError, IndexError) as e:
            logger.warning(f"{self.path.name}:{line_number}: {e}")
            return None

    def _build_transcripts(self) -> dict[str, Transcript]:
        """Parse the file and assemble transcripts."""
        transcript_features: dict[str, dict[str, Any]] = {}
        exon_features: dict[str, list[dict[str, Any]]] = defaultdict(list)
        cds_features: dict[str, list[dict[str, Any]]] = defaultdict(list)

        with open(self.path) as f:
            for line_number, line in enumerate(f, start=1):
                if line.startswith("##FASTA"):
                    break
                feature = self._parse_line(line, line_number)
                if feature is None:
                    continue

                ftype = feature["type"]
                if ftype in FEATURE_TYPES_TRANSCRIPT:
                    attrs = feature["attributes"]
                    tx_id = attrs.get("ID", attrs.get("transcript_id", f"tx_{len(transcript_features)}"))
                    transcript_features[tx_id] = feature
                elif ftype in FEATURE_TYPES_EXON:
                    for parent_id in _parents(feature):
                        exon_features[parent_id].append(feature)
                elif ftype in FEATURE_TYPES_CDS:
                    for parent_id in _parents(feature):
                        cds_features[parent_id].append(feature)

        transcripts = {}
        skipped = 0
        for tx_id, tf in transcript_features.items():
            try:
                transcripts[tx_id] = self._assemble(
                    tx_id, tf, exon_features.get(tx_id, []), cds_features.get(tx_id, [])
                )
            except ExonMapError as e:
                skipped += 1
                logger.warning(f"{self.path.name}: skipping transcript {tx_id}: {e}")
        if skipped:
            logger.warning(f"Skipped {skipped} invalid transcripts in {self.path.name}")

        orphans = (set(exon_features) | set(cds_features)) - set(transcript_features)
        if orphans:
            logger.warning(f"Ignoring features with unknown parents: {sorted(orphans)[:5]}")

        logger.info(f"Parsed {len(transcripts)} transcripts from {self.path.name}")
        return transcripts

    def _assemble(
        self,
        tx_id: str,
        tf: dict[str, Any],
        exon_feats: list[dict[str, Any]],
        cds_feats: list[dict[str, Any]],
    ) -> Transcript:
        seq_region = SeqRegion(tf["seqid"])
        strand = tf["strand"]

        if not exon_feats and cds_feats:
            # Some predictors emit CDS only; treat each CDS segment as an exon.
            # CDS lines of one transcript usually share one ID, so drop it.
            logger.debug(f"Transcript {tx_id} has no exons, using CDS segments")
            exon_feats = [{**cf, "attributes": {}} for cf in cds_feats]

        exons = [
            Exon(
                id=ef["attributes"].get("ID", f"{tx_id}.exon{i}"),
                seq_region=seq_region,
                seq_region_start=ef["start"],
                seq_region_end=ef["end"],
                seq_region_strand=ef["strand"],
            )
            for i, ef in enumerate(sorted(exon_feats, key=lambda f: f["start"]), start=1)
        ]
        exons = rank_exons(exons, strand)

        coding = coding_region_from_cds(
            exons,
            [(cf["start"], cf["end"]) for cf in cds_feats],
            strand,
            tx_id,
        )

        return Transcript(
            tx_id,
            strand,
            exons,
            coding=coding,
            fetch_sequence=self.fetch_sequence,
            translator=self.translator,
            strict=self.strict,
        )

    def _ensure_parsed(self) -> dict[str, Transcript]:
        if self._transcripts is None:
            self._transcripts = self._build_transcripts()
        return self._transcripts

    def iter_transcripts(self) -> Iterator[Transcript]:
        """Iterate over transcripts in file order."""
        yield from self._ensure_parsed().values()

    def get_transcript(self, transcript_id: str) -> Transcript | None:
        """Retrieve a transcript by ID, or None if absent."""
        return self._ensure_parsed().get(transcript_id)

    @property
    def transcript_ids(self) -> list[str]:
        return list(self._ensure_parsed().keys())

    @property
    def transcript_count(self) -> int:
        return len(self._ensure_parsed())


# =============================================================================
# Convenience Functions
# =============================================================================


def read_transcripts(path: Path | str, **kwargs: Any) -> list[Transcript]:
    """Read all transcripts from a GFF3 file."""
    return list(GFF3TranscriptReader(path, **kwargs).iter_transcripts())


def iter_transcripts(path: Path | str, **kwargs: Any) -> Iterator[Transcript]:
    """Iterate over transcripts in a GFF3 file."""
    return GFF3TranscriptReader(path, **kwargs).iter_transcripts()
