"""Unit tests for exonmap.io.gff module.

Tests cover:
- GFF3 attribute parsing
- Transcript assembly (exon ranks, coding region derivation)
- Malformed input handling
"""

import logging
from pathlib import Path

import pytest

from exonmap.core.models import Exon, SeqRegion
from exonmap.errors import InvalidArgumentError
from exonmap.io.gff import (
    GFF3TranscriptReader,
    coding_region_from_cds,
    iter_transcripts,
    parse_attributes,
    read_transcripts,
)


# =============================================================================
# Attribute Parsing
# =============================================================================


class TestParseAttributes:
    """Tests for parse_attributes function."""

    def test_simple(self) -> None:
        assert parse_attributes("ID=TF;Parent=geneF") == {"ID": "TF", "Parent": "geneF"}

    def test_empty(self) -> None:
        assert parse_attributes("") == {}
        assert parse_attributes(".") == {}

    def test_url_decoding(self) -> None:
        attrs = parse_attributes("Note=a%3Bb%3Dc%26d%2Ce")
        assert attrs["Note"] == "a;b=c&d,e"

    def test_trailing_semicolon_and_junk(self) -> None:
        assert parse_attributes("ID=x; ;flag;") == {"ID": "x"}


# =============================================================================
# Coding Region Derivation
# =============================================================================


class TestCodingRegionFromCds:
    """Tests for coding_region_from_cds."""

    def test_forward(self, forward_exons) -> None:
        coding = coding_region_from_cds(forward_exons, [(200, 219), (109, 149)], 1)
        assert coding.start_exon.id == "F1"
        assert coding.start_offset == 10
        assert coding.end_exon.id == "F2"
        assert coding.end_offset == 20

    def test_reverse(self, reverse_exons) -> None:
        coding = coding_region_from_cds(reverse_exons, [(130, 149), (200, 240)], -1)
        assert coding.start_exon.id == "R1"
        assert coding.start_offset == 10
        assert coding.end_exon.id == "R2"
        assert coding.end_offset == 20

    def test_no_cds(self, forward_exons) -> None:
        assert coding_region_from_cds(forward_exons, [], 1) is None

    def test_cds_outside_exons(self, forward_exons) -> None:
        with pytest.raises(InvalidArgumentError, match="not inside any exon"):
            coding_region_from_cds(forward_exons, [(160, 210)], 1, "T1")


# =============================================================================
# Reader
# =============================================================================


class TestGFF3TranscriptReader:
    """Tests for GFF3TranscriptReader."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="GFF3 file not found"):
            GFF3TranscriptReader(tmp_path / "missing.gff3")

    def test_transcript_ids(self, synthetic_gff: Path) -> None:
        reader = GFF3TranscriptReader(synthetic_gff)
        assert reader.transcript_ids == ["TF", "TR", "NC"]
        assert reader.transcript_count == 3

    def test_malformed_line_warns(self, synthetic_gff: Path, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="exonmap"):
            GFF3TranscriptReader(synthetic_gff).transcript_count
        assert "expected 9 columns" in caplog.text

    def test_forward_transcript(self, synthetic_gff: Path) -> None:
        tx = GFF3TranscriptReader(synthetic_gff).get_transcript("TF")

        assert tx.strand == 1
        assert [e.id for e in tx.exons] == ["F1", "F2"]
        assert tx.seq_region == SeqRegion("chr1")
        assert tx.coding_region_cdna_start == 10
        assert tx.coding_region_cdna_end == 70
        assert tx.coding_region_genomic_start == 109
        assert tx.coding_region_genomic_end == 219

    def test_reverse_transcript(self, synthetic_gff: Path) -> None:
        tx = GFF3TranscriptReader(synthetic_gff).get_transcript("TR")

        assert tx.strand == -1
        assert [e.id for e in tx.exons] == ["R1", "R2"]
        assert [e.rank for e in tx.exons] == [1, 2]
        assert tx.coding_region_cdna_start == 10
        assert tx.coding_region_cdna_end == 70
        assert tx.cds_to_genomic(1) == 240
        assert tx.five_prime_utr_range() == (241, 249)

    def test_non_coding_transcript(self, synthetic_gff: Path) -> None:
        tx = GFF3TranscriptReader(synthetic_gff).get_transcript("NC")

        assert not tx.is_coding
        assert [e.id for e in tx.exons] == ["NC.exon1", "NC.exon2"]
        assert tx.cdna_length == 61
        assert [intron.range for intron in tx.introns()] == [(331, 350)]

    def test_unknown_transcript(self, synthetic_gff: Path) -> None:
        assert GFF3TranscriptReader(synthetic_gff).get_transcript("nope") is None

    def test_sequence_provider_passed_through(
        self, synthetic_gff: Path, fetch_sequence, chr1_sequence
    ) -> None:
        reader = GFF3TranscriptReader(synthetic_gff, fetch_sequence=fetch_sequence)
        tx = reader.get_transcript("TF")
        assert tx.five_prime_utr_seq() == chr1_sequence[99:108]

    def test_translator_passed_through(self, synthetic_gff: Path, fetch_sequence) -> None:
        reader = GFF3TranscriptReader(
            synthetic_gff, fetch_sequence=fetch_sequence, translator=lambda cds: "P" * len(cds)
        )
        assert reader.get_transcript("TR").protein_seq() == "P" * 61

    def test_cds_only_transcript(self, tmp_path: Path) -> None:
        """Without exon features the CDS segments become the exons."""
        gff_path = tmp_path / "cds_only.gff3"
        gff_path.write_text(
            "chr1\tpred\tmRNA\t10\t60\t.\t+\t.\tID=P1\n"
            "chr1\tpred\tCDS\t10\t21\t.\t+\t0\tParent=P1\n"
            "chr1\tpred\tCDS\t40\t60\t.\t+\t0\tParent=P1\n"
        )
        tx = GFF3TranscriptReader(gff_path).get_transcript("P1")

        assert len(tx.exons) == 2
        assert tx.cds_length == tx.cdna_length == 33
        assert tx.coding_region_cdna_start == 1

    def test_stops_at_fasta_section(self, tmp_path: Path) -> None:
        gff_path = tmp_path / "with_fasta.gff3"
        gff_path.write_text(
            "##gff-version 3\n"
            "chr1\tsrc\tmRNA\t1\t20\t.\t+\t.\tID=T1\n"
            "chr1\tsrc\texon\t1\t20\t.\t+\t.\tParent=T1\n"
            "##FASTA\n"
            ">chr1\n"
            "ACGTACGTACGTACGTACGT\n"
        )
        reader = GFF3TranscriptReader(gff_path)
        assert reader.transcript_ids == ["T1"]

    def test_orphan_features_warn(self, tmp_path: Path, caplog) -> None:
        gff_path = tmp_path / "orphan.gff3"
        gff_path.write_text("chr1\tsrc\texon\t1\t20\t.\t+\t.\tParent=ghost\n")
        with caplog.at_level(logging.WARNING, logger="exonmap"):
            assert GFF3TranscriptReader(gff_path).transcript_count == 0
        assert "ghost" in caplog.text

    def test_cds_outside_exons_skipped(self, tmp_path: Path, caplog) -> None:
        gff_path = tmp_path / "bad_cds.gff3"
        gff_path.write_text(
            "chr1\tsrc\tmRNA\t1\t100\t.\t+\t.\tID=T1\n"
            "chr1\tsrc\texon\t1\t20\t.\t+\t.\tParent=T1\n"
            "chr1\tsrc\texon\t50\t100\t.\t+\t.\tParent=T1\n"
            "chr1\tsrc\tCDS\t30\t60\t.\t+\t0\tParent=T1\n"
        )
        with caplog.at_level(logging.WARNING, logger="exonmap"):
            assert GFF3TranscriptReader(gff_path).get_transcript("T1") is None
        assert "skipping transcript T1" in caplog.text
        assert "not inside any exon" in caplog.text

    def test_invalid_transcript_does_not_block_others(self, tmp_path: Path) -> None:
        gff_path = tmp_path / "mixed.gff3"
        gff_path.write_text(
            "chr1\tsrc\tmRNA\t1\t100\t.\t+\t.\tID=BAD\n"
            "chr1\tsrc\texon\t1\t20\t.\t+\t.\tID=BAD.e1;Parent=BAD\n"
            "chr1\tsrc\texon\t50\t100\t.\t-\t.\tID=BAD.e2;Parent=BAD\n"
            "chr1\tsrc\tmRNA\t200\t260\t.\t+\t.\tID=OK\n"
            "chr1\tsrc\texon\t200\t260\t.\t+\t.\tParent=OK\n"
        )
        reader = GFF3TranscriptReader(gff_path)

        assert reader.transcript_ids == ["OK"]
        assert reader.get_transcript("OK").cdna_length == 61
        assert reader.get_transcript("BAD") is None

    def test_cds_only_with_shared_id(self, tmp_path: Path) -> None:
        """CDS lines sharing one ID still give distinct exons."""
        gff_path = tmp_path / "shared_cds_id.gff3"
        gff_path.write_text(
            "chr1\tpred\tmRNA\t10\t60\t.\t-\t.\tID=P1\n"
            "chr1\tpred\tCDS\t10\t21\t.\t-\t0\tID=P1.cds;Parent=P1\n"
            "chr1\tpred\tCDS\t40\t60\t.\t-\t0\tID=P1.cds;Parent=P1\n"
            "chr1\tpred\tmRNA\t100\t120\t.\t+\t.\tID=OK\n"
            "chr1\tpred\texon\t100\t120\t.\t+\t.\tParent=OK\n"
        )
        reader = GFF3TranscriptReader(gff_path)
        tx = reader.get_transcript("P1")

        assert [e.id for e in tx.exons] == ["P1.exon2", "P1.exon1"]
        assert tx.cds_length == 33
        assert tx.cds_to_genomic(1) == 60
        assert reader.get_transcript("OK") is not None


class TestConvenienceFunctions:
    """Tests for read_transcripts and iter_transcripts."""

    def test_read_transcripts(self, synthetic_gff: Path) -> None:
        transcripts = read_transcripts(synthetic_gff)
        assert [tx.id for tx in transcripts] == ["TF", "TR", "NC"]

    def test_iter_transcripts_kwargs(self, synthetic_gff: Path) -> None:
        strict = list(iter_transcripts(synthetic_gff, strict=True))
        assert len(strict) == 3

    def test_exon_type(self, synthetic_gff: Path) -> None:
        tx = read_transcripts(synthetic_gff)[0]
        assert all(isinstance(e, Exon) for e in tx.exons)
