"""Pytest configuration and shared fixtures for exonmap tests.

Fixtures are organized by category:

- Genome fixtures: a synthetic chromosome, as a dict provider and as FASTA
- Transcript fixtures: small forward and reverse strand transcripts
- Annotation fixtures: GFF3 files describing the same transcripts

The reference layout used throughout is two 50 bp exons at 100-149 and
200-249 with a CDS running from offset 10 of the first-ranked exon to offset
20 of the second.
"""

from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from exonmap.core.models import CodingRegion, Exon, SeqRegion
from exonmap.core.transcript import Transcript
from exonmap.utils.sequences import reverse_complement

CHR1_LENGTH = 400


# =============================================================================
# Genome Fixtures
# =============================================================================


@pytest.fixture
def chr1_sequence() -> str:
    """Reproducible 400 bp chromosome sequence."""
    rng = np.random.default_rng(42)
    return "".join(rng.choice(list("ACGT"), CHR1_LENGTH))


@pytest.fixture
def chr1() -> SeqRegion:
    return SeqRegion("chr1", CHR1_LENGTH)


@pytest.fixture
def fetch_sequence(chr1_sequence: str) -> Callable[[SeqRegion, int, int, int], str]:
    """In-memory sequence provider over chr1 (1-based, inclusive)."""
    genome = {"chr1": chr1_sequence}

    def fetch(seq_region: SeqRegion, start: int, end: int, strand: int) -> str:
        sequence = genome[seq_region.name][start - 1 : end]
        return reverse_complement(sequence) if strand == -1 else sequence

    return fetch


@pytest.fixture
def synthetic_fasta(tmp_path: Path, chr1_sequence: str) -> Path:
    """Write chr1 to a FASTA file with 80-character lines."""
    fasta_path = tmp_path / "genome.fa"
    with open(fasta_path, "w") as f:
        f.write(">chr1\n")
        for i in range(0, len(chr1_sequence), 80):
            f.write(chr1_sequence[i : i + 80] + "\n")
    return fasta_path


# =============================================================================
# Transcript Fixtures
# =============================================================================


@pytest.fixture
def forward_exons(chr1: SeqRegion) -> list[Exon]:
    return [
        Exon("F1", chr1, 100, 149, 1, rank=1),
        Exon("F2", chr1, 200, 249, 1, rank=2),
    ]


@pytest.fixture
def forward_transcript(forward_exons: list[Exon], fetch_sequence) -> Transcript:
    coding = CodingRegion(forward_exons[0], 10, forward_exons[1], 20)
    return Transcript("TF", 1, forward_exons, coding=coding, fetch_sequence=fetch_sequence)


@pytest.fixture
def reverse_exons(chr1: SeqRegion) -> list[Exon]:
    """Reverse strand exons: rank 1 is the genomically higher exon."""
    return [
        Exon("R1", chr1, 200, 249, -1, rank=1),
        Exon("R2", chr1, 100, 149, -1, rank=2),
    ]


@pytest.fixture
def reverse_transcript(reverse_exons: list[Exon], fetch_sequence) -> Transcript:
    coding = CodingRegion(reverse_exons[0], 10, reverse_exons[1], 20)
    return Transcript("TR", -1, reverse_exons, coding=coding, fetch_sequence=fetch_sequence)


@pytest.fixture
def three_exons(chr1: SeqRegion) -> list[Exon]:
    return [
        Exon("E1", chr1, 100, 149, 1, rank=1),
        Exon("E2", chr1, 200, 249, 1, rank=2),
        Exon("E3", chr1, 300, 349, 1, rank=3),
    ]


# =============================================================================
# Annotation Fixtures
# =============================================================================


GFF3_CONTENT = """\
##gff-version 3
chr1\ttest\tgene\t100\t249\t.\t+\t.\tID=geneF
chr1\ttest\tmRNA\t100\t249\t.\t+\t.\tID=TF;Parent=geneF
chr1\ttest\texon\t100\t149\t.\t+\t.\tID=F1;Parent=TF
chr1\ttest\texon\t200\t249\t.\t+\t.\tID=F2;Parent=TF
chr1\ttest\tCDS\t109\t149\t.\t+\t0\tID=TF.cds;Parent=TF
chr1\ttest\tCDS\t200\t219\t.\t+\t1\tID=TF.cds;Parent=TF
chr1\ttest\tmRNA\t100\t249\t.\t-\t.\tID=TR
chr1\ttest\texon\t100\t149\t.\t-\t.\tID=R2;Parent=TR
chr1\ttest\texon\t200\t249\t.\t-\t.\tID=R1;Parent=TR
chr1\ttest\tCDS\t130\t149\t.\t-\t1\tParent=TR
chr1\ttest\tCDS\t200\t240\t.\t-\t0\tParent=TR
chr1\ttest\tncRNA\t300\t380\t.\t+\t.\tID=NC
chr1\ttest\texon\t300\t330\t.\t+\t.\tParent=NC
chr1\ttest\texon\t351\t380\t.\t+\t.\tParent=NC
this line is malformed
"""


@pytest.fixture
def synthetic_gff(tmp_path: Path) -> Path:
    """GFF3 with a forward mRNA, a reverse mRNA and a non-coding RNA."""
    gff_path = tmp_path / "genes.gff3"
    gff_path.write_text(GFF3_CONTENT)
    return gff_path
