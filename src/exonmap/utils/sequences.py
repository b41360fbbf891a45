"""Nucleotide sequence utilities.

This module provides the default translation provider used by
:meth:`exonmap.core.transcript.Transcript.protein_seq`, plus reverse
complementation for strand-aware sequence extraction.

Example:
    >>> from exonmap.utils.sequences import reverse_complement, translate
    >>> reverse_complement("ATGCATGC")
    'GCATGCAT'
    >>> translate("ATGAAATAG")
    'MK*'
"""

from __future__ import annotations

import logging
from itertools import product

from exonmap.errors import NotSupportedError

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Handles IUPAC ambiguity codes and preserves case
COMPLEMENT_TABLE = str.maketrans(
    "ACGTacgtNnRYSWKMBDHVryswkmbdhv",
    "TGCAtgcaNnYRSWMKVHDByrswmkvhdb",
)

# NCBI Table 1, codons enumerated in TCAG order
_BASES = "TCAG"
_AMINO_ACIDS = "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG"

CODON_TABLE_STANDARD = {
    "".join(codon): aa for codon, aa in zip(product(_BASES, repeat=3), _AMINO_ACIDS)
}

STOP_CODONS = {codon for codon, aa in CODON_TABLE_STANDARD.items() if aa == "*"}

SUPPORTED_GENETIC_CODES = {1}


# =============================================================================
# Complement and Reverse Complement
# =============================================================================


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a DNA sequence.

    Args:
        sequence: DNA sequence string.

    Returns:
        Reverse complement sequence.
    """
    return sequence.translate(COMPLEMENT_TABLE)[::-1]


# =============================================================================
# Translation
# =============================================================================


def translate(sequence: str, table: int = 1, to_stop: bool = False) -> str:
    """Translate a DNA sequence to protein.

    Stop codons are emitted as ``*`` and are not trimmed unless ``to_stop``
    is set. Unknown codons (e.g. containing N) translate to ``X``. A trailing
    partial codon is dropped.

    Args:
        sequence: DNA coding sequence.
        table: NCBI genetic code table number.
        to_stop: If True, stop at first stop codon.

    Returns:
        Amino acid sequence.

    Raises:
        NotSupportedError: If the genetic code table is not supported.
    """
    if table not in SUPPORTED_GENETIC_CODES:
        raise NotSupportedError(f"Genetic code table {table} is not supported")

    remainder = len(sequence) % 3
    if remainder:
        logger.warning(
            f"Sequence length ({len(sequence)}) is not a multiple of 3, "
            f"ignoring trailing {remainder} nt"
        )
        sequence = sequence[: len(sequence) - remainder]

    protein = []
    for i in range(0, len(sequence), 3):
        aa = CODON_TABLE_STANDARD.get(sequence[i : i + 3].upper().replace("U", "T"), "X")
        if aa == "*" and to_stop:
            break
        protein.append(aa)

    return "".join(protein)
