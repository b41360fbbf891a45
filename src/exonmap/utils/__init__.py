"""Utility functions for exonmap.

- intervals: closed 1-based GenomicRange
- sequences: reverse complement and translation
- logging: logging setup with rich
"""

from exonmap.utils.intervals import GenomicRange, closed_range, span
from exonmap.utils.sequences import reverse_complement, translate

__all__ = [
    "GenomicRange",
    "closed_range",
    "reverse_complement",
    "span",
    "translate",
]
