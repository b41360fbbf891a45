"""Closed genomic intervals.

exonmap uses 1-based, inclusive coordinates everywhere, so a range
``GenomicRange(100, 149)`` covers 50 bases.

Example:
    >>> from exonmap.utils.intervals import GenomicRange
    >>> r = GenomicRange(100, 149)
    >>> r.length
    50
    >>> 149 in r
    True
"""

from __future__ import annotations

from typing import Iterable, NamedTuple

# =============================================================================
# Data Structures
# =============================================================================


class GenomicRange(NamedTuple):
    """A closed genomic interval.

    Attributes:
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
    """

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def __contains__(self, position: object) -> bool:
        if not isinstance(position, int):
            return False
        return self.start <= position <= self.end

    @property
    def length(self) -> int:
        """Get interval length in base pairs."""
        return self.end - self.start + 1

    def overlaps(self, other: GenomicRange) -> bool:
        """Check if this range shares at least one base with another."""
        return self.start <= other.end and other.start <= self.end

    def contains_range(self, other: GenomicRange) -> bool:
        """Check if this range fully contains another."""
        return self.start <= other.start and other.end <= self.end


# =============================================================================
# Construction Helpers
# =============================================================================


def closed_range(start: int, end: int) -> GenomicRange | None:
    """Build a range, or None if it would be empty.

    Args:
        start: Start position (1-based).
        end: End position (1-based, inclusive).

    Returns:
        GenomicRange, or None when ``start > end``.
    """
    if start > end:
        return None
    return GenomicRange(start, end)


def span(ranges: Iterable[GenomicRange]) -> GenomicRange | None:
    """Get the smallest range covering all given ranges.

    Args:
        ranges: Ranges to cover.

    Returns:
        Covering range, or None if no ranges were given.
    """
    ranges = list(ranges)
    if not ranges:
        return None
    return GenomicRange(min(r.start for r in ranges), max(r.end for r in ranges))
