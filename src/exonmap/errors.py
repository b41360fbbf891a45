"""Exception types for exonmap.

All errors raised by exonmap derive from ExonMapError. Each concrete error
also derives from the closest builtin so that callers catching ValueError or
IndexError keep working.

Example:
    >>> from exonmap.errors import OutOfRangeError
    >>> try:
    ...     transcript.genomic_to_cdna(175)
    ... except OutOfRangeError as e:
    ...     print(e.position, e.coordinate_system)
"""


class ExonMapError(Exception):
    """Base exception for all exonmap errors."""

    pass


class InvalidArgumentError(ExonMapError, ValueError):
    """Malformed input, e.g. two exons that do not bound an intron."""

    pass


class OutOfRangeError(ExonMapError, IndexError):
    """A position lies outside the span it is being mapped from."""

    def __init__(
        self,
        message: str,
        position: int | None = None,
        coordinate_system: str = "",
    ) -> None:
        super().__init__(message)
        self.position = position
        self.coordinate_system = coordinate_system

    def __str__(self) -> str:
        if self.coordinate_system and self.position is not None:
            return (
                f"{self.coordinate_system} position {self.position} out of range: "
                f"{super().__str__()}"
            )
        return super().__str__()


class NotSupportedError(ExonMapError, NotImplementedError):
    """The requested operation is not supported."""

    pass


class InvariantViolationError(ExonMapError, RuntimeError):
    """Input exon or rank data is internally inconsistent."""

    pass


class ConfigurationError(ExonMapError):
    """Invalid configuration file or value."""

    pass
