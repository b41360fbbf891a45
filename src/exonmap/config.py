"""Configuration management for exonmap.

Configuration comes from defaults, optionally overridden by a YAML file
whose top-level sections mirror the attrs classes below.

Example:
    >>> from exonmap.config import Config
    >>> config = Config.load("exonmap.yaml")
    >>> config.sequence.genetic_code
    1

A configuration file looks like::

    sequence:
      genetic_code: 1
      to_stop: false
    mapping:
      strict_rank_order: true
    logging:
      verbosity: 2
      log_file: exonmap.log
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import attrs
import yaml

from exonmap.errors import ConfigurationError
from exonmap.utils.sequences import SUPPORTED_GENETIC_CODES

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_GENETIC_CODE = 1
DEFAULT_VERBOSITY = 1


# =============================================================================
# Validators
# =============================================================================


def _supported_code(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if value not in SUPPORTED_GENETIC_CODES:
        raise ConfigurationError(
            f"{attribute.name}: genetic code {value} not supported "
            f"(supported: {sorted(SUPPORTED_GENETIC_CODES)})"
        )


def _verbosity(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if not isinstance(value, int) or not 0 <= value <= 2:
        raise ConfigurationError(f"{attribute.name} must be 0, 1 or 2, got {value!r}")


def _boolean(instance: Any, attribute: attrs.Attribute, value: Any) -> None:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{attribute.name} must be true or false, got {value!r}")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class SequenceConfig:
    """Configuration for sequence views.

    Attributes:
        genetic_code: NCBI genetic code table used for protein_seq.
        to_stop: Truncate translated proteins at the first stop codon.
    """

    genetic_code: int = attrs.field(default=DEFAULT_GENETIC_CODE, validator=_supported_code)
    to_stop: bool = attrs.field(default=False, validator=_boolean)


@attrs.define
class MappingConfig:
    """Configuration for transcript construction.

    Attributes:
        strict_rank_order: Reject transcripts whose exon ranks disagree with
            their genomic order instead of logging a warning.
    """

    strict_rank_order: bool = attrs.field(default=False, validator=_boolean)


@attrs.define
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        verbosity: 0=warning, 1=info, 2=debug.
        log_file: Optional file receiving debug-level logs.
    """

    verbosity: int = attrs.field(default=DEFAULT_VERBOSITY, validator=_verbosity)
    log_file: str | None = None


_SECTIONS = {
    "sequence": SequenceConfig,
    "mapping": MappingConfig,
    "logging": LoggingConfig,
}


@attrs.define
class Config:
    """Main configuration container for exonmap.

    Attributes:
        sequence: Sequence view configuration.
        mapping: Transcript construction configuration.
        logging: Logging configuration.
    """

    sequence: SequenceConfig = attrs.Factory(SequenceConfig)
    mapping: MappingConfig = attrs.Factory(MappingConfig)
    logging: LoggingConfig = attrs.Factory(LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create configuration from a nested dictionary.

        Raises:
            ConfigurationError: On unknown sections or keys.
        """
        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        sections = {}
        for name, section_cls in _SECTIONS.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            try:
                sections[name] = section_cls(**values)
            except TypeError as e:
                raise ConfigurationError(f"Invalid keys in section '{name}': {e}") from e
        return cls(**sections)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a YAML file.

        Args:
            path: Path to configuration file. If None, returns defaults.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ConfigurationError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return attrs.asdict(self)

    def save(self, path: Path | str) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
