"""
ctext Configuration
===================

Scanner configuration. Values come from:
- Default values (defined here)
- Environment variables (ScannerOptions.from_env)
- Command-line options, which the CLI applies on top
"""

from dataclasses import dataclass
import logging
import os

logger = logging.getLogger(__name__)


# Size of each read from the underlying stream
DEFAULT_CHUNK_SIZE = 4096


@dataclass
class ScannerOptions:
    """
    Configuration for a Scanner.

    Attributes:
        filename: Name reported in token positions ("" renders as <input>)
        max_buf: Largest token in bytes, 0 for no limit
        chunk_size: Bytes requested from the stream per read
    """
    filename: str = ""
    max_buf: int = 0
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if self.max_buf < 0:
            raise ValueError(f"max_buf must be >= 0, got {self.max_buf}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

    @classmethod
    def from_env(cls, filename: str = "") -> "ScannerOptions":
        """
        Create ScannerOptions from environment variables.

        Environment variables (all optional):
            CTEXT_MAX_BUF: Maximum token size in bytes (0 = unlimited)
            CTEXT_CHUNK_SIZE: Read size in bytes

        Invalid values are logged and ignored.
        """
        options = cls(filename=filename)

        if max_buf := os.environ.get("CTEXT_MAX_BUF"):
            value = _parse_int("CTEXT_MAX_BUF", max_buf, minimum=0)
            if value is not None:
                options.max_buf = value

        if chunk_size := os.environ.get("CTEXT_CHUNK_SIZE"):
            value = _parse_int("CTEXT_CHUNK_SIZE", chunk_size, minimum=1)
            if value is not None:
                options.chunk_size = value

        return options


def _parse_int(name: str, raw: str, minimum: int) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer")
        return None
    if value < minimum:
        logger.warning(f"Ignoring {name}={raw!r}: must be >= {minimum}")
        return None
    return value
