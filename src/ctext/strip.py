"""
Comment Stripping
=================

Removes every comment from C source and leaves everything else untouched,
including the trailing blanks of a line whose comment was removed.

Example Usage
-------------
>>> from ctext.strip import strip_comments_string
>>> strip_comments_string("int x; // counter\\n")
'int x; '
"""

from typing import BinaryIO, Optional, TextIO, Union
import io
import logging

from ctext.config import ScannerOptions
from ctext.scanner import Scanner, TokenType

logger = logging.getLogger(__name__)


def strip_comments(
    writer: BinaryIO,
    stream: Union[BinaryIO, TextIO],
    options: Optional[ScannerOptions] = None,
) -> int:
    """
    Copy the text tokens of stream to writer, dropping comment tokens.

    Args:
        writer: Binary stream receiving the stripped source
        stream: Binary (or text) stream with the C source
        options: Scanner configuration

    Returns:
        Number of comments removed

    Raises:
        ScannerError: If the source cannot be split into tokens
    """
    removed = 0
    for token in Scanner(stream, options=options):
        if token.type is TokenType.TEXT:
            writer.write(token.raw)
        else:
            removed += 1

    logger.debug(f"Stripped {removed} comments")
    return removed


def strip_comments_string(source: str) -> str:
    """Return source with every comment removed."""
    out = io.BytesIO()
    strip_comments(out, io.BytesIO(source.encode("utf-8", "surrogateescape")))
    return out.getvalue().decode("utf-8", "surrogateescape")
