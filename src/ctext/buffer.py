"""
Byte-Level Input and Token Buffering
====================================

Low-level helpers shared by the scanner:

- ByteReader: pulls fixed-size chunks from a stream and hands them out one
  byte at a time, with a single byte of lookahead (peek before consume).
- TokenBuffer: the growing buffer that holds the bytes of the token being
  scanned, with an optional size cap.

Neither class keeps any module-level state; every scanner owns its own pair.
"""

from typing import BinaryIO, Optional, TextIO, Union

from ctext.config import DEFAULT_CHUNK_SIZE
from ctext.errors import EndOfInput, TokenTooLargeError

BACKSLASH = ord("\\")


class ByteReader:
    """
    One-byte lookahead reader over a binary (or text) stream.

    Text streams are accepted for convenience; their chunks are encoded as
    UTF-8 with surrogateescape so that decoding the scanned bytes gives the
    original characters back. Read errors from the stream propagate
    unchanged.
    """

    def __init__(
        self,
        stream: Union[BinaryIO, TextIO],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._stream = stream
        self._chunk_size = chunk_size
        self._chunk = b""
        self._pos = 0
        self._eof = False

    def peek(self) -> Optional[int]:
        """Return the next byte without consuming it, or None at end of input."""
        if self._pos >= len(self._chunk):
            if self._eof or not self._fill():
                return None
        return self._chunk[self._pos]

    def read_byte(self) -> int:
        """
        Consume and return the next byte.

        Raises:
            EndOfInput: If the stream is exhausted
        """
        b = self.peek()
        if b is None:
            raise EndOfInput()
        self._pos += 1
        return b

    def _fill(self) -> bool:
        data = self._stream.read(self._chunk_size)
        if isinstance(data, str):
            data = data.encode("utf-8", "surrogateescape")
        if not data:
            self._eof = True
            return False
        self._chunk = data
        self._pos = 0
        return True


class TokenBuffer:
    """
    Accumulates the bytes of the token currently being scanned.

    Attributes:
        max_size: Maximum number of bytes, 0 for no limit
    """

    def __init__(self, max_size: int = 0):
        self.max_size = max_size
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def reset(self) -> None:
        """Empty the buffer, keeping its allocation."""
        del self._data[:]

    def append(self, b: int) -> None:
        """
        Add one byte to the buffer.

        Raises:
            TokenTooLargeError: If the byte would exceed max_size
        """
        if self.max_size and len(self._data) >= self.max_size:
            raise TokenTooLargeError(self.max_size)
        self._data.append(b)

    def pop(self) -> int:
        """Remove and return the last byte."""
        return self._data.pop()

    def last_byte(self) -> Optional[int]:
        """Return the last buffered byte, or None if the buffer is empty."""
        if not self._data:
            return None
        return self._data[-1]

    def is_escaped(self) -> bool:
        """
        Return True if the next byte would be escaped.

        That is the case when the buffer ends in an odd number of
        backslashes: '\\"' escapes the quote, '\\\\"' does not.
        """
        count = 0
        for b in reversed(self._data):
            if b != BACKSLASH:
                break
            count += 1
        return count % 2 == 1

    def getvalue(self) -> bytes:
        """Return a copy of the buffered bytes."""
        return bytes(self._data)

    def text(self) -> str:
        """Return the buffered bytes decoded as UTF-8 (surrogateescape)."""
        return self._data.decode("utf-8", "surrogateescape")
