"""
C Comment/Text Scanner
======================

This module implements a naive C source scanner that separates comments from
code. The input is split into a sequence of tokens, each of which is either
a comment or a contiguous run of non-comment text, and every token carries
the file/line/column position of its first character.

Token Categories
----------------
- COMMENT: a single-line comment (// ... up to and including the newline)
  or a block comment (/* ... */), delimiters included
- TEXT: everything between comments, byte for byte
- ERROR: returned by Scanner.next() once a terminal condition is reached;
  Scanner.err holds the reason (EndOfInput at the normal end)

Concatenating the data of every token reproduces the input exactly, minus
carriage returns, which are discarded.

Scanning Rules
--------------
- '"' toggles string-literal state unless escaped, so "//" and "/*" inside
  strings never start a comment
- block comments do not nest; the first */ closes the comment
- a block comment still open at end of input is an error, not a token

Example Usage
-------------
>>> from ctext.scanner import Scanner
>>> scanner = Scanner.from_string("int x; // c\\ny;")
>>> for token in scanner:
...     print(token)
Token(TEXT, 'int x; ', <input>:1:1)
Token(COMMENT, '// c\\n', <input>:1:8)
Token(TEXT, 'y;', <input>:2:1)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import BinaryIO, Iterator, Optional, TextIO, Union
import io
import logging

from ctext.buffer import ByteReader, TokenBuffer
from ctext.config import ScannerOptions
from ctext.errors import EndOfInput, ScannerError, TokenTooLargeError, UnterminatedCommentError

logger = logging.getLogger(__name__)

SLASH = ord("/")
STAR = ord("*")
QUOTE = ord('"')
CR = ord("\r")
NEWLINE = ord("\n")


# =============================================================================
# Token Types and Positions
# =============================================================================

class TokenType(Enum):
    """Classification of a scanned token."""
    ERROR = auto()      # Terminal condition, see Scanner.err
    COMMENT = auto()    # // or /* */ comment, delimiters included
    TEXT = auto()       # Anything that is not a comment


@dataclass(frozen=True)
class Position:
    """
    A position within a file.

    Attributes:
        filename: Name of the file ("" when unknown)
        line: Line within the file starting at 1, 0 when unset
        column: Column within the line starting at 1
    """
    filename: str = ""
    line: int = 0
    column: int = 0

    def is_valid(self) -> bool:
        """Return True if the position has been set."""
        return self.line > 0

    def __str__(self) -> str:
        """Format as 'filename:line:column'."""
        s = self.filename or "<input>"
        if self.is_valid():
            s += f":{self.line}:{self.column}"
        return s


@dataclass(frozen=True)
class Token:
    """
    A comment or text span of the source.

    Attributes:
        type: TokenType.COMMENT or TokenType.TEXT
        position: Position of the token's first character
        data: The raw span, carriage returns removed
    """
    type: TokenType
    position: Position
    data: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.data!r}, {self.position})"

    @property
    def raw(self) -> bytes:
        """The token data as the bytes it was scanned from."""
        return self.data.encode("utf-8", "surrogateescape")


# =============================================================================
# Scanner Implementation
# =============================================================================

class Scanner:
    """
    Splits a C source stream into comment and text tokens.

    The scanner reads lazily and holds at most one token in memory. It is a
    pull API modelled as a cursor:

        scanner = Scanner(stream, filename="hello.c")
        while (tt := scanner.next()) is not TokenType.ERROR:
            print(tt, scanner.token_text())
        if not isinstance(scanner.err, EndOfInput):
            raise scanner.err

    Iterating over the scanner does the same and raises genuine errors.
    A Scanner is not safe to share between threads.

    Attributes:
        filename: Name reported in token positions
        options: The ScannerOptions in effect
    """

    def __init__(
        self,
        stream: Union[BinaryIO, TextIO],
        options: Optional[ScannerOptions] = None,
        filename: Optional[str] = None,
    ):
        """
        Initialize the scanner.

        Args:
            stream: Binary (or text) stream with the C source
            options: Scanner configuration (defaults if None)
            filename: Overrides options.filename
        """
        self.options = options or ScannerOptions()
        self.filename = self.options.filename if filename is None else filename

        self._reader = ByteReader(stream, self.options.chunk_size)
        self._buf = TokenBuffer(self.options.max_buf)
        self._err: Optional[BaseException] = None

        # Cursor: position of the next byte to be read
        self._line = 1
        self._column = 1

        # Position of a '/' removed from a text token because it opens the
        # comment that follows
        self._carried_slash: Optional[Position] = None

        # Reset on every call to next()
        self._token_type = TokenType.ERROR
        self._start = Position()
        self._in_string_literal = False
        self._comment_depth = 0
        self._in_line_comment = False

    @classmethod
    def from_string(
        cls,
        source: str,
        filename: str = "",
        options: Optional[ScannerOptions] = None,
    ) -> "Scanner":
        """Create a scanner over an in-memory string."""
        data = source.encode("utf-8", "surrogateescape")
        return cls(io.BytesIO(data), options=options, filename=filename)

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def position(self) -> Position:
        """Current cursor position (the next byte to be read)."""
        return Position(self.filename, self._line, self._column)

    @property
    def err(self) -> Optional[BaseException]:
        """
        The terminal condition reported with the last ERROR token.

        EndOfInput at the normal end, a ScannerError or the stream's OSError
        otherwise, None while scanning is still possible.
        """
        return self._err

    def set_max_buf(self, max_buf: int) -> None:
        """Set the maximum token size in bytes. Zero means unlimited."""
        if max_buf < 0:
            raise ValueError(f"max_buf must be >= 0, got {max_buf}")
        self._buf.max_size = max_buf

    def next(self) -> TokenType:
        """
        Advance to the next token and return its type.

        Returns TokenType.ERROR once input is exhausted or an error occurred,
        and keeps returning it on later calls.
        """
        if self._err is not None:
            return TokenType.ERROR

        try:
            self._token_type = self._scan()
        except (ScannerError, OSError) as e:
            self._err = e
            self._token_type = TokenType.ERROR

        if self._token_type is not TokenType.ERROR:
            logger.debug(
                f"{self._token_type.name} token at {self._start} ({len(self._buf)} bytes)"
            )
        return self._token_type

    def token(self) -> Token:
        """Return the token found by the last call to next()."""
        return Token(self._token_type, self._start, self._buf.text())

    def token_text(self) -> str:
        """Return the data of the last token."""
        return self._buf.text()

    def token_bytes(self) -> bytes:
        """Return the data of the last token as bytes."""
        return self._buf.getvalue()

    def __iter__(self) -> Iterator[Token]:
        """
        Yield every remaining token.

        Raises:
            ScannerError: On an unterminated comment or oversized token
            OSError: If reading the stream fails
        """
        while True:
            if self.next() is TokenType.ERROR:
                if isinstance(self._err, EndOfInput):
                    return
                raise self._err
            yield self.token()

    # =========================================================================
    # State Machine
    # =========================================================================

    def _scan(self) -> TokenType:
        self._buf.reset()
        self._start = Position()
        self._in_string_literal = False
        self._comment_depth = 0
        self._in_line_comment = False

        if self._carried_slash is not None:
            self._start = self._carried_slash
            self._carried_slash = None
            self._append(SLASH)

        while True:
            b = self._reader.peek()
            if b is None:
                return self._finish()

            if not self._start.is_valid():
                self._start = self.position

            if b == CR:
                # Discarded, not counted as a column
                self._reader.read_byte()
                continue

            if b == SLASH:
                if self._comment_depth:
                    # "*/" closes, but not with the '*' of the opening "/*"
                    if self._buf.last_byte() == STAR and len(self._buf) > 2:
                        self._consume(b)
                        return TokenType.COMMENT
                elif self._at_comment_opener():
                    if self._split_text():
                        return TokenType.TEXT
                    self._in_line_comment = True

            elif b == STAR:
                if not self._comment_depth and self._at_comment_opener():
                    if self._split_text():
                        return TokenType.TEXT
                    self._comment_depth = 1

            elif b == QUOTE:
                if not self._in_comment() and not self._buf.is_escaped():
                    self._in_string_literal = not self._in_string_literal

            elif b == NEWLINE:
                self._consume(b)
                if self._in_line_comment:
                    return TokenType.COMMENT
                continue

            self._consume(b)

    def _finish(self) -> TokenType:
        """Handle end of input, flushing any pending token first."""
        self._err = EndOfInput()

        if self._comment_depth:
            raise UnterminatedCommentError(self._start)

        if not len(self._buf):
            return TokenType.ERROR

        # The error is reported on the next call
        if self._in_line_comment:
            return TokenType.COMMENT
        return TokenType.TEXT

    def _in_comment(self) -> bool:
        return self._in_line_comment or self._comment_depth > 0

    def _at_comment_opener(self) -> bool:
        """True if the peeked byte completes "//" or "/*"."""
        return (
            not self._in_comment()
            and not self._in_string_literal
            and self._buf.last_byte() == SLASH
        )

    def _split_text(self) -> bool:
        """
        Detach the comment's leading '/' from pending text.

        Returns True if text precedes the '/', in which case that text is
        the current token and the '/' starts the next one. Returns False if
        the '/' already starts this token, whose position is then correct.
        """
        if len(self._buf) == 1:
            return False

        self._buf.pop()
        self._carried_slash = Position(self.filename, self._line, self._column - 1)
        return True

    def _consume(self, b: int) -> None:
        self._reader.read_byte()

        if b == NEWLINE:
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        self._append(b)

    def _append(self, b: int) -> None:
        try:
            self._buf.append(b)
        except TokenTooLargeError as e:
            raise TokenTooLargeError(e.limit, self._start) from e


def scan_tokens(
    stream: Union[BinaryIO, TextIO],
    options: Optional[ScannerOptions] = None,
    filename: Optional[str] = None,
) -> Iterator[Token]:
    """
    Convenience generator over the tokens of a stream.

    Raises:
        ScannerError: On an unterminated comment or oversized token
    """
    return iter(Scanner(stream, options=options, filename=filename))
