"""
Function-Like Macro Invocation Extractor
========================================

This module finds invocations of specific function-like macros in C source
and extracts their argument lists. It runs the comment/text scanner first
and only looks at text tokens, so macro-like text inside comments is never
matched and comment delimiters inside string arguments cannot confuse it.

Argument Splitting
------------------
Arguments are split at top-level commas and spaces. Nested calls and
string literals are captured whole:

| Source                                 | Arguments                   |
|----------------------------------------|-----------------------------|
| F( G(1,2), 3 );                        | ['G(1,2)', '3']             |
| F( "a, b", c );                        | ['"a, b"', 'c']             |
| F( );                                  | []                          |

An invocation ends at the first ';' outside a string literal. Macro
definitions (#define F(...)) are never reported.

Example Usage
-------------
>>> from ctext.cmacro import scan_invocations_string
>>> scan_invocations_string('F( G(1,2), 3 );', print, "F")
F( G(1,2), 3 );
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import BinaryIO, Callable, Iterable, Iterator, Optional, TextIO, Union
import io
import logging
import re

from ctext.config import ScannerOptions
from ctext.errors import MissingParenthesisError, MissingSemicolonError
from ctext.scanner import Position, Scanner, TokenType

logger = logging.getLogger(__name__)

# Directives whose operand is a macro name rather than an invocation
GUARDED_DIRECTIVES = frozenset({"define", "undef", "ifdef", "ifndef"})

# Whitespace allowed between a macro name and its '('
_GAP_CHARS = " \t\r\f\v"


# =============================================================================
# Invocation Record
# =============================================================================

@dataclass(frozen=True)
class Invocation:
    """
    An invocation of a function-like macro within C source code.

    Attributes:
        name: Name of the invoked macro
        start_line: Line the macro name is on
        end_line: Line of the terminating ';'
        args: Trimmed arguments in call order
    """
    name: str
    start_line: int
    end_line: int
    args: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.name}( {', '.join(self.args)} );"


# =============================================================================
# Name Matching
# =============================================================================

def compile_names_pattern(names: Iterable[str]) -> Optional[re.Pattern]:
    """
    Compile one regular expression matching any of the given macro names.

    Names are matched literally and only as whole words, so PUTS does not
    match inside PUTS2 or MYPUTS. Returns None when no names are given.
    """
    unique = sorted({name for name in names if name}, key=len, reverse=True)
    if not unique:
        return None

    alternation = "|".join(re.escape(name) for name in unique)
    return re.compile(rf"\b(?:{alternation})\b")


def preceding_directive(s: str, index: int) -> Optional[str]:
    """
    Return the preprocessor directive that the word at index belongs to.

    Walks backward over blanks, reads a word, walks over more blanks and
    expects '#'. For '#  define   NAME' with index at NAME this returns
    'define'; None if the word is not a directive operand.
    """
    i = index - 1
    while i >= 0 and s[i] in " \t":
        i -= 1

    end = i + 1
    while i >= 0 and s[i].isalpha():
        i -= 1
    word = s[i + 1:end]
    if not word:
        return None

    while i >= 0 and s[i] in " \t":
        i -= 1

    if i >= 0 and s[i] == "#":
        return word
    return None


def is_macro_definition(s: str, index: int) -> bool:
    """Return True if the name at index is the subject of a #define."""
    return preceding_directive(s, index) == "define"


def _is_escaped(s: str, index: int) -> bool:
    """True if s[index] is preceded by an odd number of backslashes."""
    count = 0
    i = index - 1
    while i >= 0 and s[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


# =============================================================================
# Argument Buffer
# =============================================================================

class ArgumentBuffer:
    """Collects the characters of the argument being parsed."""

    def __init__(self):
        self._chars: list[str] = []

    def __len__(self) -> int:
        return len(self._chars)

    def append(self, c: str) -> None:
        self._chars.append(c)

    def reset(self) -> None:
        self._chars.clear()

    def is_escaped(self) -> bool:
        """True if the buffer ends in an odd number of backslashes."""
        count = 0
        for c in reversed(self._chars):
            if c != "\\":
                break
            count += 1
        return count % 2 == 1

    def flush(self) -> Optional[str]:
        """Empty the buffer and return its trimmed content, None if blank."""
        arg = "".join(self._chars).strip()
        self._chars.clear()
        return arg or None


# =============================================================================
# Incremental Parser
# =============================================================================

class _State(Enum):
    SEARCH = auto()     # Looking for a macro name
    OPEN = auto()       # Name found, expecting '('
    ARGS = auto()       # Inside the argument list
    TAIL = auto()       # Argument list closed, expecting ';'


class InvocationParser:
    """
    Extracts invocations from a sequence of text tokens.

    Comment tokens must not be fed; the text around a comment is fed as two
    tokens and an invocation may continue across them:

        parser = InvocationParser(["PUTS"], filename="hello.c")
        for token in Scanner(stream):
            if token.type is TokenType.TEXT:
                for inv in parser.feed(token.data, token.position.line,
                                       token.position.column):
                    print(inv)
        parser.close()

    Attributes:
        names: The macro names searched for
        filename: Name used in error locations
    """

    def __init__(self, names: Iterable[str], filename: str = ""):
        self.names = tuple(names)
        self.filename = filename
        self._pattern = compile_names_pattern(self.names)

        self._state = _State.SEARCH
        self._line = 1
        self._column = 1
        self._in_string_literal = False

        # Invocation in progress
        self._name = ""
        self._start = Position()
        self._args: list[str] = []
        self._arg = ArgumentBuffer()
        self._depth = 0

    def feed(self, text: str, line: int, column: int = 1) -> Iterator[Invocation]:
        """
        Parse one text token, yielding invocations as they complete.

        This is a generator: the token is only parsed as far as the caller
        iterates.

        Args:
            text: The token data
            line: Line of the token's first character
            column: Column of the token's first character

        Raises:
            MissingParenthesisError: If a name is followed by anything but '('
        """
        self._line = line
        self._column = column

        # Text tokens never begin inside a string literal
        self._in_string_literal = False

        pos = 0
        while pos < len(text):
            if self._state is _State.SEARCH:
                pos = self._search(text, pos)
            elif self._state is _State.OPEN:
                pos = self._open(text, pos)
            else:
                pos, inv = self._parse_args(text, pos)
                if inv is not None:
                    yield inv

    def close(self) -> None:
        """
        Signal the end of input.

        Raises:
            MissingParenthesisError: If the input ended after a name
            MissingSemicolonError: If the input ended inside an invocation
        """
        if self._state is _State.OPEN:
            raise MissingParenthesisError(self._name, self._start)
        if self._state is not _State.SEARCH:
            raise MissingSemicolonError(self._name, self._start)

    # =========================================================================
    # States
    # =========================================================================

    def _search(self, text: str, pos: int) -> int:
        """Find the next invocation candidate, returning the resume index."""
        if self._pattern is None:
            return len(text)

        while True:
            m = self._pattern.search(text, pos)
            if m is None:
                self._walk(text, pos, len(text))
                return len(text)

            self._walk(text, pos, m.start())
            pos = m.end()

            if self._in_string_literal:
                continue

            directive = preceding_directive(text, m.start())
            if directive in GUARDED_DIRECTIVES:
                logger.debug(f"Skipping #{directive} {m.group()} at line {self._line}")
                continue

            self._begin(m.group(), Position(self.filename, self._line, self._column_at(text, m.start())))
            return pos

    def _walk(self, text: str, start: int, end: int) -> None:
        """Track lines and string literals over text that holds no candidate."""
        for i in range(start, end):
            c = text[i]
            if c == '"':
                if not _is_escaped(text, i):
                    self._in_string_literal = not self._in_string_literal
            elif c == "\n":
                self._line += 1

    def _begin(self, name: str, start: Position) -> None:
        self._state = _State.OPEN
        self._name = name
        self._start = start
        self._args = []
        self._arg.reset()
        self._depth = 0

    def _open(self, text: str, pos: int) -> int:
        """Skip to the opening parenthesis."""
        while pos < len(text):
            c = text[pos]
            if c == "(":
                self._state = _State.ARGS
                return pos + 1
            if c == "\n":
                self._line += 1
            elif c not in _GAP_CHARS:
                raise MissingParenthesisError(
                    self._name,
                    Position(self.filename, self._line, self._column_at(text, pos)),
                )
            pos += 1
        return pos

    def _parse_args(self, text: str, pos: int) -> tuple[int, Optional[Invocation]]:
        """
        Consume argument characters up to the terminating ';'.

        Returns the resume index and the finished invocation, if any.
        """
        while pos < len(text):
            c = text[pos]
            pos += 1

            if c == "\r":
                continue

            if c == "\n":
                self._line += 1
                if self._state is _State.ARGS:
                    self._arg.append(c)
                continue

            if self._state is _State.TAIL:
                if c == '"' and not _is_escaped(text, pos - 1):
                    self._in_string_literal = not self._in_string_literal
                elif c == ";" and not self._in_string_literal:
                    return pos, self._finish()
                continue

            if self._in_string_literal:
                escaped = self._arg.is_escaped()
                self._arg.append(c)
                if c == '"' and not escaped:
                    self._in_string_literal = False
                    if self._depth == 0:
                        self._flush()
                continue

            if c in " ,":
                if self._depth:
                    self._arg.append(c)
                else:
                    self._flush()

            elif c == '"':
                if not self._arg.is_escaped():
                    self._in_string_literal = True
                self._arg.append(c)

            elif c == "(":
                self._arg.append(c)
                self._depth += 1

            elif c == ")":
                if self._depth:
                    self._arg.append(c)
                    self._depth -= 1
                    if self._depth == 0:
                        self._flush()
                else:
                    # Closes the argument list itself
                    self._flush()
                    self._state = _State.TAIL

            elif c == ";":
                return pos, self._finish()

            else:
                self._arg.append(c)

        return pos, None

    def _flush(self) -> None:
        arg = self._arg.flush()
        if arg is not None:
            self._args.append(arg)

    def _finish(self) -> Invocation:
        self._flush()
        inv = Invocation(
            name=self._name,
            start_line=self._start.line,
            end_line=self._line,
            args=self._args,
        )
        self._state = _State.SEARCH
        self._args = []
        logger.debug(f"Invocation of {inv.name} at lines {inv.start_line}-{inv.end_line}")
        return inv

    def _column_at(self, text: str, index: int) -> int:
        """Column of text[index] given the token's starting column."""
        nl = text.rfind("\n", 0, index)
        if nl == -1:
            return self._column + index
        return index - nl


# =============================================================================
# Public Interface
# =============================================================================

def iter_invocations(
    stream: Union[BinaryIO, TextIO],
    *names: str,
    options: Optional[ScannerOptions] = None,
    filename: Optional[str] = None,
) -> Iterator[Invocation]:
    """
    Lazily yield the invocations of the named macros found in a stream.

    The stream is consumed once; the generator cannot be restarted.

    Raises:
        ScannerError: If the source cannot be split into tokens
        MacroError: If an invocation is malformed
    """
    scanner = Scanner(stream, options=options, filename=filename)
    parser = InvocationParser(names, filename=scanner.filename)

    for token in scanner:
        if token.type is TokenType.TEXT:
            yield from parser.feed(token.data, token.position.line, token.position.column)

    parser.close()


def scan_invocations(
    stream: Union[BinaryIO, TextIO],
    callback: Callable[[Invocation], None],
    *names: str,
    options: Optional[ScannerOptions] = None,
    filename: Optional[str] = None,
) -> None:
    """
    Scan a stream for invocations of the named macros.

    The callback is called once per invocation, in source order, as soon
    as its terminating ';' is found. Invocations reported before an error
    remain valid.
    """
    for inv in iter_invocations(stream, *names, options=options, filename=filename):
        callback(inv)


def scan_invocations_string(
    source: str,
    callback: Callable[[Invocation], None],
    *names: str,
    filename: str = "",
) -> None:
    """Scan a string for invocations of the named macros."""
    stream = io.BytesIO(source.encode("utf-8", "surrogateescape"))
    scan_invocations(stream, callback, *names, filename=filename)
