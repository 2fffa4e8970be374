"""
ctext - C Comment/Text Scanner
==============================

This package implements a naive C source scanner that separates comments
from code, and an extractor for function-like macro invocations built on
top of it. It is not a preprocessor: nothing is expanded or evaluated.

Main Components
---------------
- **scanner**: splits C source into COMMENT and TEXT tokens with exact
  file:line:column positions
- **cmacro**: finds invocations of named function-like macros and splits
  their arguments
- **strip**: removes every comment from a source file

Quick Start
-----------
Split a file into tokens:
    >>> from ctext import Scanner
    >>> with open("hello.c", "rb") as f:
    ...     for token in Scanner(f, filename="hello.c"):
    ...         print(token.position, token.type.name, repr(token.data))

Find macro invocations:
    >>> from ctext import scan_invocations_string
    >>> scan_invocations_string('LOG("x=%d", x);', print, "LOG")
    LOG( "x=%d", x );

Or use the command-line tool:
    $ ctext strip hello.c
    $ ctext macros -n LOG hello.c
"""

__version__ = "1.0.0"

from ctext.config import ScannerOptions
from ctext.errors import (
    CTextError,
    EndOfInput,
    ScannerError,
    UnterminatedCommentError,
    TokenTooLargeError,
    MacroError,
    MissingParenthesisError,
    MissingSemicolonError,
)
from ctext.scanner import Position, Scanner, Token, TokenType, scan_tokens
from ctext.cmacro import (
    Invocation,
    InvocationParser,
    compile_names_pattern,
    is_macro_definition,
    iter_invocations,
    scan_invocations,
    scan_invocations_string,
)
from ctext.strip import strip_comments, strip_comments_string

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "ScannerOptions",
    # Scanner
    "Position",
    "Scanner",
    "Token",
    "TokenType",
    "scan_tokens",
    # Macro invocations
    "Invocation",
    "InvocationParser",
    "compile_names_pattern",
    "is_macro_definition",
    "iter_invocations",
    "scan_invocations",
    "scan_invocations_string",
    # Comment stripping
    "strip_comments",
    "strip_comments_string",
    # Exception hierarchy
    "CTextError",
    "EndOfInput",
    "ScannerError",
    "UnterminatedCommentError",
    "TokenTooLargeError",
    "MacroError",
    "MissingParenthesisError",
    "MissingSemicolonError",
]
