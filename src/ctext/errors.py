"""
ctext Error Hierarchy
=====================

This module defines the exception hierarchy for the scanner and the macro
invocation extractor. All genuine errors inherit from CTextError, allowing
callers to catch every scan failure with a single except clause.

Exception Hierarchy
-------------------
CTextError (base)
├── ScannerError (comment/text scanner)
│   ├── UnterminatedCommentError - block comment still open at end of input
│   └── TokenTooLargeError - a single token exceeded the configured buffer
└── MacroError (invocation extractor)
    ├── MissingParenthesisError - macro name not followed by '('
    └── MissingSemicolonError - input ended inside an invocation

EndOfInput is deliberately outside this tree. It is the expected terminal
signal of a scanner and derives from the builtin EOFError.

Error messages follow this format:
    filename:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ctext.scanner import Position


# =============================================================================
# Terminal Signal
# =============================================================================

class EndOfInput(EOFError):
    """
    The scanner has consumed all of its input.

    Returned by Scanner.err after the final token has been handed out.
    It is not a failure and callers normally stop iterating on it.
    """

    def __init__(self, message: str = "end of input"):
        super().__init__(message)


# =============================================================================
# Base Exception Class
# =============================================================================

class CTextError(Exception):
    """
    Base exception for all ctext errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional["Position"] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            hello.c:27:1: error: unexpected end of multi-line comment
            hint: add closing */ to terminate the comment
        """
        parts = []

        if self.location is not None and self.location.is_valid():
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Scanner Exceptions
# =============================================================================

class ScannerError(CTextError):
    """Error raised while splitting source into comment and text tokens."""
    pass


class UnterminatedCommentError(ScannerError):
    """
    A multi-line comment was still open when the input ended.

    The location points at the opening '/*'. No comment token is produced
    for the truncated span.
    """

    def __init__(self, location: Optional["Position"] = None):
        super().__init__(
            "unexpected end of multi-line comment",
            location=location,
            hint="add closing */ to terminate the comment",
        )


class TokenTooLargeError(ScannerError):
    """
    A single token grew past the scanner's maximum buffer size.

    Only raised when a limit is configured (ScannerOptions.max_buf > 0).
    """

    def __init__(self, limit: int, location: Optional["Position"] = None):
        self.limit = limit
        super().__init__(
            f"token exceeds maximum buffer size of {limit} bytes",
            location=location,
            hint="raise --max-buf or CTEXT_MAX_BUF, or use 0 for no limit",
        )


# =============================================================================
# Macro Invocation Exceptions
# =============================================================================

class MacroError(CTextError):
    """Error raised while extracting function-like macro invocations."""
    pass


class MissingParenthesisError(MacroError):
    """A target macro name was not followed by an opening parenthesis."""

    def __init__(self, name: str, location: Optional["Position"] = None):
        self.name = name
        super().__init__(
            "macro function missing opening parentheses",
            location=location,
            hint=f"'{name}' must be invoked as {name}( ... );",
        )


class MissingSemicolonError(MacroError):
    """The input ended before an invocation's terminating ';' was found."""

    def __init__(self, name: str, location: Optional["Position"] = None):
        self.name = name
        super().__init__(
            f"unexpected end of input in invocation of '{name}'",
            location=location,
            hint="terminate the invocation with ';'",
        )
