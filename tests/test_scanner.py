# =============================================================================
# test_scanner.py - Comment/Text Scanner Unit Tests
# =============================================================================
# Tests for the C comment/text scanner.
#
# Test coverage includes:
#   - Position formatting and validity
#   - Line and block comment boundaries
#   - String literal handling ("//" and "/*" inside strings)
#   - Block comment non-nesting
#   - Exact token positions for a complete example program
#   - Round-trip and partition of the input
#   - Terminal conditions: end of input, open comment, buffer limit, I/O
# =============================================================================

import io

import pytest

from ctext.config import ScannerOptions
from ctext.errors import (
    EndOfInput,
    ScannerError,
    TokenTooLargeError,
    UnterminatedCommentError,
)
from ctext.scanner import Position, Scanner, Token, TokenType, scan_tokens


# =============================================================================
# Helper Functions
# =============================================================================

def scan(source: str, **kwargs) -> list[Token]:
    """Scan a string and return every token."""
    return list(Scanner.from_string(source, **kwargs))


def shapes(source: str) -> list[tuple[TokenType, str]]:
    """Scan a string and return (type, data) pairs."""
    return [(t.type, t.data) for t in scan(source)]


COMPLEX_PROGRAM = r"""
#include <stdio.h>
/*******************************************************************************
 * hello_world.c
 */ #include <stdio.h>

/* PUTS
 * multi-line comment
 */
#define PUTS( _s ) { \
    fputs( _s, stdout ); \
}

// Main function
int
main( void )
{
    PUTS( "Hello World 1\n" ); // comment 1
    PUTS( "Hello World 2\n" ); // comment 2
    PUTS(
        "Hello // World 2\n"
    ); // prints "Hello // World 2 \n"
    return 0;
}

#if 0
/* Allow nested /* comments even though not supported by most compilers */ */
#endif
"""


class FailingStream:
    """A stream whose reads always fail."""

    def read(self, size: int = -1) -> bytes:
        raise OSError("device not ready")


# =============================================================================
# Position Tests
# =============================================================================

class TestPosition:
    """Tests for Position formatting."""

    def test_unset_position_without_filename(self):
        """An unset position with no filename renders as <input>."""
        assert str(Position()) == "<input>"
        assert not Position().is_valid()

    def test_unset_position_with_filename(self):
        """An unset position renders as just the filename."""
        assert str(Position("hello.c")) == "hello.c"

    def test_valid_position(self):
        """A valid position renders as filename:line:column."""
        pos = Position("hello.c", 3, 4)
        assert pos.is_valid()
        assert str(pos) == "hello.c:3:4"

    def test_valid_position_without_filename(self):
        """A valid position without filename uses <input>."""
        assert str(Position("", 1, 1)) == "<input>:1:1"

    def test_position_is_immutable(self):
        """Positions are frozen snapshots."""
        pos = Position("a.c", 1, 1)
        with pytest.raises(AttributeError):
            pos.line = 2


# =============================================================================
# Basic Token Tests
# =============================================================================

class TestBasicTokens:
    """Test token boundaries for small inputs."""

    def test_empty_input(self):
        """Empty input produces no tokens."""
        assert scan("") == []

    def test_text_only(self):
        """Source without comments is a single text token."""
        assert shapes("int x = 1;\nint y = 2;\n") == [
            (TokenType.TEXT, "int x = 1;\nint y = 2;\n"),
        ]

    def test_line_comment_includes_newline(self):
        """A line comment ends with (and includes) its newline."""
        assert shapes("int x; // c\ny;") == [
            (TokenType.TEXT, "int x; "),
            (TokenType.COMMENT, "// c\n"),
            (TokenType.TEXT, "y;"),
        ]

    def test_block_comment(self):
        """A block comment is one token, delimiters included."""
        assert shapes("a /* b\n c */ d") == [
            (TokenType.TEXT, "a "),
            (TokenType.COMMENT, "/* b\n c */"),
            (TokenType.TEXT, " d"),
        ]

    def test_comment_at_start(self):
        """A comment at the very start has no preceding text token."""
        assert shapes("/* c */x") == [
            (TokenType.COMMENT, "/* c */"),
            (TokenType.TEXT, "x"),
        ]

    def test_adjacent_comments(self):
        """Consecutive comments are separate tokens."""
        assert shapes("// a\n// b\n/* c */") == [
            (TokenType.COMMENT, "// a\n"),
            (TokenType.COMMENT, "// b\n"),
            (TokenType.COMMENT, "/* c */"),
        ]

    def test_empty_block_comment(self):
        """/**/ is a complete comment."""
        assert shapes("/**/x") == [
            (TokenType.COMMENT, "/**/"),
            (TokenType.TEXT, "x"),
        ]

    def test_opening_star_does_not_close(self):
        """The '*' of '/*' cannot also close the comment."""
        assert shapes("/*/ x */y") == [
            (TokenType.COMMENT, "/*/ x */"),
            (TokenType.TEXT, "y"),
        ]

    def test_division_does_not_split_text(self):
        """A lone '/' is ordinary text."""
        assert shapes("a = b / c;\n") == [(TokenType.TEXT, "a = b / c;\n")]

    def test_line_comment_at_end_of_input(self):
        """A line comment without a newline is still a comment."""
        assert shapes("x; // c") == [
            (TokenType.TEXT, "x; "),
            (TokenType.COMMENT, "// c"),
        ]

    def test_block_comment_delimiters_inside_line_comment(self):
        """'/*' inside a line comment does not open a block comment."""
        assert shapes("// a /* b\nc") == [
            (TokenType.COMMENT, "// a /* b\n"),
            (TokenType.TEXT, "c"),
        ]


# =============================================================================
# String Literal Tests
# =============================================================================

class TestStringLiterals:
    """Comment delimiters inside string literals."""

    def test_line_comment_inside_string(self):
        """'//' inside a string never starts a comment."""
        assert shapes('x = "a // b";') == [(TokenType.TEXT, 'x = "a // b";')]

    def test_block_comment_inside_string(self):
        """'/*' inside a string never starts a comment."""
        assert shapes('x = "/* b */";') == [(TokenType.TEXT, 'x = "/* b */";')]

    def test_escaped_quote_inside_string(self):
        """An escaped quote does not end the string."""
        source = 'x = "a \\" // b";'
        assert shapes(source) == [(TokenType.TEXT, source)]

    def test_escaped_backslash_before_quote(self):
        """A quote after an escaped backslash does end the string."""
        assert shapes('x = "a\\\\"; // c\n') == [
            (TokenType.TEXT, 'x = "a\\\\"; '),
            (TokenType.COMMENT, "// c\n"),
        ]

    def test_string_after_comment(self):
        """A text token may begin with a string literal."""
        assert shapes('/* c */"a // b"') == [
            (TokenType.COMMENT, "/* c */"),
            (TokenType.TEXT, '"a // b"'),
        ]

    def test_quotes_inside_comment_are_ignored(self):
        """Quotes inside a comment do not open a string."""
        assert shapes('// "\nx; // y\n') == [
            (TokenType.COMMENT, '// "\n'),
            (TokenType.TEXT, "x; "),
            (TokenType.COMMENT, "// y\n"),
        ]

    def test_string_spans_newlines(self):
        """A newline does not end a string literal."""
        source = 's = "a\n// b\n";\n'
        assert shapes(source) == [(TokenType.TEXT, source)]

    def test_comment_after_multi_line_string(self):
        """Comments resume once the literal's closing quote is seen."""
        assert shapes('s = "a\nb"; // c\n') == [
            (TokenType.TEXT, 's = "a\nb"; '),
            (TokenType.COMMENT, "// c\n"),
        ]


# =============================================================================
# Block Comment Nesting Tests
# =============================================================================

class TestBlockCommentNesting:
    """Block comments do not nest."""

    def test_first_close_ends_comment(self):
        """The first '*/' closes the comment."""
        assert shapes("/* a /* b */ c */") == [
            (TokenType.COMMENT, "/* a /* b */"),
            (TokenType.TEXT, " c */"),
        ]


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Token positions for a complete program."""

    def test_complex_program(self):
        """Every token reports the position of its first character."""
        tokens = scan(COMPLEX_PROGRAM, filename="hello_world.c")
        actual = [(t.type, str(t.position), t.data) for t in tokens]

        assert actual == [
            (TokenType.TEXT, "hello_world.c:1:1", "\n#include <stdio.h>\n"),
            (TokenType.COMMENT, "hello_world.c:3:1",
             "/" + "*" * 79 + "\n * hello_world.c\n */"),
            (TokenType.TEXT, "hello_world.c:5:4", " #include <stdio.h>\n\n"),
            (TokenType.COMMENT, "hello_world.c:7:1", "/* PUTS\n * multi-line comment\n */"),
            (TokenType.TEXT, "hello_world.c:9:4",
             "\n#define PUTS( _s ) { \\\n    fputs( _s, stdout ); \\\n}\n\n"),
            (TokenType.COMMENT, "hello_world.c:14:1", "// Main function\n"),
            (TokenType.TEXT, "hello_world.c:15:1",
             'int\nmain( void )\n{\n    PUTS( "Hello World 1\\n" ); '),
            (TokenType.COMMENT, "hello_world.c:18:32", "// comment 1\n"),
            (TokenType.TEXT, "hello_world.c:19:1", '    PUTS( "Hello World 2\\n" ); '),
            (TokenType.COMMENT, "hello_world.c:19:32", "// comment 2\n"),
            (TokenType.TEXT, "hello_world.c:20:1",
             '    PUTS(\n        "Hello // World 2\\n"\n    ); '),
            (TokenType.COMMENT, "hello_world.c:22:8", '// prints "Hello // World 2 \\n"\n'),
            (TokenType.TEXT, "hello_world.c:23:1", "    return 0;\n}\n\n#if 0\n"),
            (TokenType.COMMENT, "hello_world.c:27:1",
             "/* Allow nested /* comments even though not supported by most compilers */"),
            (TokenType.TEXT, "hello_world.c:27:75", " */\n#endif\n"),
        ]

    def test_basic_program(self):
        """A leading block comment followed by code."""
        source = (
            "/**\n"
            " * hello_world.c\n"
            " */\n"
            "\n"
            "#include <stdio.h>\n"
        )
        tokens = scan(source, filename="hello_world.c")
        assert [(t.type, str(t.position)) for t in tokens] == [
            (TokenType.COMMENT, "hello_world.c:1:1"),
            (TokenType.TEXT, "hello_world.c:3:4"),
        ]

    def test_carriage_returns_are_not_columns(self):
        """CR bytes are dropped and do not advance the column."""
        tokens = scan("a;\r\nb; // c\r\n")
        assert [(t.data, str(t.position)) for t in tokens] == [
            ("a;\nb; ", "<input>:1:1"),
            ("// c\n", "<input>:2:4"),
        ]

    def test_cursor_position(self):
        """The scanner cursor points past the last token."""
        scanner = Scanner.from_string("ab\ncd", filename="x.c")
        assert scanner.next() is TokenType.TEXT
        assert str(scanner.position) == "x.c:2:3"


# =============================================================================
# Round-Trip Tests
# =============================================================================

class TestRoundTrip:
    """Concatenated token data reproduces the input minus CR bytes."""

    @pytest.mark.parametrize("source", [
        COMPLEX_PROGRAM,
        "int x; // c\r\ny;",
        'p = "/*"; /* a */ q = "*/"; // "\n',
        "a / b /* c */ / d // e",
        "/* a /* b */ c */",
        "",
    ])
    def test_concatenation(self, source):
        """Every byte belongs to exactly one token, in order."""
        tokens = scan(source)
        assert "".join(t.data for t in tokens) == source.replace("\r", "")
        assert all(t.data for t in tokens)

    def test_positions_are_ordered(self):
        """Token positions increase through the file."""
        tokens = scan(COMPLEX_PROGRAM)
        keys = [(t.position.line, t.position.column) for t in tokens]
        assert keys == sorted(keys)

    def test_small_chunks(self):
        """The read size does not change the tokens."""
        options = ScannerOptions(chunk_size=1)
        assert scan(COMPLEX_PROGRAM, options=options) == scan(COMPLEX_PROGRAM)

    def test_utf8_is_preserved(self):
        """Non-ASCII text survives byte for byte."""
        source = "/* café */ x = \"ünïcode\";"
        tokens = scan(source)
        assert "".join(t.data for t in tokens) == source
        assert b"".join(t.raw for t in tokens) == source.encode("utf-8")

    def test_invalid_utf8_is_preserved(self):
        """Bytes that are not UTF-8 round-trip through token.raw."""
        data = b"/* \xff */ x;"
        tokens = list(Scanner(io.BytesIO(data)))
        assert b"".join(t.raw for t in tokens) == data


# =============================================================================
# Pull Interface Tests
# =============================================================================

class TestPullInterface:
    """next() / token() / err behaviour."""

    def test_end_of_input_after_last_token(self):
        """End of input is reported on the call after the final token."""
        scanner = Scanner.from_string("x")
        assert scanner.err is None
        assert scanner.next() is TokenType.TEXT
        assert scanner.token_text() == "x"
        assert scanner.token_bytes() == b"x"
        assert scanner.next() is TokenType.ERROR
        assert isinstance(scanner.err, EndOfInput)

    def test_terminal_condition_repeats(self):
        """Calls after the end keep reporting ERROR."""
        scanner = Scanner.from_string("")
        assert scanner.next() is TokenType.ERROR
        assert scanner.next() is TokenType.ERROR
        assert isinstance(scanner.err, EndOfInput)

    def test_token_record(self):
        """token() returns an immutable record of the last token."""
        scanner = Scanner.from_string("/* c */", filename="a.c")
        scanner.next()
        token = scanner.token()
        assert token == Token(TokenType.COMMENT, Position("a.c", 1, 1), "/* c */")

    def test_text_stream_input(self):
        """Text streams are accepted as well as binary ones."""
        tokens = list(scan_tokens(io.StringIO("a // b\n")))
        assert [t.data for t in tokens] == ["a ", "// b\n"]

    def test_filename_from_options(self):
        """The filename can come from ScannerOptions."""
        options = ScannerOptions(filename="opt.c")
        tokens = scan("x", options=options)
        assert str(tokens[0].position) == "opt.c:1:1"


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Terminal error conditions."""

    def test_unterminated_block_comment(self):
        """An open block comment at end of input is an error, not a token."""
        scanner = Scanner.from_string("/* never closed")
        assert scanner.next() is TokenType.ERROR
        assert isinstance(scanner.err, UnterminatedCommentError)
        assert "unexpected end of multi-line comment" in str(scanner.err)
        assert str(scanner.err).startswith("<input>:1:1: error:")

    def test_text_before_unterminated_comment_is_kept(self):
        """Tokens emitted before the error remain valid."""
        scanner = Scanner.from_string("int x;\n/* open", filename="a.c")
        assert scanner.next() is TokenType.TEXT
        assert scanner.token_text() == "int x;\n"
        assert scanner.next() is TokenType.ERROR
        assert scanner.err.location == Position("a.c", 2, 1)

    def test_iteration_raises_scanner_error(self):
        """Iterating raises genuine errors."""
        with pytest.raises(UnterminatedCommentError):
            scan("x /* y")

    def test_max_buf_exceeded(self):
        """A token larger than max_buf is an error."""
        options = ScannerOptions(max_buf=8)
        scanner = Scanner.from_string("/* a long comment */", options=options)
        assert scanner.next() is TokenType.ERROR
        assert isinstance(scanner.err, TokenTooLargeError)
        assert scanner.err.limit == 8

    def test_max_buf_not_exceeded(self):
        """Tokens within the limit scan normally."""
        options = ScannerOptions(max_buf=8)
        assert [t.data for t in scan("abc/*d*/", options=options)] == ["abc", "/*d*/"]

    def test_set_max_buf(self):
        """The limit can be changed on an existing scanner."""
        scanner = Scanner.from_string("abcdef")
        scanner.set_max_buf(3)
        with pytest.raises(TokenTooLargeError):
            list(scanner)

    def test_read_error_is_terminal(self):
        """A stream read error becomes the scanner's terminal error."""
        scanner = Scanner(FailingStream())
        assert scanner.next() is TokenType.ERROR
        assert isinstance(scanner.err, OSError)
        assert scanner.next() is TokenType.ERROR

    def test_read_error_raised_when_iterating(self):
        """Iteration propagates the stream's OSError unchanged."""
        with pytest.raises(OSError, match="device not ready"):
            list(Scanner(FailingStream()))

    def test_scanner_errors_share_base(self):
        """Scanner errors can be caught together."""
        with pytest.raises(ScannerError):
            scan("/*")
