"""
ctext - C Comment/Text Scanner Command-Line Interface
=====================================================

Commands
--------
- **strip**: Strip comments from a C source file
- **tokens**: Print the comment/text token stream as JSON
- **macros**: List invocations of function-like macros

Usage Examples
--------------
Strip comments to stdout:
    $ ctext strip hello.c

Strip comments to a file:
    $ ctext strip -o hello.nc.c hello.c

Dump tokens (useful for building test fixtures):
    $ ctext tokens hello.c > hello.json

List every PRINTF and LOG invocation:
    $ ctext macros -n PRINTF -n LOG hello.c

Read from stdin with a 1 MiB token limit:
    $ cat hello.c | ctext --max-buf 1048576 strip
"""

from typing import BinaryIO, Optional
import json
import logging
import os

import click

from ctext import __version__
from ctext.cli.errors import handle_cli_exception
from ctext.cmacro import Invocation, scan_invocations
from ctext.config import ScannerOptions
from ctext.scanner import Scanner
from ctext.strip import strip_comments


# =============================================================================
# Helpers
# =============================================================================

def _options_for(ctx: click.Context, source: BinaryIO) -> ScannerOptions:
    """Scanner options from the group options, named after the source file."""
    base: ScannerOptions = ctx.obj["options"]
    name = getattr(source, "name", "")
    if not isinstance(name, str) or name in ("-", "<stdin>"):
        name = ""
    return ScannerOptions(
        filename=os.path.basename(name),
        max_buf=base.max_buf,
        chunk_size=base.chunk_size,
    )


def _verbose(ctx: click.Context) -> bool:
    return ctx.obj["verbose"]


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging to stderr)",
)
@click.option(
    "--max-buf",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum size of a single token in bytes (0 = unlimited). "
         "Overrides CTEXT_MAX_BUF.",
)
@click.version_option(__version__, "--version", "-V", prog_name="ctext")
@click.pass_context
def main(ctx: click.Context, verbose: bool, max_buf: Optional[int]) -> None:
    """
    Separate C source into comments and code.

    \b
    Commands:
      strip     Strip comments from a C source file
      tokens    Print the token stream as JSON
      macros    List invocations of function-like macros

    \b
    Examples:
      ctext strip hello.c
      ctext tokens hello.c
      ctext macros -n PRINTF hello.c
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    options = ScannerOptions.from_env()
    if max_buf is not None:
        options.max_buf = max_buf

    ctx.ensure_object(dict)
    ctx.obj["options"] = options
    ctx.obj["verbose"] = verbose


# =============================================================================
# Strip Command
# =============================================================================

@main.command("strip")
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "-o", "--output",
    type=click.File("wb"),
    default="-",
    help="Output file (default: stdout)",
)
@click.pass_context
def cmd_strip(ctx: click.Context, source: BinaryIO, output: BinaryIO) -> None:
    """
    Strip comments from a C source file.

    SOURCE is read from stdin if omitted. Only comments are removed; all
    other bytes, including trailing blanks, are kept.

    \b
    Example:
      ctext strip -o hello.nc.c hello.c
    """
    options = _options_for(ctx, source)
    try:
        removed = strip_comments(output, source, options)
    except Exception as e:
        handle_cli_exception(e, _verbose(ctx))

    if _verbose(ctx):
        click.echo(f"Removed {removed} comments from {options.filename or '<stdin>'}", err=True)


# =============================================================================
# Tokens Command
# =============================================================================

@main.command("tokens")
@click.argument("source", type=click.File("rb"), default="-")
@click.pass_context
def cmd_tokens(ctx: click.Context, source: BinaryIO) -> None:
    """
    Print the comment/text tokens of a C source file as JSON.

    \b
    Output format:
      [
        {"type": "COMMENT", "filename": "hello.c", "line": 1,
         "column": 1, "data": "/* ... */"},
        ...
      ]
    """
    options = _options_for(ctx, source)
    tokens = []
    try:
        for token in Scanner(source, options=options):
            tokens.append({
                "type": token.type.name,
                "filename": token.position.filename,
                "line": token.position.line,
                "column": token.position.column,
                "data": token.data,
            })
    except Exception as e:
        handle_cli_exception(e, _verbose(ctx))

    click.echo(json.dumps(tokens, indent=2))


# =============================================================================
# Macros Command
# =============================================================================

@main.command("macros")
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "-n", "--name", "names",
    multiple=True,
    required=True,
    help="Macro name to look for (can be repeated)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print invocations as a JSON list",
)
@click.pass_context
def cmd_macros(
    ctx: click.Context,
    source: BinaryIO,
    names: tuple[str, ...],
    as_json: bool,
) -> None:
    """
    List invocations of function-like macros in a C source file.

    Definitions (#define NAME(...)) and occurrences inside comments or
    string literals are ignored.

    \b
    Example:
      ctext macros -n PRINTF hello.c

    \b
    Output format:
      PRINTF( "Hello %d", 1 );
      start=8, end=10
    """
    options = _options_for(ctx, source)
    found: list[Invocation] = []

    def report(inv: Invocation) -> None:
        if as_json:
            found.append(inv)
        else:
            click.echo(str(inv))
            click.echo(f"start={inv.start_line}, end={inv.end_line}")

    try:
        scan_invocations(source, report, *names, options=options)
    except Exception as e:
        handle_cli_exception(e, _verbose(ctx))

    if as_json:
        click.echo(json.dumps(
            [
                {
                    "name": inv.name,
                    "start_line": inv.start_line,
                    "end_line": inv.end_line,
                    "args": inv.args,
                }
                for inv in found
            ],
            indent=2,
        ))


if __name__ == "__main__":
    main()
