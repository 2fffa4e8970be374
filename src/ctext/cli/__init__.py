"""
ctext Command-Line Interface
============================

This package provides the `ctext` command, a Click-based CLI exposing the
scanner and the macro invocation extractor:

- **ctext strip**: strip comments from a C source file
- **ctext tokens**: dump the comment/text token stream as JSON
- **ctext macros**: list invocations of function-like macros
"""

__all__ = ["ctext"]
