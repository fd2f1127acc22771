"""
Sembler Error Hierarchy
=======================

Every failure of an assembly run is reported as one of the exceptions
below. They all derive from SemblerError, so a caller that only wants to
know "did it work" needs a single except clause.

Exception Hierarchy
-------------------
SemblerError
└── AssemblerError
    ├── ParseError              source text does not match the grammar
    ├── DuplicateSymbolError    label bound more than once
    ├── UndefinedSymbolError    reference to a label that is never bound
    └── MissingEntryPointError  entry-point label not bound

Errors are terminal: the first one aborts the run and nothing is
collected or retried.

Rendered Form
-------------
str(error) gives a compiler-style diagnostic:

    prog.s:3:11: error: undefined symbol 'prnt'
        main: JSR prnt
                  ^
    hint: did you mean 'print'?

The location, the quoted source line and the hint are each omitted when
not known.
"""

from dataclasses import dataclass
from typing import Optional


class SemblerError(Exception):
    """Root of every exception raised by sembler."""


# =============================================================================
# Positions
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A point in the assembly input.

    Attributes:
        filename: Source file name, "<input>" for in-memory source
        line: 1-indexed line
        column: 1-indexed column, counted in bytes
        offset: 0-indexed byte offset from the start of the input
    """
    filename: str
    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


def render_diagnostic(
    message: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
    hint: Optional[str] = None,
) -> str:
    """Build the multi-line text of a diagnostic."""
    head = f"error: {message}"
    if location is not None:
        head = f"{location}: {head}"
    lines = [head]

    if location is not None and source_line is not None:
        lines.append("    " + source_line)
        if location.column >= 1:
            lines.append(" " * (3 + location.column) + "^")

    if hint:
        lines.append("hint: " + hint)
    return "\n".join(lines)


# =============================================================================
# Assembler Errors
# =============================================================================

class AssemblerError(SemblerError):
    """
    An assembly run failed.

    Attributes:
        message: One-line description, without location
        location: Where the failure was detected, if known
        hint: Suggested fix, if any
        source_line: Text of the offending source line, if known
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(render_diagnostic(message, location, source_line, hint))


class ParseError(AssemblerError):
    """
    The input does not match the grammar.

    Covers lexical failures (stray bytes, malformed numbers, unterminated
    strings) as well as structural ones (missing braces, unknown mnemonics,
    input after the raw section).

    Attributes:
        offset: Byte offset of the failure
        context: Source line around the failure, or None when it cannot be
                 decoded as text
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        context: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.offset = 0 if location is None else location.offset
        self.context = context
        super().__init__(message, location, hint, context)


class DuplicateSymbolError(AssemblerError):
    """
    A label is bound twice.

    bss and raw labels live in one namespace, so binding the same name in
    both sections counts as a duplicate.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location
        hint = (
            f"'{symbol}' was first defined at {original_location}"
            if original_location is not None else None
        )
        super().__init__(f"duplicate symbol '{symbol}'", location, hint)


class UndefinedSymbolError(AssemblerError):
    """
    A placeholder names a label that no entry binds.

    Close matches from the symbol table are offered as a hint.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = list(similar_symbols or [])
        if hint is None and self.similar_symbols:
            names = ", ".join(repr(name) for name in self.similar_symbols[:3])
            hint = f"did you mean {names}?"
        super().__init__(f"undefined symbol '{symbol}'", location, hint)


class MissingEntryPointError(AssemblerError):
    """The requested entry-point label is not in the symbol table."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(
            f"missing entry point '{symbol}'",
            hint=f"define a label '{symbol}:' or choose another with --entry-point",
        )
