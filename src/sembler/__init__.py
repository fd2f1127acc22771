"""
Sembler - Assembler for a Small Stack Machine
=============================================

This package translates a small text-based assembly language into flat
binary machine code for a stack-based virtual machine. A program has two
sections, `bss` and `raw`, each assembled from offset 0; the result is the
two byte buffers plus the offset of the entry-point label.

Quick Start
-----------
Assemble a program:
    >>> from sembler import Assembler
    >>> asm = Assembler()
    >>> blob = asm.assemble_file("hello.s")
    >>> asm.write_json("hello.json")

Or use the command-line tool:
    $ sasm hello.s -o hello.json

Source Example
--------------
    bss {
    greeting: .asciz "hello"
    }
    raw {
    main:   IMM greeting    ; push address of greeting
            INT 0x1
            RET
    }
"""

__version__ = "0.1.0"

from sembler.assembler import Assembler, assemble, assemble_file, parse_source, format_program
from sembler.output import Blob, encode_blob, blob_to_json
from sembler.errors import (
    SemblerError,
    AssemblerError,
    ParseError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    MissingEntryPointError,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    "parse_source",
    "format_program",
    # Output
    "Blob",
    "encode_blob",
    "blob_to_json",
    # Errors
    "SemblerError",
    "AssemblerError",
    "ParseError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "MissingEntryPointError",
    "SourceLocation",
]
