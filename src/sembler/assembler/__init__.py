"""
Stack Machine Assembler
=======================

This package translates the text assembly language of a small stack-based
virtual machine into flat binary machine code.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **Lexer**: Tokenizes source bytes into tokens
- **Parser**: Parses tokens into a Program (bss and raw sections)
- **CodeGenerator**: Two-pass assembly of a Program into a Blob
- **format_program**: Pretty-prints a Program back to source

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**:
   - Tokenize source, skipping whitespace and ';' comments
   - Parse `bss { ... } raw { ... }` into immutable entries

2. **Code Generation (CodeGenerator)** (two-pass):
   - Pass 1: Encode entries into bytes and label placeholders,
     record label offsets in one symbol table shared by both sections
   - Pass 2: Replace placeholders with 32-bit big-endian offsets
   - Look up the entry-point label

Example Usage
-------------
>>> from sembler.assembler import Assembler
>>> blob = Assembler(entry_point="start").assemble("bss { } raw { start: PSH RET }")
>>> blob.raw
b'\\x10\\x18'
>>> blob.ep
0
"""

from sembler.assembler.assembler import Assembler, assemble, assemble_file
from sembler.assembler.lexer import Lexer, Token, TokenType
from sembler.assembler.parser import Parser, parse_source
from sembler.assembler.ast import (
    Ascii,
    Asciz,
    Byte,
    DataWord,
    Entry,
    LabelRef,
    Literal,
    Nullary,
    NullaryOp,
    Program,
    Unary,
    UnaryOp,
)
from sembler.assembler.codegen import (
    CodeGenerator,
    Placeholder,
    Symbol,
    encode_instruction,
    first_pass,
    second_pass,
    resolve_entry_point,
)
from sembler.assembler.printer import format_program

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "parse_source",
    # Data model
    "Ascii",
    "Asciz",
    "Byte",
    "DataWord",
    "Entry",
    "LabelRef",
    "Literal",
    "Nullary",
    "NullaryOp",
    "Program",
    "Unary",
    "UnaryOp",
    # Code generator
    "CodeGenerator",
    "Placeholder",
    "Symbol",
    "encode_instruction",
    "first_pass",
    "second_pass",
    "resolve_entry_point",
    # Printer
    "format_program",
]
