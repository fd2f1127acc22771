"""
Stack Machine Assembler - Main Interface
========================================

This module provides the main Assembler class, which is the primary interface
for assembling source code. It coordinates the lexer, parser and code
generator to produce a Blob (assembled bss/raw sections plus entry point).

Example Usage
-------------
>>> from sembler.assembler import Assembler
>>>
>>> asm = Assembler(entry_point="main")
>>> blob = asm.assemble_string('''
... bss {
... msg:  .asciz "hi"
... }
... raw {
... main: IMM msg
...       RET
... }
... ''')
>>> blob.ep
0
>>> asm.write_json("hello.json")

Command-Line Usage
------------------
    $ sasm hello.s -e main -o hello.json

Options:
    -e, --entry-point SYMBOL  Entry-point label (default: main)
    -o, --output FILE         Write JSON result to FILE
    -s, --symbols FILE        Write symbol listing
    -p, --print-program       Print the parsed program
    -v, --verbose             Verbose output
"""

from pathlib import Path
from typing import Optional
import logging

from sembler.assembler.parser import parse_source
from sembler.assembler.codegen import CodeGenerator, DEFAULT_ENTRY_POINT
from sembler.assembler.ast import Program
from sembler.assembler.printer import format_program
from sembler.errors import AssemblerError
from sembler.output import Blob, blob_to_json

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main assembler class.

    Assembly is a pure function of the source and the entry-point name;
    the instance only remembers the results of the last run so they can
    be inspected or written out.

    Attributes:
        entry_point: Name of the label whose offset becomes the entry address
        verbose: If True, log progress messages at INFO level
    """

    def __init__(self, entry_point: str = DEFAULT_ENTRY_POINT, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            entry_point: Entry-point label name (default "main")
            verbose: Enable verbose progress logging
        """
        self.entry_point = entry_point
        self._verbose = verbose
        self._codegen = CodeGenerator()
        self._program: Optional[Program] = None
        self._blob: Optional[Blob] = None

    def _log(self, message: str) -> None:
        if self._verbose:
            logger.info(message)
        else:
            logger.debug(message)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: bytes | str, filename: str = "<input>") -> Blob:
        """
        Assemble source code (alias for assemble_string).

        Args:
            source: Assembly source (bytes, or str encoded as UTF-8)
            filename: Virtual filename for error messages

        Returns:
            The assembled Blob
        """
        return self.assemble_string(source, filename)

    def assemble_string(self, source: bytes | str, filename: str = "<input>") -> Blob:
        """
        Assemble source code from memory.

        The assembly pipeline is:
        1. Parse source into a Program (lexer -> parser)
        2. Pass 1 over bss then raw (layout, symbol table)
        3. Pass 2 over bss then raw (placeholder fixup)
        4. Entry-point lookup

        Raises:
            ParseError: If the source does not match the grammar
            DuplicateSymbolError, UndefinedSymbolError,
            MissingEntryPointError: If assembly fails
        """
        self._program = None
        self._blob = None
        self._codegen = CodeGenerator()

        program = parse_source(source, filename)
        self._program = program
        self._log(f"Parsed {len(program.bss)} bss and {len(program.raw)} raw entries")

        blob = self._codegen.generate(program, self.entry_point)
        self._blob = blob
        self._log(
            f"Assembled {len(blob.bss)} bss bytes and {len(blob.raw)} raw bytes, "
            f"entry point '{self.entry_point}' = {blob.ep}"
        )
        return blob

    def assemble_file(self, filepath: str | Path) -> Blob:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._log(f"Assembling {filepath}...")

        source = filepath.read_bytes()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _require_blob(self) -> Blob:
        if self._blob is None:
            raise AssemblerError("nothing has been assembled yet")
        return self._blob

    def get_program(self) -> Optional[Program]:
        """Return the Program parsed by the last run (None before parsing)."""
        return self._program

    def get_blob(self) -> Blob:
        return self._require_blob()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to section-relative offsets
        """
        return self._codegen.get_symbols()

    def get_symbol_listing(self) -> str:
        return self._codegen.get_symbol_listing()

    def get_program_listing(self) -> str:
        """Return the pretty-printed source of the last parsed program."""
        if self._program is None:
            raise AssemblerError("nothing has been parsed yet")
        return format_program(self._program)

    def to_json(self, pretty: bool = False) -> str:
        return blob_to_json(self._require_blob(), pretty=pretty)

    def write_json(self, filepath: str | Path, pretty: bool = False) -> None:
        """
        Write the JSON result document.

        Args:
            filepath: Output file path
            pretty: Indent the document
        """
        Path(filepath).write_text(self.to_json(pretty=pretty) + "\n")
        self._log(f"Wrote {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name section offset (one per line)
        """
        self._require_blob()
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by sasm\n")
            listing = self.get_symbol_listing()
            if listing:
                f.write(listing + "\n")
        self._log(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: bytes | str, entry_point: str = DEFAULT_ENTRY_POINT,
             filename: str = "<input>") -> Blob:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(entry_point=entry_point)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, entry_point: str = DEFAULT_ENTRY_POINT) -> Blob:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(entry_point=entry_point)
    return asm.assemble_file(filepath)
