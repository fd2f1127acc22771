"""
sasm - Stack Machine Assembler Command-Line Interface
=====================================================

This module implements the command-line interface for the assembler.

Usage Examples
--------------
Assemble and print the JSON result:
    $ sasm hello.s

With output file:
    $ sasm hello.s -o hello.json

Custom entry point and symbol listing:
    $ sasm hello.s -e start -s hello.sym

Show the parsed program and the intermediate entity streams:
    $ sasm -v -p hello.s
"""

from pathlib import Path
from typing import Optional
import logging

import click

from sembler import __version__
from sembler.assembler import Assembler
from sembler.assembler.codegen import DEFAULT_ENTRY_POINT
from sembler.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e", "--entry-point",
    default=DEFAULT_ENTRY_POINT,
    show_default=True,
    metavar="SYMBOL",
    help="Label whose offset becomes the entry address",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the JSON result to FILE (default: pretty-printed to stdout)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-p", "--print-program",
    is_flag=True,
    help="Print the parsed program to stderr before assembling",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (includes entity streams and symbol table)",
)
@click.version_option(version=__version__, prog_name="sasm")
def main(
    input_file: Path,
    entry_point: str,
    output: Optional[Path],
    symbols: Optional[Path],
    print_program: bool,
    verbose: bool,
) -> None:
    """
    Assemble stack machine source code.

    INPUT_FILE is the assembly source file, containing a `bss { ... }`
    section followed by a `raw { ... }` section.

    The result is a JSON object with the base64-encoded bss and raw
    sections and the entry-point offset.

    \b
    Examples:
        sasm prog.s                  # Print result to stdout
        sasm prog.s -o prog.json     # Write result to file
        sasm prog.s -e start         # Use 'start' as entry point
    """
    setup_logging(verbose)

    asm = Assembler(entry_point=entry_point, verbose=verbose)

    try:
        try:
            asm.assemble_file(input_file)
        finally:
            if print_program and asm.get_program() is not None:
                click.echo(asm.get_program_listing(), err=True, nl=False)

        if output is not None:
            asm.write_json(output)
            if verbose:
                click.echo(f"Wrote result to {output}", err=True)
        else:
            click.echo(asm.to_json(pretty=True))

        if symbols is not None:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}", err=True)

        if verbose:
            blob = asm.get_blob()
            click.echo(
                f"Assembly complete: {len(blob.bss)} bss bytes, {len(blob.raw)} raw bytes, "
                f"entry point '{entry_point}' at {blob.ep}",
                err=True,
            )
            click.echo(f"Defined {len(asm.get_symbols())} symbols", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
