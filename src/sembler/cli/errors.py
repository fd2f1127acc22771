"""
CLI Exit Codes and Error Reporting
==================================

Maps whatever escaped a command to a message on stderr and a process
exit code.
"""

from enum import IntEnum
from typing import NoReturn
import sys
import traceback

import click

from sembler.errors import SemblerError


class ExitCode(IntEnum):
    """Process exit codes of the sasm command."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Parse or assembly failure
    INVALID_ARGS = 2     # Bad option value or unreadable input
    INTERNAL_ERROR = 3   # Bug in sembler


# Failures caused by the command-line arguments
_ARGUMENT_ERRORS = (click.BadParameter, FileNotFoundError, PermissionError, IsADirectoryError)


def classify_exception(error: Exception) -> ExitCode:
    """Pick the exit code for an exception."""
    if isinstance(error, SemblerError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, _ARGUMENT_ERRORS):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None,
) -> NoReturn:
    """
    Report `error` on stderr and exit.

    Args:
        error: Exception caught by the command
        verbose: Also print the traceback of internal errors
        error_type: Label for build errors, e.g. "Assembly" gives
                    "Assembly error: ..."
    """
    code = classify_exception(error)

    if code == ExitCode.BUILD_ERROR:
        label = f"{error_type} error" if error_type else "Error"
        click.echo(f"{label}: {error}", err=True)
    elif code == ExitCode.INVALID_ARGS:
        click.echo(f"Error: {error}", err=True)
    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(code)
