"""
Unified CLI Error Handling
==========================

Provides consistent error reporting and exit codes for the disassem tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes of the disassem tool."""
    SUCCESS = 0
    USAGE = -1           # Wrong number of arguments
    PARSE_ERROR = -3     # Input could not be read or decoded, or output not written
    INTERNAL_ERROR = -4  # Unexpected internal error


USAGE_MESSAGE = "usage: ./disassem <object code file> <symbol table file>"


def usage_error() -> NoReturn:
    """Print the usage line and exit with ExitCode.USAGE."""
    click.echo(USAGE_MESSAGE)
    sys.exit(ExitCode.USAGE)


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching code.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors

    Raises:
        SystemExit: Always
    """
    from sicxe_disasm.errors import ObjectFileError, SicXeError

    if isinstance(error, ObjectFileError):
        # Open failures, malformed records and decode errors
        click.echo("Failed to parse object code file!", err=True)
        click.echo(str(error), err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    elif isinstance(error, SicXeError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
