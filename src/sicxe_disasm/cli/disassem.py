"""
disassem - SIC/XE Disassembler Command-Line Interface
=====================================================

This module implements the command-line interface for the SIC/XE
disassembler. It reads an object program and its symbol table and writes
the reconstructed assembly listing to out.lst.

Usage Examples
--------------
Disassemble a program:
    $ disassem copy.obj copy.st

Write the listing elsewhere:
    $ disassem copy.obj copy.st -o copy.lst

Also write the addressing summary:
    $ disassem copy.obj copy.st --summary copy.sum

Use a custom opcode table:
    $ disassem copy.obj copy.st --opcodes sicxe_ops.csv

Exit Codes
----------
     0  success
    -1  wrong number of arguments
    -3  object code could not be opened, parsed or decoded
    -4  internal error

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from pathlib import Path
from typing import Optional

import click

from sicxe_disasm import __version__
from sicxe_disasm.cli.errors import handle_cli_exception, usage_error
from sicxe_disasm.config import DisassemblerConfig
from sicxe_disasm.cpu import load_opcode_table
from sicxe_disasm.disassembler import (
    SicXeDisassembler,
    check_output_path,
    write_listing,
    write_summary,
)
from sicxe_disasm.errors import OutputFileError, SymbolTableOpenError
from sicxe_disasm.objfile import ObjectProgram
from sicxe_disasm.symtab import SymbolTable

logger = logging.getLogger(__name__)


def setup_logging(config: DisassemblerConfig, verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else config.logging_level
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
    )


def load_symbol_table(path: Path) -> SymbolTable:
    """Load the symbol table, falling back to an empty one if it cannot be opened."""
    try:
        return SymbolTable.from_file(path)
    except SymbolTableOpenError as e:
        logger.warning(f"{e}; continuing without symbols")
        click.echo(f"Warning: {e}", err=True)
        return SymbolTable()


def write_outputs(rows, config: DisassemblerConfig, summary: Optional[Path]) -> None:
    """
    Write the listing and the optional summary.

    Both destinations are checked before anything is written; the listing
    is removed again if the summary then fails.
    """
    check_output_path(config.output_path)
    if summary is not None:
        check_output_path(summary)

    write_listing(rows, config.output_path, config.column_width)
    if summary is None:
        return
    try:
        write_summary(rows, summary, config.column_width)
    except OutputFileError:
        config.output_path.unlink(missing_ok=True)
        raise


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Listing file (default: out.lst, or $SICXE_OUTPUT)",
)
@click.option(
    "--opcodes",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="CSV opcode table (MNEMONIC,FORMAT,OPCODE) replacing the built-in one",
)
@click.option(
    "--summary",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write an addressing summary (format and addressing mode per instruction)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="disassem")
def main(
    files: tuple,
    output: Optional[Path],
    opcodes: Optional[Path],
    summary: Optional[Path],
    verbose: bool,
) -> None:
    """
    Disassemble a SIC/XE object program into an assembly listing.

    Takes exactly two arguments: the object code file and the symbol
    table file. The listing is written to out.lst in the current
    directory unless -o is given.

    \b
    Examples:
        disassem copy.obj copy.st
        disassem copy.obj copy.st -o copy.lst --summary copy.sum
    """
    if len(files) != 2:
        usage_error()
    object_file, symbol_file = files

    config = DisassemblerConfig.from_env()
    if output is not None:
        config.output_path = output
    if opcodes is not None:
        config.opcode_table_path = opcodes

    setup_logging(config, verbose)

    try:
        opcode_table = None
        if config.opcode_table_path is not None:
            opcode_table = load_opcode_table(config.opcode_table_path)
            logger.info(f"Loaded {len(opcode_table)} opcodes from {config.opcode_table_path}")

        symbol_table = load_symbol_table(symbol_file)
        if symbol_table.is_empty():
            logger.info("Symbol table is empty: the listing will have no labels or literals")
        program = ObjectProgram.from_file(object_file)

        disasm = SicXeDisassembler(symbol_table=symbol_table, opcode_table=opcode_table)
        rows = disasm.disassemble(program)

        write_outputs(rows, config, summary)

        if verbose:
            click.echo(f"Wrote {len(rows)} rows to {config.output_path}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
