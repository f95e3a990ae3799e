"""
Listing Emitter
===============

Writes a resolved listing as fixed-width text.

Listing (out.lst)
-----------------
Five columns, each left-justified in a 12 character field:

    0000        COPY        START       0
    0000        FIRST       STL         30          17202D

Addressing Summary
------------------
An optional report with one line per instruction describing its format
and addressing, right-justified in the same column width:

           INSTR      FORMAT         OAT        TAAM         OBJ
             STL           3      simple          pc      17202D

OAT is the operand addressing type (simple/immediate/indirect) and TAAM
the target address addressing mode (absolute/pc/base, with "_indexed"
appended for indexed instructions).
"""

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from sicxe_disasm.cpu import FormatClass
from sicxe_disasm.disassembler.decoder import DecodedInstruction
from sicxe_disasm.disassembler.listing import ListingRow
from sicxe_disasm.errors import OutputFileError

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 12
SUMMARY_HEADINGS = ("INSTR", "FORMAT", "OAT", "TAAM", "OBJ")


def check_output_path(path: Union[str, Path]) -> None:
    """
    Fail early if ``path`` cannot be created because its directory is missing.

    Raises:
        OutputFileError: If the parent directory does not exist
    """
    path = Path(path)
    if not path.parent.is_dir():
        raise OutputFileError(str(path), f"directory '{path.parent}' does not exist")


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputFileError(str(path), e.strerror or str(e)) from e


# =============================================================================
# Listing
# =============================================================================

def format_row(row: ListingRow, column_width: int = DEFAULT_COLUMN_WIDTH) -> str:
    """Render one row as five left-justified columns."""
    return "".join(column.ljust(column_width) for column in row.columns)


def format_listing(rows: Iterable[ListingRow], column_width: int = DEFAULT_COLUMN_WIDTH) -> str:
    """Render a whole listing, one row per line."""
    return "".join(format_row(row, column_width) + "\n" for row in rows)


def write_listing(
    rows: Sequence[ListingRow],
    path: Union[str, Path],
    column_width: int = DEFAULT_COLUMN_WIDTH,
) -> None:
    """
    Write the listing to ``path``, replacing any existing file.

    Args:
        rows: Resolved listing rows
        path: Output file
        column_width: Width of each column

    Raises:
        OutputFileError: If the file cannot be written
    """
    path = Path(path)
    _write_text(path, format_listing(rows, column_width))
    logger.info(f"Wrote {len(rows)} listing rows to {path}")


# =============================================================================
# Addressing Summary
# =============================================================================

def operand_addressing_type(instr: DecodedInstruction) -> str:
    """simple, immediate or indirect ("" outside Format 3/4)."""
    flags = instr.flags
    if flags is None:
        return ""
    if flags.n == flags.i:
        return "simple"
    return "indirect" if flags.n else "immediate"


def target_addressing_mode(instr: DecodedInstruction) -> str:
    """absolute, pc or base, plus "_indexed" ("" outside Format 3/4)."""
    flags = instr.flags
    if flags is None:
        return ""
    if flags.p:
        mode = "pc"
    elif flags.b:
        mode = "base"
    else:
        mode = "absolute"
    if flags.x:
        mode += "_indexed"
    return mode


def summary_columns(instr: DecodedInstruction) -> tuple:
    """The five summary columns for one instruction."""
    if instr.format is FormatClass.F3_4:
        return (
            instr.mnemonic,
            str(instr.format_number),
            operand_addressing_type(instr),
            target_addressing_mode(instr),
            instr.object_code,
        )
    return (instr.mnemonic, str(instr.format_number), "", "", instr.object_code)


def format_summary(rows: Iterable[ListingRow], column_width: int = DEFAULT_COLUMN_WIDTH) -> str:
    """Render the addressing summary for the instruction rows of a listing."""
    lines: List[str] = ["".join(h.rjust(column_width) for h in SUMMARY_HEADINGS)]
    for row in rows:
        if row.instruction is None:
            continue
        lines.append("".join(c.rjust(column_width) for c in summary_columns(row.instruction)))
    return "\n".join(lines) + "\n"


def write_summary(
    rows: Sequence[ListingRow],
    path: Union[str, Path],
    column_width: int = DEFAULT_COLUMN_WIDTH,
) -> None:
    """Write the addressing summary to ``path``, replacing any existing file."""
    path = Path(path)
    _write_text(path, format_summary(rows, column_width))
    logger.info(f"Wrote addressing summary to {path}")
