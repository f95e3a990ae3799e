"""
SIC/XE Instruction Set Definition
=================================

This module defines the SIC/XE opcode catalogue used by the decoder: the
mapping from opcode byte to mnemonic and instruction format.

Instruction Formats
-------------------
SIC/XE instructions come in four sizes:

1. **Format 1**: opcode only (FIX, FLOAT, HIO, NORM, SIO, TIO)
   - 1 byte
   - Example: FIX -> $C4

2. **Format 2**: opcode + two 4-bit register fields
   - 2 bytes
   - Example: CLEAR X -> $B4 $10

3. **Format 3**: opcode/ni + xbpe nibble + 12-bit displacement
   - 3 bytes
   - Example: LDA #3 -> $01 $00 $03

4. **Format 4**: opcode/ni + xbpe nibble (e=1) + 20-bit address
   - 4 bytes
   - Example: +JSUB $1036 -> $4B $10 $10 $36

Formats 3 and 4 share an opcode; the e bit of the xbpe nibble selects the
size, so the catalogue records them as a single F3/4 class.

Opcode Masking
--------------
The low two bits of a Format 3/4 opcode byte carry the n and i flags. The
catalogue is keyed by the opcode with those bits cleared, and every lookup
masks the incoming byte with 0xFC first.

Reference
---------
- Leland L. Beck, System Software: An Introduction to Systems Programming,
  Appendix A (instruction set)
"""

import csv
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from sicxe_disasm.errors import OpcodeTableError


OPCODE_MASK = 0xFC


# =============================================================================
# Format Class Enumeration
# =============================================================================

class FormatClass(Enum):
    """Instruction format class as recorded in the catalogue."""
    F1 = "1"
    F2 = "2"
    F3_4 = "3/4"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_text(cls, text: str) -> "FormatClass":
        """
        Parse the format column of an opcode table ("1", "2" or "3/4").

        Raises:
            ValueError: If the text is not a known format class
        """
        for fmt in cls:
            if fmt.value == text.strip():
                return fmt
        raise ValueError(f"unknown instruction format '{text}'")


# =============================================================================
# Opcode Entry
# =============================================================================

@dataclass(frozen=True)
class OpcodeEntry:
    """
    One catalogue entry: what an opcode byte decodes to.

    Frozen so the shared table cannot be modified at runtime.

    Attributes:
        mnemonic: Instruction mnemonic (e.g., "LDA", "CLEAR")
        format: Format class (F1, F2 or F3/4)
    """
    mnemonic: str
    format: FormatClass

    def __repr__(self) -> str:
        return f"OpcodeEntry({self.mnemonic}, format={self.format})"


_F1 = FormatClass.F1
_F2 = FormatClass.F2
_F34 = FormatClass.F3_4


# =============================================================================
# Opcode Table
# =============================================================================
# Key: opcode byte with bits 0 and 1 cleared
# Value: OpcodeEntry(mnemonic, format class)
# =============================================================================

OPCODE_TABLE: Dict[int, OpcodeEntry] = {
    # Arithmetic
    0x18: OpcodeEntry("ADD", _F34),
    0x58: OpcodeEntry("ADDF", _F34),
    0x90: OpcodeEntry("ADDR", _F2),
    0x1C: OpcodeEntry("SUB", _F34),
    0x5C: OpcodeEntry("SUBF", _F34),
    0x94: OpcodeEntry("SUBR", _F2),
    0x20: OpcodeEntry("MUL", _F34),
    0x60: OpcodeEntry("MULF", _F34),
    0x98: OpcodeEntry("MULR", _F2),
    0x24: OpcodeEntry("DIV", _F34),
    0x64: OpcodeEntry("DIVF", _F34),
    0x9C: OpcodeEntry("DIVR", _F2),

    # Logic and shifts
    0x40: OpcodeEntry("AND", _F34),
    0x44: OpcodeEntry("OR", _F34),
    0xA4: OpcodeEntry("SHIFTL", _F2),
    0xA8: OpcodeEntry("SHIFTR", _F2),

    # Comparison
    0x28: OpcodeEntry("COMP", _F34),
    0x88: OpcodeEntry("COMPF", _F34),
    0xA0: OpcodeEntry("COMPR", _F2),
    0x2C: OpcodeEntry("TIX", _F34),
    0xB8: OpcodeEntry("TIXR", _F2),

    # Jumps and subroutines
    0x3C: OpcodeEntry("J", _F34),
    0x30: OpcodeEntry("JEQ", _F34),
    0x34: OpcodeEntry("JGT", _F34),
    0x38: OpcodeEntry("JLT", _F34),
    0x48: OpcodeEntry("JSUB", _F34),
    0x4C: OpcodeEntry("RSUB", _F34),

    # Loads
    0x00: OpcodeEntry("LDA", _F34),
    0x68: OpcodeEntry("LDB", _F34),
    0x50: OpcodeEntry("LDCH", _F34),
    0x70: OpcodeEntry("LDF", _F34),
    0x08: OpcodeEntry("LDL", _F34),
    0x6C: OpcodeEntry("LDS", _F34),
    0x74: OpcodeEntry("LDT", _F34),
    0x04: OpcodeEntry("LDX", _F34),
    0xD0: OpcodeEntry("LPS", _F34),

    # Stores
    0x0C: OpcodeEntry("STA", _F34),
    0x78: OpcodeEntry("STB", _F34),
    0x54: OpcodeEntry("STCH", _F34),
    0x80: OpcodeEntry("STF", _F34),
    0xD4: OpcodeEntry("STI", _F34),
    0x14: OpcodeEntry("STL", _F34),
    0x7C: OpcodeEntry("STS", _F34),
    0xE8: OpcodeEntry("STSW", _F34),
    0x84: OpcodeEntry("STT", _F34),
    0x10: OpcodeEntry("STX", _F34),

    # Register operations
    0xB4: OpcodeEntry("CLEAR", _F2),
    0xAC: OpcodeEntry("RMO", _F2),
    0xB0: OpcodeEntry("SVC", _F2),

    # Floating point conversion (format 1)
    0xC4: OpcodeEntry("FIX", _F1),
    0xC0: OpcodeEntry("FLOAT", _F1),
    0xC8: OpcodeEntry("NORM", _F1),

    # I/O and system
    0xD8: OpcodeEntry("RD", _F34),
    0xDC: OpcodeEntry("WD", _F34),
    0xE0: OpcodeEntry("TD", _F34),
    0xEC: OpcodeEntry("SSK", _F34),
    0xF4: OpcodeEntry("HIO", _F1),
    0xF0: OpcodeEntry("SIO", _F1),
    0xF8: OpcodeEntry("TIO", _F1),
}


# =============================================================================
# Register Names
# =============================================================================
# Format 2 register field value -> register mnemonic. Value 7 is unused.

REGISTER_NAMES: Dict[int, str] = {
    0: "A",
    1: "X",
    2: "L",
    3: "B",
    4: "S",
    5: "T",
    6: "F",
    8: "PC",
    9: "SW",
}


def register_name(number: int) -> str:
    """Return the register mnemonic for a Format 2 field, or its number."""
    return REGISTER_NAMES.get(number, str(number))


# =============================================================================
# Lookup Helpers
# =============================================================================

def get_opcode_entry(
    opcode: int,
    table: Optional[Dict[int, OpcodeEntry]] = None,
) -> Optional[OpcodeEntry]:
    """
    Look up an opcode byte, ignoring its n/i bits.

    Args:
        opcode: Raw opcode byte from the object code
        table: Catalogue to search (default: OPCODE_TABLE)

    Returns:
        The OpcodeEntry, or None if the opcode is not recognised
    """
    if table is None:
        table = OPCODE_TABLE
    return table.get(opcode & OPCODE_MASK)


def load_opcode_table(path: Union[str, Path]) -> Dict[int, OpcodeEntry]:
    """
    Load a replacement opcode catalogue from a CSV file.

    Each line holds MNEMONIC,FORMAT,OPCODE_HEX, for example:

        ADD,3/4,18
        CLEAR,2,B4
        FIX,1,C4

    Blank lines and lines starting with '#' are skipped.

    Args:
        path: CSV file to read

    Returns:
        Dictionary mapping masked opcode bytes to OpcodeEntry

    Raises:
        OpcodeTableError: If the file cannot be read or a line is malformed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise OpcodeTableError(f"cannot read opcode table '{path}': {e.strerror or e}") from e

    table: Dict[int, OpcodeEntry] = {}
    for line_number, row in enumerate(csv.reader(text.splitlines()), start=1):
        if not row or not "".join(row).strip() or row[0].lstrip().startswith("#"):
            continue
        if len(row) < 3:
            raise OpcodeTableError(
                f"expected MNEMONIC,FORMAT,OPCODE but got {','.join(row)!r}",
                line=line_number,
            )
        mnemonic, format_text, opcode_text = (field.strip() for field in row[:3])
        try:
            fmt = FormatClass.from_text(format_text)
            opcode = int(opcode_text, 16)
        except ValueError as e:
            raise OpcodeTableError(str(e), line=line_number) from e
        if not mnemonic or not 0 <= opcode <= 0xFF:
            raise OpcodeTableError(f"invalid entry {','.join(row)!r}", line=line_number)

        table[opcode & OPCODE_MASK] = OpcodeEntry(mnemonic.upper(), fmt)

    return table
