"""
Pass B: Operand Resolution
==========================

Walks the Pass A listing in order and writes the operand text of every
instruction, framed by a START row at the top and an END row at the
bottom.

Running Registers
-----------------
BASE and X are tracked statically: they hold the target of the last LDB
and LDX seen in listing order, not runtime register values. A load from
memory sets them to the memory address, which is as far as static
tracking can go.

Format 3/4 Target Calculation
-----------------------------
    e=1          target = address field (20 bits)
    b=1          target = displacement + BASE
    p=1          target = sign-extended displacement + next row's address
    otherwise    target = displacement

    x=1 adds X to any of the above. Targets are kept to 32 bits.

Operand decorations: '#' for immediate (i=1, n=0), '@' for indirect
(n=1, i=0) and '+' on the mnemonic for Format 4.
"""

import logging
from typing import List, Optional

from sicxe_disasm.cpu import FormatClass, register_name
from sicxe_disasm.disassembler.decoder import DecodedInstruction
from sicxe_disasm.disassembler.listing import ListingRow, format_address
from sicxe_disasm.objfile import HeaderRecord

logger = logging.getLogger(__name__)

WORD_MASK = 0xFFFFFFFF
DISPLACEMENT_SIGN = 0x800
DISPLACEMENT_RANGE = 0x1000

# Format 2 operand shapes
REGISTER_PAIR = frozenset({"ADDR", "SUBR", "MULR", "DIVR", "COMPR"})
SINGLE_REGISTER = frozenset({"CLEAR", "TIXR"})
REGISTER_AND_COUNT = frozenset({"SHIFTL", "SHIFTR"})
CONSTANT = frozenset({"SVC"})


def sign_extend_12(value: int) -> int:
    """Interpret a 12-bit displacement as two's complement."""
    if value & DISPLACEMENT_SIGN:
        return value - DISPLACEMENT_RANGE
    return value


def format_register_operand(instr: DecodedInstruction) -> str:
    """Operand text of a Format 2 instruction."""
    r1, r2 = instr.registers or (0, 0)

    if instr.mnemonic in REGISTER_PAIR:
        return f"{register_name(r1)},{register_name(r2)}"
    if instr.mnemonic in SINGLE_REGISTER:
        return register_name(r1)
    if instr.mnemonic in REGISTER_AND_COUNT:
        return f"{register_name(r1)},{r2 + 1}"
    if instr.mnemonic in CONSTANT:
        return str(r1)
    return ""


class OperandResolver:
    """
    Second pass over the listing.

    Attributes:
        base: Current static BASE register value
        index: Current static X register value
    """

    def __init__(self) -> None:
        self.base = 0
        self.index = 0

    def resolve(self, rows: List[ListingRow], header: HeaderRecord) -> List[ListingRow]:
        """
        Frame the rows with START/END and resolve every operand.

        Args:
            rows: Pass A output (operands empty)
            header: Program header, for the START and END rows

        Returns:
            The complete listing, START first and END last
        """
        self.base = 0
        self.index = 0

        start = ListingRow.decoration(
            "START",
            address=0,
            address_hex=format_address(0),
            label=header.name,
            operand=str(header.start_address),
        )
        end = ListingRow.decoration(
            "END",
            address=self._end_address(rows, header),
            operand=header.name,
        )
        listing = [start, *rows, end]

        for position, row in enumerate(listing):
            if position + 1 < len(listing):
                next_address = listing[position + 1].address
            else:
                next_address = 0

            if row.instruction is not None:
                self._resolve_instruction(row, next_address)
            elif row.is_decoration and row.mnemonic == "BASE":
                row.operand = f"{self.base:X}"

        return listing

    @staticmethod
    def _end_address(rows: List[ListingRow], header: HeaderRecord) -> int:
        if not rows:
            return header.start_address
        last = rows[-1]
        return last.address + last.length

    def _resolve_instruction(self, row: ListingRow, next_address: int) -> None:
        instr = row.instruction

        if instr.format is FormatClass.F1:
            row.operand = ""
        elif instr.format is FormatClass.F2:
            row.operand = format_register_operand(instr)
        else:
            row.operand, row.mnemonic = self._resolve_memory_operand(instr, next_address)

    def _resolve_memory_operand(self, instr: DecodedInstruction, next_address: int):
        """Return (operand, mnemonic) for a Format 3/4 instruction."""
        flags = instr.flags
        field = instr.address_field

        if flags.e:
            logger.debug(f"extended: {instr.mnemonic}")
            target = field
        elif flags.b:
            logger.debug(f"base relative: {instr.mnemonic}")
            target = field + self.base
        elif flags.p:
            logger.debug(f"pc relative: {instr.mnemonic}")
            target = sign_extend_12(field) + next_address
        else:
            logger.debug(f"direct: {instr.mnemonic}")
            target = field

        if flags.x:
            target += self.index
        target &= WORD_MASK

        if instr.mnemonic == "LDB":
            self.base = target
        elif instr.mnemonic == "LDX":
            self.index = target

        operand = f"{target:X}"
        if flags.is_immediate:
            operand = "#" + operand
        elif flags.is_indirect:
            operand = "@" + operand

        mnemonic = "+" + instr.mnemonic if flags.e else instr.mnemonic
        return operand, mnemonic


def resolve_operands(rows: List[ListingRow], header: Optional[HeaderRecord] = None) -> List[ListingRow]:
    """Run Pass B with a fresh resolver."""
    return OperandResolver().resolve(rows, header if header is not None else HeaderRecord())
