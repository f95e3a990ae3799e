"""
Listing Rows and Pass A
=======================

The listing is a flat, ordered list of ListingRow values. Every row is
one of three kinds:

- INSTRUCTION: a decoded instruction (carries its DecodedInstruction)
- LITERAL: a literal pool entry, emitted as a BYTE directive
- DECORATION: a synthetic START, BASE or END line

Pass A (ListingBuilder) walks the text records, attaches symbol labels,
emits literal rows where the literal pool says so, decodes everything else
and queues a BASE decoration after each LDB. Operand text of instructions
is left empty; Pass B (OperandResolver) fills it in.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from sicxe_disasm.disassembler.decoder import DecodedInstruction, InstructionDecoder
from sicxe_disasm.errors import TruncatedRecordError
from sicxe_disasm.objfile import TextRecord
from sicxe_disasm.symtab import Literal, SymbolTable

logger = logging.getLogger(__name__)

LITERAL_DIRECTIVE = "BYTE"


class RowKind(Enum):
    """Kind of a listing row."""
    INSTRUCTION = "instruction"
    LITERAL = "literal"
    DECORATION = "decoration"


def format_address(address: int) -> str:
    """Render a listing address column (uppercase hex, at least 4 digits)."""
    return f"{address:04X}"


@dataclass
class ListingRow:
    """
    One line of the reconstructed assembly listing.

    Attributes:
        kind: INSTRUCTION, LITERAL or DECORATION
        address: Numeric address; for decorations, the address of the
                 next location so PC-relative look-ahead stays correct
        address_hex: Address column text (empty for BASE and END)
        label: Symbol or literal name at this address
        mnemonic: Mnemonic or directive ("+" prefix added by Pass B)
        operand: Operand text (filled by Pass B for instructions)
        object_code: Raw hex (text between quotes for literals)
        length: Bytes occupied (0 for decorations)
        instruction: Decoded fields (INSTRUCTION rows only)
    """
    kind: RowKind
    address: int
    address_hex: str = ""
    label: str = ""
    mnemonic: str = ""
    operand: str = ""
    object_code: str = ""
    length: int = 0
    instruction: Optional[DecodedInstruction] = None

    @property
    def is_decoration(self) -> bool:
        return self.kind is RowKind.DECORATION

    @property
    def columns(self) -> tuple:
        """The five listing columns in output order."""
        return (self.address_hex, self.label, self.mnemonic, self.operand, self.object_code)

    @classmethod
    def for_instruction(cls, instr: DecodedInstruction, label: str = "") -> "ListingRow":
        return cls(
            kind=RowKind.INSTRUCTION,
            address=instr.address,
            address_hex=format_address(instr.address),
            label=label,
            mnemonic=instr.mnemonic,
            object_code=instr.object_code,
            length=instr.size,
            instruction=instr,
        )

    @classmethod
    def for_literal(cls, literal: Literal, address: int) -> "ListingRow":
        return cls(
            kind=RowKind.LITERAL,
            address=address,
            address_hex=format_address(address),
            label=literal.name,
            mnemonic=LITERAL_DIRECTIVE,
            operand=literal.value,
            object_code=literal.object_code,
            length=literal.length,
        )

    @classmethod
    def decoration(
        cls,
        mnemonic: str,
        address: int,
        address_hex: str = "",
        label: str = "",
        operand: str = "",
    ) -> "ListingRow":
        return cls(
            kind=RowKind.DECORATION,
            address=address,
            address_hex=address_hex,
            label=label,
            mnemonic=mnemonic,
            operand=operand,
        )


# =============================================================================
# Pass A
# =============================================================================

class ListingBuilder:
    """
    First pass: turn text records into listing rows.

    Usage:
        builder = ListingBuilder(symbol_table)
        rows = builder.build(program.text_records)
    """

    def __init__(
        self,
        symbol_table: Optional[SymbolTable] = None,
        decoder: Optional[InstructionDecoder] = None,
    ):
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self.decoder = decoder if decoder is not None else InstructionDecoder()

    def build(self, records: Iterable[TextRecord]) -> List[ListingRow]:
        """
        Build the rows for all text records, in record order.

        Raises:
            UnknownOpcodeError: On an opcode missing from the catalogue
            TruncatedRecordError: When a record ends inside an instruction
        """
        rows: List[ListingRow] = []
        for record in records:
            rows.extend(self.build_record(record))
        return rows

    def build_record(self, record: TextRecord) -> List[ListingRow]:
        """Build the rows for one text record."""
        rows: List[ListingRow] = []
        cursor = 0
        address = record.start_address
        end = record.end_address

        while address < end:
            symbol = self.symbol_table.symbol_at(address)
            label = symbol.name if symbol is not None else ""

            literal = self.symbol_table.literal_at(address)
            if literal is not None and literal.length > 0:
                self._check_literal_fits(record, literal, cursor, address)
                rows.append(ListingRow.for_literal(literal, address))
                address += literal.length
                cursor += 2 * literal.length
                continue
            if literal is not None:
                logger.warning(f"Ignoring zero-length literal {literal.name} at {address:04X}")

            instr = self.decoder.decode(
                record.payload,
                cursor,
                address,
                location=record.location_at(cursor),
                source_line=record.source_line,
            )
            rows.append(ListingRow.for_instruction(instr, label))

            address += instr.size
            cursor += 2 * instr.size

            if instr.mnemonic == "LDB":
                # post-LDB address keeps the LDB's PC-relative look-ahead correct
                rows.append(ListingRow.decoration("BASE", address))

        return rows

    @staticmethod
    def _check_literal_fits(record: TextRecord, literal: Literal, cursor: int, address: int) -> None:
        needed = 2 * literal.length
        available = max(len(record.payload) - cursor, 0)
        if available < needed:
            raise TruncatedRecordError(
                needed=needed,
                available=available,
                address=address,
                location=record.location_at(cursor),
                source_line=record.source_line,
            )
