"""
SIC/XE Instruction Decoder
==========================

Decodes one instruction at a time from the hex payload of a text record.

The decoder recognises the four SIC/XE formats and packages the raw
fields of each instruction: mnemonic, format, n/i/x/b/p/e flags, register
fields and the object code slice. It never resolves operand values; that
needs the surrounding listing (BASE, X and the next row's address) and is
done by the OperandResolver.

Flag Layout (Format 3/4)
------------------------
    byte 0:  oooooo n i     opcode (6 bits) + n, i
    nibble:  x b p e        the first hex digit after the opcode byte

    e=0 -> 12-bit displacement follows (3 bytes total)
    e=1 -> 20-bit address follows      (4 bytes total)

Usage:
    decoder = InstructionDecoder()
    instr = decoder.decode("032600", cursor=0, address=0x0000)
    print(instr.mnemonic, instr.object_code)   # LDA 032600

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from sicxe_disasm.cpu import OPCODE_MASK, OPCODE_TABLE, FormatClass, OpcodeEntry
from sicxe_disasm.errors import (
    RecordFormatError,
    RecordLocation,
    TruncatedRecordError,
    UnknownOpcodeError,
)

logger = logging.getLogger(__name__)

DISPLACEMENT_DIGITS = 3   # 12-bit field
ADDRESS_DIGITS = 5        # 20-bit field


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class InstructionFlags:
    """
    The n/i/x/b/p/e addressing flags of a Format 3/4 instruction.

    Attributes:
        n: Indirect bit (bit 1 of the opcode byte)
        i: Immediate bit (bit 0 of the opcode byte)
        x: Indexed addressing
        b: Base-relative addressing
        p: PC-relative addressing
        e: Extended (Format 4)
    """
    n: bool
    i: bool
    x: bool
    b: bool
    p: bool
    e: bool

    @classmethod
    def from_bits(cls, opcode_byte: int, xbpe: int) -> "InstructionFlags":
        """Build flags from the raw opcode byte and the xbpe nibble."""
        return cls(
            n=bool(opcode_byte & 0b10),
            i=bool(opcode_byte & 0b01),
            x=bool(xbpe & 0b1000),
            b=bool(xbpe & 0b0100),
            p=bool(xbpe & 0b0010),
            e=bool(xbpe & 0b0001),
        )

    @property
    def is_immediate(self) -> bool:
        return self.i and not self.n

    @property
    def is_indirect(self) -> bool:
        return self.n and not self.i

    def __str__(self) -> str:
        """Render as the six-character nixbpe bit string."""
        return "".join("1" if bit else "0" for bit in (self.n, self.i, self.x, self.b, self.p, self.e))


@dataclass(frozen=True)
class DecodedInstruction:
    """
    A single decoded SIC/XE instruction.

    Attributes:
        address: Load address of the instruction
        opcode: Opcode byte with the n/i bits cleared
        mnemonic: Bare mnemonic from the catalogue (no '+' prefix)
        format: Format class (F1, F2, F3/4)
        object_code: Raw hex slice of the text record
        size: Instruction length in bytes (1, 2, 3 or 4)
        flags: Addressing flags (Format 3/4 only)
        registers: (r1, r2) register fields (Format 2 only)
    """
    address: int
    opcode: int
    mnemonic: str
    format: FormatClass
    object_code: str
    size: int
    flags: Optional[InstructionFlags] = None
    registers: Optional[Tuple[int, int]] = None

    @property
    def format_number(self) -> int:
        """The concrete format: 1, 2, 3 or 4."""
        if self.format is FormatClass.F1:
            return 1
        if self.format is FormatClass.F2:
            return 2
        return 4 if self.flags is not None and self.flags.e else 3

    @property
    def address_field(self) -> Optional[int]:
        """
        The displacement (12-bit) or address (20-bit) field of a Format 3/4
        instruction, read from the object code. None for other formats.
        """
        if self.flags is None:
            return None
        digits = ADDRESS_DIGITS if self.flags.e else DISPLACEMENT_DIGITS
        return int(self.object_code[3:3 + digits], 16)


# =============================================================================
# Decoder
# =============================================================================

class InstructionDecoder:
    """
    Decoder for SIC/XE object code held as hex text.

    Attributes:
        _opcode_table: Maps masked opcode bytes to catalogue entries
    """

    def __init__(self, opcode_table: Optional[Dict[int, OpcodeEntry]] = None):
        """
        Initialize the decoder.

        Args:
            opcode_table: Catalogue to decode with (default: OPCODE_TABLE)
        """
        self._opcode_table = opcode_table if opcode_table is not None else OPCODE_TABLE

    def decode(
        self,
        payload: str,
        cursor: int,
        address: int,
        location: Optional[RecordLocation] = None,
        source_line: Optional[str] = None,
    ) -> DecodedInstruction:
        """
        Decode the instruction starting at hex digit ``cursor`` of ``payload``.

        Args:
            payload: Hex digits of a text record
            cursor: Index of the first hex digit of the instruction
            address: Load address of the instruction
            location: File position of ``cursor``, for error messages
            source_line: Record text, for error messages

        Returns:
            DecodedInstruction; the caller advances by ``2 * size`` digits

        Raises:
            UnknownOpcodeError: If the masked opcode is not in the catalogue
            TruncatedRecordError: If the payload ends inside the instruction
            RecordFormatError: If the payload contains non-hex characters
        """
        context = (address, location, source_line)

        raw_opcode = self._read(payload, cursor, 2, context)
        opcode = raw_opcode & OPCODE_MASK

        entry = self._opcode_table.get(opcode)
        if entry is None:
            logger.error(f"Unknown opcode 0x{opcode:02X} at address 0x{address:04X}")
            raise UnknownOpcodeError(opcode, address, location=location, source_line=source_line)

        flags = None
        registers = None

        if entry.format is FormatClass.F1:
            size = 1
        elif entry.format is FormatClass.F2:
            size = 2
            fields = self._read(payload, cursor + 2, 2, context)
            registers = (fields >> 4, fields & 0x0F)
        else:
            xbpe = self._read(payload, cursor + 2, 1, context)
            flags = InstructionFlags.from_bits(raw_opcode, xbpe)
            digits = ADDRESS_DIGITS if flags.e else DISPLACEMENT_DIGITS
            self._read(payload, cursor + 3, digits, context)
            size = 4 if flags.e else 3

        object_code = payload[cursor:cursor + 2 * size]

        if flags is not None:
            logger.debug(f"{address:04X}: {entry.mnemonic} nixbpe={flags} obj={object_code}")
        else:
            logger.debug(f"{address:04X}: {entry.mnemonic} obj={object_code}")

        return DecodedInstruction(
            address=address,
            opcode=opcode,
            mnemonic=entry.mnemonic,
            format=entry.format,
            object_code=object_code,
            size=size,
            flags=flags,
            registers=registers,
        )

    @staticmethod
    def _read(payload: str, start: int, digits: int, context) -> int:
        """Read ``digits`` hex digits at ``start`` as an integer."""
        address, location, source_line = context
        available = max(len(payload) - start, 0)
        if available < digits:
            raise TruncatedRecordError(
                needed=digits,
                available=available,
                address=address,
                location=location,
                source_line=source_line,
            )

        text = payload[start:start + digits]
        try:
            return int(text, 16)
        except ValueError:
            raise RecordFormatError(
                f"invalid object code {text!r} at address 0x{address:04X}",
                location=location,
                source_line=source_line,
            ) from None
