"""
SIC/XE Disassembler
===================

Reconstructs an assembly listing from an object program and its symbol
table. This is the inverse of the assembler's object code generation.

Pipeline:
    ObjectProgram ──► Pass A (ListingBuilder) ──► Pass B (OperandResolver) ──► rows

The two passes cannot be fused: PC-relative operands need the address of
the following listing row, known only once that row has been decoded.

Usage:
    disasm = SicXeDisassembler(symbol_table=SymbolTable.from_file("copy.st"))

    # Listing rows from an object file
    rows = disasm.disassemble_file("copy.obj")

    # Or straight to the five-column text
    print(disasm.disassemble_to_text(ObjectProgram.from_file("copy.obj")))

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from sicxe_disasm.cpu import OpcodeEntry
from sicxe_disasm.disassembler.decoder import InstructionDecoder
from sicxe_disasm.disassembler.emitter import DEFAULT_COLUMN_WIDTH, format_listing
from sicxe_disasm.disassembler.listing import ListingBuilder, ListingRow
from sicxe_disasm.disassembler.resolver import OperandResolver
from sicxe_disasm.objfile import ObjectProgram
from sicxe_disasm.symtab import SymbolTable

logger = logging.getLogger(__name__)


class SicXeDisassembler:
    """
    Disassembler for SIC/XE object programs.

    Attributes:
        symbol_table: Symbols and literals used for labels and literal rows
        decoder: Instruction decoder (carries the opcode catalogue)
    """

    def __init__(
        self,
        symbol_table: Optional[SymbolTable] = None,
        opcode_table: Optional[Dict[int, OpcodeEntry]] = None,
    ):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Symbols and literals of the program (default: empty)
            opcode_table: Replacement opcode catalogue (default: built-in)
        """
        self.symbol_table = symbol_table if symbol_table is not None else SymbolTable()
        self.decoder = InstructionDecoder(opcode_table)

    def disassemble(self, program: ObjectProgram) -> List[ListingRow]:
        """
        Disassemble a whole program.

        Returns:
            Listing rows, START first and END last

        Raises:
            UnknownOpcodeError: On an opcode missing from the catalogue
            TruncatedRecordError: When a record ends inside an instruction
        """
        builder = ListingBuilder(self.symbol_table, self.decoder)
        rows = builder.build(program.text_records)
        logger.info(f"Pass A produced {len(rows)} rows from {len(program.text_records)} text records")

        listing = OperandResolver().resolve(rows, program.header)
        return listing

    def disassemble_file(self, path: Union[str, Path]) -> List[ListingRow]:
        """Read an object file and disassemble it."""
        return self.disassemble(ObjectProgram.from_file(path))

    def disassemble_to_text(
        self,
        program: ObjectProgram,
        column_width: int = DEFAULT_COLUMN_WIDTH,
    ) -> str:
        """
        Disassemble and return the formatted listing text.

        Args:
            program: The object program
            column_width: Width of each listing column

        Returns:
            Multi-line string with the five-column listing
        """
        return format_listing(self.disassemble(program), column_width)
