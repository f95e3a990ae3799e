"""
SIC/XE Disassembler Module
==========================

This module turns SIC/XE object programs back into assembly listings:

- decoder: one instruction at a time from text record hex
- listing: listing rows and Pass A (labels, literals, BASE rows)
- resolver: Pass B (operands, START/END rows)
- emitter: fixed-width listing and addressing summary output

Usage:
    from sicxe_disasm.disassembler import SicXeDisassembler

    disasm = SicXeDisassembler(symbol_table=symbols)
    rows = disasm.disassemble_file("copy.obj")

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from .decoder import DecodedInstruction, InstructionDecoder, InstructionFlags
from .emitter import (
    check_output_path,
    format_listing,
    format_row,
    format_summary,
    write_listing,
    write_summary,
)
from .listing import ListingBuilder, ListingRow, RowKind
from .resolver import OperandResolver, resolve_operands, sign_extend_12
from .sicxe import SicXeDisassembler

__all__ = [
    "SicXeDisassembler",
    "DecodedInstruction",
    "InstructionDecoder",
    "InstructionFlags",
    "ListingBuilder",
    "ListingRow",
    "RowKind",
    "OperandResolver",
    "resolve_operands",
    "sign_extend_12",
    "check_output_path",
    "format_listing",
    "format_row",
    "format_summary",
    "write_listing",
    "write_summary",
]
