"""
SIC/XE CPU Package
==================

Instruction set definitions shared by the decoder and the listing passes.

Modules:
    sicxe: Opcode catalogue, format classes, register names and the
           CSV opcode table loader.

Usage:
    from sicxe_disasm.cpu import (
        FormatClass,
        OpcodeEntry,
        OPCODE_TABLE,
        get_opcode_entry,
    )
"""

from sicxe_disasm.cpu.sicxe import (
    OPCODE_MASK,
    OPCODE_TABLE,
    REGISTER_NAMES,
    FormatClass,
    OpcodeEntry,
    get_opcode_entry,
    load_opcode_table,
    register_name,
)

__all__ = [
    "OPCODE_MASK",
    "OPCODE_TABLE",
    "REGISTER_NAMES",
    "FormatClass",
    "OpcodeEntry",
    "get_opcode_entry",
    "load_opcode_table",
    "register_name",
]
