"""
SIC/XE Disassembler
===================

This package reconstructs assembly listings from SIC/XE object programs.

Given an object program in the textual H/T/M/E record format and the
symbol table the assembler produced with it, the disassembler decodes
every text record into instructions (Formats 1 to 4), attaches labels,
places literal pool entries, and resolves operands for direct, indexed,
PC-relative and base-relative addressing.

Main Components
---------------
- **cpu**: SIC/XE opcode catalogue and register names
- **objfile**: Object program record reader (ObjectProgram)
- **symtab**: Symbol table loader (SymbolTable)
- **disassembler**: Decoder, two-pass listing builder and listing emitter
- **cli**: The ``disassem`` command

Quick Start
-----------
Disassemble a program:
    >>> from sicxe_disasm import SicXeDisassembler, SymbolTable, ObjectProgram
    >>> disasm = SicXeDisassembler(symbol_table=SymbolTable.from_file("copy.st"))
    >>> rows = disasm.disassemble(ObjectProgram.from_file("copy.obj"))
    >>> for row in rows:
    ...     print(row.address_hex, row.label, row.mnemonic, row.operand)

Or use the command-line tool:
    $ disassem copy.obj copy.st        # writes out.lst

Reference Documentation
-----------------------
- Leland L. Beck, System Software: An Introduction to Systems Programming

Version History
---------------
1.0.0 - Initial release with the two-pass disassembler and disassem CLI
"""

__version__ = "1.0.0"
__author__ = "Hugo José Pinto & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from sicxe_disasm.errors import (
    SicXeError,
    OpcodeTableError,
    OutputFileError,
    SymbolTableError,
    SymbolTableOpenError,
    ObjectFileError,
    ObjectFileOpenError,
    RecordFormatError,
    DecodeError,
    UnknownOpcodeError,
    TruncatedRecordError,
)
from sicxe_disasm.cpu import (
    FormatClass,
    OpcodeEntry,
    OPCODE_TABLE,
    load_opcode_table,
)
from sicxe_disasm.objfile import ObjectProgram, HeaderRecord, TextRecord
from sicxe_disasm.symtab import SymbolTable, Symbol, Literal
from sicxe_disasm.disassembler import (
    SicXeDisassembler,
    ListingRow,
    RowKind,
    write_listing,
)
from sicxe_disasm.config import DisassemblerConfig

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Disassembler
    "SicXeDisassembler",
    "ListingRow",
    "RowKind",
    "write_listing",
    "DisassemblerConfig",
    # Inputs
    "ObjectProgram",
    "HeaderRecord",
    "TextRecord",
    "SymbolTable",
    "Symbol",
    "Literal",
    # Opcode catalogue
    "FormatClass",
    "OpcodeEntry",
    "OPCODE_TABLE",
    "load_opcode_table",
    # Exception hierarchy
    "SicXeError",
    "OpcodeTableError",
    "OutputFileError",
    "SymbolTableError",
    "SymbolTableOpenError",
    "ObjectFileError",
    "ObjectFileOpenError",
    "RecordFormatError",
    "DecodeError",
    "UnknownOpcodeError",
    "TruncatedRecordError",
]
