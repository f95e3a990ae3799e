"""
SIC/XE Disassembler Error Hierarchy
===================================

This module defines the exception hierarchy for the whole disassembler.
All exceptions inherit from SicXeError, allowing callers to catch every
disassembler error with a single except clause if desired.

Exception Hierarchy
-------------------
SicXeError (base)
├── OpcodeTableError - opcode CSV file unreadable or malformed
├── OutputFileError - listing or summary file cannot be written
├── SymbolTableError (symbol table input)
│   └── SymbolTableOpenError - symbol table file absent/unreadable
└── ObjectFileError (object program input)
    ├── ObjectFileOpenError - object file absent/unreadable
    ├── RecordFormatError - non-hexadecimal field in an H or T record
    └── DecodeError (instruction decoding)
        ├── UnknownOpcodeError - opcode not in the catalogue
        └── TruncatedRecordError - text record shorter than the instruction

Error messages for object file problems follow this format:
    copy.obj:3:10: error: unknown opcode 0xFC at address 0x0006
    T0000061E FC2FFA...
             ^
    hint: check that the text record is not misaligned

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SicXeError(Exception):
    """
    Base exception for all disassembler errors.

        try:
            disasm.disassemble_file("copy.obj")
        except SicXeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Record Location Tracking
# =============================================================================

@dataclass(frozen=True)
class RecordLocation:
    """
    A position inside an object program file.

    Attributes:
        filename: Name of the object file (or "<input>" for in-memory text)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Opcode Table Exceptions
# =============================================================================

class OpcodeTableError(SicXeError):
    """
    An opcode table file could not be loaded.

    Raised when a replacement opcode CSV cannot be read, or one of its
    lines does not have the MNEMONIC,FORMAT,OPCODE shape.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# =============================================================================
# Output Exceptions
# =============================================================================

class OutputFileError(SicXeError):
    """A listing or summary file could not be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot write '{path}': {reason}")


# =============================================================================
# Symbol Table Exceptions
# =============================================================================

class SymbolTableError(SicXeError):
    """Base exception for symbol table errors."""
    pass


class SymbolTableOpenError(SymbolTableError):
    """
    The symbol table file could not be opened.

    Malformed rows are not errors: they end the section they appear in.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot open symbol table '{path}': {reason}")


# =============================================================================
# Object File Exceptions
# =============================================================================

class ObjectFileError(SicXeError):
    """
    Base exception for problems with the object program.

    Provides the assembler-style message layout with the record location,
    the offending line and a caret pointing at the failing column.

    Attributes:
        message: The error description
        location: Where in the object file the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The record text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[RecordLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, record context, and hint.

        Example output:
            copy.obj:2:10: error: record truncated: need 6 hex digits, 2 left
            T00000003FF
                     ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(self.source_line)
            if self.location.column > 0:
                parts.append(" " * (self.location.column - 1) + "^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ObjectFileOpenError(ObjectFileError):
    """The object program file could not be opened."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot open object file '{path}': {reason}")


class RecordFormatError(ObjectFileError):
    """
    A header or text record field is not valid hexadecimal.

    Examples:
        - T record start address "00G000"
        - T record byte count missing
        - H record start address containing spaces
    """
    pass


# =============================================================================
# Decode Exceptions
# =============================================================================

class DecodeError(ObjectFileError):
    """Base exception for failures while decoding text record payloads."""
    pass


class UnknownOpcodeError(DecodeError):
    """
    The opcode byte (with n/i bits cleared) is not in the catalogue.

    Fatal for the whole run: the listing produced so far is discarded.
    """

    def __init__(
        self,
        opcode: int,
        address: int,
        location: Optional[RecordLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.opcode = opcode
        self.address = address
        super().__init__(
            f"unknown opcode 0x{opcode:02X} at address 0x{address:04X}",
            location=location,
            hint="check that the text record is not misaligned",
            source_line=source_line,
        )


class TruncatedRecordError(DecodeError):
    """
    A text record payload ends in the middle of an instruction or literal.

    Attributes:
        needed: Hex digits required to finish the current item
        available: Hex digits left in the payload
    """

    def __init__(
        self,
        needed: int,
        available: int,
        address: int,
        location: Optional[RecordLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.needed = needed
        self.available = available
        self.address = address
        super().__init__(
            f"record truncated at address 0x{address:04X}: "
            f"need {needed} hex digits, {available} left",
            location=location,
            source_line=source_line,
        )
