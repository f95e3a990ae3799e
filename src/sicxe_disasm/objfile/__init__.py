"""
SIC/XE Object Program Handling
==============================

Reading of object programs in the textual H/T/M/E record format.

This module provides:
- **ObjectProgram**: header plus text records of one program
- **iter_records**: streaming record reader
- **Record types**: HeaderRecord, TextRecord, RecordType

Quick Start
-----------
    >>> from sicxe_disasm.objfile import ObjectProgram
    >>> program = ObjectProgram.from_text("HCOPY  00000000001E")
    >>> program.header.name
    'COPY'
"""

from sicxe_disasm.objfile.records import (
    HeaderRecord,
    RecordType,
    TextRecord,
)
from sicxe_disasm.objfile.reader import (
    ObjectProgram,
    iter_records,
    normalize_line,
    parse_header,
    parse_text,
)

__all__ = [
    "HeaderRecord",
    "RecordType",
    "TextRecord",
    "ObjectProgram",
    "iter_records",
    "normalize_line",
    "parse_header",
    "parse_text",
]
