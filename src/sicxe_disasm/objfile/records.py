"""
Object Program Record Types
===========================

Data structures for the records of a SIC/XE object program.

Record Layout
-------------
Each record is one line of ASCII text. The first character gives its type:

- ``H`` Header: ``H`` name[6] start[6 hex] length[6 hex]
- ``T`` Text:   ``T`` start[6 hex] byte_count[2 hex] payload[2*byte_count hex]
- ``M`` Modification and ``E`` End records are recognised but carry nothing
  the disassembler needs.

Column positions (0-indexed, end exclusive):

    Header: name [1:7], start address [7:13], program length [13:19]
    Text:   start address [1:7], byte count [7:9], payload [9:]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sicxe_disasm.errors import RecordLocation


# =============================================================================
# Enumeration Types
# =============================================================================

class RecordType(Enum):
    """Record type, keyed by the leading character of the line."""
    HEADER = "H"
    TEXT = "T"
    MODIFICATION = "M"
    END = "E"

    @classmethod
    def from_line(cls, line: str) -> Optional["RecordType"]:
        """Classify a line; blank or unknown lines return None."""
        if not line:
            return None
        for record_type in cls:
            if record_type.value == line[0]:
                return record_type
        return None


# Field positions
HEADER_NAME = slice(1, 7)
HEADER_START = slice(7, 13)
HEADER_LENGTH = slice(13, 19)

TEXT_START = slice(1, 7)
TEXT_LENGTH = slice(7, 9)
TEXT_PAYLOAD_COLUMN = 9


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class HeaderRecord:
    """
    Program header (H record).

    Attributes:
        name: Program name with its space padding removed
        start_address: Load address of the program
        length: Program length in bytes
    """
    name: str = ""
    start_address: int = 0
    length: int = 0

    @property
    def end_address(self) -> int:
        return self.start_address + self.length


@dataclass(frozen=True)
class TextRecord:
    """
    A run of object code (T record).

    Attributes:
        start_address: Load address of the first payload byte
        byte_count: Number of bytes the record declares
        payload: Hex digits of the object code, case preserved
        location: Position of the record in its file
        source_line: The record line as parsed (for diagnostics)
    """
    start_address: int
    byte_count: int
    payload: str
    location: Optional[RecordLocation] = None
    source_line: Optional[str] = None

    @property
    def end_address(self) -> int:
        return self.start_address + self.byte_count

    def location_at(self, cursor: int) -> Optional[RecordLocation]:
        """Location of payload hex digit ``cursor`` within the file."""
        if self.location is None:
            return None
        return RecordLocation(
            self.location.filename,
            self.location.line,
            TEXT_PAYLOAD_COLUMN + cursor + 1,
        )
