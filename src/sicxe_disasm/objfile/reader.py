"""
Object Program Reader
=====================

Reads a SIC/XE object program line by line and yields its records.

The reader only classifies and splits records; it does not decode any
instruction. Text records are produced in file order, and each keeps its
own start address because SIC/XE allows gaps between text records.

Usage Examples
--------------
Iterating records:
    >>> from sicxe_disasm.objfile import iter_records
    >>> for record in iter_records(open("copy.obj")):
    ...     print(record)

Loading a whole program:
    >>> from sicxe_disasm.objfile import ObjectProgram
    >>> program = ObjectProgram.from_file("copy.obj")
    >>> print(program.header.name, len(program.text_records))
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from sicxe_disasm.errors import ObjectFileOpenError, RecordFormatError, RecordLocation
from sicxe_disasm.objfile.records import (
    HEADER_LENGTH,
    HEADER_NAME,
    HEADER_START,
    TEXT_LENGTH,
    TEXT_PAYLOAD_COLUMN,
    TEXT_START,
    HeaderRecord,
    RecordType,
    TextRecord,
)

logger = logging.getLogger(__name__)

Record = Union[HeaderRecord, TextRecord]

FIELD_SEPARATOR = "^"


def normalize_line(line: str) -> str:
    """
    Drop the line terminator and rebuild caret-separated records
    (``H^COPY ^000000^00001E``) into the fixed-column layout.
    """
    line = line.rstrip("\r\n")
    if FIELD_SEPARATOR not in line:
        return line

    fields = line.split(FIELD_SEPARATOR)
    record_type, first = fields[0][:1], fields[0][1:]
    values = ([first] if first else []) + [f.strip() for f in fields[1:]]

    if record_type == RecordType.HEADER.value and len(values) >= 3:
        name, start, length = values[0].strip(), values[1], values[2]
        return f"{record_type}{name:<6.6}{start:0>6}{length:0>6}"
    if record_type == RecordType.TEXT.value and len(values) >= 2:
        start, count = values[0].strip(), values[1]
        return f"{record_type}{start:0>6}{count:0>2}" + "".join(values[2:])
    return line.replace(FIELD_SEPARATOR, "")


def _parse_hex_field(
    line: str,
    columns: slice,
    what: str,
    filename: str,
    line_number: int,
) -> int:
    text = line[columns]
    try:
        if not text.strip():
            raise ValueError(text)
        return int(text, 16)
    except ValueError:
        raise RecordFormatError(
            f"invalid {what} {text!r}",
            location=RecordLocation(filename, line_number, columns.start + 1),
            source_line=line,
        ) from None


def parse_header(line: str, filename: str = "<input>", line_number: int = 1) -> HeaderRecord:
    """
    Parse an H record.

    Raises:
        RecordFormatError: If the start address or length is not hexadecimal
    """
    return HeaderRecord(
        name=line[HEADER_NAME].strip(),
        start_address=_parse_hex_field(line, HEADER_START, "header start address", filename, line_number),
        length=_parse_hex_field(line, HEADER_LENGTH, "header program length", filename, line_number),
    )


def parse_text(line: str, filename: str = "<input>", line_number: int = 1) -> TextRecord:
    """
    Parse a T record.

    Raises:
        RecordFormatError: If the start address or byte count is not hexadecimal
    """
    return TextRecord(
        start_address=_parse_hex_field(line, TEXT_START, "text start address", filename, line_number),
        byte_count=_parse_hex_field(line, TEXT_LENGTH, "text byte count", filename, line_number),
        payload=line[TEXT_PAYLOAD_COLUMN:].rstrip(),
        location=RecordLocation(filename, line_number, 1),
        source_line=line,
    )


def iter_records(lines: Iterable[str], filename: str = "<input>") -> Iterator[Record]:
    """
    Yield the H and T records of an object program in file order.

    M, E, blank and unrecognised lines are skipped.

    Args:
        lines: Lines of the object file
        filename: Name used in error locations

    Yields:
        HeaderRecord and TextRecord instances
    """
    for line_number, raw in enumerate(lines, start=1):
        line = normalize_line(raw)
        record_type = RecordType.from_line(line)

        if record_type is RecordType.HEADER:
            logger.info("parsing header")
            header = parse_header(line, filename, line_number)
            logger.info(
                f"parsed header: {header.name}, starts at {header.start_address:06X} "
                f"and has {header.length} bytes"
            )
            yield header
        elif record_type is RecordType.TEXT:
            record = parse_text(line, filename, line_number)
            logger.info(
                f"parsing text record: start {record.start_address:06X}, "
                f"{record.byte_count} bytes"
            )
            yield record
        else:
            logger.debug(f"Skipping line {line_number}: {line!r}")


# =============================================================================
# Object Program
# =============================================================================

@dataclass
class ObjectProgram:
    """
    The records of one object program.

    Attributes:
        header: The program header (empty if the file had none)
        text_records: Text records in file order
        filename: Source file name, for diagnostics
    """
    header: HeaderRecord = field(default_factory=HeaderRecord)
    text_records: List[TextRecord] = field(default_factory=list)
    filename: str = "<input>"

    @classmethod
    def from_lines(cls, lines: Iterable[str], filename: str = "<input>") -> "ObjectProgram":
        """
        Collect the records of an object program.

        Only the first header record is used; later ones are ignored.

        Raises:
            RecordFormatError: If an H or T record field is malformed
        """
        program = cls(filename=filename)
        seen_header = False

        for record in iter_records(lines, filename):
            if isinstance(record, HeaderRecord):
                if seen_header:
                    logger.warning(f"{filename}: ignoring extra header record '{record.name}'")
                    continue
                program.header = record
                seen_header = True
            else:
                program.text_records.append(record)

        if not seen_header:
            logger.warning(f"{filename}: no header record, assuming empty name at address 0")

        return program

    @classmethod
    def from_text(cls, text: str, filename: str = "<input>") -> "ObjectProgram":
        return cls.from_lines(text.splitlines(), filename)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ObjectProgram":
        """
        Read an object program file.

        The file is read completely and closed before returning.

        Raises:
            ObjectFileOpenError: If the file cannot be opened
            RecordFormatError: If an H or T record field is malformed
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="ascii", errors="replace")
        except OSError as e:
            raise ObjectFileOpenError(str(path), e.strerror or str(e)) from e
        return cls.from_text(text, filename=str(path))
