"""
Symbol Table Loader
===================

Reads the symbol table produced alongside an object program and indexes
its symbols and literals by address for the listing passes.

File Layout
-----------
The file holds two sections, each introduced by a two-line header:

    Symbol  Value   Flags:
    -----------------------
    FIRST   000000  R
    CLOOP   000003  R

    Name    Literal  Length Address:
    ------------------------------
    EOF     =C'EOF'  3      00002D

Symbol rows are ``name address_hex flags``; literal rows are
``name literal_value length_hex address_hex``. Runs of whitespace are
collapsed and blank lines ignored.

A row that fails to parse ends its section; that row is taken as the
first header line of the next section. Malformed rows are therefore never
errors, only an unreadable file is (SymbolTableOpenError).
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from sicxe_disasm.errors import SymbolTableOpenError

logger = logging.getLogger(__name__)

MAX_ADDRESS = 0xFFFFFF
SECTION_HEADER_LINES = 2

# name, quoted-or-bare literal value, length, address
_LITERAL_ROW = re.compile(
    r"^(?P<name>\S+)\s+"
    r"(?P<value>=?[A-Za-z]'[^']*'|\S+)\s+"
    r"(?P<length>[0-9A-Fa-f]+)\s+"
    r"(?P<address>[0-9A-Fa-f]+)\s*$"
)


# =============================================================================
# Table Entries
# =============================================================================

@dataclass(frozen=True)
class Symbol:
    """
    A user-defined label.

    Attributes:
        name: Symbol name as written in the source
        address: Absolute address (24-bit)
        flags: Flag column text (e.g., "R" relocatable, "A" absolute)
    """
    name: str
    address: int
    flags: str


@dataclass(frozen=True)
class Literal:
    """
    An assembler-generated literal in the literal pool.

    Attributes:
        name: Literal name (labels the listing row)
        value: Literal text, e.g. "=C'EOF'" or "X'05'"
        length: Number of bytes the literal occupies in the text record
        address: Absolute address (24-bit)
    """
    name: str
    value: str
    length: int
    address: int

    @property
    def object_code(self) -> str:
        """Text between the quotes of the value ("EOF" for C'EOF')."""
        first = self.value.find("'")
        last = self.value.rfind("'")
        if first == -1 or last <= first:
            return self.value
        return self.value[first + 1:last]


# =============================================================================
# Symbol Table
# =============================================================================

@dataclass
class SymbolTable:
    """
    Symbols and literals of one program, indexed by address.

    When several symbols share an address the last one listed wins.
    """
    symbols: List[Symbol] = field(default_factory=list)
    literals: List[Literal] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._symbols_by_address: Dict[int, Symbol] = {s.address: s for s in self.symbols}
        self._literals_by_address: Dict[int, Literal] = {l.address: l for l in self.literals}

    def symbol_at(self, address: int) -> Optional[Symbol]:
        """Return the symbol defined at an address, if any."""
        return self._symbols_by_address.get(address)

    def literal_at(self, address: int) -> Optional[Literal]:
        """Return the literal placed at an address, if any."""
        return self._literals_by_address.get(address)

    def is_empty(self) -> bool:
        return not self.symbols and not self.literals

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SymbolTable":
        """
        Load a symbol table file.

        Args:
            path: Path to the symbol table

        Returns:
            The parsed SymbolTable

        Raises:
            SymbolTableOpenError: If the file cannot be opened or read
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise SymbolTableOpenError(str(path), e.strerror or str(e)) from e

        table = cls.from_text(text)
        logger.info(
            f"Loaded {len(table.symbols)} symbols and {len(table.literals)} literals from {path}"
        )
        return table

    @classmethod
    def from_text(cls, text: str) -> "SymbolTable":
        """Parse symbol table text already in memory."""
        symbols, literals = parse_symbol_table(text.splitlines())
        return cls(symbols=symbols, literals=literals)


# =============================================================================
# Parsing
# =============================================================================

def parse_symbol_row(line: str) -> Optional[Symbol]:
    """
    Parse ``name address_hex flags``.

    Returns:
        The Symbol, or None if the row does not have that shape
    """
    columns = line.split()
    if len(columns) < 3:
        return None
    name, address_text, flags = columns[:3]
    try:
        address = int(address_text, 16)
    except ValueError:
        return None
    if address > MAX_ADDRESS:
        return None
    return Symbol(name=name, address=address, flags=flags)


def parse_literal_row(line: str) -> Optional[Literal]:
    """
    Parse ``name literal_value length_hex address_hex``.

    The value may be a quoted literal containing spaces.

    Returns:
        The Literal, or None if the row does not have that shape
    """
    match = _LITERAL_ROW.match(line.strip())
    if not match:
        return None
    length = int(match.group("length"), 16)
    address = int(match.group("address"), 16)
    if length > 0xFFFF or address > MAX_ADDRESS:
        return None
    return Literal(
        name=match.group("name"),
        value=match.group("value"),
        length=length,
        address=address,
    )


def parse_symbol_table(lines: Iterable[str]) -> Tuple[List[Symbol], List[Literal]]:
    """
    Split a symbol table into its symbol and literal sections.

    Args:
        lines: Lines of the symbol table file

    Returns:
        Tuple of (symbols, literals) in file order
    """
    rows = [line.rstrip("\r\n") for line in lines if line.strip()]

    symbols: List[Symbol] = []
    index = SECTION_HEADER_LINES
    while index < len(rows):
        symbol = parse_symbol_row(rows[index])
        if symbol is None:
            break
        symbols.append(symbol)
        index += 1

    literals: List[Literal] = []
    index += SECTION_HEADER_LINES
    while index < len(rows):
        literal = parse_literal_row(rows[index])
        if literal is None:
            logger.debug(f"Literal section ends at row {index + 1}: {rows[index]!r}")
            break
        literals.append(literal)
        index += 1

    return symbols, literals
