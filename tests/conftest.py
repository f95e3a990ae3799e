"""
Shared Test Fixtures
====================

Sample inputs for the disassembler tests: the COPY program from Beck's
System Software (SIC/XE version, Figure 2.6) with a matching symbol table.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import pytest

from sicxe_disasm.objfile import ObjectProgram
from sicxe_disasm.symtab import SymbolTable


COPY_OBJECT = "\n".join([
    "HCOPY  000000001077",
    "T0000001D17202D69202D4B1010360320262900003320074B10105D3F2FEC032010",
    "T00001D130F20160100030F200D4B10105D3E2003454F46",
    "T0010361DB410B400B44075101000E32019332FFADB2013A00433200857C003B850",
    "T0010531D3B2FEA1340004F0000F1B410774000E32011332FFA53C003DF2008B850",
    "M00000705+COPY",
    "E000000",
]) + "\n"

COPY_SYMBOLS = """\
Symbol  Value   Flags:
-----------------------
FIRST   000000  R
CLOOP   000006  R
ENDFIL  00001A  R
RDREC   001036  R
RLOOP   001040  R
EXIT    001056  R
INPUT   00105C  R
WRREC   00105D  R

Name    Literal  Length Address:
------------------------------
EOF     =C'EOF'  3      00002D
INPUTLT X'F1'    1      00105C
"""

# (address, label, mnemonic, operand, object code)
COPY_LISTING = [
    ("0000", "COPY", "START", "0", ""),
    ("0000", "FIRST", "STL", "30", "17202D"),
    ("0003", "", "LDB", "#33", "69202D"),
    ("", "", "BASE", "33", ""),
    ("0006", "CLOOP", "+JSUB", "1036", "4B101036"),
    ("000A", "", "LDA", "33", "032026"),
    ("000D", "", "COMP", "#0", "290000"),
    ("0010", "", "JEQ", "1A", "332007"),
    ("0013", "", "+JSUB", "105D", "4B10105D"),
    ("0017", "", "J", "6", "3F2FEC"),
    ("001A", "ENDFIL", "LDA", "2D", "032010"),
    ("001D", "", "STA", "36", "0F2016"),
    ("0020", "", "LDA", "#3", "010003"),
    ("0023", "", "STA", "33", "0F200D"),
    ("0026", "", "+JSUB", "105D", "4B10105D"),
    ("002A", "", "J", "@30", "3E2003"),
    ("002D", "EOF", "BYTE", "=C'EOF'", "EOF"),
    ("1036", "RDREC", "CLEAR", "X", "B410"),
    ("1038", "", "CLEAR", "A", "B400"),
    ("103A", "", "CLEAR", "S", "B440"),
    ("103C", "", "+LDT", "#1000", "75101000"),
    ("1040", "RLOOP", "TD", "105C", "E32019"),
    ("1043", "", "JEQ", "1040", "332FFA"),
    ("1046", "", "RD", "105C", "DB2013"),
    ("1049", "", "COMPR", "A,S", "A004"),
    ("104B", "", "JEQ", "1056", "332008"),
    ("104E", "", "STCH", "36", "57C003"),
    ("1051", "", "TIXR", "T", "B850"),
    ("1053", "", "JLT", "1040", "3B2FEA"),
    ("1056", "EXIT", "STX", "33", "134000"),
    ("1059", "", "RSUB", "0", "4F0000"),
    ("105C", "INPUTLT", "BYTE", "X'F1'", "F1"),
    ("105D", "WRREC", "CLEAR", "X", "B410"),
    ("105F", "", "LDT", "33", "774000"),
    ("1062", "", "TD", "1076", "E32011"),
    ("1065", "", "JEQ", "1062", "332FFA"),
    ("1068", "", "LDCH", "36", "53C003"),
    ("106B", "", "WD", "1076", "DF2008"),
    ("106E", "", "TIXR", "T", "B850"),
    ("", "", "END", "COPY", ""),
]


@pytest.fixture
def copy_program():
    """The COPY object program."""
    return ObjectProgram.from_text(COPY_OBJECT, filename="copy.obj")


@pytest.fixture
def copy_symbols():
    """Symbol table matching the COPY program."""
    return SymbolTable.from_text(COPY_SYMBOLS)


@pytest.fixture
def copy_files(tmp_path):
    """COPY object and symbol table files on disk, as (object, symbols) paths."""
    obj = tmp_path / "copy.obj"
    obj.write_text(COPY_OBJECT)
    sym = tmp_path / "copy.st"
    sym.write_text(COPY_SYMBOLS)
    return obj, sym


@pytest.fixture
def copy_listing():
    """Expected listing columns for the COPY program."""
    return list(COPY_LISTING)
