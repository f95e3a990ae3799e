"""
Unit Tests for Listing Reconstruction
=====================================

Covers both passes through SicXeDisassembler: row construction (labels,
literals, BASE decorations) and operand resolution (START/END framing,
addressing modes, running BASE and X registers).

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging

import pytest

from sicxe_disasm.disassembler import (
    ListingBuilder,
    ListingRow,
    OperandResolver,
    RowKind,
    SicXeDisassembler,
    resolve_operands,
    sign_extend_12,
)
from sicxe_disasm.errors import ObjectFileOpenError, TruncatedRecordError, UnknownOpcodeError
from sicxe_disasm.objfile import HeaderRecord, ObjectProgram, TextRecord
from sicxe_disasm.symtab import Literal, Symbol, SymbolTable


def disassemble(obj_text, sym_text=""):
    """Disassemble object text with an optional symbol table."""
    program = ObjectProgram.from_text(obj_text)
    return SicXeDisassembler(symbol_table=SymbolTable.from_text(sym_text)).disassemble(program)


def instruction_rows(rows):
    return [row for row in rows if row.kind is RowKind.INSTRUCTION]


class TestCopyProgram:
    """Full disassembly of the COPY program."""

    def test_full_listing(self, copy_program, copy_symbols, copy_listing):
        """Every row of the COPY listing matches the assembler source."""
        rows = SicXeDisassembler(symbol_table=copy_symbols).disassemble(copy_program)
        assert [row.columns for row in rows] == copy_listing

    def test_framing(self, copy_program, copy_symbols):
        """START comes first and END last."""
        rows = SicXeDisassembler(symbol_table=copy_symbols).disassemble(copy_program)
        assert rows[0].mnemonic == "START"
        assert rows[-1].mnemonic == "END"
        assert [r.mnemonic for r in rows].count("START") == 1
        assert [r.mnemonic for r in rows].count("END") == 1

    def test_base_follows_each_ldb(self, copy_program, copy_symbols):
        """A BASE row directly follows every LDB."""
        rows = SicXeDisassembler(symbol_table=copy_symbols).disassemble(copy_program)
        for position, row in enumerate(rows):
            if row.instruction is not None and row.instruction.mnemonic == "LDB":
                assert rows[position + 1].mnemonic == "BASE"
        bases = [r for r in rows if r.mnemonic == "BASE"]
        ldbs = [r for r in rows if r.instruction is not None and r.instruction.mnemonic == "LDB"]
        assert len(bases) == len(ldbs)

    def test_addresses_increase_within_records(self, copy_program, copy_symbols):
        """Addresses of decoded rows never decrease."""
        rows = SicXeDisassembler(symbol_table=copy_symbols).disassemble(copy_program)
        addresses = [r.address for r in rows if not r.is_decoration]
        assert addresses == sorted(addresses)

    def test_without_symbols(self, copy_program):
        """With an empty table there are no labels and no literal rows."""
        rows = SicXeDisassembler().disassemble(copy_program)

        assert all(row.label == "" for row in rows[1:])
        assert not any(row.kind is RowKind.LITERAL for row in rows)

    def test_empty_table_decodes_literal_bytes(self, copy_program):
        """Without a literal pool the bytes at 0x002D are decoded as code."""
        rows = SicXeDisassembler().disassemble(copy_program)
        at_2d = [row for row in rows if row.address_hex == "002D"]

        assert at_2d[0].instruction is not None

    def test_disassemble_file(self, copy_files, copy_listing):
        """Object files are read from disk and disassembled."""
        obj_path, sym_path = copy_files
        disasm = SicXeDisassembler(symbol_table=SymbolTable.from_file(sym_path))

        rows = disasm.disassemble_file(obj_path)

        assert [row.columns for row in rows] == copy_listing

    def test_disassemble_missing_file(self, tmp_path):
        """A missing object file raises ObjectFileOpenError."""
        with pytest.raises(ObjectFileOpenError):
            SicXeDisassembler().disassemble_file(tmp_path / "none.obj")


class TestEndToEnd:
    """Small programs exercising one feature each."""

    def test_minimal_header_and_end(self):
        """A program with no text records is START followed by END."""
        rows = disassemble("H^COPY ^000000^00001E\nE^000000\n")

        assert [row.columns for row in rows] == [
            ("0000", "COPY", "START", "0", ""),
            ("", "", "END", "COPY", ""),
        ]

    def test_start_operand_is_decimal(self):
        """The START operand shows the load address in decimal."""
        rows = disassemble("HPROG  001000000000\n")
        assert rows[0].operand == "4096"
        assert rows[0].address_hex == "0000"

    def test_direct_addressing(self):
        """With b=p=e=0 the displacement is the target."""
        rows = disassemble("H^T^000000^000003\nT^000000^03^030600\n")
        assert rows[1].columns == ("0000", "", "LDA", "600", "030600")

    def test_pc_relative_positive(self):
        """p=1 adds the displacement to the next row's address."""
        rows = disassemble("H^T^000000^000003\nT^000000^03^032600\n")
        assert rows[1].columns == ("0000", "", "LDA", "603", "032600")

    def test_pc_relative_sign_extension(self):
        """Negative displacements are sign-extended from 12 bits."""
        rows = disassemble("H^T^000000^00000A\nT^000007^03^3B2FFA\n")
        assert rows[1].mnemonic == "JLT"
        assert rows[1].operand == "4"

    def test_pc_relative_below_zero_wraps(self):
        """Targets below zero wrap to 32 bits."""
        rows = disassemble("H^T^000000^000003\nT^000000^03^3F2FFA\n")
        assert rows[1].operand == "FFFFFFFD"

    def test_shiftl(self):
        """SHIFTL shows the register and the stored count plus one."""
        rows = disassemble("H^T^00000A^000002\nT^00000A^02^A403\n")
        assert rows[1].columns == ("000A", "", "SHIFTL", "A,4", "A403")

    def test_format_two_shapes(self):
        """Format 2 operands follow each mnemonic's shape."""
        rows = disassemble("H^T^000000^00000A\nT^000000^0A^A004B410B030AC01A805\n")
        operands = [row.operand for row in instruction_rows(rows)]
        assert operands == ["A,S", "X", "3", "", "A,6"]

    def test_format_one(self):
        """Format 1 instructions have no operand."""
        rows = disassemble("H^T^000000^000001\nT^000000^01^C4\n")
        assert rows[1].columns == ("0000", "", "FIX", "", "C4")

    def test_literal_row(self):
        """A literal in the pool becomes a BYTE row."""
        symbols = "h\nh\nh\nh\nEOF C'EOF' 3 00002D\n"
        rows = disassemble("H^T^00002D^000003\nT^00002D^03^454F46\n", symbols)

        assert rows[1].columns == ("002D", "EOF", "BYTE", "C'EOF'", "EOF")
        assert rows[1].kind is RowKind.LITERAL
        assert rows[1].length == 3

    def test_extended_ldb_and_base(self):
        """+LDB sets BASE for the base-relative instructions after it."""
        rows = disassemble("H^T^000000^000007\nT^000000^07^691002C6034010\n")

        assert [row.columns for row in rows[1:4]] == [
            ("0000", "", "+LDB", "#2C6", "691002C6"),
            ("", "", "BASE", "2C6", ""),
            ("0004", "", "LDA", "2D6", "034010"),
        ]

    def test_ldb_from_memory_sets_base_to_address(self):
        """A non-immediate LDB sets BASE to its memory address."""
        rows = disassemble("H^T^000000^000006\nT^000000^06^6B0100034010\n")

        assert rows[1].operand == "100"
        assert rows[2].operand == "100"
        assert rows[3].operand == "110"

    def test_base_tracks_latest_ldb(self):
        """Each BASE row shows the value of the LDB just before it."""
        rows = disassemble("H^T^000000^000006\nT^000000^06^690010690020\n")
        assert [row.operand for row in rows if row.mnemonic == "BASE"] == ["10", "20"]

    def test_indexed_uses_ldx(self):
        """x=1 adds the last LDX target."""
        rows = disassemble("H^T^000000^000006\nT^000000^06^0500030F8010\n")

        assert rows[1].columns == ("0000", "", "LDX", "#3", "050003")
        assert rows[2].operand == "13"

    def test_indexed_base_relative(self):
        """x=1 combines with base-relative addressing."""
        rows = disassemble("H^T^000000^000009\nT^000000^09^69010005000403C010\n")
        assert rows[-2].operand == "114"

    def test_immediate_and_indirect_prefixes(self):
        """'#' marks immediate and '@' indirect operands."""
        rows = disassemble("H^T^000000^000006\nT^000000^06^0100053E0000\n")
        assert [row.operand for row in instruction_rows(rows)] == ["#5", "@0"]

    def test_labels_from_symbols(self):
        """Instructions at symbol addresses carry the symbol name."""
        symbols = "h\nh\nLOOP 000003 R\n"
        rows = disassemble("H^T^000000^000006\nT^000000^06^0100053F2FFA\n", symbols)
        assert rows[2].label == "LOOP"
        assert rows[1].label == ""

    def test_gap_between_records(self):
        """Each record decodes from its own start address."""
        rows = disassemble(
            "H^T^000000^000020\nT^000000^02^B410\nT^000010^03^3F2FED\n"
        )
        assert [row.address_hex for row in rows] == ["0000", "0000", "0010", ""]
        # next row after J is END at 0x13
        assert rows[2].operand == "0"

    def test_end_address_follows_last_row(self):
        """END sits just past the last decoded byte."""
        rows = disassemble("H^T^000000^000006\nT^000100^03^4F0000\n")
        assert rows[-1].address == 0x103
        assert rows[-1].operand == "T"

    def test_unknown_opcode(self):
        """An opcode missing from the catalogue aborts disassembly."""
        with pytest.raises(UnknownOpcodeError) as exc_info:
            disassemble("H^T^000000^000003\nT^000000^03^FC0000\n")
        assert exc_info.value.opcode == 0xFC
        assert exc_info.value.address == 0

    def test_truncated_instruction(self):
        """A record ending mid-instruction is an error."""
        with pytest.raises(TruncatedRecordError):
            disassemble("H^T^000000^000003\nT^000000^03^0326\n")

    def test_truncated_literal(self):
        """A literal that does not fit in its record is an error."""
        symbols = "h\nh\nh\nh\nEOF C'EOF' 3 000000\n"
        with pytest.raises(TruncatedRecordError):
            disassemble("H^T^000000^000003\nT^000000^03^454F\n", symbols)


class TestListingBuilder:
    """Tests for Pass A on its own."""

    def test_operands_left_empty(self):
        """Pass A leaves instruction operands for Pass B."""
        record = TextRecord(start_address=0, byte_count=3, payload="032600")
        rows = ListingBuilder().build_record(record)

        assert len(rows) == 1
        assert rows[0].operand == ""
        assert rows[0].mnemonic == "LDA"

    def test_base_decoration_address(self):
        """The BASE row holds the address after the LDB and no address text."""
        record = TextRecord(start_address=0x10, byte_count=3, payload="69202D")
        rows = ListingBuilder().build_record(record)

        assert rows[1].is_decoration
        assert rows[1].address == 0x13
        assert rows[1].address_hex == ""

    def test_literal_takes_priority_over_symbol(self):
        """A literal row is labelled with the literal name."""
        table = SymbolTable(
            symbols=[Symbol("INPUT", 0x5, "R")],
            literals=[Literal("LT", "X'F1'", 1, 0x5)],
        )
        record = TextRecord(start_address=0x5, byte_count=1, payload="F1")
        rows = ListingBuilder(table).build_record(record)

        assert rows[0].columns == ("0005", "LT", "BYTE", "X'F1'", "F1")

    def test_zero_length_literal_is_decoded(self, caplog):
        """A zero-length literal is ignored with a warning."""
        table = SymbolTable(literals=[Literal("Z", "X''", 0, 0x0)])
        record = TextRecord(start_address=0, byte_count=1, payload="C4")

        with caplog.at_level(logging.WARNING):
            rows = ListingBuilder(table).build_record(record)

        assert rows[0].mnemonic == "FIX"
        assert "zero-length literal" in caplog.text

    def test_rows_in_record_order(self):
        """Records are processed in the order given."""
        records = [
            TextRecord(start_address=0x10, byte_count=1, payload="C4"),
            TextRecord(start_address=0x00, byte_count=1, payload="C0"),
        ]
        rows = ListingBuilder().build(records)
        assert [row.mnemonic for row in rows] == ["FIX", "FLOAT"]


class TestOperandResolver:
    """Tests for Pass B on its own."""

    def test_empty_rows_use_header_start_for_end(self):
        """With no rows END takes the header start address."""
        rows = resolve_operands([], HeaderRecord("P", 0x40, 0))

        assert rows[-1].address == 0x40
        assert rows[0].label == "P"

    def test_default_header(self):
        """Without a header START and END are unnamed."""
        rows = resolve_operands([])
        assert [row.columns for row in rows] == [
            ("0000", "", "START", "0", ""),
            ("", "", "END", "", ""),
        ]

    def test_resolver_resets_between_runs(self):
        """BASE and X start at zero for every listing."""
        resolver = OperandResolver()
        resolver.base = 0x500
        resolver.index = 0x7
        resolver.resolve([], HeaderRecord())
        assert resolver.base == 0
        assert resolver.index == 0

    def test_pc_relative_uses_next_row(self):
        """The next row's address is used even across a literal."""
        rows = [
            ListingRow.for_literal(Literal("L", "X'00'", 1, 0x3), 0x3),
        ]
        record = TextRecord(start_address=0, byte_count=3, payload="032000")
        rows = ListingBuilder().build_record(record) + rows
        listing = resolve_operands(rows, HeaderRecord())

        assert listing[1].operand == "3"


class TestSignExtend:
    """Tests for the 12-bit displacement helper."""

    @pytest.mark.parametrize("raw,value", [
        (0x000, 0),
        (0x7FF, 2047),
        (0x800, -2048),
        (0xFFA, -6),
        (0xFFF, -1),
    ])
    def test_sign_extend(self, raw, value):
        """Bit 11 is the sign bit."""
        assert sign_extend_12(raw) == value


# =============================================================================
# Listing Invariants
# =============================================================================

SMALL_PROGRAMS = {
    "pc_sign_extended": ("H^T^000000^00000A\nT^000007^03^3B2FFA\n", ""),
    "pc_below_zero": ("H^T^000000^000003\nT^000000^03^3F2FFA\n", ""),
    "pc_indexed": ("H^T^000000^000006\nT^000000^06^0500020FA003\n", ""),
    "direct_indexed": ("H^T^000000^000006\nT^000000^06^0500030F8010\n", ""),
    "base_indexed": ("H^T^000000^000009\nT^000000^09^69010005000403C010\n", ""),
    "extended_ldb": ("H^T^000000^000007\nT^000000^07^691002C6034010\n", ""),
    "ldb_from_memory": ("H^T^000000^000006\nT^000000^06^6B0100034010\n", ""),
    "record_gap": ("H^T^000000^000020\nT^000000^02^B410\nT^000010^03^3F2FED\n", ""),
    "literal": (
        "H^T^00002D^000003\nT^00002D^03^454F46\n",
        "h\nh\nh\nh\nEOF C'EOF' 3 00002D\n",
    ),
    "literal_outside_records": (
        "H^T^000000^000003\nT^000000^03^030600\n",
        "h\nh\nh\nh\nFAR X'01' 1 000500\n",
    ),
}


def operand_value(row):
    return int(row.operand.lstrip("#@"), 16)


def encoded_field(row, next_address, base, index):
    """Undo Pass B: recover the address field from a resolved operand."""
    flags = row.instruction.flags
    target = operand_value(row)
    if flags.x:
        target -= index
    if flags.e:
        field = target
    elif flags.b:
        field = target - base
    elif flags.p:
        field = target - next_address
    else:
        field = target
    return field & (0xFFFFF if flags.e else 0xFFF)


class TestListingInvariants:
    """Properties every resolved listing satisfies."""

    def check_round_trip(self, rows):
        """Operands invert back to the encoded field; BASE rows show the running base."""
        base = index = 0
        for position, row in enumerate(rows):
            if row.mnemonic == "BASE":
                assert int(row.operand, 16) == base
            instr = row.instruction
            if instr is None or instr.flags is None:
                continue
            next_address = rows[position + 1].address
            assert encoded_field(row, next_address, base, index) == instr.address_field, row.columns
            if instr.mnemonic == "LDB":
                base = operand_value(row)
            elif instr.mnemonic == "LDX":
                index = operand_value(row)

    def check_lengths(self, rows, records):
        """Object code matches row length and rows tile each text record."""
        record_ends = {record.end_address for record in records}
        placed = [row for row in rows if not row.is_decoration]

        for row in placed:
            if row.instruction is not None:
                assert len(row.object_code) == 2 * row.length, row.columns
        for this, following in zip(placed, placed[1:]):
            if this.address + this.length not in record_ends:
                assert following.address == this.address + this.length, this.columns

    def check_literals(self, rows, table, records):
        """Literal rows appear exactly at the pool entries inside text records."""
        expected = sorted(
            literal.address
            for literal in table.literals
            if literal.length > 0
            and any(r.start_address <= literal.address < r.end_address for r in records)
        )
        actual = sorted(row.address for row in rows if row.kind is RowKind.LITERAL)
        assert actual == expected

    def check_all(self, program, table):
        rows = SicXeDisassembler(symbol_table=table).disassemble(program)
        self.check_round_trip(rows)
        self.check_lengths(rows, program.text_records)
        self.check_literals(rows, table, program.text_records)
        return rows

    def test_copy_program(self, copy_program, copy_symbols):
        """The COPY listing satisfies every invariant."""
        rows = self.check_all(copy_program, copy_symbols)
        assert any(row.mnemonic == "STCH" for row in rows)

    def test_copy_program_without_symbols(self, copy_program):
        """Decoding literal bytes as code keeps the invariants."""
        self.check_all(copy_program, SymbolTable())

    @pytest.mark.parametrize("name", sorted(SMALL_PROGRAMS))
    def test_small_programs(self, name):
        """Each small program satisfies every invariant."""
        obj_text, sym_text = SMALL_PROGRAMS[name]
        self.check_all(ObjectProgram.from_text(obj_text), SymbolTable.from_text(sym_text))

    def test_base_indexed_row(self):
        """A base-relative indexed operand inverts through X and BASE."""
        obj_text, _ = SMALL_PROGRAMS["base_indexed"]
        rows = self.check_all(ObjectProgram.from_text(obj_text), SymbolTable())

        lda = rows[-2]
        assert (lda.instruction.flags.x, lda.instruction.flags.b) == (True, True)
        assert encoded_field(lda, rows[-1].address, base=0x100, index=0x4) == 0x010

    def test_sign_extended_row(self):
        """A negative PC displacement inverts to its 12-bit encoding."""
        obj_text, _ = SMALL_PROGRAMS["pc_sign_extended"]
        rows = self.check_all(ObjectProgram.from_text(obj_text), SymbolTable())

        jlt = rows[1]
        assert encoded_field(jlt, next_address=0x0A, base=0, index=0) == 0xFFA
