"""
SIC/XE Disassembler Command-Line Interface
==========================================

This package provides the command-line tool for the disassembler:

- **disassem**: object program + symbol table -> assembly listing

The tool is implemented as a Click-based CLI application with
consistent exit codes (see cli.errors).
"""

__all__ = ["disassem"]
