"""
Disassembler Configuration
==========================

Run settings for the disassembler. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of the above)

Environment variables (all optional):
    SICXE_OUTPUT: Listing output path (default: out.lst)
    SICXE_COLUMN_WIDTH: Listing column width (default: 12)
    SICXE_OPCODE_TABLE: CSV file replacing the built-in opcode table
    SICXE_LOG_LEVEL: Logging level name (default: WARNING)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import logging
import os


DEFAULT_OUTPUT = Path("out.lst")
DEFAULT_COLUMN_WIDTH = 12
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class DisassemblerConfig:
    """
    Configuration for one disassembler run.

    Attributes:
        output_path: Where the listing is written
        column_width: Width of each listing column
        opcode_table_path: Optional CSV replacing the built-in opcode table
        log_level: Logging level name for the CLI
    """

    output_path: Path = DEFAULT_OUTPUT
    column_width: int = DEFAULT_COLUMN_WIDTH
    opcode_table_path: Optional[Path] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DisassemblerConfig":
        """
        Create a DisassemblerConfig from environment variables.

        Invalid values are ignored and the default kept.

        Args:
            environ: Mapping to read (default: os.environ)
        """
        if environ is None:
            environ = os.environ
        config = cls()

        if output := environ.get("SICXE_OUTPUT"):
            config.output_path = Path(output)

        if width := environ.get("SICXE_COLUMN_WIDTH"):
            try:
                value = int(width)
            except ValueError:
                value = 0
            if value > 0:
                config.column_width = value

        if opcode_table := environ.get("SICXE_OPCODE_TABLE"):
            config.opcode_table_path = Path(opcode_table)

        if level := environ.get("SICXE_LOG_LEVEL"):
            if isinstance(logging.getLevelName(level.upper()), int):
                config.log_level = level.upper()

        return config

    @property
    def logging_level(self) -> int:
        """Numeric logging level for logging.basicConfig."""
        return logging.getLevelName(self.log_level)
