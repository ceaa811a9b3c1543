"""
Generation context for cross-cutting generator options.

This module defines the GenerationContext dataclass which holds options that
affect several emitters (output splitting, mutators, logging).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels for the generator."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class GenerationContext:
    """
    Holds cross-cutting options that affect code generation.

    Attributes:
        one_file:           If True, emit a single merged output unit instead of one unit per type.
        mutable_buffer:     If True, emit in-place mutators for scalar fields and vectors of scalars.
        file_name:          Logical name of the merged unit when one_file is set.
        log_rich_format:    If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:          Current logging level.
    """
    one_file: bool = False
    mutable_buffer: bool = False
    file_name: str = "schema_generated"
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'GenerationContext':
        """Create a GenerationContext with default settings."""
        return GenerationContext(log_level=LogLevel.WARNING)
