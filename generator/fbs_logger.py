"""
Logging utilities for the generator.

Messages go to stderr so generated source written to stdout stays clean.
Every function is gated by the GenerationContext log level; rich format adds
a timestamp and a level tag.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from fbs_context import GenerationContext, LogLevel
from fbs_output import OutputUnit

LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def format_prefix(context: GenerationContext, log_level: LogLevel) -> str:
    if not context.log_rich_format or log_level not in LEVEL_TAGS:
        return ""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    return f"{timestamp} [{LEVEL_TAGS[log_level]}] "


def log(context: GenerationContext, log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context's logging level admits it.

    Args:
        context:    The generation context containing logging level.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context.log_level < log_level:
        return
    print(f"{format_prefix(context, log_level)}{message}", file=sys.stderr)


def log_error(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.ERROR, message)


def log_warning(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: GenerationContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: GenerationContext, stage: str, entity: Optional[str] = None) -> None:
    """Log the start of a generation stage, optionally for one schema entity."""
    if entity:
        log_info(context, f"{stage} '{entity}'")
    else:
        log_info(context, f"{stage}...")


def log_field_warning(context: GenerationContext, entity: Optional[str], field: str, message: str) -> None:
    """Warn about one field of a schema entity, located as 'Entity.field'."""
    location = f"{entity}.{field}" if entity else field
    log_warning(context, f"{location}: {message}")


def log_unit(context: GenerationContext, unit: OutputUnit, destination: Optional[str] = None) -> None:
    """
    Report an emitted output unit.

    The destination (a written path) is logged at INFO; the unit's line count at DEBUG.
    """
    target = destination if destination is not None else unit.module_name
    log_info(context, f"Wrote {target}")
    log_debug(context, f"{unit.module_name}: {len(unit.text.splitlines())} line(s)")
