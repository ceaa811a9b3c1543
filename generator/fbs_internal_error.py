#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# fbs_internal_error.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ICELocation:
    entity: Optional[str]
    field: Optional[str] = None


class InternalGeneratorError(RuntimeError):
    """
    ICE = generator bug / IR variant the emitters do not cover.
    Not for malformed input documents (those are SchemaLoadErrors).
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    def format(self) -> str:
        message = self.message
        if not "[ICE-" in message:
            message = f"[ICE-9999] {message}"
        if self.loc and self.loc.entity:
            if self.loc.field is not None:
                return f"{self.loc.entity}.{self.loc.field}: internal generator error: {message}"
            return f"{self.loc.entity}: internal generator error: {message}"
        return f"internal generator error: {message}"
