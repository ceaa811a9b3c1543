#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional


DIAGNOSTIC_CODE_FAMILIES = {
    "SCH": [
        "SCH-0010",  # document is not valid JSON
        "SCH-0020",  # document root is not an object
        "SCH-0030",  # missing required key
        "SCH-0040",  # unknown scalar kind
        "SCH-0050",  # unknown field type base
        "SCH-0060",  # value has the wrong JSON type
        "SCH-0070",  # reference to an undeclared enum or record
    ],
    "FBC": [
        "FBC-0010",  # cannot read input file
        "FBC-0020",  # cannot write output file
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None  # file path
    path: Optional[str] = None  # location inside the document, e.g. "records[1].fields[0]"

    # Return the one-line header
    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.path is not None:
            loc += f"({self.path})" if loc else self.path
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"


class SchemaLoadError(Exception):
    """Raised when a schema IR document is malformed."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic
