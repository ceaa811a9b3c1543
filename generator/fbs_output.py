#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class OutputUnit:
    """
    One generated source unit, handed to an external writer.

    - logical_name: the unit's name without extension (e.g. 'Monster')
    - namespace_path: namespace components (e.g. ('MyGame', 'Example'))
    - text: the complete generated source
    """
    logical_name: str
    namespace_path: Tuple[str, ...]
    text: str

    @property
    def module_name(self) -> str:
        return ".".join(self.namespace_path + (self.logical_name,))

    def relative_path(self) -> Path:
        return Path(*self.namespace_path, f"{self.logical_name}.py")
