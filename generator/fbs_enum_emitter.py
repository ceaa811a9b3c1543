#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List, Optional

from fbs_py_emitter import PyEmitter
from fbs_schema import EnumType, EnumVal

# Average distance between values above which a name table is "too sparse".
MAX_SPARSENESS = 5


@dataclass
class EnumEmitter:
    """
    Emits one enum.IntEnum class per enumeration, plus a dense name table
    when the values are close enough together.
    """
    py: PyEmitter

    def emit_enum(self, enum_def: EnumType) -> None:
        out = self.py.out
        self.py.begin_class(enum_def.name, "enum.IntEnum")
        if not enum_def.values:
            out.emit("pass")
        # Explicit values on every case: source values may be sparse or out of order.
        for ev in enum_def.values:
            out.emit(f"{self.py.mangle_identifier(ev.name)} = {ev.value}")
        self.py.end_class()

        names = self.name_table(enum_def)
        if names is None:
            return
        first = self.first_value(enum_def)
        table_name = f"{enum_def.name}Names"
        out.emit()
        out.emit()
        out.emit(f"{table_name} = ({''.join(self.py.string_literal(n) + ', ' for n in names).rstrip()})")
        self.py.begin_function(f"{enum_def.name}Name", "e")
        if first.value:
            out.emit(f"return {table_name}[e - {enum_def.name}.{self.py.mangle_identifier(first.name)}]")
        else:
            out.emit(f"return {table_name}[e]")
        self.py.end_function()

    def name_table(self, enum_def: EnumType) -> Optional[List[str]]:
        """
        Names indexed by (value - min value), or None when the enum is too sparse.

        Integers in range without an enumerator get an empty-string placeholder.
        """
        if not enum_def.values:
            return None
        lo = min(ev.value for ev in enum_def.values)
        hi = max(ev.value for ev in enum_def.values)
        value_range = hi - lo + 1
        if value_range // len(enum_def.values) >= MAX_SPARSENESS:
            return None
        by_value = {ev.value: ev.name for ev in enum_def.values}
        return [by_value.get(v, "") for v in range(lo, hi + 1)]

    @staticmethod
    def first_value(enum_def: EnumType) -> Optional[EnumVal]:
        if not enum_def.values:
            return None
        return min(enum_def.values, key=lambda ev: ev.value)
