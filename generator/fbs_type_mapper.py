"""
Type Mapper

Maps IR field types to the names, casts and literals used by the generated
Python code. Every function is a pure function of its input type/value.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Optional

from fbs_logger import log_field_warning
from fbs_py_emitter import PyEmitter
from fbs_schema import (
    FieldType, ScalarType, EnumRefType, StringType, StructRefType, VectorType, UnionRefType,
    EnumType, Field, RecordType, ScalarKind, OFFSET_SIZE, format_type, is_scalar,
)

NUMBER_TYPES = "flatbuffers.number_types"

# Placeholder accessor type for union members; callers re-bind it to the concrete table.
UNION_PLACEHOLDER = "flatbuffers.table.Table"

PY_SCALAR_TYPES = {
    ScalarKind.BOOL: "bool",
    ScalarKind.FLOAT32: "float",
    ScalarKind.FLOAT64: "float",
}

_FLOAT_SPECIALS = {
    "inf": 'float("inf")',
    "+inf": 'float("inf")',
    "infinity": 'float("inf")',
    "+infinity": 'float("inf")',
    "-inf": 'float("-inf")',
    "-infinity": 'float("-inf")',
    "nan": 'float("nan")',
    "+nan": 'float("nan")',
    "-nan": 'float("nan")',
}


def parse_int_literal(text: str) -> Optional[int]:
    """Parse a decimal or prefixed (0x, 0o, 0b) integer literal; None if it is not one."""
    for base in (10, 0):
        try:
            return int(text.strip(), base)
        except ValueError:
            continue
    return None


@dataclass
class TypeMapper:
    """
    Type naming for the generated accessors.

    The emitter is used only for schema lookups and ICE reporting.
    """
    py: PyEmitter

    # ============================================================================
    # Lookups
    # ============================================================================

    def enum_of(self, t: EnumRefType) -> EnumType:
        enum_def = self.py.schema.lookup_enum(t.name)
        if enum_def is None:
            self.py.ice(f"[ICE-1010] unknown enum '{t.name}'")
        return enum_def

    def record_of(self, t: StructRefType) -> RecordType:
        record = self.py.schema.lookup_record(t.name)
        if record is None:
            self.py.ice(f"[ICE-1011] unknown record '{t.name}'")
        return record

    def scalar_kind(self, t: FieldType) -> ScalarKind:
        if isinstance(t, ScalarType):
            return t.kind
        if isinstance(t, EnumRefType):
            return self.enum_of(t).underlying
        self.py.ice(f"[ICE-1020] scalar kind requested for non-scalar type '{format_type(t)}'")

    def is_struct(self, t: FieldType) -> bool:
        """True for fixed structs, which are stored inline."""
        return isinstance(t, StructRefType) and self.record_of(t).fixed

    # ============================================================================
    # Sizes
    # ============================================================================

    def inline_size(self, t: FieldType) -> int:
        if isinstance(t, (ScalarType, EnumRefType)):
            return self.scalar_kind(t).size
        elif isinstance(t, StructRefType):
            record = self.record_of(t)
            return record.bytesize if record.fixed else OFFSET_SIZE
        elif isinstance(t, (StringType, VectorType, UnionRefType)):
            return OFFSET_SIZE
        else:
            self.py.ice(f"[ICE-1030] unknown type kind for inline size: {type(t)}")

    def inline_alignment(self, t: FieldType) -> int:
        if isinstance(t, StructRefType) and self.record_of(t).fixed:
            return self.record_of(t).minalign
        return self.inline_size(t)

    # ============================================================================
    # Names
    # ============================================================================

    def basic_name(self, t: FieldType) -> str:
        """Runtime primitive name of a scalar (enums map to their underlying kind)."""
        return self.scalar_kind(t).runtime_name

    def flags(self, t: FieldType) -> str:
        """Expression naming the runtime number-type descriptor of a scalar."""
        return f"{NUMBER_TYPES}.{self.basic_name(t)}Flags"

    def pointer_name(self, t: FieldType) -> str:
        """Accessor return type of an offset-indirected (or struct) type."""
        if isinstance(t, StringType):
            return "str"
        elif isinstance(t, VectorType):
            return self.type_get(t.element)
        elif isinstance(t, StructRefType):
            return self.record_of(t).name
        elif isinstance(t, UnionRefType):
            return UNION_PLACEHOLDER
        else:
            self.py.ice(f"[ICE-1040] pointer name requested for type '{format_type(t)}'")

    def type_get(self, t: FieldType) -> str:
        """Destination type of a read: Python scalar type, enum class or pointer name."""
        if isinstance(t, EnumRefType):
            return self.enum_of(t).name
        if isinstance(t, ScalarType):
            return PY_SCALAR_TYPES.get(t.kind, "int")
        return self.pointer_name(t)

    def method_name(self, t: FieldType) -> str:
        """Suffix of the builder Prepend* method that writes a value of this type."""
        if is_scalar(t):
            return self.basic_name(t)
        if self.is_struct(t):
            return "Struct"
        return "UOffsetTRelative"

    # ============================================================================
    # Casts
    # ============================================================================

    def destination_cast(self, t: FieldType) -> str:
        """Opening text that wraps a raw read into its destination type."""
        if isinstance(t, VectorType):
            return self.destination_cast(t.element)
        if isinstance(t, EnumRefType):
            return f"{self.enum_of(t).name}("
        return ""

    def destination_mask(self, t: FieldType) -> str:
        """Closing text matching destination_cast."""
        if isinstance(t, VectorType):
            return self.destination_mask(t.element)
        if isinstance(t, EnumRefType):
            return ")"
        return ""

    # ============================================================================
    # Default values
    # ============================================================================

    def enum_default_literal(self, fld: Field) -> str:
        """
        Render an enum default as its named case.

        When no enumerator carries the default's integer value, the raw literal is used.
        """
        enum_def = self.enum_of(fld.type)
        value = parse_int_literal(fld.default)
        if value is None:
            return fld.default
        ev = enum_def.lookup_value(value)
        if ev is None:
            log_field_warning(self.py.context, self.py.current_entity, fld.name,
                              f"default {value} is not a value of '{enum_def.name}'")
            return fld.default
        return f"{enum_def.name}.{self.py.mangle_identifier(ev.name)}"

    def default_literal(self, fld: Field, enable_overrides: bool = True) -> str:
        """Type-correct literal for a scalar field's default value."""
        t = fld.type
        if enable_overrides and isinstance(t, EnumRefType):
            return self.enum_default_literal(fld)
        kind = self.scalar_kind(t)
        if kind is ScalarKind.BOOL:
            return "False" if fld.default.strip() in ("0", "false", "False") else "True"
        if kind.is_float:
            special = _FLOAT_SPECIALS.get(fld.default.strip().lower())
            if special is not None:
                return special
            try:
                return repr(float(fld.default))
            except ValueError:
                return fld.default
        return fld.default

    def default_literal_basic(self, fld: Field) -> str:
        """Default used for builder parameters: 0 for every offset-indirected type."""
        if not is_scalar(fld.type):
            return "0"
        return self.default_literal(fld)

    def vector_absent_value(self, element: FieldType) -> str:
        """Value returned by a vector element accessor when the vector is absent."""
        if isinstance(element, ScalarType):
            if element.kind is ScalarKind.BOOL:
                return "False"
            if element.kind.is_float:
                return "0.0"
            return "0"
        if isinstance(element, EnumRefType):
            return "0"
        if isinstance(element, (StringType, StructRefType)):
            return "None"
        self.py.ice(f"[ICE-1050] unsupported vector element type '{format_type(element)}'")
