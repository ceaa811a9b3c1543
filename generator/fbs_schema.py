#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

# ========================================
# Resolved schema IR consumed by the generator.
# Produced upstream (offsets, sizes, alignment and flags already computed).
# ========================================


class ScalarKind(Enum):
    """Scalar kinds with their (runtime name, byte size)."""
    BOOL = ("Bool", 1)
    INT8 = ("Int8", 1)
    UINT8 = ("Uint8", 1)
    INT16 = ("Int16", 2)
    UINT16 = ("Uint16", 2)
    INT32 = ("Int32", 4)
    UINT32 = ("Uint32", 4)
    INT64 = ("Int64", 8)
    UINT64 = ("Uint64", 8)
    FLOAT32 = ("Float32", 4)
    FLOAT64 = ("Float64", 8)

    @property
    def runtime_name(self) -> str:
        return self.value[0]

    @property
    def size(self) -> int:
        return self.value[1]

    @property
    def is_float(self) -> bool:
        return self in (ScalarKind.FLOAT32, ScalarKind.FLOAT64)


SCALAR_KINDS_BY_NAME: Dict[str, ScalarKind] = {k.name.lower(): k for k in ScalarKind}

# Size of an offset (uoffset_t) in the wire format.
OFFSET_SIZE = 4

# Largest scalar size; first pass when adding fields sorted by size.
LARGEST_SCALAR_SIZE = 8


class FieldType:
    """
    Base class for all field types.
    Used only as a common marker; concrete types are dataclasses below.
    """
    pass


@dataclass(frozen=True)
class ScalarType(FieldType):
    kind: ScalarKind


@dataclass(frozen=True)
class EnumRefType(FieldType):
    name: str


@dataclass(frozen=True)
class StringType(FieldType):
    pass


@dataclass(frozen=True)
class StructRefType(FieldType):
    name: str  # fixed struct or table


@dataclass(frozen=True)
class VectorType(FieldType):
    element: FieldType


@dataclass(frozen=True)
class UnionRefType(FieldType):
    name: str


@dataclass(frozen=True)
class EnumVal:
    name: str
    value: int


@dataclass
class EnumType:
    name: str
    underlying: ScalarKind
    values: List[EnumVal] = field(default_factory=list)
    namespace: Tuple[str, ...] = ()
    is_union: bool = False
    generated: bool = False  # already emitted for an included schema

    def lookup_value(self, value: int) -> Optional[EnumVal]:
        for ev in self.values:
            if ev.value == value:
                return ev
        return None


@dataclass
class Field:
    """
    A record field.

    offset: absolute byte offset inside a struct, or the vtable byte offset
            (4 + 2 * slot) inside a table.
    padding: bytes following the field in forward layout (structs only).
    """
    name: str
    type: FieldType
    offset: int = 0
    default: str = "0"
    required: bool = False
    deprecated: bool = False
    key: bool = False
    padding: int = 0
    nested_flatbuffer: Optional[str] = None


@dataclass
class RecordType:
    name: str
    fixed: bool
    fields: List[Field] = field(default_factory=list)
    bytesize: int = 0
    minalign: int = 1
    sortbysize: bool = False
    has_key: bool = False
    is_root: bool = False
    file_identifier: Optional[str] = None
    namespace: Tuple[str, ...] = ()
    generated: bool = False

    def live_fields(self) -> List[Field]:
        return [f for f in self.fields if not f.deprecated]

    def slot_of(self, fld: Field) -> int:
        """Builder slot index: the field's position among all declared fields."""
        for i, f in enumerate(self.fields):
            if f is fld:
                return i
        raise ValueError(f"field '{fld.name}' does not belong to '{self.name}'")


@dataclass
class Schema:
    """
    A fully resolved schema: every entity in declaration order.
    """
    enums: List[EnumType] = field(default_factory=list)
    records: List[RecordType] = field(default_factory=list)
    namespace: Tuple[str, ...] = ()

    def lookup_enum(self, name: str) -> Optional[EnumType]:
        for e in self.enums:
            if e.name == name:
                return e
        return None

    def lookup_record(self, name: str) -> Optional[RecordType]:
        for r in self.records:
            if r.name == name:
                return r
        return None

    def root_record(self) -> Optional[RecordType]:
        for r in self.records:
            if r.is_root:
                return r
        return None


def key_field(record: RecordType) -> Optional[Field]:
    if not record.has_key:
        return None
    for f in record.live_fields():
        if f.key:
            return f
    return None


def is_scalar(t: FieldType) -> bool:
    return isinstance(t, (ScalarType, EnumRefType))


# --- type stringification for debugging ---

def format_type(t: Optional[FieldType]) -> str:
    if t is None:
        return "<none>"
    elif isinstance(t, ScalarType):
        return t.kind.name.lower()
    elif isinstance(t, EnumRefType):
        return f"enum {t.name}"
    elif isinstance(t, StringType):
        return "string"
    elif isinstance(t, StructRefType):
        return t.name
    elif isinstance(t, VectorType):
        return f"[{format_type(t.element)}]"
    elif isinstance(t, UnionRefType):
        return f"union {t.name}"
    else:
        # Fallback (should not happen)
        return repr(t)
