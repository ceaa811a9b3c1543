"""
Table Emitter

Generates the accessor class of every record (struct or table) and the
module-level builder functions that serialize it.

Accessor classes are thin views: each wraps a flatbuffers.table.Table and
reads fields on demand, so reading a field never touches another one.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List

from fbs_key_lookup_emitter import KeyLookupEmitter
from fbs_layout_emitter import LayoutEmitter
from fbs_py_emitter import PyEmitter
from fbs_schema import (
    EnumRefType, EnumType, Field, LARGEST_SCALAR_SIZE, RecordType, StringType, StructRefType, UnionRefType,
    VectorType, format_type, is_scalar,
)
from fbs_type_mapper import NUMBER_TYPES, UNION_PLACEHOLDER, TypeMapper

# Value parameter of every Mutate* method; never a local of a generated body.
MUTATOR_VALUE = "n"


@dataclass
class TableEmitter:
    py: PyEmitter
    types: TypeMapper
    layout: LayoutEmitter
    lookup: KeyLookupEmitter

    # ============================================================================
    # Records
    # ============================================================================

    def emit_record(self, record: RecordType) -> None:
        """Emit the accessor class of a record followed by its builder functions."""
        out = self.py.out
        self.py.begin_class(record.name)
        out.emit("__slots__ = ['_tab']")
        if record.fixed:
            self.emit_size_of(record)
        else:
            self.emit_get_root_as(record)
            if record.is_root and record.file_identifier:
                self.emit_buffer_has_identifier(record)
        self.emit_init()
        for fld in record.live_fields():
            if record.fixed:
                self.emit_struct_field(fld)
            else:
                self.emit_table_field(fld)
        if record.has_key and not record.fixed:
            self.lookup.emit_lookup_method(record)
        self.py.end_class()

        if record.fixed:
            self.layout.emit_create_struct(record)
        else:
            self.emit_builder_functions(record)
            if record.has_key:
                self.lookup.emit_sorted_vector(record)

    def referenced_enums(self, record: RecordType) -> List[EnumType]:
        """Enums a record's generated code names, in first-use order."""
        seen: List[EnumType] = []
        for fld in record.live_fields():
            t = fld.type.element if isinstance(fld.type, VectorType) else fld.type
            if isinstance(t, EnumRefType):
                enum_def = self.types.enum_of(t)
                if enum_def not in seen:
                    seen.append(enum_def)
        return seen

    def emit_size_of(self, record: RecordType) -> None:
        self.py.begin_method("SizeOf", is_classmethod=True)
        self.py.out.emit(f"return {record.bytesize}")
        self.py.end_method()

    def emit_get_root_as(self, record: RecordType) -> None:
        out = self.py.out
        self.py.begin_method("GetRootAs", "buf, offset=0, obj=None", is_classmethod=True)
        self.py.emit_docstring(f"Bind a {record.name} view to the root table of buf.")
        out.emit("n = flatbuffers.encode.Get(flatbuffers.packer.uoffset, buf, offset)")
        out.emit("x = cls() if obj is None else obj")
        out.emit("x.Init(buf, n + offset)")
        out.emit("return x")
        self.py.end_method()

    def emit_buffer_has_identifier(self, record: RecordType) -> None:
        ident = self.py.bytes_literal(record.file_identifier)
        self.py.begin_method(f"{record.name}BufferHasIdentifier", "buf, offset, size_prefixed=False",
                             is_classmethod=True)
        self.py.out.emit(
            f"return flatbuffers.util.BufferHasIdentifier(buf, offset, {ident}, size_prefixed=size_prefixed)"
        )
        self.py.end_method()

    def emit_init(self) -> None:
        self.py.begin_method("Init", "buf, pos")
        self.py.out.emit("self._tab = flatbuffers.table.Table(buf, pos)")
        self.py.end_method()

    # ============================================================================
    # Struct accessors
    # ============================================================================

    def emit_struct_field(self, fld: Field) -> None:
        out = self.py.out
        name = self.py.accessor_name(fld.name)
        if isinstance(fld.type, StructRefType):
            nested = self.types.record_of(fld.type)
            self.py.begin_method(name)
            cls = self.py.record_ref(nested)
            out.emit(f"obj = {cls}()")
            out.emit(f"obj.Init(self._tab.Bytes, self._tab.Pos + {fld.offset})")
            out.emit("return obj")
            self.py.end_method()
            return
        if not is_scalar(fld.type):
            self.py.ice(f"[ICE-1310] struct field of type '{format_type(fld.type)}'", fld.name)

        cast, mask = self.types.destination_cast(fld.type), self.types.destination_mask(fld.type)
        self.py.begin_method(name)
        out.emit(f"return {cast}self._tab.Get({self.types.flags(fld.type)}, self._tab.Pos + {fld.offset}){mask}")
        self.py.end_method()

        if self.py.context.mutable_buffer:
            value = MUTATOR_VALUE
            self.py.begin_method(f"Mutate{self.py.make_camel(fld.name)}", value)
            out.emit(
                f"flatbuffers.encode.Write({self.types.flags(fld.type)}.packer_type, self._tab.Bytes, "
                f"self._tab.Pos + {fld.offset}, {value})"
            )
            self.py.end_method()

    # ============================================================================
    # Table accessors
    # ============================================================================

    def begin_field_read(self, name: str, fld: Field, params: str = "") -> None:
        """Open an accessor method and the branch taken when the field is present."""
        self.py.begin_method(name, params)
        self.py.out.emit(f"o = self._tab.Offset({fld.offset})")
        self.py.out.emit("if o != 0:")
        self.py.out.indent()

    def end_field_read(self, absent: str) -> None:
        self.py.out.dedent()
        self.py.out.emit(f"return {absent}")
        self.py.end_method()

    def emit_table_field(self, fld: Field) -> None:
        t = fld.type
        if is_scalar(t):
            self.emit_scalar_field(fld)
        elif isinstance(t, StringType):
            self.emit_string_field(fld)
        elif isinstance(t, StructRefType):
            self.emit_record_field(fld)
        elif isinstance(t, UnionRefType):
            self.emit_union_field(fld)
        elif isinstance(t, VectorType):
            self.emit_vector_field(fld)
        else:
            self.py.ice(f"[ICE-1320] unknown field type '{format_type(t)}'", fld.name)

    def emit_scalar_field(self, fld: Field) -> None:
        out = self.py.out
        flags = self.types.flags(fld.type)
        cast, mask = self.types.destination_cast(fld.type), self.types.destination_mask(fld.type)
        self.begin_field_read(self.py.accessor_name(fld.name), fld)
        out.emit(f"return {cast}self._tab.Get({flags}, o + self._tab.Pos){mask}")
        self.end_field_read(self.types.default_literal(fld))

        if self.py.context.mutable_buffer:
            value = MUTATOR_VALUE
            self.begin_field_read(f"Mutate{self.py.make_camel(fld.name)}", fld, value)
            out.emit(f"flatbuffers.encode.Write({flags}.packer_type, self._tab.Bytes, o + self._tab.Pos, {value})")
            out.emit("return True")
            self.end_field_read("False")

    def emit_string_field(self, fld: Field) -> None:
        out = self.py.out
        self.begin_field_read(self.py.accessor_name(fld.name), fld)
        out.emit('return self._tab.String(o + self._tab.Pos).decode("utf-8")')
        if fld.required:
            out.dedent()
            out.emit(f"raise RuntimeError({self.py.string_literal(self.missing_message(fld))})")
            self.py.end_method()
        else:
            self.end_field_read("None")
        self.emit_bytes_accessor(fld, 1)

    def emit_record_field(self, fld: Field) -> None:
        out = self.py.out
        record = self.types.record_of(fld.type)
        self.begin_field_read(self.py.accessor_name(fld.name), fld)
        if record.fixed:
            out.emit("x = o + self._tab.Pos")
        else:
            out.emit("x = self._tab.Indirect(o + self._tab.Pos)")
        cls = self.py.record_ref(record)
        out.emit(f"obj = {cls}()")
        out.emit("obj.Init(self._tab.Bytes, x)")
        out.emit("return obj")
        self.end_field_read("None")

    def emit_union_field(self, fld: Field) -> None:
        """The member is returned as a bare table; callers re-bind it by the type field."""
        out = self.py.out
        self.begin_field_read(self.py.accessor_name(fld.name), fld)
        out.emit(f"obj = {UNION_PLACEHOLDER}(bytearray(), 0)")
        out.emit("self._tab.Union(obj, o)")
        out.emit("return obj")
        self.end_field_read("None")

    def emit_vector_field(self, fld: Field) -> None:
        out = self.py.out
        element = fld.type.element
        if isinstance(element, (VectorType, UnionRefType)):
            self.py.ice(f"[ICE-1330] vector of '{format_type(element)}' is not supported", fld.name)
        size = self.types.inline_size(element)

        self.begin_field_read(self.py.accessor_name(fld.name), fld, "j")
        out.emit("a = self._tab.Vector(o)")
        if is_scalar(element):
            cast, mask = self.types.destination_cast(fld.type), self.types.destination_mask(fld.type)
            out.emit(f"return {cast}self._tab.Get({self.types.flags(element)}, a + j * {size}){mask}")
        elif isinstance(element, StringType):
            out.emit(f'return self._tab.String(a + j * {size}).decode("utf-8")')
        else:
            record = self.types.record_of(element)
            if record.fixed:
                out.emit(f"x = a + j * {size}")
            else:
                out.emit(f"x = self._tab.Indirect(a + j * {size})")
            cls = self.py.record_ref(record)
            out.emit(f"obj = {cls}()")
            out.emit("obj.Init(self._tab.Bytes, x)")
            out.emit("return obj")
        self.end_field_read(self.types.vector_absent_value(element))

        self.begin_field_read(f"{self.py.accessor_name(fld.name)}Length", fld)
        out.emit("return self._tab.VectorLen(o)")
        self.end_field_read("0")

        if is_scalar(element):
            self.emit_bytes_accessor(fld, size)
        if fld.nested_flatbuffer:
            self.emit_nested_root(fld)
        if isinstance(element, StructRefType):
            record = self.types.record_of(element)
            if not record.fixed and record.has_key:
                self.lookup.emit_by_key_accessor(fld, record)

        if self.py.context.mutable_buffer and is_scalar(element):
            value = MUTATOR_VALUE
            self.begin_field_read(f"Mutate{self.py.make_camel(fld.name)}", fld, f"j, {value}")
            out.emit(
                f"flatbuffers.encode.Write({self.types.flags(element)}.packer_type, self._tab.Bytes, "
                f"self._tab.Vector(o) + j * {size}, {value})"
            )
            out.emit("return True")
            self.end_field_read("False")

    def emit_bytes_accessor(self, fld: Field, element_size: int) -> None:
        """Raw bytes of a string or scalar vector, without the length prefix."""
        out = self.py.out
        self.begin_field_read(self.py.bytes_accessor_name(fld.name), fld)
        out.emit("start = self._tab.Vector(o)")
        if element_size == 1:
            out.emit("return bytes(self._tab.Bytes[start:start + self._tab.VectorLen(o)])")
        else:
            out.emit(f"return bytes(self._tab.Bytes[start:start + self._tab.VectorLen(o) * {element_size}])")
        self.end_field_read("None")

    def emit_nested_root(self, fld: Field) -> None:
        out = self.py.out
        nested = self.py.schema.lookup_record(fld.nested_flatbuffer)
        if nested is None or nested.fixed:
            self.py.ice(f"[ICE-1340] nested flatbuffer root '{fld.nested_flatbuffer}' is not a table", fld.name)
        self.begin_field_read(f"{self.py.accessor_name(fld.name)}NestedRoot", fld)
        cls = self.py.record_ref(nested)
        out.emit(f"return {cls}.GetRootAs(self._tab.Bytes, self._tab.Vector(o))")
        self.end_field_read("None")

    # ============================================================================
    # Builder functions
    # ============================================================================

    def emit_builder_functions(self, record: RecordType) -> None:
        out = self.py.out
        # Deprecated fields keep their slot.
        self.py.begin_function(f"{record.name}Start", "builder")
        out.emit(f"builder.StartObject({len(record.fields)})")
        self.py.end_function()

        for fld in record.live_fields():
            self.emit_add(record, fld)
            if isinstance(fld.type, VectorType):
                self.emit_vector_helpers(record, fld)

        self.emit_end(record)
        if self.can_create(record):
            self.emit_create_table(record)
        if record.is_root:
            self.emit_finish(record)

    def add_param(self, fld: Field) -> str:
        if is_scalar(fld.type):
            return self.py.param_name(fld.name)
        return self.py.param_name(fld.name + "_offset")

    def emit_add(self, record: RecordType, fld: Field) -> None:
        slot = record.slot_of(fld)
        param = self.add_param(fld)
        self.py.begin_function(f"{record.name}Add{self.py.make_camel(fld.name)}", f"builder, {param}")
        if is_scalar(fld.type):
            default = self.types.default_literal(fld, enable_overrides=False)
            self.py.out.emit(f"builder.Prepend{self.types.method_name(fld.type)}Slot({slot}, {param}, {default})")
        else:
            self.py.out.emit(
                f"builder.Prepend{self.types.method_name(fld.type)}Slot("
                f"{slot}, {NUMBER_TYPES}.UOffsetTFlags.py_type({param}), 0)"
            )
        self.py.end_function()

    def emit_vector_helpers(self, record: RecordType, fld: Field) -> None:
        out = self.py.out
        element = fld.type.element
        size = self.types.inline_size(element)
        alignment = self.types.inline_alignment(element)
        vector = f"{record.name}Start{self.py.make_camel(fld.name)}Vector"
        self.py.begin_function(vector, "builder, numElems")
        out.emit(f"return builder.StartVector({size}, numElems, {alignment})")
        self.py.end_function()

        # Struct elements are written in place between StartVector and EndVector.
        if self.types.is_struct(element):
            return
        self.py.begin_function(f"{record.name}Create{self.py.make_camel(fld.name)}Vector", "builder, data")
        out.emit(f"builder.StartVector({size}, len(data), {alignment})")
        out.emit("for i in reversed(range(len(data))):")
        out.indent()
        out.emit(f"builder.Prepend{self.types.method_name(element)}(data[i])")
        out.dedent()
        out.emit("return builder.EndVector()")
        self.py.end_function()

    def missing_message(self, fld: Field) -> str:
        return f"{self.py.current_entity}: required field '{fld.name}' is missing"

    def emit_end(self, record: RecordType) -> None:
        out = self.py.out
        required = [f for f in record.live_fields() if f.required]
        self.py.begin_function(f"{record.name}End", "builder")
        out.emit("o = builder.EndObject()")
        if required:
            out.emit("tab = flatbuffers.table.Table(builder.Bytes, len(builder.Bytes) - o)")
        for fld in required:
            out.emit(f"if tab.Offset({fld.offset}) == 0:")
            out.indent()
            out.emit(f"raise RuntimeError({self.py.string_literal(self.missing_message(fld))})")
            out.dedent()
        out.emit("return o")
        self.py.end_function()

    def can_create(self, record: RecordType) -> bool:
        """A one-call constructor exists only for tables without inline structs."""
        live = record.live_fields()
        return bool(live) and not any(self.types.is_struct(f.type) for f in live)

    def create_order(self, record: RecordType) -> List[Field]:
        """
        Order in which Create<Record> adds fields.

        With sortbysize, fields are added largest first (8, 4, 2, then 1 bytes),
        which minimizes padding; within one size, declaration order is kept.
        """
        live = record.live_fields()
        if not record.sortbysize:
            return live
        ordered: List[Field] = []
        size = LARGEST_SCALAR_SIZE
        while size:
            ordered.extend(f for f in live if self.types.inline_size(f.type) == size)
            size //= 2
        return ordered

    def emit_create_table(self, record: RecordType) -> None:
        out = self.py.out
        live = record.live_fields()
        params = ["builder"] + [f"{self.add_param(f)}={self.types.default_literal_basic(f)}" for f in live]
        self.py.begin_function(f"Create{record.name}", ", ".join(params))
        out.emit(f"{record.name}Start(builder)")
        for fld in self.create_order(record):
            out.emit(f"{record.name}Add{self.py.make_camel(fld.name)}(builder, {self.add_param(fld)})")
        out.emit(f"return {record.name}End(builder)")
        self.py.end_function()

    def emit_finish(self, record: RecordType) -> None:
        self.py.begin_function(f"Finish{record.name}Buffer", "builder, offset")
        if record.file_identifier:
            ident = self.py.bytes_literal(record.file_identifier)
            self.py.out.emit(f"builder.Finish(offset, file_identifier={ident})")
        else:
            self.py.out.emit("builder.Finish(offset)")
        self.py.end_function()
