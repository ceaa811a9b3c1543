#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass

from fbs_py_emitter import PyEmitter
from fbs_schema import Field, RecordType, StringType, format_type, is_scalar, key_field
from fbs_type_mapper import TypeMapper


@dataclass
class KeyLookupEmitter:
    """
    Emits the two halves of keyed vectors of tables:
    sorting offsets by key before the vector is written, and binary search
    over a written, sorted vector.
    """
    py: PyEmitter
    types: TypeMapper

    def key_of(self, record: RecordType) -> Field:
        key = key_field(record)
        if key is None:
            self.py.ice("[ICE-1410] record marked as keyed has no key field")
        if not (is_scalar(key.type) or isinstance(key.type, StringType)):
            self.py.ice(f"[ICE-1411] key field of type '{format_type(key.type)}'", key.name)
        return key

    def emit_sorted_vector(self, record: RecordType) -> None:
        """
        Emit CreateSortedVectorOf<Record>(builder, offsets).

        The offsets must be finished tables of the builder; they are ordered by
        key (raw bytes for strings, numeric otherwise) and then written as a
        vector of offsets.
        """
        key = self.key_of(record)
        out = self.py.out
        self.py.begin_function(f"CreateSortedVectorOf{record.name}", "builder, offsets")
        out.emit("def key(o):")
        out.indent()
        out.emit("tab = flatbuffers.table.Table(builder.Bytes, len(builder.Bytes) - o)")
        out.emit(f"k = tab.Offset({key.offset})")
        out.emit("if k != 0:")
        out.indent()
        if isinstance(key.type, StringType):
            out.emit("return tab.String(k + tab.Pos)")
        else:
            out.emit(f"return tab.Get({self.types.flags(key.type)}, k + tab.Pos)")
        out.dedent()
        if isinstance(key.type, StringType):
            out.emit('return b""')
        else:
            out.emit(f"return {self.types.default_literal(key, enable_overrides=False)}")
        out.dedent()
        out.emit()
        out.emit("offsets = sorted(offsets, key=key)")
        out.emit("builder.StartVector(4, len(offsets), 4)")
        out.emit("for o in reversed(offsets):")
        out.indent()
        out.emit("builder.PrependUOffsetTRelative(o)")
        out.dedent()
        out.emit("return builder.EndVector()")
        self.py.end_function()

    def emit_lookup_method(self, record: RecordType) -> None:
        """
        Emit <Record>.LookupByKey(buf, vectorLocation, key).

        vectorLocation is the absolute position of the vector's length prefix.
        Each probe follows one offset from the vector slot to the candidate
        table before reading its key.
        """
        key = self.key_of(record)
        out = self.py.out
        self.py.begin_method("LookupByKey", "buf, vectorLocation, key", is_classmethod=True)
        if isinstance(key.type, StringType):
            out.emit("if isinstance(key, str):")
            out.indent()
            out.emit('key = key.encode("utf-8")')
            out.dedent()
        out.emit("span = flatbuffers.encode.Get(flatbuffers.packer.uoffset, buf, vectorLocation)")
        out.emit("start = 0")
        out.emit("vectorLocation += 4")
        out.emit("while span != 0:")
        out.indent()
        out.emit("middle = span // 2")
        out.emit("tableOffset = vectorLocation + 4 * (start + middle)")
        out.emit("tableOffset += flatbuffers.encode.Get(flatbuffers.packer.uoffset, buf, tableOffset)")
        out.emit("obj = cls()")
        out.emit("obj.Init(buf, tableOffset)")
        if isinstance(key.type, StringType):
            out.emit(f'val = obj.{self.py.bytes_accessor_name(key.name)}() or b""')
        else:
            out.emit(f"val = obj.{self.py.accessor_name(key.name)}()")
        out.emit("comp = (val > key) - (val < key)")
        out.emit("if comp > 0:")
        out.indent()
        out.emit("span = middle")
        out.dedent()
        out.emit("elif comp < 0:")
        out.indent()
        out.emit("middle += 1")
        out.emit("start += middle")
        out.emit("span -= middle")
        out.dedent()
        out.emit("else:")
        out.indent()
        out.emit("return obj")
        out.dedent()
        out.dedent()
        out.emit("return None")
        self.py.end_method()

    def emit_by_key_accessor(self, fld: Field, element: RecordType) -> None:
        """Emit <Field>ByKey(key) on a table holding a sorted vector of keyed tables."""
        out = self.py.out
        self.py.begin_method(f"{self.py.accessor_name(fld.name)}ByKey", "key")
        out.emit(f"o = self._tab.Offset({fld.offset})")
        out.emit("if o != 0:")
        out.indent()
        cls = self.py.record_ref(element)
        out.emit(f"return {cls}.LookupByKey(self._tab.Bytes, self._tab.Vector(o) - 4, key)")
        out.dedent()
        out.emit("return None")
        self.py.end_method()
