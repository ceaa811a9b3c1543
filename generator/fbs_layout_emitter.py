#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List

from fbs_py_emitter import PyEmitter
from fbs_schema import RecordType, StructRefType, format_type, is_scalar
from fbs_type_mapper import TypeMapper


@dataclass
class LayoutEmitter:
    """
    Flattens a struct (and every struct nested in it) into one linear
    sequence of primitive builder writes.
    """
    py: PyEmitter
    types: TypeMapper

    def struct_args(self, record: RecordType, prefix: str = "") -> List[str]:
        """
        Constructor parameters in forward declaration order.

        Fields of a nested struct are prefixed with the parent field's name, so
        'test3.a' becomes 'test3_a'.
        """
        args: List[str] = []
        for fld in record.fields:
            if isinstance(fld.type, StructRefType):
                nested = self._nested_struct(record, fld)
                args.extend(self.struct_args(nested, prefix + fld.name + "_"))
            elif is_scalar(fld.type):
                args.append(self.py.param_name(fld.name, prefix))
            else:
                self.py.ice(f"[ICE-1210] struct field of type '{format_type(fld.type)}'", fld.name)
        return args

    def emit_create_struct(self, record: RecordType) -> None:
        """Emit Create<Struct>(builder, ...), returning the struct's offset."""
        args = self.struct_args(record)
        self.py.begin_function(f"Create{record.name}", ", ".join(["builder"] + args))
        self.emit_struct_body(record)
        self.py.out.emit("return builder.Offset()")
        self.py.end_function()

    def emit_struct_body(self, record: RecordType, prefix: str = "", *, outermost: bool = True) -> None:
        """
        Emit the writes for one struct.

        The buffer grows from high addresses to low, so:
          1. the outermost call reserves bytesize bytes aligned to minalign,
             nested structs write into that reservation without reserving again;
          2. fields are written in REVERSE declaration order;
          3. a field's trailing padding is written before the field itself,
             which places it after the field in forward layout.
        """
        out = self.py.out
        if outermost:
            out.emit(f"builder.Prep({record.minalign}, {record.bytesize})")
        for fld in reversed(record.fields):
            if fld.padding:
                out.emit(f"builder.Pad({fld.padding})")
            if isinstance(fld.type, StructRefType):
                nested = self._nested_struct(record, fld)
                self.emit_struct_body(nested, prefix + fld.name + "_", outermost=False)
            elif is_scalar(fld.type):
                out.emit(f"builder.Prepend{self.types.basic_name(fld.type)}({self.py.param_name(fld.name, prefix)})")
            else:
                self.py.ice(f"[ICE-1211] struct field of type '{format_type(fld.type)}'", fld.name)

    def _nested_struct(self, record: RecordType, fld) -> RecordType:
        nested = self.types.record_of(fld.type)
        if not nested.fixed:
            self.py.ice(f"[ICE-1212] table '{nested.name}' nested inline in struct '{record.name}'", fld.name)
        return nested
