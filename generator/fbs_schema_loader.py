"""
Schema IR loader.

Reads the JSON form of a fully-resolved schema into the dataclasses of
fbs_schema. Nothing is computed here: offsets, sizes, alignment and paddings
are taken as given.

Document shape:

    {
      "namespace": "MyGame.Example",
      "enums": [
        {"name": "Color", "underlying": "uint8",
         "values": [{"name": "Red", "value": 1}, ...]},
        {"name": "Any", "underlying": "uint8", "is_union": true, "values": [...]}
      ],
      "records": [
        {"name": "Vec3", "fixed": true, "bytesize": 12, "minalign": 4,
         "fields": [{"name": "x", "type": "float32", "offset": 0}, ...]},
        {"name": "Monster", "fixed": false, "is_root": true, "file_identifier": "MONS",
         "fields": [{"name": "pos", "type": {"base": "struct", "ref": "Vec3"}, "offset": 4},
                    {"name": "inventory", "type": {"base": "vector", "element": "uint8"}, "offset": 14}]}
      ]
    }

A type is either a string ("int16", "string") or an object with a "base" of
scalar, string, enum, struct, union or vector.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from fbs_diagnostics import Diagnostic, SchemaLoadError
from fbs_schema import (
    SCALAR_KINDS_BY_NAME, EnumRefType, EnumType, EnumVal, Field, FieldType, RecordType, ScalarKind, ScalarType,
    Schema, StringType, StructRefType, UnionRefType, VectorType,
)


class SchemaLoader:
    """Converts one JSON document into a Schema, reporting the first defect found."""

    def __init__(self, filename: Optional[str] = None):
        self.filename = filename

    def error(self, message: str, path: Optional[str] = None) -> SchemaLoadError:
        return SchemaLoadError(Diagnostic(kind="error", message=message, filename=self.filename, path=path))

    # ============================================================================
    # Entry points
    # ============================================================================

    def load_text(self, text: str) -> Schema:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise self.error(f"[SCH-0010] invalid JSON: {e.msg} at line {e.lineno}, column {e.colno}") from e
        return self.load(document)

    def load(self, document: Any) -> Schema:
        if not isinstance(document, dict):
            raise self.error("[SCH-0020] schema document must be a JSON object")
        namespace = self.namespace(document.get("namespace"), "namespace")
        enums = [
            self.load_enum(e, f"enums[{i}]", namespace)
            for i, e in enumerate(self.optional(document, "enums", list, [], ""))
        ]
        records = [
            self.load_record(r, f"records[{i}]", namespace)
            for i, r in enumerate(self.optional(document, "records", list, [], ""))
        ]
        schema = Schema(enums=enums, records=records, namespace=namespace)
        self.check_references(schema)
        return schema

    # ============================================================================
    # Field access helpers
    # ============================================================================

    def required(self, obj: Dict[str, Any], key: str, expected: type, path: str) -> Any:
        if not isinstance(obj, dict):
            raise self.error("[SCH-0060] expected a JSON object", path)
        if key not in obj:
            raise self.error(f"[SCH-0030] missing key '{key}'", path)
        return self.checked(obj[key], expected, f"{path}.{key}" if path else key)

    def optional(self, obj: Dict[str, Any], key: str, expected: type, default: Any, path: str) -> Any:
        if key not in obj or obj[key] is None:
            return default
        return self.checked(obj[key], expected, f"{path}.{key}" if path else key)

    def checked(self, value: Any, expected: type, path: str) -> Any:
        # bool is a subclass of int; an int-typed key never accepts true/false.
        if expected is int and isinstance(value, bool):
            raise self.error("[SCH-0060] expected an integer, got a boolean", path)
        if not isinstance(value, expected):
            raise self.error(f"[SCH-0060] expected {expected.__name__}, got {type(value).__name__}", path)
        return value

    def namespace(self, value: Any, path: str) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, str):
            return tuple(value.split("."))
        if isinstance(value, list) and all(isinstance(part, str) for part in value):
            return tuple(value)
        raise self.error("[SCH-0060] namespace must be a dotted string or a list of strings", path)

    # ============================================================================
    # Entities
    # ============================================================================

    def scalar_kind(self, name: str, path: str) -> ScalarKind:
        kind = SCALAR_KINDS_BY_NAME.get(name.lower())
        if kind is None:
            raise self.error(f"[SCH-0040] unknown scalar kind '{name}'", path)
        return kind

    def load_enum(self, obj: Any, path: str, schema_ns: Tuple[str, ...]) -> EnumType:
        name = self.required(obj, "name", str, path)
        underlying = self.scalar_kind(self.optional(obj, "underlying", str, "uint8", path), f"{path}.underlying")
        values: List[EnumVal] = []
        for i, v in enumerate(self.required(obj, "values", list, path)):
            vpath = f"{path}.values[{i}]"
            values.append(EnumVal(self.required(v, "name", str, vpath), self.required(v, "value", int, vpath)))
        ns = obj.get("namespace")
        return EnumType(
            name=name,
            underlying=underlying,
            values=values,
            namespace=schema_ns if ns is None else self.namespace(ns, f"{path}.namespace"),
            is_union=self.optional(obj, "is_union", bool, False, path),
            generated=self.optional(obj, "generated", bool, False, path),
        )

    def load_record(self, obj: Any, path: str, schema_ns: Tuple[str, ...]) -> RecordType:
        name = self.required(obj, "name", str, path)
        fields = [
            self.load_field(f, f"{path}.fields[{i}]")
            for i, f in enumerate(self.required(obj, "fields", list, path))
        ]
        ns = obj.get("namespace")
        return RecordType(
            name=name,
            fixed=self.optional(obj, "fixed", bool, False, path),
            fields=fields,
            bytesize=self.optional(obj, "bytesize", int, 0, path),
            minalign=self.optional(obj, "minalign", int, 1, path),
            sortbysize=self.optional(obj, "sortbysize", bool, False, path),
            has_key=self.optional(obj, "has_key", bool, any(f.key for f in fields), path),
            is_root=self.optional(obj, "is_root", bool, False, path),
            file_identifier=self.optional(obj, "file_identifier", str, None, path),
            namespace=schema_ns if ns is None else self.namespace(ns, f"{path}.namespace"),
            generated=self.optional(obj, "generated", bool, False, path),
        )

    def load_field(self, obj: Any, path: str) -> Field:
        name = self.required(obj, "name", str, path)
        if "type" not in obj:
            raise self.error("[SCH-0030] missing key 'type'", path)
        return Field(
            name=name,
            type=self.load_type(obj["type"], f"{path}.type"),
            offset=self.optional(obj, "offset", int, 0, path),
            default=self.default_text(obj.get("default"), f"{path}.default"),
            required=self.optional(obj, "required", bool, False, path),
            deprecated=self.optional(obj, "deprecated", bool, False, path),
            key=self.optional(obj, "key", bool, False, path),
            padding=self.optional(obj, "padding", int, 0, path),
            nested_flatbuffer=self.optional(obj, "nested_flatbuffer", str, None, path),
        )

    def default_text(self, value: Any, path: str) -> str:
        """Defaults may be written as JSON numbers, booleans or strings; the IR keeps the literal text."""
        if value is None:
            return "0"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, str)):
            return str(value)
        raise self.error("[SCH-0060] default must be a number, boolean or string", path)

    def load_type(self, value: Any, path: str) -> FieldType:
        if isinstance(value, str):
            if value == "string":
                return StringType()
            return ScalarType(self.scalar_kind(value, path))
        if not isinstance(value, dict):
            raise self.error("[SCH-0060] type must be a string or an object", path)

        base = self.required(value, "base", str, path)
        if base == "scalar":
            return ScalarType(self.scalar_kind(self.required(value, "kind", str, path), f"{path}.kind"))
        elif base == "string":
            return StringType()
        elif base == "enum":
            return EnumRefType(self.required(value, "ref", str, path))
        elif base == "struct":
            return StructRefType(self.required(value, "ref", str, path))
        elif base == "union":
            return UnionRefType(self.required(value, "ref", str, path))
        elif base == "vector":
            if "element" not in value:
                raise self.error("[SCH-0030] missing key 'element'", path)
            return VectorType(self.load_type(value["element"], f"{path}.element"))
        else:
            raise self.error(f"[SCH-0050] unknown type base '{base}'", path)

    # ============================================================================
    # Cross-references
    # ============================================================================

    def check_references(self, schema: Schema) -> None:
        for ri, record in enumerate(schema.records):
            for fi, fld in enumerate(record.fields):
                path = f"records[{ri}].fields[{fi}]"
                self.check_type(schema, fld.type, f"{path}.type")
                if fld.nested_flatbuffer is not None and schema.lookup_record(fld.nested_flatbuffer) is None:
                    raise self.error(
                        f"[SCH-0070] nested flatbuffer root '{fld.nested_flatbuffer}' is not declared", path
                    )

    def check_type(self, schema: Schema, t: FieldType, path: str) -> None:
        if isinstance(t, VectorType):
            self.check_type(schema, t.element, f"{path}.element")
        elif isinstance(t, EnumRefType):
            if schema.lookup_enum(t.name) is None:
                raise self.error(f"[SCH-0070] enum '{t.name}' is not declared", path)
        elif isinstance(t, UnionRefType):
            enum_def = schema.lookup_enum(t.name)
            if enum_def is None or not enum_def.is_union:
                raise self.error(f"[SCH-0070] union '{t.name}' is not declared", path)
        elif isinstance(t, StructRefType):
            if schema.lookup_record(t.name) is None:
                raise self.error(f"[SCH-0070] record '{t.name}' is not declared", path)


def load_schema(document: Any, filename: Optional[str] = None) -> Schema:
    """Load an already-decoded JSON document."""
    return SchemaLoader(filename).load(document)


def load_schema_file(path: Path) -> Schema:
    """Read and load a schema IR file. OSError propagates to the caller."""
    text = Path(path).read_text(encoding="utf-8")
    return SchemaLoader(str(path)).load_text(text)
