#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
import types
from pathlib import Path
from typing import List

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fbs_backend import Backend
from fbs_context import GenerationContext
from fbs_output import OutputUnit
from fbs_schema import (
    EnumRefType, EnumType, EnumVal, Field, RecordType, ScalarKind, ScalarType, Schema, StringType,
    StructRefType, UnionRefType, VectorType,
)

NAMESPACE = ("MyGame", "Example")


def scalar(kind: ScalarKind) -> ScalarType:
    return ScalarType(kind)


def table_fields(*fields: Field) -> List[Field]:
    """Assign vtable offsets (4 + 2 * slot) in declaration order."""
    for slot, f in enumerate(fields):
        f.offset = 4 + 2 * slot
    return list(fields)


def make_monster_schema() -> Schema:
    color = EnumType("Color", ScalarKind.INT8, [
        EnumVal("Red", 1), EnumVal("Green", 2), EnumVal("Blue", 8),
    ], namespace=NAMESPACE)
    any_union = EnumType("Any", ScalarKind.UINT8, [
        EnumVal("NONE", 0), EnumVal("Monster", 1),
    ], namespace=NAMESPACE, is_union=True)

    test = RecordType("Test", fixed=True, bytesize=4, minalign=2, namespace=NAMESPACE, fields=[
        Field("a", scalar(ScalarKind.INT16), offset=0),
        Field("b", scalar(ScalarKind.INT8), offset=2, padding=1),
    ])
    vec3 = RecordType("Vec3", fixed=True, bytesize=32, minalign=8, namespace=NAMESPACE, fields=[
        Field("x", scalar(ScalarKind.FLOAT32), offset=0),
        Field("y", scalar(ScalarKind.FLOAT32), offset=4),
        Field("z", scalar(ScalarKind.FLOAT32), offset=8, padding=4),
        Field("test1", scalar(ScalarKind.FLOAT64), offset=16),
        Field("test2", EnumRefType("Color"), offset=24, padding=1),
        Field("test3", StructRefType("Test"), offset=26, padding=2),
    ])
    stat = RecordType("Stat", fixed=False, has_key=True, namespace=NAMESPACE, fields=table_fields(
        Field("id", StringType()),
        Field("val", scalar(ScalarKind.INT64)),
        Field("count", scalar(ScalarKind.UINT16), key=True),
    ))
    monster = RecordType("Monster", fixed=False, is_root=True, file_identifier="MONS", namespace=NAMESPACE,
                         fields=table_fields(
                             Field("pos", StructRefType("Vec3")),
                             Field("mana", scalar(ScalarKind.INT16), default="150"),
                             Field("hp", scalar(ScalarKind.INT16), default="100"),
                             Field("name", StringType(), required=True),
                             Field("friendly", scalar(ScalarKind.BOOL), deprecated=True),
                             Field("inventory", VectorType(scalar(ScalarKind.UINT8))),
                             Field("color", EnumRefType("Color"), default="8"),
                             Field("test_type", EnumRefType("Any")),
                             Field("test", UnionRefType("Any")),
                             Field("scores", VectorType(StructRefType("Stat"))),
                             Field("testarrayofstring", VectorType(StringType())),
                             Field("enemy", StructRefType("Monster")),
                             Field("testnestedflatbuffer", VectorType(scalar(ScalarKind.UINT8)),
                                   nested_flatbuffer="Monster"),
                             Field("colors", VectorType(EnumRefType("Color"))),
                             Field("testbool", scalar(ScalarKind.BOOL), default="true"),
                             Field("path", VectorType(StructRefType("Vec3"))),
                         ))
    simple = RecordType("Simple", fixed=False, namespace=NAMESPACE, fields=table_fields(
        Field("a", scalar(ScalarKind.INT32)),
        Field("b", StringType()),
    ))
    sorted_table = RecordType("Sorted", fixed=False, sortbysize=True, namespace=NAMESPACE, fields=table_fields(
        Field("small", scalar(ScalarKind.UINT8)),
        Field("big", scalar(ScalarKind.INT64)),
        Field("mid", scalar(ScalarKind.INT32)),
        Field("half", scalar(ScalarKind.INT16)),
        Field("label", StringType()),
    ))
    return Schema(
        enums=[color, any_union],
        records=[test, vec3, stat, monster, simple, sorted_table],
        namespace=NAMESPACE,
    )


def make_registry_schema() -> Schema:
    named = RecordType("Named", fixed=False, has_key=True, fields=table_fields(
        Field("name", StringType(), key=True, required=True),
        Field("id", scalar(ScalarKind.INT32)),
    ))
    registry = RecordType("Registry", fixed=False, is_root=True, fields=table_fields(
        Field("entries", VectorType(StructRefType("Named"))),
    ))
    return Schema(records=[named, registry])


def exec_unit(unit: OutputUnit) -> types.ModuleType:
    """Execute generated source as a fresh module."""
    module = types.ModuleType(unit.module_name)
    exec(compile(unit.text, f"<{unit.module_name}>", "exec"), module.__dict__)
    return module


def generate_module(schema: Schema, **options) -> types.ModuleType:
    """Generate a schema in one-file mode and execute the result."""
    context = GenerationContext(one_file=True, **options)
    units = Backend(schema, context).generate()
    assert len(units) == 1
    return exec_unit(units[0])


@pytest.fixture
def monster_schema() -> Schema:
    return make_monster_schema()


@pytest.fixture
def registry_schema() -> Schema:
    return make_registry_schema()


@pytest.fixture
def monster_module(monster_schema: Schema) -> types.ModuleType:
    return generate_module(monster_schema)


@pytest.fixture
def mutable_monster_module(monster_schema: Schema) -> types.ModuleType:
    return generate_module(monster_schema, mutable_buffer=True)


@pytest.fixture
def monster_document() -> dict:
    """The JSON form of a small schema, as read by the loader and the CLI."""
    return {
        "namespace": "Demo",
        "enums": [
            {"name": "Kind", "underlying": "int8", "values": [{"name": "A", "value": 0}, {"name": "B", "value": 1}]},
        ],
        "records": [
            {"name": "Point", "fixed": True, "bytesize": 8, "minalign": 4, "fields": [
                {"name": "x", "type": "int32", "offset": 0},
                {"name": "y", "type": "int32", "offset": 4},
            ]},
            {"name": "Shape", "is_root": True, "file_identifier": "SHPE", "fields": [
                {"name": "kind", "type": {"base": "enum", "ref": "Kind"}, "offset": 4, "default": 1},
                {"name": "origin", "type": {"base": "struct", "ref": "Point"}, "offset": 6},
                {"name": "label", "type": "string", "offset": 8, "required": True},
                {"name": "weights", "type": {"base": "vector", "element": "float32"}, "offset": 10},
                {"name": "visible", "type": "bool", "offset": 12, "default": True},
            ]},
        ],
    }
