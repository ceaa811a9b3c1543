#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from fbs_internal_error import InternalGeneratorError
from fbs_py_emitter import PyEmitter
from fbs_schema import (
    EnumRefType, Field, ScalarKind, ScalarType, StringType, StructRefType, UnionRefType, VectorType,
)
from fbs_type_mapper import TypeMapper, parse_int_literal


@pytest.fixture
def types(monster_schema):
    return TypeMapper(PyEmitter(monster_schema))


def test_basic_name_maps_enums_to_underlying_kind(types):
    assert types.basic_name(ScalarType(ScalarKind.INT16)) == "Int16"
    assert types.basic_name(ScalarType(ScalarKind.BOOL)) == "Bool"
    assert types.basic_name(EnumRefType("Color")) == "Int8"
    assert types.basic_name(EnumRefType("Any")) == "Uint8"


def test_basic_name_of_non_scalar_is_ice(types):
    with pytest.raises(InternalGeneratorError) as exc:
        types.basic_name(StringType())
    assert "[ICE-1020]" in exc.value.format()


def test_flags_expression(types):
    assert types.flags(ScalarType(ScalarKind.FLOAT64)) == "flatbuffers.number_types.Float64Flags"


def test_pointer_and_type_get(types):
    assert types.pointer_name(StringType()) == "str"
    assert types.pointer_name(StructRefType("Vec3")) == "Vec3"
    assert types.pointer_name(UnionRefType("Any")) == "flatbuffers.table.Table"
    assert types.pointer_name(VectorType(StringType())) == "str"
    assert types.type_get(VectorType(EnumRefType("Color"))) == "Color"
    assert types.type_get(ScalarType(ScalarKind.FLOAT32)) == "float"
    assert types.type_get(ScalarType(ScalarKind.UINT64)) == "int"
    assert types.type_get(ScalarType(ScalarKind.BOOL)) == "bool"


def test_method_name(types):
    assert types.method_name(ScalarType(ScalarKind.UINT8)) == "Uint8"
    assert types.method_name(StructRefType("Vec3")) == "Struct"
    assert types.method_name(StructRefType("Monster")) == "UOffsetTRelative"
    assert types.method_name(StringType()) == "UOffsetTRelative"


def test_inline_size_and_alignment(types):
    assert types.inline_size(ScalarType(ScalarKind.INT64)) == 8
    assert types.inline_size(EnumRefType("Color")) == 1
    assert types.inline_size(StructRefType("Vec3")) == 32
    assert types.inline_size(StructRefType("Monster")) == 4
    assert types.inline_size(VectorType(StringType())) == 4
    assert types.inline_alignment(StructRefType("Vec3")) == 8


def test_casts_wrap_enums_only(types):
    assert types.destination_cast(EnumRefType("Color")) == "Color("
    assert types.destination_mask(EnumRefType("Color")) == ")"
    assert types.destination_cast(VectorType(EnumRefType("Color"))) == "Color("
    assert types.destination_cast(ScalarType(ScalarKind.INT32)) == ""
    assert types.destination_mask(ScalarType(ScalarKind.INT32)) == ""


def test_bool_defaults(types):
    assert types.default_literal(Field("f", ScalarType(ScalarKind.BOOL), default="0")) == "False"
    assert types.default_literal(Field("f", ScalarType(ScalarKind.BOOL), default="false")) == "False"
    assert types.default_literal(Field("f", ScalarType(ScalarKind.BOOL), default="1")) == "True"


def test_float_specials(types):
    assert types.default_literal(Field("f", ScalarType(ScalarKind.FLOAT32), default="inf")) == 'float("inf")'
    assert types.default_literal(Field("f", ScalarType(ScalarKind.FLOAT64), default="-inf")) == 'float("-inf")'
    assert types.default_literal(Field("f", ScalarType(ScalarKind.FLOAT64), default="nan")) == 'float("nan")'
    assert types.default_literal(Field("f", ScalarType(ScalarKind.FLOAT64), default="2.5")) == "2.5"
    assert types.default_literal(Field("f", ScalarType(ScalarKind.FLOAT32), default="0")) == "0.0"


def test_enum_default_renders_named_case(types):
    fld = Field("color", EnumRefType("Color"), default="8")
    assert types.default_literal(fld) == "Color.Blue"
    assert types.default_literal(fld, enable_overrides=False) == "8"


def test_enum_default_without_matching_case_keeps_raw_literal(types, capsys):
    fld = Field("color", EnumRefType("Color"), default="3")
    assert types.default_literal(fld) == "3"
    assert capsys.readouterr().err == "color: default 3 is not a value of 'Color'\n"


def test_default_literal_basic_is_zero_for_offsets(types):
    assert types.default_literal_basic(Field("name", StringType())) == "0"
    assert types.default_literal_basic(Field("hp", ScalarType(ScalarKind.INT16), default="100")) == "100"


def test_vector_absent_values(types):
    assert types.vector_absent_value(ScalarType(ScalarKind.BOOL)) == "False"
    assert types.vector_absent_value(ScalarType(ScalarKind.FLOAT32)) == "0.0"
    assert types.vector_absent_value(ScalarType(ScalarKind.INT32)) == "0"
    assert types.vector_absent_value(EnumRefType("Color")) == "0"
    assert types.vector_absent_value(StringType()) == "None"
    assert types.vector_absent_value(StructRefType("Stat")) == "None"


def test_unknown_record_is_ice(types):
    with pytest.raises(InternalGeneratorError) as exc:
        types.inline_size(StructRefType("Nope"))
    assert "[ICE-1011]" in exc.value.format()


def test_parse_int_literal():
    assert parse_int_literal("42") == 42
    assert parse_int_literal("-3") == -3
    assert parse_int_literal("0x10") == 16
    assert parse_int_literal("Blue") is None
