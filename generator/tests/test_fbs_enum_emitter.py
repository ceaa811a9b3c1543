#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import generate_module

from fbs_enum_emitter import EnumEmitter
from fbs_py_emitter import PyEmitter
from fbs_schema import EnumType, EnumVal, ScalarKind, Schema


def _enum(*values) -> EnumType:
    return EnumType("E", ScalarKind.INT32, [EnumVal(f"V{v}", v) for v in values])


def _name_table(enum_def: EnumType):
    return EnumEmitter(PyEmitter(Schema(enums=[enum_def]))).name_table(enum_def)


def test_dense_enum_keeps_name_table():
    assert _name_table(_enum(0, 1, 2, 3, 4)) == ["V0", "V1", "V2", "V3", "V4"]


def test_sparse_enum_omits_name_table():
    assert _name_table(_enum(0, 100)) is None


def test_density_boundary_is_strict():
    # range 10 over 2 values: density 5, omitted
    assert _name_table(_enum(0, 9)) is None
    # range 9 over 2 values: density 4, kept
    assert _name_table(_enum(0, 8)) == ["V0", "", "", "", "", "", "", "", "V8"]


def test_empty_enum_has_no_name_table():
    assert _name_table(_enum()) is None


def test_generated_enum_values_and_names(monster_module):
    Color = monster_module.Color
    assert Color.Red == 1
    assert Color.Green == 2
    assert Color.Blue == 8
    assert monster_module.ColorNames[0] == "Red"
    assert monster_module.ColorNames[2] == ""
    assert monster_module.ColorName(Color.Blue) == "Blue"
    assert monster_module.ColorName(Color.Green) == "Green"


def test_zero_based_enum_indexes_directly(monster_module):
    assert monster_module.AnyName(monster_module.Any.Monster) == "Monster"
    assert monster_module.AnyName(0) == "NONE"


def test_keywords_are_mangled_in_generated_enum():
    enum_def = EnumType("Maybe", ScalarKind.UINT8, [EnumVal("None", 0), EnumVal("Some", 1)])
    module = generate_module(Schema(enums=[enum_def]))
    assert module.Maybe.None_ == 0
    assert module.Maybe.Some == 1
    assert module.MaybeName(module.Maybe.Some) == "Some"


def test_sparse_enum_generates_class_only():
    module = generate_module(Schema(enums=[_enum(0, 100)]))
    assert module.E.V100 == 100
    assert not hasattr(module, "ENames")
    assert not hasattr(module, "EName")
