#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import importlib
import sys
from pathlib import Path

import flatbuffers
import pytest

from fbs_backend import Backend
from fbs_context import GenerationContext
from fbs_py_emitter import GENERATED_WARNING
from fbs_schema import EnumType, EnumVal, ScalarKind, Schema


def test_per_type_units_follow_declaration_order(monster_schema):
    units = Backend(monster_schema).generate()
    assert [u.logical_name for u in units] == [
        "Color", "Any", "Test", "Vec3", "Stat", "Monster", "Simple", "Sorted",
    ]
    assert all(u.namespace_path == ("MyGame", "Example") for u in units)
    assert units[0].relative_path() == Path("MyGame", "Example", "Color.py")
    assert units[0].module_name == "MyGame.Example.Color"


def test_per_type_headers(monster_schema):
    units = {u.logical_name: u for u in Backend(monster_schema).generate()}
    color = units["Color"].text
    monster = units["Monster"].text

    assert color.startswith(f"# {GENERATED_WARNING}\n\n# namespace: MyGame.Example\n\nimport enum\n")
    assert "import flatbuffers" not in color
    assert "import flatbuffers\n" in monster
    assert "from MyGame.Example.Color import Color\n" in monster
    assert "from MyGame.Example.Any import Any\n" in monster
    # records are imported where they are used, never at module level
    assert "\nfrom MyGame.Example.Vec3 import Vec3" not in monster
    assert "        from MyGame.Example.Vec3 import Vec3" in monster
    # a record never imports itself
    assert "from MyGame.Example.Monster import Monster" not in monster
    assert "from MyGame.Example.Color import Color" not in units["Simple"].text


def test_one_file_merges_everything(monster_schema):
    context = GenerationContext(one_file=True, file_name="monster_generated")
    units = Backend(monster_schema, context).generate()
    assert len(units) == 1
    unit = units[0]
    assert unit.logical_name == "monster_generated"
    assert unit.namespace_path == ("MyGame", "Example")
    assert unit.text.count(f"# {GENERATED_WARNING}") == 1
    assert unit.text.index("class Color(enum.IntEnum):") < unit.text.index("class Monster(object):")
    assert " import " not in unit.text.replace("import enum", "").replace("import flatbuffers", "")


def test_generation_is_idempotent(monster_schema):
    first = Backend(monster_schema).generate()
    second = Backend(monster_schema).generate()
    assert first == second
    backend = Backend(monster_schema, GenerationContext(one_file=True))
    assert backend.generate() == backend.generate()


def test_generated_entities_are_skipped(monster_schema):
    monster_schema.lookup_enum("Any").generated = True
    monster_schema.lookup_record("Stat").generated = True
    names = [u.logical_name for u in Backend(monster_schema).generate()]
    assert "Any" not in names
    assert "Stat" not in names
    assert "Monster" in names


def test_empty_schema_emits_nothing():
    assert Backend(Schema()).generate() == []
    assert Backend(Schema(), GenerationContext(one_file=True)).generate() == []


def test_fully_generated_schema_emits_nothing():
    enum_def = EnumType("Done", ScalarKind.UINT8, [EnumVal("A", 0)], generated=True)
    assert Backend(Schema(enums=[enum_def]), GenerationContext(one_file=True)).generate() == []


def test_verbose_logging_goes_to_stderr(monster_schema, capsys):
    from fbs_context import LogLevel
    Backend(monster_schema, GenerationContext(log_level=LogLevel.DEBUG)).generate()
    err = capsys.readouterr().err
    assert "Emitting table 'Monster'" in err
    assert "Emitting enum 'Color'" in err


@pytest.fixture
def per_type_package(monster_schema, tmp_path, monkeypatch):
    for unit in Backend(monster_schema).generate():
        path = tmp_path / unit.relative_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(unit.text, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    yield
    for name in [n for n in sys.modules if n == "MyGame" or n.startswith("MyGame.")]:
        del sys.modules[name]


def test_per_type_modules_import_and_round_trip(per_type_package):
    monster_mod = importlib.import_module("MyGame.Example.Monster")
    vec3_mod = importlib.import_module("MyGame.Example.Vec3")
    color_mod = importlib.import_module("MyGame.Example.Color")

    builder = flatbuffers.Builder(0)
    name = builder.CreateString("Split")
    monster_mod.MonsterStart(builder)
    monster_mod.MonsterAddPos(builder, vec3_mod.CreateVec3(builder, 1.0, 2.0, 3.0, 0.0, color_mod.Color.Red, 1, 2))
    monster_mod.MonsterAddName(builder, name)
    monster_mod.FinishMonsterBuffer(builder, monster_mod.MonsterEnd(builder))

    mon = monster_mod.Monster.GetRootAs(builder.Output(), 0)
    assert mon.Name() == "Split"
    assert mon.Color() is color_mod.Color.Blue
    assert mon.Pos().Y() == 2.0
    assert mon.Pos().Test3().B() == 2
