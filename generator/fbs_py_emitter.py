"""
Python Code Emitter

Handles Python-specific code emission. Knows how to emit Python syntax, but not why or when.
All decisions about which entities and members to emit live in the component
emitters and the Backend.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import keyword
from dataclasses import dataclass, field
from typing import List, NoReturn, Optional, Set, Tuple

from fbs_context import GenerationContext
from fbs_internal_error import ICELocation, InternalGeneratorError
from fbs_schema import EnumType, RecordType, Schema

GENERATED_WARNING = "automatically generated by fbsgen, do not modify"


@dataclass
class PyCodeBuilder:
    """
    Helper for building Python code with indentation tracking.
    """
    lines: List[str] = field(default_factory=list)
    indent_level: int = 0
    indent_str: str = "    "  # 4 spaces

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        assert self.indent_level > 0, "dedent below zero"
        self.indent_level -= 1

    def emit(self, line: str = "") -> None:
        """Emit a line with current indentation."""
        if line:
            self.lines.append(self.indent_str * self.indent_level + line)
        else:
            self.lines.append("")

    def to_string(self) -> str:
        return "\n".join(self.lines)


@dataclass
class PyEmitter:
    """
    Python-specific code emitter shared by all component emitters.

    Responsibilities:
    - Emit Python syntax (blocks, functions, classes, imports)
    - Name mangling for Python (keywords, accessor name clashes)
    - Cross-unit references (imports between per-type output units)

    Does NOT:
    - Decide which members a record gets
    - Perform any layout computation (the IR carries offsets and sizes)
    """

    schema: Schema
    context: GenerationContext = field(default_factory=GenerationContext.default)

    # Python keywords plus the parameter name every builder function takes
    RESERVED_IDENTIFIERS: Set[str] = field(default_factory=lambda: set(keyword.kwlist) | {"builder"})

    # Method names the accessor classes define themselves
    RESERVED_METHODS: Set[str] = field(default_factory=lambda: {
        "Init", "GetRootAs", "SizeOf", "LookupByKey",
    })

    # Output builder for the fragment being generated
    out: PyCodeBuilder = field(default_factory=PyCodeBuilder)

    # Entity being generated, for ICE locations and self references
    current_entity: Optional[str] = None

    def ice(self, message: str, field_name: Optional[str] = None) -> NoReturn:
        """Raise an internal generator error with context."""
        raise InternalGeneratorError(message, ICELocation(entity=self.current_entity, field=field_name))

    # ============================================================================
    # Fragments
    # ============================================================================

    def begin_fragment(self, entity_name: str) -> None:
        self.out = PyCodeBuilder()
        self.current_entity = entity_name

    def take_fragment(self) -> str:
        text = self.out.to_string()
        self.out = PyCodeBuilder()
        self.current_entity = None
        return text

    # ============================================================================
    # Name Mangling (Python-specific)
    # ============================================================================

    @staticmethod
    def make_camel(name: str, first_upper: bool = True) -> str:
        """
        Convert a schema identifier to camel case.

        Underscores are dropped and the following character upper-cased.
        The first character is upper-cased only when first_upper is set.
        """
        chars = []
        i = 0
        while i < len(name):
            c = name[i]
            if i == 0 and first_upper:
                chars.append(c.upper())
            elif c == "_" and i + 1 < len(name):
                i += 1
                chars.append(name[i].upper())
            else:
                chars.append(c)
            i += 1
        return "".join(chars)

    def mangle_identifier(self, name: str) -> str:
        """
        Mangle an identifier used as a parameter, enum case or local name.

        Appends '_' to Python keywords and to names clashing with generated parameters.
        """
        if name in self.RESERVED_IDENTIFIERS:
            return f"{name}_"
        return name

    def accessor_name(self, field_name: str) -> str:
        """Method name of a field accessor (e.g. 'test_type' -> 'TestType')."""
        name = self.make_camel(field_name)
        if name in self.RESERVED_METHODS:
            return f"{name}_"
        return name

    def bytes_accessor_name(self, field_name: str) -> str:
        """Method name of the raw byte accessor of a string or scalar vector."""
        return f"{self.make_camel(field_name)}Bytes"

    def param_name(self, field_name: str, prefix: str = "") -> str:
        """Parameter name for a field value (e.g. 'test_type' -> 'testType')."""
        return self.mangle_identifier(prefix + self.make_camel(field_name, False))

    # ============================================================================
    # Cross-unit references
    # ============================================================================

    def module_path(self, name: str, namespace: Tuple[str, ...]) -> str:
        return ".".join(tuple(namespace) + (name,))

    def record_ref(self, record: RecordType) -> str:
        """
        Reference a record class from inside a method body.

        Per-type units import the referenced unit lazily, at the point of use,
        so that mutually referencing records never form an import cycle.
        """
        if not self.context.one_file and record.name != self.current_entity:
            self.out.emit(f"from {self.module_path(record.name, record.namespace)} import {record.name}")
        return record.name

    def enum_import_lines(self, enums: List[EnumType], unit_name: str) -> List[str]:
        """Eager module-level imports for enums referenced by a per-type unit."""
        if self.context.one_file:
            return []
        return [
            f"from {self.module_path(e.name, e.namespace)} import {e.name}"
            for e in enums
            if e.name != unit_name
        ]

    # ============================================================================
    # Top-Level Structure Emission
    # ============================================================================

    def emit_header(self, out: PyCodeBuilder, namespace: Tuple[str, ...], *,
                    needs_enum: bool, needs_runtime: bool, imports: List[str]) -> None:
        """Emit file header boilerplate."""
        out.emit(f"# {GENERATED_WARNING}")
        out.emit()
        if namespace:
            out.emit(f"# namespace: {'.'.join(namespace)}")
            out.emit()
        if needs_enum:
            out.emit("import enum")
            out.emit()
        if needs_runtime:
            out.emit("import flatbuffers")
            out.emit()
        if imports:
            for line in imports:
                out.emit(line)
            out.emit()

    def begin_class(self, name: str, base: str = "object") -> None:
        self.out.emit()
        self.out.emit()
        self.out.emit(f"class {name}({base}):")
        self.out.indent()

    def end_class(self) -> None:
        self.out.dedent()

    def begin_method(self, name: str, params: str = "", *, is_classmethod: bool = False) -> None:
        self.out.emit()
        if is_classmethod:
            self.out.emit("@classmethod")
            self.out.emit(f"def {name}(cls{', ' + params if params else ''}):")
        else:
            self.out.emit(f"def {name}(self{', ' + params if params else ''}):")
        self.out.indent()

    def end_method(self) -> None:
        self.out.dedent()

    def begin_function(self, name: str, params: str) -> None:
        self.out.emit()
        self.out.emit()
        self.out.emit(f"def {name}({params}):")
        self.out.indent()

    def end_function(self) -> None:
        self.out.dedent()

    def emit_docstring(self, text: str) -> None:
        self.out.emit(f'"""{text}"""')

    @staticmethod
    def string_literal(value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def bytes_literal(value: str) -> str:
        data = value.encode("utf-8")
        return "b\"" + "".join(chr(b) if 32 <= b < 127 and chr(b) not in "\\\"" else f"\\x{b:02x}" for b in data) + "\""
