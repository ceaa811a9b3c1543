"""
FlatBuffers Python Code Generation Backend

Orchestrates accessor generation for a fully-resolved schema.

The backend decides WHAT is emitted and in WHICH output unit; the component
emitters decide HOW each entity is written out as Python.

Responsibilities:
- Walk enums and records in declaration order, skipping already-generated ones
- Split the output into one unit per type, or merge it into a single unit
- Compose each unit's header (imports) from what its body references
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fbs_context import GenerationContext
from fbs_enum_emitter import EnumEmitter
from fbs_key_lookup_emitter import KeyLookupEmitter
from fbs_layout_emitter import LayoutEmitter
from fbs_logger import log_debug, log_stage
from fbs_output import OutputUnit
from fbs_py_emitter import PyCodeBuilder, PyEmitter
from fbs_schema import EnumType, RecordType, Schema
from fbs_table_emitter import TableEmitter
from fbs_type_mapper import TypeMapper


@dataclass
class Backend:
    """
    Target-independent orchestration of the generator.

    generate() is a pure function of (schema, context): repeated calls return
    identical units.
    """

    schema: Schema
    context: GenerationContext = field(default_factory=GenerationContext.default)

    py: PyEmitter = field(init=False)
    types: TypeMapper = field(init=False)
    enums: EnumEmitter = field(init=False)
    tables: TableEmitter = field(init=False)

    def __post_init__(self):
        self.py = PyEmitter(self.schema, self.context)
        self.types = TypeMapper(self.py)
        self.enums = EnumEmitter(self.py)
        self.tables = TableEmitter(
            self.py,
            self.types,
            LayoutEmitter(self.py, self.types),
            KeyLookupEmitter(self.py, self.types),
        )

    def generate(self) -> List[OutputUnit]:
        """
        Main entry point: generate every output unit for the schema.

        Units appear in declaration order (enums first, then records). Entities
        marked as generated are skipped, and a unit with an empty body is never
        returned.
        """
        log_stage(self.context, "Generating Python accessors")

        enum_fragments: List[Tuple[EnumType, str]] = []
        for enum_def in self.schema.enums:
            if enum_def.generated:
                log_debug(self.context, f"Skipping already generated enum '{enum_def.name}'")
                continue
            log_stage(self.context, "Emitting enum", enum_def.name)
            self.py.begin_fragment(enum_def.name)
            self.enums.emit_enum(enum_def)
            enum_fragments.append((enum_def, self.py.take_fragment()))

        record_fragments: List[Tuple[RecordType, str]] = []
        for record in self.schema.records:
            if record.generated:
                log_debug(self.context, f"Skipping already generated record '{record.name}'")
                continue
            log_stage(self.context, "Emitting struct" if record.fixed else "Emitting table", record.name)
            self.py.begin_fragment(record.name)
            self.tables.emit_record(record)
            record_fragments.append((record, self.py.take_fragment()))

        if self.context.one_file:
            units = self._merged_unit(enum_fragments, record_fragments)
        else:
            units = self._per_type_units(enum_fragments, record_fragments)
        log_debug(self.context, f"Generated {len(units)} output unit(s)")
        return units

    def _per_type_units(self, enum_fragments: List[Tuple[EnumType, str]],
                        record_fragments: List[Tuple[RecordType, str]]) -> List[OutputUnit]:
        units: List[OutputUnit] = []
        for enum_def, body in enum_fragments:
            unit = self._compose(enum_def.name, enum_def.namespace, [body],
                                 needs_enum=True, needs_runtime=False, imports=[])
            if unit is not None:
                units.append(unit)
        for record, body in record_fragments:
            imports = self.py.enum_import_lines(self.tables.referenced_enums(record), record.name)
            unit = self._compose(record.name, record.namespace, [body],
                                 needs_enum=False, needs_runtime=True, imports=imports)
            if unit is not None:
                units.append(unit)
        return units

    def _merged_unit(self, enum_fragments: List[Tuple[EnumType, str]],
                     record_fragments: List[Tuple[RecordType, str]]) -> List[OutputUnit]:
        bodies = [body for _, body in enum_fragments] + [body for _, body in record_fragments]
        unit = self._compose(self.context.file_name, self.schema.namespace, bodies,
                             needs_enum=bool(enum_fragments), needs_runtime=bool(record_fragments), imports=[])
        return [unit] if unit is not None else []

    def _compose(self, name: str, namespace: Tuple[str, ...], bodies: List[str], *,
                 needs_enum: bool, needs_runtime: bool, imports: List[str]) -> Optional[OutputUnit]:
        """Join header and bodies into one unit; None when there is nothing to emit."""
        bodies = [b.strip("\n") for b in bodies if b.strip()]
        if not bodies:
            log_debug(self.context, f"Dropping empty output unit '{name}'")
            return None
        header = PyCodeBuilder()
        self.py.emit_header(header, tuple(namespace), needs_enum=needs_enum,
                            needs_runtime=needs_runtime, imports=imports)
        text = header.to_string().rstrip("\n") + "\n\n\n" + "\n\n\n".join(bodies) + "\n"
        return OutputUnit(logical_name=name, namespace_path=tuple(namespace), text=text)
