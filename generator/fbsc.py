#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
from pathlib import Path
from typing import Optional

from fbs_backend import Backend
from fbs_context import GenerationContext, LogLevel
from fbs_diagnostics import SchemaLoadError
from fbs_internal_error import InternalGeneratorError
from fbs_logger import log_error, log_info, log_unit
from fbs_schema import Schema
from fbs_schema_loader import load_schema_file


def build_generation_context(args: argparse.Namespace) -> GenerationContext:
    """Build a GenerationContext from command-line arguments."""
    # Log format
    log_rich_format = getattr(args, 'log', False)

    # Convert verbosity count to LogLevel
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.ERROR

    return GenerationContext(
        one_file=getattr(args, 'one_file', False),
        mutable_buffer=getattr(args, 'gen_mutable', False),
        file_name=getattr(args, 'file_name', None) or GenerationContext.file_name,
        log_rich_format=log_rich_format,
        log_level=log_level,
    )


def _load(args: argparse.Namespace, context: GenerationContext) -> Optional[Schema]:
    """Load the schema named on the command line; log and return None on failure."""
    try:
        return load_schema_file(Path(args.schema))
    except OSError as e:
        log_error(context, f"error: [FBC-0010] cannot read '{args.schema}': {e.strerror or e}")
    except SchemaLoadError as e:
        log_error(context, e.diagnostic.format())
    return None


def cmd_gen(args: argparse.Namespace) -> int:
    """Generate Python accessors for a schema."""
    context = build_generation_context(args)
    schema = _load(args, context)
    if schema is None:
        return 1

    backend = Backend(schema, context)
    try:
        units = backend.generate()
    except InternalGeneratorError as e:
        log_error(context, e.format())
        return 1

    # Write to output directory or stdout
    if not args.output:
        for unit in units:
            print(unit.text, end="")
            log_unit(context, unit)
        return 0

    out_dir = Path(args.output)
    for unit in units:
        path = out_dir / unit.relative_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(unit.text, encoding="utf-8")
        except OSError as e:
            log_error(context, f"error: [FBC-0020] cannot write '{path}': {e.strerror or e}")
            return 1
        log_unit(context, unit, str(path))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Load a schema and run the generator without writing anything."""
    context = build_generation_context(args)
    schema = _load(args, context)
    if schema is None:
        return 1
    try:
        units = Backend(schema, context).generate()
    except InternalGeneratorError as e:
        log_error(context, e.format())
        return 1
    log_info(context, f"{args.schema}: {len(schema.enums)} enum(s), {len(schema.records)} record(s), "
                      f"{len(units)} output unit(s)")
    return 0


def _add_schema_arg(parser: argparse.ArgumentParser) -> None:
    """Add the positional schema argument."""
    parser.add_argument("schema", help="Resolved schema IR (JSON)")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="fbsc", description="FlatBuffers Python accessor generator")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    ###########################
    # gen command
    ###########################
    p_gen = subparsers.add_parser("gen", help="Generate Python accessors", aliases=["codegen"])
    p_gen.add_argument("--output", "-o", help="Output directory (default: stdout)")
    p_gen.add_argument("--one-file", action="store_true", dest="one_file",
                       help="Merge every type into a single module")
    p_gen.add_argument("--gen-mutable", action="store_true", dest="gen_mutable",
                       help="Generate in-place mutators for scalar fields")
    p_gen.add_argument("--file-name", dest="file_name",
                       help="Module name of the merged output with --one-file (default: schema_generated)")
    _add_schema_arg(p_gen)
    p_gen.set_defaults(func=cmd_gen)

    ###########################
    # check command
    ###########################
    p_check = subparsers.add_parser("check", help="Load a schema and dry-run generation")
    _add_schema_arg(p_check)
    p_check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
