"""
Struct Code Generator - Generates Python dataclasses from a PostgreSQL schema.

The run is a straight pipeline:
- catalog introspection (one table query, one column query per table)
- type and key strategy resolution into GeneratedType models
- template rendering and ruff formatting, one block per table in catalog order
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import psycopg2

from ..catalog import CatalogLoader
from ..shared import CodegenError, QueryError
from .keymap import KeyMapConfig, default_key_map, load_key_map
from .model import GeneratedType, build_all
from .renderer import (
    HEADER_TEMPLATE,
    Formatter,
    JinjaTemplate,
    TemplateEngine,
    format_source,
    render_all,
)
from .typemap import TypeMapConfig, default_type_map, load_type_map

logger = logging.getLogger(__name__)


def _default_header() -> JinjaTemplate:
    return JinjaTemplate.builtin(HEADER_TEMPLATE)


@dataclass
class GeneratorContext:
    """Configuration for one generation run."""

    type_map: TypeMapConfig = field(default_factory=default_type_map)
    key_map: KeyMapConfig = field(default_factory=default_key_map)
    template: TemplateEngine = field(default_factory=JinjaTemplate.builtin)
    header: JinjaTemplate | None = field(default_factory=_default_header)
    formatter: Formatter = format_source


def build_types(
    connection: Any,
    schema: str,
    ctx: GeneratorContext,
    exclude: Iterable[str] = (),
) -> list[GeneratedType]:
    """Load a schema and build one GeneratedType per table, in catalog order."""
    tables = CatalogLoader(connection).load_schema(schema, exclude)
    return build_all(tables, ctx.type_map, ctx.key_map)


def generate(
    connection: Any,
    schema: str,
    ctx: GeneratorContext | None = None,
    exclude: Iterable[str] = (),
) -> bytes:
    """Generate formatted source for every table of a schema.

    Args:
        connection: An open DB-API connection to the database.
        schema: Schema to introspect.
        ctx: Run configuration; the bundled defaults when omitted.
        exclude: Table names to skip.

    Returns:
        The formatted source, one block per table.

    Raises:
        CodegenError: On the first failure of any stage.
    """
    ctx = ctx or GeneratorContext()
    structs = build_types(connection, schema, ctx, exclude)
    output = render_all(structs, ctx.template, ctx.header, ctx.formatter)
    logger.info("Rendered %d type(s) from schema '%s'", len(structs), schema)
    return output


def _build_context(args: argparse.Namespace) -> GeneratorContext:
    ctx = GeneratorContext(
        type_map=load_type_map(args.typemap) if args.typemap else default_type_map(),
        key_map=load_key_map(args.keymap) if args.keymap else default_key_map(),
        template=(
            JinjaTemplate.from_file(args.template)
            if args.template
            else JinjaTemplate.builtin()
        ),
    )
    if args.no_header:
        ctx.header = None
    elif args.header:
        ctx.header = JinjaTemplate.from_file(args.header)
    return ctx


def _connect(dsn: str) -> Any:
    try:
        conn = psycopg2.connect(dsn)
    except psycopg2.Error as e:
        raise QueryError(f"Failed to connect: {e}") from e
    try:
        conn.set_session(readonly=True)
    except psycopg2.Error as e:
        conn.close()
        raise QueryError(f"Failed to open a read-only session: {e}") from e
    return conn


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate Python dataclasses from a PostgreSQL schema",
    )
    parser.add_argument(
        "dsn",
        nargs="?",
        default=os.environ.get("DATABASE_URL"),
        help="PostgreSQL connection string (defaults to $DATABASE_URL)",
    )
    parser.add_argument(
        "-s",
        "--schema",
        default="public",
        help="Schema to introspect",
    )
    parser.add_argument(
        "--typemap",
        type=Path,
        default=None,
        help="Type map file (.yaml or .toml)",
    )
    parser.add_argument(
        "--keymap",
        type=Path,
        default=None,
        help="Key strategy file (.yaml or .toml)",
    )
    parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="Jinja2 template rendered once per table",
    )
    parser.add_argument(
        "--header",
        type=Path,
        default=None,
        help="Jinja2 template rendered once at the top of the output",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Do not emit the header block",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        action="append",
        default=[],
        metavar="TABLE",
        help="Table to skip (repeatable)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (defaults to stdout)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (-vv for debug output)",
    )

    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if not args.dsn:
        raise SystemExit("Error: no database given (pass a DSN or set DATABASE_URL)")

    try:
        ctx = _build_context(args)
        conn = _connect(args.dsn)
        try:
            structs = build_types(conn, args.schema, ctx, args.exclude)
        finally:
            conn.close()
        source = render_all(structs, ctx.template, ctx.header, ctx.formatter)
    except CodegenError as e:
        raise SystemExit(f"Error: {e}") from e

    if args.output is None:
        sys.stdout.write(source.decode("utf-8"))
        return

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(source)
    print(
        f"Generated {len(structs)} type(s) from schema '{args.schema}' "
        f"into {args.output}"
    )


if __name__ == "__main__":
    main()
