"""PostgreSQL catalog introspection."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Final, Iterable, Sequence

import psycopg2

from ..shared import QueryError

logger = logging.getLogger(__name__)

# pg_class.relkind of an ordinary table
ORDINARY_TABLE: Final[str] = "r"

TABLE_QUERY: Final[str] = """
SELECT
    c.relkind AS type,
    c.relname AS table_name
FROM pg_class c
JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = %s
AND c.relkind = 'r'
ORDER BY c.oid
"""

COLUMN_QUERY: Final[str] = """
SELECT
    a.attnum AS field_ordinal,
    a.attname AS column_name,
    format_type(a.atttypid, a.atttypmod) AS data_type,
    a.attnotnull AS not_null,
    COALESCE(pg_get_expr(ad.adbin, ad.adrelid), '') AS default_value,
    EXISTS (
        SELECT 1
        FROM pg_constraint ct
        WHERE ct.conrelid = c.oid
        AND ct.contype = 'p'
        AND a.attnum = ANY(ct.conkey)
    ) AS is_primary_key
FROM pg_attribute a
JOIN ONLY pg_class c ON c.oid = a.attrelid
JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
LEFT JOIN pg_attrdef ad ON ad.adrelid = c.oid AND ad.adnum = a.attnum
WHERE a.attisdropped = false
AND n.nspname = %s
AND c.relname = %s
AND a.attnum > 0
ORDER BY a.attnum
"""


@dataclass(frozen=True, slots=True)
class Column:
    """A table column as described by the catalog."""

    ordinal: int
    name: str
    data_type: str
    not_null: bool
    default_value: str
    is_primary_key: bool

    @property
    def has_default(self) -> bool:
        return self.default_value != ""


@dataclass(frozen=True, slots=True)
class Table:
    """An ordinary table and its columns, ordered by ordinal."""

    schema: str
    name: str
    kind: str = ORDINARY_TABLE
    columns: tuple[Column, ...] = ()

    @property
    def primary_key(self) -> tuple[Column, ...]:
        return tuple(col for col in self.columns if col.is_primary_key)


class CatalogLoader:
    """Loads table and column definitions through a DB-API connection."""

    def __init__(self, connection: Any) -> None:
        self.conn = connection

    def _fetch(
        self,
        query: str,
        params: Sequence[Any],
        schema: str,
        table: str | None = None,
    ) -> list[tuple[Any, ...]]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, tuple(params))
                return list(cur.fetchall())
        except psycopg2.Error as e:
            what = "columns" if table else "tables"
            raise QueryError(f"Failed to load {what}: {e}", schema, table) from e

    def list_tables(self, schema: str) -> list[Table]:
        """List the ordinary tables of a schema, columns unpopulated."""
        rows = self._fetch(TABLE_QUERY, (schema,), schema)
        return [Table(schema=schema, name=str(name), kind=str(kind)) for kind, name in rows]

    def list_columns(self, schema: str, table: str) -> list[Column]:
        """List the live columns of a table in ordinal order."""
        rows = self._fetch(COLUMN_QUERY, (schema, table), schema, table)
        columns = [
            Column(
                ordinal=int(ordinal),
                name=str(name),
                data_type=str(data_type),
                not_null=bool(not_null),
                default_value=default_value or "",
                is_primary_key=bool(is_primary_key),
            )
            for ordinal, name, data_type, not_null, default_value, is_primary_key in rows
        ]
        columns.sort(key=lambda col: col.ordinal)
        return columns

    def load_schema(self, schema: str, exclude: Iterable[str] = ()) -> list[Table]:
        """Load every table of a schema with its columns.

        Tables keep catalog order. Names listed in ``exclude`` are skipped.
        """
        excluded = set(exclude)
        tables: list[Table] = []

        for table in self.list_tables(schema):
            if table.name in excluded:
                logger.debug("Skipping excluded table %s.%s", schema, table.name)
                continue
            columns = self.list_columns(schema, table.name)
            logger.debug("Loaded %d column(s) for %s.%s", len(columns), schema, table.name)
            tables.append(dataclasses.replace(table, columns=tuple(columns)))

        logger.info("Loaded %d table(s) from schema '%s'", len(tables), schema)
        return tables
