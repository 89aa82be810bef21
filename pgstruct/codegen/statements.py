"""SQL text used by the generated accessor methods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .model import Field, GeneratedType

PLACEHOLDER = "%s"


@dataclass(frozen=True, slots=True)
class AccessorStatements:
    """Pre-built SQL for one generated type.

    Statements that do not apply to the table (no primary key, nothing to
    update) are None.
    """

    insert: str
    select_by_pk: str | None
    update_by_pk: str | None
    delete_by_pk: str | None


def _column_list(fields: Sequence[Field]) -> str:
    return ", ".join(f.sql_name for f in fields)


def _key_condition(fields: Sequence[Field]) -> str:
    return " AND ".join(f"{f.sql_name} = {PLACEHOLDER}" for f in fields)


def build_statements(struct: GeneratedType) -> AccessorStatements:
    table = struct.qualified_table
    key_fields = struct.primary_key_fields
    insert_fields = struct.insert_fields

    if insert_fields:
        placeholders = ", ".join(PLACEHOLDER for _ in insert_fields)
        insert = (
            f"INSERT INTO {table} ({_column_list(insert_fields)}) "
            f"VALUES ({placeholders})"
        )
    else:
        insert = f"INSERT INTO {table} DEFAULT VALUES"
    if struct.returns_key:
        insert += f" RETURNING {_column_list(key_fields)}"

    select_by_pk = update_by_pk = delete_by_pk = None
    if key_fields:
        condition = _key_condition(key_fields)
        select_by_pk = (
            f"SELECT {_column_list(struct.fields)} FROM {table} WHERE {condition}"
        )
        delete_by_pk = f"DELETE FROM {table} WHERE {condition}"
        if struct.non_key_fields:
            assignments = ", ".join(
                f"{f.sql_name} = {PLACEHOLDER}" for f in struct.non_key_fields
            )
            update_by_pk = f"UPDATE {table} SET {assignments} WHERE {condition}"

    return AccessorStatements(
        insert=insert,
        select_by_pk=select_by_pk,
        update_by_pk=update_by_pk,
        delete_by_pk=delete_by_pk,
    )
