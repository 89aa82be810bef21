"""In-memory model of the types generated from catalog tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..catalog import Column, Table
from ..shared import (
    FieldResolutionError,
    is_public_identifier,
    quote_sql_ident,
    sanitize_field_name,
    sanitize_type_name,
    to_pascal_case,
    to_snake_case,
)
from . import keymap, typemap
from .keymap import KeyMapConfig
from .typemap import TypeMapConfig


@dataclass(frozen=True, slots=True)
class Field:
    """A generated attribute backed by one column."""

    name: str
    type: str
    nil_value: str
    column: Column

    @property
    def column_name(self) -> str:
        return self.column.name

    @property
    def sql_name(self) -> str:
        return quote_sql_ident(self.column.name)


@dataclass(frozen=True, slots=True)
class GeneratedType:
    """A generated class backed by one table."""

    name: str
    table_name: str
    schema: str
    fields: tuple[Field, ...]
    auto_generated_key: bool

    @property
    def qualified_table(self) -> str:
        return f"{quote_sql_ident(self.schema)}.{quote_sql_ident(self.table_name)}"

    @property
    def primary_key_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.column.is_primary_key)

    @property
    def non_key_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if not f.column.is_primary_key)

    @property
    def returns_key(self) -> bool:
        """True if create() reads the key back from the database."""
        return self.auto_generated_key and bool(self.primary_key_fields)

    @property
    def insert_fields(self) -> tuple[Field, ...]:
        if self.returns_key:
            return self.non_key_fields
        return self.fields


def field_name_for(column_name: str) -> str:
    """Derive the attribute name for a column, or '' if none can be derived."""
    snake = to_snake_case(column_name)
    if not snake:
        return ""
    return sanitize_field_name(snake)


def build_field(column: Column, type_map: TypeMapConfig, table_name: str) -> Field:
    """Build the Field for one column.

    Raises:
        FieldResolutionError: If the column name yields no valid identifier.
    """
    name = field_name_for(column.name)
    if not is_public_identifier(name):
        raise FieldResolutionError(
            f"cannot derive an attribute name (got {name!r})",
            table_name,
            column.name,
        )

    field_type, nil_value = typemap.resolve(column, type_map)
    return Field(name=name, type=field_type, nil_value=nil_value, column=column)


def build(table: Table, type_map: TypeMapConfig, key_map: KeyMapConfig) -> GeneratedType:
    """Build the GeneratedType for a table.

    Fields follow the table's column order.

    Raises:
        FieldResolutionError: If the table or a column yields no valid
            identifier, or two columns yield the same one.
    """
    qualified = f"{table.schema}.{table.name}"
    type_name = sanitize_type_name(to_pascal_case(table.name))
    if not is_public_identifier(type_name):
        raise FieldResolutionError(
            f"cannot derive a type name from table '{table.name}' (got {type_name!r})",
            qualified,
        )

    fields: list[Field] = []
    seen: dict[str, str] = {}
    for column in table.columns:
        field = build_field(column, type_map, qualified)
        if field.name in seen:
            raise FieldResolutionError(
                f"attribute name '{field.name}' already used by column '{seen[field.name]}'",
                qualified,
                column.name,
            )
        seen[field.name] = column.name
        fields.append(field)

    return GeneratedType(
        name=type_name,
        table_name=table.name,
        schema=table.schema,
        fields=tuple(fields),
        auto_generated_key=keymap.resolve(table.name, key_map),
    )


def build_all(
    tables: Iterable[Table],
    type_map: TypeMapConfig,
    key_map: KeyMapConfig,
) -> list[GeneratedType]:
    """Build one GeneratedType per table, keeping the input order.

    Raises:
        FieldResolutionError: If a table fails to build, or two tables
            yield the same type name.
    """
    structs: list[GeneratedType] = []
    seen: dict[str, str] = {}
    for table in tables:
        struct = build(table, type_map, key_map)
        if struct.name in seen:
            raise FieldResolutionError(
                f"type name '{struct.name}' already used by table '{seen[struct.name]}'",
                f"{table.schema}.{table.name}",
            )
        seen[struct.name] = table.name
        structs.append(struct)
    return structs
