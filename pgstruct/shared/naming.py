"""Naming utilities for code generation."""

from __future__ import annotations

import keyword
import re
from functools import lru_cache

# Names bound at module level by the generated header
GENERATED_MODULE_NAMES: frozenset[str] = frozenset({
    "annotations",
    "datetime",
    "decimal",
    "uuid",
    "dataclass",
    "Any",
})

# Names taken by the generated accessors and their parameters, plus the
# module names a class-body attribute would shadow in later field defaults
RESERVED_MEMBER_NAMES: frozenset[str] = frozenset({
    "cls",
    "self",
    "cursor",
    "row",
    "create",
    "update",
    "delete",
    "get_by_pk",
}) | GENERATED_MODULE_NAMES

# PostgreSQL reserved and type/function-name keywords; none of these can be
# used as a bare column or table name
SQL_RESERVED_WORDS: frozenset[str] = frozenset({
    "all", "analyse", "analyze", "and", "any", "array", "as", "asc",
    "asymmetric", "authorization", "binary", "both", "case", "cast", "check",
    "collate", "collation", "column", "concurrently", "constraint", "create",
    "cross", "current_catalog", "current_date", "current_role",
    "current_schema", "current_time", "current_timestamp", "current_user",
    "default", "deferrable", "desc", "distinct", "do", "else", "end",
    "except", "false", "fetch", "for", "foreign", "freeze", "from", "full",
    "grant", "group", "having", "ilike", "in", "initially", "inner",
    "intersect", "into", "is", "isnull", "join", "lateral", "leading", "left",
    "like", "limit", "localtime", "localtimestamp", "natural", "not",
    "notnull", "null", "offset", "on", "only", "or", "order", "outer",
    "overlaps", "placing", "primary", "references", "returning", "right",
    "select", "session_user", "similar", "some", "symmetric", "system_user",
    "table", "tablesample", "then", "to", "trailing", "true", "union",
    "unique", "user", "using", "variadic", "verbose", "when", "where",
    "window", "with",
})

_SIMPLE_SQL_IDENT = re.compile(r"^[a-z_][a-z0-9_]*$")


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a string to PascalCase.

    Uses caching for repeated calls with the same input.

    Examples:
        >>> to_pascal_case("user_account")
        'UserAccount'
        >>> to_pascal_case("user-account")
        'UserAccount'
        >>> to_pascal_case("userAccount")
        'UserAccount'
    """
    # Handle already camelCase/PascalCase by inserting underscores before caps
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)

    parts = [part for part in re.split(r"[^0-9A-Za-z]+", value) if part]
    return "".join(part.capitalize() for part in parts)


@lru_cache(maxsize=1024)
def to_snake_case(value: str) -> str:
    """Convert a string to snake_case.

    Uses caching for repeated calls with the same input.

    Examples:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("first name")
        'first_name'
    """
    # Insert underscore before uppercase letters
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    # Anything that is not a letter or digit becomes a separator
    value = re.sub(r"[^0-9A-Za-z]+", "_", value)
    return value.lower().strip("_")


@lru_cache(maxsize=1024)
def sanitize_field_name(value: str) -> str:
    """Sanitize a snake_case value for use as a generated attribute name.

    Keywords and names reserved by the generated accessors get a trailing
    underscore. The result is not guaranteed to be a valid identifier.
    """
    if keyword.iskeyword(value) or value in RESERVED_MEMBER_NAMES:
        return f"{value}_"
    return value


@lru_cache(maxsize=1024)
def sanitize_type_name(value: str) -> str:
    """Sanitize a PascalCase value for use as a generated class name."""
    if value in GENERATED_MODULE_NAMES:
        return f"{value}_"
    return value


def is_public_identifier(value: str) -> bool:
    """Return True if value can name a public Python attribute or class."""
    return (
        bool(value)
        and value.isidentifier()
        and not value.startswith("_")
        and not keyword.iskeyword(value)
    )


@lru_cache(maxsize=1024)
def quote_sql_ident(value: str) -> str:
    """Quote a SQL identifier unless it is plain lower-case and not reserved."""
    if _SIMPLE_SQL_IDENT.match(value) and value not in SQL_RESERVED_WORDS:
        return value
    escaped = value.replace('"', '""')
    return f'"{escaped}"'
