"""Catalog introspection - reads table and column definitions from PostgreSQL."""

from .loader import (
    Column,
    Table,
    CatalogLoader,
    ORDINARY_TABLE,
    TABLE_QUERY,
    COLUMN_QUERY,
)

__all__ = [
    "Column",
    "Table",
    "CatalogLoader",
    "ORDINARY_TABLE",
    "TABLE_QUERY",
    "COLUMN_QUERY",
]
