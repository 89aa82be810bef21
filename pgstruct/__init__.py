"""pgstruct - generates typed Python classes from a PostgreSQL catalog."""

__version__ = "0.1.0"
