"""Shared utilities for pgstruct."""

from .config_loader import (
    load_config,
    parse_config,
)
from .naming import (
    to_pascal_case,
    to_snake_case,
    sanitize_field_name,
    sanitize_type_name,
    is_public_identifier,
    quote_sql_ident,
    GENERATED_MODULE_NAMES,
    RESERVED_MEMBER_NAMES,
    SQL_RESERVED_WORDS,
)
from .errors import (
    CodegenError,
    ConfigError,
    QueryError,
    FieldResolutionError,
    TemplateError,
    TemplateParseError,
    TemplateExecError,
    FormatError,
)

__all__ = [
    # Config loading
    "load_config",
    "parse_config",
    # Naming utilities
    "to_pascal_case",
    "to_snake_case",
    "sanitize_field_name",
    "is_public_identifier",
    "quote_sql_ident",
    "sanitize_type_name",
    "GENERATED_MODULE_NAMES",
    "RESERVED_MEMBER_NAMES",
    "SQL_RESERVED_WORDS",
    # Errors
    "CodegenError",
    "ConfigError",
    "QueryError",
    "FieldResolutionError",
    "TemplateError",
    "TemplateParseError",
    "TemplateExecError",
    "FormatError",
]
