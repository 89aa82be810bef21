"""Custom exceptions for pgstruct."""

from __future__ import annotations


class CodegenError(Exception):
    """Base exception for code generation errors."""

    def __init__(self, message: str, context: str | None = None) -> None:
        self.context = context
        full_message = f"{message}" if not context else f"[{context}] {message}"
        super().__init__(full_message)


class ConfigError(CodegenError):
    """Raised when a configuration document is missing or malformed."""

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        super().__init__(message, config_path)


class QueryError(CodegenError):
    """Raised when a catalog query fails."""

    def __init__(
        self,
        message: str,
        schema: str | None = None,
        table: str | None = None,
    ) -> None:
        self.schema = schema
        self.table = table
        context = schema
        if schema and table:
            context = f"{schema}.{table}"
        super().__init__(message, context)


class FieldResolutionError(CodegenError):
    """Raised when a column or table name yields no usable identifier."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        column: str | None = None,
    ) -> None:
        self.table = table
        self.column = column
        if column is not None:
            message = f"Column '{column}': {message}"
        super().__init__(message, table)


class TemplateError(CodegenError):
    """Base exception for template failures."""


class TemplateParseError(TemplateError):
    """Raised when a template has invalid syntax."""


class TemplateExecError(TemplateError):
    """Raised when a template cannot be rendered against the model."""


class FormatError(CodegenError):
    """Raised when the formatter rejects rendered source."""
