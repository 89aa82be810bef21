"""
Template rendering and formatting of generated source.

A template turns one GeneratedType into source text; the text is then run
through ``ruff format``, which also rejects anything that does not parse.
"""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Final, Protocol, Sequence

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateSyntaxError,
)

from ..shared import FormatError, TemplateExecError, TemplateParseError
from .model import GeneratedType
from .statements import build_statements

logger = logging.getLogger(__name__)

TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"
STRUCT_TEMPLATE: Final[str] = "struct.py.j2"
HEADER_TEMPLATE: Final[str] = "header.py.j2"

Formatter = Callable[[str], str]


class TemplateEngine(Protocol):
    """Anything that can turn a GeneratedType into source text."""

    def render(self, struct: GeneratedType) -> str:
        """Render the type, raising TemplateError on failure."""
        ...


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Python literal embedding. Cached for performance."""
    return json.dumps(value)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        auto_reload=False,
        enable_async=False,
    )
    env.filters["quote"] = _quote
    return env


def _context_of(struct: GeneratedType) -> str:
    return f"{struct.schema}.{struct.table_name}"


class JinjaTemplate:
    """A Jinja2 template rendered with ``struct`` and ``statements``."""

    def __init__(self, source: str, name: str = "<template>") -> None:
        self.name = name
        try:
            self._template = _environment().from_string(source)
        except TemplateSyntaxError as e:
            raise TemplateParseError(
                f"Invalid template syntax at line {e.lineno}: {e.message}",
                name,
            ) from e

    @classmethod
    def from_file(cls, path: Path) -> JinjaTemplate:
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateParseError(f"Failed to read template: {e}", str(path)) from e
        return cls(source, name=str(path))

    @classmethod
    def builtin(cls, name: str = STRUCT_TEMPLATE) -> JinjaTemplate:
        return cls.from_file(TEMPLATE_DIR / name)

    def render_with(self, context: str | None = None, **variables: Any) -> str:
        """Render with arbitrary variables; ``context`` labels errors."""
        try:
            return self._template.render(**variables)
        except Exception as e:
            raise TemplateExecError(
                f"Failed to execute template {self.name}: {e}",
                context,
            ) from e

    def render(self, struct: GeneratedType) -> str:
        return self.render_with(
            _context_of(struct),
            struct=struct,
            statements=build_statements(struct),
        )


def format_source(source: str) -> str:
    """Format Python source with ruff.

    Raises:
        FormatError: If ruff cannot be run or rejects the source.
    """
    command = [sys.executable, "-m", "ruff", "format", "--isolated", "-"]
    try:
        result = subprocess.run(
            command,
            input=source,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise FormatError(f"Failed to run ruff: {e}") from e

    if result.returncode != 0:
        raise FormatError(f"ruff rejected the generated source: {result.stderr.strip()}")
    return result.stdout


def _render_text(
    struct: GeneratedType,
    template: TemplateEngine,
    formatter: Formatter,
) -> str:
    text = template.render(struct)
    try:
        return formatter(text)
    except FormatError as e:
        raise FormatError(str(e), _context_of(struct)) from e


def render(
    struct: GeneratedType,
    template: TemplateEngine,
    formatter: Formatter = format_source,
) -> bytes:
    """Render one type and return the formatted source as UTF-8 bytes."""
    return _render_text(struct, template, formatter).encode("utf-8")


def render_all(
    structs: Sequence[GeneratedType],
    template: TemplateEngine,
    header: JinjaTemplate | None = None,
    formatter: Formatter = format_source,
) -> bytes:
    """Render every type, in order, into one formatted source file.

    Nothing is returned unless every block rendered and formatted.
    """
    blocks: list[str] = []

    if header is not None:
        text = header.render_with("header", structs=structs)
        try:
            blocks.append(formatter(text))
        except FormatError as e:
            raise FormatError(str(e), "header") from e

    for struct in structs:
        logger.debug("Rendering %s for %s", struct.name, _context_of(struct))
        blocks.append(_render_text(struct, template, formatter))

    return "\n\n".join(block for block in blocks if block).encode("utf-8")


def render_into(
    buffer: bytearray,
    structs: Sequence[GeneratedType],
    template: TemplateEngine,
    header: JinjaTemplate | None = None,
    formatter: Formatter = format_source,
) -> int:
    """Append the rendered source to a shared buffer.

    The buffer is left untouched if any type fails to render.

    Returns:
        Number of bytes appended.
    """
    output = render_all(structs, template, header, formatter)
    buffer.extend(output)
    return len(output)
