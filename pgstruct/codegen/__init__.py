"""Struct Code Generator - Generates Python dataclasses from PostgreSQL tables."""

from .main import (
    GeneratorContext,
    build_types,
    generate,
)
from .model import Field, GeneratedType, build, build_all
from .renderer import (
    JinjaTemplate,
    TemplateEngine,
    format_source,
    render,
    render_all,
    render_into,
)
from .keymap import KeyMapConfig, default_key_map, load_key_map
from .typemap import TypeMapConfig, TypeMapping, default_type_map, load_type_map

__all__ = [
    "GeneratorContext",
    "build_types",
    "generate",
    "Field",
    "GeneratedType",
    "build",
    "build_all",
    "JinjaTemplate",
    "TemplateEngine",
    "format_source",
    "render",
    "render_all",
    "render_into",
    "KeyMapConfig",
    "default_key_map",
    "load_key_map",
    "TypeMapConfig",
    "TypeMapping",
    "default_type_map",
    "load_type_map",
]
