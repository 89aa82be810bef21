"""Configuration document loading."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

YAML_SUFFIXES: tuple[str, ...] = (".yaml", ".yml")
TOML_SUFFIXES: tuple[str, ...] = (".toml",)


def parse_config(content: str, fmt: str, source: str | None = None) -> dict[str, Any]:
    """Parse a configuration document.

    Args:
        content: The document text.
        fmt: Either ``"yaml"`` or ``"toml"``.
        source: Where the content came from, for error messages.

    Returns:
        The parsed mapping, in declaration order.

    Raises:
        ConfigError: If the content cannot be parsed or is not a mapping.
    """
    if fmt == "yaml":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", source) from e
    elif fmt == "toml":
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML: {e}", source) from e
    else:
        raise ConfigError(f"Unsupported config format '{fmt}'", source)

    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping", source)

    return data


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a YAML or TOML configuration file, chosen by suffix.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    suffix = config_path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        fmt = "yaml"
    elif suffix in TOML_SUFFIXES:
        fmt = "toml"
    else:
        raise ConfigError(
            f"Unknown config file type '{suffix}' (expected .yaml, .yml or .toml)",
            str(config_path),
        )

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}", str(config_path)) from e

    return parse_config(content, fmt, str(config_path))
