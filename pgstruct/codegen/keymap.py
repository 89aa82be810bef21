"""Per-table primary key strategy."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Mapping

from ..shared import ConfigError, load_config
from .typemap import MAPCONFIG_DIR

WILDCARD: Final[str] = "*"
DEFAULT_KEYMAP_PATH: Final[Path] = MAPCONFIG_DIR / "keymap.yaml"


@dataclass(frozen=True, slots=True)
class KeyMapConfig:
    """Whether each table's primary key is generated by the database."""

    entries: tuple[tuple[str, bool], ...] = ()
    default: bool = False

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        source: str | None = None,
    ) -> KeyMapConfig:
        entries: list[tuple[str, bool]] = []
        default = False
        for name, value in data.items():
            if not isinstance(name, str):
                raise ConfigError(
                    f"Table name {name!r} must be a string; quote it",
                    source,
                )
            if not isinstance(value, bool):
                raise ConfigError(
                    f"Entry '{name}' must be true or false, got {value!r}",
                    source,
                )
            if name == WILDCARD:
                default = value
            else:
                entries.append((name, value))
        return cls(entries=tuple(entries), default=default)


def load_key_map(path: Path) -> KeyMapConfig:
    """Load a key map from a YAML or TOML file."""
    return KeyMapConfig.from_mapping(load_config(path), str(path))


def default_key_map() -> KeyMapConfig:
    """Load the bundled key map."""
    return load_key_map(DEFAULT_KEYMAP_PATH)


def resolve(table_name: str, config: KeyMapConfig) -> bool:
    """Return True if the table's primary key is assigned by the database."""
    for name, auto_generated in config.entries:
        if name == table_name:
            return auto_generated
    return config.default
