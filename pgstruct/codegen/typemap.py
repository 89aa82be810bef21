"""Mapping from PostgreSQL column types to generated Python types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Mapping

from ..catalog import Column
from ..shared import ConfigError, load_config

DEFAULT_RULE: Final[str] = "default"
MAPCONFIG_DIR: Final[Path] = Path(__file__).parent / "mapconfig"
DEFAULT_TYPEMAP_PATH: Final[Path] = MAPCONFIG_DIR / "typemap.yaml"

_RULE_KEYS: Final[tuple[str, ...]] = (
    "notnull_type",
    "notnull_nil_value",
    "nullable_type",
    "nullable_nil_value",
)


@dataclass(frozen=True, slots=True)
class TypeMapping:
    """A named rule mapping database types to a type and nil value pair."""

    name: str
    db_types: tuple[str, ...]
    notnull_type: str
    notnull_nil_value: str
    nullable_type: str
    nullable_nil_value: str

    def matches(self, data_type: str) -> bool:
        return data_type in self.db_types


@dataclass(frozen=True, slots=True)
class TypeMapConfig:
    """Type mapping rules in declaration order."""

    rules: tuple[TypeMapping, ...]

    @property
    def default(self) -> TypeMapping:
        for rule in self.rules:
            if rule.name == DEFAULT_RULE:
                return rule
        raise ConfigError(f"type map has no '{DEFAULT_RULE}' rule")

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        source: str | None = None,
    ) -> TypeMapConfig:
        """Build a config from a parsed document, keeping declaration order.

        Raises:
            ConfigError: If a rule is malformed or ``default`` is missing.
        """
        rules: list[TypeMapping] = []
        for name, raw in data.items():
            if not isinstance(raw, Mapping):
                raise ConfigError(f"Rule '{name}' must be a mapping", source)

            db_types = raw.get("db_types", [])
            if not isinstance(db_types, list):
                raise ConfigError(f"Rule '{name}': 'db_types' must be a list", source)

            missing = [key for key in _RULE_KEYS if key not in raw]
            if missing:
                raise ConfigError(
                    f"Rule '{name}' is missing {', '.join(missing)}",
                    source,
                )

            rules.append(
                TypeMapping(
                    name=str(name),
                    db_types=tuple(str(t) for t in db_types),
                    notnull_type=str(raw["notnull_type"]),
                    notnull_nil_value=str(raw["notnull_nil_value"]),
                    nullable_type=str(raw["nullable_type"]),
                    nullable_nil_value=str(raw["nullable_nil_value"]),
                )
            )

        if not any(rule.name == DEFAULT_RULE for rule in rules):
            raise ConfigError(f"Type map must define a '{DEFAULT_RULE}' rule", source)

        return cls(rules=tuple(rules))


def load_type_map(path: Path) -> TypeMapConfig:
    """Load a type map from a YAML or TOML file."""
    return TypeMapConfig.from_mapping(load_config(path), str(path))


def default_type_map() -> TypeMapConfig:
    """Load the bundled type map."""
    return load_type_map(DEFAULT_TYPEMAP_PATH)


def resolve(column: Column, config: TypeMapConfig) -> tuple[str, str]:
    """Resolve the (type, nil value) pair for a column.

    Rules are scanned in declaration order and the first rule listing the
    column's data type wins. A column no rule matches gets the default
    rule's not-null pair, whether or not the column is nullable.
    """
    for rule in config.rules:
        if rule.matches(column.data_type):
            if column.not_null:
                return rule.notnull_type, rule.notnull_nil_value
            return rule.nullable_type, rule.nullable_nil_value

    # TODO: confirm with maintainers whether nullable fallbacks should use
    # the default rule's nullable pair instead.
    default = config.default
    return default.notnull_type, default.notnull_nil_value
