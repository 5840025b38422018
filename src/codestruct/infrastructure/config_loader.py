"""Load CatalogConfig from YAML files and environment variables.

File layout (every section and key optional):

    storage:
      root_path: data
      default_collection: modules
      auto_backup: true
      max_backups: 10
      validate_on_write: true
    cache:
      enabled: true
      ttl_seconds: 300
      max_size: 1000
    validation:
      max_depth: 5
      max_name_length: 100
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import yaml

from codestruct.domain.exceptions import ConfigError
from codestruct.domain.model.configuration import (
    CacheConfig,
    CatalogConfig,
    StorageConfig,
    ValidationConfig,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "CODESTRUCT_"

_SECTIONS: dict[str, type[StorageConfig] | type[CacheConfig] | type[ValidationConfig]] = {
    "storage": StorageConfig,
    "cache": CacheConfig,
    "validation": ValidationConfig,
}

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(source: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(source, f"expected a boolean, got {value!r}")


def _coerce(source: str, field_type: str, value: object) -> object:
    """Convert raw YAML/env value to the dataclass field type."""
    try:
        match field_type:
            case "Path":
                return Path(str(value))
            case "bool":
                return _parse_bool(source, value)
            case "int":
                if isinstance(value, bool):
                    raise ValueError("booleans are not integers")
                return int(str(value))
            case "float":
                if isinstance(value, bool):
                    raise ValueError("booleans are not numbers")
                return float(str(value))
            case "int | None":
                if value is None or str(value).strip().lower() in {"", "none", "null"}:
                    return None
                return int(str(value))
            case _:
                return str(value)
    except ValueError as e:
        raise ConfigError(source, f"expected {field_type}, got {value!r}") from e


C = TypeVar("C")


def _build_section(cls: type[C], raw: Mapping[str, Any], source: str) -> C:
    """Build one config section, rejecting unknown keys."""
    fields = {f.name: f for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(raw) - set(fields))
    if unknown:
        raise ConfigError(source, f"unknown keys: {', '.join(unknown)}")

    kwargs = {key: _coerce(f"{source}.{key}", str(fields[key].type), value) for key, value in raw.items()}
    try:
        return cls(**kwargs)
    except ValueError as e:
        raise ConfigError(source, str(e)) from e


def config_from_mapping(raw: Mapping[str, Any], source: str = "<mapping>") -> CatalogConfig:
    """Build CatalogConfig from nested plain data.

    Raises:
        ConfigError: Unknown section/key or invalid value
    """
    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ConfigError(source, f"unknown sections: {', '.join(unknown)}")

    sections: dict[str, Any] = {}
    for name, cls in _SECTIONS.items():
        section = raw.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"{source}:{name}", "section must be a mapping")
        sections[name] = _build_section(cls, section, f"{source}:{name}")
    return CatalogConfig(**sections)


def load_config(path: Path | str) -> CatalogConfig:
    """Read CatalogConfig from a YAML file.

    Raises:
        ConfigError: File unreadable, invalid YAML, or invalid content
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(str(path), f"cannot read file: {e}") from e

    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(str(path), f"invalid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(str(path), "top level must be a mapping")

    config = config_from_mapping(raw, source=str(path))
    logger.debug("loaded configuration from %s", path)
    return config


# env var -> (section, key)
_ENV_KEYS: dict[str, tuple[str, str]] = {
    f"{ENV_PREFIX}ROOT_PATH": ("storage", "root_path"),
    f"{ENV_PREFIX}MAX_BACKUPS": ("storage", "max_backups"),
    f"{ENV_PREFIX}CACHE_TTL": ("cache", "ttl_seconds"),
    f"{ENV_PREFIX}CACHE_ENABLED": ("cache", "enabled"),
}


def config_from_env(
    environ: Mapping[str, str],
    base: CatalogConfig | None = None,
) -> CatalogConfig:
    """Apply CODESTRUCT_* overrides on top of base (defaults if None).

    Raises:
        ConfigError: Override value invalid
    """
    config = base or CatalogConfig()
    overrides: dict[str, dict[str, object]] = {}
    for var, (section, key) in _ENV_KEYS.items():
        if var in environ:
            overrides.setdefault(section, {})[key] = environ[var]

    if not overrides:
        return config

    replaced: dict[str, Any] = {}
    for section, values in overrides.items():
        current = getattr(config, section)
        fields = {f.name: f for f in dataclasses.fields(current)}
        coerced = {
            key: _coerce(f"env:{key}", str(fields[key].type), value) for key, value in values.items()
        }
        try:
            replaced[section] = dataclasses.replace(current, **coerced)
        except ValueError as e:
            raise ConfigError("env", str(e)) from e

    logger.debug("applied environment overrides: %s", ", ".join(sorted(overrides)))
    return dataclasses.replace(config, **replaced)
