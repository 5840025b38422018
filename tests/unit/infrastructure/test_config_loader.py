"""Tests for infrastructure/config_loader.py.

Tests:
- load_config: full file, partial file, empty file, errors
- config_from_mapping: unknown sections/keys, bad values
- config_from_env: overrides on top of defaults or a base config
"""

from pathlib import Path

import pytest

from codestruct.domain.exceptions import ConfigError
from codestruct.domain.model.configuration import CatalogConfig
from codestruct.infrastructure.config_loader import (
    config_from_env,
    config_from_mapping,
    load_config,
)


class TestLoadConfig:
    """Tests for load_config."""

    def test_full_file(self, tmp_path: Path) -> None:
        """Every section is read and coerced."""
        path = tmp_path / "codestruct.yaml"
        path.write_text(
            "storage:\n"
            "  root_path: /var/lib/catalog\n"
            "  max_backups: 3\n"
            "  auto_backup: false\n"
            "cache:\n"
            "  ttl_seconds: 60\n"
            "  max_size: null\n"
            "validation:\n"
            "  max_depth: 7\n"
        )
        config = load_config(path)

        assert config.storage.root_path == Path("/var/lib/catalog")
        assert config.storage.max_backups == 3
        assert config.storage.auto_backup is False
        assert config.cache.ttl_seconds == 60.0
        assert config.cache.max_size is None
        assert config.validation.max_depth == 7
        assert config.validation.max_name_length == 100

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """Empty YAML is an empty mapping."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == CatalogConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unreadable file raises ConfigError."""
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Parser errors raise ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("storage: [\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        """Lists are rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- storage\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


class TestConfigFromMapping:
    """Tests for config_from_mapping."""

    def test_unknown_section(self) -> None:
        """Unknown sections are rejected."""
        with pytest.raises(ConfigError, match="unknown sections: metrics"):
            config_from_mapping({"metrics": {}})

    def test_unknown_key(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ConfigError, match="unknown keys: size"):
            config_from_mapping({"cache": {"size": 10}})

    def test_bad_value(self) -> None:
        """Values that do not coerce are rejected."""
        with pytest.raises(ConfigError, match="expected int"):
            config_from_mapping({"storage": {"max_backups": "many"}})

    def test_invariant_violation(self) -> None:
        """Dataclass validation errors become ConfigError."""
        with pytest.raises(ConfigError, match="ttl_seconds"):
            config_from_mapping({"cache": {"ttl_seconds": -1}})

    def test_section_must_be_mapping(self) -> None:
        """Scalar sections are rejected."""
        with pytest.raises(ConfigError, match="section must be a mapping"):
            config_from_mapping({"cache": 5})


class TestConfigFromEnv:
    """Tests for config_from_env."""

    def test_no_overrides(self) -> None:
        """Unrelated variables change nothing."""
        assert config_from_env({"PATH": "/usr/bin"}) == CatalogConfig()

    def test_all_overrides(self) -> None:
        """Each CODESTRUCT_* variable maps to one field."""
        config = config_from_env(
            {
                "CODESTRUCT_ROOT_PATH": "/srv/catalog",
                "CODESTRUCT_CACHE_TTL": "30",
                "CODESTRUCT_MAX_BACKUPS": "4",
                "CODESTRUCT_CACHE_ENABLED": "off",
            }
        )

        assert config.storage.root_path == Path("/srv/catalog")
        assert config.storage.max_backups == 4
        assert config.cache.ttl_seconds == 30.0
        assert config.cache.enabled is False

    def test_overrides_base(self, tmp_path: Path) -> None:
        """Overrides apply on top of the given base."""
        base = config_from_mapping({"validation": {"max_depth": 3}})
        config = config_from_env({"CODESTRUCT_ROOT_PATH": str(tmp_path)}, base)

        assert config.validation.max_depth == 3
        assert config.storage.root_path == tmp_path

    def test_bad_boolean(self) -> None:
        """Unrecognized booleans are rejected."""
        with pytest.raises(ConfigError, match="boolean"):
            config_from_env({"CODESTRUCT_CACHE_ENABLED": "maybe"})

    def test_bad_number(self) -> None:
        """Non-numeric TTL is rejected."""
        with pytest.raises(ConfigError):
            config_from_env({"CODESTRUCT_CACHE_TTL": "soon"})
