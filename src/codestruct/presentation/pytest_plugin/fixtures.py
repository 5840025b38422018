"""pytest fixtures for catalog testing.

Every catalog fixture works on a fresh directory under tmp_path.
User overrides catalog_config in their conftest.py.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from codestruct.application.services import Catalog
from codestruct.domain.model.configuration import CatalogConfig, StorageConfig
from codestruct.infrastructure.adapters import YamlModuleStore
from codestruct.infrastructure.config_loader import load_config

CLOCK_START = datetime(2024, 1, 1, tzinfo=UTC)


@dataclass
class FakeClock:
    """Manually advanced wall and monotonic clock.

    Attributes:
        current: Wall time returned by now()
        elapsed: Seconds returned by monotonic()
    """

    current: datetime = CLOCK_START
    elapsed: float = 0.0
    step: timedelta = field(default=timedelta(0))

    def now(self) -> datetime:
        """Wall time; moves forward by step after each call."""
        value = self.current
        self.current += self.step
        return value

    def monotonic(self) -> float:
        """Monotonic seconds."""
        return self.elapsed

    def advance(self, seconds: float) -> None:
        """Move both clocks forward."""
        self.elapsed += seconds
        self.current += timedelta(seconds=seconds)


def _get_ini_value(config: pytest.Config, name: str, default: str) -> str:
    """Get ini value from pytest config with fallback.

    Args:
        config: pytest Config object
        name: ini option name
        default: default value if not set

    Returns:
        String value of ini option
    """
    value = config.getini(name)
    if value:
        return str(value)
    return default


@pytest.fixture
def catalog_clock() -> FakeClock:
    """Fake clock starting 2024-01-01 UTC, advancing 1 ms per wall-clock read.

    Returns:
        FakeClock shared by catalog_store and catalog
    """
    return FakeClock(step=timedelta(milliseconds=1))


@pytest.fixture
def catalog_config(request: pytest.FixtureRequest, tmp_path: Path) -> CatalogConfig:
    """Catalog configuration rooted at tmp_path.

    Reads codestruct_config from pytest.ini when set (path relative to
    rootdir); the storage root is always redirected to tmp_path.

    Returns:
        CatalogConfig with storage.root_path = tmp_path / "catalog"
    """
    root_dir = Path(str(getattr(request.config, "rootdir", ".")))
    config_file = _get_ini_value(request.config, "codestruct_config", "")
    config = load_config(root_dir / config_file) if config_file else CatalogConfig()

    storage: StorageConfig = dataclasses.replace(config.storage, root_path=tmp_path / "catalog")
    return dataclasses.replace(config, storage=storage)


@pytest.fixture
def catalog_store(catalog_config: CatalogConfig, catalog_clock: FakeClock) -> YamlModuleStore:
    """YAML store in a fresh directory.

    Returns:
        YamlModuleStore using catalog_config and the fake clock
    """
    return YamlModuleStore(
        config=catalog_config.storage,
        validation=catalog_config.validation,
        clock=catalog_clock.now,
    )


@pytest.fixture
def catalog(
    catalog_store: YamlModuleStore,
    catalog_config: CatalogConfig,
    catalog_clock: FakeClock,
) -> Catalog:
    """Empty catalog over catalog_store.

    Returns:
        Catalog with fake wall and cache clocks
    """
    return Catalog(
        catalog_store,
        catalog_config,
        clock=catalog_clock.now,
        cache_clock=catalog_clock.monotonic,
    )
