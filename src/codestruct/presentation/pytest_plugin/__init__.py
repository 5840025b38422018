"""pytest plugin for codestruct.

Provides fixtures for catalog testing:
    catalog_clock: Fake wall/monotonic clock (FakeClock)
    catalog_config: CatalogConfig rooted at tmp_path (override in conftest.py)
    catalog_store: YamlModuleStore in a fresh directory
    catalog: Catalog over catalog_store

Configuration (pytest.ini or pyproject.toml):
    codestruct_config: YAML configuration file loaded by catalog_config
"""

from __future__ import annotations

from typing import TYPE_CHECKING

# Register fixtures from fixtures module
from codestruct.presentation.pytest_plugin.fixtures import (
    FakeClock,
    catalog,
    catalog_clock,
    catalog_config,
    catalog_store,
)

if TYPE_CHECKING:
    import pytest

# Export fixtures for pytest discovery
__all__ = [
    "FakeClock",
    "catalog",
    "catalog_clock",
    "catalog_config",
    "catalog_store",
]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register ini options."""
    parser.addini(
        "codestruct_config",
        "YAML configuration file for the catalog_config fixture",
        default="",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest plugin with markers."""
    # Add marker for tests that touch the filesystem store
    config.addinivalue_line(
        "markers",
        "catalog: mark test as catalog storage test",
    )
