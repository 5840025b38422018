"""Catalog configuration.

Immutable DTOs with FAIL-FIRST validation. Every field has a default,
so CatalogConfig() is a working configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codestruct.domain.naming import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NAME_LENGTH


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where and how documents are persisted.

    Attributes:
        root_path: Directory holding document and backup files
        default_collection: Collection for entries without file_path
        auto_backup: Copy the previous document before each overwrite
        max_backups: Backups kept per collection, oldest removed first
        validate_on_write: Run document validation before writing
    """

    root_path: Path = Path("data")
    default_collection: str = "modules"
    auto_backup: bool = True
    max_backups: int = 10
    validate_on_write: bool = True

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.default_collection:
            raise ValueError("default_collection must not be empty")
        if self.max_backups < 1:
            raise ValueError(f"max_backups must be >= 1, got {self.max_backups}")


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Read-through entry cache.

    Attributes:
        enabled: Use the cache at all
        ttl_seconds: Entry lifetime
        max_size: Entry limit, None = unbounded
    """

    enabled: bool = True
    ttl_seconds: float = 300.0
    max_size: int | None = 1000

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {self.ttl_seconds}")
        if self.max_size is not None and self.max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {self.max_size}")


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """Naming limits.

    Attributes:
        max_depth: Segments allowed in a hierarchical name
        max_name_length: Characters allowed in a local name
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_name_length: int = DEFAULT_MAX_NAME_LENGTH

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.max_name_length < 1:
            raise ValueError(f"max_name_length must be >= 1, got {self.max_name_length}")


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """Aggregate configuration.

    Attributes:
        storage: Persistence settings
        cache: Cache settings
        validation: Naming limits
    """

    storage: StorageConfig = field(default_factory=StorageConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
