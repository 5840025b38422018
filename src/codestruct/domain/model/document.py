"""Persisted document and storage bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from pathlib import Path

    from codestruct.domain.model.module import Module

DOCUMENT_VERSION = "1.0.0"


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """Header of a persisted document.

    Attributes:
        version: Document format version
        created_at: First write time, None if never written
        updated_at: Last write time, None if never written
        total_modules: Entry count at last write
    """

    version: str = DOCUMENT_VERSION
    created_at: datetime | None = None
    updated_at: datetime | None = None
    total_modules: int = 0


@dataclass(frozen=True, slots=True)
class Document:
    """All entries of one collection, keyed by hierarchical name.

    Invariants (FAIL-FIRST):
    - every key equals its entry's hierarchical_name

    Attributes:
        modules: hierarchical_name -> Module (read-only view)
        metadata: Document header
    """

    modules: Mapping[str, Module] = field(default_factory=lambda: MappingProxyType({}))
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        for key, module in self.modules.items():
            if key != module.hierarchical_name:
                raise ValueError(
                    f"document key '{key}' does not match '{module.hierarchical_name}'"
                )
        if not isinstance(self.modules, MappingProxyType):
            object.__setattr__(self, "modules", MappingProxyType(dict(self.modules)))

    @classmethod
    def empty(cls) -> Document:
        """Document with no entries."""
        return cls()

    def with_module(self, module: Module) -> Document:
        """Copy with entry inserted or replaced."""
        modules = dict(self.modules)
        modules[module.hierarchical_name] = module
        return Document(modules=modules, metadata=self.metadata)

    def without(self, hierarchical_name: str) -> Document:
        """Copy with entry removed (no-op if absent)."""
        modules = {k: v for k, v in self.modules.items() if k != hierarchical_name}
        return Document(modules=modules, metadata=self.metadata)

    def __len__(self) -> int:
        """Number of entries."""
        return len(self.modules)


@dataclass(frozen=True, slots=True)
class BackupInfo:
    """One backup file of a collection.

    Attributes:
        collection_id: Collection the backup belongs to
        path: Backup file
        size: Bytes on disk
        created_at: Timestamp encoded in the file name
    """

    collection_id: str
    path: Path
    size: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class StorageStats:
    """Summary of a store's files.

    Attributes:
        total_files: Document files (backups excluded)
        total_modules: Entries across all documents
        total_size: Bytes across all documents
        backup_count: Backup files
        last_modified: Newest document mtime, None if no documents
        file_distribution: collection id -> entry count
    """

    total_files: int
    total_modules: int
    total_size: int
    backup_count: int
    last_modified: datetime | None
    file_distribution: Mapping[str, int]
