"""Module store port (interface)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from codestruct.domain.model.document import BackupInfo, Document, StorageStats
    from codestruct.domain.model.integrity import IntegrityIssue


class ModuleStorePort(ABC):
    """Port for durable storage of catalog documents.

    One document per collection id. The store is the only writer of its files.
    Infrastructure layer must provide implementation.
    """

    @abstractmethod
    def collection_id_for(self, file_path: str) -> str:
        """Derive collection id from a source file path.

        Args:
            file_path: Path as given by the caller, may be empty

        Returns:
            Collection id (default collection for empty path)
        """
        ...

    @abstractmethod
    def read(self, collection_id: str) -> Document:
        """Load one document.

        Missing document is not an error: returns empty Document.

        Raises:
            StorageIOError: File unreadable or not parseable
            DocumentValidationError: Content violates the document schema
        """
        ...

    @abstractmethod
    def write(self, collection_id: str, document: Document) -> None:
        """Validate, back up the previous version, then replace the document.

        Nothing is written if validation fails.

        Raises:
            DocumentValidationError: Document violates the schema
            StorageIOError: Backup or write failed
        """
        ...

    @abstractmethod
    def validate_document(self, raw: Mapping[str, object]) -> tuple[bool, list[str]]:
        """Check raw document against the schema.

        Returns:
            (is_valid, all violations)
        """
        ...

    @abstractmethod
    def list_collections(self) -> Sequence[str]:
        """Existing collection ids, sorted."""
        ...

    @abstractmethod
    def delete_collection(self, collection_id: str) -> None:
        """Remove a document (backups are kept)."""
        ...

    @abstractmethod
    def list_backups(self, collection_id: str) -> Sequence[BackupInfo]:
        """Backups of a collection, oldest first."""
        ...

    @abstractmethod
    def stats(self) -> StorageStats:
        """Summary over all documents."""
        ...

    @abstractmethod
    def check_files(self) -> Sequence[IntegrityIssue]:
        """Per-file parse and schema problems."""
        ...
