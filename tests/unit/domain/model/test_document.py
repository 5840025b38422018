"""Tests for domain/model/document.py and domain/model/configuration.py.

Tests:
- Document key invariant and read-only view
- with_module / without copies
- Configuration defaults and FAIL-FIRST validation
"""

from types import MappingProxyType

import pytest

from codestruct.domain.model.configuration import (
    CacheConfig,
    CatalogConfig,
    StorageConfig,
    ValidationConfig,
)
from codestruct.domain.model.document import DOCUMENT_VERSION, Document, DocumentMetadata
from tests.factories import make_class


class TestDocument:
    """Tests for Document."""

    def test_empty(self) -> None:
        """Empty document has default metadata."""
        document = Document.empty()
        assert len(document) == 0
        assert document.metadata.version == DOCUMENT_VERSION

    def test_key_must_match_hierarchical_name(self) -> None:
        """Mismatched key is rejected."""
        with pytest.raises(ValueError, match="does not match"):
            Document(modules={"wrong": make_class("A")})

    def test_modules_are_read_only(self) -> None:
        """Modules are wrapped in a read-only mapping."""
        document = Document(modules={"A": make_class("A")})
        assert isinstance(document.modules, MappingProxyType)
        with pytest.raises(TypeError):
            document.modules["B"] = make_class("B")  # type: ignore[index]

    def test_with_module_copies(self) -> None:
        """with_module leaves the original unchanged."""
        original = Document.empty()
        updated = original.with_module(make_class("A"))

        assert len(original) == 0
        assert list(updated.modules) == ["A"]

    def test_with_module_replaces(self) -> None:
        """Same key replaces the entry."""
        document = Document.empty().with_module(make_class("A"))
        document = document.with_module(make_class("A", description="new"))

        assert len(document) == 1
        assert document.modules["A"].description == "new"

    def test_without(self) -> None:
        """without removes the key and keeps metadata."""
        metadata = DocumentMetadata(total_modules=1)
        document = Document(modules={"A": make_class("A")}, metadata=metadata)

        assert len(document.without("A")) == 0
        assert document.without("A").metadata is metadata
        assert len(document.without("missing")) == 1


class TestConfiguration:
    """Tests for configuration DTOs."""

    def test_defaults(self) -> None:
        """CatalogConfig() is usable as is."""
        config = CatalogConfig()
        assert config.storage.default_collection == "modules"
        assert config.storage.max_backups == 10
        assert config.cache.ttl_seconds == 300.0
        assert config.cache.max_size == 1000
        assert config.validation.max_depth == 5
        assert config.validation.max_name_length == 100

    def test_invalid_max_backups(self) -> None:
        """At least one backup is kept."""
        with pytest.raises(ValueError, match="max_backups"):
            StorageConfig(max_backups=0)

    def test_invalid_ttl(self) -> None:
        """TTL must be positive."""
        with pytest.raises(ValueError, match="ttl_seconds"):
            CacheConfig(ttl_seconds=0)

    def test_unbounded_cache(self) -> None:
        """max_size None means unbounded."""
        assert CacheConfig(max_size=None).max_size is None

    def test_invalid_depth(self) -> None:
        """Depth must be positive."""
        with pytest.raises(ValueError, match="max_depth"):
            ValidationConfig(max_depth=0)
