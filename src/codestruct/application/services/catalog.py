"""Catalog facade.

Catalog is the single entry point for managing entries: it owns the
in-memory index, the hierarchy graph and the entry cache, and persists every
mutation through a ModuleStorePort before touching any of them.

Errors never cross this boundary as exceptions: every CatalogError raised by
validation, the graph or the store is turned into a failed OperationResult.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from codestruct.application.services.builder import apply_patch, build_module, check_patch
from codestruct.application.services.integrity import IntegrityChecker
from codestruct.application.services.search import SearchEngine
from codestruct.application.services.ttl_cache import CacheStats, TTLCache
from codestruct.domain.exceptions import (
    CatalogError,
    CircularReferenceError,
    ConflictError,
    EntryNotFoundError,
    HasChildrenError,
)
from codestruct.domain.model.configuration import CatalogConfig
from codestruct.domain.model.enums import ModuleKind, RelationshipType
from codestruct.domain.model.hierarchy import HierarchyGraph
from codestruct.domain.model.module import get_module_kind, references_type, type_references
from codestruct.domain.model.relationship import ModuleRelationship, Relationship, TypeStructure
from codestruct.domain.model.requests import SearchCriteria
from codestruct.domain.model.results import OperationResult, SearchResult
from codestruct.domain.naming import hierarchical_name_for, validate_hierarchical_name, validate_name

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from codestruct.domain.model.document import StorageStats
    from codestruct.domain.model.integrity import IntegrityReport
    from codestruct.domain.model.module import Module
    from codestruct.domain.model.requests import CreateRequest
    from codestruct.domain.ports.module_store import ModuleStorePort

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Catalog:
    """Create, read, update, delete and search catalog entries.

    Every public method runs under one re-entrant lock, so concurrent
    callers observe operations in call order.

    Example:
        store = YamlModuleStore(StorageConfig(root_path=Path("data")))
        catalog = Catalog(store)
        result = catalog.create(CreateRequest(name="UserService", type="class"))
        if not result.success:
            print(result.error_kind, result.message)
    """

    def __init__(
        self,
        store: ModuleStorePort,
        config: CatalogConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        cache_clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize catalog and load every stored collection.

        Args:
            store: Persistence port
            config: Limits and cache settings (defaults if None)
            clock: Wall clock for created_at/updated_at
            cache_clock: Monotonic clock for cache expiry

        Raises:
            StorageIOError: A collection could not be read
            DocumentValidationError: A collection violates the schema
        """
        self._store = store
        self._config = config or CatalogConfig()
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._search = SearchEngine()
        self._integrity = IntegrityChecker(self._config.validation)
        self._cache: TTLCache[Module] = TTLCache(
            ttl_seconds=self._config.cache.ttl_seconds,
            max_size=self._config.cache.max_size,
            clock=cache_clock or time.monotonic,
        )
        self._index: dict[str, Module] = {}
        self._collections: dict[str, str] = {}
        self._graph = HierarchyGraph()
        self._load()

    @property
    def config(self) -> CatalogConfig:
        """Active configuration."""
        return self._config

    # =========================================================================
    # Loading
    # =========================================================================

    def _load(self) -> None:
        """Replace index, graph and cache with the store's content."""
        index: dict[str, Module] = {}
        collections: dict[str, str] = {}
        for collection_id in self._store.list_collections():
            document = self._store.read(collection_id)
            for hn, module in document.modules.items():
                if hn in index:
                    logger.warning(
                        "module %s in %s already loaded from %s, ignoring duplicate",
                        hn,
                        collection_id,
                        collections[hn],
                    )
                    continue
                index[hn] = module
                collections[hn] = collection_id

        self._index = index
        self._collections = collections
        self._graph.rebuild(index.values())
        self._cache.invalidate_all()
        logger.info(
            "loaded %d module(s) from %d collection(s)", len(index), len(set(collections.values()))
        )

    def reload(self) -> OperationResult:
        """Re-read every collection; on failure the current state is kept."""
        with self._lock:
            try:
                self._load()
            except CatalogError as e:
                logger.warning("reload failed, keeping current state: %s", e)
                return OperationResult.failure(e)
            return OperationResult.ok(str(len(self._index)), f"loaded {len(self._index)} module(s)")

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, request: CreateRequest) -> OperationResult:
        """Validate, persist and index a new entry.

        Checks run in order and stop at the first failure:
        name, self-parent, duplicate, parent exists, cycle, depth, type,
        then the store write. Nothing changes unless the write succeeds.

        Returns:
            OperationResult with the new hierarchical name as value
        """
        with self._lock:
            try:
                module = self._build_new(request)
                collection_id = self._store.collection_id_for(module.file_path)
                document = self._store.read(collection_id)
                self._store.write(collection_id, document.with_module(module))
            except CatalogError as e:
                logger.debug("create %r rejected: %s", request.name, e)
                return OperationResult.failure(e)

            hn = module.hierarchical_name
            self._index[hn] = module
            self._collections[hn] = collection_id
            self._graph.register(module)
            self._cache_put(module)
            logger.info("created %s %s in %s", get_module_kind(module).value, hn, collection_id)
            return OperationResult.ok(hn, f"created {hn}")

    def _build_new(self, request: CreateRequest) -> Module:
        limits = self._config.validation
        validate_name(request.name, max_length=limits.max_name_length)

        parent = request.parent or None
        hn = hierarchical_name_for(request.name, parent)
        if parent is not None and parent == hn:
            raise CircularReferenceError(hn, parent)
        if hn in self._index:
            raise ConflictError(hn)
        if parent is not None:
            if parent not in self._index:
                raise EntryNotFoundError(parent, role="parent")
            if self._graph.has_cycle(hn, parent):
                raise CircularReferenceError(hn, parent)

        validate_hierarchical_name(
            hn,
            max_depth=limits.max_depth,
            max_length=limits.max_name_length,
        )
        return build_module(request, hn, self._clock())

    def update(self, hierarchical_name: str, patch: Mapping[str, object]) -> OperationResult:
        """Apply a partial change to an existing entry.

        name, hierarchical_name and type cannot change. A new parent must
        exist and must not be the entry itself or one of its descendants.
        Changing file_path moves the entry to another collection.

        Returns:
            OperationResult with the hierarchical name as value
        """
        with self._lock:
            try:
                current = self._require(hierarchical_name)
                check_patch(current, patch)
                if "parent" in patch:
                    self._check_new_parent(hierarchical_name, patch["parent"])
                updated = apply_patch(current, patch, self._clock())
                target = self._persist_update(current, updated)
            except CatalogError as e:
                logger.debug("update %r rejected: %s", hierarchical_name, e)
                return OperationResult.failure(e)

            self._index[hierarchical_name] = updated
            self._collections[hierarchical_name] = target
            self._graph.reparent(updated)
            self._cache_put(updated)
            logger.info("updated %s (%s)", hierarchical_name, ", ".join(sorted(patch)))
            return OperationResult.ok(hierarchical_name, f"updated {hierarchical_name}")

    def _check_new_parent(self, hierarchical_name: str, value: object) -> None:
        if value is None or value == "":
            return
        parent = str(value)
        if parent not in self._index:
            raise EntryNotFoundError(parent, role="parent")
        if self._graph.has_cycle(hierarchical_name, parent):
            raise CircularReferenceError(hierarchical_name, parent)

    def _persist_update(self, current: Module, updated: Module) -> str:
        """Write updated entry; returns its collection id."""
        hn = updated.hierarchical_name
        source = self._collections[hn]
        target = self._store.collection_id_for(updated.file_path)

        if source == target:
            self._store.write(target, self._store.read(target).with_module(updated))
            return target

        # Moving between collections: add to target first, then drop from source
        target_before = self._store.read(target)
        self._store.write(target, target_before.with_module(updated))
        try:
            self._store.write(source, self._store.read(source).without(hn))
        except CatalogError:
            self._store.write(target, target_before)
            raise
        logger.info("moved %s from %s to %s", hn, source, target)
        return target

    def delete(self, hierarchical_name: str) -> OperationResult:
        """Remove an entry that has no children.

        Returns:
            OperationResult with the removed hierarchical name as value
        """
        with self._lock:
            try:
                self._require(hierarchical_name)
                if self._graph.has_children(hierarchical_name):
                    raise HasChildrenError(
                        hierarchical_name, self._graph.children_of(hierarchical_name)
                    )
                collection_id = self._collections[hierarchical_name]
                document = self._store.read(collection_id)
                self._store.write(collection_id, document.without(hierarchical_name))
            except CatalogError as e:
                logger.debug("delete %r rejected: %s", hierarchical_name, e)
                return OperationResult.failure(e)

            del self._index[hierarchical_name]
            del self._collections[hierarchical_name]
            self._graph.remove(hierarchical_name)
            self._cache.invalidate(hierarchical_name)
            logger.info("deleted %s from %s", hierarchical_name, collection_id)
            return OperationResult.ok(hierarchical_name, f"deleted {hierarchical_name}")

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, hierarchical_name: str) -> Module | None:
        """Entry by primary key. Cache first, then index."""
        with self._lock:
            if self._config.cache.enabled:
                cached = self._cache.get(hierarchical_name)
                if cached is not None:
                    return cached

            module = self._index.get(hierarchical_name)
            if module is not None:
                self._cache_put(module)
            return module

    def find(self, criteria: SearchCriteria) -> SearchResult:
        """Filtered, ranked, paginated search.

        Criteria constraining only hierarchical_name take the direct
        lookup path.
        """
        with self._lock:
            lookup = criteria.hierarchical_name
            if lookup is not None and criteria.is_direct_lookup:
                module = self.get(lookup)
                found = () if module is None else (module,)
                page = found[criteria.offset : criteria.offset + criteria.limit]
                return SearchResult(modules=page, total=len(found), query=criteria)
            return self._search.search(self._index.values(), criteria)

    def all_modules(self) -> list[Module]:
        """Every entry, sorted by hierarchical name."""
        with self._lock:
            return [self._index[hn] for hn in sorted(self._index)]

    def count(self) -> int:
        """Number of entries."""
        with self._lock:
            return len(self._index)

    def list_types(self) -> list[ModuleKind]:
        """Supported kinds; a new list on every call."""
        return list(ModuleKind)

    def relationships_of(self, hierarchical_name: str) -> Relationship | None:
        """Children and referrers of an entry; None if it does not exist."""
        with self._lock:
            module = self._index.get(hierarchical_name)
            if module is None:
                return None
            references = tuple(
                hn
                for hn, other in self._index.items()
                if hn != hierarchical_name and references_type(other, module.name)
            )
            return Relationship(
                hierarchical_name=hierarchical_name,
                children=tuple(self._graph.children_of(hierarchical_name)),
                references=references,
            )

    def type_structure(self, type_name: str) -> TypeStructure:
        """Where a type is defined and every entry that uses it."""
        with self._lock:
            named = self._search.search(
                self._index.values(),
                SearchCriteria(name=type_name, limit=max(len(self._index), 1)),
            ).modules
            referrers = [m for m in self._index.values() if references_type(m, type_name)]

            related: dict[str, Module] = {}
            for module in (*named, *referrers):
                related.setdefault(module.hierarchical_name, module)

            relationships = [
                ModuleRelationship(
                    source=m.hierarchical_name,
                    target=type_name,
                    relationship_type=kind,
                    description=f"{m.hierarchical_name} uses {type_name} ({kind.value})",
                )
                for m in referrers
                for ref, kind in type_references(m)
                if ref == type_name
            ]

            hierarchy: tuple[str, ...] = ()
            definition = next((m for m in named if m.name == type_name), None)
            if definition is not None:
                hn = definition.hierarchical_name
                hierarchy = (*self._graph.ancestors_of(hn), hn)
                relationships.extend(
                    ModuleRelationship(
                        source=hn,
                        target=child,
                        relationship_type=RelationshipType.PARENT_CHILD,
                        description=f"{child} is declared in {hn}",
                    )
                    for child in self._graph.child_paths_of(hn)
                )

            return TypeStructure(
                type_name=type_name,
                hierarchy=hierarchy,
                related_modules=tuple(related.values()),
                relationships=tuple(relationships),
            )

    # =========================================================================
    # Maintenance
    # =========================================================================

    def check_integrity(self) -> IntegrityReport:
        """Entry-level checks plus per-file parse/schema checks."""
        with self._lock:
            report = self._integrity.check(self._index.values())
            collections = self._store.list_collections()
            file_issues = tuple(self._store.check_files())
            report = report.merged_with(file_issues, len(collections))
            if not report.is_valid:
                logger.warning("integrity check found %d issue(s)", len(report.issues))
            return report

    def storage_stats(self) -> StorageStats:
        """Store file summary."""
        with self._lock:
            return self._store.stats()

    def cache_stats(self) -> CacheStats:
        """Cache counters."""
        with self._lock:
            return self._cache.stats()

    # =========================================================================
    # Internals
    # =========================================================================

    def _require(self, hierarchical_name: str) -> Module:
        module = self._index.get(hierarchical_name)
        if module is None:
            raise EntryNotFoundError(hierarchical_name)
        return module

    def _cache_put(self, module: Module) -> None:
        if self._config.cache.enabled:
            self._cache.put(module.hierarchical_name, module)
