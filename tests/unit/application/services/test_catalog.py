"""Tests for application/services/catalog.py.

Tests:
- create: every rejection kind, check order, nothing written on failure
- update: immutable/undefined fields, parent rules, collection moves
- delete: children block deletion
- get/find/all_modules/count/list_types
- Cache coherence and counters
- relationships_of / type_structure
- reload / check_integrity / storage_stats
"""

from pathlib import Path

import pytest

from codestruct.application.services import Catalog
from codestruct.domain.exceptions import ErrorKind, StorageIOError
from codestruct.domain.model.configuration import CacheConfig, CatalogConfig, StorageConfig
from codestruct.domain.model.document import Document
from codestruct.domain.model.enums import AccessModifier, IssueType, ModuleKind, RelationshipType
from codestruct.domain.model.module import ClassModule, FunctionModule
from codestruct.domain.model.parameter import Parameter
from codestruct.domain.model.requests import SearchCriteria
from codestruct.infrastructure.adapters import YamlModuleStore
from codestruct.presentation.pytest_plugin import FakeClock
from tests.factories import make_chain, make_class, make_request

pytestmark = pytest.mark.catalog


class TestCreate:
    """Tests for Catalog.create."""

    def test_root_and_child(self, catalog: Catalog) -> None:
        """Hierarchical name joins parent and name."""
        assert catalog.create(make_request("A")).value == "A"
        result = catalog.create(make_request("B", ModuleKind.FUNCTION, parent="A"))

        assert result.success is True
        assert result.value == "A.B"
        assert catalog.count() == 2

    def test_persisted(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Entry lands in the collection chosen by file_path."""
        catalog.create(make_request("A", file_path="src/app/models.py"))

        assert catalog_store.list_collections() == ["src_app_models"]
        assert list(catalog_store.read("src_app_models").modules) == ["A"]

    def test_default_collection(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """No file_path, default collection."""
        catalog.create(make_request("A"))
        assert catalog_store.list_collections() == ["modules"]

    def test_empty_parent_is_root(self, catalog: Catalog) -> None:
        """Empty string parent means no parent."""
        catalog.create(make_request("A", parent=""))
        module = catalog.get("A")

        assert module is not None
        assert module.parent is None

    @pytest.mark.parametrize("name", ["", "1bad", "has space", "a/b", "a.b"])
    def test_invalid_name(self, catalog: Catalog, name: str) -> None:
        """Bad names are rejected first."""
        result = catalog.create(make_request(name))
        assert result.error_kind is ErrorKind.INVALID_NAME

    def test_conflict(self, catalog: Catalog) -> None:
        """Same hierarchical name twice."""
        catalog.create(make_request("A"))
        result = catalog.create(make_request("A", ModuleKind.FILE))

        assert result.error_kind is ErrorKind.CONFLICT
        assert "'A'" in result.message

    def test_missing_parent(self, catalog: Catalog) -> None:
        """Parent must exist."""
        result = catalog.create(make_request("B", parent="A"))

        assert result.error_kind is ErrorKind.NOT_FOUND
        assert result.message == "parent 'A' does not exist"

    def test_too_deep(self, catalog: Catalog) -> None:
        """Sixth level is rejected."""
        parent = None
        for i in range(5):
            result = catalog.create(make_request(f"N{i}", parent=parent))
            assert result.success is True
            parent = result.value

        result = catalog.create(make_request("N5", parent=parent))
        assert result.error_kind is ErrorKind.INVALID_DEPTH

    def test_unsupported_type(self, catalog: Catalog) -> None:
        """Unknown type tags are rejected."""
        result = catalog.create(make_request("E", "enum"))
        assert result.error_kind is ErrorKind.UNSUPPORTED_TYPE

    def test_name_checked_before_type(self, catalog: Catalog) -> None:
        """Checks stop at the first failure."""
        result = catalog.create(make_request("1bad", "enum"))
        assert result.error_kind is ErrorKind.INVALID_NAME

    def test_conflict_checked_before_type(self, catalog: Catalog) -> None:
        """Duplicate wins over unsupported type."""
        catalog.create(make_request("A"))
        result = catalog.create(make_request("A", "enum"))
        assert result.error_kind is ErrorKind.CONFLICT

    def test_failure_writes_nothing(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Rejected create leaves store and index untouched."""
        catalog.create(make_request("B", parent="missing"))

        assert catalog_store.list_collections() == []
        assert catalog.count() == 0

    def test_duplicate_parameters(
        self, catalog: Catalog, catalog_store: YamlModuleStore
    ) -> None:
        """Entry invariant violations are validation failures, not exceptions."""
        request = make_request(
            "f", ModuleKind.FUNCTION, parameters=(Parameter("x"), Parameter("x"))
        )
        result = catalog.create(request)

        assert not result.success
        assert result.error_kind is ErrorKind.VALIDATION_ERROR
        assert "duplicate parameter" in result.message
        assert catalog_store.list_collections() == []

    @pytest.mark.parametrize(
        "fields",
        [
            {"access_modifier": "internal"},
            {"type": ModuleKind.FUNCTION, "parameters": ({"data_type": "int"},)},
            {"type": ModuleKind.FUNCTION, "parameters": ("x",)},
            {"type": ModuleKind.CLASS, "inheritance": "Base"},
        ],
    )
    def test_malformed_payload(
        self, catalog: Catalog, catalog_store: YamlModuleStore, fields: dict[str, object]
    ) -> None:
        """Values of the wrong shape fail without writing anything."""
        result = catalog.create(make_request("f", **fields))

        assert not result.success
        assert result.error_kind is ErrorKind.VALIDATION_ERROR
        assert catalog_store.list_collections() == []
        assert catalog.get("f") is None

    def test_string_access_modifier(
        self, catalog: Catalog, catalog_store: YamlModuleStore
    ) -> None:
        """Stored visibility values are accepted as strings."""
        result = catalog.create(make_request("A", access_modifier="private"))
        stored = catalog_store.read("modules").modules["A"]

        assert result.success is True
        assert stored.access_modifier is AccessModifier.PRIVATE

    def test_parameter_mappings(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Parameters given as mappings are converted and persisted."""
        request = make_request(
            "run",
            ModuleKind.FUNCTION,
            parameters=({"name": "x", "data_type": "int"},),
        )
        result = catalog.create(request)
        stored = catalog_store.read("modules").modules["run"]

        assert result.success is True
        assert isinstance(stored, FunctionModule)
        assert stored.parameters == (Parameter(name="x", data_type="int"),)

    def test_io_error(self, tmp_path: Path) -> None:
        """Store failure is reported, index unchanged."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = YamlModuleStore(config=StorageConfig(root_path=blocker / "data"))
        catalog = Catalog(store)

        result = catalog.create(make_request("A"))

        assert result.error_kind is ErrorKind.IO_ERROR
        assert catalog.get("A") is None

    def test_timestamps_from_clock(self, catalog: Catalog, catalog_clock: FakeClock) -> None:
        """created_at and updated_at come from the injected clock."""
        start = catalog_clock.current
        catalog.create(make_request("A"))
        module = catalog.get("A")

        assert module is not None
        assert module.created_at == module.updated_at == start


class TestUpdate:
    """Tests for Catalog.update."""

    def test_description(self, catalog: Catalog) -> None:
        """Patch is applied and updated_at moves."""
        catalog.create(make_request("A"))
        result = catalog.update("A", {"description": "Entry point"})
        module = catalog.get("A")

        assert result.success is True
        assert module is not None
        assert module.description == "Entry point"
        assert module.updated_at > module.created_at

    def test_persisted(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Update is written to the store."""
        catalog.create(make_request("A"))
        catalog.update("A", {"inheritance": ["Base"]})

        stored = catalog_store.read("modules").modules["A"]
        assert isinstance(stored, ClassModule)
        assert stored.inheritance == ("Base",)

    def test_missing(self, catalog: Catalog) -> None:
        """Unknown entry."""
        result = catalog.update("A", {"description": "x"})
        assert result.error_kind is ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("field", ["name", "hierarchical_name", "type"])
    def test_immutable(self, catalog: Catalog, field: str) -> None:
        """Identity fields cannot change."""
        catalog.create(make_request("A"))
        result = catalog.update("A", {field: "B"})

        assert result.error_kind is ErrorKind.IMMUTABLE_FIELD
        assert catalog.get("A") is not None

    def test_field_of_other_variant(self, catalog: Catalog) -> None:
        """Fields the variant lacks are validation errors."""
        catalog.create(make_request("A"))
        result = catalog.update("A", {"data_type": "int"})
        assert result.error_kind is ErrorKind.VALIDATION_ERROR

    def test_reparent(self, catalog: Catalog) -> None:
        """Parent moves; hierarchical name stays."""
        catalog.create(make_request("A"))
        catalog.create(make_request("C"))
        catalog.create(make_request("B", parent="A"))

        result = catalog.update("A.B", {"parent": "C"})
        relationships = catalog.relationships_of("C")

        assert result.success is True
        assert relationships is not None
        assert relationships.children == ("B",)
        assert catalog.delete("A").success is True

    def test_clear_parent(self, catalog: Catalog) -> None:
        """Empty parent detaches the entry."""
        catalog.create(make_request("A"))
        catalog.create(make_request("B", parent="A"))
        catalog.update("A.B", {"parent": ""})
        module = catalog.get("A.B")

        assert module is not None
        assert module.parent is None

    def test_missing_parent(self, catalog: Catalog) -> None:
        """New parent must exist."""
        catalog.create(make_request("A"))
        result = catalog.update("A", {"parent": "Z"})
        assert result.error_kind is ErrorKind.NOT_FOUND

    def test_self_parent(self, catalog: Catalog) -> None:
        """Entry cannot parent itself."""
        catalog.create(make_request("A"))
        result = catalog.update("A", {"parent": "A"})
        assert result.error_kind is ErrorKind.CIRCULAR_REFERENCE

    def test_descendant_parent(self, catalog: Catalog) -> None:
        """Entry cannot move under its own descendant."""
        catalog.create(make_request("A"))
        catalog.create(make_request("B", parent="A"))
        catalog.create(make_request("C", parent="A.B"))

        result = catalog.update("A", {"parent": "A.B.C"})

        assert result.error_kind is ErrorKind.CIRCULAR_REFERENCE
        module = catalog.get("A")
        assert module is not None
        assert module.parent is None

    def test_move_between_collections(
        self, catalog: Catalog, catalog_store: YamlModuleStore
    ) -> None:
        """Changing file_path moves the stored entry."""
        catalog.create(make_request("A", file_path="src/a.py"))
        result = catalog.update("A", {"file_path": "src/b.py"})

        assert result.success is True
        assert len(catalog_store.read("src_a")) == 0
        assert list(catalog_store.read("src_b").modules) == ["A"]

        fresh = Catalog(catalog_store)
        module = fresh.get("A")
        assert module is not None
        assert module.file_path == "src/b.py"


class TestDelete:
    """Tests for Catalog.delete."""

    def test_delete(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Entry leaves index, cache and store."""
        catalog.create(make_request("A"))
        result = catalog.delete("A")

        assert result.success is True
        assert result.value == "A"
        assert catalog.get("A") is None
        assert len(catalog_store.read("modules")) == 0

    def test_missing(self, catalog: Catalog) -> None:
        """Unknown entry."""
        assert catalog.delete("A").error_kind is ErrorKind.NOT_FOUND

    def test_has_children(self, catalog: Catalog) -> None:
        """Parent with children is kept."""
        catalog.create(make_request("A"))
        catalog.create(make_request("B", parent="A"))
        result = catalog.delete("A")

        assert result.error_kind is ErrorKind.HAS_CHILDREN
        assert "1 child" in result.message
        assert catalog.get("A") is not None

    def test_name_reusable_after_delete(self, catalog: Catalog) -> None:
        """Deleted names can be created again."""
        catalog.create(make_request("A"))
        catalog.delete("A")
        assert catalog.create(make_request("A", ModuleKind.FILE)).success is True


class TestQueries:
    """Tests for get, find, all_modules, count, list_types."""

    def test_get_missing(self, catalog: Catalog) -> None:
        """Absent entry is None, not an error."""
        assert catalog.get("nothing") is None

    def test_find_direct_lookup(self, catalog: Catalog) -> None:
        """hierarchical_name-only criteria return zero or one entry."""
        catalog.create(make_request("A"))

        hit = catalog.find(SearchCriteria(hierarchical_name="A"))
        miss = catalog.find(SearchCriteria(hierarchical_name="B"))

        assert [m.hierarchical_name for m in hit.modules] == ["A"]
        assert hit.total == 1
        assert miss.total == 0

    def test_find_hierarchical_name_with_filters(self, catalog: Catalog) -> None:
        """hierarchical_name plus another filter goes through search."""
        catalog.create(make_request("A"))

        hit = catalog.find(SearchCriteria(hierarchical_name="A", type=ModuleKind.CLASS))
        miss = catalog.find(SearchCriteria(hierarchical_name="A", type=ModuleKind.FILE))

        assert [m.hierarchical_name for m in hit.modules] == ["A"]
        assert miss.total == 0

    def test_find_ranked(self, catalog: Catalog) -> None:
        """Name query ranks exact before prefix."""
        catalog.create(make_request("userServiceHelper"))
        catalog.create(make_request("UserService"))
        catalog.create(make_request("Abc"))

        result = catalog.find(SearchCriteria(name="UserService"))

        assert [m.name for m in result.modules] == ["UserService", "userServiceHelper"]

    def test_find_by_type(self, catalog: Catalog) -> None:
        """Type filter."""
        catalog.create(make_request("A"))
        catalog.create(make_request("run", ModuleKind.FUNCTION))

        result = catalog.find(SearchCriteria(type=ModuleKind.FUNCTION))

        assert [m.name for m in result.modules] == ["run"]

    def test_all_modules_sorted(self, catalog: Catalog) -> None:
        """Sorted by hierarchical name."""
        for name in ("C", "A", "B"):
            catalog.create(make_request(name))

        assert [m.hierarchical_name for m in catalog.all_modules()] == ["A", "B", "C"]

    def test_list_types_fresh(self, catalog: Catalog) -> None:
        """Callers cannot change the catalog's list."""
        types = catalog.list_types()
        types.clear()

        assert catalog.list_types() == list(ModuleKind)
        assert len(catalog.list_types()) == 5


class TestCache:
    """Tests for cache coherence and counters."""

    def test_get_after_update(self, catalog: Catalog) -> None:
        """Cached copy is replaced on update."""
        catalog.create(make_request("A"))
        catalog.get("A")
        catalog.update("A", {"description": "fresh"})
        module = catalog.get("A")

        assert module is not None
        assert module.description == "fresh"

    def test_hits_and_misses(self, catalog: Catalog, catalog_clock: FakeClock) -> None:
        """Expired entries are misses and get refilled."""
        catalog.create(make_request("A"))
        catalog.get("A")
        catalog_clock.advance(catalog.config.cache.ttl_seconds)
        catalog.get("A")
        catalog.get("A")

        stats = catalog.cache_stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.size == 1

    def test_disabled(self, tmp_path: Path) -> None:
        """Disabled cache is never consulted."""
        config = CatalogConfig(
            storage=StorageConfig(root_path=tmp_path),
            cache=CacheConfig(enabled=False),
        )
        catalog = Catalog(YamlModuleStore(config=config.storage), config)
        catalog.create(make_request("A"))

        assert catalog.get("A") is not None
        assert catalog.cache_stats().hits == 0
        assert catalog.cache_stats().size == 0


class TestRelationships:
    """Tests for relationships_of and type_structure."""

    @pytest.fixture
    def populated(self, catalog: Catalog) -> Catalog:
        """User class with a child, a subclass, a function and a variable using it."""
        requests = [
            make_request("User"),
            make_request("email", ModuleKind.VARIABLE, parent="User", data_type="str"),
            make_request("Admin", inheritance=("User",)),
            make_request("load", ModuleKind.FUNCTION, return_type="User"),
            make_request("current", ModuleKind.VARIABLE, data_type="User"),
        ]
        for request in requests:
            assert catalog.create(request).success is True
        return catalog

    def test_relationships_of(self, populated: Catalog) -> None:
        """Children by local name, referrers by hierarchical name."""
        relationships = populated.relationships_of("User")

        assert relationships is not None
        assert relationships.children == ("email",)
        assert sorted(relationships.references) == ["Admin", "current", "load"]

    def test_relationships_of_missing(self, catalog: Catalog) -> None:
        """Absent entry gives None."""
        assert catalog.relationships_of("nothing") is None

    def test_type_structure(self, populated: Catalog) -> None:
        """Definition, referrers and edges."""
        structure = populated.type_structure("User")

        assert structure.hierarchy == ("User",)
        related = [m.hierarchical_name for m in structure.related_modules]
        assert related[0] == "User"
        assert sorted(related) == ["Admin", "User", "current", "load"]

        edges = {(r.source, r.target, r.relationship_type) for r in structure.relationships}
        assert edges == {
            ("Admin", "User", RelationshipType.INHERITANCE),
            ("load", "User", RelationshipType.REFERENCE),
            ("current", "User", RelationshipType.REFERENCE),
            ("User", "User.email", RelationshipType.PARENT_CHILD),
        }

    def test_type_structure_nested_definition(self, catalog: Catalog) -> None:
        """Hierarchy lists ancestors root first."""
        catalog.create(make_request("app"))
        catalog.create(make_request("models", ModuleKind.FILE, parent="app"))
        catalog.create(make_request("Order", parent="app.models"))

        structure = catalog.type_structure("Order")

        assert structure.hierarchy == ("app", "app.models", "app.models.Order")

    def test_type_structure_unknown(self, catalog: Catalog) -> None:
        """Unknown type has empty structure."""
        structure = catalog.type_structure("Ghost")

        assert structure.hierarchy == ()
        assert structure.related_modules == ()
        assert structure.relationships == ()


class TestMaintenance:
    """Tests for loading, reload, check_integrity and storage_stats."""

    def test_loads_existing_store(self, catalog_store: YamlModuleStore) -> None:
        """New catalog sees stored entries."""
        document = Document.empty()
        for module in make_chain(3):
            document = document.with_module(module)
        catalog_store.write("modules", document)

        catalog = Catalog(catalog_store)

        assert catalog.count() == 3
        assert catalog.delete("N0").error_kind is ErrorKind.HAS_CHILDREN

    def test_corrupt_store_fails_construction(self, catalog_store: YamlModuleStore) -> None:
        """Unreadable collection raises at construction."""
        catalog_store.root.mkdir(parents=True)
        (catalog_store.root / "broken.yaml").write_text("modules: [\n")

        with pytest.raises(StorageIOError):
            Catalog(catalog_store)

    def test_duplicates_across_collections(self, catalog_store: YamlModuleStore) -> None:
        """First collection wins."""
        catalog_store.write("one", Document.empty().with_module(make_class("A", description="1")))
        catalog_store.write("two", Document.empty().with_module(make_class("A", description="2")))

        module = Catalog(catalog_store).get("A")

        assert module is not None
        assert module.description == "1"

    def test_reload(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """External writes become visible after reload."""
        catalog_store.write("extra", Document.empty().with_module(make_class("X")))
        assert catalog.get("X") is None

        result = catalog.reload()

        assert result.success is True
        assert result.value == "1"
        assert catalog.get("X") is not None

    def test_reload_failure_keeps_state(
        self, catalog: Catalog, catalog_store: YamlModuleStore
    ) -> None:
        """Corrupt file fails reload, old entries stay."""
        catalog.create(make_request("A"))
        (catalog_store.root / "broken.yaml").write_text("modules: [\n")

        result = catalog.reload()

        assert result.error_kind is ErrorKind.IO_ERROR
        assert catalog.get("A") is not None

    def test_check_integrity_clean(self, catalog: Catalog) -> None:
        """Entries created through the catalog are consistent."""
        catalog.create(make_request("A"))
        catalog.create(make_request("B", parent="A"))

        report = catalog.check_integrity()

        assert report.is_valid is True
        assert report.checked_items == 3

    def test_check_integrity_dangling_parent(self, catalog_store: YamlModuleStore) -> None:
        """Entries written behind the catalog's back are flagged."""
        catalog_store.write("modules", Document.empty().with_module(make_class("B", "A")))

        report = Catalog(catalog_store).check_integrity()

        assert [i.issue_type for i in report.issues] == [IssueType.MISSING_REFERENCE]

    def test_check_integrity_reports_files(
        self, catalog: Catalog, catalog_store: YamlModuleStore
    ) -> None:
        """Files broken after load are reported too."""
        catalog.create(make_request("A"))
        (catalog_store.root / "broken.yaml").write_text("modules: [\n")

        report = catalog.check_integrity()

        assert [i.issue_type for i in report.issues] == [IssueType.CORRUPTED_FILE]

    def test_storage_stats(self, catalog: Catalog) -> None:
        """Stats come from the store."""
        catalog.create(make_request("A"))
        catalog.create(make_request("B", file_path="b.py"))

        stats = catalog.storage_stats()

        assert stats.total_files == 2
        assert stats.total_modules == 2

    def test_clock_is_injected(self, catalog_store: YamlModuleStore) -> None:
        """Catalog honours a custom wall clock."""
        clock = FakeClock()
        clock.advance(3600)
        catalog = Catalog(catalog_store, clock=clock.now)
        catalog.create(make_request("A"))
        module = catalog.get("A")

        assert module is not None
        assert module.created_at == clock.current
