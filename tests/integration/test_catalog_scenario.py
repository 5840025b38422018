"""End-to-end catalog scenarios over a real YAML store.

Tests:
- Parent/child lifecycle: create, blocked delete, delete bottom-up
- State survives a new Catalog over the same directory
- Config file + environment overrides drive the store location
"""

from pathlib import Path

from codestruct import (
    Catalog,
    CreateRequest,
    SearchCriteria,
    YamlModuleStore,
    config_from_env,
    load_config,
)
from codestruct.application.reporters import ConsoleReporter, JsonReporter
from codestruct.domain.exceptions import ErrorKind
from codestruct.domain.model.enums import ModuleKind
from codestruct.presentation.pytest_plugin import FakeClock


class TestParentChildLifecycle:
    """Create A and A.B, then tear down in the only allowed order."""

    def test_lifecycle(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """Delete order is enforced and every step is persisted."""
        assert catalog.create(CreateRequest(name="A", type="class")).value == "A"
        assert catalog.create(CreateRequest(name="B", type="function", parent="A")).value == "A.B"

        blocked = catalog.delete("A")
        assert blocked.error_kind is ErrorKind.HAS_CHILDREN

        assert catalog.delete("A.B").success is True
        assert catalog.delete("A").success is True
        assert catalog.count() == 0
        assert len(catalog_store.read("modules")) == 0

    def test_state_survives_restart(self, catalog: Catalog, catalog_store: YamlModuleStore) -> None:
        """A second catalog over the same directory sees the same entries."""
        catalog.create(CreateRequest(name="App", type=ModuleKind.FILE, file_path="src/app.py"))
        catalog.create(
            CreateRequest(name="UserService", type="class", parent="App", file_path="src/app.py")
        )
        catalog.create(
            CreateRequest(
                name="find_user",
                type="function",
                parent="App.UserService",
                file_path="src/app.py",
                return_type="User",
                is_async=True,
            )
        )
        catalog.update("App.UserService", {"description": "User lookups"})

        restarted = Catalog(catalog_store)

        assert [m.hierarchical_name for m in restarted.all_modules()] == [
            "App",
            "App.UserService",
            "App.UserService.find_user",
        ]
        service = restarted.get("App.UserService")
        assert service is not None
        assert service.description == "User lookups"
        assert restarted.delete("App.UserService").error_kind is ErrorKind.HAS_CHILDREN
        assert restarted.check_integrity().is_valid is True

    def test_reports(self, catalog: Catalog) -> None:
        """Search and integrity results render in both formats."""
        catalog.create(CreateRequest(name="UserService", type="class"))
        catalog.create(CreateRequest(name="userServiceHelper", type="class"))

        result = catalog.find(SearchCriteria(name="userservice"))

        assert "UserService" in ConsoleReporter().report_search(result)
        assert '"total": 2' in JsonReporter().report_search(result)
        assert '"is_valid": true' in JsonReporter().report_integrity(catalog.check_integrity())


class TestConfiguredCatalog:
    """Catalog built from a config file plus environment overrides."""

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        """Environment wins over the file for the storage root."""
        config_path = tmp_path / "codestruct.yaml"
        config_path.write_text(
            f"storage:\n  root_path: {tmp_path / 'from-file'}\n  max_backups: 2\n"
        )
        config = config_from_env(
            {"CODESTRUCT_ROOT_PATH": str(tmp_path / "from-env")}, load_config(config_path)
        )
        clock = FakeClock()
        store = YamlModuleStore(config=config.storage, validation=config.validation, clock=clock.now)
        catalog = Catalog(store, config, clock=clock.now)

        for i in range(4):
            clock.advance(1)
            catalog.create(CreateRequest(name=f"M{i}", type="variable"))

        assert (tmp_path / "from-env" / "modules.yaml").is_file()
        assert not (tmp_path / "from-file").exists()
        assert len(store.list_backups("modules")) == 2
