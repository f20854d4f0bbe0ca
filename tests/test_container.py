"""Tests for the dependency injection container."""

import pytest

from lawmasters.config import Settings, StorageBackend
from lawmasters.container import Container
from lawmasters.exceptions import ConfigurationError
from lawmasters.store.display import DocumentRoot
from lawmasters.store.storage import JSONFileStorage, MemoryStorage, SQLiteStorage
from lawmasters.ui.api_client import LawMastersAPIClient
from lawmasters.ui.queries import DashboardQueries


def _settings(tmp_path, backend: StorageBackend) -> Settings:
    return Settings(_env_file=None, storage_backend=backend, storage_path=tmp_path)


class TestStorageSelection:
    def test_memory_backend(self, tmp_path):
        container = Container(_settings(tmp_path, StorageBackend.MEMORY))

        assert isinstance(container.storage, MemoryStorage)

    def test_json_backend(self, tmp_path):
        container = Container(_settings(tmp_path, StorageBackend.JSON))

        assert isinstance(container.storage, JSONFileStorage)
        assert container.storage.directory == tmp_path

    def test_sqlite_backend_is_initialized(self, tmp_path):
        container = Container(_settings(tmp_path, StorageBackend.SQLITE))

        storage = container.storage
        storage.set_item("k", "v")

        assert isinstance(storage, SQLiteStorage)
        assert (tmp_path / "preferences.db").exists()
        container.close()

    def test_storage_path_that_is_a_file_is_rejected(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        container = Container(_settings(blocker, StorageBackend.JSON))

        with pytest.raises(ConfigurationError) as exc_info:
            _ = container.storage

        assert exc_info.value.context["storage_path"] == str(blocker)

    def test_unreachable_sqlite_path_starts_with_defaults(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        container = Container(_settings(blocker / "nested", StorageBackend.SQLITE))

        store = container.store
        store.toggle_dark_mode()

        assert isinstance(container.storage, SQLiteStorage)
        assert store.state.dark_mode is True
        container.close()


class TestServices:
    def test_services_are_cached(self, tmp_path):
        container = Container(_settings(tmp_path, StorageBackend.MEMORY))

        assert container.store is container.store
        assert container.persister is container.persister
        assert container.persister.storage is container.storage

    def test_store_uses_injected_clock_and_display(self, tmp_path, clock):
        display = DocumentRoot()
        container = Container(
            _settings(tmp_path, StorageBackend.MEMORY), clock=clock, display=display
        )

        container.store.toggle_dark_mode()
        container.store.start_timer("M-1", "Drafting")

        assert display.is_dark
        assert container.store.state.active_timer.start_time == clock.now

    def test_store_persists_across_containers(self, tmp_path):
        first = Container(_settings(tmp_path, StorageBackend.JSON))
        first.store.add_recent_matter("M-2024-118")

        second = Container(_settings(tmp_path, StorageBackend.JSON))

        assert second.store.state.recent_matters == ("M-2024-118",)

    def test_storage_key_from_settings(self, tmp_path):
        settings = Settings(
            _env_file=None,
            storage_backend=StorageBackend.MEMORY,
            storage_path=tmp_path,
            storage_key="custom-key",
        )

        assert Container(settings).persister.key == "custom-key"

    def test_api_services(self, tmp_path):
        container = Container(_settings(tmp_path, StorageBackend.MEMORY))

        assert isinstance(container.api_client, LawMastersAPIClient)
        assert isinstance(container.queries, DashboardQueries)
        assert container.queries.client is container.api_client

    def test_close_without_storage_access(self, tmp_path):
        Container(_settings(tmp_path, StorageBackend.SQLITE)).close()
