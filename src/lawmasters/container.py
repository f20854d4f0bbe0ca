"""Dependency injection container for the LawMasters client.

Builds the session store and its collaborators from settings. Consumers
receive the container (or the store it owns) explicitly instead of
importing a module-level singleton, so tests construct a fresh one each.

Usage:
    from lawmasters.container import Container, get_container

    container = get_container()
    store = container.store
    store.add_recent_matter("M-2024-118")
"""

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from lawmasters.config import Settings, StorageBackend, get_settings
from lawmasters.exceptions import ConfigurationError, StorageError
from lawmasters.logging_config import get_logger
from lawmasters.store.app_store import AppStore
from lawmasters.store.clock import Clock, system_clock
from lawmasters.store.display import DisplaySurface, DocumentRoot
from lawmasters.store.persistence import StatePersister
from lawmasters.store.storage import (
    JSONFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SQLiteStorage,
)

if TYPE_CHECKING:
    from lawmasters.ui.api_client import LawMastersAPIClient
    from lawmasters.ui.queries import DashboardQueries

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Services are instantiated on first access and cached for reuse. Pass a
    clock or display to override the defaults in tests:

        container = Container(Settings(storage_backend="memory"), clock=fake_clock)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        clock: Clock = system_clock,
        display: DisplaySurface | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self._display = display
        logger.debug(
            "container_created",
            storage_backend=self._settings.storage_backend.value,
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def storage(self) -> KeyValueStorage:
        """Storage backend selected by settings.storage_backend.

        Raises:
            ConfigurationError: If storage_path exists but is not a directory.
        """
        backend = self._settings.storage_backend
        if backend == StorageBackend.MEMORY:
            return MemoryStorage()
        storage_path = self._settings.storage_path
        if storage_path.exists() and not storage_path.is_dir():
            raise ConfigurationError(
                f"Storage path is not a directory: {storage_path}",
                context={"storage_path": str(storage_path)},
            )
        if backend == StorageBackend.SQLITE:
            path = self._settings.sqlite_path
            logger.info("initializing_sqlite_storage", path=str(path))
            storage = SQLiteStorage(path)
            try:
                storage.initialize()
            except StorageError as e:
                # The store still starts with defaults; reads and writes log
                # their own failures.
                logger.warning("storage_initialize_failed", **e.to_dict())
            return storage
        logger.info("initializing_json_storage", path=str(self._settings.storage_path))
        return JSONFileStorage(self._settings.storage_path)

    @cached_property
    def persister(self) -> StatePersister:
        return StatePersister(self.storage, self._settings.storage_key)

    @cached_property
    def display(self) -> DisplaySurface:
        return self._display if self._display is not None else DocumentRoot()

    @cached_property
    def store(self) -> AppStore:
        """The session store, rehydrated from storage on first access."""
        return AppStore(
            persister=self.persister,
            display=self.display,
            clock=self._clock,
        )

    @cached_property
    def api_client(self) -> "LawMastersAPIClient":
        from lawmasters.ui.api_client import LawMastersAPIClient

        return LawMastersAPIClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.api_timeout,
        )

    @cached_property
    def queries(self) -> "DashboardQueries":
        from lawmasters.ui.queries import DashboardQueries
        from lawmasters.ui.query_cache import QueryCache

        return DashboardQueries(self.api_client, QueryCache(clock=self._clock))

    def close(self) -> None:
        """Release storage connections held by the container."""
        storage = self.__dict__.get("storage")
        if isinstance(storage, SQLiteStorage):
            storage.close()


@lru_cache
def get_container() -> Container:
    """Get the process-wide container built from environment settings.

    Call get_container.cache_clear() to rebuild it.
    """
    return Container()
