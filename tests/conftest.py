import pytest

from lawmasters.config import DEFAULT_STORAGE_KEY
from lawmasters.store.app_store import AppStore
from lawmasters.store.display import DocumentRoot
from lawmasters.store.persistence import StatePersister
from lawmasters.store.storage import MemoryStorage


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, start: int = 1_760_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def persister(storage: MemoryStorage) -> StatePersister:
    return StatePersister(storage, DEFAULT_STORAGE_KEY)


@pytest.fixture
def display() -> DocumentRoot:
    return DocumentRoot()


@pytest.fixture
def store(
    persister: StatePersister, display: DocumentRoot, clock: FakeClock
) -> AppStore:
    return AppStore(persister=persister, display=display, clock=clock)
