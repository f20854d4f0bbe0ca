"""Application preference & session store and its collaborators."""

from lawmasters.store.app_store import AppStore, Listener
from lawmasters.store.clock import Clock, system_clock
from lawmasters.store.display import DisplaySurface, DocumentRoot
from lawmasters.store.persistence import (
    StatePersister,
    decode_persisted,
    encode_persisted,
)
from lawmasters.store.storage import (
    JSONFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SQLiteStorage,
)

__all__ = [
    "AppStore",
    "Clock",
    "DisplaySurface",
    "DocumentRoot",
    "JSONFileStorage",
    "KeyValueStorage",
    "Listener",
    "MemoryStorage",
    "SQLiteStorage",
    "StatePersister",
    "decode_persisted",
    "encode_persisted",
    "system_clock",
]
