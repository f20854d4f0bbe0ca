from lawmasters.domain.session import (
    ActiveTimer,
    Notification,
    PersistedState,
    SessionState,
    TransientState,
)
from lawmasters.domain.value_objects import Language, NotificationKind, TimerStatus
from lawmasters.store.app_store import AppStore
from lawmasters.store.persistence import StatePersister

__all__ = [
    "ActiveTimer",
    "AppStore",
    "Language",
    "Notification",
    "NotificationKind",
    "PersistedState",
    "SessionState",
    "StatePersister",
    "TimerStatus",
    "TransientState",
]

__version__ = "0.1.0"
