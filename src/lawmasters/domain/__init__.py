from lawmasters.domain.session import (
    ActiveTimer,
    Notification,
    PersistedState,
    SessionState,
    TransientState,
)
from lawmasters.domain.value_objects import (
    MAX_NOTIFICATIONS,
    MAX_RECENT_MATTERS,
    Language,
    NotificationKind,
    TimerStatus,
)

__all__ = [
    "ActiveTimer",
    "Language",
    "MAX_NOTIFICATIONS",
    "MAX_RECENT_MATTERS",
    "Notification",
    "NotificationKind",
    "PersistedState",
    "SessionState",
    "TimerStatus",
    "TransientState",
]
