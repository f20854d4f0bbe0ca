"""Session state snapshots.

State is split into the fields that survive a restart (PersistedState) and
the ones that reset on every load (TransientState). Both are frozen: the
store replaces snapshots rather than mutating them, so a listener holding a
previous snapshot always sees the value it was handed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from uuid import uuid4

from lawmasters.domain.value_objects import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_TIMEZONE,
    MAX_NOTIFICATIONS,
    MAX_RECENT_MATTERS,
    Language,
    NotificationKind,
    TimerStatus,
)


def new_notification_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class ActiveTimer:
    """A running work timer.

    start_time and duration are integer milliseconds. duration only holds
    time folded in by pause/update; the live elapsed value is
    duration + (now - start_time).
    """

    matter_id: str
    description: str
    start_time: int
    duration: int = 0

    def elapsed(self, now: int) -> int:
        return self.duration + max(now - self.start_time, 0)

    def fold(self, now: int) -> ActiveTimer:
        return replace(self, duration=self.elapsed(now), start_time=now)


@dataclass(frozen=True, slots=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str
    timestamp: int
    id: str = field(default_factory=new_notification_id)
    read: bool = False

    def mark_read(self) -> Notification:
        return replace(self, read=True)


@dataclass(frozen=True, slots=True)
class PersistedState:
    """Fields written to durable storage."""

    dark_mode: bool = False
    language: Language = Language.ENGLISH
    bci_safe_mode: bool = True
    timezone: str = DEFAULT_TIMEZONE
    date_format: str = DEFAULT_DATE_FORMAT
    recent_matters: tuple[str, ...] = ()
    pinned_items: frozenset[str] = frozenset()

    def with_recent_matter(self, matter_id: str) -> PersistedState:
        rest = tuple(m for m in self.recent_matters if m != matter_id)
        return replace(
            self, recent_matters=((matter_id,) + rest)[:MAX_RECENT_MATTERS]
        )

    def with_pin_toggled(self, item_id: str) -> PersistedState:
        if item_id in self.pinned_items:
            return replace(self, pinned_items=self.pinned_items - {item_id})
        return replace(self, pinned_items=self.pinned_items | {item_id})


@dataclass(frozen=True, slots=True)
class TransientState:
    """Fields that reset to their initial values on every load."""

    sidebar_open: bool = False
    active_timer: ActiveTimer | None = None
    notifications: tuple[Notification, ...] = ()

    def with_notification(self, notification: Notification) -> TransientState:
        return replace(
            self,
            notifications=((notification,) + self.notifications)[:MAX_NOTIFICATIONS],
        )


@dataclass(frozen=True, slots=True)
class SessionState:
    """Complete view of the session: the persisted and transient halves."""

    persisted: PersistedState = field(default_factory=PersistedState)
    transient: TransientState = field(default_factory=TransientState)

    # Flat read accessors so consumers don't need to know about the split.

    @property
    def sidebar_open(self) -> bool:
        return self.transient.sidebar_open

    @property
    def dark_mode(self) -> bool:
        return self.persisted.dark_mode

    @property
    def language(self) -> Language:
        return self.persisted.language

    @property
    def bci_safe_mode(self) -> bool:
        return self.persisted.bci_safe_mode

    @property
    def timezone(self) -> str:
        return self.persisted.timezone

    @property
    def date_format(self) -> str:
        return self.persisted.date_format

    @property
    def active_timer(self) -> ActiveTimer | None:
        return self.transient.active_timer

    @property
    def timer_status(self) -> TimerStatus:
        if self.transient.active_timer is None:
            return TimerStatus.IDLE
        return TimerStatus.RUNNING

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self.transient.notifications

    @property
    def recent_matters(self) -> tuple[str, ...]:
        return self.persisted.recent_matters

    @property
    def pinned_items(self) -> frozenset[str]:
        return self.persisted.pinned_items
