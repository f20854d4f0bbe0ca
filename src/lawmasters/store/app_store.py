"""Application preference & session store.

One AppStore instance is created at startup and handed to every consumer.
Each operation computes a new immutable SessionState, swaps it in, writes
the persisted half through to storage when it changed, and then notifies
listeners synchronously, all before the call returns.

Operations never raise on invalid or redundant input; they are no-ops.
Listeners must not call mutating operations while being notified; such a
call raises ReentrantMutationError inside the listener and leaves the
state untouched.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from lawmasters.domain.session import (
    ActiveTimer,
    Notification,
    PersistedState,
    SessionState,
    new_notification_id,
)
from lawmasters.domain.value_objects import Language, NotificationKind
from lawmasters.exceptions import ReentrantMutationError
from lawmasters.logging_config import get_logger
from lawmasters.store.clock import Clock, system_clock
from lawmasters.store.display import DisplaySurface
from lawmasters.store.persistence import StatePersister

logger = get_logger(__name__)

Listener = Callable[[SessionState, SessionState], None]
"""Called with (new_state, previous_state) after every effective mutation."""


class AppStore:
    def __init__(
        self,
        *,
        persister: StatePersister | None = None,
        display: DisplaySurface | None = None,
        clock: Clock = system_clock,
        id_factory: Callable[[], str] = new_notification_id,
    ) -> None:
        self._persister = persister
        self._display = display
        self._clock = clock
        self._id_factory = id_factory
        self._listeners: list[Listener] = []
        self._notifying = False

        persisted = persister.load() if persister is not None else PersistedState()
        self._state = SessionState(persisted=persisted)
        if self._state.dark_mode:
            self._apply_display(True)

    @property
    def state(self) -> SessionState:
        return self._state

    def now(self) -> int:
        """Current time from the store's clock, in epoch milliseconds."""
        return self._clock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # UI preferences
    # ------------------------------------------------------------------

    def set_sidebar_open(self, open: bool) -> None:
        self._commit(
            "set_sidebar_open",
            replace(
                self._state,
                transient=replace(self._state.transient, sidebar_open=bool(open)),
            ),
        )

    def toggle_dark_mode(self) -> None:
        dark_mode = not self._state.dark_mode
        self._commit(
            "toggle_dark_mode",
            replace(
                self._state,
                persisted=replace(self._state.persisted, dark_mode=dark_mode),
            ),
        )
        self._apply_display(dark_mode)

    def set_language(self, lang: Language | str) -> None:
        try:
            language = Language(lang)
        except ValueError:
            logger.warning("unsupported_language_ignored", language=str(lang))
            return
        self._commit(
            "set_language",
            replace(
                self._state,
                persisted=replace(self._state.persisted, language=language),
            ),
        )

    def set_bci_safe_mode(self, enabled: bool) -> None:
        self._commit(
            "set_bci_safe_mode",
            replace(
                self._state,
                persisted=replace(self._state.persisted, bci_safe_mode=bool(enabled)),
            ),
        )

    def set_timezone(self, timezone: str) -> None:
        if not timezone:
            return
        self._commit(
            "set_timezone",
            replace(
                self._state,
                persisted=replace(self._state.persisted, timezone=timezone),
            ),
        )

    def set_date_format(self, date_format: str) -> None:
        if not date_format:
            return
        self._commit(
            "set_date_format",
            replace(
                self._state,
                persisted=replace(self._state.persisted, date_format=date_format),
            ),
        )

    # ------------------------------------------------------------------
    # Work timer
    # ------------------------------------------------------------------

    def start_timer(self, matter_id: str, description: str) -> None:
        """Start a timer, discarding any running one and its duration."""
        if not matter_id or not description:
            logger.debug("timer_start_ignored", matter_id=matter_id)
            return
        now = self._clock()
        previous = self._state.active_timer
        if previous is not None:
            logger.info(
                "timer_replaced",
                matter_id=previous.matter_id,
                discarded_ms=previous.elapsed(now),
            )
        timer = ActiveTimer(
            matter_id=matter_id,
            description=description,
            start_time=now,
            duration=0,
        )
        self._set_timer("start_timer", timer)
        logger.debug("timer_started", matter_id=matter_id)

    def pause_timer(self) -> None:
        """Fold elapsed time into duration and restart the clock.

        There is no separate paused state: the timer stays running.
        """
        timer = self._state.active_timer
        if timer is None:
            return
        self._set_timer("pause_timer", timer.fold(self._clock()))

    def stop_timer(self) -> None:
        if self._state.active_timer is None:
            return
        self._set_timer("stop_timer", None)

    def update_timer_duration(self, duration: int) -> None:
        timer = self._state.active_timer
        if timer is None or duration < 0:
            return
        self._set_timer("update_timer_duration", replace(timer, duration=int(duration)))

    def timer_elapsed(self) -> int:
        """Milliseconds on the running timer including unfolded time; 0 when idle."""
        timer = self._state.active_timer
        if timer is None:
            return 0
        return timer.elapsed(self._clock())

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def add_notification(
        self, kind: NotificationKind | str, title: str, message: str
    ) -> Notification | None:
        try:
            notification_kind = NotificationKind(kind)
        except ValueError:
            logger.warning("unsupported_notification_kind_ignored", kind=str(kind))
            return None

        existing = {n.id for n in self._state.notifications}
        notification_id = self._id_factory()
        while notification_id in existing:
            notification_id = self._id_factory()

        notification = Notification(
            kind=notification_kind,
            title=title,
            message=message,
            timestamp=self._clock(),
            id=notification_id,
        )
        self._commit(
            "add_notification",
            replace(
                self._state,
                transient=self._state.transient.with_notification(notification),
            ),
        )
        return notification

    def mark_notification_read(self, notification_id: str) -> None:
        notifications = self._state.notifications
        for index, notification in enumerate(notifications):
            if notification.id == notification_id:
                break
        else:
            return
        if notification.read:
            return
        updated = (
            notifications[:index] + (notification.mark_read(),) + notifications[index + 1 :]
        )
        self._commit(
            "mark_notification_read",
            replace(
                self._state,
                transient=replace(self._state.transient, notifications=updated),
            ),
        )

    def clear_notifications(self) -> None:
        if not self._state.notifications:
            return
        self._commit(
            "clear_notifications",
            replace(
                self._state,
                transient=replace(self._state.transient, notifications=()),
            ),
        )

    def unread_notification_count(self) -> int:
        return sum(1 for n in self._state.notifications if not n.read)

    # ------------------------------------------------------------------
    # Quick access
    # ------------------------------------------------------------------

    def add_recent_matter(self, matter_id: str) -> None:
        if not matter_id:
            return
        self._commit(
            "add_recent_matter",
            replace(
                self._state,
                persisted=self._state.persisted.with_recent_matter(matter_id),
            ),
        )

    def toggle_pinned_item(self, item_id: str) -> None:
        if not item_id:
            return
        self._commit(
            "toggle_pinned_item",
            replace(
                self._state,
                persisted=self._state.persisted.with_pin_toggled(item_id),
            ),
        )

    def is_pinned(self, item_id: str) -> bool:
        return item_id in self._state.pinned_items

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_timer(self, operation: str, timer: ActiveTimer | None) -> None:
        self._commit(
            operation,
            replace(
                self._state,
                transient=replace(self._state.transient, active_timer=timer),
            ),
        )

    def _commit(self, operation: str, new_state: SessionState) -> None:
        if self._notifying:
            raise ReentrantMutationError(operation)
        previous = self._state
        if new_state == previous:
            return

        self._state = new_state
        if self._persister is not None and new_state.persisted != previous.persisted:
            self._persister.save(new_state.persisted)
        self._notify(operation, new_state, previous)

    def _notify(
        self, operation: str, new_state: SessionState, previous: SessionState
    ) -> None:
        self._notifying = True
        try:
            for listener in list(self._listeners):
                try:
                    listener(new_state, previous)
                except Exception:
                    logger.exception("listener_failed", operation=operation)
        finally:
            self._notifying = False

    def _apply_display(self, dark_mode: bool) -> None:
        if self._display is None:
            return
        try:
            self._display.set_dark(dark_mode)
        except Exception:
            logger.exception("display_update_failed", dark_mode=dark_mode)
