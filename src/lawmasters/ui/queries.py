"""Dashboard data access with the web client's caching conventions.

Volatile widgets (stats, hearings, court alerts) refetch on an interval,
semi-static resources are cached with a stale time, and successful
mutations invalidate the lists they change.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from lawmasters.domain.value_objects import NotificationKind
from lawmasters.logging_config import LogContext, get_logger
from lawmasters.store.app_store import AppStore
from lawmasters.ui.api_client import APIError, LawMastersAPIClient, time_entry_payload
from lawmasters.ui.query_cache import QueryCache, QueryOptions

logger = get_logger(__name__)

SECOND = 1000
MINUTE = 60 * SECOND

STATS_KEY = ("/api/dashboard/stats",)
INSIGHTS_KEY = ("/api/dashboard/insights",)
MATTERS_KEY = ("/api/matters",)
HEARINGS_TODAY_KEY = ("/api/hearings/today",)
HEARINGS_RANGE_KEY = ("/api/hearings/date-range",)
PARTIES_KEY = ("/api/parties",)
TASKS_KEY = ("/api/tasks",)
COURT_ALERTS_KEY = ("/api/court-alerts",)
NOTIFICATIONS_KEY = ("/api/notifications",)
INVOICES_KEY = ("/api/invoices",)
TIME_ENTRIES_KEY = ("/api/time-entries",)
AI_RESULTS_KEY = ("/api/ai-analysis-results",)
CAUSE_LIST_KEY = ("/api/ecourts/causelist",)
CHECK_UPDATES_KEY = ("/api/ecourts/check-updates",)

STATS_OPTIONS = QueryOptions(refetch_interval=1 * MINUTE)
INSIGHTS_OPTIONS = QueryOptions(refetch_interval=5 * MINUTE)
MATTERS_OPTIONS = QueryOptions(refetch_interval=30 * SECOND)
HEARINGS_OPTIONS = QueryOptions(refetch_interval=1 * MINUTE)
COURT_ALERTS_OPTIONS = QueryOptions(refetch_interval=30 * SECOND)
NOTIFICATIONS_OPTIONS = QueryOptions(stale_time=30 * SECOND)
AI_RESULTS_OPTIONS = QueryOptions(stale_time=5 * MINUTE)
CAUSE_LIST_OPTIONS = QueryOptions(stale_time=5 * MINUTE)
CHECK_UPDATES_OPTIONS = QueryOptions(refetch_interval=30 * MINUTE)
DEFAULT_OPTIONS = QueryOptions()


class DashboardQueries:
    def __init__(self, client: LawMastersAPIClient, cache: QueryCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def client(self) -> LawMastersAPIClient:
        return self._client

    @property
    def cache(self) -> QueryCache:
        return self._cache

    # Queries

    async def stats(self) -> dict[str, Any]:
        return await self._cache.fetch(
            STATS_KEY, self._client.dashboard_stats, STATS_OPTIONS
        )

    async def insights(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            INSIGHTS_KEY, self._client.dashboard_insights, INSIGHTS_OPTIONS
        )

    async def matters(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            MATTERS_KEY, self._client.list_matters, MATTERS_OPTIONS
        )

    async def hearings_today(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            HEARINGS_TODAY_KEY, self._client.hearings_today, HEARINGS_OPTIONS
        )

    async def hearings_in_range(
        self, start_date: date, end_date: date
    ) -> list[dict[str, Any]]:
        key = HEARINGS_RANGE_KEY + (start_date.isoformat(), end_date.isoformat())
        return await self._cache.fetch(
            key,
            lambda: self._client.hearings_in_range(
                start_date=start_date, end_date=end_date
            ),
            DEFAULT_OPTIONS,
        )

    async def parties(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            PARTIES_KEY, self._client.list_parties, DEFAULT_OPTIONS
        )

    async def tasks(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(TASKS_KEY, self._client.list_tasks, DEFAULT_OPTIONS)

    async def court_alerts(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            COURT_ALERTS_KEY, self._client.list_court_alerts, COURT_ALERTS_OPTIONS
        )

    async def notifications(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            NOTIFICATIONS_KEY, self._client.list_notifications, NOTIFICATIONS_OPTIONS
        )

    async def invoices(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            INVOICES_KEY, self._client.list_invoices, DEFAULT_OPTIONS
        )

    async def analysis_results(self) -> list[dict[str, Any]]:
        return await self._cache.fetch(
            AI_RESULTS_KEY, self._client.ai_analysis_results, AI_RESULTS_OPTIONS
        )

    async def cause_list(self, court: str) -> list[dict[str, Any]]:
        """Cause list for a court; an empty court name is not queried."""
        if not court:
            return []
        return await self._cache.fetch(
            CAUSE_LIST_KEY + (court,),
            lambda: self._client.cause_list(court),
            CAUSE_LIST_OPTIONS,
        )

    async def check_updates(self, cnr_numbers: list[str]) -> Any:
        if not cnr_numbers:
            return None
        return await self._cache.fetch(
            CHECK_UPDATES_KEY + tuple(cnr_numbers),
            lambda: self._client.check_case_updates(cnr_numbers),
            CHECK_UPDATES_OPTIONS,
        )

    # Mutations

    async def analyze_document(
        self,
        content: str,
        *,
        name: str | None = None,
        matter_id: str | None = None,
    ) -> dict[str, Any]:
        result = await self._client.analyze_document(
            content, name=name, matter_id=matter_id
        )
        self._cache.invalidate(*AI_RESULTS_KEY)
        return result

    async def generate_case_summary(self, matter_id: str) -> dict[str, Any]:
        result = await self._client.generate_case_summary(matter_id)
        self._cache.invalidate(*AI_RESULTS_KEY)
        return result

    async def create_matter(self, matter: dict[str, Any]) -> dict[str, Any]:
        result = await self._client.create_matter(matter)
        self._cache.invalidate(*MATTERS_KEY)
        return result

    async def update_matter(
        self, matter_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        result = await self._client.update_matter(matter_id, updates)
        self._cache.invalidate(*MATTERS_KEY)
        return result

    async def create_party(self, party: dict[str, Any]) -> dict[str, Any]:
        result = await self._client.create_party(party)
        self._cache.invalidate(*PARTIES_KEY)
        return result

    async def create_task(self, task: dict[str, Any]) -> dict[str, Any]:
        result = await self._client.create_task(task)
        self._cache.invalidate(*TASKS_KEY)
        return result

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        result = await self._client.update_task(task_id, updates)
        self._cache.invalidate(*TASKS_KEY)
        return result

    async def resolve_court_alert(self, alert_id: str) -> dict[str, Any]:
        result = await self._client.resolve_court_alert(alert_id)
        self._cache.invalidate(*COURT_ALERTS_KEY)
        return result

    async def log_active_timer(
        self, store: AppStore, *, is_billable: bool = True, rate: str | None = None
    ) -> dict[str, Any] | None:
        """Post the running timer as a time entry, then stop it.

        Returns None when no timer is running. On an API failure the timer
        keeps running, an error notification is added, and the error is
        re-raised.
        """
        timer = store.state.active_timer
        if timer is None:
            return None

        payload = time_entry_payload(
            timer, store.now(), is_billable=is_billable, rate=rate
        )
        with LogContext(matter_id=timer.matter_id):
            try:
                entry = await self._client.create_time_entry(payload)
            except APIError as e:
                store.add_notification(
                    NotificationKind.ERROR,
                    "Time entry not saved",
                    f"Could not log time for {timer.matter_id}: {e.detail}",
                )
                raise

            # Only stop the timer that was logged; one started while the
            # request was in flight keeps running.
            if store.state.active_timer == timer:
                store.stop_timer()
            else:
                logger.info("timer_changed_during_logging")
            store.add_notification(
                NotificationKind.SUCCESS,
                "Time logged",
                f"{payload['duration']} min recorded for {timer.matter_id}",
            )
            self._cache.invalidate(*TIME_ENTRIES_KEY)
            logger.info("time_entry_logged", duration_minutes=payload["duration"])
        return entry
