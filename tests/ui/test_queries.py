from __future__ import annotations

from datetime import date

import pytest

from lawmasters.domain.value_objects import NotificationKind, TimerStatus
from lawmasters.store.app_store import AppStore
from lawmasters.ui.api_client import APIError
from lawmasters.ui.queries import (
    AI_RESULTS_KEY,
    CHECK_UPDATES_OPTIONS,
    MATTERS_KEY,
    STATS_OPTIONS,
    TIME_ENTRIES_KEY,
    DashboardQueries,
)
from lawmasters.ui.query_cache import QueryCache

MINUTE = 60_000


@pytest.fixture
def queries(api_client, clock) -> DashboardQueries:
    return DashboardQueries(api_client, QueryCache(clock=clock))


@pytest.fixture
def timer_store(clock) -> AppStore:
    return AppStore(clock=clock)


class TestPolling:
    def test_intervals(self) -> None:
        assert STATS_OPTIONS.refetch_interval == MINUTE
        assert CHECK_UPDATES_OPTIONS.refetch_interval == 30 * MINUTE

    async def test_stats_cached_until_interval(self, queries, backend, clock) -> None:
        backend.respond("GET", "/api/dashboard/stats", {"activeMatters": 3})

        await queries.stats()
        clock.advance(MINUTE - 1)
        await queries.stats()
        assert len(backend.calls("GET", "/api/dashboard/stats")) == 1

        clock.advance(1)
        await queries.stats()
        assert len(backend.calls("GET", "/api/dashboard/stats")) == 2

    async def test_refetch_due_polls_interval_queries(self, queries, backend, clock) -> None:
        backend.respond("GET", "/api/court-alerts", [])
        backend.respond("GET", "/api/notifications", [])
        await queries.court_alerts()
        await queries.notifications()

        clock.advance(30_000)
        refreshed = await queries.cache.refetch_due()

        assert refreshed == [("/api/court-alerts",)]
        assert len(backend.calls("GET", "/api/court-alerts")) == 2
        assert len(backend.calls("GET", "/api/notifications")) == 1

    async def test_hearings_in_range_keyed_by_dates(self, queries, backend) -> None:
        backend.respond("GET", "/api/hearings/date-range", [])

        await queries.hearings_in_range(date(2026, 10, 1), date(2026, 10, 7))

        assert ("/api/hearings/date-range", "2026-10-01", "2026-10-07") in queries.cache


class TestDisabledQueries:
    async def test_empty_court_is_not_queried(self, queries, backend) -> None:
        assert await queries.cause_list("") == []
        assert backend.requests == []

    async def test_no_cnr_numbers_is_not_queried(self, queries, backend) -> None:
        assert await queries.check_updates([]) is None
        assert backend.requests == []

    async def test_cause_list_cached_per_court(self, queries, backend) -> None:
        backend.respond("GET", "/api/ecourts/causelist/Delhi", [{"n": 1}])
        backend.respond("GET", "/api/ecourts/causelist/Mumbai", [{"n": 2}])

        assert await queries.cause_list("Delhi") == [{"n": 1}]
        assert await queries.cause_list("Mumbai") == [{"n": 2}]
        assert await queries.cause_list("Delhi") == [{"n": 1}]
        assert len(backend.requests) == 2


class TestMutations:
    async def test_create_matter_invalidates_matters(self, queries, backend) -> None:
        backend.respond("GET", "/api/matters", [])
        backend.respond("POST", "/api/matters", {"id": "M-1"})
        await queries.matters()

        await queries.create_matter({"title": "New"})

        assert queries.cache.is_stale(MATTERS_KEY)

    async def test_generate_case_summary_invalidates_ai_results(self, queries, backend) -> None:
        backend.respond("GET", "/api/ai-analysis-results", [])
        backend.respond("POST", "/api/ai/generate-case-summary", {"summary": "..."})
        await queries.analysis_results()
        assert not queries.cache.is_stale(AI_RESULTS_KEY)

        await queries.generate_case_summary("M-1")

        assert queries.cache.is_stale(AI_RESULTS_KEY)

    async def test_failed_mutation_does_not_invalidate(self, queries, backend) -> None:
        backend.respond("GET", "/api/ai-analysis-results", [])
        backend.respond("POST", "/api/ai/analyze-document", {"message": "too large"}, 413)
        await queries.analysis_results()

        with pytest.raises(APIError):
            await queries.analyze_document("x" * 10)

        assert not queries.cache.is_stale(AI_RESULTS_KEY)


class TestLogActiveTimer:
    async def test_idle_store_returns_none(self, queries, backend, timer_store) -> None:
        assert await queries.log_active_timer(timer_store) is None
        assert backend.requests == []

    async def test_posts_entry_and_stops_timer(
        self, queries, backend, timer_store, clock
    ) -> None:
        backend.respond("GET", "/api/time-entries", [])
        backend.respond("POST", "/api/time-entries", {"id": "TE-1"})
        queries.cache.set_data(TIME_ENTRIES_KEY, [])
        timer_store.start_timer("M-7", "Client call")
        clock.advance(45 * MINUTE)

        entry = await queries.log_active_timer(timer_store, rate="3000.00")

        assert entry == {"id": "TE-1"}
        body = backend.last_json("POST", "/api/time-entries")
        assert body["matterId"] == "M-7"
        assert body["duration"] == 45
        assert body["rate"] == "3000.00"
        assert timer_store.state.timer_status == TimerStatus.IDLE
        assert timer_store.state.notifications[0].kind == NotificationKind.SUCCESS
        assert queries.cache.is_stale(TIME_ENTRIES_KEY)

    async def test_api_failure_keeps_timer_running(
        self, queries, backend, timer_store, clock
    ) -> None:
        backend.respond("POST", "/api/time-entries", {"message": "Matter closed"}, 400)
        timer_store.start_timer("M-7", "Client call")
        clock.advance(MINUTE)

        with pytest.raises(APIError):
            await queries.log_active_timer(timer_store)

        assert timer_store.state.timer_status == TimerStatus.RUNNING
        notification = timer_store.state.notifications[0]
        assert notification.kind == NotificationKind.ERROR
        assert "Matter closed" in notification.message

    async def test_timer_started_during_request_keeps_running(
        self, queries, api_client, backend, timer_store, clock, monkeypatch
    ) -> None:
        backend.respond("POST", "/api/time-entries", {"id": "TE-2"})
        timer_store.start_timer("M-7", "Client call")
        clock.advance(10 * MINUTE)
        create_time_entry = api_client.create_time_entry

        async def start_next_timer(payload):
            entry = await create_time_entry(payload)
            clock.advance(MINUTE)
            timer_store.start_timer("M-8", "Drafting")
            return entry

        monkeypatch.setattr(api_client, "create_time_entry", start_next_timer)

        await queries.log_active_timer(timer_store)

        assert backend.last_json("POST", "/api/time-entries")["matterId"] == "M-7"
        assert timer_store.state.timer_status == TimerStatus.RUNNING
        assert timer_store.state.active_timer.matter_id == "M-8"
