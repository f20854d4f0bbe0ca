"""HTTP client wrapper for the dashboard backend API."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any
from urllib.parse import quote

import httpx

from lawmasters.domain.session import ActiveTimer
from lawmasters.logging_config import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API Error {status_code}: {detail}")


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _ms_to_iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=UTC).isoformat()


def time_entry_payload(
    timer: ActiveTimer,
    now: int,
    *,
    is_billable: bool = True,
    rate: str | None = None,
) -> dict[str, Any]:
    """Build a /api/time-entries body for a timer stopped at now (epoch ms).

    Duration is sent in whole minutes, rounded to the nearest minute.
    """
    elapsed = timer.elapsed(now)
    payload: dict[str, Any] = {
        "matterId": timer.matter_id,
        "description": timer.description,
        "duration": round(elapsed / 60_000),
        "startTime": _ms_to_iso(now - elapsed),
        "endTime": _ms_to_iso(now),
        "isBillable": is_billable,
    }
    if rate is not None:
        payload["rate"] = rate
    return payload


class LawMastersAPIClient:
    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._client = (
            client
            if client is not None
            else httpx.AsyncClient(base_url=base_url, timeout=timeout)
        )
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_base_url(self, base_url: str) -> None:
        """Update base_url for the internal client."""
        self._base_url = base_url
        self._client.base_url = httpx.URL(base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> LawMastersAPIClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        r = await self._client.request(method, path, params=params, json=json)
        if 200 <= r.status_code < 300:
            if r.status_code == 204:
                return None
            return r.json()

        detail = ""
        try:
            payload = r.json()
            raw_detail = payload.get("message", payload.get("detail"))
            if raw_detail is None:
                detail = r.text
            else:
                detail = raw_detail if isinstance(raw_detail, str) else str(raw_detail)
        except (ValueError, AttributeError):
            detail = r.text

        logger.warning(
            "api_request_failed",
            method=method,
            path=path,
            status_code=r.status_code,
            detail=detail,
        )
        raise APIError(status_code=r.status_code, detail=detail)

    async def _get_list(
        self, path: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        data = await self._request_json("GET", path, params=params)
        assert isinstance(data, list)
        return data

    async def _get_dict(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        data = await self._request_json("GET", path, params=params)
        assert isinstance(data, dict)
        return data

    async def _post_dict(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._request_json("POST", path, json=payload)
        assert isinstance(data, dict)
        return data

    # Dashboard

    async def dashboard_stats(self) -> dict[str, Any]:
        return await self._get_dict("/api/dashboard/stats")

    async def dashboard_insights(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/dashboard/insights")

    async def current_user(self) -> dict[str, Any]:
        return await self._get_dict("/api/user/current")

    # Matters

    async def list_matters(
        self, *, status: str | None = None, stage: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if status is not None:
            params["status"] = status
        if stage is not None:
            params["stage"] = stage
        return await self._get_list("/api/matters", params=params)

    async def get_matter(self, matter_id: str) -> dict[str, Any]:
        return await self._get_dict(f"/api/matters/{matter_id}")

    async def create_matter(self, matter: dict[str, Any]) -> dict[str, Any]:
        return await self._post_dict("/api/matters", matter)

    async def update_matter(
        self, matter_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        data = await self._request_json("PUT", f"/api/matters/{matter_id}", json=updates)
        assert isinstance(data, dict)
        return data

    # Hearings

    async def hearings_today(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/hearings/today")

    async def hearings_in_range(
        self, *, start_date: date, end_date: date
    ) -> list[dict[str, Any]]:
        return await self._get_list(
            "/api/hearings/date-range",
            params={"startDate": _iso(start_date), "endDate": _iso(end_date)},
        )

    async def create_hearing(self, hearing: dict[str, Any]) -> dict[str, Any]:
        return await self._post_dict("/api/hearings", hearing)

    # Parties

    async def list_parties(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/parties")

    async def create_party(self, party: dict[str, Any]) -> dict[str, Any]:
        return await self._post_dict("/api/parties", party)

    # Tasks

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        priority: str | None = None,
        matter_id: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if status is not None:
            params["status"] = status
        if priority is not None:
            params["priority"] = priority
        if matter_id is not None:
            params["matterId"] = matter_id
        return await self._get_list("/api/tasks", params=params)

    async def create_task(self, task: dict[str, Any]) -> dict[str, Any]:
        return await self._post_dict("/api/tasks", task)

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        data = await self._request_json("PUT", f"/api/tasks/{task_id}", json=updates)
        assert isinstance(data, dict)
        return data

    # Court alerts and notifications

    async def list_court_alerts(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/court-alerts")

    async def resolve_court_alert(self, alert_id: str) -> dict[str, Any]:
        data = await self._request_json("PUT", f"/api/court-alerts/{alert_id}/resolve")
        assert isinstance(data, dict)
        return data

    async def list_notifications(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/notifications")

    # Billing

    async def list_invoices(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/invoices")

    async def list_time_entries(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/time-entries")

    async def create_time_entry(self, entry: dict[str, Any]) -> dict[str, Any]:
        return await self._post_dict("/api/time-entries", entry)

    # eCourts

    async def search_case_by_cnr(self, cnr_number: str) -> dict[str, Any] | None:
        return await self._request_json(
            "POST", "/api/ecourts/search/cnr", json={"cnrNumber": cnr_number}
        )

    async def search_case_by_number(
        self, case_number: str, court: str
    ) -> dict[str, Any] | None:
        return await self._request_json(
            "POST",
            "/api/ecourts/search/case",
            json={"caseNumber": case_number, "court": court},
        )

    async def search_cases_by_party(
        self, party_name: str, court: str | None = None
    ) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {"partyName": party_name}
        if court is not None:
            payload["court"] = court
        data = await self._request_json("POST", "/api/ecourts/search/party", json=payload)
        assert isinstance(data, list)
        return data

    async def cause_list(self, court: str) -> list[dict[str, Any]]:
        return await self._get_list(f"/api/ecourts/causelist/{quote(court, safe='')}")

    async def check_case_updates(self, cnr_numbers: list[str]) -> Any:
        return await self._request_json(
            "POST", "/api/ecourts/check-updates", json={"cnrNumbers": cnr_numbers}
        )

    # AI analysis

    async def analyze_document(
        self,
        content: str,
        *,
        name: str | None = None,
        matter_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._post_dict(
            "/api/ai/analyze-document",
            {"documentContent": content, "documentName": name, "matterId": matter_id},
        )

    async def generate_case_summary(self, matter_id: str) -> dict[str, Any]:
        return await self._post_dict(
            "/api/ai/generate-case-summary", {"matterId": matter_id}
        )

    async def smart_search(self, query: str) -> list[dict[str, Any]]:
        data = await self._request_json("POST", "/api/ai/smart-search", json={"query": query})
        assert isinstance(data, list)
        return data

    async def extract_action_items(self, document_content: str) -> Any:
        return await self._request_json(
            "POST",
            "/api/ai/extract-action-items",
            json={"documentContent": document_content},
        )

    async def ai_analysis_results(self) -> list[dict[str, Any]]:
        return await self._get_list("/api/ai-analysis-results")
