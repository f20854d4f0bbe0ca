"""Data access for dashboard widgets: backend API client and query cache."""

from __future__ import annotations

from lawmasters.ui.api_client import APIError, LawMastersAPIClient, time_entry_payload
from lawmasters.ui.queries import DashboardQueries
from lawmasters.ui.query_cache import QueryCache, QueryOptions

__all__ = [
    "APIError",
    "DashboardQueries",
    "LawMastersAPIClient",
    "QueryCache",
    "QueryOptions",
    "time_entry_payload",
]
