"""Brave Search via RapidAPI."""

from typing import Any

from models.search_request import SearchFilters, TimeRange
from models.search_result import SearchResult
from tools.web.base_provider import SearchProvider
from tools.web.normalizer import normalize_brave, normalize_items

MAX_BRAVE_RESULTS = 5

_FRESHNESS = {
    TimeRange.DAY: "pd",
    TimeRange.WEEK: "pw",
    TimeRange.MONTH: "pm",
    TimeRange.YEAR: "py",
}


class BraveSearchClient(SearchProvider):
    name = "brave"

    def __init__(self, api_key: str, host: str, **kwargs):
        super().__init__(api_key, **kwargs)
        if not host:
            raise ValueError("RapidAPI host is required for brave")
        self.host = host

    def build_params(self, query: str, filters: SearchFilters | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "q": query,
            "count": min(self.max_results, MAX_BRAVE_RESULTS),
        }
        if filters:
            if filters.time_range in _FRESHNESS:
                params["freshness"] = _FRESHNESS[filters.time_range]
            if filters.language:
                params["search_lang"] = filters.language
            if filters.region:
                params["country"] = filters.region
        return params

    async def _fetch(self, query: str, filters: SearchFilters | None) -> Any:
        return await self._request_json(
            "GET",
            f"https://{self.host}/search",
            params=self.build_params(query, filters),
            headers={
                "x-rapidapi-host": self.host,
                "x-rapidapi-key": self.api_key,
            },
        )

    def _items(self, payload: dict[str, Any]) -> list[Any]:
        items = payload.get("results")
        if items is None:
            web = payload.get("web") or {}
            items = web.get("results") if isinstance(web, dict) else None
        return items if isinstance(items, list) else []

    def _parse(self, payload: dict[str, Any]) -> list[SearchResult]:
        return normalize_items(self._items(payload), normalize_brave)

    def _total_results(self, payload: dict[str, Any], results: list[SearchResult]) -> int:
        web = payload.get("web") if isinstance(payload.get("web"), dict) else {}
        total = payload.get("total_results") or web.get("totalResults")
        return int(total) if isinstance(total, (int, float)) else len(self._items(payload))
