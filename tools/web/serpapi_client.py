"""Google results through SerpAPI."""

from typing import Any

from models.search_request import SearchFilters, TimeRange
from models.search_result import SearchResult
from tools.web.base_provider import SearchProvider
from tools.web.normalizer import normalize_items, normalize_serpapi

SERPAPI_URL = "https://serpapi.com/search"
MAX_SERPAPI_RESULTS = 5

_TBS = {
    TimeRange.DAY: "qdr:d",
    TimeRange.WEEK: "qdr:w",
    TimeRange.MONTH: "qdr:m",
    TimeRange.YEAR: "qdr:y",
}


class SerpApiClient(SearchProvider):
    name = "serpapi"

    def build_params(self, query: str, filters: SearchFilters | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "q": query,
            "engine": "google",
            "api_key": self.api_key,
            "num": min(self.max_results, MAX_SERPAPI_RESULTS),
            "hl": "en",
            "gl": "us",
            "safe": "active",
        }
        if filters:
            if filters.language:
                params["hl"] = filters.language
            if filters.region:
                params["gl"] = filters.region
            if filters.time_range in _TBS:
                params["tbs"] = _TBS[filters.time_range]
        return params

    async def _fetch(self, query: str, filters: SearchFilters | None) -> Any:
        return await self._request_json("GET", SERPAPI_URL, params=self.build_params(query, filters))

    def _parse(self, payload: dict[str, Any]) -> list[SearchResult]:
        items = payload.get("organic_results")
        return normalize_items(items if isinstance(items, list) else [], normalize_serpapi)

    def _total_results(self, payload: dict[str, Any], results: list[SearchResult]) -> int:
        info = payload.get("search_information")
        total = info.get("total_results") if isinstance(info, dict) else None
        return int(total) if isinstance(total, (int, float)) else 0
