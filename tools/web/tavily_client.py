"""Tavily search API client.

Tavily ranks results itself and reports a 0-1 relevance score per item, which
the normalizer scales onto the shared 0-100 range.
"""

from typing import Any

from models.search_request import SearchFilters, TimeRange
from models.search_result import SearchResult
from tools.web.base_provider import SearchProvider
from tools.web.normalizer import normalize_items, normalize_tavily

TAVILY_SEARCH_URL = "https://api.tavily.com/search"
MAX_TAVILY_RESULTS = 10


class TavilySearchClient(SearchProvider):
    """
    Tavily-powered search provider.

    Only the ranked result list is used; Tavily's own generated answer is
    disabled because synthesis happens downstream.
    """

    name = "tavily"

    def __init__(self, api_key: str, search_depth: str = "basic", **kwargs):
        """
        Args:
            api_key: Tavily API key
            search_depth: "basic" (faster) or "advanced" (deeper)
        """
        super().__init__(api_key, **kwargs)
        self.search_depth = search_depth

    def build_payload(self, query: str, filters: SearchFilters | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "api_key": self.api_key,
            "query": query,
            "search_depth": self.search_depth,
            "include_answer": False,
            "include_raw_content": False,
            "max_results": max(1, min(self.max_results, MAX_TAVILY_RESULTS)),
        }
        if filters and filters.time_range and filters.time_range != TimeRange.ALL:
            payload["time_range"] = filters.time_range.value
        return payload

    async def _fetch(self, query: str, filters: SearchFilters | None) -> Any:
        return await self._request_json("POST", TAVILY_SEARCH_URL, json=self.build_payload(query, filters))

    def _parse(self, payload: dict[str, Any]) -> list[SearchResult]:
        items = payload.get("results")
        return normalize_items(items if isinstance(items, list) else [], normalize_tavily)
