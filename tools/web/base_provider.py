"""Base class for web-search providers."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from models.errors import ProviderError
from models.search_request import SearchFilters
from models.search_result import ProviderResponse, SearchResult
from utils.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "SearchFusion/1.0"


class SearchProvider(ABC):
    """
    Abstract base class for search provider clients.

    Subclasses implement ``_fetch`` (one HTTP round trip returning the decoded
    payload) and ``_parse`` (payload -> normalized results). Failures surface
    as ``ProviderError``; the fan-out turns them into failed responses.
    """

    name: str = "provider"

    def __init__(
        self,
        api_key: str,
        *,
        timeout_s: float = 12.0,
        max_results: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_key: Credential for the provider
            timeout_s: HTTP timeout for a single request
            max_results: Upper bound on requested results (capped at 5 by subclasses that need it)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        if not api_key:
            raise ValueError(f"API key is required for {self.name}")
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.max_results = max(1, int(max_results))
        self._transport = transport

    async def search(self, query: str, filters: SearchFilters | None = None) -> ProviderResponse:
        start = time.perf_counter()
        payload = await self._fetch(query, filters)
        if not isinstance(payload, dict):
            raise ProviderError(self.name, "unexpected payload shape", code="bad_payload")

        results = self._parse(payload)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"{self.name} returned {len(results)} results",
            extra={
                "extra_fields": {
                    "provider": self.name,
                    "results": len(results),
                    "latency_ms": elapsed_ms,
                }
            },
        )
        return ProviderResponse(
            provider_name=self.name,
            results=tuple(results),
            total_results=self._total_results(payload, results),
            processing_time_ms=elapsed_ms,
            success=True,
        )

    @abstractmethod
    async def _fetch(self, query: str, filters: SearchFilters | None) -> Any:
        """Perform the HTTP call and return the decoded JSON body."""

    @abstractmethod
    def _parse(self, payload: dict[str, Any]) -> list[SearchResult]:
        """Extract and normalize result items from the payload."""

    def _total_results(self, payload: dict[str, Any], results: list[SearchResult]) -> int:
        return len(results)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_s,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
        )

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            ProviderError: code is one of timeout, auth, rate_limit, http_error,
                transport or bad_payload
        """
        try:
            async with self._client() as client:
                response = await client.request(method, url, params=params, headers=headers, json=json)
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.TimeoutException as e:
            raise ProviderError(self.name, f"timed out after {self.timeout_s}s", code="timeout") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                code = "auth"
            elif status == 429:
                code = "rate_limit"
            else:
                code = "http_error"
            raise ProviderError(self.name, f"HTTP {status}", code=code) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"transport error: {type(e).__name__}", code="transport") from e
        except ValueError as e:
            raise ProviderError(self.name, "response was not valid JSON", code="bad_payload") from e
