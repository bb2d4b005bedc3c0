"""
Shared fakes for offline tests.

Nothing here touches the network: providers and LLM clients return canned
data, optionally after a delay, or raise on demand.
"""

import asyncio
import time

from api.base_client import BaseLLMClient
from models.errors import LLMGenerationError
from models.search_request import SearchFilters
from models.search_result import ProviderResponse, SearchResult
from tools.web.base_provider import SearchProvider
from tools.web.normalizer import make_result_id


def make_result(
    url: str,
    *,
    title: str | None = None,
    score: float = 50.0,
    provider: str = "brave",
    domain: str | None = None,
    published_date: str | None = None,
    snippet: str | None = None,
    index: int = 0,
) -> SearchResult:
    if domain is None:
        host = url.split("://", 1)[-1].split("/", 1)[0].lower()
        domain = host[4:] if host.startswith("www.") else host
    return SearchResult(
        id=make_result_id(provider, index, url),
        title=title or f"Title for {url}",
        url=url,
        snippet=snippet or f"Snippet describing {url}",
        source_provider=provider,
        relevance_score=score,
        published_date=published_date,
        domain=domain,
    )


class FakeProvider(SearchProvider):
    """
    Fake search provider for testing purposes.
    """

    def __init__(
        self,
        name: str,
        results: list[SearchResult] | None = None,
        delay_s: float = 0.0,
        error: Exception | None = None,
    ):
        super().__init__("test-key")
        self.name = name
        self.results = results or []
        self.delay_s = delay_s
        self.error = error
        self.calls: list[tuple[str, SearchFilters | None]] = []

    async def search(self, query: str, filters: SearchFilters | None = None) -> ProviderResponse:
        self.calls.append((query, filters))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return ProviderResponse(
            provider_name=self.name,
            results=tuple(self.results),
            total_results=len(self.results),
            processing_time_ms=int(self.delay_s * 1000),
        )

    async def _fetch(self, query, filters):
        raise NotImplementedError

    def _parse(self, payload):
        raise NotImplementedError


class FakeLLMClient(BaseLLMClient):
    """
    Fake LLM client. Each call pops the next scripted outcome: a string is
    returned, an exception is raised. The last outcome repeats.
    """

    provider_name = "fake"

    def __init__(self, outcomes=None, delay_s: float = 0.0):
        super().__init__("test-key", model_name="fake-model")
        self.outcomes = list(outcomes or ["Fake answer"])
        self.delay_s = delay_s
        self.prompts: list[str] = []
        self.kwargs: list[dict] = []

    def generate(self, prompt, *, max_output_tokens, temperature, top_p, top_k):
        self.prompts.append(prompt)
        self.kwargs.append(
            {
                "max_output_tokens": max_output_tokens,
                "temperature": temperature,
                "top_p": top_p,
                "top_k": top_k,
            }
        )
        if self.delay_s:
            time.sleep(self.delay_s)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def failing_llm(message: str = "boom") -> FakeLLMClient:
    return FakeLLMClient([LLMGenerationError(message, provider="fake")])
