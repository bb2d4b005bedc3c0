"""
ProviderFanOut - concurrent search across all configured providers.

Every provider gets its own deadline and every failure is converted into a
failed ProviderResponse, so one slow or broken provider never takes down its
siblings. Output order always matches provider order.
"""

import asyncio
import time
import uuid
from dataclasses import replace

from models.errors import ProviderError
from models.search_request import SearchFilters
from models.search_result import ProviderResponse
from tools.web.base_provider import SearchProvider
from utils.logger import get_logger
from utils.performance_monitor import Metric, PerformanceMonitor
from utils.rate_limiter import RateLimitTracker

logger = get_logger(__name__)

REQUEST_DEADLINE_ERROR = "request deadline exceeded"


class ProviderFanOut:
    """
    Example usage:
        fanout = ProviderFanOut(providers, rate_limiter=RateLimitTracker(config.rate_limits()))
        responses = await fanout.search_all("rust async runtimes", None)
        for resp in responses:
            print(resp.provider_name, resp.success, len(resp))
    """

    def __init__(
        self,
        providers: list[SearchProvider],
        *,
        rate_limiter: RateLimitTracker | None = None,
        monitor: PerformanceMonitor | None = None,
        default_timeout_s: float = 12.0,
        provider_timeouts: dict[str, float] | None = None,
        request_timeout_s: float = 25.0,
        max_results_per_provider: int | None = None,
    ):
        """
        Args:
            providers: Providers in the order their results should be merged
            rate_limiter: Shared request budget tracker (no limits when None)
            monitor: Receives one search_<provider> metric per call
            default_timeout_s: Deadline for providers without an explicit timeout
            provider_timeouts: Per-provider deadlines keyed by provider name
            request_timeout_s: Overall deadline for the whole fan-out
            max_results_per_provider: Truncate each provider's results to this many
        """
        self.providers = list(providers)
        self.rate_limiter = rate_limiter or RateLimitTracker()
        self.monitor = monitor or PerformanceMonitor()
        self.default_timeout_s = default_timeout_s
        self.provider_timeouts = dict(provider_timeouts or {})
        self.request_timeout_s = request_timeout_s
        self.max_results_per_provider = max_results_per_provider

    def timeout_for(self, provider: SearchProvider) -> float:
        return self.provider_timeouts.get(provider.name, self.default_timeout_s)

    async def _safe_search(
        self,
        provider: SearchProvider,
        query: str,
        filters: SearchFilters | None,
        collected: list[Metric] | None,
    ) -> ProviderResponse:
        """Call one provider; never raises except on cancellation."""
        start = time.perf_counter()
        timeout_s = self.timeout_for(provider)

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        with self.monitor.timer(f"search_{provider.name}", collected) as meta:
            if not self.rate_limiter.check_and_increment(provider.name):
                response = ProviderResponse.failed(
                    provider.name, f"rate limit exceeded for {provider.name}", elapsed_ms()
                )
            else:
                try:
                    response = await asyncio.wait_for(provider.search(query, filters), timeout=timeout_s)
                    if self.max_results_per_provider is not None:
                        response = replace(response, results=response.results[: self.max_results_per_provider])
                except asyncio.TimeoutError:
                    response = ProviderResponse.failed(
                        provider.name, f"timed out after {timeout_s}s", elapsed_ms()
                    )
                except ProviderError as e:
                    response = ProviderResponse.failed(provider.name, str(e), elapsed_ms())
                except Exception as e:
                    logger.error(
                        f"Unexpected error from {provider.name}: {e}",
                        extra={
                            "extra_fields": {
                                "provider": provider.name,
                                "error_type": type(e).__name__,
                            }
                        },
                    )
                    response = ProviderResponse.failed(
                        provider.name, f"unexpected error: {type(e).__name__}", elapsed_ms()
                    )

            meta["success"] = response.success
            meta["results_count"] = len(response)
            if response.error:
                meta["error"] = response.error

        if not response.success:
            logger.warning(
                f"Provider {provider.name} failed: {response.error}",
                extra={"extra_fields": {"provider": provider.name, "error": response.error}},
            )
        return response

    async def search_all(
        self,
        query: str,
        filters: SearchFilters | None = None,
        collected: list[Metric] | None = None,
    ) -> list[ProviderResponse]:
        """
        Query every provider concurrently and wait for all of them to settle.

        Providers still running at the overall request deadline are cancelled
        and reported as failed.

        Returns:
            One ProviderResponse per provider, in provider order ([] when no
            providers are configured)
        """
        if not self.providers:
            return []

        fanout_id = str(uuid.uuid4())
        logger.info(
            f"Starting fan-out to {len(self.providers)} providers",
            extra={
                "extra_fields": {
                    "fanout_id": fanout_id,
                    "providers": [p.name for p in self.providers],
                    "request_timeout_s": self.request_timeout_s,
                }
            },
        )

        tasks = [
            asyncio.create_task(self._safe_search(provider, query, filters, collected))
            for provider in self.providers
        ]
        _, pending = await asyncio.wait(tasks, timeout=self.request_timeout_s)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        responses: list[ProviderResponse] = []
        for provider, task in zip(self.providers, tasks):
            if task in pending:
                responses.append(
                    ProviderResponse.failed(
                        provider.name, REQUEST_DEADLINE_ERROR, int(self.request_timeout_s * 1000)
                    )
                )
            else:
                responses.append(task.result())

        succeeded = sum(1 for r in responses if r.success)
        logger.info(
            f"Fan-out complete: {succeeded} success, {len(responses) - succeeded} errors",
            extra={
                "extra_fields": {
                    "fanout_id": fanout_id,
                    "success_count": succeeded,
                    "error_count": len(responses) - succeeded,
                    "deadline_cancelled": len(pending),
                }
            },
        )
        return responses
