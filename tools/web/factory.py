"""Factory for building the configured search providers."""

from config.config import Config
from utils.logger import get_logger

from .base_provider import SearchProvider
from .brave_client import BraveSearchClient
from .serpapi_client import SerpApiClient
from .tavily_client import TavilySearchClient

logger = get_logger(__name__)


def create_providers_from_config(config: Config) -> list[SearchProvider]:
    """
    Instantiate providers in SEARCH_PROVIDERS order.

    Providers with missing credentials or unknown names are skipped with a
    warning so the service still starts with whatever is configured.

    Returns:
        Providers in configured order (possibly empty)
    """
    providers: list[SearchProvider] = []
    for name in config.SEARCH_PROVIDERS:
        common = {
            "timeout_s": config.provider_timeout(name),
            "max_results": config.MAX_RESULTS_PER_SOURCE,
        }
        try:
            if name == "brave":
                providers.append(
                    BraveSearchClient(config.BRAVE_RAPIDAPI_KEY, config.BRAVE_RAPIDAPI_HOST, **common)
                )
            elif name == "serpapi":
                providers.append(SerpApiClient(config.SERPAPI_KEY, **common))
            elif name == "tavily":
                providers.append(TavilySearchClient(config.TAVILY_API_KEY, **common))
            else:
                logger.warning(f"Unknown search provider '{name}' skipped")
        except ValueError as e:
            logger.warning(
                f"Search provider '{name}' disabled: {e}",
                extra={"extra_fields": {"provider": name}},
            )

    logger.info(
        f"Search providers ready: {[p.name for p in providers]}",
        extra={"extra_fields": {"providers": [p.name for p in providers]}},
    )
    return providers
