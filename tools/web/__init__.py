"""Web-search provider clients."""

from .base_provider import SearchProvider
from .brave_client import BraveSearchClient
from .factory import create_providers_from_config
from .serpapi_client import SerpApiClient
from .tavily_client import TavilySearchClient

__all__ = [
    "BraveSearchClient",
    "SearchProvider",
    "SerpApiClient",
    "TavilySearchClient",
    "create_providers_from_config",
]
