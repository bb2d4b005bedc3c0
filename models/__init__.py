"""
Models package for search results, requests and assembled answers.
"""

from .errors import (
    InputValidationError,
    InternalError,
    LLMGenerationError,
    ProviderError,
    SearchFusionError,
)
from .search_answer import QualityAssessment, QualityTier, SearchAnswer
from .search_request import QueryIntent, SearchFilters, SearchRequest, TimeRange
from .search_result import ProviderResponse, SearchResult

__all__ = [
    "InputValidationError",
    "InternalError",
    "LLMGenerationError",
    "ProviderError",
    "ProviderResponse",
    "QualityAssessment",
    "QualityTier",
    "QueryIntent",
    "SearchAnswer",
    "SearchFilters",
    "SearchFusionError",
    "SearchRequest",
    "SearchResult",
    "TimeRange",
]
