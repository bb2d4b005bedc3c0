"""Inbound query model shared by the HTTP layer and the pipeline."""

from dataclasses import dataclass, field
from enum import Enum

MAX_QUERY_CHARS = 500
MAX_CONTEXT_TURNS = 10


class QueryIntent(str, Enum):
    TECHNICAL = "technical"
    SHOPPING = "shopping"
    NEWS = "news"
    RESEARCH = "research"
    GENERAL = "general"


class TimeRange(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


@dataclass(frozen=True)
class SearchFilters:
    time_range: TimeRange | None = None
    language: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class SearchRequest:
    """
    A user query plus optional hints.

    Attributes:
        query: Natural-language question (1-500 characters after stripping)
        intent: Caller-supplied intent; overrides keyword classification when set
        context: Prior user turns, oldest first
        filters: Provider-side filters (recency, language, region)
    """

    query: str
    intent: QueryIntent | None = None
    context: tuple[str, ...] = field(default_factory=tuple)
    filters: SearchFilters | None = None
