"""
SearchResult / ProviderResponse - canonical records produced by provider clients.

Every provider maps its own payload into these shapes so the merge chain never
sees provider-specific fields.
"""

from dataclasses import dataclass, field, replace


def clamp_score(value: float) -> float:
    """Clamp a relevance score into [0, 100]."""
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(100.0, float(value)))


@dataclass(frozen=True)
class SearchResult:
    """
    A normalized search hit.

    Attributes:
        id: Deterministic identifier (provider, rank and url hash)
        title: Result title, never empty
        url: Canonical identity of the result
        snippet: Cleaned description text, never empty
        source_provider: Name of the provider that produced the hit
        relevance_score: Ranking signal, always within [0, 100]
        published_date: Raw date string as reported by the provider
        image_url: Optional thumbnail
        domain: Lower-cased hostname without a leading "www."
    """

    id: str
    title: str
    url: str
    snippet: str
    source_provider: str
    relevance_score: float = 0.0
    published_date: str | None = None
    image_url: str | None = None
    domain: str = ""

    def __post_init__(self):
        object.__setattr__(self, "relevance_score", clamp_score(self.relevance_score))

    def with_score(self, score: float) -> "SearchResult":
        return replace(self, relevance_score=score)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "source_provider": self.source_provider,
            "relevance_score": round(self.relevance_score, 2),
            "published_date": self.published_date,
            "image_url": self.image_url,
            "domain": self.domain,
        }


@dataclass(frozen=True)
class ProviderResponse:
    """Outcome of one provider call. Consumed once by the merge chain."""

    provider_name: str
    results: tuple[SearchResult, ...] = field(default_factory=tuple)
    total_results: int = 0
    processing_time_ms: int = 0
    success: bool = True
    error: str | None = None

    @classmethod
    def failed(cls, provider_name: str, error: str, processing_time_ms: int = 0) -> "ProviderResponse":
        return cls(
            provider_name=provider_name,
            results=tuple(),
            total_results=0,
            processing_time_ms=processing_time_ms,
            success=False,
            error=error,
        )

    def __len__(self) -> int:
        return len(self.results)
