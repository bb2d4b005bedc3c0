"""
SearchAnswer - the assembled, caller-facing result of one pipeline run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from models.search_result import SearchResult

MAX_SOURCES_RETURNED = 6


class QualityTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class QualityAssessment:
    """Trustworthiness of a merged result set. Recomputed per request."""

    tier: QualityTier
    confidence: float
    issues: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SearchAnswer:
    answer: str
    sources: tuple[SearchResult, ...]
    follow_up_questions: tuple[str, ...]
    confidence: float
    processing_time_ms: int
    query_intent: str
    quality: QualityAssessment
    providers_succeeded: tuple[str, ...] = field(default_factory=tuple)
    answered_by: str = "rich_prompt"
    request_id: str = ""
    metrics: tuple[Any, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "sources": [s.to_dict() for s in self.sources],
            "follow_up_questions": list(self.follow_up_questions),
            "confidence": self.confidence,
            "processing_time": self.processing_time_ms,
            "query_intent": self.query_intent,
            "quality_issues": list(self.quality.issues),
            "providers_succeeded": list(self.providers_succeeded),
            "answered_by": self.answered_by,
            "request_id": self.request_id,
        }
