from dataclasses import dataclass, field
from enum import Enum

from config.config import ResponseComplexity
from models.search_request import QueryIntent
from models.search_result import SearchResult


class PipelineStage(str, Enum):
    RECEIVED = "received"
    FANNED_OUT = "fanned_out"
    MERGED = "merged"
    SCORED_AND_ASSESSED = "scored_and_assessed"
    INTENT_CLASSIFIED = "intent_classified"
    PROMPTED = "prompted"
    LLM_AWAITED = "llm_awaited"
    ANSWER_VALIDATED = "answer_validated"
    COMPLETE = "complete"
    ERROR = "error"


class FallbackStage(str, Enum):
    RICH_PROMPT = "rich_prompt"
    SIMPLIFIED_PROMPT = "simplified_prompt"
    TEMPLATE = "template"


@dataclass(frozen=True)
class PromptContext:
    query: str
    results: tuple[SearchResult, ...]
    intent: QueryIntent = QueryIntent.GENERAL
    previous_queries: tuple[str, ...] = field(default_factory=tuple)
    complexity: ResponseComplexity = ResponseComplexity.DETAILED


@dataclass(frozen=True)
class AnswerValidation:
    ok: bool
    word_count: int
    citation_count: int
    section_count: int
    mentions_sources: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FallbackDecision:
    next_stage: FallbackStage | None
    reason: str
