"""
SearchOrchestrator - core business logic for the search-fusion service.

Key guarantees:
- HTTP layer stays thin (no provider or LLM imports there)
- Provider and LLM failures degrade the answer instead of raising
- Only InputValidationError and InternalError ever leave answer()
"""

import re
import time
import uuid

from api.base_client import BaseLLMClient
from config.config import Config, ResponseComplexity
from models.errors import InputValidationError, InternalError
from models.search_answer import MAX_SOURCES_RETURNED, SearchAnswer
from models.search_request import MAX_CONTEXT_TURNS, MAX_QUERY_CHARS, SearchRequest
from models.search_result import ProviderResponse
from orchestrator.answer_synthesizer import AnswerSynthesizer, GenerationParams
from orchestrator.answer_validator import AnswerValidator
from orchestrator.fallback_manager import FallbackManager, FallbackPolicy
from orchestrator.followup_generator import generate_follow_up_questions
from orchestrator.intent_classifier import resolve_intent
from orchestrator.pipeline_types import FallbackStage, PipelineStage, PromptContext
from orchestrator.prompt_builder import MAX_PREVIOUS_QUERIES, PromptBuilder
from orchestrator.quality_assessor import assess_quality
from orchestrator.relevance_scorer import RelevanceScorer
from orchestrator.result_merger import MergeOutcome, ResultMerger
from orchestrator.scoring_config import ScoringConfig
from orchestrator.search_fanout import ProviderFanOut
from tools.web.base_provider import SearchProvider
from utils.logger import get_logger
from utils.performance_monitor import Metric, PerformanceMonitor
from utils.rate_limiter import RateLimitTracker

logger = get_logger(__name__)

_SEARCH_PREFIX_RE = re.compile(
    r"^(please\s+)?(search\s+(the\s+web\s+)?for|find|google)\s+", re.IGNORECASE
)


def clean_query(query: str) -> str:
    """Drop leading "search for" / "please find" style prefixes that confuse engines."""
    cleaned = _SEARCH_PREFIX_RE.sub("", query).strip()
    return cleaned or query.strip()


def validate_request(request: SearchRequest) -> SearchRequest:
    """
    Reject malformed input before any provider is called.

    Raises:
        InputValidationError: empty or oversized query
    """
    query = (request.query or "").strip()
    if not query:
        raise InputValidationError("Search query cannot be empty")
    if len(query) > MAX_QUERY_CHARS:
        raise InputValidationError(f"Search query must be at most {MAX_QUERY_CHARS} characters")

    context = tuple(turn.strip() for turn in request.context if turn and turn.strip())
    return SearchRequest(
        query=query,
        intent=request.intent,
        context=context[-MAX_CONTEXT_TURNS:],
        filters=request.filters,
    )


class SearchOrchestrator:
    """
    Runs one query through the full pipeline.

    Stateful collaborators (rate limiter, metrics buffer) are injected so
    several orchestrators, or tests, never share hidden globals.
    """

    def __init__(
        self,
        *,
        fanout: ProviderFanOut,
        synthesizer: AnswerSynthesizer,
        merger: ResultMerger | None = None,
        validator: AnswerValidator | None = None,
        scoring_config: ScoringConfig | None = None,
        monitor: PerformanceMonitor | None = None,
        complexity: ResponseComplexity = ResponseComplexity.DETAILED,
        max_results_to_process: int = 8,
    ):
        self.scoring_config = scoring_config or ScoringConfig()
        self.fanout = fanout
        self.synthesizer = synthesizer
        self.merger = merger or ResultMerger(RelevanceScorer(self.scoring_config))
        self.validator = validator or AnswerValidator()
        self.monitor = monitor or PerformanceMonitor()
        self.complexity = complexity
        self.max_results_to_process = max_results_to_process

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        monitor: PerformanceMonitor,
        rate_limiter: RateLimitTracker,
        providers: list[SearchProvider] | None = None,
        llm_client: BaseLLMClient | None = None,
        scoring_config: ScoringConfig | None = None,
    ) -> "SearchOrchestrator":
        """Wire the pipeline from Config; providers and LLM client are built when not given."""
        if providers is None:
            from tools.web.factory import create_providers_from_config

            providers = create_providers_from_config(config)
        if llm_client is None:
            from api.client_factory import create_llm_client

            llm_client = create_llm_client(config)

        fanout = ProviderFanOut(
            providers,
            rate_limiter=rate_limiter,
            monitor=monitor,
            default_timeout_s=config.PROVIDER_TIMEOUT_S,
            provider_timeouts={p.name: config.provider_timeout(p.name) for p in providers},
            request_timeout_s=config.SEARCH_REQUEST_TIMEOUT_S,
            max_results_per_provider=config.MAX_RESULTS_TO_PROCESS,
        )
        synthesizer = AnswerSynthesizer(
            llm_client,
            prompt_builder=PromptBuilder(max_sources=config.MAX_RESULTS_TO_PROCESS),
            fallback_manager=FallbackManager(
                FallbackPolicy(simplified_first=config.USE_SIMPLIFIED_PROMPT)
            ),
            params=GenerationParams(
                max_output_tokens=config.LLM_MAX_TOKENS,
                temperature=config.LLM_TEMPERATURE,
                top_p=config.LLM_TOP_P,
                top_k=config.LLM_TOP_K,
            ),
            timeout_s=config.LLM_TIMEOUT_S,
            monitor=monitor,
            rate_limiter=rate_limiter,
        )
        return cls(
            fanout=fanout,
            synthesizer=synthesizer,
            validator=AnswerValidator(
                min_response_length=config.MIN_RESPONSE_LENGTH,
                force_comprehensive=config.FORCE_COMPREHENSIVE_RESPONSES,
            ),
            scoring_config=scoring_config or ScoringConfig.from_yaml(),
            monitor=monitor,
            complexity=ResponseComplexity(config.RESPONSE_COMPLEXITY),
            max_results_to_process=config.MAX_RESULTS_TO_PROCESS,
        )

    def _transition(self, request_id: str, stage: PipelineStage, **fields) -> None:
        logger.debug(
            f"[{request_id}] -> {stage.value}",
            extra={"extra_fields": {"request_id": request_id, "stage": stage.value, **fields}},
        )

    async def answer(self, request: SearchRequest, request_id: str | None = None) -> SearchAnswer:
        """
        Answer a query.

        Raises:
            InputValidationError: malformed input (nothing else was attempted)
            InternalError: unexpected failure, with counts-only diagnostics
        """
        request_id = request_id or str(uuid.uuid4())
        start = time.perf_counter()
        self._transition(request_id, PipelineStage.RECEIVED)

        try:
            request = validate_request(request)
        except InputValidationError:
            self._transition(request_id, PipelineStage.ERROR, reason="invalid_input")
            raise

        collected: list[Metric] = []
        responses: list[ProviderResponse] = []
        merged: MergeOutcome | None = None

        try:
            provider_query = clean_query(request.query)
            with self.monitor.timer("search_external_calls", collected) as meta:
                responses = await self.fanout.search_all(provider_query, request.filters, collected)
                meta["providers"] = len(responses)
                meta["providers_succeeded"] = sum(1 for r in responses if r.success)
            self._transition(request_id, PipelineStage.FANNED_OUT, providers=len(responses))

            with self.monitor.timer("merge_results", collected) as meta:
                merged = self.merger.merge(responses)
                meta["results_count"] = len(merged.results)
            self._transition(request_id, PipelineStage.MERGED, results=len(merged.results))

            quality = assess_quality(merged.results, self.scoring_config.quality)
            self._transition(
                request_id,
                PipelineStage.SCORED_AND_ASSESSED,
                tier=quality.tier.value,
                confidence=quality.confidence,
            )

            with self.monitor.timer("intent_detection", collected) as meta:
                intent = resolve_intent(request.query, request.intent)
                meta["intent"] = intent.value
            self._transition(request_id, PipelineStage.INTENT_CLASSIFIED, intent=intent.value)

            limited = merged.results[: self.max_results_to_process]
            ctx = PromptContext(
                query=request.query,
                results=limited,
                intent=intent,
                previous_queries=request.context[-MAX_PREVIOUS_QUERIES:],
                complexity=self.complexity,
            )
            self._transition(request_id, PipelineStage.PROMPTED, sources=len(limited))

            outcome = await self.synthesizer.synthesize(ctx, collected)
            self._transition(request_id, PipelineStage.LLM_AWAITED, answered_by=outcome.stage.value)

            answer_text = outcome.text
            if outcome.stage != FallbackStage.TEMPLATE:
                with self.monitor.timer("answer_validation", collected) as meta:
                    validation = self.validator.validate(answer_text, limited)
                    meta["word_count"] = validation.word_count
                    meta["citation_count"] = validation.citation_count
                    if not validation.ok:
                        answer_text = self.validator.enhance(answer_text, request.query, limited)
                        meta["enhanced"] = True
            self._transition(request_id, PipelineStage.ANSWER_VALIDATED)

            follow_ups = generate_follow_up_questions(request.query, limited, intent)

        except Exception as e:
            diagnostics = {
                "responses_received": len(responses),
                "merged_results_count": len(merged.results) if merged else 0,
                "sources_successful": sum(1 for r in responses if r.success),
            }
            logger.error(
                f"[{request_id}] Search pipeline failed: {type(e).__name__}",
                exc_info=True,
                extra={"extra_fields": {"request_id": request_id, **diagnostics}},
            )
            raise InternalError("Search failed", diagnostics=diagnostics) from e

        processing_time_ms = int((time.perf_counter() - start) * 1000)
        total = self.monitor.record(
            "search_total",
            processing_time_ms,
            True,
            {
                "results_count": len(merged.results),
                "sources_used": merged.sources_successful,
                "quality": quality.tier.value,
            },
        )
        collected.append(total)
        self._transition(request_id, PipelineStage.COMPLETE, processing_time_ms=processing_time_ms)

        logger.info(
            f"[{request_id}] Answered via {outcome.stage.value} in {processing_time_ms}ms",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "answered_by": outcome.stage.value,
                    "sources": len(merged.results),
                    "quality": quality.tier.value,
                    "processing_time_ms": processing_time_ms,
                }
            },
        )

        return SearchAnswer(
            answer=answer_text,
            sources=merged.results[:MAX_SOURCES_RETURNED],
            follow_up_questions=tuple(follow_ups),
            confidence=quality.confidence,
            processing_time_ms=processing_time_ms,
            query_intent=intent.value,
            quality=quality,
            providers_succeeded=tuple(r.provider_name for r in responses if r.success),
            answered_by=outcome.stage.value,
            request_id=request_id,
            metrics=tuple(collected),
        )
