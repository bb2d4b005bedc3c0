"""
AnswerSynthesizer - turns a PromptContext into answer text.

Runs the three-tier chain: full prompt, then simplified prompt, then a
deterministic template built from the results. The template tier cannot fail,
so synthesize() always returns non-empty text.
"""

import asyncio
import time
from dataclasses import dataclass, field
from functools import partial

from api.base_client import BaseLLMClient
from models.errors import LLMGenerationError
from models.search_result import SearchResult
from orchestrator.fallback_manager import FallbackManager
from orchestrator.pipeline_types import FallbackStage, PromptContext
from orchestrator.prompt_builder import PromptBuilder
from utils.logger import get_logger
from utils.performance_monitor import Metric, PerformanceMonitor
from utils.rate_limiter import RateLimitTracker

logger = get_logger(__name__)

TEMPLATE_SOURCES = 3


@dataclass(frozen=True)
class GenerationParams:
    max_output_tokens: int = 4000
    temperature: float = 0.2
    top_p: float = 0.9
    top_k: int = 40


@dataclass(frozen=True)
class SynthesisOutcome:
    text: str
    stage: FallbackStage
    failures: tuple[str, ...] = field(default_factory=tuple)


def build_template_answer(query: str, results: list[SearchResult] | tuple[SearchResult, ...]) -> str:
    """Deterministic answer from the top result titles and snippets."""
    top = list(results[:TEMPLATE_SOURCES])
    if not top:
        return (
            f'## Search Results for "{query}"\n\n'
            "No search results could be retrieved for this query and a generated answer "
            "is not available. Confidence is low; please try again or rephrase the question."
        )

    findings = "\n\n".join(
        f"### {r.title or f'Source {i}'}\n{r.snippet} [{i}]" for i, r in enumerate(top, start=1)
    )
    return (
        f'## Search Results for "{query}"\n\n'
        "Based on the search results, here are some key findings:\n\n"
        f"{findings}\n\n"
        "For more detailed information, please refer to the sources provided below."
    )


class AnswerSynthesizer:
    def __init__(
        self,
        client: BaseLLMClient | None,
        *,
        prompt_builder: PromptBuilder | None = None,
        fallback_manager: FallbackManager | None = None,
        params: GenerationParams | None = None,
        timeout_s: float = 30.0,
        monitor: PerformanceMonitor | None = None,
        rate_limiter: RateLimitTracker | None = None,
    ):
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.fallback_manager = fallback_manager or FallbackManager()
        self.params = params or GenerationParams()
        self.timeout_s = timeout_s
        self.monitor = monitor or PerformanceMonitor()
        self.rate_limiter = rate_limiter or RateLimitTracker()

    def _prompt_for(self, stage: FallbackStage, ctx: PromptContext) -> str:
        if stage == FallbackStage.RICH_PROMPT:
            return self.prompt_builder.build(ctx)
        return self.prompt_builder.build_simplified(ctx)

    async def _call_llm(self, prompt: str) -> str:
        if self.client is None:
            raise LLMGenerationError("no LLM client configured", retryable=False)
        if not self.rate_limiter.check_and_increment(self.client.provider_name):
            raise LLMGenerationError(
                f"{self.client.provider_name} request budget exhausted", provider=self.client.provider_name
            )

        call_fn = partial(
            self.client.generate,
            prompt,
            max_output_tokens=self.params.max_output_tokens,
            temperature=self.params.temperature,
            top_p=self.params.top_p,
            top_k=self.params.top_k,
        )
        loop = asyncio.get_running_loop()
        try:
            text = await asyncio.wait_for(loop.run_in_executor(None, call_fn), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise LLMGenerationError(
                f"LLM timed out after {self.timeout_s}s", provider=self.client.provider_name
            ) from e
        except LLMGenerationError:
            raise
        except Exception as e:
            raise LLMGenerationError(
                f"Unexpected LLM error: {type(e).__name__}: {e}", provider=self.client.provider_name
            ) from e

        if not text or not text.strip():
            raise LLMGenerationError("LLM returned an empty answer", provider=self.client.provider_name)
        return text

    async def synthesize(self, ctx: PromptContext, collected: list[Metric] | None = None) -> SynthesisOutcome:
        start = time.perf_counter()
        stage = self.fallback_manager.first_stage()
        failures: list[str] = []

        while stage is not None and stage != FallbackStage.TEMPLATE:
            prompt = self._prompt_for(stage, ctx)
            try:
                with self.monitor.timer(f"llm_{stage.value}", collected) as meta:
                    meta["prompt_chars"] = len(prompt)
                    text = await self._call_llm(prompt)
                    meta["answer_chars"] = len(text)
                return SynthesisOutcome(text=text, stage=stage, failures=tuple(failures))
            except LLMGenerationError as e:
                failures.append(f"{stage.value}: {e}")
                decision = self.fallback_manager.next_stage(
                    current_stage=stage,
                    reason=str(e),
                    retryable=e.retryable,
                    elapsed_ms=int((time.perf_counter() - start) * 1000),
                )
                logger.warning(
                    f"LLM stage {stage.value} failed, falling back to {decision.next_stage}",
                    extra={
                        "extra_fields": {
                            "stage": stage.value,
                            "next_stage": decision.next_stage.value if decision.next_stage else None,
                            "reason": decision.reason,
                        }
                    },
                )
                stage = decision.next_stage

        with self.monitor.timer("llm_template", collected) as meta:
            text = build_template_answer(ctx.query, ctx.results)
            meta["results_used"] = min(len(ctx.results), TEMPLATE_SOURCES)
        return SynthesisOutcome(text=text, stage=FallbackStage.TEMPLATE, failures=tuple(failures))
