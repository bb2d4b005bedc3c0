import asyncio

from helpers import FakeLLMClient, failing_llm, make_result

from models.errors import LLMGenerationError
from orchestrator.answer_synthesizer import (
    AnswerSynthesizer,
    GenerationParams,
    build_template_answer,
)
from orchestrator.fallback_manager import FallbackManager, FallbackPolicy
from orchestrator.pipeline_types import FallbackStage, PromptContext
from utils.rate_limiter import RateLimitTracker

RESULTS = tuple(
    make_result(f"https://site{i}.com/", title=f"Headline {i}", snippet=f"Body text {i}", index=i)
    for i in range(1, 5)
)
CTX = PromptContext(query="what is asyncio", results=RESULTS)


def _run(synthesizer, ctx=CTX, collected=None):
    return asyncio.run(synthesizer.synthesize(ctx, collected))


def test_rich_prompt_success(monitor):
    client = FakeLLMClient(["Generated answer [1]"])
    collected = []

    outcome = _run(AnswerSynthesizer(client, monitor=monitor), collected=collected)

    assert outcome.text == "Generated answer [1]"
    assert outcome.stage == FallbackStage.RICH_PROMPT
    assert outcome.failures == ()
    assert len(client.prompts) == 1
    assert "SEARCH RESULTS:" in client.prompts[0]
    assert [m.operation for m in collected] == ["llm_rich_prompt"]
    assert collected[0].success


def test_generation_params_are_forwarded(monitor):
    client = FakeLLMClient(["ok"])
    params = GenerationParams(max_output_tokens=123, temperature=0.5, top_p=0.8, top_k=10)

    _run(AnswerSynthesizer(client, params=params, monitor=monitor))

    assert client.kwargs[0] == {"max_output_tokens": 123, "temperature": 0.5, "top_p": 0.8, "top_k": 10}


def test_falls_back_to_simplified_prompt(monitor):
    client = FakeLLMClient([LLMGenerationError("overloaded"), "Simplified answer"])
    collected = []

    outcome = _run(AnswerSynthesizer(client, monitor=monitor), collected=collected)

    assert outcome.stage == FallbackStage.SIMPLIFIED_PROMPT
    assert outcome.text == "Simplified answer"
    assert client.prompts[1].startswith('Answer this question: "what is asyncio"')
    assert [(m.operation, m.success) for m in collected] == [
        ("llm_rich_prompt", False),
        ("llm_simplified_prompt", True),
    ]


def test_two_failures_yield_template(monitor):
    client = failing_llm()
    collected = []

    outcome = _run(AnswerSynthesizer(client, monitor=monitor), collected=collected)

    assert outcome.stage == FallbackStage.TEMPLATE
    assert outcome.text == build_template_answer(CTX.query, RESULTS)
    assert len(outcome.failures) == 2
    assert len(client.prompts) == 2
    assert [m.operation for m in collected] == ["llm_rich_prompt", "llm_simplified_prompt", "llm_template"]


def test_unexpected_exception_is_wrapped(monitor):
    client = FakeLLMClient([RuntimeError("socket closed"), "recovered"])
    outcome = _run(AnswerSynthesizer(client, monitor=monitor))
    assert outcome.stage == FallbackStage.SIMPLIFIED_PROMPT
    assert "RuntimeError" in outcome.failures[0]


def test_empty_answer_counts_as_failure(monitor):
    client = FakeLLMClient(["   ", "real answer"])
    outcome = _run(AnswerSynthesizer(client, monitor=monitor))
    assert outcome.text == "real answer"


def test_timeout_falls_through(monitor):
    client = FakeLLMClient(["too slow"], delay_s=0.2)
    outcome = _run(AnswerSynthesizer(client, timeout_s=0.01, monitor=monitor))
    assert outcome.stage == FallbackStage.TEMPLATE
    assert "timed out" in outcome.failures[0]


def test_missing_client_goes_straight_to_template(monitor):
    outcome = _run(AnswerSynthesizer(None, monitor=monitor))
    assert outcome.stage == FallbackStage.TEMPLATE
    assert len(outcome.failures) == 1


def test_non_retryable_error_skips_simplified(monitor):
    client = FakeLLMClient([LLMGenerationError("invalid key", retryable=False), "never used"])
    outcome = _run(AnswerSynthesizer(client, monitor=monitor))
    assert outcome.stage == FallbackStage.TEMPLATE
    assert len(client.prompts) == 1


def test_simplified_first_policy_makes_single_attempt(monitor):
    client = failing_llm()
    manager = FallbackManager(FallbackPolicy(simplified_first=True))
    outcome = _run(AnswerSynthesizer(client, fallback_manager=manager, monitor=monitor))
    assert outcome.stage == FallbackStage.TEMPLATE
    assert len(client.prompts) == 1


def test_llm_budget_is_checked_before_each_attempt(monitor):
    client = FakeLLMClient(["first answer", "second answer", "third answer"])
    limiter = RateLimitTracker({"fake": (2, "minute")})
    synthesizer = AnswerSynthesizer(client, monitor=monitor, rate_limiter=limiter)

    assert _run(synthesizer).stage == FallbackStage.RICH_PROMPT
    assert _run(synthesizer).stage == FallbackStage.RICH_PROMPT
    outcome = _run(synthesizer)

    assert outcome.stage == FallbackStage.TEMPLATE
    assert "budget exhausted" in outcome.failures[0]
    assert len(client.prompts) == 2


def test_template_answer_content():
    text = build_template_answer("what is asyncio", RESULTS)
    assert text.startswith('## Search Results for "what is asyncio"')
    assert "### Headline 3\nBody text 3 [3]" in text
    assert "Headline 4" not in text


def test_template_answer_without_results():
    text = build_template_answer("anything", ())
    assert "No search results could be retrieved" in text
