import asyncio

import pytest
from helpers import FakeLLMClient, FakeProvider, failing_llm, make_result

from models.errors import InputValidationError, InternalError
from models.search_answer import QualityTier
from models.search_request import QueryIntent, SearchRequest
from orchestrator.answer_synthesizer import AnswerSynthesizer
from orchestrator.answer_validator import AnswerValidator
from orchestrator.core import SearchOrchestrator, clean_query, validate_request
from orchestrator.scoring_config import ScoringConfig
from orchestrator.search_fanout import ProviderFanOut

LONG_ANSWER = (
    "## Executive Summary\nQuantum computers use qubits [1] and superposition [2].\n\n"
    "## Comprehensive Analysis\nError correction [3] remains hard [4] but improves [5].\n\n"
    "## Key Findings\n- Hardware is maturing according to source [1]\n"
)


TOPICS = ("qubits", "superposition", "entanglement", "decoherence", "algorithms", "hardware", "cryptography")


def _results(provider, count, score=85):
    return [
        make_result(
            f"https://{provider}-site{i}.org/article",
            title=f"{TOPICS[i].title()} explained by {provider}",
            score=score,
            provider=provider,
            published_date="2024-03-01",
            index=i,
        )
        for i in range(count)
    ]


def _orchestrator(providers, llm, monitor, **fanout_kwargs):
    fanout = ProviderFanOut(providers, monitor=monitor, **fanout_kwargs)
    return SearchOrchestrator(
        fanout=fanout,
        synthesizer=AnswerSynthesizer(llm, monitor=monitor, timeout_s=5.0),
        validator=AnswerValidator(min_response_length=10),
        scoring_config=ScoringConfig.from_yaml(),
        monitor=monitor,
    )


def test_clean_query_strips_search_prefixes():
    assert clean_query("please search the web for rust async") == "rust async"
    assert clean_query("Google best pizza in Naples") == "best pizza in Naples"
    assert clean_query("find") == "find"


def test_validate_request_trims_context():
    request = validate_request(SearchRequest(query="  q  ", context=tuple(f"turn {i}" for i in range(15)) + ("  ",)))
    assert request.query == "q"
    assert len(request.context) == 10
    assert request.context[-1] == "turn 14"


@pytest.mark.parametrize("query", ["", "   ", "x" * 501])
def test_invalid_queries_are_rejected_before_search(query, monitor):
    provider = FakeProvider("brave")
    orchestrator = _orchestrator([provider], FakeLLMClient(), monitor)

    with pytest.raises(InputValidationError):
        asyncio.run(orchestrator.answer(SearchRequest(query=query)))

    assert provider.calls == []


def test_happy_path(monitor):
    providers = [FakeProvider("brave", _results("brave", 4)), FakeProvider("serpapi", _results("serpapi", 4))]
    llm = FakeLLMClient([LONG_ANSWER])

    answer = asyncio.run(
        _orchestrator(providers, llm, monitor).answer(SearchRequest(query="search for quantum computing"), "req-1")
    )

    assert answer.request_id == "req-1"
    assert answer.answer == LONG_ANSWER
    assert answer.answered_by == "rich_prompt"
    assert len(answer.sources) == 6
    assert len(answer.follow_up_questions) == 3
    assert answer.quality.tier == QualityTier.HIGH
    assert answer.confidence == answer.quality.confidence
    assert answer.providers_succeeded == ("brave", "serpapi")
    assert providers[0].calls[0][0] == "quantum computing"
    assert 'QUERY: "search for quantum computing"' in llm.prompts[0]
    assert answer.processing_time_ms >= 0


def test_metrics_cover_every_stage(monitor):
    providers = [FakeProvider("brave", _results("brave", 3))]

    answer = asyncio.run(
        _orchestrator(providers, FakeLLMClient([LONG_ANSWER]), monitor).answer(SearchRequest(query="quantum"))
    )

    operations = [m.operation for m in answer.metrics]
    for expected in (
        "search_brave",
        "search_external_calls",
        "merge_results",
        "intent_detection",
        "llm_rich_prompt",
        "answer_validation",
        "search_total",
    ):
        assert expected in operations
    assert operations[-1] == "search_total"
    assert monitor.stats("search_total")["total_operations"] == 1


def test_explicit_intent_wins(monitor):
    answer = asyncio.run(
        _orchestrator([FakeProvider("brave", _results("brave", 2))], FakeLLMClient([LONG_ANSWER]), monitor).answer(
            SearchRequest(query="how to fix python error", intent=QueryIntent.NEWS)
        )
    )
    assert answer.query_intent == "news"


def test_classified_intent(monitor):
    answer = asyncio.run(
        _orchestrator([FakeProvider("brave", _results("brave", 2))], FakeLLMClient([LONG_ANSWER]), monitor).answer(
            SearchRequest(query="how to fix python error")
        )
    )
    assert answer.query_intent == "technical"


def test_weak_answer_is_enhanced(monitor):
    providers = [FakeProvider("brave", _results("brave", 3))]
    llm = FakeLLMClient(["Too short."])

    answer = asyncio.run(_orchestrator(providers, llm, monitor).answer(SearchRequest(query="quantum")))

    assert answer.answered_by == "rich_prompt"
    assert answer.answer.startswith("# Research Report: quantum")
    validation_metric = next(m for m in answer.metrics if m.operation == "answer_validation")
    assert validation_metric.metadata["enhanced"] is True


def test_llm_failures_fall_back_to_template(monitor):
    providers = [FakeProvider("brave", _results("brave", 3))]

    answer = asyncio.run(_orchestrator(providers, failing_llm(), monitor).answer(SearchRequest(query="quantum")))

    assert answer.answered_by == "template"
    assert answer.answer.startswith('## Search Results for "quantum"')
    assert "answer_validation" not in [m.operation for m in answer.metrics]
    assert len(answer.sources) == 3


def test_unparseable_provider_dates_do_not_fail_the_request(monitor):
    ancient = make_result(
        "https://archive.example.org/scroll",
        title="Ancient scroll archive",
        score=80,
        published_date="3000 years ago",
    )
    providers = [FakeProvider("brave", [ancient] + _results("brave", 2))]

    answer = asyncio.run(
        _orchestrator(providers, FakeLLMClient([LONG_ANSWER]), monitor).answer(SearchRequest(query="quantum"))
    )

    assert answer.answered_by == "rich_prompt"
    assert "https://archive.example.org/scroll" in [s.url for s in answer.sources]


def test_total_outage_degrades_without_raising(monitor):
    providers = [FakeProvider(name, delay_s=1.0) for name in ("brave", "serpapi", "tavily")]
    llm = FakeLLMClient(["never returned in time"], delay_s=0.2)
    fanout = ProviderFanOut(providers, monitor=monitor, default_timeout_s=0.05)
    orchestrator = SearchOrchestrator(
        fanout=fanout,
        synthesizer=AnswerSynthesizer(llm, monitor=monitor, timeout_s=0.02),
        scoring_config=ScoringConfig.from_yaml(),
        monitor=monitor,
    )

    answer = asyncio.run(orchestrator.answer(SearchRequest(query="quantum computing")))

    assert answer.answered_by == "template"
    assert answer.sources == ()
    assert answer.confidence == 0.0
    assert answer.quality.tier == QualityTier.LOW
    assert answer.providers_succeeded == ()
    assert len(answer.follow_up_questions) == 3
    assert "No search results could be retrieved" in answer.answer


def test_no_providers_configured(monitor):
    answer = asyncio.run(_orchestrator([], failing_llm(), monitor).answer(SearchRequest(query="anything")))
    assert answer.sources == ()
    assert answer.confidence == 0.0


class ExplodingMerger:
    def merge(self, responses, now=None):
        raise RuntimeError("merge exploded")


def test_unexpected_failure_becomes_internal_error(monitor):
    providers = [FakeProvider("brave", _results("brave", 2)), FakeProvider("serpapi", _results("serpapi", 1))]
    orchestrator = SearchOrchestrator(
        fanout=ProviderFanOut(providers, monitor=monitor),
        synthesizer=AnswerSynthesizer(FakeLLMClient(), monitor=monitor),
        merger=ExplodingMerger(),
        monitor=monitor,
    )

    with pytest.raises(InternalError) as excinfo:
        asyncio.run(orchestrator.answer(SearchRequest(query="quantum")))

    assert excinfo.value.diagnostics == {
        "responses_received": 2,
        "merged_results_count": 0,
        "sources_successful": 2,
    }
    assert "merge exploded" not in str(excinfo.value)
