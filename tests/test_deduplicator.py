from helpers import make_result

from orchestrator.deduplicator import (
    deduplicate_results,
    is_duplicate,
    levenshtein_distance,
    string_similarity,
    title_similarity,
    url_similarity,
)


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("same", "same") == 0


def test_string_similarity_bounds():
    assert string_similarity("", "") == 1.0
    assert string_similarity("abc", "") == 0.0
    assert string_similarity("abcd", "abcx") == 0.75


def test_url_similarity_requires_same_host():
    assert url_similarity("https://a.com/docs/page", "https://b.com/docs/page") == 0.0
    assert url_similarity("https://a.com/Docs/Page", "https://a.com/docs/page") == 1.0


def test_url_similarity_near_identical_paths():
    similar = url_similarity("https://a.com/docs/python-asyncio", "https://a.com/docs/python-asyncio/")
    assert similar > 0.8
    assert url_similarity("https://a.com/x", "https://a.com/completely-different") == 0.0


def test_title_similarity_is_case_insensitive():
    assert title_similarity("Python Asyncio Guide", "  python asyncio guide ") == 1.0
    assert title_similarity("Python Asyncio Guide", "Rust Ownership") < 0.9


def test_is_duplicate_by_title():
    a = make_result("https://a.com/one", title="Understanding Quantum Computing")
    b = make_result("https://b.org/two", title="Understanding Quantum Computing!")
    assert is_duplicate(b, a)


def test_same_url_keeps_higher_score():
    low = make_result("https://en.wikipedia.org/wiki/Qubit", title="Qubit - Wikipedia", score=70, provider="brave")
    high = make_result(
        "https://en.wikipedia.org/wiki/Qubit", title="Qubit - Wikipedia", score=90, provider="serpapi"
    )

    unique = deduplicate_results([low, high])

    assert len(unique) == 1
    assert unique[0].relevance_score == 90
    assert unique[0].source_provider == "serpapi"


def test_winner_takes_first_slot():
    first = make_result("https://a.com/page", title="Alpha article", score=40)
    other = make_result("https://b.com/else", title="Completely unrelated", score=60)
    better = make_result("https://a.com/page", title="Alpha article", score=80, provider="tavily")

    unique = deduplicate_results([first, other, better])

    assert [r.url for r in unique] == ["https://a.com/page", "https://b.com/else"]
    assert unique[0].source_provider == "tavily"


def test_equal_scores_keep_first_seen():
    first = make_result("https://a.com/page", title="Alpha article", score=50, provider="brave")
    second = make_result("https://a.com/page", title="Alpha article", score=50, provider="serpapi")

    unique = deduplicate_results([first, second])

    assert unique == [first]


def test_distinct_results_are_untouched():
    results = [
        make_result("https://python.org/asyncio", title="Asyncio documentation"),
        make_result("https://github.com/encode/httpx", title="HTTPX repository"),
        make_result("https://stackoverflow.com/q/42", title="Why is my coroutine never awaited"),
    ]
    assert deduplicate_results(results) == results
    assert deduplicate_results([]) == []


def _assert_no_duplicate_pairs(unique):
    for i, a in enumerate(unique):
        for b in unique[i + 1 :]:
            assert not is_duplicate(a, b), (a.url, a.title, b.url, b.title)


def test_replacement_collapses_with_other_kept_results():
    landing = make_result("https://a.com/x", title="Unrelated landing page", score=40)
    basics = make_result("https://b.com/y", title="Quantum computing basics", score=60, provider="serpapi")
    better = make_result("https://a.com/x", title="Quantum computing basic", score=90, provider="tavily")

    unique = deduplicate_results([landing, basics, better])

    assert unique == [better]


def test_replacement_keeps_earlier_result_on_tie():
    landing = make_result("https://a.com/x", title="Unrelated landing page", score=40)
    basics = make_result("https://b.com/y", title="Quantum computing basics", score=90, provider="serpapi")
    tied = make_result("https://a.com/x", title="Quantum computing basic", score=90, provider="tavily")

    unique = deduplicate_results([landing, basics, tied])

    assert unique == [basics]


def test_no_surviving_pair_is_a_duplicate():
    titles = ["Quantum computing basics", "Quantum computing basic", "Unrelated landing page", "Qubit primer"]
    hosts = ["a.com", "b.com", "c.org"]
    paths = ["/x", "/y", "/docs/intro", "/docs/intro/"]
    results = [
        make_result(
            f"https://{hosts[i % 3]}{paths[(i * 5) % 4]}",
            title=titles[(i * 3) % 4],
            score=(i * 37) % 100,
            provider=("brave", "serpapi", "tavily")[i % 3],
            index=i,
        )
        for i in range(24)
    ]

    unique = deduplicate_results(results)

    _assert_no_duplicate_pairs(unique)
    assert len(unique) < len(results)
