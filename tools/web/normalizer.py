"""
Map provider payload items onto SearchResult.

Each provider names its fields differently; the ``normalize_*`` functions pick
the right keys and hand off to ``build_result`` which applies the shared rules
(placeholders, domain extraction, snippet cleanup, score defaults, ids).
"""

import hashlib
import re
from typing import Any
from urllib.parse import urlparse

from models.search_result import SearchResult, clamp_score

NO_TITLE = "No title"
NO_SNIPPET = "No description available"
MAX_SNIPPET_CHARS = 500

# Rank-based default relevance: 100 - index * step
BRAVE_RANK_STEP = 3
SERPAPI_RANK_STEP = 5
DEFAULT_RANK_STEP = 5

_WHITESPACE_RE = re.compile(r"\s+")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def extract_domain(url: str, fallback: str | None = None) -> str:
    """Lower-cased hostname without "www.", else the fallback's hostname, else ""."""
    for candidate in (url, fallback):
        candidate = _text(candidate)
        if not candidate:
            continue
        if "://" not in candidate:
            candidate = f"http://{candidate}"
        try:
            host = urlparse(candidate).hostname or ""
        except ValueError:
            host = ""
        host = host.lower()
        if host.startswith("www."):
            host = host[4:]
        if host:
            return host
    return ""


def clean_snippet(text: Any, limit: int = MAX_SNIPPET_CHARS) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", _text(text)).strip()
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 3].rstrip() + "..."


def make_result_id(provider: str, index: int, url: str) -> str:
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:8]
    return f"{provider}_{index}_{digest}"


def rank_score(index: int, step: int) -> float:
    return clamp_score(100 - index * step)


def build_result(
    *,
    provider: str,
    index: int,
    url: Any,
    title: Any = None,
    snippet: Any = None,
    score: float | None = None,
    rank_step: int = DEFAULT_RANK_STEP,
    published_date: Any = None,
    image_url: Any = None,
    displayed_link: Any = None,
) -> SearchResult | None:
    """
    Build a SearchResult from already-extracted fields.

    Returns None when the item has no URL.
    """
    url = _text(url)
    if not url:
        return None

    relevance = rank_score(index, rank_step) if score is None else clamp_score(score)

    return SearchResult(
        id=make_result_id(provider, index, url),
        title=_text(title) or NO_TITLE,
        url=url,
        snippet=clean_snippet(snippet) or NO_SNIPPET,
        source_provider=provider,
        relevance_score=relevance,
        published_date=_text(published_date) or None,
        image_url=_text(image_url) or None,
        domain=extract_domain(url, _text(displayed_link) or None),
    )


def normalize_brave(item: dict[str, Any], index: int) -> SearchResult | None:
    thumbnail = item.get("thumbnail")
    image_url = thumbnail.get("src") if isinstance(thumbnail, dict) else None
    return build_result(
        provider="brave",
        index=index,
        url=item.get("url") or item.get("link"),
        title=item.get("title"),
        snippet=item.get("description") or item.get("snippet"),
        rank_step=BRAVE_RANK_STEP,
        published_date=item.get("published_date") or item.get("age") or item.get("date"),
        image_url=image_url,
    )


def normalize_serpapi(item: dict[str, Any], index: int) -> SearchResult | None:
    return build_result(
        provider="serpapi",
        index=index,
        url=item.get("link"),
        title=item.get("title"),
        snippet=item.get("snippet"),
        rank_step=SERPAPI_RANK_STEP,
        published_date=item.get("date"),
        image_url=item.get("thumbnail"),
        displayed_link=item.get("displayed_link"),
    )


def normalize_tavily(item: dict[str, Any], index: int) -> SearchResult | None:
    raw_score = item.get("score")
    score = None
    if isinstance(raw_score, (int, float)) and not isinstance(raw_score, bool):
        score = float(raw_score) * 100
    return build_result(
        provider="tavily",
        index=index,
        url=item.get("url"),
        title=item.get("title"),
        snippet=item.get("content") or item.get("snippet"),
        score=score,
        published_date=item.get("published_date"),
    )


def normalize_items(items: list[Any], normalize) -> list[SearchResult]:
    """Apply a per-provider normalizer, skipping non-dict items and items without a URL."""
    results: list[SearchResult] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        result = normalize(item, index)
        if result is not None:
            results.append(result)
    return results
