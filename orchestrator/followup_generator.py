"""Follow-up question suggestions derived from the query, its intent and the results."""

import re

from models.search_request import QueryIntent
from models.search_result import SearchResult

FOLLOW_UP_COUNT = 3
DEFAULT_TOPIC = "this topic"

STOP_WORDS = frozenset(
    {
        "what", "how", "why", "when", "where", "is", "are", "tell", "me", "about",
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "latest", "best", "top", "news", "explain", "describe",
        "works", "does", "do", "can", "could", "would", "should",
    }
)

_QUESTION_PREFIX_RE = re.compile(
    r"^(what is|what are|how does|how to|tell me about|explain|describe)\b", re.IGNORECASE
)
_YEAR_RE = re.compile(r"\b20\d\d\b")
_COMPARISON_RE = re.compile(r"\b(vs|versus|compared|against)\b", re.IGNORECASE)
_APPLICATION_RE = re.compile(r"\b(use|using|application|applied|implement)\b", re.IGNORECASE)
_LATEST_WORDS = ("latest", "developments", "recent", "breakthroughs")

DOMAIN_QUESTIONS = (
    ("github.com", "How can I implement this in my own project?"),
    ("stackoverflow.com", "What are common issues developers face with this?"),
    ("wikipedia.org", "What is the historical context of this topic?"),
)

GENERIC_QUESTIONS = (
    "Where can I find more in-depth information about {topic}?",
    "What should a beginner know first about {topic}?",
    "Who are the leading experts or organizations working on {topic}?",
)


def extract_key_topic(query: str) -> str:
    """
    Reduce a query to its subject phrase.

    Strips a leading question pattern; if at least two words remain they are
    used as-is, otherwise stop words are removed and up to four words kept.
    """
    cleaned = _QUESTION_PREFIX_RE.sub("", query.strip()).strip().rstrip("?!. ")
    if len(cleaned.split()) >= 2:
        return cleaned

    words = [w for w in query.lower().rstrip("?!. ").split() if w not in STOP_WORDS]
    return " ".join(words[:4]) or DEFAULT_TOPIC


def _intent_templates(intent: QueryIntent, topic: str, query: str) -> list[str]:
    query_lower = query.lower()
    about_latest = any(word in query_lower for word in _LATEST_WORDS)

    if intent == QueryIntent.RESEARCH:
        return [
            f"What are the major challenges facing {topic}?"
            if about_latest
            else f"What are the latest developments in {topic}?",
            f"How does {topic} compare to traditional approaches?",
            f"What are the practical applications of {topic}?",
            f"What is the future outlook for {topic}?",
        ]
    if intent == QueryIntent.TECHNICAL:
        return [
            f"What are the best practices for implementing {topic}?",
            f"How can I optimize {topic} for better performance?",
            f"What common issues might arise when working with {topic}?",
            f"Which tools are recommended for working with {topic}?",
        ]
    if intent == QueryIntent.SHOPPING:
        return [
            f"What are the top alternatives to consider for {topic}?",
            f"How do different brands of {topic} compare?",
            f"What features should I prioritize when choosing {topic}?",
            f"What's the price range for high-quality {topic}?",
        ]
    if intent == QueryIntent.NEWS:
        return [
            f"What are the broader implications of {topic}?",
            f"How has {topic} evolved over the past year?",
            f"What might be the next developments in {topic}?",
            f"How are different industries responding to {topic}?",
        ]
    return [
        f"What are the key benefits of {topic}?",
        f"How is {topic} typically implemented or used?",
        f"What are common misconceptions about {topic}?",
        f"How might {topic} evolve in the future?",
    ]


def _context_questions(query: str, results, topic: str) -> list[str]:
    titles = [r.title or "" for r in results]
    questions = []
    if any(_YEAR_RE.search(t) for t in titles) and "history" not in query.lower():
        questions.append(f"What is the history and evolution of {topic}?")
    if any(_COMPARISON_RE.search(t) for t in titles):
        questions.append(f"What are the key differences between competing {topic} approaches?")
    if any(_APPLICATION_RE.search(t) for t in titles):
        questions.append(f"What are some real-world examples of {topic} in action?")
    return questions


def _domain_questions(results) -> list[str]:
    domains = {r.domain for r in results if r.domain}
    questions = []
    for known, question in DOMAIN_QUESTIONS:
        if any(d == known or d.endswith("." + known) for d in domains):
            questions.append(question)
    return questions


def generate_follow_up_questions(
    query: str,
    results: list[SearchResult] | tuple[SearchResult, ...],
    intent: QueryIntent,
) -> list[str]:
    """Return exactly three distinct follow-up questions."""
    topic = extract_key_topic(query)
    templates = _intent_templates(intent, topic, query)

    candidates = (
        templates[:2]
        + _context_questions(query, results, topic)
        + _domain_questions(results)
        + templates[2:]
        + [q.format(topic=topic) for q in GENERIC_QUESTIONS]
    )

    unique: list[str] = []
    for question in candidates:
        if question not in unique:
            unique.append(question)
        if len(unique) == FOLLOW_UP_COUNT:
            break
    return unique
