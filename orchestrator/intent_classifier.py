"""Keyword-based query intent detection."""

from models.search_request import QueryIntent

# Checked in order; the first intent with a matching keyword wins.
INTENT_KEYWORDS: tuple[tuple[QueryIntent, tuple[str, ...]], ...] = (
    (
        QueryIntent.TECHNICAL,
        (
            "how to",
            "tutorial",
            "guide",
            "install",
            "configure",
            "setup",
            "code",
            "programming",
            "api",
            "javascript",
            "python",
            "react",
            "error",
            "debug",
            "fix",
            "troubleshoot",
            "implement",
        ),
    ),
    (
        QueryIntent.SHOPPING,
        (
            "buy",
            "purchase",
            "price",
            "cost",
            "cheap",
            "best",
            "review",
            "compare",
            "vs",
            "versus",
            "amazon",
            "store",
            "sale",
            "deal",
        ),
    ),
    (
        QueryIntent.NEWS,
        (
            "news",
            "latest",
            "recent",
            "update",
            "today",
            "yesterday",
            "breaking",
            "announcement",
            "released",
            "happened",
        ),
    ),
    (
        QueryIntent.RESEARCH,
        (
            "what is",
            "definition",
            "explain",
            "analysis",
            "study",
            "research",
            "statistics",
            "data",
            "report",
            "academic",
        ),
    ),
)


def classify_intent(query: str) -> QueryIntent:
    """
    Classify a query by case-insensitive substring match.

    Matching is plain containment, so "api" also fires inside "capital".
    Total: every input maps to some intent, "general" when nothing matches.

    Args:
        query: Raw user query

    Returns:
        QueryIntent
    """
    query_lower = (query or "").lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in query_lower for keyword in keywords):
            return intent
    return QueryIntent.GENERAL


def resolve_intent(query: str, explicit: QueryIntent | None = None) -> QueryIntent:
    """Use the caller's intent when supplied, otherwise classify."""
    return explicit if explicit is not None else classify_intent(query)
