"""Composite relevance scoring over deduplicated results."""

import re
from datetime import datetime, timedelta, timezone

from models.search_result import SearchResult, clamp_score
from orchestrator.scoring_config import ScoringConfig

UNKNOWN_FRESHNESS = 50.0

# (max age in days, score)
FRESHNESS_BUCKETS = (
    (1, 100.0),
    (7, 90.0),
    (30, 80.0),
    (90, 70.0),
    (365, 60.0),
)
STALE_FRESHNESS = 40.0

_RELATIVE_RE = re.compile(
    r"^(\d+)\s+(minute|hour|day|week|month|year)s?\s+ago$", re.IGNORECASE
)
_RELATIVE_UNITS = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}
_ABSOLUTE_FORMATS = ("%Y-%m-%d", "%b %d, %Y", "%B %d, %Y", "%d %b %Y")


def parse_published_date(value: str | None, now: datetime | None = None) -> datetime | None:
    """
    Parse a provider date string into an aware UTC datetime.

    Understands ISO-8601, YYYY-MM-DD, "Mon DD, YYYY" and "N days ago" style
    strings. Returns None when the value cannot be parsed.
    """
    if not value:
        return None
    text = value.strip()
    now = now or datetime.now(timezone.utc)

    match = _RELATIVE_RE.match(text)
    if match:
        amount, unit = int(match.group(1)), match.group(2).lower()
        try:
            return now - _RELATIVE_UNITS[unit] * amount
        except OverflowError:
            # Older than datetime can represent; scores as stale.
            return datetime.min.replace(tzinfo=timezone.utc)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _ABSOLUTE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def freshness_score(published_date: str | None, now: datetime | None = None) -> float:
    now = now or datetime.now(timezone.utc)
    parsed = parse_published_date(published_date, now)
    if parsed is None:
        return UNKNOWN_FRESHNESS

    age_days = max(0.0, (now - parsed).total_seconds() / 86400)
    for max_days, score in FRESHNESS_BUCKETS:
        if age_days <= max_days:
            return score
    return STALE_FRESHNESS


class RelevanceScorer:
    """
    Re-ranks results by blending provider relevance with domain authority,
    freshness and provider trust.
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def domain_authority(self, domain: str) -> float:
        """Table lookup on the domain or its nearest listed parent domain."""
        table = self.config.domain_authority
        labels = (domain or "").lower().split(".")
        for start in range(len(labels) - 1):
            candidate = ".".join(labels[start:])
            if candidate in table:
                return table[candidate]
        return self.config.default_domain_authority

    def provider_trust(self, provider: str) -> float:
        return self.config.provider_trust.get(provider.lower(), self.config.default_provider_trust)

    def composite(self, result: SearchResult, now: datetime | None = None) -> float:
        weights = self.config.weights
        score = (
            result.relevance_score * weights["raw_relevance"]
            + self.domain_authority(result.domain) * weights["domain_authority"]
            + freshness_score(result.published_date, now) * weights["freshness"]
            + self.provider_trust(result.source_provider) * weights["provider_trust"]
        )
        return clamp_score(score)

    def score(self, results: list[SearchResult], now: datetime | None = None) -> list[SearchResult]:
        """Rescore, stable-sort descending and keep the top_n."""
        now = now or datetime.now(timezone.utc)
        rescored = [r.with_score(self.composite(r, now)) for r in results]
        rescored.sort(key=lambda r: r.relevance_score, reverse=True)
        return rescored[: self.config.top_n]
