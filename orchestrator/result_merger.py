"""Combine provider responses into one ranked result list."""

from dataclasses import dataclass
from datetime import datetime

from models.search_result import ProviderResponse, SearchResult
from orchestrator.deduplicator import deduplicate_results
from orchestrator.relevance_scorer import RelevanceScorer
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MergeOutcome:
    results: tuple[SearchResult, ...]
    raw_count: int
    unique_count: int
    sources_successful: int


class ResultMerger:
    def __init__(self, scorer: RelevanceScorer | None = None):
        self.scorer = scorer or RelevanceScorer()

    def merge(self, responses: list[ProviderResponse], now: datetime | None = None) -> MergeOutcome:
        """
        Concatenate successful responses in provider order, deduplicate, then
        score and truncate.
        """
        combined: list[SearchResult] = []
        successful = 0
        for response in responses:
            if response.success:
                combined.extend(response.results)
                successful += 1

        if not combined:
            logger.info(
                "No results to merge",
                extra={"extra_fields": {"providers": len(responses), "sources_successful": successful}},
            )
            return MergeOutcome(results=(), raw_count=0, unique_count=0, sources_successful=successful)

        unique = deduplicate_results(combined)
        ranked = self.scorer.score(unique, now)

        logger.info(
            f"Merged {len(combined)} results into {len(ranked)} unique results",
            extra={
                "extra_fields": {
                    "raw_count": len(combined),
                    "unique_count": len(unique),
                    "final_count": len(ranked),
                    "sources_successful": successful,
                    "providers": len(responses),
                }
            },
        )
        return MergeOutcome(
            results=tuple(ranked),
            raw_count=len(combined),
            unique_count=len(unique),
            sources_successful=successful,
        )
