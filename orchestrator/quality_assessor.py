from models.search_answer import QualityAssessment, QualityTier
from models.search_result import SearchResult, clamp_score
from orchestrator.scoring_config import QualityThresholds


def assess_quality(
    results: list[SearchResult] | tuple[SearchResult, ...],
    thresholds: QualityThresholds | None = None,
) -> QualityAssessment:
    """Grade a merged result set. Pure; the same input always yields the same assessment."""
    t = thresholds or QualityThresholds()

    if not results:
        return QualityAssessment(tier=QualityTier.LOW, confidence=0.0, issues=("no results",))

    score = 100.0
    issues: list[str] = []

    if len(results) < t.min_results:
        score -= t.min_results_penalty
        issues.append("Limited number of results")

    average = sum(r.relevance_score for r in results) / len(results)
    if average < t.min_average_relevance:
        score -= t.low_relevance_penalty
        issues.append("Low average relevance score")

    if len({r.domain for r in results}) < t.min_unique_domains:
        score -= t.low_diversity_penalty
        issues.append("Limited source diversity")

    dated = sum(1 for r in results if r.published_date)
    if dated < len(results) * t.min_date_coverage:
        score -= t.low_date_coverage_penalty
        issues.append("Many results lack publication dates")

    if score < t.low_tier_below:
        tier = QualityTier.LOW
    elif score < t.medium_tier_below:
        tier = QualityTier.MEDIUM
    else:
        tier = QualityTier.HIGH

    return QualityAssessment(tier=tier, confidence=clamp_score(score), issues=tuple(issues))
