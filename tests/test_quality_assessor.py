from helpers import make_result

from models.search_answer import QualityTier
from orchestrator.quality_assessor import assess_quality
from orchestrator.scoring_config import QualityThresholds


def _results(count, score=85, dated=True, domains=None):
    return [
        make_result(
            f"https://{(domains or [f'site{i}.com' for i in range(count)])[i]}/page{i}",
            title=f"Distinct result title {i}",
            score=score,
            published_date="2024-01-01" if dated else None,
            index=i,
        )
        for i in range(count)
    ]


def test_healthy_result_set_is_high_quality():
    assessment = assess_quality(_results(8))
    assert assessment.tier == QualityTier.HIGH
    assert assessment.confidence >= 90
    assert assessment.issues == ()


def test_empty_results_are_low_quality():
    assessment = assess_quality([])
    assert assessment.tier == QualityTier.LOW
    assert assessment.confidence == 0.0
    assert assessment.issues == ("no results",)


def test_few_low_scored_single_domain_undated_results():
    results = _results(2, score=30, dated=False, domains=["same.com", "same.com"])

    assessment = assess_quality(results)

    assert assessment.tier == QualityTier.LOW
    assert assessment.confidence == 30
    assert assessment.issues == (
        "Limited number of results",
        "Low average relevance score",
        "Limited source diversity",
        "Many results lack publication dates",
    )


def test_medium_tier():
    assessment = assess_quality(_results(4, score=50))
    assert assessment.tier == QualityTier.MEDIUM
    assert assessment.confidence == 55
    assert assessment.issues == ("Limited number of results", "Low average relevance score")


def test_custom_thresholds():
    thresholds = QualityThresholds(min_results=1, min_unique_domains=1)
    assessment = assess_quality(_results(1), thresholds)
    assert assessment.tier == QualityTier.HIGH


def test_assessment_is_idempotent():
    results = _results(4, score=55)
    assert assess_quality(results) == assess_quality(results)
