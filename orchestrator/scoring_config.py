from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

REQUIRED_WEIGHTS = ("raw_relevance", "domain_authority", "freshness", "provider_trust")


@dataclass(frozen=True)
class QualityThresholds:
    min_results: int = 5
    min_results_penalty: float = 20
    min_average_relevance: float = 60
    low_relevance_penalty: float = 25
    min_unique_domains: int = 3
    low_diversity_penalty: float = 15
    min_date_coverage: float = 0.5
    low_date_coverage_penalty: float = 10
    low_tier_below: float = 50
    medium_tier_below: float = 75


@dataclass(frozen=True)
class ScoringConfig:
    weights: dict[str, float] = field(
        default_factory=lambda: {
            "raw_relevance": 0.4,
            "domain_authority": 0.3,
            "freshness": 0.2,
            "provider_trust": 0.1,
        }
    )
    domain_authority: dict[str, float] = field(default_factory=dict)
    provider_trust: dict[str, float] = field(default_factory=dict)
    default_domain_authority: float = 50
    default_provider_trust: float = 50
    top_n: int = 15
    quality: QualityThresholds = field(default_factory=QualityThresholds)

    @classmethod
    def from_yaml(cls, path: str | None = None) -> "ScoringConfig":
        config_path = Path(path) if path else Path(__file__).resolve().parent.parent / "config" / "scoring.yaml"
        if not config_path.exists():
            raise ValueError(f"Scoring config not found at {config_path}")

        data: dict[str, Any] = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

        weights = data.get("weights", {})
        missing = [key for key in REQUIRED_WEIGHTS if key not in weights]
        if missing:
            raise ValueError(f"Invalid scoring config: missing weights {missing}")

        top_n = int(data.get("top_n", 15))
        if top_n <= 0:
            raise ValueError("Invalid scoring config: top_n must be positive")

        quality_data = data.get("quality", {}) or {}
        unknown = set(quality_data) - set(QualityThresholds.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Invalid scoring config: unknown quality keys {sorted(unknown)}")

        return cls(
            weights={key: float(weights[key]) for key in REQUIRED_WEIGHTS},
            domain_authority={
                str(domain).lower(): float(score)
                for domain, score in (data.get("domain_authority") or {}).items()
            },
            provider_trust={
                str(provider).lower(): float(score)
                for provider, score in (data.get("provider_trust") or {}).items()
            },
            default_domain_authority=float(data.get("default_domain_authority", 50)),
            default_provider_trust=float(data.get("default_provider_trust", 50)),
            top_n=top_n,
            quality=QualityThresholds(**quality_data),
        )
