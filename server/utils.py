"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

SENSITIVE_HEADERS = {"x-api-key", "authorization", "x-rapidapi-key", "cookie"}


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def round_stats(stats: Mapping[str, float], digits: int = 2) -> dict[str, float]:
    """Round aggregated timings for presentation."""
    return {key: round(value, digits) if isinstance(value, float) else value for key, value in stats.items()}
