"""
Error taxonomy for the search pipeline.

Only InputValidationError and InternalError ever reach a caller; provider and
generation failures are absorbed into a degraded answer.
"""

from typing import Any


class SearchFusionError(Exception):
    """Base class for pipeline errors."""


class InputValidationError(SearchFusionError):
    """Empty or oversized query. Rejected before any provider is called."""


class ProviderError(SearchFusionError):
    """A search provider failed (timeout, auth, rate limit, transport, bad payload)."""

    def __init__(self, provider: str, message: str, code: str = "provider_error"):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.code = code


class LLMGenerationError(SearchFusionError):
    """The synthesis model timed out, errored or returned no text."""

    def __init__(self, message: str, provider: str = "unknown", retryable: bool = True):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class InternalError(SearchFusionError):
    """Unexpected failure, surfaced with counts only (no credentials, no traces)."""

    def __init__(self, message: str, diagnostics: dict[str, Any] | None = None):
        super().__init__(message)
        self.diagnostics = diagnostics or {}
