import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum


class LLMProviderType(Enum):
    """Supported answer-synthesis model providers."""
    GEMINI = "gemini"
    OPENAI = "openai"


class ResponseComplexity(Enum):
    """Persona depth used by the prompt builder."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    EXPERT = "expert"


# Budgets are (requests, period) where period is "minute" or "month".
DEFAULT_RATE_LIMITS = {
    "brave": (2000, "month"),
    "serpapi": (100, "month"),
    "tavily": (1000, "month"),
    "gemini": (15, "minute"),
}

DEFAULT_PROVIDER_TIMEOUTS_S = {
    "brave": 12.0,
    "serpapi": 12.0,
    "tavily": 15.0,
}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    """Configuration management for the search-fusion service."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # LLM credentials
        self.GEMINI_API_KEY = os.getenv('GEMINI_API_KEY') or os.getenv('GOOGLE_GEMINI_API_KEY')
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')

        # Search provider credentials
        self.BRAVE_RAPIDAPI_KEY = os.getenv('BRAVE_RAPIDAPI_KEY', '')
        self.BRAVE_RAPIDAPI_HOST = os.getenv('BRAVE_RAPIDAPI_HOST', '')
        self.SERPAPI_KEY = os.getenv('SERPAPI_KEY', '')
        self.TAVILY_API_KEY = os.getenv('TAVILY_API_KEY', '')

        # Provider fan-out
        providers = os.getenv('SEARCH_PROVIDERS', 'brave,serpapi,tavily')
        self.SEARCH_PROVIDERS = [p.strip().lower() for p in providers.split(',') if p.strip()]
        self.PROVIDER_TIMEOUT_S = _env_float('PROVIDER_TIMEOUT_S', 12.0)
        self.SEARCH_REQUEST_TIMEOUT_S = _env_float('SEARCH_REQUEST_TIMEOUT_S', 25.0)
        self.MAX_RESULTS_PER_SOURCE = _env_int('MAX_RESULTS_PER_SOURCE', 5)
        self.MAX_RESULTS_TO_PROCESS = _env_int('MAX_RESULTS_TO_PROCESS', 8)

        # Model configuration
        self.LLM_PROVIDER = os.getenv('LLM_PROVIDER', LLMProviderType.GEMINI.value).lower()
        self.GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-pro')
        self.OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
        self.LLM_MAX_TOKENS = _env_int('LLM_MAX_TOKENS', 4000)
        self.LLM_TEMPERATURE = _env_float('LLM_TEMPERATURE', 0.2)
        self.LLM_TOP_P = _env_float('LLM_TOP_P', 0.9)
        self.LLM_TOP_K = _env_int('LLM_TOP_K', 40)
        self.LLM_TIMEOUT_S = _env_float('LLM_TIMEOUT_S', 30.0)

        # Answer shaping
        self.MIN_RESPONSE_LENGTH = _env_int('MIN_RESPONSE_LENGTH', 800)
        self.USE_SIMPLIFIED_PROMPT = _env_flag('USE_SIMPLIFIED_PROMPT', False)
        self.FORCE_COMPREHENSIVE_RESPONSES = _env_flag('FORCE_COMPREHENSIVE_RESPONSES', True)
        complexity = os.getenv('RESPONSE_COMPLEXITY', ResponseComplexity.DETAILED.value).lower()
        if complexity not in {c.value for c in ResponseComplexity}:
            complexity = ResponseComplexity.DETAILED.value
        self.RESPONSE_COMPLEXITY = complexity

        # Instrumentation
        self.METRICS_BUFFER_SIZE = _env_int('METRICS_BUFFER_SIZE', 1000)

        self.APP_VERSION = os.getenv('APP_VERSION', '1.0.0')

    def provider_timeout(self, provider: str) -> float:
        """Per-provider deadline; `<PROVIDER>_TIMEOUT_S` overrides the shared default."""
        override = os.getenv(f'{provider.upper()}_TIMEOUT_S')
        if override:
            return float(override)
        if os.getenv('PROVIDER_TIMEOUT_S'):
            return self.PROVIDER_TIMEOUT_S
        return DEFAULT_PROVIDER_TIMEOUTS_S.get(provider, self.PROVIDER_TIMEOUT_S)

    def rate_limits(self) -> dict[str, tuple[int, str]]:
        """
        Fixed-window budgets per provider.

        `<PROVIDER>_RATE_LIMIT` overrides the request count, keeping the default period.
        """
        limits = {}
        for name, (requests, period) in DEFAULT_RATE_LIMITS.items():
            limits[name] = (_env_int(f'{name.upper()}_RATE_LIMIT', requests), period)
        return limits

    def validate(self) -> list[str]:
        """
        Check that credentials exist for every configured provider.

        Returns:
            list[str]: Human-readable warnings; empty when fully configured
        """
        warnings = []
        status = self.providers_status()
        for provider in self.SEARCH_PROVIDERS:
            if provider not in status:
                warnings.append(f"Unknown search provider '{provider}'")
            elif status[provider] != "configured":
                warnings.append(f"Search provider '{provider}' is missing credentials")

        if self.LLM_PROVIDER == LLMProviderType.GEMINI.value and not self.GEMINI_API_KEY:
            warnings.append("GEMINI_API_KEY is not set; answers will use the template fallback")
        elif self.LLM_PROVIDER == LLMProviderType.OPENAI.value and not self.OPENAI_API_KEY:
            warnings.append("OPENAI_API_KEY is not set; answers will use the template fallback")
        elif self.LLM_PROVIDER not in {e.value for e in LLMProviderType}:
            warnings.append(
                f"Unknown LLM_PROVIDER '{self.LLM_PROVIDER}'. "
                f"Must be one of: {', '.join([e.value for e in LLMProviderType])}"
            )
        return warnings

    def providers_status(self) -> dict[str, str]:
        """Configured/missing per provider. Never includes key material."""
        def _state(ok: bool) -> str:
            return "configured" if ok else "missing"

        return {
            "brave": _state(bool(self.BRAVE_RAPIDAPI_KEY and self.BRAVE_RAPIDAPI_HOST)),
            "serpapi": _state(bool(self.SERPAPI_KEY)),
            "tavily": _state(bool(self.TAVILY_API_KEY)),
            "gemini": _state(bool(self.GEMINI_API_KEY)),
            "openai": _state(bool(self.OPENAI_API_KEY)),
        }

    def get_model_info(self) -> str:
        """
        Get information about the currently selected synthesis model.

        Returns:
            str: Formatted string with model information
        """
        if self.LLM_PROVIDER == LLMProviderType.GEMINI.value:
            return f"Google Gemini ({self.GEMINI_MODEL})"
        elif self.LLM_PROVIDER == LLMProviderType.OPENAI.value:
            return f"OpenAI ({self.OPENAI_MODEL})"
        return "Unknown"
