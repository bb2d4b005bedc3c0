import pytest
from dotenv import load_dotenv

from utils.performance_monitor import MetricsBuffer, PerformanceMonitor
from utils.rate_limiter import RateLimitTracker

# Load environment variables from .env file for tests
load_dotenv()

PROVIDER_ENV_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "BRAVE_RAPIDAPI_KEY",
    "BRAVE_RAPIDAPI_HOST",
    "SERPAPI_KEY",
    "TAVILY_API_KEY",
    "SEARCH_PROVIDERS",
    "PROVIDER_TIMEOUT_S",
    "BRAVE_TIMEOUT_S",
    "SERPAPI_TIMEOUT_S",
    "TAVILY_TIMEOUT_S",
    "BRAVE_RATE_LIMIT",
    "SERPAPI_RATE_LIMIT",
    "LLM_PROVIDER",
    "RESPONSE_COMPLEXITY",
    "USE_SIMPLIFIED_PROMPT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider credentials so Config sees an unconfigured environment."""
    for key in PROVIDER_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("config.config.load_dotenv", lambda **kwargs: False)
    return monkeypatch


@pytest.fixture
def mock_env(clean_env):
    """Fixture to mock a fully configured environment."""
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key",
        "BRAVE_RAPIDAPI_KEY": "test-brave-key",
        "BRAVE_RAPIDAPI_HOST": "brave-web-search.p.rapidapi.com",
        "SERPAPI_KEY": "test-serp-key",
        "TAVILY_API_KEY": "test-tavily-key",
    }
    for key, value in env_vars.items():
        clean_env.setenv(key, value)
    return env_vars


@pytest.fixture
def monitor():
    return PerformanceMonitor(MetricsBuffer(100))


@pytest.fixture
def rate_limiter():
    return RateLimitTracker({})
