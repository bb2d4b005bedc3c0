"""FastAPI dependencies for configuration, instrumentation and orchestrator access."""

from config.config import Config
from utils.logger import get_logger
from utils.performance_monitor import LoggingMetricsSink, MetricsBuffer, PerformanceMonitor
from utils.rate_limiter import RateLimitTracker

logger = get_logger(__name__)


def get_config() -> Config:
    """Dependency to get the process configuration (singleton pattern)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_monitor() -> PerformanceMonitor:
    """Process-wide metrics buffer shared by every request."""
    if not hasattr(get_monitor, "_instance"):
        config = get_config()
        get_monitor._instance = PerformanceMonitor(
            MetricsBuffer(config.METRICS_BUFFER_SIZE), sink=LoggingMetricsSink()
        )
    return get_monitor._instance


def get_rate_limiter() -> RateLimitTracker:
    """Process-wide provider request budgets."""
    if not hasattr(get_rate_limiter, "_instance"):
        get_rate_limiter._instance = RateLimitTracker(get_config().rate_limits())
    return get_rate_limiter._instance


def get_orchestrator():
    """Dependency to get orchestrator instance (singleton pattern)."""
    from orchestrator.core import SearchOrchestrator

    if not hasattr(get_orchestrator, "_instance"):
        get_orchestrator._instance = SearchOrchestrator.from_config(
            get_config(),
            monitor=get_monitor(),
            rate_limiter=get_rate_limiter(),
        )
    return get_orchestrator._instance
