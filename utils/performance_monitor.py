"""
Stage instrumentation for the search pipeline.

Every pipeline stage is wrapped in ``PerformanceMonitor.timer`` which appends a
``Metric`` to a bounded, process-wide ring buffer. Delivery to an external sink
happens after the response has been produced (see ``deliver``) and never
blocks or fails the caller.
"""

import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterator, Mapping, Protocol

from utils.logger import get_logger

logger = get_logger(__name__)

MetricValue = str | int | float | bool | None
_ALLOWED_METADATA_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Metric:
    """
    One timed operation.

    Metadata is restricted to primitive values so metrics can be serialized
    and aggregated without knowing which stage produced them.
    """

    operation: str
    duration_ms: float
    success: bool = True
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    metadata: Mapping[str, MetricValue] = field(default_factory=dict)

    def __post_init__(self):
        for key, value in self.metadata.items():
            if not isinstance(value, _ALLOWED_METADATA_TYPES):
                raise ValueError(
                    f"Metric metadata '{key}' must be a primitive, got {type(value).__name__}"
                )
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "duration_ms": round(self.duration_ms, 2),
            "success": self.success,
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }


class MetricsSink(Protocol):
    def record(self, metric: Metric) -> None: ...


class LoggingMetricsSink:
    """Ships metrics to the structured log."""

    def record(self, metric: Metric) -> None:
        logger.info("metric", extra={"extra_fields": {"metric": metric.to_dict()}})


class MetricsBuffer:
    """Thread-safe ring buffer; the oldest metric is evicted once full."""

    def __init__(self, max_size: int = 1000):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._items: deque[Metric] = deque(maxlen=max_size)
        self._lock = threading.Lock()
        self.max_size = max_size

    def append(self, metric: Metric) -> None:
        with self._lock:
            self._items.append(metric)

    def snapshot(self) -> list[Metric]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class PerformanceMonitor:
    """
    Records stage timings into a shared buffer.

    Example:
        monitor = PerformanceMonitor(MetricsBuffer(1000))
        with monitor.timer("merge_results") as meta:
            merged = merge(...)
            meta["results_count"] = len(merged)
    """

    def __init__(self, buffer: MetricsBuffer | None = None, sink: MetricsSink | None = None):
        self.buffer = buffer if buffer is not None else MetricsBuffer()
        self.sink = sink

    def record(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        metadata: Mapping[str, MetricValue] | None = None,
    ) -> Metric:
        metric = Metric(
            operation=operation,
            duration_ms=duration_ms,
            success=success,
            metadata=metadata or {},
        )
        self.buffer.append(metric)
        logger.debug(
            f"{operation}: {duration_ms:.2f}ms {'ok' if success else 'failed'}",
            extra={"extra_fields": {"operation": operation, "success": success}},
        )
        return metric

    @contextmanager
    def timer(
        self, operation: str, collected: list[Metric] | None = None
    ) -> Iterator[dict[str, MetricValue]]:
        """
        Time the wrapped block.

        The yielded dict becomes the metric metadata; set ``meta["success"] = False``
        to flag a degraded outcome without raising. An exception marks the
        metric failed and propagates.
        """
        metadata: dict[str, MetricValue] = {}
        start = time.perf_counter()
        success = True
        try:
            yield metadata
        except BaseException:
            success = False
            raise
        finally:
            if metadata.pop("success", True) is False:
                success = False
            duration_ms = (time.perf_counter() - start) * 1000
            metric = self.record(operation, duration_ms, success, metadata)
            if collected is not None:
                collected.append(metric)

    def deliver(self, metrics: list[Metric] | tuple[Metric, ...]) -> None:
        """Push metrics to the sink. Runs as a background task; sink failures are dropped."""
        if self.sink is None:
            return
        for metric in metrics:
            try:
                self.sink.record(metric)
            except Exception as e:
                logger.debug(
                    f"Metric delivery dropped: {e}",
                    extra={"extra_fields": {"operation": metric.operation}},
                )

    def stats(self, operation: str | None = None) -> dict[str, float]:
        """Aggregate timings, optionally for a single operation."""
        metrics = self.buffer.snapshot()
        if operation is not None:
            metrics = [m for m in metrics if m.operation == operation]

        if not metrics:
            return {
                "average_time_ms": 0.0,
                "success_rate": 0.0,
                "total_operations": 0,
                "slowest_ms": 0.0,
                "fastest_ms": 0.0,
            }

        durations = [m.duration_ms for m in metrics]
        successes = sum(1 for m in metrics if m.success)
        return {
            "average_time_ms": sum(durations) / len(durations),
            "success_rate": successes / len(metrics) * 100,
            "total_operations": len(metrics),
            "slowest_ms": max(durations),
            "fastest_ms": min(durations),
        }

    def stats_by_operation(self) -> dict[str, dict[str, float]]:
        operations = sorted({m.operation for m in self.buffer.snapshot()})
        return {op: self.stats(op) for op in operations}
