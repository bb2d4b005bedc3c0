"""Pipeline performance statistics."""

from fastapi import APIRouter, Depends

from server.dependencies import get_monitor
from server.schemas.responses import MetricsResponseDTO, OperationStatsDTO
from server.utils import round_stats
from utils.performance_monitor import PerformanceMonitor

router = APIRouter(prefix="/v1", tags=["Metrics"])


@router.get("/metrics", response_model=MetricsResponseDTO)
async def get_metrics(monitor: PerformanceMonitor = Depends(get_monitor)):
    """Per-operation averages and success rates over the metrics buffer."""
    return MetricsResponseDTO(
        buffer_size=len(monitor.buffer),
        buffer_capacity=monitor.buffer.max_size,
        overall=OperationStatsDTO(**round_stats(monitor.stats())),
        operations={
            operation: OperationStatsDTO(**round_stats(stats))
            for operation, stats in monitor.stats_by_operation().items()
        },
    )
