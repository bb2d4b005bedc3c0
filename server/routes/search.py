"""Search endpoint: fan out, fuse and synthesize an answer."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from models.errors import InputValidationError, InternalError
from server.dependencies import get_monitor, get_orchestrator
from server.schemas.requests import SearchRequestBody
from server.schemas.responses import SearchResponseDTO
from utils.logger import get_logger
from utils.performance_monitor import PerformanceMonitor

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post("/search", response_model=SearchResponseDTO)
async def search(
    request: SearchRequestBody,
    http_request: Request,
    background_tasks: BackgroundTasks,
    orchestrator=Depends(get_orchestrator),
    monitor: PerformanceMonitor = Depends(get_monitor),
):
    """Answer a query from fused multi-provider search results."""
    request_id = getattr(http_request.state, "request_id", None)

    try:
        answer = await orchestrator.answer(request.to_domain(), request_id=request_id)
    except InputValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except InternalError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": str(e), "diagnostics": e.diagnostics},
        ) from e

    # Runs after the response is sent
    background_tasks.add_task(monitor.deliver, answer.metrics)

    return SearchResponseDTO.from_answer(answer)
