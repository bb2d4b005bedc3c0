"""Request correlation middleware."""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_CHARS = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to ``request.state`` and echo it in the response.

    A caller-supplied X-Request-ID is reused when it is short enough to be
    safe to log; otherwise a new UUID is generated.
    """

    async def dispatch(self, request: Request, call_next):
        inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = inbound if 0 < len(inbound) <= MAX_REQUEST_ID_CHARS else str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "latency_ms": int((time.perf_counter() - start) * 1000),
                    "headers": redact_sensitive_headers(dict(request.headers)),
                }
            },
        )
        return response
