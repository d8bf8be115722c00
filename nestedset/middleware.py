import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with a W3C traceparent and log how long it took."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = uuid.uuid4().hex
        span_id = uuid.uuid4().hex[:16]
        request.state.trace_id = trace_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["traceparent"] = f"00-{trace_id}-{span_id}-01"
        response.headers["server-timing"] = f"total;dur={duration_ms:.2f}"
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms:.2f}ms [{trace_id}]")
        return response
