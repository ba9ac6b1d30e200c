import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its outcome and duration.

    An incoming ``X-Request-ID`` is reused so webhook retries can be traced
    across deliveries.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            context["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {exc}", extra=context)
            raise

        context["status_code"] = response.status_code
        context["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"[{request_id}] {request.method} {request.url.path} - {response.status_code}", extra=context)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
