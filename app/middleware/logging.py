import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (reused from the caller when supplied) and logs its outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        started = time.perf_counter()
        client = request.client.host if request.client else "-"
        line = f"[{request_id}] {client} {request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            logger.error(f"{line} - ERROR after {elapsed_ms}ms: {exc}", extra={"request_id": request_id})
            raise

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        if response.status_code >= 400:
            level = logging.WARNING
        elif request.url.path in QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO
        logger.log(
            level,
            f"{line} - {response.status_code} ({elapsed_ms}ms)",
            extra={"request_id": request_id, "status_code": response.status_code, "duration_ms": elapsed_ms},
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
        return response
