"""
Request context middleware: request id propagation and one access-log line
per request.
"""

import time
import uuid

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from notification_prefs.api.errors import internal_error_handler

REQUEST_ID_HEADERS = ("x-request-id", "x-correlation-id")


def resolve_request_id(request: Request) -> str:
    incoming = ""
    for header in REQUEST_ID_HEADERS:
        incoming = request.headers.get(header, "")
        if incoming:
            break
    return incoming.strip() or str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, access_log: bool = True):
        super().__init__(app)
        self.access_log = access_log

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        start_time = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await internal_error_handler(request, exc)

        process_time_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time-Ms"] = f"{process_time_ms:.2f}"

        if self.access_log:
            logger.bind(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(process_time_ms, 1),
            ).info(
                "http_request {} {} -> {} {:.1f}ms",
                request.method, request.url.path, response.status_code, process_time_ms,
            )
        return response
