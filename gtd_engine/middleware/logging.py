"""Access logging middleware: one JSON line per request, tagged with a request ID."""

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("gtd.access")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Reuse the caller's ID so a declaration edit can be traced across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        entry = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        }
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, json.dumps(entry, ensure_ascii=False))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
