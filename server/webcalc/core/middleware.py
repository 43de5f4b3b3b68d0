from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from webcalc.core.context import request_id_scope

logger = logging.getLogger("webcalc.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        with request_id_scope(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            start_time = time.perf_counter()
            extra: dict[str, object] = {"path": request.url.path, "method": request.method}
            logger.info("request.start", extra=extra)

            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000
                extra.update({"status_code": status_code, "duration_ms": round(duration_ms, 2)})
                logger.info("request.end", extra=extra)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
