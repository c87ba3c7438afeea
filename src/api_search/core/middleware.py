"""FastAPI middleware assigning a request ID to every HTTP call.

Example:
    from fastapi import FastAPI
    from api_search.core.middleware import RequestIDMiddleware

    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
"""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from api_search.core.logging import LogContext

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuses an incoming ``X-Request-ID`` or generates one.

    The id is exposed on ``request.state.request_id``, echoed in the response
    headers, and attached to every log line written while the request runs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with LogContext(request.headers.get(REQUEST_ID_HEADER) or None) as request_id:
            request.state.request_id = request_id
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request failed",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "error": str(e),
                        "duration_ms": _elapsed_ms(start),
                    },
                    exc_info=True,
                )
                raise

            logger.info(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": _elapsed_ms(start),
                },
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
