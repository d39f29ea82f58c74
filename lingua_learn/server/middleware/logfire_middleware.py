"""
Request timing middleware.

Every request is reported through :func:`log_api_request`, the elapsed time is
returned in ``X-Process-Time`` (milliseconds) and requests slower than
:data:`SLOW_REQUEST_MS` are logged as warnings. Unhandled errors are reported
as 500 and re-raised for the exception handlers.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lingua_learn.core.logging_config import get_logger
from lingua_learn.core.monitoring import log_api_request

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000.0
PROCESS_TIME_HEADER = "X-Process-Time"


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class LogfireMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        request.state.start_time = started
        target = {"method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = _elapsed_ms(started)
            logger.error(
                f"API request failed: {target['method']} {target['path']}",
                exc_info=True,
                extra={**target, "duration_ms": duration_ms, "error": str(e)},
            )
            log_api_request(status_code=500, duration_ms=duration_ms, **target)
            raise

        duration_ms = _elapsed_ms(started)
        log_api_request(status_code=response.status_code, duration_ms=duration_ms, **target)
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.2f}"

        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"Slow API request: {target['method']} {target['path']} took {duration_ms:.2f}ms",
                extra={**target, "duration_ms": duration_ms, "status_code": response.status_code},
            )
        return response
