"""Request logging middleware."""

import logging
import time
from http import HTTPStatus
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

log = logging.getLogger(__name__)


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request on arrival and on completion with status and latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        log.info("Started %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.error(
                "Failed %s %s after %.2fms",
                request.method,
                request.url.path,
                elapsed_ms,
            )
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        log.info(
            "Completed %d %s in %.2fms",
            response.status_code,
            _phrase(response.status_code),
            elapsed_ms,
        )
        return response
