"""Custom FastAPI middlewares for observability."""
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .monitoring import observe_request

logger = logging.getLogger("dynamic_qris.http")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


def _status_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request metadata, latency, and status codes."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        start = time.perf_counter()
        meta = {
            "method": request.method,
            "client": request.client.host if request.client else None,
        }
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            path = _route_path(request)
            logger.exception("request failed", extra={**meta, "path": path, "duration_ms": round(duration_ms, 2)})
            observe_request(request.method, path, 500, duration_ms)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        # The route is only resolved once the router has run.
        path = _route_path(request)
        logger.log(
            _status_level(response.status_code),
            "request completed",
            extra={**meta, "path": path, "status_code": response.status_code, "duration_ms": round(duration_ms, 2)},
        )
        observe_request(request.method, path, response.status_code, duration_ms)
        return response
