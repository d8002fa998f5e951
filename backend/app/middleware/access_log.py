from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability.logging import get_logger


def _route_template(request: Request) -> str | None:
    # "/api/topics/{topicId}" groups better in log queries than the raw path.
    route = request.scope.get("route")
    return getattr(route, "path", None)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one `request` event per call; 5xx responses are logged at error level."""

    def __init__(self, app, *, exclude_paths: set[str] | None = None):
        super().__init__(app)
        self._exclude = frozenset(exclude_paths or ())
        self._log = get_logger("access")

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self._exclude:
            return await call_next(request)

        started = time.perf_counter()
        fields = {
            "http_method": request.method.upper(),
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000.0, 2)

        try:
            response = await call_next(request)
        except Exception:
            self._log.exception("request_error", duration_ms=elapsed_ms(), **fields)
            raise

        status_code = int(response.status_code or 0)
        emit = self._log.error if status_code >= 500 else self._log.info
        emit(
            "request",
            route=_route_template(request),
            status_code=status_code,
            duration_ms=elapsed_ms(),
            **fields,
        )
        return response
