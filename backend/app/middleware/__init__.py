from __future__ import annotations

from .access_log import AccessLogMiddleware
from .cors import build_allowed_origins
from .request_context import REQUEST_ID_HEADER, RequestContextMiddleware

__all__ = ["AccessLogMiddleware", "REQUEST_ID_HEADER", "RequestContextMiddleware", "build_allowed_origins"]
