from __future__ import annotations

import re
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability.context import request_id_var

REQUEST_ID_HEADER = "X-Request-Id"
_MAX_REQUEST_ID_LENGTH = 128
# Anything else is dropped so a client cannot forge extra log fields.
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._:\-]")


def resolve_request_id(inbound: str | None) -> str:
    """Client-supplied id (cleaned and capped) or a fresh UUIDv4."""
    cleaned = _UNSAFE_CHARS.sub("", str(inbound or "").strip())
    return cleaned[:_MAX_REQUEST_ID_LENGTH] or str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a request id to `request.state`, the logging contextvar and the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
