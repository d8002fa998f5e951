from __future__ import annotations

from contextvars import ContextVar

# Set per request by RequestContextMiddleware; read by the log processors.
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_var.get()
