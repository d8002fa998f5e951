"""
RFC7807 problem+json responses.

Every error the API returns goes through `problem_response`, so clients can
rely on `type`, `title`, `status` and `requestId` being present.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse

from .settings import get_settings

PROBLEM_JSON = "application/problem+json"


def default_title(status_code: int) -> str:
    if status_code >= 500:
        return "Internal Server Error"
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def request_id_of(request: Request) -> str | None:
    rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
    return str(rid) if rid else None


@dataclass(slots=True)
class Problem:
    status: int
    title: str | None = None
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None
    # Non-standard members; nested under one key so they cannot shadow the
    # reserved ones.
    extensions: dict[str, Any] | None = None

    def to_payload(self, *, request_id: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type or "about:blank",
            "title": self.title or default_title(self.status),
            "status": self.status,
            "detail": self.detail,
            "instance": self.instance,
            "requestId": request_id,
            "errors": self.errors or None,
            "extensions": self.extensions or None,
        }
        return {k: v for k, v in payload.items() if v not in (None, "")}


def problem_payload(
    *,
    request: Request,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    extensions: dict[str, Any] | None = None,
) -> dict[str, Any]:
    problem = Problem(
        status=int(status_code),
        title=title,
        detail=str(detail) if detail else None,
        type=type,
        instance=instance or request.url.path,
        errors=errors,
        extensions=extensions,
    )
    return problem.to_payload(request_id=request_id_of(request))


def problem_response(
    *,
    request: Request,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    extensions: dict[str, Any] | None = None,
) -> ORJSONResponse:
    # Server-side failure details stay in the logs in production.
    if int(status_code) >= 500 and get_settings().is_production:
        detail = None

    return ORJSONResponse(
        status_code=int(status_code),
        content=problem_payload(
            request=request,
            status_code=status_code,
            title=title,
            detail=detail,
            type=type,
            instance=instance,
            errors=errors,
            extensions=extensions,
        ),
        media_type=PROBLEM_JSON,
    )
