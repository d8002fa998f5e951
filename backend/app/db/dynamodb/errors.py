from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(slots=True)
class DdbError(Exception):
    """A DynamoDB call that failed after `ddb_call` gave up on it.

    Subclasses only differ in how they surface over HTTP (`http_status`,
    `title`); the catalog stores catch `DdbConflict` to read failed
    conditions as "not applied".
    """

    message: str
    operation: str | None = None
    table_name: str | None = None
    key: dict[str, Any] | None = None
    aws_request_id: str | None = None
    retryable: bool = False
    cause: Exception | None = None

    http_status: ClassVar[int] = 500
    title: ClassVar[str] = "Storage Error"

    def __str__(self) -> str:
        return self.message

    def to_extensions(self) -> dict[str, Any]:
        # Problem+json members; item keys only go to the logs.
        ext = {
            "operation": self.operation,
            "table": self.table_name,
            "awsRequestId": self.aws_request_id,
            "retryable": bool(self.retryable),
        }
        return {k: v for k, v in ext.items() if v is not None}


@dataclass(slots=True)
class DdbConflict(DdbError):
    """ConditionalCheckFailedException: the item was not in the expected state."""

    http_status: ClassVar[int] = 409
    title: ClassVar[str] = "Conflict"


@dataclass(slots=True)
class DdbValidation(DdbError):
    http_status: ClassVar[int] = 400
    title: ClassVar[str] = "Bad Request"


@dataclass(slots=True)
class DdbThrottled(DdbError):
    http_status: ClassVar[int] = 503
    title: ClassVar[str] = "Service Unavailable"


@dataclass(slots=True)
class DdbUnavailable(DdbError):
    """Table missing, credentials rejected, or the endpoint unreachable."""

    http_status: ClassVar[int] = 503
    title: ClassVar[str] = "Service Unavailable"


@dataclass(slots=True)
class DdbInternal(DdbError):
    pass
