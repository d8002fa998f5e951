from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(slots=True)
class CatalogError(Exception):
    """Base error for catalog operations.

    Rendered into RFC7807 problem-details responses by the handler in
    `app.main`, using `http_status` / `title`.
    """

    message: str
    entity: str | None = None
    entity_id: str | None = None

    http_status: ClassVar[int] = 500
    title: ClassVar[str] = "Catalog Error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ValidationError(CatalogError):
    """A required input field is missing or empty. Nothing was written."""

    field: str | None = None

    http_status: ClassVar[int] = 400
    title: ClassVar[str] = "Validation Failed"


@dataclass(slots=True)
class NotFoundError(CatalogError):
    """Unknown id, malformed id, or a topic/question ownership mismatch."""

    http_status: ClassVar[int] = 404
    title: ClassVar[str] = "Not Found"


@dataclass(slots=True)
class ConsistencyError(CatalogError):
    """The second write of a paired operation failed after the first succeeded.

    `compensated` tells whether the first write was rolled back. When it is
    False the catalog is inconsistent until the repair worker runs.
    """

    operation: str | None = None
    compensated: bool = False

    http_status: ClassVar[int] = 409
    title: ClassVar[str] = "Consistency Conflict"
