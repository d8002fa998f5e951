from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_id() -> uuid.UUID:
    return uuid.uuid4()


@dataclass(slots=True)
class Topic:
    id: uuid.UUID
    data_structure: str
    question_ids: list[uuid.UUID] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)


@dataclass(slots=True)
class Question:
    id: uuid.UUID
    topic_id: uuid.UUID
    question_name: str
    url: str
    level: str
    data_structure: str | None = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
