from __future__ import annotations

from pydantic import BaseModel, Field


# Wire representations. Input fields are optional; CatalogValidator reports
# missing or empty ones per field.


class TopicDTO(BaseModel):
    id: str | None = None
    dataStructure: str | None = None
    questionIds: list[str] = Field(default_factory=list)
    createdAt: str | None = None
    updatedAt: str | None = None


class QuestionDTO(BaseModel):
    id: str | None = None
    topicId: str | None = None
    questionName: str | None = None
    url: str | None = None
    level: str | None = None
    dataStructure: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None


class TopicAuditDTO(BaseModel):
    topicId: str
    consistent: bool
    danglingIds: list[str] = Field(default_factory=list)
    unlistedIds: list[str] = Field(default_factory=list)
    duplicateIds: list[str] = Field(default_factory=list)
