from __future__ import annotations

from typing import Any

from .errors import ValidationError
from .schemas import QuestionDTO, TopicDTO

# (attribute, human label) in the order they are checked.
_TOPIC_REQUIRED: tuple[tuple[str, str], ...] = (("dataStructure", "DataStructure"),)
_QUESTION_REQUIRED: tuple[tuple[str, str], ...] = (
    ("questionName", "Question name"),
    ("url", "Question URL"),
    ("level", "Question level"),
)


def is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def require_fields(dto: Any, required: tuple[tuple[str, str], ...], *, entity: str) -> None:
    if dto is None:
        raise ValidationError(message=f"{entity} payload is required", entity=entity)
    for attr, label in required:
        if is_blank(getattr(dto, attr, None)):
            raise ValidationError(
                message=f"{label} cannot be null or empty",
                entity=entity,
                field=attr,
            )


class CatalogValidator:
    """Stateless required-field checks, run before any store access."""

    def validate_topic(self, dto: TopicDTO | None) -> None:
        require_fields(dto, _TOPIC_REQUIRED, entity="Topic")

    def validate_question(self, dto: QuestionDTO | None) -> None:
        require_fields(dto, _QUESTION_REQUIRED, entity="Question")
