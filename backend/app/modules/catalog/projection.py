from __future__ import annotations

import uuid

from .errors import NotFoundError
from .models import Question, Topic
from .schemas import QuestionDTO, TopicDTO


def format_id(value: uuid.UUID) -> str:
    return str(value)


def parse_id(value: str | None, *, entity: str) -> uuid.UUID:
    """Turn an external string id into the native id type.

    A string that does not parse cannot reference anything, so it is reported
    the same way as an unknown id.
    """
    raw = str(value or "").strip()
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise NotFoundError(
            message=f"{entity} not found with ID: {raw}",
            entity=entity,
            entity_id=raw or None,
        ) from None


def topic_to_dto(topic: Topic) -> TopicDTO:
    return TopicDTO(
        id=format_id(topic.id),
        dataStructure=topic.data_structure,
        questionIds=[format_id(qid) for qid in topic.question_ids],
        createdAt=topic.created_at,
        updatedAt=topic.updated_at,
    )


def question_to_dto(question: Question) -> QuestionDTO:
    return QuestionDTO(
        id=format_id(question.id),
        topicId=format_id(question.topic_id),
        questionName=question.question_name,
        url=question.url,
        level=question.level,
        dataStructure=question.data_structure,
        createdAt=question.created_at,
        updatedAt=question.updated_at,
    )


def topic_from_dto(dto: TopicDTO, *, topic_id: uuid.UUID) -> Topic:
    # questionIds on the wire are ignored; a new topic always starts empty.
    return Topic(id=topic_id, data_structure=str(dto.dataStructure), question_ids=[])


def question_from_dto(dto: QuestionDTO, *, question_id: uuid.UUID, topic_id: uuid.UUID) -> Question:
    return Question(
        id=question_id,
        topic_id=topic_id,
        question_name=str(dto.questionName),
        url=str(dto.url),
        level=str(dto.level),
        data_structure=dto.dataStructure,
    )
