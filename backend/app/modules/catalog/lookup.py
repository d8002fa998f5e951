from __future__ import annotations

from .errors import NotFoundError
from .projection import parse_id, question_to_dto, topic_to_dto
from .schemas import QuestionDTO, TopicDTO
from .store import EntityStore


class CatalogLookup:
    """Read side: stored entities in, string-id DTOs out. No writes."""

    def __init__(self, store: EntityStore):
        self._store = store

    def get_all_topics(self) -> list[TopicDTO]:
        return [topic_to_dto(t) for t in self._store.list_topics()]

    def get_topic_by_id(self, topic_id: str) -> TopicDTO:
        tid = parse_id(topic_id, entity="Topic")
        topic = self._store.get_topic(tid)
        if not topic:
            raise NotFoundError(message=f"Topic not found with ID: {tid}", entity="Topic", entity_id=str(tid))
        return topic_to_dto(topic)

    def get_questions_by_topic(self, topic_id: str) -> list[QuestionDTO]:
        # An unknown (but well-formed) topic simply owns no questions.
        tid = parse_id(topic_id, entity="Topic")
        return [question_to_dto(q) for q in self._store.list_questions_by_topic(tid)]

    def get_question_by_id(self, question_id: str) -> QuestionDTO:
        qid = parse_id(question_id, entity="Question")
        question = self._store.get_question(qid)
        if not question:
            raise NotFoundError(
                message=f"Question not found with ID: {qid}",
                entity="Question",
                entity_id=str(qid),
            )
        return question_to_dto(question)
