"""
Paired writes across the topic and question documents.

Invariant kept by every method below: for each question Q, the topic named by
`Q.topicId` lists `Q.id` exactly once, and every id a topic lists belongs to an
existing question owned by that topic.

No write here spans two documents atomically, so each two-document operation is
a saga: first write, second write, and a compensating action that undoes the
first write when the second fails. If the compensation fails too, the caller
gets `ConsistencyError(compensated=False)` and `ConsistencyAuditor` cleans up.
"""

from __future__ import annotations

import uuid

from ...observability.logging import get_logger
from .errors import ConsistencyError, NotFoundError
from .models import Question, new_id
from .projection import parse_id, question_from_dto, question_to_dto, topic_from_dto, topic_to_dto
from .schemas import QuestionDTO, TopicDTO
from .store import EntityStore
from .validation import CatalogValidator

log = get_logger("catalog")

# Rounds of "delete owned questions, then try to delete the empty topic" before
# giving up on a topic that keeps receiving new questions.
_MAX_CASCADE_ROUNDS = 3


def _topic_not_found(topic_id: uuid.UUID | str) -> NotFoundError:
    return NotFoundError(message=f"Topic not found with ID: {topic_id}", entity="Topic", entity_id=str(topic_id))


def _question_not_found(question_id: uuid.UUID | str) -> NotFoundError:
    return NotFoundError(
        message=f"Question not found with ID: {question_id}",
        entity="Question",
        entity_id=str(question_id),
    )


class ConsistencyManager:
    def __init__(self, store: EntityStore, validator: CatalogValidator):
        self._store = store
        self._validator = validator

    # --- topics ---

    def create_topic(self, dto: TopicDTO) -> TopicDTO:
        self._validator.validate_topic(dto)
        topic = self._store.insert_topic(topic_from_dto(dto, topic_id=new_id()))
        log.info("topic_created", topic_id=str(topic.id))
        out = topic_to_dto(topic)
        out.questionIds = []
        return out

    def update_topic(self, topic_id: str, dto: TopicDTO) -> TopicDTO:
        self._validator.validate_topic(dto)
        tid = parse_id(topic_id, entity="Topic")
        updated = self._store.update_topic_data_structure(tid, str(dto.dataStructure))
        if not updated:
            raise _topic_not_found(tid)
        log.info("topic_updated", topic_id=str(tid))
        return topic_to_dto(updated)

    def delete_topic(self, topic_id: str) -> int:
        """Delete a topic and every question it owns.

        Questions go first, each through the same saga as `delete_question`, so
        a failure part-way leaves a smaller but consistent topic. The topic
        itself is deleted only once its `questionIds` is empty.

        Returns the number of questions removed.
        """
        tid = parse_id(topic_id, entity="Topic")
        topic = self._store.get_topic(tid)
        if not topic:
            raise _topic_not_found(tid)

        removed = 0
        for _ in range(_MAX_CASCADE_ROUNDS):
            owned = self._store.list_questions_by_topic(tid)
            for question in owned:
                if self._delete_question_saga(question):
                    removed += 1

            # Listed ids with no owned question behind them would keep the
            # topic non-empty forever.
            current = self._store.get_topic(tid)
            if not current:
                break
            owned_ids = {q.id for q in owned}
            for qid in current.question_ids:
                if qid in owned_ids:
                    continue
                late = self._store.get_question(qid)
                if late and late.topic_id == tid:
                    # Added after the listing above; next round deletes it.
                    continue
                self._store.remove_question_id(tid, qid)

            if self._store.delete_topic_if_empty(tid):
                break
            if not self._store.get_topic(tid):
                # Deleted concurrently.
                break
        else:
            raise ConsistencyError(
                message=f"Topic {tid} kept receiving questions while being deleted",
                entity="Topic",
                entity_id=str(tid),
                operation="delete_topic",
                compensated=False,
            )

        log.info("topic_deleted", topic_id=str(tid), deleted_questions=removed)
        return removed

    # --- questions ---

    def add_question_to_topic(self, topic_id: str, dto: QuestionDTO) -> QuestionDTO:
        self._validator.validate_question(dto)
        tid = parse_id(topic_id, entity="Topic")

        # Check the owner before writing anything, so an unknown topic never
        # leaves an orphan question behind.
        if not self._store.get_topic(tid):
            raise _topic_not_found(tid)

        question = question_from_dto(dto, question_id=new_id(), topic_id=tid)

        # A failed insert may still have been applied (timeout, retried put
        # hitting its own condition), so it is compensated like a failed append.
        try:
            self._store.insert_question(question)
        except Exception as e:  # noqa: BLE001
            compensated = self._compensate_insert(question)
            raise ConsistencyError(
                message=f"Could not store question {question.id} for topic {tid}",
                entity="Question",
                entity_id=str(question.id),
                operation="add_question_to_topic",
                compensated=compensated,
            ) from e

        try:
            appended = self._store.append_question_id(tid, question.id)
        except Exception as e:  # noqa: BLE001
            compensated = self._compensate_insert(question)
            raise ConsistencyError(
                message=f"Could not add question {question.id} to topic {tid}",
                entity="Question",
                entity_id=str(question.id),
                operation="add_question_to_topic",
                compensated=compensated,
            ) from e

        if not appended:
            # Topic deleted between the existence check and the append.
            compensated = self._compensate_insert(question)
            raise ConsistencyError(
                message=f"Topic {tid} was deleted while question {question.id} was being added",
                entity="Topic",
                entity_id=str(tid),
                operation="add_question_to_topic",
                compensated=compensated,
            )

        log.info("question_added", topic_id=str(tid), question_id=str(question.id))
        return question_to_dto(question)

    def update_question(self, question_id: str, dto: QuestionDTO) -> QuestionDTO:
        self._validator.validate_question(dto)
        qid = parse_id(question_id, entity="Question")
        updated = self._store.update_question_fields(
            qid,
            question_name=str(dto.questionName),
            url=str(dto.url),
            level=str(dto.level),
            data_structure=dto.dataStructure,
        )
        if not updated:
            raise _question_not_found(qid)
        log.info("question_updated", question_id=str(qid))
        return question_to_dto(updated)

    def delete_question(self, topic_id: str, question_id: str) -> None:
        qid = parse_id(question_id, entity="Question")
        question = self._store.get_question(qid)
        if not question:
            raise _question_not_found(qid)

        try:
            owner_id: uuid.UUID | None = parse_id(topic_id, entity="Topic")
        except NotFoundError:
            owner_id = None
        if question.topic_id != owner_id:
            raise NotFoundError(
                message=f"Question does not belong to topic with ID: {topic_id}",
                entity="Question",
                entity_id=str(qid),
            )

        if not self._delete_question_saga(question):
            raise _question_not_found(qid)

    # --- sagas ---

    def _delete_question_saga(self, question: Question) -> bool:
        """Delete the question document, then pull its id from the owner.

        Returns False when the question was already gone.
        """
        if not self._store.delete_question(question.id):
            return False

        try:
            owner = self._store.remove_question_id(question.topic_id, question.id)
        except Exception as e:  # noqa: BLE001
            compensated = self._compensate_delete(question)
            raise ConsistencyError(
                message=f"Could not remove question {question.id} from topic {question.topic_id}",
                entity="Question",
                entity_id=str(question.id),
                operation="delete_question",
                compensated=compensated,
            ) from e

        if owner is None:
            log.warning("question_deleted_without_owner", topic_id=str(question.topic_id), question_id=str(question.id))
        log.info("question_deleted", topic_id=str(question.topic_id), question_id=str(question.id))
        return True

    def _compensate_insert(self, question: Question) -> bool:
        try:
            self._store.delete_question(question.id)
        except Exception:  # noqa: BLE001
            log.exception(
                "saga_compensation_failed",
                operation="add_question_to_topic",
                topic_id=str(question.topic_id),
                question_id=str(question.id),
            )
            return False
        log.warning(
            "saga_compensated",
            operation="add_question_to_topic",
            topic_id=str(question.topic_id),
            question_id=str(question.id),
        )
        return True

    def _compensate_delete(self, question: Question) -> bool:
        try:
            self._store.put_question(question)
        except Exception:  # noqa: BLE001
            log.exception(
                "saga_compensation_failed",
                operation="delete_question",
                topic_id=str(question.topic_id),
                question_id=str(question.id),
            )
            return False
        log.warning(
            "saga_compensated",
            operation="delete_question",
            topic_id=str(question.topic_id),
            question_id=str(question.id),
        )
        return True
