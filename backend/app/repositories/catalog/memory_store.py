from __future__ import annotations

import threading
import uuid
from dataclasses import replace

from ...modules.catalog.models import Question, Topic, now_iso
from ...modules.catalog.store import EntityStore


def _copy_topic(topic: Topic) -> Topic:
    return replace(topic, question_ids=list(topic.question_ids))


class InMemoryEntityStore(EntityStore):
    """
    Process-local store for development (`CATALOG_STORE=memory`) and tests.

    A single lock makes every method atomic, which gives the same per-document
    guarantees the DynamoDB adapter gets from conditional updates. Callers only
    ever see copies.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._topics: dict[uuid.UUID, Topic] = {}
        self._questions: dict[uuid.UUID, Question] = {}

    # --- topics ---

    def insert_topic(self, topic: Topic) -> Topic:
        with self._lock:
            if topic.id in self._topics:
                raise ValueError(f"Topic already exists: {topic.id}")
            self._topics[topic.id] = _copy_topic(topic)
            return _copy_topic(topic)

    def get_topic(self, topic_id: uuid.UUID) -> Topic | None:
        with self._lock:
            topic = self._topics.get(topic_id)
            return _copy_topic(topic) if topic else None

    def list_topics(self) -> list[Topic]:
        with self._lock:
            # dicts keep insertion order, which is creation order here.
            return [_copy_topic(t) for t in self._topics.values()]

    def update_topic_data_structure(self, topic_id: uuid.UUID, data_structure: str) -> Topic | None:
        with self._lock:
            topic = self._topics.get(topic_id)
            if not topic:
                return None
            topic.data_structure = data_structure
            topic.updated_at = now_iso()
            return _copy_topic(topic)

    def delete_topic_if_empty(self, topic_id: uuid.UUID) -> bool:
        with self._lock:
            topic = self._topics.get(topic_id)
            if not topic or topic.question_ids:
                return False
            del self._topics[topic_id]
            return True

    def append_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        with self._lock:
            topic = self._topics.get(topic_id)
            if not topic:
                return None
            if question_id not in topic.question_ids:
                topic.question_ids.append(question_id)
                topic.updated_at = now_iso()
            return _copy_topic(topic)

    def remove_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        with self._lock:
            topic = self._topics.get(topic_id)
            if not topic:
                return None
            if question_id in topic.question_ids:
                topic.question_ids.remove(question_id)
                topic.updated_at = now_iso()
            return _copy_topic(topic)

    # --- questions ---

    def insert_question(self, question: Question) -> Question:
        with self._lock:
            if question.id in self._questions:
                raise ValueError(f"Question already exists: {question.id}")
            self._questions[question.id] = replace(question)
            return replace(question)

    def put_question(self, question: Question) -> Question:
        with self._lock:
            self._questions[question.id] = replace(question)
            return replace(question)

    def get_question(self, question_id: uuid.UUID) -> Question | None:
        with self._lock:
            question = self._questions.get(question_id)
            return replace(question) if question else None

    def list_questions_by_topic(self, topic_id: uuid.UUID) -> list[Question]:
        with self._lock:
            return [replace(q) for q in self._questions.values() if q.topic_id == topic_id]

    def list_questions(self) -> list[Question]:
        with self._lock:
            return [replace(q) for q in self._questions.values()]

    def update_question_fields(
        self,
        question_id: uuid.UUID,
        *,
        question_name: str,
        url: str,
        level: str,
        data_structure: str | None,
    ) -> Question | None:
        with self._lock:
            question = self._questions.get(question_id)
            if not question:
                return None
            question.question_name = question_name
            question.url = url
            question.level = level
            question.data_structure = data_structure
            question.updated_at = now_iso()
            return replace(question)

    def delete_question(self, question_id: uuid.UUID) -> bool:
        with self._lock:
            return self._questions.pop(question_id, None) is not None
