"""
Entity store interface for the catalog.

Implementations: `app.repositories.catalog.dynamo_store.DynamoEntityStore`
and `app.repositories.catalog.memory_store.InMemoryEntityStore`.

Contract shared by every implementation:
- a missing document is reported as `None` / `False`, never raised;
- storage faults propagate as the backend's own exceptions;
- `questionIds` is only ever changed through `append_question_id` /
  `remove_question_id`, each a single atomic operation on the topic document
  (no read-modify-write of the whole topic).
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod

from .models import Question, Topic


class EntityStore(ABC):
    """Per-collection CRUD for topics and questions."""

    # --- topics ---

    @abstractmethod
    def insert_topic(self, topic: Topic) -> Topic:
        """Persist a new topic."""

    @abstractmethod
    def get_topic(self, topic_id: uuid.UUID) -> Topic | None:
        """Get a topic by id."""

    @abstractmethod
    def list_topics(self) -> list[Topic]:
        """All topics, oldest first."""

    @abstractmethod
    def update_topic_data_structure(self, topic_id: uuid.UUID, data_structure: str) -> Topic | None:
        """Set `dataStructure` only. None if the topic does not exist."""

    @abstractmethod
    def delete_topic_if_empty(self, topic_id: uuid.UUID) -> bool:
        """Delete the topic only while its `questionIds` is empty."""

    @abstractmethod
    def append_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        """Atomically append an id unless already present. None if the topic does not exist."""

    @abstractmethod
    def remove_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        """Atomically remove one occurrence of an id. None if the topic does not exist."""

    # --- questions ---

    @abstractmethod
    def insert_question(self, question: Question) -> Question:
        """Persist a new question; fails if the id is taken."""

    @abstractmethod
    def put_question(self, question: Question) -> Question:
        """Unconditional write, used to restore a deleted question."""

    @abstractmethod
    def get_question(self, question_id: uuid.UUID) -> Question | None:
        """Get a question by id."""

    @abstractmethod
    def list_questions_by_topic(self, topic_id: uuid.UUID) -> list[Question]:
        """Questions whose `topicId` equals `topic_id`, oldest first."""

    @abstractmethod
    def list_questions(self) -> list[Question]:
        """Every question. Full scan; meant for the repair job."""

    @abstractmethod
    def update_question_fields(
        self,
        question_id: uuid.UUID,
        *,
        question_name: str,
        url: str,
        level: str,
        data_structure: str | None,
    ) -> Question | None:
        """Overwrite the descriptive fields. `topicId` is never touched."""

    @abstractmethod
    def delete_question(self, question_id: uuid.UUID) -> bool:
        """Delete a question. False if it did not exist."""
