"""
Detect and repair divergence between `Topic.questionIds` and `Question.topicId`.

Divergence only appears when a saga in `consistency.py` could not compensate
(process crash, store outage during the compensating write). Repairs reuse the
store's atomic append/remove, so they are safe to run next to live traffic:
appends are idempotent, and every candidate is re-read with a consistent get
before it is acted upon. A question deleted by a compensating add between that
re-read and the append leaves a dangling id, which the next pass removes.
"""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass, field

from ...observability.logging import get_logger
from .errors import NotFoundError
from .models import Question, Topic
from .projection import format_id, parse_id
from .schemas import TopicAuditDTO
from .store import EntityStore

log = get_logger("catalog_repair")


@dataclass(slots=True)
class TopicAudit:
    topic_id: uuid.UUID
    # Listed by the topic, but no question with that id is owned by it.
    dangling_ids: list[uuid.UUID] = field(default_factory=list)
    # Owned by the topic (question.topicId), but not listed.
    unlisted_ids: list[uuid.UUID] = field(default_factory=list)
    # Listed more than once.
    duplicate_ids: list[uuid.UUID] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not (self.dangling_ids or self.unlisted_ids or self.duplicate_ids)

    def to_dto(self) -> TopicAuditDTO:
        return TopicAuditDTO(
            topicId=format_id(self.topic_id),
            consistent=self.consistent,
            danglingIds=[format_id(q) for q in self.dangling_ids],
            unlistedIds=[format_id(q) for q in self.unlisted_ids],
            duplicateIds=[format_id(q) for q in self.duplicate_ids],
        )


class ConsistencyAuditor:
    def __init__(self, store: EntityStore):
        self._store = store

    def _owned_by(self, question_id: uuid.UUID, topic_id: uuid.UUID) -> Question | None:
        question = self._store.get_question(question_id)
        if question and question.topic_id == topic_id:
            return question
        return None

    def _audit(self, topic: Topic) -> TopicAudit:
        audit = TopicAudit(topic_id=topic.id)
        listed = Counter(topic.question_ids)
        owned = {q.id: q for q in self._store.list_questions_by_topic(topic.id)}

        for qid, count in listed.items():
            if count > 1:
                audit.duplicate_ids.append(qid)
            if qid not in owned and not self._owned_by(qid, topic.id):
                audit.dangling_ids.append(qid)

        unlisted = [q for q in owned.values() if q.id not in listed]
        unlisted.sort(key=lambda q: (q.created_at, str(q.id)))
        for q in unlisted:
            # The question listing can lag behind deletes.
            if self._owned_by(q.id, topic.id):
                audit.unlisted_ids.append(q.id)

        return audit

    def _load_topic(self, topic_id: str) -> Topic:
        tid = parse_id(topic_id, entity="Topic")
        topic = self._store.get_topic(tid)
        if not topic:
            raise NotFoundError(message=f"Topic not found with ID: {tid}", entity="Topic", entity_id=str(tid))
        return topic

    def audit_topic(self, topic_id: str) -> TopicAudit:
        return self._audit(self._load_topic(topic_id))

    def repair_topic(self, topic_id: str) -> TopicAudit:
        """Fix what `audit_topic` reports and return the pre-repair findings."""
        topic = self._load_topic(topic_id)
        return self._repair(topic)

    def _repair(self, topic: Topic) -> TopicAudit:
        audit = self._audit(topic)
        if audit.consistent:
            return audit

        listed = Counter(topic.question_ids)
        for qid in audit.dangling_ids:
            for _ in range(listed[qid]):
                self._store.remove_question_id(topic.id, qid)
        for qid in audit.duplicate_ids:
            if qid in audit.dangling_ids:
                continue
            for _ in range(listed[qid] - 1):
                self._store.remove_question_id(topic.id, qid)
        for qid in audit.unlisted_ids:
            # An add saga may be compensating this question right now.
            if self._owned_by(qid, topic.id):
                self._store.append_question_id(topic.id, qid)

        log.warning(
            "topic_repaired",
            topic_id=str(topic.id),
            dangling=[str(q) for q in audit.dangling_ids],
            unlisted=[str(q) for q in audit.unlisted_ids],
            duplicates=[str(q) for q in audit.duplicate_ids],
        )
        return audit

    def repair_all_topics(self) -> list[TopicAudit]:
        """Repair every topic; returns audits of the ones that needed it."""
        repaired: list[TopicAudit] = []
        for topic in self._store.list_topics():
            audit = self._repair(topic)
            if not audit.consistent:
                repaired.append(audit)
        return repaired

    def find_orphan_questions(self) -> list[Question]:
        """Questions whose owning topic no longer exists."""
        exists: dict[uuid.UUID, bool] = {}
        orphans: list[Question] = []
        for q in self._store.list_questions():
            if q.topic_id not in exists:
                exists[q.topic_id] = self._store.get_topic(q.topic_id) is not None
            if not exists[q.topic_id]:
                orphans.append(q)
        return orphans

    def repair_orphans(self) -> list[Question]:
        """Delete orphan questions, matching the cascade policy of topic deletes."""
        deleted: list[Question] = []
        for q in self.find_orphan_questions():
            if self._store.delete_question(q.id):
                deleted.append(q)
                log.warning("orphan_question_deleted", topic_id=str(q.topic_id), question_id=str(q.id))
        return deleted
