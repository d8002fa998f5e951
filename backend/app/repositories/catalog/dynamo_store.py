from __future__ import annotations

import uuid
from typing import Any

from boto3.dynamodb.conditions import Attr, Key

from ...db.dynamodb.errors import DdbConflict
from ...db.dynamodb.table import DynamoTable, get_main_table
from ...modules.catalog.models import Question, Topic, now_iso
from ...modules.catalog.store import EntityStore
from ...observability.logging import get_logger

log = get_logger("catalog_store")

# Attempts for the optimistic index-based removal from questionIds.
_MAX_REMOVE_ATTEMPTS = 5


def topic_key(topic_id: uuid.UUID) -> dict[str, str]:
    return {"pk": f"TOPIC#{topic_id}", "sk": "PROFILE"}


def question_key(question_id: uuid.UUID) -> dict[str, str]:
    return {"pk": f"QUESTION#{question_id}", "sk": "PROFILE"}


def topic_questions_gsi1pk(topic_id: uuid.UUID) -> str:
    return f"TOPIC#{topic_id}#QUESTIONS"


def topic_to_item(topic: Topic) -> dict[str, Any]:
    return {
        **topic_key(topic.id),
        "entityType": "Topic",
        "topicId": str(topic.id),
        "dataStructure": topic.data_structure,
        "questionIds": [str(q) for q in topic.question_ids],
        "createdAt": topic.created_at,
        "updatedAt": topic.updated_at,
        # GSI1: every topic, creation order
        "gsi1pk": "TOPIC",
        "gsi1sk": f"{topic.created_at}#{topic.id}",
    }


def topic_from_item(item: dict[str, Any] | None) -> Topic | None:
    if not item:
        return None
    return Topic(
        id=uuid.UUID(str(item["topicId"])),
        data_structure=str(item.get("dataStructure") or ""),
        question_ids=[uuid.UUID(str(q)) for q in (item.get("questionIds") or [])],
        created_at=str(item.get("createdAt") or ""),
        updated_at=str(item.get("updatedAt") or ""),
    )


def question_to_item(question: Question) -> dict[str, Any]:
    item: dict[str, Any] = {
        **question_key(question.id),
        "entityType": "Question",
        "questionId": str(question.id),
        "topicId": str(question.topic_id),
        "questionName": question.question_name,
        "url": question.url,
        "level": question.level,
        "dataStructure": question.data_structure,
        "createdAt": question.created_at,
        "updatedAt": question.updated_at,
        # GSI1: questions of one topic, creation order
        "gsi1pk": topic_questions_gsi1pk(question.topic_id),
        "gsi1sk": f"{question.created_at}#{question.id}",
    }
    return {k: v for k, v in item.items() if v is not None}


def question_from_item(item: dict[str, Any] | None) -> Question | None:
    if not item:
        return None
    ds = item.get("dataStructure")
    return Question(
        id=uuid.UUID(str(item["questionId"])),
        topic_id=uuid.UUID(str(item["topicId"])),
        question_name=str(item.get("questionName") or ""),
        url=str(item.get("url") or ""),
        level=str(item.get("level") or ""),
        data_structure=str(ds) if ds is not None else None,
        created_at=str(item.get("createdAt") or ""),
        updated_at=str(item.get("updatedAt") or ""),
    )


class DynamoEntityStore(EntityStore):
    """
    Single-table DynamoDB adapter.

    Both sides of the topic/question relationship are separate items, so
    nothing here spans two items; pairing the writes is ConsistencyManager's
    job. Lists read through GSI1 are eventually consistent.
    """

    def __init__(self, table: DynamoTable | None = None):
        self._table = table or get_main_table()

    # --- topics ---

    def insert_topic(self, topic: Topic) -> Topic:
        self._table.put_item(item=topic_to_item(topic), condition_expression="attribute_not_exists(pk)")
        return topic

    def get_topic(self, topic_id: uuid.UUID) -> Topic | None:
        return topic_from_item(self._table.get_item(key=topic_key(topic_id)))

    def list_topics(self) -> list[Topic]:
        items = self._table.query_all(
            index_name="GSI1",
            key_condition_expression=Key("gsi1pk").eq("TOPIC"),
            scan_index_forward=True,
        )
        return [t for t in (topic_from_item(it) for it in items) if t]

    def update_topic_data_structure(self, topic_id: uuid.UUID, data_structure: str) -> Topic | None:
        try:
            updated = self._table.update_item(
                key=topic_key(topic_id),
                update_expression="SET dataStructure = :d, updatedAt = :u",
                expression_attribute_names=None,
                expression_attribute_values={":d": data_structure, ":u": now_iso()},
                condition_expression="attribute_exists(pk)",
                return_values="ALL_NEW",
            )
        except DdbConflict:
            return None
        return topic_from_item(updated)

    def delete_topic_if_empty(self, topic_id: uuid.UUID) -> bool:
        try:
            self._table.delete_item(
                key=topic_key(topic_id),
                condition_expression=(
                    "attribute_exists(pk) AND "
                    "(attribute_not_exists(questionIds) OR size(questionIds) = :zero)"
                ),
                expression_attribute_values={":zero": 0},
            )
        except DdbConflict:
            return False
        return True

    def append_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        qid = str(question_id)
        try:
            # list_append is evaluated server-side, so concurrent appends to the
            # same topic never overwrite each other.
            updated = self._table.update_item(
                key=topic_key(topic_id),
                update_expression=(
                    "SET questionIds = list_append(if_not_exists(questionIds, :empty), :qids), "
                    "updatedAt = :u"
                ),
                expression_attribute_names=None,
                expression_attribute_values={":empty": [], ":qids": [qid], ":qid": qid, ":u": now_iso()},
                condition_expression="attribute_exists(pk) AND NOT contains(questionIds, :qid)",
                return_values="ALL_NEW",
            )
        except DdbConflict:
            # Either the topic is gone or the id is already listed.
            return self.get_topic(topic_id)
        return topic_from_item(updated)

    def remove_question_id(self, topic_id: uuid.UUID, question_id: uuid.UUID) -> Topic | None:
        qid = str(question_id)
        for attempt in range(1, _MAX_REMOVE_ATTEMPTS + 1):
            item = self._table.get_item(key=topic_key(topic_id))
            if not item:
                return None
            ids = [str(x) for x in (item.get("questionIds") or [])]
            if qid not in ids:
                return topic_from_item(item)
            idx = ids.index(qid)
            try:
                # DynamoDB can only REMOVE list elements by index; the condition
                # pins the index to the id we read.
                updated = self._table.update_item(
                    key=topic_key(topic_id),
                    update_expression=f"REMOVE questionIds[{idx}] SET updatedAt = :u",
                    expression_attribute_names=None,
                    expression_attribute_values={":qid": qid, ":u": now_iso()},
                    condition_expression=f"questionIds[{idx}] = :qid",
                    return_values="ALL_NEW",
                )
            except DdbConflict:
                log.info("question_id_remove_contended", topic_id=str(topic_id), question_id=qid, attempt=attempt)
                continue
            return topic_from_item(updated)

        raise DdbConflict(
            message="Topic questionIds changed concurrently; removal not applied",
            operation="UpdateItem",
            table_name=self._table.table_name,
            key=topic_key(topic_id),
            retryable=True,
        )

    # --- questions ---

    def insert_question(self, question: Question) -> Question:
        self._table.put_item(item=question_to_item(question), condition_expression="attribute_not_exists(pk)")
        return question

    def put_question(self, question: Question) -> Question:
        self._table.put_item(item=question_to_item(question))
        return question

    def get_question(self, question_id: uuid.UUID) -> Question | None:
        return question_from_item(self._table.get_item(key=question_key(question_id)))

    def list_questions_by_topic(self, topic_id: uuid.UUID) -> list[Question]:
        items = self._table.query_all(
            index_name="GSI1",
            key_condition_expression=Key("gsi1pk").eq(topic_questions_gsi1pk(topic_id)),
            scan_index_forward=True,
        )
        return [q for q in (question_from_item(it) for it in items) if q]

    def list_questions(self) -> list[Question]:
        items = self._table.scan_all(filter_expression=Attr("entityType").eq("Question"))
        return [q for q in (question_from_item(it) for it in items) if q]

    def update_question_fields(
        self,
        question_id: uuid.UUID,
        *,
        question_name: str,
        url: str,
        level: str,
        data_structure: str | None,
    ) -> Question | None:
        names = {"#n": "questionName", "#url": "url", "#lvl": "level", "#ds": "dataStructure"}
        values: dict[str, Any] = {":n": question_name, ":url": url, ":lvl": level, ":u": now_iso()}
        set_parts = ["#n = :n", "#url = :url", "#lvl = :lvl", "updatedAt = :u"]
        expr = ""
        if data_structure is None:
            expr = " REMOVE #ds"
        else:
            set_parts.append("#ds = :ds")
            values[":ds"] = data_structure
        expr = "SET " + ", ".join(set_parts) + expr
        try:
            updated = self._table.update_item(
                key=question_key(question_id),
                update_expression=expr,
                expression_attribute_names=names,
                expression_attribute_values=values,
                condition_expression="attribute_exists(pk)",
                return_values="ALL_NEW",
            )
        except DdbConflict:
            return None
        return question_from_item(updated)

    def delete_question(self, question_id: uuid.UUID) -> bool:
        try:
            self._table.delete_item(key=question_key(question_id), condition_expression="attribute_exists(pk)")
        except DdbConflict:
            return False
        return True
