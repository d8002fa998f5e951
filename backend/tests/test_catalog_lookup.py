from __future__ import annotations

import uuid

import pytest

from app.modules.catalog.errors import NotFoundError
from app.modules.catalog.models import Question, Topic
from app.modules.catalog.schemas import QuestionDTO, TopicDTO


def test_get_all_topics_projects_ids_to_strings(store, lookup):
    qid = uuid.uuid4()
    topic = Topic(id=uuid.uuid4(), data_structure="Stacks", question_ids=[qid])
    store.insert_topic(topic)
    store.insert_question(Question(id=qid, topic_id=topic.id, question_name="Valid Parens", url="u", level="Easy"))

    out = lookup.get_all_topics()

    assert [t.id for t in out] == [str(topic.id)]
    assert out[0].questionIds == [str(qid)]
    assert all(isinstance(x, str) for x in out[0].questionIds)


def test_get_all_topics_keeps_creation_order(manager, lookup):
    names = ["Arrays", "Linked Lists", "Heaps"]
    created = [manager.create_topic(TopicDTO(dataStructure=n)).id for n in names]

    assert [t.id for t in lookup.get_all_topics()] == created


def test_get_all_topics_empty(lookup):
    assert lookup.get_all_topics() == []


def test_get_topic_by_id_not_found(lookup):
    with pytest.raises(NotFoundError) as ei:
        lookup.get_topic_by_id(str(uuid.uuid4()))
    assert ei.value.entity == "Topic"


def test_get_topic_by_malformed_id_is_not_found(lookup):
    with pytest.raises(NotFoundError):
        lookup.get_topic_by_id("5f2b-not-a-uuid")


def test_get_questions_by_unknown_topic_is_empty(lookup):
    assert lookup.get_questions_by_topic(str(uuid.uuid4())) == []


def test_get_questions_by_topic_only_returns_owned(manager, lookup):
    t1 = manager.create_topic(TopicDTO(dataStructure="Trees"))
    t2 = manager.create_topic(TopicDTO(dataStructure="Graphs"))
    a = manager.add_question_to_topic(t1.id, QuestionDTO(questionName="A", url="u/a", level="Easy"))
    manager.add_question_to_topic(t2.id, QuestionDTO(questionName="B", url="u/b", level="Hard"))

    out = lookup.get_questions_by_topic(t1.id)

    assert [q.id for q in out] == [a.id]
    assert out[0].topicId == t1.id


def test_get_question_by_id(manager, lookup):
    topic = manager.create_topic(TopicDTO(dataStructure="Trees"))
    q = manager.add_question_to_topic(topic.id, QuestionDTO(questionName="A", url="u/a", level="Easy"))

    assert lookup.get_question_by_id(q.id) == q
    with pytest.raises(NotFoundError):
        lookup.get_question_by_id(str(uuid.uuid4()))
