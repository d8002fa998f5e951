from __future__ import annotations

import uuid

import pytest

from app.modules.catalog.errors import NotFoundError, ValidationError
from app.modules.catalog.models import Question, Topic
from app.modules.catalog.projection import parse_id, question_from_dto, question_to_dto, topic_to_dto
from app.modules.catalog.schemas import QuestionDTO, TopicDTO
from app.modules.catalog.validation import CatalogValidator


def test_validate_topic_accepts_label():
    CatalogValidator().validate_topic(TopicDTO(dataStructure="Arrays"))


def test_validate_topic_rejects_missing_payload():
    with pytest.raises(ValidationError):
        CatalogValidator().validate_topic(None)


def test_validate_question_reports_first_missing_field():
    with pytest.raises(ValidationError) as ei:
        CatalogValidator().validate_question(QuestionDTO(questionName="Two Sum", url=" ", level=None))

    assert ei.value.field == "url"
    assert ei.value.entity == "Question"


def test_validate_question_data_structure_is_optional():
    CatalogValidator().validate_question(QuestionDTO(questionName="Two Sum", url="u", level="Easy"))


def test_parse_id_accepts_canonical_and_uppercase():
    raw = uuid.uuid4()
    assert parse_id(str(raw), entity="Topic") == raw
    assert parse_id(str(raw).upper(), entity="Topic") == raw


@pytest.mark.parametrize("bad", [None, "", "abc", "64b7f0c2e1a4b3d2c1f0e9d8"])
def test_parse_id_rejects_malformed(bad):
    with pytest.raises(NotFoundError) as ei:
        parse_id(bad, entity="Question")
    assert ei.value.entity == "Question"


def test_topic_to_dto_stringifies_question_ids():
    ids = [uuid.uuid4(), uuid.uuid4()]
    topic = Topic(id=uuid.uuid4(), data_structure="Graphs", question_ids=ids)

    out = topic_to_dto(topic)

    assert out.id == str(topic.id)
    assert out.questionIds == [str(i) for i in ids]


def test_question_projection_carries_every_field():
    tid, qid = uuid.uuid4(), uuid.uuid4()
    dto = QuestionDTO(questionName="Clone Graph", url="https://x/clone", level="Medium", dataStructure="Graph")

    question = question_from_dto(dto, question_id=qid, topic_id=tid)
    out = question_to_dto(question)

    assert isinstance(question, Question)
    assert out.id == str(qid)
    assert out.topicId == str(tid)
    assert (out.questionName, out.url, out.level, out.dataStructure) == ("Clone Graph", "https://x/clone", "Medium", "Graph")
