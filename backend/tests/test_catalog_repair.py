from __future__ import annotations

import uuid

import pytest

from app.modules.catalog.errors import NotFoundError
from app.modules.catalog.models import Question, Topic
from app.modules.catalog.schemas import QuestionDTO, TopicDTO
from app.workers.consistency_repair_worker import run_once


def _q(topic_id: uuid.UUID, name: str = "Orphaned") -> Question:
    return Question(id=uuid.uuid4(), topic_id=topic_id, question_name=name, url=f"u/{name}", level="Easy")


def _seed(manager, n: int = 2):
    topic = manager.create_topic(TopicDTO(dataStructure="Trees"))
    ids = [
        manager.add_question_to_topic(topic.id, QuestionDTO(questionName=f"Q{i}", url=f"u/{i}", level="Easy")).id
        for i in range(n)
    ]
    return topic, ids


def test_consistent_topic_audits_clean(manager, auditor):
    topic, _ = _seed(manager)

    audit = auditor.audit_topic(topic.id)

    assert audit.consistent
    assert audit.to_dto().model_dump() == {
        "topicId": topic.id,
        "consistent": True,
        "danglingIds": [],
        "unlistedIds": [],
        "duplicateIds": [],
    }


def test_audit_unknown_topic(auditor):
    with pytest.raises(NotFoundError):
        auditor.audit_topic(str(uuid.uuid4()))


def test_repair_drops_dangling_ids(manager, store, auditor, lookup):
    topic, ids = _seed(manager)
    tid = uuid.UUID(topic.id)
    ghost = uuid.uuid4()
    store.append_question_id(tid, ghost)

    audit = auditor.repair_topic(topic.id)

    assert audit.dangling_ids == [ghost]
    assert lookup.get_topic_by_id(topic.id).questionIds == ids
    assert auditor.audit_topic(topic.id).consistent


def test_repair_lists_unlisted_questions(manager, store, auditor, lookup):
    topic, ids = _seed(manager, n=1)
    tid = uuid.UUID(topic.id)
    stray = store.insert_question(_q(tid, "Stray"))

    audit = auditor.repair_topic(topic.id)

    assert audit.unlisted_ids == [stray.id]
    assert lookup.get_topic_by_id(topic.id).questionIds == ids + [str(stray.id)]


def test_repair_collapses_duplicates(manager, store, auditor, lookup):
    topic, ids = _seed(manager)
    tid = uuid.UUID(topic.id)
    # Simulate a double append that slipped past the store's guard.
    store._topics[tid].question_ids.append(uuid.UUID(ids[0]))

    audit = auditor.repair_topic(topic.id)

    assert audit.duplicate_ids == [uuid.UUID(ids[0])]
    assert sorted(lookup.get_topic_by_id(topic.id).questionIds) == sorted(ids)


def test_id_listed_by_wrong_topic_is_dangling(manager, store, auditor):
    t1, ids = _seed(manager, n=1)
    t2 = manager.create_topic(TopicDTO(dataStructure="Graphs"))
    store.append_question_id(uuid.UUID(t2.id), uuid.UUID(ids[0]))

    audit = auditor.audit_topic(t2.id)

    assert audit.dangling_ids == [uuid.UUID(ids[0])]
    assert auditor.audit_topic(t1.id).consistent


def test_orphans_are_found_and_deleted(manager, store, auditor):
    _seed(manager, n=1)
    orphan = store.insert_question(_q(uuid.uuid4()))

    assert [q.id for q in auditor.find_orphan_questions()] == [orphan.id]
    assert [q.id for q in auditor.repair_orphans()] == [orphan.id]
    assert store.get_question(orphan.id) is None
    assert auditor.find_orphan_questions() == []


def test_repair_all_topics_only_reports_broken_ones(manager, store, auditor):
    ok, _ = _seed(manager)
    broken, _ = _seed(manager)
    store.append_question_id(uuid.UUID(broken.id), uuid.uuid4())

    repaired = auditor.repair_all_topics()

    assert [str(a.topic_id) for a in repaired] == [broken.id]
    assert auditor.audit_topic(ok.id).consistent
    assert auditor.audit_topic(broken.id).consistent


def test_worker_run_once_summary(manager, store):
    topic, _ = _seed(manager)
    store.append_question_id(uuid.UUID(topic.id), uuid.uuid4())
    store.insert_question(_q(uuid.uuid4()))
    store.insert_topic(Topic(id=uuid.uuid4(), data_structure="Heaps"))

    out = run_once(store=store)

    assert out == {
        "ok": True,
        "orphanQuestions": 1,
        "orphansDeleted": True,
        "repairedTopics": 1,
        "danglingIds": 1,
        "unlistedIds": 0,
        "duplicateIds": 0,
    }
    assert run_once(store=store)["repairedTopics"] == 0


def test_worker_can_leave_orphans_in_place(store):
    orphan = store.insert_question(_q(uuid.uuid4()))

    out = run_once(store=store, delete_orphans=False)

    assert out["orphanQuestions"] == 1
    assert out["orphansDeleted"] is False
    assert store.get_question(orphan.id) is not None


def test_repair_skips_unlisted_question_deleted_before_append(manager, store, auditor, lookup):
    topic, ids = _seed(manager, n=1)
    stray = store.insert_question(_q(uuid.UUID(topic.id), "Compensating"))
    original_get = store.get_question

    def get_then_compensate(question_id):
        out = original_get(question_id)
        if out is not None and question_id == stray.id:
            # An add saga rolls the question back right after the audit read it.
            store.delete_question(question_id)
        return out

    store.get_question = get_then_compensate

    audit = auditor.repair_topic(topic.id)

    assert audit.unlisted_ids == [stray.id]
    assert lookup.get_topic_by_id(topic.id).questionIds == ids
