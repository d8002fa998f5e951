from __future__ import annotations

import uuid


def _create_topic(client, name: str = "Trees") -> dict:
    r = client.post("/api/topics", json={"dataStructure": name})
    assert r.status_code == 201
    return r.json()


def _add_question(client, topic_id: str, name: str = "Invert Tree") -> dict:
    r = client.post(
        f"/api/topics/{topic_id}/questions",
        json={"questionName": name, "url": f"https://x/{name}", "level": "Easy"},
    )
    assert r.status_code == 201
    return r.json()


def test_create_and_list_topics(client):
    t1 = _create_topic(client, "Trees")
    t2 = _create_topic(client, "Graphs")

    assert t1["questionIds"] == []
    r = client.get("/api/topics")
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [t1["id"], t2["id"]]


def test_create_topic_without_data_structure_is_400_problem(client, store):
    r = client.post("/api/topics", json={"dataStructure": "  "})

    assert r.status_code == 400
    assert r.headers.get("content-type", "").startswith("application/problem+json")
    body = r.json()
    assert body["title"] == "Validation Failed"
    assert body["detail"] == "DataStructure cannot be null or empty"
    assert body["errors"][0]["path"] == "dataStructure"
    assert store.list_topics() == []


def test_unknown_and_malformed_topic_ids_are_404(client):
    for tid in (str(uuid.uuid4()), "not-a-uuid"):
        r = client.get(f"/api/topics/{tid}")
        assert r.status_code == 404
        body = r.json()
        assert body["extensions"]["entity"] == "Topic"
        assert body["detail"].startswith("Topic not found with ID")


def test_update_topic(client):
    topic = _create_topic(client)
    q = _add_question(client, topic["id"])

    r = client.put(f"/api/topics/{topic['id']}", json={"dataStructure": "Trees & Graphs"})

    assert r.status_code == 200
    assert r.json()["dataStructure"] == "Trees & Graphs"
    assert r.json()["questionIds"] == [q["id"]]


def test_question_lifecycle(client):
    topic = _create_topic(client)
    q = _add_question(client, topic["id"])
    assert q["topicId"] == topic["id"]

    assert client.get(f"/api/topics/{topic['id']}").json()["questionIds"] == [q["id"]]
    assert client.get(f"/api/topics/{topic['id']}/questions").json() == [q]
    assert client.get(f"/api/questions/{q['id']}").json() == q

    r = client.put(
        f"/api/questions/{q['id']}",
        json={"questionName": "Mirror Tree", "url": "https://x/m", "level": "Medium", "dataStructure": "Tree"},
    )
    assert r.status_code == 200
    assert r.json()["questionName"] == "Mirror Tree"
    assert r.json()["topicId"] == topic["id"]

    r = client.delete(f"/api/topics/{topic['id']}/questions/{q['id']}")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert client.get(f"/api/topics/{topic['id']}").json()["questionIds"] == []
    assert client.get(f"/api/questions/{q['id']}").status_code == 404


def test_add_question_missing_level_is_400(client):
    topic = _create_topic(client)

    r = client.post(f"/api/topics/{topic['id']}/questions", json={"questionName": "A", "url": "u"})

    assert r.status_code == 400
    assert r.json()["detail"] == "Question level cannot be null or empty"


def test_add_question_to_unknown_topic_is_404(client, store):
    r = client.post(
        f"/api/topics/{uuid.uuid4()}/questions",
        json={"questionName": "A", "url": "u", "level": "Easy"},
    )

    assert r.status_code == 404
    assert store.list_questions() == []


def test_questions_of_unknown_topic_is_empty_list(client):
    r = client.get(f"/api/topics/{uuid.uuid4()}/questions")

    assert r.status_code == 200
    assert r.json() == []


def test_delete_question_through_wrong_topic_is_404(client):
    t1 = _create_topic(client, "Trees")
    t2 = _create_topic(client, "Graphs")
    q = _add_question(client, t1["id"])

    r = client.delete(f"/api/topics/{t2['id']}/questions/{q['id']}")

    assert r.status_code == 404
    assert client.get(f"/api/questions/{q['id']}").status_code == 200


def test_failed_saga_is_409_with_compensation_flag(client, store):
    topic = _create_topic(client)
    store.fail_on.add("append_question_id")

    r = client.post(
        f"/api/topics/{topic['id']}/questions",
        json={"questionName": "A", "url": "u", "level": "Easy"},
    )

    assert r.status_code == 409
    body = r.json()
    assert body["title"] == "Consistency Conflict"
    assert body["extensions"]["operation"] == "add_question_to_topic"
    assert body["extensions"]["compensated"] is True
    assert store.list_questions() == []


def test_delete_topic_cascades(client):
    topic = _create_topic(client)
    q = _add_question(client, topic["id"])

    r = client.delete(f"/api/topics/{topic['id']}")

    assert r.status_code == 200
    assert r.json()["deletedQuestions"] == 1
    assert client.get(f"/api/topics/{topic['id']}").status_code == 404
    assert client.get(f"/api/questions/{q['id']}").status_code == 404


def test_consistency_audit_and_repair(client, store):
    topic = _create_topic(client)
    _add_question(client, topic["id"])
    ghost = uuid.uuid4()
    store.append_question_id(uuid.UUID(topic["id"]), ghost)

    audit = client.get(f"/api/topics/{topic['id']}/consistency").json()
    assert audit["consistent"] is False
    assert audit["danglingIds"] == [str(ghost)]

    repaired = client.post(f"/api/topics/{topic['id']}/repair").json()
    assert repaired["danglingIds"] == [str(ghost)]
    assert client.get(f"/api/topics/{topic['id']}/consistency").json()["consistent"] is True
