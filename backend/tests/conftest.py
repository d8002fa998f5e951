from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure `backend/` is on sys.path so `import app.*` works in tests.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

# Never reach for a real table from the test suite.
os.environ.setdefault("CATALOG_STORE", "memory")

from app.modules.catalog.consistency import ConsistencyManager  # noqa: E402
from app.modules.catalog.lookup import CatalogLookup  # noqa: E402
from app.modules.catalog.repair import ConsistencyAuditor  # noqa: E402
from app.modules.catalog.validation import CatalogValidator  # noqa: E402
from app.repositories.catalog.memory_store import InMemoryEntityStore  # noqa: E402


class FlakyStore(InMemoryEntityStore):
    """In-memory store whose individual writes can be told to blow up."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _maybe_fail(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise RuntimeError(f"injected failure: {op}")

    def insert_topic(self, topic):
        self._maybe_fail("insert_topic")
        return super().insert_topic(topic)

    def append_question_id(self, topic_id, question_id):
        self._maybe_fail("append_question_id")
        return super().append_question_id(topic_id, question_id)

    def remove_question_id(self, topic_id, question_id):
        self._maybe_fail("remove_question_id")
        return super().remove_question_id(topic_id, question_id)

    def insert_question(self, question):
        self._maybe_fail("insert_question")
        return super().insert_question(question)

    def put_question(self, question):
        self._maybe_fail("put_question")
        return super().put_question(question)

    def delete_question(self, question_id):
        self._maybe_fail("delete_question")
        return super().delete_question(question_id)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def manager(store) -> ConsistencyManager:
    return ConsistencyManager(store, CatalogValidator())


@pytest.fixture
def lookup(store) -> CatalogLookup:
    return CatalogLookup(store)


@pytest.fixture
def auditor(store) -> ConsistencyAuditor:
    return ConsistencyAuditor(store)


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient

    from app.deps import get_entity_store
    from app.main import create_app

    app = create_app()
    app.dependency_overrides[get_entity_store] = lambda: store
    # Unhandled errors must come back as problem+json, not re-raise in the test.
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
