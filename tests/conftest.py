"""Shared pytest fixtures for the test suite.

Import any of these in a test file by simply declaring the fixture name as a
parameter; pytest discovers them automatically from this conftest.py.

Fixture overview
----------------
db            in-memory Firestore double installed as ``greedoc.core.firebase.db``
pushes        list of FCM pushes captured instead of calling Firebase
client        FastAPI TestClient (500s are returned, not raised)
make_user     factory creating a stored account with password "secret123"
doctor        a doctor account
other_doctor  a second, unrelated doctor
patient       a patient belonging to ``doctor``
admin         an admin account
auth          builds an Authorization header for a user
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import NotFound

from greedoc.core import firebase
from greedoc.core.config import settings
from greedoc.core.security import create_access_token
from greedoc.main import app
from greedoc.services import push, user_service

PASSWORD = "secret123"


# ── Firestore double ─────────────────────────────────────────────────────────


def _deep_merge(target: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class FakeSnapshot:
    def __init__(self, reference, data):
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, store: dict, collection: str, doc_id: str):
        self._store = store
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self) -> dict:
        return self._store.setdefault(self._collection, {})

    def get(self):
        return FakeSnapshot(self, self._docs.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._docs:
            _deep_merge(self._docs[self.id], data)
        else:
            self._docs[self.id] = copy.deepcopy(data)

    def update(self, data):
        if self.id not in self._docs:
            raise NotFound(f"No document to update: {self._collection}/{self.id}")
        doc = self._docs[self.id]
        for key, value in data.items():
            # Dotted keys address nested fields, as in Firestore
            *parents, leaf = key.split(".")
            node = doc
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = copy.deepcopy(value)

    def delete(self):
        self._docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, store: dict, collection: str, filters=(), limit=None):
        self._store = store
        self._collection = collection
        self._filters = tuple(filters)
        self._limit = limit

    def where(self, filter):
        # Only equality clauses are issued
        assert filter.op_string == "==", filter.op_string
        clause = (filter.field_path, filter.value)
        return FakeQuery(self._store, self._collection, self._filters + (clause,), self._limit)

    def limit(self, count):
        return FakeQuery(self._store, self._collection, self._filters, count)

    def stream(self):
        docs = self._store.get(self._collection, {})
        matches = [
            (doc_id, data) for doc_id, data in list(docs.items())
            if all(data.get(field) == value for field, value in self._filters)
        ]
        if self._limit is not None:
            matches = matches[: self._limit]
        for doc_id, data in matches:
            yield FakeSnapshot(FakeDocument(self._store, self._collection, doc_id), data)


class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        return FakeDocument(self._store, self._collection, doc_id or uuid.uuid4().hex[:20])

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return datetime.now(timezone.utc), ref


class FakeFirestore:
    def __init__(self):
        self.store: dict = {}

    def collection(self, name):
        return FakeCollection(self.store, name)

    def docs(self, name) -> dict:
        """Raw stored documents of a collection, for assertions."""
        return self.store.get(name, {})


# ── App wiring ───────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No real AI providers, reminders or production error masking in tests."""
    monkeypatch.setattr(settings, "ENVIRONMENT", "test")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    monkeypatch.setattr(settings, "GLM_API_KEY", "")
    monkeypatch.setattr(settings, "AI_DEBUG_MODE", False)
    monkeypatch.setattr(settings, "NOTIFICATION_AGENT_ENABLED", False)
    monkeypatch.setattr(settings, "CLINIC_TIMEZONE", "UTC")


@pytest.fixture
def db(monkeypatch) -> FakeFirestore:
    fake = FakeFirestore()
    monkeypatch.setattr(firebase, "db", fake)
    return fake


@pytest.fixture
def pushes(monkeypatch) -> list:
    sent = []

    def _to_token(token, title, body, data=None):
        if not token:
            return None
        sent.append({"token": token, "title": title, "body": body, "data": data})
        return "msg-id"

    def _to_topic(topic, title, body, data=None):
        sent.append({"topic": topic, "title": title, "body": body, "data": data})
        return "msg-id"

    monkeypatch.setattr(push, "send_to_token", _to_token)
    monkeypatch.setattr(push, "send_to_topic", _to_topic)
    return sent


@pytest.fixture
def client(db, pushes):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ── Accounts ─────────────────────────────────────────────────────────────────


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="doctor", **fields):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "firstName": fields.pop("firstName", f"{role.title()}{n}"),
            "lastName": fields.pop("lastName", "Tester"),
            "email": fields.pop("email", f"{role}{n}@greedoc-mail.com"),
            "phoneNumber": "03001234567",
            "dateOfBirth": "1985-06-15",
            "gender": "female",
            "role": role,
            **fields,
        }
        return user_service.create_user(data, PASSWORD)

    return _make


@pytest.fixture
def doctor(make_user):
    return make_user("doctor", firstName="Ayesha", lastName="Khan", specialization="Cardiology")


@pytest.fixture
def other_doctor(make_user):
    return make_user("doctor", firstName="Bilal", lastName="Ahmed")


@pytest.fixture
def patient(make_user, doctor):
    return make_user(
        "patient",
        firstName="Sara",
        lastName="Malik",
        doctorId=doctor["id"],
        cnic="35202-1234567-1",
    )


@pytest.fixture
def admin(make_user):
    return make_user("admin", firstName="Root", lastName="Admin")


@pytest.fixture
def auth():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user['id'])}"}

    return _headers
