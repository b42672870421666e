"""
Shared fixtures for the API and service tests.

The environment is configured before ``forum`` is imported: a throwaway
SQLite file database, rate limiting off, and a fixed signing key. Tables are
recreated for every test and the Celery notifier is swapped for a recorder.
"""

import os
import tempfile
from dataclasses import dataclass

_TMP_DIR = tempfile.mkdtemp(prefix="forum-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/forum.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from forum.core.database import Base, SessionLocal, engine, init_db
from forum.core.deps import get_notifier
from forum.core.exceptions import NotificationError
from forum.main import app

DEFAULT_PASSWORD = "password123"


class RecordingNotifier:
    """Stands in for CeleryNotifier; records what would have been queued."""

    def __init__(self):
        self.password_resets: list[tuple[str, str]] = []
        self.new_answers: list[dict] = []
        self.fail = False

    def send_password_reset(self, email: str, token: str) -> None:
        if self.fail:
            raise NotificationError("broker unavailable")
        self.password_resets.append((email, token))

    def send_new_answer(self, email: str, question_title: str, questionid: str, answer_text: str) -> None:
        if self.fail:
            raise NotificationError("broker unavailable")
        self.new_answers.append(
            {"email": email, "title": question_title, "questionid": questionid, "answer": answer_text}
        )


@dataclass
class UserHandle:
    id: int
    username: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def client(notifier):
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(client):
    counter = {"n": 0}

    def _make(username: str | None = None, email: str | None = None, password: str = DEFAULT_PASSWORD) -> UserHandle:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        email = email or f"{username}@example.com"
        resp = client.post(
            "/api/v1/users/register",
            json={
                "username": username,
                "firstname": "Test",
                "lastname": "User",
                "email": email,
                "password": password,
            },
        )
        assert resp.status_code == 201, resp.text
        login = client.post("/api/v1/users/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return UserHandle(
            id=resp.json()["userid"],
            username=username,
            email=email,
            password=password,
            token=login.json()["token"],
        )

    return _make


@pytest.fixture
def post_question(client):
    def _post(user: UserHandle, title: str = "How do I X?", description: str = "Details about X", **extra) -> str:
        resp = client.post(
            "/api/v1/questions",
            json={"title": title, "description": description, **extra},
            headers=user.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["questionid"]

    return _post


@pytest.fixture
def post_answer(client):
    def _post(user: UserHandle, questionid: str, body: str = "Try Y.") -> int:
        resp = client.post(
            "/api/v1/answers",
            json={"questionid": questionid, "answer": body},
            headers=user.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["answerid"]

    return _post
