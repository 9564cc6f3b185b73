from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from fake_firestore import FakeFirestore
from love2love_api.core.config import settings
from love2love_api.core.dependencies import (
    get_current_user_id,
    get_db,
    verify_scheduler_token,
)
from love2love_api.main import app


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def march_first():
    return datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def catalog_sizes(monkeypatch):
    monkeypatch.setattr(settings, "QUESTION_CATALOG_SIZE", 51)
    monkeypatch.setattr(settings, "CHALLENGE_CATALOG_SIZE", 53)
    monkeypatch.setattr(settings, "DEFAULT_TIMEZONE", "Europe/Paris")
    monkeypatch.setattr(settings, "LOCAL_TRIGGER_HOUR", 0)


@pytest.fixture
def sent_messages(monkeypatch):
    """Captures FCM messages instead of sending them."""
    sent = []

    def fake_send(message, dry_run=False, app=None):
        sent.append(message)
        return f"projects/test/messages/{len(sent)}"

    monkeypatch.setattr("firebase_admin.messaging.send", fake_send)
    return sent


@pytest.fixture
def current_user():
    return {"uid": "alice"}


@pytest.fixture
def client(db, current_user):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: current_user["uid"]
    app.dependency_overrides[verify_scheduler_token] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    db.seed({"name": "Alice", "fcmToken": "token-alice", "languageCode": "en"}, "users", "alice")
    db.seed({"name": "Bob", "fcmToken": "token-bob", "languageCode": "fr"}, "users", "bob")
    return db
