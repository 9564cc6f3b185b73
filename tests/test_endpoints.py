"""
HTTP-level tests for the routers, with auth and Firestore overridden.
"""
from datetime import datetime, timezone

import pytest

from love2love_api.core.config import settings
from love2love_api.core.dependencies import get_current_user_id, verify_scheduler_token
from love2love_api.main import app


def _today():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to Love2Love API"}


def test_generate_question_then_reuse(client, db):
    first = client.post("/api/v1/daily-questions/generate", json={"coupleId": "alice_bob"})
    second = client.post("/api/v1/daily-questions/generate", json={"coupleId": "alice_bob"})

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["alreadyExists"] is False
    assert body["questionId"] == f"alice_bob_{_today()}"
    assert body["questionKey"] == "daily_question_1"
    assert body["question"]["questionDay"] == 1
    assert second.json()["alreadyExists"] is True
    assert db.data("dailyQuestions", f"alice_bob_{_today()}") is not None


def test_generate_for_foreign_couple_is_denied(client, db):
    response = client.post("/api/v1/daily-questions/generate", json={"coupleId": "carol_dan"})

    assert response.status_code == 403
    assert response.json()["error"]["status"] == "PERMISSION_DENIED"
    assert db.children("dailyQuestions") == {}


def test_generate_challenge_with_explicit_day(client):
    response = client.post(
        "/api/v1/daily-challenges/generate",
        json={"coupleId": "alice_bob", "challengeDay": 60},
    )

    body = response.json()
    assert body["challengeKey"] == "daily_challenge_7"
    assert body["challenge"]["isCompleted"] is False


def test_settings_round_trip(client, db):
    response = client.post(
        "/api/v1/daily-questions/settings",
        json={"coupleId": "alice_bob", "timezone": "America/New_York"},
    )
    settings_payload = response.json()["settings"]
    assert settings_payload["coupleId"] == "alice_bob"
    assert settings_payload["timezone"] == "America/New_York"
    assert settings_payload["currentDay"] == 1

    reset = client.post("/api/v1/daily-questions/settings/reset", json={"coupleId": "alice_bob"})
    assert reset.json()["settings"]["currentDay"] == 1

    challenge = client.post("/api/v1/daily-challenges/settings", json={"coupleId": "alice_bob"})
    assert challenge.json()["settings"]["timezone"] == "Europe/Paris"
    assert db.data("dailyChallengeSettings", "alice_bob") is not None


@pytest.mark.usefixtures("users")
def test_submit_and_read_responses(client, db, current_user, sent_messages):
    question_id = client.post(
        "/api/v1/daily-questions/generate", json={"coupleId": "alice_bob"}
    ).json()["questionId"]

    submitted = client.post(
        "/api/v1/daily-questions/responses",
        json={"questionId": question_id, "responseText": "Pizza night", "userName": "Alice"},
    )
    assert submitted.status_code == 201
    assert submitted.json()["success"] is True
    # The partner notification runs as a background task after the response
    assert [m.token for m in sent_messages] == ["token-bob"]

    current_user["uid"] = "bob"
    listed = client.get(f"/api/v1/daily-questions/{question_id}/responses").json()
    assert listed["count"] == 1
    assert listed["responses"][0]["text"] == "Pizza night"
    assert listed["responses"][0]["userId"] == "alice"

    current_user["uid"] = "mallory"
    denied = client.get(f"/api/v1/daily-questions/{question_id}/responses")
    assert denied.status_code == 403
    assert denied.json() == {
        "error": {"status": "PERMISSION_DENIED", "message": "You are not allowed to access this question"}
    }


def test_blank_response_is_invalid(client):
    response = client.post(
        "/api/v1/daily-questions/responses",
        json={"questionId": "alice_bob_2024-03-01", "responseText": "   ", "userName": "Alice"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["status"] == "INVALID_ARGUMENT"


def test_missing_question_is_not_found(client):
    response = client.get("/api/v1/daily-questions/nope/responses")

    assert response.status_code == 404
    assert response.json()["error"]["status"] == "NOT_FOUND"


def test_migrate_endpoint(client, db):
    db.seed({"coupleId": "alice_bob", "responses": {"bob": {"userName": "Bob", "text": "hi"}}}, "dailyQuestions", "alice_bob_2024-02-01")

    body = client.post("/api/v1/daily-questions/responses/migrate", json={"coupleId": "alice_bob"}).json()

    assert body == {"success": True, "migratedCount": 1, "skippedCount": 0, "errorCount": 0}


def test_complete_challenge(client, db):
    challenge_id = client.post(
        "/api/v1/daily-challenges/generate", json={"coupleId": "alice_bob"}
    ).json()["challengeId"]

    response = client.post(f"/api/v1/daily-challenges/{challenge_id}/complete")

    assert response.json()["challenge"]["isCompleted"] is True
    assert db.data("dailyChallenges", challenge_id)["isCompleted"] is True


@pytest.mark.usefixtures("users")
def test_report_and_list(client):
    created = client.post(
        "/api/v1/moderation/reports",
        json={"messageId": "m1", "reportedUserId": "bob", "messageText": "spam", "reason": "spam"},
    )
    assert created.status_code == 201
    report_id = created.json()["reportId"]

    listed = client.get("/api/v1/moderation/reports", params={"status": "pending"}).json()
    assert listed["count"] == 1
    assert listed["reports"][0]["id"] == report_id
    assert listed["reports"][0]["reporterUserName"] == "Alice"


def test_self_report_is_rejected(client):
    response = client.post(
        "/api/v1/moderation/reports",
        json={"messageId": "m1", "reportedUserId": "alice", "messageText": "x", "reason": "spam"},
    )

    assert response.status_code == 400


def test_scheduler_routes(client):
    hourly = client.post("/api/v1/scheduler/hourly/question").json()
    daily = client.post("/api/v1/scheduler/daily/challenge").json()
    reminders = client.post("/api/v1/scheduler/reminders").json()

    assert hourly["success"] is True
    assert isinstance(hourly["utcHour"], int)
    assert daily["processed"] == 0
    assert reminders == {"success": True, "questionsChecked": 0, "notificationsSent": 0}
    assert client.post("/api/v1/scheduler/hourly/unknown").status_code == 422


def test_scheduler_requires_token(client, monkeypatch):
    del app.dependency_overrides[verify_scheduler_token]
    monkeypatch.setattr(settings, "SCHEDULER_SECRET", "cron-secret")

    missing = client.post("/api/v1/scheduler/reminders")
    wrong = client.post("/api/v1/scheduler/reminders", headers={"X-Scheduler-Token": "nope"})
    right = client.post("/api/v1/scheduler/reminders", headers={"X-Scheduler-Token": "cron-secret"})

    assert missing.status_code == 401
    assert missing.json()["error"]["status"] == "UNAUTHENTICATED"
    assert wrong.status_code == 401
    assert right.status_code == 200


def test_requests_without_bearer_token_are_unauthenticated(client):
    del app.dependency_overrides[get_current_user_id]

    response = client.post("/api/v1/daily-questions/generate", json={"coupleId": "alice_bob"})

    assert response.status_code == 401
    assert response.json()["error"]["status"] == "UNAUTHENTICATED"
