"""
Tests for idempotent daily content generation and previous-day cleanup.
"""
from datetime import date, datetime, timedelta, timezone

from google.api_core.exceptions import ServiceUnavailable

from love2love_api.crud import crud_content, crud_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.services.content_generator import generate_daily_content
from love2love_api.services.retention import cleanup_previous_day

QUESTION = ContentKind.QUESTION
CHALLENGE = ContentKind.CHALLENGE


def _seed_settings(db, kind, couple_id, start, current_day=1, next_date=None):
    db.seed(
        {
            "coupleId": couple_id,
            "startDate": start,
            "timezone": "Europe/Paris",
            "currentDay": current_day,
            "nextScheduledDate": next_date or "2024-03-02",
        },
        kind.settings_collection,
        couple_id,
    )


async def test_fresh_couple_gets_first_question(db, march_first):
    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.already_exists is False
    assert result.content.id == "A_B_2024-03-01"
    assert result.content.content_key == "daily_question_1"
    assert result.content.content_day == 1

    stored = db.data("dailyQuestions", "A_B_2024-03-01")
    assert stored["questionKey"] == "daily_question_1"
    assert stored["questionDay"] == 1
    assert stored["scheduledDate"] == "2024-03-01"
    assert stored["status"] == "pending"
    assert "responses" not in stored

    settings = db.data("dailyQuestionSettings", "A_B")
    assert settings["currentDay"] == 1
    assert settings["nextScheduledDate"] == "2024-03-02"


async def test_second_call_same_day_returns_existing(db, march_first):
    first = await generate_daily_content(db, CHALLENGE, "A_B", now=march_first)
    second = await generate_daily_content(
        db, CHALLENGE, "A_B", now=march_first + timedelta(hours=15)
    )

    assert first.already_exists is False
    assert second.already_exists is True
    assert second.content.content_key == first.content.content_key == "daily_challenge_1"
    assert second.content.content_day == first.content.content_day
    assert len(db.children("dailyChallenges")) == 1


async def test_stored_content_wins_over_recomputed_day(db, march_first):
    _seed_settings(db, QUESTION, "A_B", march_first - timedelta(days=9))
    db.seed(
        {"id": "A_B_2024-03-01", "coupleId": "A_B", "questionKey": "daily_question_3", "questionDay": 3, "scheduledDate": "2024-03-01", "status": "active"},
        "dailyQuestions",
        "A_B_2024-03-01",
    )

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.already_exists is True
    assert result.content.content_key == "daily_question_3"


async def test_day_follows_start_date_and_cycles(db, march_first):
    _seed_settings(db, QUESTION, "A_B", march_first - timedelta(days=51), current_day=51)

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.content.content_key == "daily_question_1"
    assert result.content.content_day == 1
    settings = db.data("dailyQuestionSettings", "A_B")
    assert settings["currentDay"] == 52
    assert settings["nextScheduledDate"] == "2024-03-02"


async def test_explicit_day_is_trusted(db, march_first):
    result = await generate_daily_content(db, QUESTION, "A_B", explicit_day=7, now=march_first)

    assert result.content.content_key == "daily_question_7"
    assert db.data("dailyQuestionSettings", "A_B")["currentDay"] == 7


async def test_challenge_items_track_completion(db, march_first):
    result = await generate_daily_content(db, CHALLENGE, "A_B", now=march_first)

    stored = db.data("dailyChallenges", "A_B_2024-03-01")
    assert stored["challengeKey"] == "daily_challenge_1"
    assert stored["isCompleted"] is False
    assert result.content.as_payload(CHALLENGE)["isCompleted"] is False


async def test_cleanup_then_create(db, march_first):
    _seed_settings(db, QUESTION, "A_B", march_first - timedelta(days=1))
    db.seed(
        {"id": "A_B_2024-02-29", "coupleId": "A_B", "questionKey": "daily_question_1", "questionDay": 1, "scheduledDate": "2024-02-29", "status": "active"},
        "dailyQuestions",
        "A_B_2024-02-29",
    )
    for response_id in ("r1", "r2"):
        db.seed(
            {"id": response_id, "userId": "A", "userName": "A", "text": "hi", "status": "answered"},
            "dailyQuestions",
            "A_B_2024-02-29",
            "responses",
            response_id,
        )

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert db.data("dailyQuestions", "A_B_2024-02-29") is None
    assert db.children("dailyQuestions", "A_B_2024-02-29", "responses") == {}
    assert db.data("dailyQuestions", "A_B_2024-03-01") is not None
    assert result.content.content_key == "daily_question_2"


async def test_cleanup_leaves_other_couples_alone(db, march_first):
    db.seed({"coupleId": "C_D", "scheduledDate": "2024-02-29"}, "dailyQuestions", "C_D_2024-02-29")

    deleted = await cleanup_previous_day(db, QUESTION, "A_B", date(2024, 3, 1))

    assert deleted is None
    assert db.data("dailyQuestions", "C_D_2024-02-29") is not None


async def test_cleanup_counts_deleted_responses_in_one_batch(db):
    db.seed({"coupleId": "A_B"}, "dailyQuestions", "A_B_2024-02-29")
    for response_id in ("r1", "r2", "r3"):
        db.seed({"text": "x"}, "dailyQuestions", "A_B_2024-02-29", "responses", response_id)

    deleted = await cleanup_previous_day(db, QUESTION, "A_B", date(2024, 3, 1))

    assert deleted == 3
    assert db.commits == 1


async def test_cleanup_failure_does_not_block_generation(db, march_first, monkeypatch):
    async def broken_delete(*args, **kwargs):
        raise ServiceUnavailable("firestore down")

    monkeypatch.setattr(crud_content, "delete_content_with_responses", broken_delete)

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.already_exists is False
    assert db.data("dailyQuestions", "A_B_2024-03-01") is not None


async def test_settings_update_failure_is_not_fatal(db, march_first, monkeypatch):
    async def broken_record(*args, **kwargs):
        raise ServiceUnavailable("firestore down")

    monkeypatch.setattr(crud_settings, "record_generation", broken_record)

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.already_exists is False


async def test_lost_create_race_returns_winner(db, march_first, monkeypatch):
    original_get = crud_content.get_content
    calls = {"count": 0}

    async def get_content_racing(db_, kind, content_id):
        calls["count"] += 1
        if calls["count"] == 1:
            # Another invocation writes between our existence check and our create
            db_.seed(
                {"id": content_id, "coupleId": "A_B", "questionKey": "daily_question_9", "questionDay": 9, "scheduledDate": "2024-03-01", "status": "pending"},
                "dailyQuestions",
                content_id,
            )
            return None
        return await original_get(db_, kind, content_id)

    monkeypatch.setattr(crud_content, "get_content", get_content_racing)

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first)

    assert result.already_exists is True
    assert result.content.content_key == "daily_question_9"


async def test_items_are_keyed_by_utc_date_whatever_the_timezone(db):
    now = datetime(2024, 3, 1, 23, 0, tzinfo=timezone.utc)  # Already March 2nd in Paris

    result = await generate_daily_content(db, QUESTION, "A_B", "Europe/Paris", now=now)

    assert result.content.id == "A_B_2024-03-01"
    assert result.content.timezone == "Europe/Paris"
    assert db.data("dailyQuestionSettings", "A_B")["nextScheduledDate"] == "2024-03-02"


async def test_settings_without_start_date_restart_at_day_one(db, march_first):
    db.seed(
        {"coupleId": "A_B", "timezone": "Europe/Paris", "currentDay": 3},
        "dailyQuestionSettings",
        "A_B",
    )

    result = await generate_daily_content(db, QUESTION, "A_B", now=march_first + timedelta(hours=10))

    assert result.already_exists is False
    assert result.content.content_key == "daily_question_1"
    settings = db.data("dailyQuestionSettings", "A_B")
    assert settings["startDate"] == march_first
    assert settings["currentDay"] == 1
    assert settings["nextScheduledDate"] == "2024-03-02"
