"""
Tests for content reports, critical alerts and moderation stats.
"""
from datetime import datetime, timezone

import pytest

from love2love_api.core.errors import CallableError
from love2love_api.models.report import ContentReportRequest, ReportSeverity
from love2love_api.services import moderation


def _request(**overrides):
    fields = {
        "messageId": "m1",
        "reportedUserId": "bob",
        "reportedUserName": "Bob",
        "messageText": "You are rude",
        "reason": "harassment",
    }
    fields.update(overrides)
    return ContentReportRequest(**fields)


def test_critical_keywords_are_case_insensitive():
    assert moderation.is_content_critical("Je vais te MENACE")
    assert moderation.is_content_critical("buying drogue")
    assert not moderation.is_content_critical("see you tonight")


@pytest.mark.usefixtures("users")
async def test_report_is_saved_and_counted(db):
    report = await moderation.report_inappropriate_content(db, "alice", _request())

    stored = db.data("content_reports", report.id)
    assert stored["messageId"] == "m1"
    assert stored["reportedUserId"] == "bob"
    assert stored["reporterUserId"] == "alice"
    assert stored["reporterUserName"] == "Alice"
    assert stored["status"] == "pending"
    assert stored["severity"] == "medium"
    assert isinstance(stored["reportedAt"], datetime)
    assert db.children("admin_alerts") == {}

    stats = db.data("user_moderation_stats", "bob")
    assert stats["totalReports"] == 1
    assert stats["pendingReports"] == 1

    await moderation.report_inappropriate_content(db, "alice", _request(messageId="m2"))
    assert db.data("user_moderation_stats", "bob")["totalReports"] == 2


@pytest.mark.usefixtures("users")
async def test_critical_report_alerts_administrators_without_raising_severity(db):
    report = await moderation.report_inappropriate_content(
        db, "alice", _request(messageText="This is a menace of violence")
    )

    assert report.severity == ReportSeverity.MEDIUM
    assert db.data("content_reports", report.id)["severity"] == "medium"
    alerts = list(db.children("admin_alerts").values())
    assert len(alerts) == 1
    assert alerts[0]["reportId"] == report.id
    assert alerts[0]["type"] == "critical_content_report"
    assert alerts[0]["resolved"] is False


@pytest.mark.usefixtures("users")
async def test_reported_text_is_truncated(db):
    report = await moderation.report_inappropriate_content(
        db, "alice", _request(messageText="a" * 800)
    )

    assert len(db.data("content_reports", report.id)["messageText"]) == 500


@pytest.mark.parametrize(
    "overrides",
    [
        {"messageId": None},
        {"reportedUserId": None},
        {"messageText": ""},
        {"reason": None},
        {"reportedUserId": "alice"},
    ],
)
@pytest.mark.usefixtures("users")
async def test_invalid_reports_are_rejected(db, overrides):
    with pytest.raises(CallableError) as excinfo:
        await moderation.report_inappropriate_content(db, "alice", _request(**overrides))

    assert excinfo.value.code == "invalid-argument"
    assert db.children("content_reports") == {}


async def test_unknown_reporter(db):
    with pytest.raises(CallableError) as excinfo:
        await moderation.report_inappropriate_content(db, "ghost", _request())

    assert excinfo.value.code == "not-found"


async def test_reports_are_listed_newest_first(db):
    for report_id, day, status in [("r1", 1, "pending"), ("r2", 3, "pending"), ("r3", 2, "resolved")]:
        db.seed(
            {
                "messageId": f"m-{report_id}",
                "reportedUserId": "bob",
                "reporterUserId": "alice",
                "messageText": "text",
                "reason": "spam",
                "status": status,
                "severity": "medium",
                "reportedAt": datetime(2024, 3, day, tzinfo=timezone.utc),
            },
            "content_reports",
            report_id,
        )

    pending = await moderation.get_content_reports(db)
    resolved = await moderation.get_content_reports(db, "resolved")
    limited = await moderation.get_content_reports(db, limit=1)

    assert [r.id for r in pending] == ["r2", "r1"]
    assert [r.id for r in resolved] == ["r3"]
    assert [r.id for r in limited] == ["r2"]
