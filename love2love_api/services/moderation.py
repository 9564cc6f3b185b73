import logging
from typing import List

from firebase_admin import firestore

from love2love_api.core.errors import CallableError
from love2love_api.crud import crud_reports, crud_users
from love2love_api.models.report import (
    ContentReport,
    ContentReportRequest,
    ReportSeverity,
)

logger = logging.getLogger(__name__)

MAX_REPORTED_TEXT_LENGTH = 500
CRITICAL_KEYWORDS = (
    "violence",
    "menace",
    "harcèlement",
    "suicide",
    "drogue",
    "illegal",
)


def is_content_critical(message_text: str) -> bool:
    lower_text = message_text.lower()
    return any(keyword in lower_text for keyword in CRITICAL_KEYWORDS)


async def notify_administrators(db: firestore.AsyncClient, report: ContentReport) -> None:
    # No admin channel exists beyond the alert document
    try:
        alert_id = await crud_reports.create_admin_alert(db, report.id)
        logger.warning(
            f"Critical content report {report.id} against {report.reported_user_id} "
            f"({report.reason}); admin alert {alert_id} created"
        )
    except Exception as e:
        logger.error(f"Failed to create admin alert for report {report.id}: {e}", exc_info=True)


async def report_inappropriate_content(
    db: firestore.AsyncClient, reporter_user_id: str, request: ContentReportRequest
) -> ContentReport:
    if (
        not request.message_id
        or not request.reported_user_id
        or not request.message_text
        or not request.reason
        or reporter_user_id == request.reported_user_id
    ):
        raise CallableError.invalid_argument("Missing or invalid parameters")

    reporter = await crud_users.get_user_profile(db, reporter_user_id)
    if reporter is None:
        raise CallableError.not_found("Reporting user not found")

    critical = is_content_critical(request.message_text)
    report = ContentReport(
        id=crud_reports.new_report_id(db),
        message_id=request.message_id,
        reported_user_id=request.reported_user_id,
        reported_user_name=request.reported_user_name or "Unknown user",
        reporter_user_id=reporter_user_id,
        reporter_user_name=reporter.name or "Unknown reporter",
        message_text=request.message_text[:MAX_REPORTED_TEXT_LENGTH],
        reason=request.reason,
        # Critical reports keep medium severity; the admin alert carries the escalation
        severity=ReportSeverity.MEDIUM,
    )
    await crud_reports.create_report(db, report)
    logger.info(
        f"Report {report.id} saved: {request.reported_user_id} reported by {reporter_user_id}"
    )

    if critical:
        await notify_administrators(db, report)

    await crud_reports.increment_moderation_stats(db, request.reported_user_id)
    return report


async def get_content_reports(
    db: firestore.AsyncClient, status: str = "pending", limit: int = 50
) -> List[ContentReport]:
    reports = await crud_reports.list_reports(db, status, limit)
    logger.info(f"Found {len(reports)} {status} content reports")
    return reports
