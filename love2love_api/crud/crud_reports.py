from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter
from typing import List

from love2love_api.models.report import ContentReport

CONTENT_REPORTS_COLLECTION = "content_reports"
MODERATION_STATS_COLLECTION = "user_moderation_stats"
ADMIN_ALERTS_COLLECTION = "admin_alerts"


def new_report_id(db: firestore.AsyncClient) -> str:
    return db.collection(CONTENT_REPORTS_COLLECTION).document().id


async def create_report(db: firestore.AsyncClient, report: ContentReport) -> None:
    firestore_data = report.model_dump(by_alias=True, mode="python")
    firestore_data["status"] = report.status.value
    firestore_data["severity"] = report.severity.value
    firestore_data["reportedAt"] = firestore.SERVER_TIMESTAMP
    await db.collection(CONTENT_REPORTS_COLLECTION).document(report.id).set(firestore_data)


async def increment_moderation_stats(
    db: firestore.AsyncClient, reported_user_id: str
) -> None:
    doc_ref = db.collection(MODERATION_STATS_COLLECTION).document(reported_user_id)
    await doc_ref.set(
        {
            "totalReports": firestore.Increment(1),
            "pendingReports": firestore.Increment(1),
            "lastReportedAt": firestore.SERVER_TIMESTAMP,
        },
        merge=True,
    )


async def create_admin_alert(db: firestore.AsyncClient, report_id: str) -> str:
    doc_ref = db.collection(ADMIN_ALERTS_COLLECTION).document()
    await doc_ref.set(
        {
            "type": "critical_content_report",
            "reportId": report_id,
            "severity": "high",
            "createdAt": firestore.SERVER_TIMESTAMP,
            "resolved": False,
        }
    )
    return doc_ref.id


async def list_reports(
    db: firestore.AsyncClient, status: str, limit: int
) -> List[ContentReport]:
    query = (
        db.collection(CONTENT_REPORTS_COLLECTION)
        .where(filter=FieldFilter("status", "==", status))
        .order_by("reportedAt", direction=firestore.Query.DESCENDING)
        .limit(limit)
    )
    reports = []
    async for doc_snapshot in query.stream():
        data = doc_snapshot.to_dict()
        if not data:
            continue
        data["id"] = doc_snapshot.id
        reports.append(ContentReport(**data))
    return reports
