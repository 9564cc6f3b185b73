from fastapi import APIRouter, Depends, Query, status
from firebase_admin import firestore
import logging

from love2love_api.core.dependencies import get_current_user_id, get_db
from love2love_api.core.errors import CallableError
from love2love_api.models.report import ContentReportRequest, ReportStatus
from love2love_api.services import moderation

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/reports", response_model=dict, status_code=status.HTTP_201_CREATED)
async def report_inappropriate_content(
    request: ContentReportRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        report = await moderation.report_inappropriate_content(db, user_id, request)
    except CallableError:
        raise
    except Exception as e:
        logger.error(f"Error saving content report from {user_id}: {e}", exc_info=True)
        raise CallableError.internal("Could not save the report")

    return {"success": True, "reportId": report.id, "reviewTime": "24-48 hours"}


# TODO: restrict to moderators once admin custom claims are issued
@router.get("/reports", response_model=dict)
async def get_content_reports(
    report_status: ReportStatus = Query(ReportStatus.PENDING, alias="status"),
    limit: int = Query(50, ge=1, le=500),
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        reports = await moderation.get_content_reports(db, report_status.value, limit)
    except Exception as e:
        logger.error(f"Error fetching content reports for {user_id}: {e}", exc_info=True)
        raise CallableError.internal("Could not fetch the reports")

    return {
        "success": True,
        "reports": [r.model_dump(by_alias=True, mode="json") for r in reports],
        "count": len(reports),
    }
