from fastapi import APIRouter, Depends
from firebase_admin import firestore
import logging

from love2love_api.core.dependencies import get_db, verify_scheduler_token
from love2love_api.models.content_kind import ContentKind
from love2love_api.services import scheduler

# Called by Cloud Scheduler jobs:
#   hourly/{kind}  "0 * * * *"   (UTC)
#   daily/{kind}   "0 21 * * *"  (UTC)
#   reminders      "0 21 * * *"  (Europe/Paris)
router = APIRouter(dependencies=[Depends(verify_scheduler_token)])
logger = logging.getLogger(__name__)


@router.post("/hourly/{kind}", response_model=dict)
async def run_hourly_generation(
    kind: ContentKind, db: firestore.AsyncClient = Depends(get_db)
):
    summary = await scheduler.run_hourly_generation(db, kind)
    return {"success": True, **summary.model_dump(by_alias=True)}


@router.post("/daily/{kind}", response_model=dict)
async def run_daily_generation(
    kind: ContentKind, db: firestore.AsyncClient = Depends(get_db)
):
    summary = await scheduler.run_due_generation(db, kind)
    return {"success": True, **summary.model_dump(by_alias=True)}


@router.post("/reminders", response_model=dict)
async def run_daily_reminders(db: firestore.AsyncClient = Depends(get_db)):
    summary = await scheduler.run_daily_reminders(db)
    return {"success": True, **summary.model_dump(by_alias=True)}
