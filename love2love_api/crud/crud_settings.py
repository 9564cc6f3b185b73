from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter
from typing import List, Optional
from datetime import datetime, timezone
import logging

from love2love_api.core.config import settings as app_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.settings import CoupleContentSettings
from love2love_api.services.day_calculator import (
    next_date_string,
    utc_midnight,
)

logger = logging.getLogger(__name__)

# Firestore rejects "in" filters with more than 30 values
FIRESTORE_IN_LIMIT = 30


def _settings_from_data(couple_id: str, data: dict) -> CoupleContentSettings:
    settings_data = dict(data)
    # Legacy records may lack coupleId; the document ID is the couple id.
    settings_data.setdefault("coupleId", couple_id)
    if not settings_data.get("timezone"):
        settings_data["timezone"] = app_settings.DEFAULT_TIMEZONE
    return CoupleContentSettings(**settings_data)


def _new_settings_data(couple_id: str, timezone_name: str, now: datetime) -> dict:
    start_date = utc_midnight(now)
    return {
        "coupleId": couple_id,
        "startDate": start_date,
        "timezone": timezone_name,
        "currentDay": 1,
        "nextScheduledDate": next_date_string(start_date),
        "createdAt": firestore.SERVER_TIMESTAMP,
        "lastVisitDate": None,
    }


async def get_settings(
    db: firestore.AsyncClient, kind: ContentKind, couple_id: str
) -> Optional[CoupleContentSettings]:
    doc_ref = db.collection(kind.settings_collection).document(couple_id)
    doc_snapshot = await doc_ref.get()

    if not doc_snapshot.exists:
        return None

    data = doc_snapshot.to_dict()
    if not data:
        return None
    return _settings_from_data(couple_id, data)


async def get_or_create_settings(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_id: str,
    timezone_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CoupleContentSettings:
    """
    Returns the couple's settings, creating them on first access.

    A legacy record without nextScheduledDate is patched to tomorrow (UTC), and
    one without startDate restarts at day 1 today. Both patches share a single
    update, so at most one write happens per call.
    """
    now = now or datetime.now(timezone.utc)
    timezone_name = timezone_name or app_settings.DEFAULT_TIMEZONE
    doc_ref = db.collection(kind.settings_collection).document(couple_id)
    doc_snapshot = await doc_ref.get()

    if doc_snapshot.exists:
        data = doc_snapshot.to_dict() or {}
        backfill = {}
        if not data.get("startDate"):
            backfill["startDate"] = utc_midnight(now)
        if not data.get("nextScheduledDate"):
            backfill["nextScheduledDate"] = next_date_string(now)
        if backfill:
            logger.info(
                f"Backfilling {sorted(backfill)} on {kind.settings_collection}/{couple_id}"
            )
            await doc_ref.update(backfill)
            data.update(backfill)
        return _settings_from_data(couple_id, data)

    new_data = _new_settings_data(couple_id, timezone_name, now)
    await doc_ref.set(new_data)
    logger.info(
        f"Created {kind.value} settings for {couple_id}: startDate={new_data['startDate'].isoformat()}, "
        f"nextScheduledDate={new_data['nextScheduledDate']}, timezone={timezone_name}"
    )

    # createdAt is a server timestamp and only known after a read-back
    new_data["createdAt"] = None
    return _settings_from_data(couple_id, new_data)


async def record_generation(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_id: str,
    current_day: int,
    next_scheduled_date: str,
) -> None:
    doc_ref = db.collection(kind.settings_collection).document(couple_id)
    await doc_ref.update(
        {
            "currentDay": current_day,
            "nextScheduledDate": next_scheduled_date,
            "lastVisitDate": firestore.SERVER_TIMESTAMP,
            "lastContentGenerated": firestore.SERVER_TIMESTAMP,
        }
    )


async def reset_settings(
    db: firestore.AsyncClient,
    kind: ContentKind,
    couple_id: str,
    timezone_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CoupleContentSettings:
    """Overwrites the couple's settings so that today becomes day 1 again."""
    now = now or datetime.now(timezone.utc)
    new_data = _new_settings_data(
        couple_id, timezone_name or app_settings.DEFAULT_TIMEZONE, now
    )
    new_data["lastVisitDate"] = firestore.SERVER_TIMESTAMP

    await db.collection(kind.settings_collection).document(couple_id).set(new_data)
    logger.info(f"Reset {kind.value} settings for {couple_id} to day 1")

    new_data["createdAt"] = None
    new_data["lastVisitDate"] = None
    return _settings_from_data(couple_id, new_data)


async def list_due_settings(
    db: firestore.AsyncClient, kind: ContentKind, scheduled_date: str
) -> List[CoupleContentSettings]:
    """Settings whose nextScheduledDate equals the given yyyy-MM-dd date."""
    query = db.collection(kind.settings_collection).where(
        filter=FieldFilter("nextScheduledDate", "==", scheduled_date)
    )
    return await _collect(query)


async def list_settings_by_timezones(
    db: firestore.AsyncClient, kind: ContentKind, timezones: List[str]
) -> List[CoupleContentSettings]:
    results: List[CoupleContentSettings] = []
    for start in range(0, len(timezones), FIRESTORE_IN_LIMIT):
        chunk = timezones[start : start + FIRESTORE_IN_LIMIT]
        query = db.collection(kind.settings_collection).where(
            filter=FieldFilter("timezone", "in", chunk)
        )
        results.extend(await _collect(query))
    return results


async def _collect(query) -> List[CoupleContentSettings]:
    settings_list = []
    async for doc_snapshot in query.stream():
        data = doc_snapshot.to_dict()
        if not data:
            continue
        try:
            settings_list.append(_settings_from_data(doc_snapshot.id, data))
        except ValueError as e:
            # A malformed record must not hide every other couple from the scheduler
            logger.warning(f"Skipping malformed settings document {doc_snapshot.id}: {e}")
    return settings_list
