from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1 import FieldFilter
from typing import List, Optional
from datetime import date, datetime
import logging

from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import DailyContentItem
from love2love_api.services.day_calculator import utc_date_string

logger = logging.getLogger(__name__)

RESPONSES_SUBCOLLECTION = "responses"


def content_document_id(couple_id: str, scheduled_date) -> str:
    """Natural key enforcing at most one item per couple per date."""
    if isinstance(scheduled_date, (date, datetime)):
        scheduled_date = utc_date_string(scheduled_date)
    return f"{couple_id}_{scheduled_date}"


def content_ref(db: firestore.AsyncClient, kind: ContentKind, content_id: str):
    return db.collection(kind.content_collection).document(content_id)


def _item_from_data(kind: ContentKind, content_id: str, data: dict) -> DailyContentItem:
    item_data = dict(data)
    item_data["id"] = content_id
    # Kind-specific Firestore fields map onto the generic model fields
    item_data["content_key"] = item_data.pop(kind.key_field, None)
    item_data["content_day"] = item_data.pop(kind.day_field, None)
    # Legacy inline response map is handled by the migration, not the model
    item_data.pop("responses", None)
    return DailyContentItem(**item_data)


def _item_to_firestore(kind: ContentKind, item: DailyContentItem) -> dict:
    firestore_data = {
        "id": item.id,
        "coupleId": item.couple_id,
        kind.key_field: item.content_key,
        kind.day_field: item.content_day,
        "scheduledDate": item.scheduled_date,
        "scheduledDateTime": item.scheduled_date_time,
        "status": item.status.value,
        "timezone": item.timezone,
        "createdAt": firestore.SERVER_TIMESTAMP,
        "updatedAt": firestore.SERVER_TIMESTAMP,
    }
    if kind is ContentKind.CHALLENGE:
        firestore_data["isCompleted"] = bool(item.is_completed)
        firestore_data["completedAt"] = item.completed_at
    return firestore_data


async def get_content(
    db: firestore.AsyncClient, kind: ContentKind, content_id: str
) -> Optional[DailyContentItem]:
    doc_snapshot = await content_ref(db, kind, content_id).get()

    if not doc_snapshot.exists:
        return None

    data = doc_snapshot.to_dict()
    if not data:
        return None
    return _item_from_data(kind, doc_snapshot.id, data)


async def create_content_if_absent(
    db: firestore.AsyncClient, kind: ContentKind, item: DailyContentItem
) -> bool:
    """
    Writes the item only if no document with its id exists yet.
    Returns False when another writer got there first.
    """
    try:
        await content_ref(db, kind, item.id).create(_item_to_firestore(kind, item))
    except AlreadyExists:
        logger.info(f"{kind.content_collection}/{item.id} was created concurrently")
        return False
    return True


async def update_content(
    db: firestore.AsyncClient, kind: ContentKind, content_id: str, fields: dict
) -> None:
    await content_ref(db, kind, content_id).update(fields)


async def delete_content_with_responses(
    db: firestore.AsyncClient, kind: ContentKind, content_id: str
) -> Optional[int]:
    """
    Deletes a content document and its responses in one batch.
    Returns the number of deleted responses, or None if the document was absent.
    """
    doc_ref = content_ref(db, kind, content_id)
    doc_snapshot = await doc_ref.get()
    if not doc_snapshot.exists:
        return None

    responses = await doc_ref.collection(RESPONSES_SUBCOLLECTION).get()

    batch = db.batch()
    for response_snapshot in responses:
        batch.delete(response_snapshot.reference)
    batch.delete(doc_ref)
    await batch.commit()

    return len(responses)


async def list_content_for_date(
    db: firestore.AsyncClient, kind: ContentKind, scheduled_date: str
) -> List[DailyContentItem]:
    items = []
    query = db.collection(kind.content_collection).where(
        filter=FieldFilter("scheduledDate", "==", scheduled_date)
    )
    async for doc_snapshot in query.stream():
        data = doc_snapshot.to_dict()
        if not data:
            continue
        items.append(_item_from_data(kind, doc_snapshot.id, data))
    return items
