from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter
from typing import List, Optional

from love2love_api.crud.crud_content import RESPONSES_SUBCOLLECTION, content_ref
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.response import ResponseRecord

MIGRATION_VERSION = "v2_subcollections"


def _responses_collection(db: firestore.AsyncClient, question_id: str):
    return content_ref(db, ContentKind.QUESTION, question_id).collection(
        RESPONSES_SUBCOLLECTION
    )


async def add_response(
    db: firestore.AsyncClient,
    question_id: str,
    user_id: str,
    user_name: str,
    text: str,
) -> ResponseRecord:
    doc_ref = _responses_collection(db, question_id).document()  # Auto-generate ID

    firestore_data = {
        "id": doc_ref.id,
        "userId": user_id,
        "userName": user_name,
        "text": text,
        "respondedAt": firestore.SERVER_TIMESTAMP,
        "status": "answered",
        "isReadByPartner": False,
    }
    await doc_ref.set(firestore_data)

    response_data = firestore_data.copy()
    response_data["respondedAt"] = None  # Server-assigned
    return ResponseRecord(**response_data)


async def list_responses(
    db: firestore.AsyncClient, question_id: str
) -> List[ResponseRecord]:
    responses = []
    query = _responses_collection(db, question_id).order_by("respondedAt")
    async for doc_snapshot in query.stream():
        data = doc_snapshot.to_dict()
        if not data:
            continue
        data["id"] = doc_snapshot.id
        responses.append(ResponseRecord(**data))
    return responses


async def has_responses(db: firestore.AsyncClient, question_id: str) -> bool:
    existing = await _responses_collection(db, question_id).limit(1).get()
    return len(existing) > 0


async def list_question_snapshots(
    db: firestore.AsyncClient, couple_id: Optional[str] = None
):
    query = db.collection(ContentKind.QUESTION.content_collection)
    if couple_id:
        query = query.where(filter=FieldFilter("coupleId", "==", couple_id))
    return await query.get()


async def migrate_inline_responses(db: firestore.AsyncClient, question_snapshot) -> bool:
    """
    Moves a legacy inline `responses` map into the responses sub-collection.

    Returns False when there is nothing to migrate or the question already has
    sub-collection responses.
    """
    data = question_snapshot.to_dict() or {}
    inline_responses = data.get("responses") or {}
    if not inline_responses:
        return False

    if await has_responses(db, question_snapshot.id):
        return False

    responses_collection = question_snapshot.reference.collection(RESPONSES_SUBCOLLECTION)
    batch = db.batch()
    for response_user_id, response_data in inline_responses.items():
        response_ref = responses_collection.document()
        batch.set(
            response_ref,
            {
                "id": response_ref.id,
                "userId": response_user_id,
                "userName": response_data.get("userName") or "User",
                "text": response_data.get("text") or "",
                "respondedAt": response_data.get("respondedAt")
                or firestore.SERVER_TIMESTAMP,
                "status": response_data.get("status") or "answered",
                "isReadByPartner": bool(response_data.get("isReadByPartner", False)),
            },
        )

    batch.update(
        question_snapshot.reference,
        {
            "responses": firestore.DELETE_FIELD,
            "migratedAt": firestore.SERVER_TIMESTAMP,
            "migrationVersion": MIGRATION_VERSION,
        },
    )
    await batch.commit()
    return True
