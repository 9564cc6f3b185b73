from firebase_admin import firestore
from typing import Optional

from love2love_api.models.user import UserProfile

USERS_COLLECTION = "users"


async def get_user_profile(
    db: firestore.AsyncClient, user_id: str
) -> Optional[UserProfile]:
    """
    Retrieves the notification-relevant fields of a user.
    The user_id is the document ID in the users collection.
    """
    doc_ref = db.collection(USERS_COLLECTION).document(user_id)
    doc_snapshot = await doc_ref.get()

    if not doc_snapshot.exists:
        return None

    user_data = doc_snapshot.to_dict() or {}
    return UserProfile(
        user_id=doc_snapshot.id,
        name=user_data.get("name"),
        fcm_token=user_data.get("fcmToken") or None,
        language_code=user_data.get("languageCode") or "fr",
    )


async def clear_fcm_token(db: firestore.AsyncClient, user_id: str) -> None:
    doc_ref = db.collection(USERS_COLLECTION).document(user_id)
    await doc_ref.update({"fcmToken": firestore.DELETE_FIELD})
