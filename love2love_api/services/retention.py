import logging
from datetime import date, timedelta
from typing import Optional

from firebase_admin import firestore

from love2love_api.crud import crud_content
from love2love_api.models.content_kind import ContentKind

logger = logging.getLogger(__name__)


async def cleanup_previous_day(
    db: firestore.AsyncClient, kind: ContentKind, couple_id: str, today: date
) -> Optional[int]:
    """
    Deletes the couple's content for the day before `today`, responses included.

    Errors are logged and swallowed: a failed cleanup must never block the
    generation that follows it. Returns the number of deleted responses, or
    None when nothing was deleted.
    """
    yesterday = today - timedelta(days=1)
    content_id = crud_content.content_document_id(couple_id, yesterday)

    try:
        deleted_responses = await crud_content.delete_content_with_responses(
            db, kind, content_id
        )
    except Exception as e:
        logger.error(
            f"Failed to clean up {kind.content_collection}/{content_id}: {e}",
            exc_info=True,
        )
        return None

    if deleted_responses is None:
        logger.info(f"No previous {kind.value} to clean up for {couple_id} ({yesterday})")
    else:
        logger.info(
            f"Deleted {kind.content_collection}/{content_id} with {deleted_responses} responses"
        )
    return deleted_responses
