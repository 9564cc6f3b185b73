import hmac
import logging
from datetime import datetime, timezone
from typing import List, Optional

from firebase_admin import firestore

from love2love_api.core.config import settings
from love2love_api.core.errors import CallableError
from love2love_api.crud import crud_content, crud_responses
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import ContentStatus, DailyContentItem
from love2love_api.models.response import MigrationSummary, ResponseRecord
from love2love_api.services.membership import is_couple_member

logger = logging.getLogger(__name__)


async def _get_member_content(
    db: firestore.AsyncClient, kind: ContentKind, content_id: str, user_id: str
) -> DailyContentItem:
    item = await crud_content.get_content(db, kind, content_id)
    if item is None:
        raise CallableError.not_found(f"{kind.value.capitalize()} not found")
    if not is_couple_member(item.couple_id, user_id):
        raise CallableError.permission_denied(
            f"You are not allowed to access this {kind.value}"
        )
    return item


async def submit_response(
    db: firestore.AsyncClient,
    question_id: str,
    user_id: str,
    text: Optional[str],
    user_name: Optional[str],
) -> ResponseRecord:
    text = (text or "").strip()
    if not question_id or not text or not user_name:
        raise CallableError.invalid_argument(
            "questionId, responseText and userName are required"
        )

    await _get_member_content(db, ContentKind.QUESTION, question_id, user_id)

    response = await crud_responses.add_response(
        db, question_id, user_id, user_name, text
    )
    await crud_content.update_content(
        db,
        ContentKind.QUESTION,
        question_id,
        {
            "updatedAt": firestore.SERVER_TIMESTAMP,
            # A question becomes active with its first response
            "status": ContentStatus.ACTIVE.value,
        },
    )
    logger.info(f"Response {response.id} added to question {question_id} by {user_id}")
    return response


async def get_responses(
    db: firestore.AsyncClient, question_id: str, user_id: str
) -> List[ResponseRecord]:
    if not question_id:
        raise CallableError.invalid_argument("questionId is required")

    await _get_member_content(db, ContentKind.QUESTION, question_id, user_id)
    responses = await crud_responses.list_responses(db, question_id)
    logger.info(f"Fetched {len(responses)} responses for question {question_id}")
    return responses


async def migrate_responses(
    db: firestore.AsyncClient,
    user_id: str,
    couple_id: Optional[str] = None,
    admin_secret: Optional[str] = None,
) -> MigrationSummary:
    """
    Moves legacy inline response maps into the responses sub-collection.

    With a valid admin secret and no couple id, every question is migrated.
    Without one, the caller may only migrate a couple they belong to.
    """
    if admin_secret:
        expected = settings.ADMIN_SECRET
        if not expected or not hmac.compare_digest(admin_secret, expected):
            raise CallableError.permission_denied("Admin access denied")
    elif not couple_id:
        raise CallableError.invalid_argument("coupleId is required")
    elif not is_couple_member(couple_id, user_id):
        raise CallableError.permission_denied("You are not allowed to migrate this couple")

    summary = MigrationSummary()
    snapshots = await crud_responses.list_question_snapshots(db, couple_id)
    logger.info(f"Checking {len(snapshots)} questions for response migration")

    for question_snapshot in snapshots:
        try:
            if await crud_responses.migrate_inline_responses(db, question_snapshot):
                summary.migrated_count += 1
                logger.info(f"Migrated responses of question {question_snapshot.id}")
            else:
                summary.skipped_count += 1
        except Exception as e:
            logger.error(
                f"Migration failed for question {question_snapshot.id}: {e}", exc_info=True
            )
            summary.error_count += 1

    logger.info(
        f"Response migration done: {summary.migrated_count} migrated, "
        f"{summary.skipped_count} skipped, {summary.error_count} errors"
    )
    return summary


async def mark_challenge_completed(
    db: firestore.AsyncClient,
    challenge_id: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> DailyContentItem:
    if not challenge_id:
        raise CallableError.invalid_argument("challengeId is required")

    challenge = await _get_member_content(db, ContentKind.CHALLENGE, challenge_id, user_id)
    if challenge.is_completed:
        return challenge

    completed_at = now or datetime.now(timezone.utc)
    await crud_content.update_content(
        db,
        ContentKind.CHALLENGE,
        challenge_id,
        {
            "isCompleted": True,
            "completedAt": completed_at,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        },
    )
    logger.info(f"Challenge {challenge_id} completed by {user_id}")
    return challenge.model_copy(update={"is_completed": True, "completed_at": completed_at})
