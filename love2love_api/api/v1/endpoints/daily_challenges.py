from fastapi import APIRouter, Depends
from firebase_admin import firestore
import logging

from love2love_api.core.dependencies import get_current_user_id, get_db
from love2love_api.core.errors import CallableError
from love2love_api.crud import crud_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import GenerateDailyChallengeRequest
from love2love_api.models.settings import SettingsRequest
from love2love_api.services import responses
from love2love_api.services.content_generator import generate_daily_content
from love2love_api.services.membership import is_couple_member

router = APIRouter()
logger = logging.getLogger(__name__)

KIND = ContentKind.CHALLENGE


@router.post("/generate", response_model=dict)
async def generate_daily_challenge(
    request: GenerateDailyChallengeRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    if not is_couple_member(request.couple_id, user_id):
        raise CallableError.permission_denied("You are not a member of this couple")
    try:
        result = await generate_daily_content(
            db,
            KIND,
            request.couple_id,
            request.timezone,
            explicit_day=request.challenge_day,
        )
    except CallableError:
        raise
    except Exception as e:
        logger.error(
            f"Error generating daily challenge for couple {request.couple_id}: {e}",
            exc_info=True,
        )
        raise CallableError.internal("Could not generate the daily challenge")

    challenge = result.content
    return {
        "success": True,
        "alreadyExists": result.already_exists,
        "challengeId": challenge.id,
        "challengeKey": challenge.content_key,
        "challengeDay": challenge.content_day,
        "challenge": challenge.as_payload(KIND),
    }


@router.post("/settings", response_model=dict)
async def get_or_create_daily_challenge_settings(
    request: SettingsRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    if not is_couple_member(request.couple_id, user_id):
        raise CallableError.permission_denied("You are not a member of this couple")
    try:
        couple_settings = await crud_settings.get_or_create_settings(
            db, KIND, request.couple_id, request.timezone
        )
    except Exception as e:
        logger.error(
            f"Error loading challenge settings for couple {request.couple_id}: {e}",
            exc_info=True,
        )
        raise CallableError.internal("Could not load daily challenge settings")

    return {
        "success": True,
        "settings": couple_settings.model_dump(by_alias=True, mode="json"),
    }


@router.post("/{challenge_id}/complete", response_model=dict)
async def mark_challenge_completed(
    challenge_id: str,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        challenge = await responses.mark_challenge_completed(db, challenge_id, user_id)
    except CallableError:
        raise
    except Exception as e:
        logger.error(f"Error completing challenge {challenge_id}: {e}", exc_info=True)
        raise CallableError.internal("Could not complete the challenge")

    return {"success": True, "challenge": challenge.as_payload(KIND)}
