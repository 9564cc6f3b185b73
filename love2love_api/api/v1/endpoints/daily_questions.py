from fastapi import APIRouter, BackgroundTasks, Depends, status
from firebase_admin import firestore
import logging

from love2love_api.core.dependencies import get_current_user_id, get_db
from love2love_api.core.errors import CallableError
from love2love_api.crud import crud_settings
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import GenerateDailyQuestionRequest
from love2love_api.models.response import MigrateResponsesRequest, SubmitResponseRequest
from love2love_api.models.settings import ResetSettingsRequest, SettingsRequest
from love2love_api.services import notification_service, responses
from love2love_api.services.content_generator import generate_daily_content
from love2love_api.services.membership import is_couple_member

router = APIRouter()
logger = logging.getLogger(__name__)

KIND = ContentKind.QUESTION


def _require_member(couple_id: str, user_id: str) -> None:
    if not is_couple_member(couple_id, user_id):
        raise CallableError.permission_denied("You are not a member of this couple")


@router.post("/generate", response_model=dict, status_code=status.HTTP_200_OK)
async def generate_daily_question(
    request: GenerateDailyQuestionRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    """
    Returns today's question for the couple, creating it on first call.
    Yesterday's question and its responses are removed before creation.
    """
    _require_member(request.couple_id, user_id)
    try:
        result = await generate_daily_content(
            db,
            KIND,
            request.couple_id,
            request.timezone,
            explicit_day=request.question_day,
        )
    except CallableError:
        raise
    except Exception as e:
        logger.error(
            f"Error generating daily question for couple {request.couple_id}: {e}",
            exc_info=True,
        )
        raise CallableError.internal("Could not generate the daily question")

    question = result.content
    return {
        "success": True,
        "alreadyExists": result.already_exists,
        "questionId": question.id,
        "questionKey": question.content_key,
        "questionDay": question.content_day,
        "question": question.as_payload(KIND),
    }


@router.post("/settings", response_model=dict)
async def get_or_create_daily_question_settings(
    request: SettingsRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    _require_member(request.couple_id, user_id)
    try:
        couple_settings = await crud_settings.get_or_create_settings(
            db, KIND, request.couple_id, request.timezone
        )
    except Exception as e:
        logger.error(
            f"Error loading question settings for couple {request.couple_id}: {e}",
            exc_info=True,
        )
        raise CallableError.internal("Could not load daily question settings")

    return {
        "success": True,
        "settings": couple_settings.model_dump(by_alias=True, mode="json"),
    }


@router.post("/settings/reset", response_model=dict)
async def reset_daily_question_settings(
    request: ResetSettingsRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    _require_member(request.couple_id, user_id)
    try:
        couple_settings = await crud_settings.reset_settings(db, KIND, request.couple_id)
    except Exception as e:
        logger.error(
            f"Error resetting question settings for couple {request.couple_id}: {e}",
            exc_info=True,
        )
        raise CallableError.internal("Could not reset daily question settings")

    return {
        "success": True,
        "settings": couple_settings.model_dump(by_alias=True, mode="json"),
    }


@router.post("/responses", response_model=dict, status_code=status.HTTP_201_CREATED)
async def submit_daily_question_response(
    request: SubmitResponseRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        response = await responses.submit_response(
            db, request.question_id, user_id, request.response_text, request.user_name
        )
    except CallableError:
        raise
    except Exception as e:
        logger.error(
            f"Error adding response to question {request.question_id}: {e}", exc_info=True
        )
        raise CallableError.internal("Could not add the response")

    # Stands in for the on-create trigger of the responses sub-collection
    background_tasks.add_task(
        notification_service.notify_partner_of_response, db, request.question_id, response
    )
    return {"success": True, "responseId": response.id}


@router.get("/{question_id}/responses", response_model=dict)
async def get_daily_question_responses(
    question_id: str,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        question_responses = await responses.get_responses(db, question_id, user_id)
    except CallableError:
        raise
    except Exception as e:
        logger.error(
            f"Error fetching responses of question {question_id}: {e}", exc_info=True
        )
        raise CallableError.internal("Could not fetch the responses")

    return {
        "success": True,
        "responses": [
            r.model_dump(by_alias=True, mode="json") for r in question_responses
        ],
        "count": len(question_responses),
    }


@router.post("/responses/migrate", response_model=dict)
async def migrate_daily_question_responses(
    request: MigrateResponsesRequest,
    user_id: str = Depends(get_current_user_id),
    db: firestore.AsyncClient = Depends(get_db),
):
    try:
        summary = await responses.migrate_responses(
            db, user_id, request.couple_id, request.admin_secret
        )
    except CallableError:
        raise
    except Exception as e:
        logger.error(f"Error migrating responses: {e}", exc_info=True)
        raise CallableError.internal("Could not migrate the responses")

    return {"success": True, **summary.model_dump(by_alias=True)}
