import asyncio
import logging
from typing import Dict, Optional

from firebase_admin import firestore, messaging
from firebase_admin.exceptions import FirebaseError

from love2love_api.crud import crud_content, crud_users
from love2love_api.models.content_kind import ContentKind
from love2love_api.models.daily_content import ContentStatus, DailyContentItem
from love2love_api.models.response import ResponseRecord
from love2love_api.services.membership import couple_member_ids, partner_of

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "fr"
PREVIEW_LENGTH = 50

NOTIFICATION_TEMPLATES: Dict[str, Dict[str, Dict[str, str]]] = {
    "new_message": {
        "fr": {"title": "💬 Nouveau message"},
        "en": {"title": "💬 New message"},
        "es": {"title": "💬 Nuevo mensaje"},
        "de": {"title": "💬 Neue Nachricht"},
        "it": {"title": "💬 Nuovo messaggio"},
    },
    "daily_reminder": {
        "fr": {
            "title": "💕 Question du jour",
            "body": "Votre question du jour est prête ! Connectez-vous avec votre partenaire.",
        },
        "en": {
            "title": "💕 Daily Question",
            "body": "Your daily question is ready! Connect with your partner.",
        },
        "es": {
            "title": "💕 Pregunta diaria",
            "body": "¡Tu pregunta diaria está lista! Conecta con tu pareja.",
        },
        "de": {
            "title": "💕 Tägliche Frage",
            "body": "Deine tägliche Frage ist bereit! Verbinde dich mit deinem Partner.",
        },
        "it": {
            "title": "💕 Domanda giornaliera",
            "body": "La tua domanda giornaliera è pronta! Connettiti con il tuo partner.",
        },
    },
}


def get_notification_template(language: Optional[str], template_type: str) -> Dict[str, str]:
    templates = NOTIFICATION_TEMPLATES.get(template_type, NOTIFICATION_TEMPLATES["new_message"])
    return templates.get(language or FALLBACK_LANGUAGE, templates[FALLBACK_LANGUAGE])


def preview_text(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


async def send_fcm_notification(
    db: firestore.AsyncClient,
    user_id: str,
    token: str,
    title: str,
    body: str,
    data: Optional[Dict[str, str]] = None,
) -> bool:
    message = messaging.Message(
        notification=messaging.Notification(title=title, body=body),
        data=data or {},
        token=token,
    )
    try:
        # messaging.send is a blocking call, so run it in a separate thread
        response = await asyncio.to_thread(messaging.send, message)
        logger.info(f"Successfully sent FCM message to {user_id}: {response}")
        return True
    except messaging.UnregisteredError as e:
        logger.warning(f"FCM token of {user_id} is no longer registered: {e}")
        try:
            await crud_users.clear_fcm_token(db, user_id)
            logger.info(f"Removed stale FCM token of {user_id}")
        except Exception as cleanup_error:
            logger.error(
                f"Could not remove stale FCM token of {user_id}: {cleanup_error}",
                exc_info=True,
            )
    except FirebaseError as e:
        logger.error(f"Error sending FCM message to {user_id}: {e}", exc_info=True)
    except Exception as e:
        logger.error(
            f"Unexpected error sending FCM message to {user_id}: {e}", exc_info=True
        )
    return False


async def notify_partner_of_response(
    db: firestore.AsyncClient, question_id: str, response: ResponseRecord
) -> bool:
    """
    Runs after a response lands in dailyQuestions/{question_id}/responses.

    Marks the question active and pushes the message to the other partner.
    Never raises; returns whether a notification went out.
    """
    try:
        question = await crud_content.get_content(db, ContentKind.QUESTION, question_id)
        if question is None:
            logger.info(f"Question {question_id} not found; no partner notification")
            return False

        partner_id = partner_of(question.couple_id, response.user_id)
        if not partner_id:
            return False

        await crud_content.update_content(
            db,
            ContentKind.QUESTION,
            question_id,
            {
                "status": ContentStatus.ACTIVE.value,
                "lastResponseAt": firestore.SERVER_TIMESTAMP,
            },
        )

        sender, partner = await asyncio.gather(
            crud_users.get_user_profile(db, response.user_id),
            crud_users.get_user_profile(db, partner_id),
        )
        if sender is None or partner is None:
            logger.info(f"Missing user profile(s) for question {question_id}")
            return False

        if not partner.fcm_token:
            logger.info(f"No FCM token for {partner_id}")
            return False

        template = get_notification_template(partner.language_code, "new_message")
        sender_name = sender.name or response.user_name
        return await send_fcm_notification(
            db,
            partner_id,
            partner.fcm_token,
            title=template["title"],
            body=f"{sender_name}: {preview_text(response.text)}",
            data={
                "questionId": question_id,
                "senderId": response.user_id,
                "senderName": sender_name or "",
                "type": "new_message",
                "language": partner.language_code,
            },
        )
    except Exception as e:
        logger.error(
            f"Partner notification failed for question {question_id}: {e}", exc_info=True
        )
        return False


async def send_daily_reminder(db: firestore.AsyncClient, question: DailyContentItem) -> int:
    """Pushes the localized daily reminder to both partners. Returns the number sent."""
    sent = 0
    for user_id in couple_member_ids(question.couple_id):
        user = await crud_users.get_user_profile(db, user_id)
        if user is None or not user.fcm_token:
            logger.info(f"No FCM token for {user_id}; skipping daily reminder")
            continue

        template = get_notification_template(user.language_code, "daily_reminder")
        if await send_fcm_notification(
            db,
            user_id,
            user.fcm_token,
            title=template["title"],
            body=template["body"],
            data={
                "type": "daily_question",
                "questionId": question.id,
                "questionKey": question.content_key,
                "language": user.language_code,
            },
        ):
            sent += 1
    return sent
