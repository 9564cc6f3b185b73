import asyncio
import hmac
import logging
from typing import Optional

from fastapi import Header
from firebase_admin import auth, firestore

from love2love_api.core.config import settings
from love2love_api.core.errors import CallableError

logger = logging.getLogger(__name__)


def get_db() -> firestore.AsyncClient:
    # Firebase Admin SDK must be initialized (main.py lifespan) before this is called.
    return firestore.AsyncClient()


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
) -> str:
    """
    Resolves the caller's Firebase uid from an "Authorization: Bearer <id token>" header.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise CallableError.unauthenticated()

    id_token = authorization.split(" ", 1)[1].strip()
    if not id_token:
        raise CallableError.unauthenticated()

    try:
        # verify_id_token may fetch Google's public keys, so keep it off the event loop
        decoded = await asyncio.to_thread(auth.verify_id_token, id_token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError) as e:
        logger.warning(f"Rejected ID token: {e}")
        raise CallableError.unauthenticated()

    return decoded["uid"]


async def verify_scheduler_token(
    x_scheduler_token: Optional[str] = Header(None),
) -> None:
    expected = settings.SCHEDULER_SECRET
    if not expected:
        logger.error("SCHEDULER_SECRET is not configured; refusing scheduler call.")
        raise CallableError.unauthenticated("Scheduler is not configured")
    if not x_scheduler_token or not hmac.compare_digest(x_scheduler_token, expected):
        raise CallableError.unauthenticated("Invalid scheduler token")
