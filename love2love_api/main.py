from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import firebase_admin
from firebase_admin import credentials
import logging
import os

from love2love_api.api.v1.endpoints import (
    daily_challenges,
    daily_questions,
    moderation,
    scheduler,
)
from love2love_api.core.config import settings
from love2love_api.core.errors import CallableError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def init_firebase() -> None:
    if firebase_admin._apps:
        return

    cred_path = settings.GOOGLE_APPLICATION_CREDENTIALS
    if not cred_path:
        # On Cloud Run / Functions the runtime service account is picked up automatically
        logger.info("GOOGLE_APPLICATION_CREDENTIALS not set; using application default credentials.")
        firebase_admin.initialize_app()
        return

    # Explicitly set the environment variable for other Google Cloud libraries
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = cred_path
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred)
    logger.info(f"Firebase Admin SDK initialized with credentials from {cred_path}.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_firebase()
    except FileNotFoundError:
        logger.error(
            f"Firebase credentials file not found at path: {settings.GOOGLE_APPLICATION_CREDENTIALS}."
        )
    except Exception as e:
        logger.error(f"Failed to initialize Firebase Admin SDK: {e}", exc_info=True)

    yield


app = FastAPI(
    title="Love2Love API",
    description="Daily questions and challenges for couples: scheduling, responses and moderation.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(CallableError)
async def callable_error_handler(request: Request, exc: CallableError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(
    daily_questions.router, prefix="/api/v1/daily-questions", tags=["daily-questions"]
)
app.include_router(
    daily_challenges.router, prefix="/api/v1/daily-challenges", tags=["daily-challenges"]
)
app.include_router(moderation.router, prefix="/api/v1/moderation", tags=["moderation"])
app.include_router(scheduler.router, prefix="/api/v1/scheduler", tags=["scheduler"])


@app.get("/")
async def read_root():
    return {"message": "Welcome to Love2Love API"}


# To run this application (from the project root directory):
# uvicorn love2love_api.main:app --reload
