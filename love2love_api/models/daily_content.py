from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from love2love_api.models.content_kind import ContentKind


class ContentStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"


class DailyContentItem(BaseModel):
    """
    A question or challenge instance for one couple on one UTC date.

    The catalog key and day are stored under kind-specific Firestore fields
    (questionKey/questionDay or challengeKey/challengeDay); the CRUD layer maps
    them onto content_key/content_day.
    """

    id: str = Field(..., description="Document id: {coupleId}_{yyyy-MM-dd}")
    couple_id: str = Field(..., alias="coupleId")
    content_key: str = Field(..., description="Catalog key, e.g. daily_question_7")
    content_day: int = Field(..., ge=1, description="Cycled day used to derive the key")
    scheduled_date: str = Field(..., alias="scheduledDate")
    scheduled_date_time: Optional[datetime] = Field(None, alias="scheduledDateTime")
    status: ContentStatus = ContentStatus.PENDING
    timezone: str = "Europe/Paris"
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    last_response_at: Optional[datetime] = Field(None, alias="lastResponseAt")
    # Challenge-only
    is_completed: Optional[bool] = Field(None, alias="isCompleted")
    completed_at: Optional[datetime] = Field(None, alias="completedAt")

    class Config:
        populate_by_name = True

    def as_payload(self, kind: ContentKind) -> dict:
        payload = {
            "id": self.id,
            "coupleId": self.couple_id,
            kind.key_field: self.content_key,
            kind.day_field: self.content_day,
            "scheduledDate": self.scheduled_date,
            "status": self.status.value,
            "timezone": self.timezone,
        }
        if kind is ContentKind.CHALLENGE:
            payload["isCompleted"] = bool(self.is_completed)
            payload["completedAt"] = (
                self.completed_at.isoformat() if self.completed_at else None
            )
        return payload


class GenerationResult(BaseModel):
    content: DailyContentItem
    already_exists: bool


class GenerateDailyQuestionRequest(BaseModel):
    couple_id: str = Field(..., alias="coupleId", min_length=1)
    question_day: Optional[int] = Field(
        None, alias="questionDay", ge=1, description="Client-supplied day; computed when omitted"
    )
    timezone: Optional[str] = None

    class Config:
        populate_by_name = True


class GenerateDailyChallengeRequest(BaseModel):
    couple_id: str = Field(..., alias="coupleId", min_length=1)
    challenge_day: Optional[int] = Field(
        None, alias="challengeDay", ge=1, description="Client-supplied day; computed when omitted"
    )
    timezone: Optional[str] = None

    class Config:
        populate_by_name = True
