from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CoupleContentSettings(BaseModel):
    # Pydantic field name: API exposure | Firestore field name (via alias)
    couple_id: str = Field(..., alias="coupleId", description="Composite id of the two partners")
    start_date: Optional[datetime] = Field(
        None, alias="startDate", description="UTC midnight of content day 1"
    )
    timezone: str = Field(
        "Europe/Paris", description="IANA timezone used to decide when to generate"
    )
    current_day: int = Field(
        1, alias="currentDay", ge=1, description="Last generated (uncycled) day number"
    )
    next_scheduled_date: Optional[str] = Field(
        None, alias="nextScheduledDate", description="UTC date (yyyy-MM-dd) of the next generation"
    )
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    last_visit_date: Optional[datetime] = Field(None, alias="lastVisitDate")
    last_content_generated: Optional[datetime] = Field(None, alias="lastContentGenerated")

    class Config:
        populate_by_name = True


class SettingsRequest(BaseModel):
    couple_id: str = Field(..., alias="coupleId", min_length=1)
    timezone: Optional[str] = Field(None, description="IANA timezone, defaults to Europe/Paris")

    class Config:
        populate_by_name = True


class ResetSettingsRequest(BaseModel):
    couple_id: str = Field(..., alias="coupleId", min_length=1)

    class Config:
        populate_by_name = True
