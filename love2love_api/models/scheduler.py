from pydantic import BaseModel, Field
from typing import List, Optional


class SchedulerRunSummary(BaseModel):
    processed: int = 0
    generated: int = 0
    skipped: int = 0
    errors: int = 0
    utc_hour: Optional[int] = Field(None, alias="utcHour")
    timezones: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ReminderRunSummary(BaseModel):
    questions_checked: int = Field(0, alias="questionsChecked")
    notifications_sent: int = Field(0, alias="notificationsSent")

    class Config:
        populate_by_name = True
