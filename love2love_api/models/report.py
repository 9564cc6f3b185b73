from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ContentReportRequest(BaseModel):
    message_id: Optional[str] = Field(None, alias="messageId")
    reported_user_id: Optional[str] = Field(None, alias="reportedUserId")
    reported_user_name: Optional[str] = Field(None, alias="reportedUserName")
    message_text: Optional[str] = Field(None, alias="messageText")
    reason: Optional[str] = None

    class Config:
        populate_by_name = True


class ContentReport(BaseModel):
    id: str
    message_id: str = Field(..., alias="messageId")
    reported_user_id: str = Field(..., alias="reportedUserId")
    reported_user_name: str = Field("Unknown user", alias="reportedUserName")
    reporter_user_id: str = Field(..., alias="reporterUserId")
    reporter_user_name: str = Field("Unknown reporter", alias="reporterUserName")
    message_text: str = Field(..., alias="messageText", max_length=500)
    reason: str
    status: ReportStatus = ReportStatus.PENDING
    severity: ReportSeverity = ReportSeverity.MEDIUM
    # warning, temporary_ban, permanent_ban, none
    moderation_action: Optional[str] = Field(None, alias="moderationAction")
    notes: str = ""
    reported_at: Optional[datetime] = Field(None, alias="reportedAt")
    reviewed_at: Optional[datetime] = Field(None, alias="reviewedAt")
    reviewed_by: Optional[str] = Field(None, alias="reviewedBy")

    class Config:
        populate_by_name = True
