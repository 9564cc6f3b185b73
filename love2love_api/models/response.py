from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ResponseRecord(BaseModel):
    id: str = Field(..., description="Document id inside the responses sub-collection")
    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    text: str
    # Server timestamp; None until read back from Firestore
    responded_at: Optional[datetime] = Field(None, alias="respondedAt")
    status: str = "answered"
    is_read_by_partner: bool = Field(False, alias="isReadByPartner")

    class Config:
        populate_by_name = True


class SubmitResponseRequest(BaseModel):
    question_id: str = Field(..., alias="questionId")
    response_text: str = Field(..., alias="responseText")
    user_name: str = Field(..., alias="userName")

    class Config:
        populate_by_name = True


class MigrateResponsesRequest(BaseModel):
    couple_id: Optional[str] = Field(None, alias="coupleId")
    admin_secret: Optional[str] = Field(None, alias="adminSecret")

    class Config:
        populate_by_name = True


class MigrationSummary(BaseModel):
    migrated_count: int = Field(0, alias="migratedCount")
    skipped_count: int = Field(0, alias="skippedCount")
    error_count: int = Field(0, alias="errorCount")

    class Config:
        populate_by_name = True
