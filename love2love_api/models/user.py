from pydantic import BaseModel, Field
from typing import Optional


class UserProfile(BaseModel):
    # The document ID in the users collection is the Firebase uid.
    # Only the fields the notification and moderation flows read are modeled.
    user_id: str
    name: Optional[str] = None
    fcm_token: Optional[str] = Field(None, alias="fcmToken")
    language_code: str = Field("fr", alias="languageCode")

    class Config:
        populate_by_name = True
