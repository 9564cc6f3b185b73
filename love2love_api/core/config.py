# Application settings, loaded from the environment and the project .env file.

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import os


class Settings(BaseSettings):
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = Field(
        None,
        description="Path to the Firebase service account key JSON file. "
        "Application default credentials are used when unset.",
    )

    DEFAULT_TIMEZONE: str = Field(
        "Europe/Paris", description="IANA timezone assigned to new couples"
    )
    QUESTION_CATALOG_SIZE: int = Field(
        51, ge=1, description="Number of daily_question_N keys in the catalog"
    )
    CHALLENGE_CATALOG_SIZE: int = Field(
        53, ge=1, description="Number of daily_challenge_N keys in the catalog"
    )
    LOCAL_TRIGGER_HOUR: int = Field(
        0, ge=0, le=23, description="Local hour at which the hourly scheduler generates content"
    )

    SCHEDULER_SECRET: Optional[str] = Field(
        None, description="Shared secret expected in the X-Scheduler-Token header"
    )
    ADMIN_SECRET: Optional[str] = Field(
        None, description="Secret that unlocks couple-wide response migrations"
    )

    LOG_LEVEL: str = "INFO"

    # The .env file is read from the project root (one level above the package).
    model_config = SettingsConfigDict(
        env_file=os.path.join(
            os.path.dirname(
                os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            ),
            ".env",
        ),
        extra="ignore",
    )


# Instantiate the settings
settings = Settings()
