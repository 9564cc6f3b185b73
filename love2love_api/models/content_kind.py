from enum import Enum
from typing import NamedTuple

from love2love_api.core.config import settings


class _KindLayout(NamedTuple):
    settings_collection: str
    content_collection: str
    key_prefix: str
    key_field: str  # Firestore field holding the catalog key
    day_field: str  # Firestore field holding the cycled day number


class ContentKind(str, Enum):
    QUESTION = "question"
    CHALLENGE = "challenge"

    @property
    def layout(self) -> _KindLayout:
        return _LAYOUTS[self]

    @property
    def settings_collection(self) -> str:
        return self.layout.settings_collection

    @property
    def content_collection(self) -> str:
        return self.layout.content_collection

    @property
    def key_prefix(self) -> str:
        return self.layout.key_prefix

    @property
    def key_field(self) -> str:
        return self.layout.key_field

    @property
    def day_field(self) -> str:
        return self.layout.day_field

    @property
    def catalog_size(self) -> int:
        # Read at call time so tests and deployments can override the catalog.
        if self is ContentKind.QUESTION:
            return settings.QUESTION_CATALOG_SIZE
        return settings.CHALLENGE_CATALOG_SIZE


_LAYOUTS = {
    ContentKind.QUESTION: _KindLayout(
        settings_collection="dailyQuestionSettings",
        content_collection="dailyQuestions",
        key_prefix="daily_question",
        key_field="questionKey",
        day_field="questionDay",
    ),
    ContentKind.CHALLENGE: _KindLayout(
        settings_collection="dailyChallengeSettings",
        content_collection="dailyChallenges",
        key_prefix="daily_challenge",
        key_field="challengeKey",
        day_field="challengeDay",
    ),
}
