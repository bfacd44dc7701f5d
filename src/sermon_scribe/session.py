# ABOUTME: Explicit user session passed into the pipeline entry points.
# ABOUTME: Carries the identity used for ownership stamping and the user's study settings.

from pydantic import BaseModel, Field

from sermon_scribe.config import Settings
from sermon_scribe.models import GenerationSettings, StudyDuration, StudyLength


class UserSession(BaseModel):
    """The signed-in user as seen by the pipeline."""

    user_id: str
    settings: GenerationSettings = Field(default_factory=GenerationSettings)

    @classmethod
    def from_settings(cls, settings: Settings, user_id: str | None = None) -> "UserSession":
        """Build a session from application defaults (used by the CLI)."""
        return cls(
            user_id=user_id or settings.default_user_id,
            settings=GenerationSettings(
                study_duration=StudyDuration(settings.default_study_duration),
                study_length=StudyLength(settings.default_study_length),
                supporting_references_count=min(
                    settings.default_supporting_references, settings.max_supporting_references
                ),
            ),
        )
