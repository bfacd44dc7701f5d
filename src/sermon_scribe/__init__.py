# ABOUTME: Main package for Sermon Scribe study plan and bulletin generation.
# ABOUTME: Exports configuration and the core domain models.

from sermon_scribe.config import get_settings
from sermon_scribe.models import (
    Bulletin,
    EventRecord,
    GenerationInput,
    GenerationSettings,
    StudyPlan,
)

__all__ = [
    "get_settings",
    "Bulletin",
    "EventRecord",
    "GenerationInput",
    "GenerationSettings",
    "StudyPlan",
]
