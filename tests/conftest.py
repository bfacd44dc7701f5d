# ABOUTME: Pytest fixtures and configuration for Sermon Scribe tests.
# ABOUTME: Provides settings, sessions, a temp-dir record store, sample responses, and images.

import json
from io import BytesIO
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image
from pydantic import SecretStr

from sermon_scribe.ai.service import AIService
from sermon_scribe.config import Settings
from sermon_scribe.errors import ProcessingFailure
from sermon_scribe.models import (
    Bulletin,
    GenerationSettings,
    MediaAttachment,
    StudyDuration,
    StudyLength,
    StudyPlan,
)
from sermon_scribe.pipeline.state import ProcessingState
from sermon_scribe.services.storage import LocalRecordStore
from sermon_scribe.session import UserSession


def _study_plan_response(days: int = 5, refs: int = 2, **overrides) -> str:
    """Build a study plan JSON payload shaped like a Gemini response."""
    payload = {
        "sermonTitle": "Grace That Holds",
        "preacher": "Pastor Ruth Okafor",
        "summary": "God's grace sustains us. It also sends us out.",
        "days": [
            {
                "day": index,
                "topic": f"Topic {index}",
                "scriptureReference": "Ephesians 2:8",
                "supportingScriptures": [f"Romans {index}:{r + 1}" for r in range(refs)],
                "devotionalContent": "Grace is the unearned favor of God. " * 10,
                "reflectionQuestion": "Where do you need grace today?",
                "prayerFocus": "Thank God for His patience.",
                "isCompleted": True,
            }
            for index in range(1, days + 1)
        ],
    }
    payload.update(overrides)
    return json.dumps(payload)


def _bulletin_response(events: list[dict] | None = None, **overrides) -> str:
    """Build a bulletin JSON payload shaped like a Gemini response."""
    payload = {
        "title": "Announcements - October 2024",
        "rawSummary": "Choir practice moves to Thursdays.",
        "events": events
        if events is not None
        else [
            {
                "title": "Fall Picnic",
                "date": "2024-10-05",
                "time": "12:30 PM",
                "location": "Fellowship Hall lawn",
                "description": "Bring a dish to share.",
            }
        ],
    }
    payload.update(overrides)
    return json.dumps(payload)


def _jpeg(width: int = 64, height: int = 48, color: str = "navy") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
    return buffer.getvalue()


class RecordingObserver:
    """Observer that keeps every notification for assertions."""

    def __init__(self) -> None:
        self.states: list[ProcessingState] = []
        self.percents: list[int] = []
        self.successes: list[StudyPlan | Bulletin] = []
        self.failures: list[ProcessingFailure] = []

    def on_progress(self, state: ProcessingState, percent: int) -> None:
        self.states.append(state)
        self.percents.append(percent)

    def on_success(self, result: StudyPlan | Bulletin) -> None:
        self.successes.append(result)

    def on_failure(self, failure: ProcessingFailure) -> None:
        self.failures.append(failure)


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create mock settings for testing."""
    return Settings(
        gemini_api_key=SecretStr("test-api-key"),
        gemini_model="gemini-test",
        processing_timeout_seconds=5.0,
        image_max_edge=1200,
        image_jpeg_quality=85,
        data_dir=tmp_path / "data",
        log_level="DEBUG",
    )


@pytest.fixture
def generation_settings() -> GenerationSettings:
    """Five-day, medium-length study with two supporting references."""
    return GenerationSettings(
        study_duration=StudyDuration.FIVE_DAY,
        study_length=StudyLength.MEDIUM,
        supporting_references_count=2,
    )


@pytest.fixture
def user_session(generation_settings: GenerationSettings) -> UserSession:
    return UserSession(user_id="user-123", settings=generation_settings)


@pytest.fixture
def local_store(mock_settings: Settings) -> LocalRecordStore:
    return LocalRecordStore(mock_settings)


@pytest.fixture
def mock_ai_service() -> AsyncMock:
    """AIService double whose generation methods are awaitable mocks."""
    return AsyncMock(spec=AIService)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def jpeg_image() -> MediaAttachment:
    return MediaAttachment(data=_jpeg(), mime_type="image/jpeg", filename="notes.jpg")


@pytest.fixture
def study_plan_response():
    """Factory for study plan response text."""
    return _study_plan_response


@pytest.fixture
def bulletin_response():
    """Factory for bulletin response text."""
    return _bulletin_response
