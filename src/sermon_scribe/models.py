# ABOUTME: Pydantic models for study plans, bulletins, and generation inputs.
# ABOUTME: Separates untrusted model output (*Content) from stamped domain records.

import base64
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

MAX_SUPPORTING_REFERENCES = 5


class StudyDuration(int, Enum):
    """Number of days in a study plan."""

    FIVE_DAY = 5
    SEVEN_DAY = 7


class StudyLength(str, Enum):
    """Desired reading time per day."""

    SHORT = "5 mins"
    MEDIUM = "15 mins"
    LONG = "30 mins"

    @property
    def word_count(self) -> int:
        """Approximate target word count for one day's devotional."""
        return _WORD_COUNTS[self]


_WORD_COUNTS = {
    StudyLength.SHORT: 150,
    StudyLength.MEDIUM: 300,
    StudyLength.LONG: 600,
}


class GenerationSettings(BaseModel):
    """Per-user study preferences. Read-only to the pipeline."""

    study_duration: StudyDuration = StudyDuration.FIVE_DAY
    study_length: StudyLength = StudyLength.MEDIUM
    supporting_references_count: int = Field(default=2, ge=0, le=MAX_SUPPORTING_REFERENCES)
    church_name: str = ""
    service_times: list[str] = []


class MediaAttachment(BaseModel):
    """A raw binary capture (photo or audio) supplied by the user."""

    data: bytes
    mime_type: str
    filename: str | None = None
    duration_seconds: float | None = None

    @property
    def size(self) -> int:
        return len(self.data)


class EncodedMedia(BaseModel):
    """Binary payload paired with its MIME type, ready for transport."""

    mime_type: str
    data: bytes

    @property
    def base64_data(self) -> str:
        """Base64 text form, as it travels inside the request body."""
        return base64.b64encode(self.data).decode("ascii")


class GenerationInput(BaseModel):
    """Whatever the user supplied for one generation request."""

    audio: MediaAttachment | None = None
    images: list[MediaAttachment] = []
    text: str | None = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def is_empty(self) -> bool:
        return self.audio is None and not self.images and not self.has_text


# --- Untrusted generation output ---


class DayContent(BaseModel):
    """One day of a study plan as returned by the model."""

    day: int = Field(description="Day number, starting at 1.")
    topic: str
    scriptureReference: str = Field(
        description="Primary scripture reference in 'Book Chapter:Verse' form, e.g. 'John 3:16'."
    )
    supportingScriptures: list[str] = Field(
        default=[],
        description="Additional scripture references supporting the topic, e.g. 'Romans 8:28'.",
    )
    devotionalContent: str
    reflectionQuestion: str = Field(description="A deep question for personal application.")
    prayerFocus: str = Field(description="A short prayer prompt.")


class StudyPlanContent(BaseModel):
    """Study plan as returned by the model, before ownership stamping."""

    sermonTitle: str = Field(description="A catchy title for the sermon series.")
    preacher: str | None = Field(
        default=None,
        description="Name of the speaker if detected, otherwise 'Guest Speaker'.",
    )
    summary: str = Field(default="", description="A brief 2-sentence summary of the message.")
    days: list[DayContent] = []


class EventContent(BaseModel):
    """A datable event extracted from a bulletin image."""

    title: str
    date: str = Field(
        description="ISO date YYYY-MM-DD. If the year is missing, assume the next occurrence."
    )
    time: str = Field(default="", description="Time of the event, e.g. 7:00 PM.")
    location: str = ""
    description: str = ""


class BulletinContent(BaseModel):
    """Bulletin as returned by the model."""

    title: str = Field(description="A title for the bulletin, usually 'Announcements - [Date]'.")
    rawSummary: str = Field(
        default="",
        description="A brief summary of general announcements that aren't specific events.",
    )
    events: list[EventContent] = []


class LocationMatch(BaseModel):
    """A church returned by location search."""

    name: str
    address: str | None = None
    lat: float
    lng: float
    uri: str | None = None
    serviceTimes: list[str] = []


# --- Stamped domain records ---


class DayEntry(BaseModel):
    """One day of a stored study plan."""

    day: int
    topic: str
    scripture_reference: str
    supporting_scriptures: list[str] = []
    devotional_content: str
    reflection_question: str
    prayer_focus: str
    is_completed: bool = False


class StudyPlan(BaseModel):
    """Multi-day devotional plan owned by one user."""

    id: str
    user_id: str
    sermon_title: str
    preacher: str | None = None
    summary: str = ""
    date_recorded: datetime
    original_audio_duration: int = 0
    is_completed: bool = False
    is_archived: bool = False
    days: list[DayEntry]

    def set_day_completed(self, day: int, completed: bool = True) -> bool:
        """Mark one day done (or not). The plan completes when every day is done.

        Returns:
            False if the plan has no such day.
        """
        entry = next((d for d in self.days if d.day == day), None)
        if entry is None:
            return False
        entry.is_completed = completed
        self.is_completed = all(d.is_completed for d in self.days)
        return True


class EventRecord(BaseModel):
    """A calendar event extracted from a bulletin. Its id outlives its bulletin."""

    id: str
    title: str
    date: str
    time: str = ""
    location: str = ""
    description: str = ""


class Bulletin(BaseModel):
    """A scanned church bulletin with its extracted events."""

    id: str
    user_id: str
    date_scanned: datetime
    title: str
    raw_summary: str = ""
    events: list[EventRecord] = []
