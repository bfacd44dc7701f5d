# ABOUTME: Processing states, cosmetic progress percentages, and the observer protocol.
# ABOUTME: Observers receive discrete transitions plus a terminal success or failure.

from enum import Enum
from typing import Protocol

from sermon_scribe.errors import ProcessingFailure
from sermon_scribe.models import Bulletin, StudyPlan


class ProcessingState(str, Enum):
    IDLE = "IDLE"
    OPTIMIZING = "OPTIMIZING"
    ANALYZING = "ANALYZING"
    RESEARCHING = "RESEARCHING"
    FINALIZING = "FINALIZING"
    FAILED = "FAILED"


# Display only; never used for control flow
STATE_PROGRESS = {
    ProcessingState.IDLE: 0,
    ProcessingState.OPTIMIZING: 20,
    ProcessingState.ANALYZING: 40,
    ProcessingState.RESEARCHING: 70,
    ProcessingState.FINALIZING: 95,
    ProcessingState.FAILED: 0,
}

STATE_MESSAGES = {
    ProcessingState.IDLE: "",
    ProcessingState.OPTIMIZING: "Optimizing Images...",
    ProcessingState.ANALYZING: "Reading Notes...",
    ProcessingState.RESEARCHING: "Crafting Study Plan...",
    ProcessingState.FINALIZING: "Saving...",
    ProcessingState.FAILED: "Something went wrong",
}


class JobKind(str, Enum):
    """What the user asked for; selects the generation label and failure headline."""

    AUDIO_STUDY = "audio_study"
    IMAGE_STUDY = "image_study"
    TEXT_STUDY = "text_study"
    BULLETIN = "bulletin"

    @property
    def generation_state(self) -> ProcessingState:
        if self is JobKind.TEXT_STUDY:
            return ProcessingState.RESEARCHING
        return ProcessingState.ANALYZING

    @property
    def failure_headline(self) -> str:
        return _FAILURE_HEADLINES[self]


_FAILURE_HEADLINES = {
    JobKind.AUDIO_STUDY: "Audio Processing Failed",
    JobKind.IMAGE_STUDY: "Recognition Failed",
    JobKind.TEXT_STUDY: "Study Generation Failed",
    JobKind.BULLETIN: "Recognition Failed",
}


class ProcessingObserver(Protocol):
    """Receives progress from the processing state machine."""

    def on_progress(self, state: ProcessingState, percent: int) -> None: ...

    def on_success(self, result: StudyPlan | Bulletin) -> None: ...

    def on_failure(self, failure: ProcessingFailure) -> None: ...


class NullObserver:
    """Observer that ignores every notification."""

    def on_progress(self, state: ProcessingState, percent: int) -> None:
        pass

    def on_success(self, result: StudyPlan | Bulletin) -> None:
        pass

    def on_failure(self, failure: ProcessingFailure) -> None:
        pass
