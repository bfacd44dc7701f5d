# ABOUTME: Error taxonomy for the ingestion and generation pipeline.
# ABOUTME: Maps every failure to a displayable message/detail pair.

from pydantic import BaseModel


class ScribeError(Exception):
    """Base class for pipeline errors.

    Subclasses carry a human-readable headline and a user-safe detail so the
    processing layer never has to show a raw technical message.
    """

    headline = "Something Went Wrong"
    user_detail = "An unexpected error occurred. Please try again."
    retryable = True


class EmptyInputError(ScribeError):
    """No usable input was supplied; raised before any network call."""

    headline = "Nothing To Process"
    user_detail = "Please record audio, upload a file, paste text, or add images."
    retryable = False


class GenerationUnavailableError(ScribeError):
    """Generative model is not configured (missing credential)."""

    headline = "Service Unavailable"
    user_detail = "The study generator is not configured. Please contact support."
    retryable = False


class GenerationEmptyResponseError(ScribeError):
    """The model call completed but returned no text."""

    headline = "No Response"
    user_detail = "The generator returned nothing. Please try again."


class MalformedResponseError(ScribeError):
    """The model returned text that could not be parsed into the expected shape."""

    headline = "Unreadable Response"
    user_detail = "The generator returned an unexpected format. Please try again."

    def __init__(self, message: str, preview: str = "") -> None:
        self.preview = preview
        if preview:
            message = f"{message} (response preview: {preview!r})"
        super().__init__(message)


class IncompleteGenerationError(ScribeError):
    """The response parsed but is semantically empty or short."""

    headline = "Incomplete Study"
    user_detail = "The generated study was incomplete. Please try again."


class ProcessingTimeoutError(ScribeError):
    """The local watchdog fired before generation finished."""

    headline = "Processing Timeout"
    user_detail = (
        "The server is taking too long to respond. "
        "Don't worry, your data might still be processing in the background."
    )


class ProcessingBusyError(ScribeError):
    """A second request arrived while one was still in flight."""

    headline = "Already Processing"
    user_detail = "Please wait for the current request to finish."


class ProcessingFailure(BaseModel):
    """Displayable failure shape handed to the UI layer."""

    message: str
    detail: str
    retryable: bool = True


def to_failure(error: BaseException, fallback_headline: str) -> ProcessingFailure:
    """Translate any exception into a displayable failure.

    Pipeline errors keep their own headline. Anything else (transport errors,
    storage errors) is shown under the job's fallback headline with a generic detail.
    Only missing configuration and empty input are marked not retryable.
    """
    if isinstance(error, ScribeError):
        return ProcessingFailure(
            message=error.headline,
            detail=error.user_detail,
            retryable=error.retryable,
        )
    return ProcessingFailure(
        message=fallback_headline,
        detail="We couldn't complete your request. Please check your connection and try again.",
    )
