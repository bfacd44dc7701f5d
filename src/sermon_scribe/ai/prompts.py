# ABOUTME: Instruction templates for Gemini study, bulletin, and church search requests.
# ABOUTME: Study instructions are templated from the user's GenerationSettings.

from datetime import date

from sermon_scribe.models import GenerationSettings

STUDY_PLAN_INSTRUCTION = """You are an expert Bible Study creator.
Create a {day_count}-day personal Bible study plan based on the main themes, scriptures, and applications found in the provided message.
The user wants a {study_length} study each day (approx {word_count} words).
Include exactly {reference_count} supporting scripture references per day.
Number the days consecutively starting at 1 and return exactly {day_count} days.
Ensure the tone is encouraging, theologically sound, and practical.
IMPORTANT: Format all scripture references cleanly as "Book Chapter:Verse" (e.g., "John 3:16", "2 Timothy 1:7") without extra text or parentheses."""

CHURCH_CONTEXT = """
This message was preached at {church_name}. Where it fits naturally, encourage the reader to connect each day's application with that church community."""

SERVICE_TIMES_CONTEXT = " Where a day suggests gathering with others, you may mention the church's services at {service_times}."

AUDIO_SOURCE_HINT = "\nListen to the attached sermon audio."
IMAGE_SOURCE_HINT = "\nAnalyze the attached images of the sermon notes."
TEXT_SOURCE_HINT = "\nUse the sermon transcript provided above."

TRANSCRIPT_BLOCK = 'Here is the transcript: "{text}"'

BULLETIN_INSTRUCTION = """Analyze these images of a church bulletin/program.
Extract a list of upcoming events with their dates, times, and locations.
For the date, infer the correct YYYY-MM-DD based on the current date ({today}).
Write times as they would appear on a clock, e.g. "7:00 PM".
Also provide a summary of other announcements."""

CHURCH_SEARCH_PROMPT = """Find the church matching "{query}".
Provide the name, address, latitude, and longitude for the top matches (max 3).
Crucial: Try to find Sunday service times from the available information and include them as an array of strings (e.g. ["9:00 AM", "11:00 AM"]). If unknown, return empty array.
Return the response as a raw JSON array of objects.
Each object must have these keys: "name", "address", "lat" (number), "lng" (number), "uri" (Google Maps link if available), "serviceTimes" (array of strings).
Do not include markdown formatting."""


def build_study_instruction(
    settings: GenerationSettings,
    *,
    has_audio: bool = False,
    has_images: bool = False,
    has_text: bool = False,
) -> str:
    """Render the study directive for the given settings and evidence kinds.

    The directive always states the day count, the word-count tier and the
    reference count as literal numbers.
    """
    instruction = STUDY_PLAN_INSTRUCTION.format(
        day_count=settings.study_duration.value,
        study_length=settings.study_length.value,
        word_count=settings.study_length.word_count,
        reference_count=settings.supporting_references_count,
    )

    if settings.church_name.strip():
        instruction += CHURCH_CONTEXT.format(church_name=settings.church_name.strip())
        service_times = [t.strip() for t in settings.service_times if t.strip()]
        if service_times:
            instruction += SERVICE_TIMES_CONTEXT.format(service_times=", ".join(service_times))

    if has_audio:
        instruction += AUDIO_SOURCE_HINT
    if has_images:
        instruction += IMAGE_SOURCE_HINT
    if has_text:
        instruction += TEXT_SOURCE_HINT

    return instruction


def build_bulletin_instruction(today: date | None = None) -> str:
    today = today or date.today()
    return BULLETIN_INSTRUCTION.format(today=today.isoformat())


def build_church_search_prompt(query: str) -> str:
    return CHURCH_SEARCH_PROMPT.format(query=query.strip())
