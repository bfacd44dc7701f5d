# ABOUTME: Parsing and structural validation of raw Gemini responses.
# ABOUTME: Turns untrusted model text into StudyPlanContent, BulletinContent, or LocationMatch lists.

import html
import json
import re
from typing import Any

import structlog
from pydantic import ValidationError

from sermon_scribe.errors import IncompleteGenerationError, MalformedResponseError
from sermon_scribe.models import (
    BulletinContent,
    DayContent,
    EventContent,
    GenerationSettings,
    LocationMatch,
    StudyPlanContent,
)

log = structlog.get_logger()

PREVIEW_CHARS = 200

_FENCE_PATTERN = re.compile(r"^```(?:json|JSON)?\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences from LLM response.

    Gemini often wraps JSON responses in ```json ... ``` blocks.
    """
    match = _FENCE_PATTERN.match(text.strip())
    if match:
        return match.group(1).strip()
    return text.strip()


def fix_json_trailing_commas(text: str) -> str:
    """Remove trailing commas before } or ] (common LLM error)."""
    text = re.sub(r",\s*}", "}", text)
    return re.sub(r",\s*]", "]", text)


def unescape_html_entities(data: Any) -> Any:
    """Recursively unescape HTML entities (&#39; and friends) in parsed JSON values."""
    if isinstance(data, str):
        return html.unescape(data)
    if isinstance(data, dict):
        return {k: unescape_html_entities(v) for k, v in data.items()}
    if isinstance(data, list):
        return [unescape_html_entities(item) for item in data]
    return data


def _preview(text: str) -> str:
    return text[:PREVIEW_CHARS] + "..." if len(text) > PREVIEW_CHARS else text


def parse_json_response(response: str) -> Any:
    """Parse JSON from an LLM response, handling common issues.

    Handles:
    - Markdown code fences (```json ... ```)
    - Trailing commas

    Raises:
        MalformedResponseError: If the text is empty or not valid JSON after fixes.
            The message carries a truncated preview for diagnostics.
    """
    if not response or not response.strip():
        raise MalformedResponseError("Response was empty")

    cleaned = fix_json_trailing_commas(strip_markdown_fences(response))

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        log.error("json_parse_failed", error=str(e), response_preview=_preview(cleaned))
        raise MalformedResponseError(
            f"Response is not valid JSON: {e.msg}", preview=_preview(cleaned)
        ) from e

    return unescape_html_entities(data)


class ResponseValidator:
    """Applies the per-use-case output contract to parsed model responses."""

    def validate_study_plan(
        self,
        raw: str,
        settings: GenerationSettings,
    ) -> StudyPlanContent:
        """Parse and check a study plan response.

        Days are ordered by their index and renumbered from 1. Extra days beyond the
        configured duration and extra supporting references are dropped.

        Raises:
            MalformedResponseError: Unparseable text or wrong structure.
            IncompleteGenerationError: No days, or fewer days than configured.
        """
        data = parse_json_response(raw)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "Study plan response is not an object", preview=_preview(raw)
            )

        if not data.get("days"):
            log.warning("study_plan_without_days", keys=sorted(data.keys()))
            raise IncompleteGenerationError("Generated study plan contains no days")

        try:
            content = StudyPlanContent.model_validate(data)
        except ValidationError as e:
            log.error("study_plan_validation_failed", errors=e.error_count())
            raise MalformedResponseError(
                f"Study plan does not match the expected shape: {e.error_count()} error(s)",
                preview=_preview(raw),
            ) from e

        expected_days = settings.study_duration.value
        if len(content.days) < expected_days:
            raise IncompleteGenerationError(
                f"Generated study plan has {len(content.days)} of {expected_days} days"
            )
        if len(content.days) > expected_days:
            log.warning("study_plan_days_truncated", returned=len(content.days), kept=expected_days)

        ordered = sorted(content.days, key=lambda d: d.day)[:expected_days]
        reference_limit = settings.supporting_references_count
        content.days = [
            DayContent(
                **{
                    **day.model_dump(),
                    "day": index,
                    "supportingScriptures": day.supportingScriptures[:reference_limit],
                }
            )
            for index, day in enumerate(ordered, start=1)
        ]
        return content

    def validate_bulletin(self, raw: str) -> BulletinContent:
        """Parse a bulletin response.

        A missing summary or an empty event list is valid: some bulletins only
        carry announcements. Events missing a title or date are dropped one by
        one; the rest of the bulletin is kept.
        """
        data = parse_json_response(raw)
        if not isinstance(data, dict):
            raise MalformedResponseError("Bulletin response is not an object", preview=_preview(raw))

        if isinstance(data.get("events"), list):
            data["events"] = [event for event in data["events"] if _is_usable_event(event)]

        try:
            content = BulletinContent.model_validate(data)
        except ValidationError as e:
            log.error("bulletin_validation_failed", errors=e.error_count())
            raise MalformedResponseError(
                f"Bulletin does not match the expected shape: {e.error_count()} error(s)",
                preview=_preview(raw),
            ) from e

        if not content.events:
            log.info("bulletin_without_events", title=content.title)
        return content

    def validate_locations(self, raw: str) -> list[LocationMatch]:
        """Parse a church search response, keeping only usable entries.

        Entries need a string name and numeric lat/lng; anything else is dropped
        individually rather than failing the whole batch.
        """
        data = parse_json_response(raw)
        if not isinstance(data, list):
            log.warning("location_response_not_a_list", type=type(data).__name__)
            return []

        matches: list[LocationMatch] = []
        for entry in data:
            if not _is_usable_location(entry):
                log.debug("location_entry_dropped", entry=_preview(repr(entry)))
                continue
            try:
                matches.append(LocationMatch.model_validate(entry))
            except ValidationError:
                log.debug("location_entry_dropped", entry=_preview(repr(entry)))

        return matches


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_usable_event(entry: Any) -> bool:
    try:
        EventContent.model_validate(entry)
    except ValidationError:
        log.debug("bulletin_event_dropped", entry=_preview(repr(entry)))
        return False
    return True


def _is_usable_location(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("name"), str)
        and _is_number(entry.get("lat"))
        and _is_number(entry.get("lng"))
    )
