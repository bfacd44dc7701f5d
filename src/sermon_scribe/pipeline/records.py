# ABOUTME: Stamps validated generation output with identity, ownership, and timestamps.
# ABOUTME: Drops bulletin events whose (title, date) already exists in stored history.

from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from sermon_scribe.models import (
    Bulletin,
    BulletinContent,
    DayEntry,
    EventRecord,
    StudyPlan,
    StudyPlanContent,
)

log = structlog.get_logger()


def dedup_key(title: str, event_date: str) -> tuple[str, str]:
    """Equality key for events: trimmed, case-insensitive title plus the exact date string."""
    return title.strip().lower(), event_date


class RecordAssembler:
    """Builds stored records from model output for a known user."""

    def build_study_plan(
        self,
        content: StudyPlanContent,
        user_id: str,
        audio_duration: float | None = None,
    ) -> StudyPlan:
        """Create a StudyPlan owned by `user_id`.

        Every day starts not completed, whatever the model returned.
        """
        plan = StudyPlan(
            id=str(uuid4()),
            user_id=user_id,
            sermon_title=content.sermonTitle,
            preacher=content.preacher,
            summary=content.summary,
            date_recorded=datetime.now(UTC),
            original_audio_duration=round(audio_duration) if audio_duration else 0,
            is_completed=False,
            days=[
                DayEntry(
                    day=day.day,
                    topic=day.topic,
                    scripture_reference=day.scriptureReference,
                    supporting_scriptures=list(day.supportingScriptures),
                    devotional_content=day.devotionalContent,
                    reflection_question=day.reflectionQuestion,
                    prayer_focus=day.prayerFocus,
                    is_completed=False,
                )
                for day in content.days
            ],
        )
        log.info("study_plan_assembled", study_id=plan.id, days=len(plan.days))
        return plan

    def build_bulletin(
        self,
        content: BulletinContent,
        user_id: str,
        prior_events: Iterable[EventRecord],
    ) -> Bulletin:
        """Create a Bulletin owned by `user_id`, keeping only new events.

        An event is dropped when any previously stored event, from any bulletin,
        has the same trimmed case-insensitive title and the exact same date string.
        Events within the same scan are never compared with each other, so two
        services with one title on one day are both kept.
        """
        stored = {dedup_key(event.title, event.date) for event in prior_events}

        events: list[EventRecord] = []
        skipped = 0
        for candidate in content.events:
            key = dedup_key(candidate.title, candidate.date)
            if key in stored:
                skipped += 1
                log.debug("duplicate_event_skipped", title=candidate.title, date=candidate.date)
                continue
            events.append(
                EventRecord(
                    id=str(uuid4()),
                    title=candidate.title,
                    date=candidate.date,
                    time=candidate.time,
                    location=candidate.location,
                    description=candidate.description,
                )
            )

        bulletin = Bulletin(
            id=str(uuid4()),
            user_id=user_id,
            date_scanned=datetime.now(UTC),
            title=content.title,
            raw_summary=content.rawSummary,
            events=events,
        )
        log.info(
            "bulletin_assembled",
            bulletin_id=bulletin.id,
            new_events=len(events),
            duplicates_skipped=skipped,
        )
        return bulletin
