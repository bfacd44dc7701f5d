# ABOUTME: PostgreSQL-backed RecordStore built on the async repositories.
# ABOUTME: Converts between pydantic domain records and ORM rows.

import structlog

from sermon_scribe.db.models import BulletinRecord, StudyPlanRecord
from sermon_scribe.db.repository import BulletinRepository, StudyRepository
from sermon_scribe.db.session import get_session
from sermon_scribe.models import Bulletin, DayEntry, EventRecord, StudyPlan

log = structlog.get_logger()


def study_to_row(plan: StudyPlan) -> StudyPlanRecord:
    return StudyPlanRecord(
        id=plan.id,
        user_id=plan.user_id,
        sermon_title=plan.sermon_title,
        preacher=plan.preacher,
        summary=plan.summary,
        date_recorded=plan.date_recorded,
        original_audio_duration=plan.original_audio_duration,
        days=[day.model_dump(mode="json") for day in plan.days],
        is_completed=plan.is_completed,
        is_archived=plan.is_archived,
    )


def study_from_row(row: StudyPlanRecord) -> StudyPlan:
    return StudyPlan(
        id=row.id,
        user_id=row.user_id,
        sermon_title=row.sermon_title,
        preacher=row.preacher,
        summary=row.summary or "",
        date_recorded=row.date_recorded,
        original_audio_duration=row.original_audio_duration or 0,
        days=[DayEntry.model_validate(day) for day in row.days or []],
        is_completed=bool(row.is_completed),
        is_archived=bool(row.is_archived),
    )


def bulletin_to_row(bulletin: Bulletin) -> BulletinRecord:
    return BulletinRecord(
        id=bulletin.id,
        user_id=bulletin.user_id,
        title=bulletin.title,
        date_scanned=bulletin.date_scanned,
        raw_summary=bulletin.raw_summary,
        events=[event.model_dump(mode="json") for event in bulletin.events],
    )


def bulletin_from_row(row: BulletinRecord) -> Bulletin:
    return Bulletin(
        id=row.id,
        user_id=row.user_id,
        title=row.title or "Untitled Bulletin",
        date_scanned=row.date_scanned,
        raw_summary=row.raw_summary or "",
        events=[EventRecord.model_validate(event) for event in row.events or []],
    )


class DatabaseRecordStore:
    """RecordStore over PostgreSQL. Each call runs in its own session."""

    # --- Studies ---

    async def save_study(self, plan: StudyPlan) -> None:
        async with get_session() as session:
            await StudyRepository(session).save(study_to_row(plan))
        log.info("study_saved", study_id=plan.id, user_id=plan.user_id)

    async def list_studies(self, user_id: str, include_archived: bool = False) -> list[StudyPlan]:
        async with get_session() as session:
            rows = await StudyRepository(session).list_for_user(user_id, include_archived)
            return [study_from_row(row) for row in rows]

    async def get_study(self, user_id: str, study_id: str) -> StudyPlan | None:
        async with get_session() as session:
            row = await StudyRepository(session).get_by_id(user_id, study_id)
            return study_from_row(row) if row else None

    async def archive_study(self, user_id: str, study_id: str) -> bool:
        async with get_session() as session:
            row = await StudyRepository(session).get_by_id(user_id, study_id)
            if row is None:
                return False
            row.is_archived = True
        log.info("study_archived", study_id=study_id)
        return True

    async def set_day_completed(
        self, user_id: str, study_id: str, day: int, completed: bool = True
    ) -> StudyPlan | None:
        async with get_session() as session:
            repo = StudyRepository(session)
            row = await repo.get_by_id(user_id, study_id)
            if row is None:
                return None
            plan = study_from_row(row)
            if not plan.set_day_completed(day, completed):
                return None
            await repo.save(study_to_row(plan))
            return plan

    # --- Bulletins ---

    async def save_bulletin(self, bulletin: Bulletin) -> None:
        async with get_session() as session:
            await BulletinRepository(session).save(bulletin_to_row(bulletin))
        log.info("bulletin_saved", bulletin_id=bulletin.id, events=len(bulletin.events))

    async def list_bulletins(self, user_id: str) -> list[Bulletin]:
        async with get_session() as session:
            rows = await BulletinRepository(session).list_for_user(user_id)
            return [bulletin_from_row(row) for row in rows]

    async def list_prior_events(self, user_id: str) -> list[EventRecord]:
        bulletins = await self.list_bulletins(user_id)
        return [event for bulletin in bulletins for event in bulletin.events]

    async def get_event(self, user_id: str, event_id: str) -> EventRecord | None:
        events = await self.list_prior_events(user_id)
        return next((e for e in events if e.id == event_id), None)

    async def delete_bulletin(self, user_id: str, bulletin_id: str) -> bool:
        async with get_session() as session:
            deleted = await BulletinRepository(session).delete(user_id, bulletin_id)
        if deleted:
            log.info("bulletin_deleted", bulletin_id=bulletin_id)
        return deleted

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        async with get_session() as session:
            repo = BulletinRepository(session)
            for row in await repo.list_for_user(user_id):
                events = row.events or []
                remaining = [e for e in events if e.get("id") != event_id]
                if len(remaining) != len(events):
                    # reassign so SQLAlchemy sees the JSONB change
                    row.events = remaining
                    log.info("event_deleted", event_id=event_id, bulletin_id=row.id)
                    return True
        return False
