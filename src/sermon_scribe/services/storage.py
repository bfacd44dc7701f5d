# ABOUTME: Persistence contract for generated records plus a local JSON-file implementation.
# ABOUTME: Studies and bulletins are upserted by id and scoped per user, newest first.

from pathlib import Path
from typing import Protocol

import structlog
from pydantic import TypeAdapter

from sermon_scribe.config import Settings, get_settings
from sermon_scribe.models import Bulletin, EventRecord, StudyPlan

log = structlog.get_logger()

_studies_adapter = TypeAdapter(list[StudyPlan])
_bulletins_adapter = TypeAdapter(list[Bulletin])


class RecordStore(Protocol):
    """Storage collaborator used by the processing pipeline and the CLI."""

    async def save_study(self, plan: StudyPlan) -> None: ...

    async def list_studies(self, user_id: str, include_archived: bool = False) -> list[StudyPlan]: ...

    async def get_study(self, user_id: str, study_id: str) -> StudyPlan | None: ...

    async def archive_study(self, user_id: str, study_id: str) -> bool: ...

    async def set_day_completed(
        self, user_id: str, study_id: str, day: int, completed: bool = True
    ) -> StudyPlan | None: ...

    async def save_bulletin(self, bulletin: Bulletin) -> None: ...

    async def list_bulletins(self, user_id: str) -> list[Bulletin]: ...

    async def list_prior_events(self, user_id: str) -> list[EventRecord]: ...

    async def get_event(self, user_id: str, event_id: str) -> EventRecord | None: ...

    async def delete_bulletin(self, user_id: str, bulletin_id: str) -> bool: ...

    async def delete_event(self, user_id: str, event_id: str) -> bool: ...


def _upsert(records: list, record) -> list:
    """Replace the record with the same id, or put a new one first."""
    for index, existing in enumerate(records):
        if existing.id == record.id:
            records[index] = record
            return records
    records.insert(0, record)
    return records


class LocalRecordStore:
    """Handles persistence of studies and bulletins to per-user JSON files."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._ensure_data_dir()

    def _ensure_data_dir(self) -> None:
        """Create data directory structure if it doesn't exist."""
        (self.settings.data_dir / "studies").mkdir(parents=True, exist_ok=True)
        (self.settings.data_dir / "bulletins").mkdir(parents=True, exist_ok=True)

    def _studies_path(self, user_id: str) -> Path:
        return self.settings.data_dir / "studies" / f"{user_id}.json"

    def _bulletins_path(self, user_id: str) -> Path:
        return self.settings.data_dir / "bulletins" / f"{user_id}.json"

    def _load_studies(self, user_id: str) -> list[StudyPlan]:
        path = self._studies_path(user_id)
        if not path.exists():
            return []
        return _studies_adapter.validate_json(path.read_text(encoding="utf-8"))

    def _write_studies(self, user_id: str, studies: list[StudyPlan]) -> None:
        self._studies_path(user_id).write_bytes(_studies_adapter.dump_json(studies, indent=2))

    def _load_bulletins(self, user_id: str) -> list[Bulletin]:
        path = self._bulletins_path(user_id)
        if not path.exists():
            return []
        return _bulletins_adapter.validate_json(path.read_text(encoding="utf-8"))

    def _write_bulletins(self, user_id: str, bulletins: list[Bulletin]) -> None:
        self._bulletins_path(user_id).write_bytes(_bulletins_adapter.dump_json(bulletins, indent=2))

    # --- Studies ---

    async def save_study(self, plan: StudyPlan) -> None:
        studies = _upsert(self._load_studies(plan.user_id), plan)
        self._write_studies(plan.user_id, studies)
        log.info("study_saved", study_id=plan.id, user_id=plan.user_id)

    async def list_studies(self, user_id: str, include_archived: bool = False) -> list[StudyPlan]:
        studies = self._load_studies(user_id)
        if include_archived:
            return studies
        return [s for s in studies if not s.is_archived]

    async def get_study(self, user_id: str, study_id: str) -> StudyPlan | None:
        return next((s for s in self._load_studies(user_id) if s.id == study_id), None)

    async def archive_study(self, user_id: str, study_id: str) -> bool:
        studies = self._load_studies(user_id)
        for study in studies:
            if study.id == study_id:
                study.is_archived = True
                self._write_studies(user_id, studies)
                log.info("study_archived", study_id=study_id)
                return True
        return False

    async def set_day_completed(
        self, user_id: str, study_id: str, day: int, completed: bool = True
    ) -> StudyPlan | None:
        studies = self._load_studies(user_id)
        study = next((s for s in studies if s.id == study_id), None)
        if study is None or not study.set_day_completed(day, completed):
            return None
        self._write_studies(user_id, studies)
        return study

    # --- Bulletins ---

    async def save_bulletin(self, bulletin: Bulletin) -> None:
        bulletins = _upsert(self._load_bulletins(bulletin.user_id), bulletin)
        self._write_bulletins(bulletin.user_id, bulletins)
        log.info("bulletin_saved", bulletin_id=bulletin.id, events=len(bulletin.events))

    async def list_bulletins(self, user_id: str) -> list[Bulletin]:
        return self._load_bulletins(user_id)

    async def list_prior_events(self, user_id: str) -> list[EventRecord]:
        return [event for bulletin in self._load_bulletins(user_id) for event in bulletin.events]

    async def get_event(self, user_id: str, event_id: str) -> EventRecord | None:
        events = await self.list_prior_events(user_id)
        return next((e for e in events if e.id == event_id), None)

    async def delete_bulletin(self, user_id: str, bulletin_id: str) -> bool:
        bulletins = self._load_bulletins(user_id)
        remaining = [b for b in bulletins if b.id != bulletin_id]
        if len(remaining) == len(bulletins):
            return False
        self._write_bulletins(user_id, remaining)
        log.info("bulletin_deleted", bulletin_id=bulletin_id)
        return True

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        bulletins = self._load_bulletins(user_id)
        for bulletin in bulletins:
            remaining = [e for e in bulletin.events if e.id != event_id]
            if len(remaining) != len(bulletin.events):
                bulletin.events = remaining
                self._write_bulletins(user_id, bulletins)
                log.info("event_deleted", event_id=event_id, bulletin_id=bulletin.id)
                return True
        return False


def create_record_store(settings: Settings | None = None) -> RecordStore:
    """Pick the storage backend named in settings."""
    settings = settings or get_settings()
    if settings.storage_backend == "database":
        from sermon_scribe.db.store import DatabaseRecordStore

        return DatabaseRecordStore()
    return LocalRecordStore(settings)
