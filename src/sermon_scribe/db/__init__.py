# ABOUTME: Database module initialization.
# ABOUTME: Exports ORM models and session helpers for the PostgreSQL backend.

from sermon_scribe.db.models import Base, BulletinRecord, StudyPlanRecord
from sermon_scribe.db.session import close_db, get_session, init_db

__all__ = [
    "Base",
    "BulletinRecord",
    "StudyPlanRecord",
    "close_db",
    "get_session",
    "init_db",
]
