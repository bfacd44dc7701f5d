# ABOUTME: SQLAlchemy ORM models for study plan and bulletin persistence.
# ABOUTME: Days and events are stored as JSONB arrays on their parent row.

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class StudyPlanRecord(Base):
    """A generated multi-day study plan."""

    __tablename__ = "studies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    sermon_title: Mapped[str] = mapped_column(String(500), nullable=False)
    preacher: Mapped[str | None] = mapped_column(String(200), nullable=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date_recorded: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    original_audio_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    days: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_studies_user_created", user_id, created_at.desc()),)

    def __repr__(self) -> str:
        return f"<StudyPlanRecord(id={self.id}, title='{self.sermon_title[:30]}...')>"


class BulletinRecord(Base):
    """A scanned bulletin with its extracted events."""

    __tablename__ = "bulletins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    date_scanned: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    raw_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    events: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_bulletins_user_created", user_id, created_at.desc()),)

    def __repr__(self) -> str:
        return f"<BulletinRecord(id={self.id}, events={len(self.events or [])})>"
