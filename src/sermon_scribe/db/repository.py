# ABOUTME: Repository classes for database access patterns.
# ABOUTME: Provides StudyRepository and BulletinRepository, scoped by owning user.

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sermon_scribe.db.models import BulletinRecord, StudyPlanRecord


class StudyRepository:
    """Repository for StudyPlanRecord CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, study: StudyPlanRecord) -> StudyPlanRecord:
        """Insert or update a study by primary key."""
        merged = await self.session.merge(study)
        await self.session.flush()
        return merged

    async def get_by_id(self, user_id: str, study_id: str) -> StudyPlanRecord | None:
        result = await self.session.execute(
            select(StudyPlanRecord).where(
                StudyPlanRecord.id == study_id, StudyPlanRecord.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self, user_id: str, include_archived: bool = False
    ) -> Sequence[StudyPlanRecord]:
        """List a user's studies, newest first."""
        query = select(StudyPlanRecord).where(StudyPlanRecord.user_id == user_id)
        if not include_archived:
            query = query.where(StudyPlanRecord.is_archived.is_(False))
        result = await self.session.execute(query.order_by(StudyPlanRecord.created_at.desc()))
        return result.scalars().all()


class BulletinRepository:
    """Repository for BulletinRecord CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, bulletin: BulletinRecord) -> BulletinRecord:
        """Insert or update a bulletin by primary key."""
        merged = await self.session.merge(bulletin)
        await self.session.flush()
        return merged

    async def list_for_user(self, user_id: str) -> Sequence[BulletinRecord]:
        """List a user's bulletins, newest first."""
        result = await self.session.execute(
            select(BulletinRecord)
            .where(BulletinRecord.user_id == user_id)
            .order_by(BulletinRecord.created_at.desc())
        )
        return result.scalars().all()

    async def delete(self, user_id: str, bulletin_id: str) -> bool:
        """Delete a bulletin. Returns True if deleted."""
        result = await self.session.execute(
            delete(BulletinRecord).where(
                BulletinRecord.id == bulletin_id, BulletinRecord.user_id == user_id
            )
        )
        return result.rowcount > 0
