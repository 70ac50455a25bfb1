"""Repository for seeding influencer records."""

from typing import Any, Dict, Iterable, List, Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import SeedingInfluencer


class InfluencerRepository:
    """Repository for influencer database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = structlog.get_logger(__name__)

    async def create(self, **fields: Any) -> SeedingInfluencer:
        """Create a new influencer row."""
        influencer = SeedingInfluencer(**fields)
        self.session.add(influencer)
        await self.session.flush()
        await self.session.refresh(influencer)

        self.logger.info(
            "Influencer created",
            influencer_id=influencer.id,
            project_id=influencer.project_id,
            account_id=influencer.account_id,
        )
        return influencer

    async def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[SeedingInfluencer]:
        """Insert several influencers in one flush."""
        influencers = [SeedingInfluencer(**row) for row in rows]
        self.session.add_all(influencers)
        await self.session.flush()

        self.logger.info("Influencers created in bulk", count=len(influencers))
        return influencers

    async def get_by_id(self, influencer_id: str) -> Optional[SeedingInfluencer]:
        """Get influencer by ID."""
        stmt = select(SeedingInfluencer).where(SeedingInfluencer.id == influencer_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_project(self, project_id: str) -> List[SeedingInfluencer]:
        """All influencers of a project in insertion order."""
        stmt = (
            select(SeedingInfluencer)
            .where(SeedingInfluencer.project_id == project_id)
            .order_by(SeedingInfluencer.created_at, SeedingInfluencer.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> List[SeedingInfluencer]:
        stmt = select(SeedingInfluencer).order_by(SeedingInfluencer.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, influencer: SeedingInfluencer, updates: Dict[str, Any]) -> SeedingInfluencer:
        """Apply a partial update to an influencer."""
        for key, value in updates.items():
            setattr(influencer, key, value)

        await self.session.flush()
        await self.session.refresh(influencer)

        self.logger.debug(
            "Influencer updated",
            influencer_id=influencer.id,
            fields=sorted(updates),
        )
        return influencer

    async def delete(self, influencer: SeedingInfluencer) -> None:
        await self.session.delete(influencer)
        await self.session.flush()
        self.logger.info("Influencer deleted", influencer_id=influencer.id)

    async def delete_by_project(self, project_id: str) -> int:
        """Remove every influencer of a project, returning the row count."""
        stmt = delete(SeedingInfluencer).where(SeedingInfluencer.project_id == project_id)
        result = await self.session.execute(stmt)
        await self.session.flush()

        self.logger.info("Project influencers deleted", project_id=project_id, count=result.rowcount)
        return result.rowcount
