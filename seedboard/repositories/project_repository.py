"""Repository for seeding projects."""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import SeedingProject


class ProjectRepository:
    """Repository for seeding project database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = structlog.get_logger(__name__)

    async def create(self, **fields: Any) -> SeedingProject:
        """Create a new seeding project."""
        project = SeedingProject(**fields)
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project)

        self.logger.info(
            "Seeding project created",
            project_id=project.id,
            name=project.name,
            brand=project.brand,
        )
        return project

    async def get_by_id(self, project_id: str) -> Optional[SeedingProject]:
        """Get project by ID."""
        stmt = select(SeedingProject).where(SeedingProject.id == project_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, brand: Optional[str] = None) -> List[SeedingProject]:
        """Projects, newest first, optionally for one brand."""
        stmt = select(SeedingProject)
        if brand:
            stmt = stmt.where(SeedingProject.brand == brand)
        stmt = stmt.order_by(SeedingProject.created_at.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, project: SeedingProject, updates: Dict[str, Any]) -> SeedingProject:
        for key, value in updates.items():
            setattr(project, key, value)

        await self.session.flush()
        await self.session.refresh(project)

        self.logger.info("Seeding project updated", project_id=project.id, fields=sorted(updates))
        return project

    async def delete(self, project: SeedingProject) -> None:
        """Delete a project; its influencers go with it."""
        await self.session.delete(project)
        await self.session.flush()
        self.logger.info("Seeding project deleted", project_id=project.id)
