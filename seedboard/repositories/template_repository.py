"""Repository for outreach templates."""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import OutreachTemplate


class TemplateRepository:
    """Database accessors for outreach templates."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = structlog.get_logger(__name__)

    async def create(self, **fields: Any) -> OutreachTemplate:
        template = OutreachTemplate(**fields)
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        self.logger.info("outreach_template_created", template_id=template.id, name=template.name)
        return template

    async def get_by_id(self, template_id: str) -> Optional[OutreachTemplate]:
        stmt = select(OutreachTemplate).where(OutreachTemplate.id == template_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[OutreachTemplate]:
        """Templates with the most used first."""
        stmt = select(OutreachTemplate).order_by(
            OutreachTemplate.usage_count.desc(), OutreachTemplate.created_at.desc()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, template: OutreachTemplate, updates: Dict[str, Any]) -> OutreachTemplate:
        for key, value in updates.items():
            setattr(template, key, value)
        await self.session.flush()
        await self.session.refresh(template)
        self.logger.info("outreach_template_updated", template_id=template.id)
        return template

    async def delete(self, template: OutreachTemplate) -> None:
        await self.session.delete(template)
        await self.session.flush()
        self.logger.info("outreach_template_deleted", template_id=template.id)

    async def increment_usage(self, template: OutreachTemplate) -> int:
        """Atomically add one to ``usage_count`` and return the new value."""
        stmt = (
            update(OutreachTemplate)
            .where(OutreachTemplate.id == template.id)
            .values(usage_count=OutreachTemplate.usage_count + 1)
            .returning(OutreachTemplate.usage_count)
        )
        result = await self.session.execute(stmt)
        new_count = result.scalar_one()
        template.usage_count = new_count
        self.logger.debug("outreach_template_used", template_id=template.id, usage_count=new_count)
        return new_count
