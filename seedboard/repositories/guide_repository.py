"""Repository for product guides."""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import ProductGuide


class GuideRepository:
    """Database accessors for product guides."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = structlog.get_logger(__name__)

    async def create(self, **fields: Any) -> ProductGuide:
        guide = ProductGuide(**fields)
        self.session.add(guide)
        await self.session.flush()
        await self.session.refresh(guide)
        self.logger.info("product_guide_created", guide_id=guide.id, product_name=guide.product_name)
        return guide

    async def get_by_id(self, guide_id: str) -> Optional[ProductGuide]:
        stmt = select(ProductGuide).where(ProductGuide.id == guide_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[ProductGuide]:
        stmt = select(ProductGuide).where(ProductGuide.public_slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, brand: Optional[str] = None) -> List[ProductGuide]:
        stmt = select(ProductGuide)
        if brand:
            stmt = stmt.where(ProductGuide.brand == brand)
        result = await self.session.execute(stmt.order_by(ProductGuide.updated_at.desc()))
        return list(result.scalars().all())

    async def update(self, guide: ProductGuide, updates: Dict[str, Any]) -> ProductGuide:
        for key, value in updates.items():
            setattr(guide, key, value)
        await self.session.flush()
        await self.session.refresh(guide)
        self.logger.info("product_guide_updated", guide_id=guide.id, fields=sorted(updates))
        return guide

    async def delete(self, guide: ProductGuide) -> None:
        await self.session.delete(guide)
        await self.session.flush()
        self.logger.info("product_guide_deleted", guide_id=guide.id)
