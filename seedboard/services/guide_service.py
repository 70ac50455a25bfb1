"""Product guide publishing."""

import secrets
from typing import Any, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.config import settings
from seedboard.models import ProductGuide
from seedboard.repositories.guide_repository import GuideRepository
from seedboard.services.seeding_exceptions import GuideNotFoundError

SLUG_BYTES = 9


def generate_slug() -> str:
    return secrets.token_urlsafe(SLUG_BYTES)


def guide_url(slug: str, base_url: Optional[str] = None) -> str:
    """Absolute public link for a guide slug."""
    base = (base_url if base_url is not None else settings.public_base_url).rstrip("/")
    return f"{base}/guide/{slug}"


class GuideService:
    """Creates guides and exposes the public read side."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = GuideRepository(session)
        self.logger = structlog.get_logger(__name__)

    async def get_guide(self, guide_id: str) -> ProductGuide:
        guide = await self.repo.get_by_id(guide_id)
        if guide is None:
            raise GuideNotFoundError(guide_id)
        return guide

    async def create_guide(self, **fields: Any) -> ProductGuide:
        fields.setdefault("public_slug", generate_slug())
        fields.setdefault("is_public", False)
        return await self.repo.create(**fields)

    async def update_guide(self, guide_id: str, **updates: Any) -> ProductGuide:
        guide = await self.get_guide(guide_id)
        updates.pop("public_slug", None)
        return await self.repo.update(guide, updates)

    async def list_guides(self, brand: Optional[str] = None) -> List[ProductGuide]:
        return await self.repo.list_all(brand)

    async def generate_guide_link(self, guide_id: str) -> str:
        """Publish the guide and return its shareable link."""
        guide = await self.get_guide(guide_id)
        updates = {"is_public": True}
        if not guide.public_slug:
            updates["public_slug"] = generate_slug()
        guide = await self.repo.update(guide, updates)

        link = guide_url(guide.public_slug)
        self.logger.info("Guide link generated", guide_id=guide.id, link=link)
        return link

    async def get_public_guide(self, slug: str) -> ProductGuide:
        """Guide by slug; unpublished guides are reported as missing."""
        guide = await self.repo.get_by_slug(slug)
        if guide is None or not guide.is_public:
            raise GuideNotFoundError(slug)
        return guide
