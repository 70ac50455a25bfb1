"""Public product guide routes."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.db import get_db
from seedboard.services.guide_service import GuideService
from seedboard.services.seeding_exceptions import GuideNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/guides", tags=["guides"])

PUBLIC_FIELDS = (
    "product_name",
    "brand",
    "content_type",
    "description",
    "key_points",
    "hashtags",
    "mentions",
    "dos",
    "donts",
    "link_url",
    "image_urls",
    "reference_urls",
)


@router.get("/{slug}", summary="Get a published product guide")
async def get_public_guide(slug: str, session: AsyncSession = Depends(get_db)) -> dict:
    """Guide content for influencers opening a shared link."""
    service = GuideService(session)

    try:
        guide = await service.get_public_guide(slug)
    except GuideNotFoundError:
        raise HTTPException(status_code=404, detail="가이드를 찾을 수 없습니다")
    except Exception:
        logger.exception("Failed to load public guide", slug=slug)
        raise HTTPException(status_code=503, detail="Guide unavailable")

    payload = {name: getattr(guide, name) for name in PUBLIC_FIELDS}
    for name in ("brand", "content_type"):
        payload[name] = getattr(payload[name], "value", payload[name])
    return payload
