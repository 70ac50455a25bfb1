"""API package providing FastAPI routers."""

from fastapi import APIRouter

from seedboard.api.routes.guides import router as guides_router
from seedboard.api.routes.seeding import router as seeding_router

api_router = APIRouter()
api_router.include_router(seeding_router)
api_router.include_router(guides_router)

__all__ = ["api_router"]
