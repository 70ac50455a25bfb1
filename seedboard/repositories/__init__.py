"""Repositories package for data access layer."""

from .influencer_repository import InfluencerRepository
from .project_repository import ProjectRepository
from .template_repository import TemplateRepository
from .guide_repository import GuideRepository
from .sku_repository import SkuRepository

__all__ = [
    "InfluencerRepository",
    "ProjectRepository",
    "TemplateRepository",
    "GuideRepository",
    "SkuRepository",
]
