"""Shared fixtures: influencer factories and session doubles."""

import itertools
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.models import (
    SeedingInfluencer,
    SeedingProject,
    default_performance,
    default_shipping,
)

_ids = itertools.count(1)


def build_influencer(**overrides) -> SeedingInfluencer:
    number = next(_ids)
    fields = {
        "id": f"inf-{number}",
        "project_id": "project-1",
        "account_id": f"creator{number}",
        "account_name": f"크리에이터{number}",
        "platform": "instagram",
        "email": None,
        "phone": None,
        "follower_count": 1000,
        "following_count": None,
        "category": None,
        "seeding_type": "free",
        "content_type": "story",
        "fee": Decimal("0"),
        "product_name": "립밤",
        "product_price": None,
        "status": "listed",
        "listed_at": datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc),
        "contacted_at": None,
        "accepted_at": None,
        "rejected_at": None,
        "rejection_reason": None,
        "guide_link": None,
        "expected_posting_date": None,
        "posted_at": None,
        "completed_at": None,
        "shipping": default_shipping(),
        "performance": default_performance(),
        "notes": None,
    }
    fields.update(overrides)
    return SeedingInfluencer(**fields)


def build_project(**overrides) -> SeedingProject:
    fields = {
        "id": "project-1",
        "name": "봄 시즌 립밤 시딩",
        "brand": "howpapa",
        "product_name": "립밤",
        "target_count": 50,
        "cost_price": Decimal("3000"),
        "selling_price": Decimal("12000"),
    }
    fields.update(overrides)
    return SeedingProject(**fields)


@pytest.fixture
def make_influencer():
    return build_influencer


@pytest.fixture
def make_project():
    return build_project


def _savepoint():
    """Async context manager standing in for a SAVEPOINT; never suppresses errors."""
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    return savepoint


@pytest.fixture
def mock_session():
    session = MagicMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.begin_nested = MagicMock(side_effect=lambda: _savepoint())
    return session
