"""Database models for the seeding dashboard."""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from uuid import uuid4
from typing import Optional, List

from sqlalchemy import (
    Integer, String, Text, Boolean, DateTime, Date, Numeric, JSON, ForeignKey, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from seedboard.db import Base


def _uuid() -> str:
    return str(uuid4())


class Brand(str, Enum):
    """Brand enum."""
    HOWPAPA = "howpapa"
    NUCCIO = "nuccio"


class SeedingStatus(str, Enum):
    """Seeding stage of a single influencer."""
    LISTED = "listed"
    CONTACTED = "contacted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SHIPPED = "shipped"
    GUIDE_SENT = "guide_sent"
    POSTED = "posted"
    COMPLETED = "completed"


class SeedingType(str, Enum):
    """Free product seeding or paid placement."""
    FREE = "free"
    PAID = "paid"


class ContentType(str, Enum):
    """Content format agreed with the influencer."""
    STORY = "story"
    REELS = "reels"
    FEED = "feed"
    BOTH = "both"


class SeedingPlatform(str, Enum):
    """Platform the influencer publishes on."""
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    BLOG = "blog"


class SeedingProjectStatus(str, Enum):
    """Campaign lifecycle status."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


SEEDING_STATUS_LABELS = {
    SeedingStatus.LISTED: "리스트업",
    SeedingStatus.CONTACTED: "연락완료",
    SeedingStatus.ACCEPTED: "수락",
    SeedingStatus.REJECTED: "거절",
    SeedingStatus.SHIPPED: "제품발송",
    SeedingStatus.GUIDE_SENT: "가이드발송",
    SeedingStatus.POSTED: "포스팅완료",
    SeedingStatus.COMPLETED: "완료",
}


def default_shipping() -> dict:
    """Empty shipping info with a single unit."""
    return {
        "recipient_name": "",
        "phone": "",
        "address": "",
        "postal_code": "",
        "quantity": 1,
        "carrier": None,
        "tracking_number": None,
        "shipped_at": None,
        "delivered_at": None,
    }


def default_performance() -> dict:
    """Zeroed performance counters."""
    return {
        "views": 0,
        "likes": 0,
        "comments": 0,
        "saves": 0,
        "shares": 0,
        "story_views": 0,
        "link_clicks": 0,
        "measured_at": None,
    }


class SeedingProject(Base):
    """Seeding campaign container."""
    __tablename__ = "seeding_projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand: Mapped[Brand] = mapped_column(String(20), nullable=False)
    product_id: Mapped[Optional[str]] = mapped_column(String(36))
    product_name: Mapped[Optional[str]] = mapped_column(String(255))
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    target_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cost_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    status: Mapped[SeedingProjectStatus] = mapped_column(String(20), default=SeedingProjectStatus.PLANNING)
    description: Mapped[Optional[str]] = mapped_column(Text)
    assignee_id: Mapped[Optional[str]] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    influencers: Mapped[List["SeedingInfluencer"]] = relationship(
        "SeedingInfluencer",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_seeding_projects_brand", "brand"),
    )


class SeedingInfluencer(Base):
    """One outreach target within one campaign project."""
    __tablename__ = "seeding_influencers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    project_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("seeding_projects.id", ondelete="CASCADE")
    )

    # Profile
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    account_name: Mapped[Optional[str]] = mapped_column(String(255))
    platform: Mapped[SeedingPlatform] = mapped_column(String(20), default=SeedingPlatform.INSTAGRAM)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    follower_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    following_count: Mapped[Optional[int]] = mapped_column(Integer)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    profile_url: Mapped[Optional[str]] = mapped_column(String(500))

    # Commercial terms
    seeding_type: Mapped[SeedingType] = mapped_column(String(10), default=SeedingType.FREE)
    content_type: Mapped[ContentType] = mapped_column(String(10), default=ContentType.STORY)
    fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    product_name: Mapped[Optional[str]] = mapped_column(String(255))
    product_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))

    # Lifecycle
    status: Mapped[SeedingStatus] = mapped_column(String(20), default=SeedingStatus.LISTED, nullable=False)
    listed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    contacted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    rejection_reason: Mapped[Optional[str]] = mapped_column(String(255))
    guide_id: Mapped[Optional[str]] = mapped_column(String(36))
    guide_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    guide_link: Mapped[Optional[str]] = mapped_column(String(500))
    expected_posting_date: Mapped[Optional[date]] = mapped_column(Date)
    posting_url: Mapped[Optional[str]] = mapped_column(String(500))
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    shipping: Mapped[dict] = mapped_column(JSON, default=default_shipping, nullable=False)
    performance: Mapped[dict] = mapped_column(JSON, default=default_performance, nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text)
    assignee_id: Mapped[Optional[str]] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project: Mapped[Optional["SeedingProject"]] = relationship("SeedingProject", back_populates="influencers")

    __table_args__ = (
        Index("ix_seeding_influencers_project_status", "project_id", "status"),
        Index("ix_seeding_influencers_account_id", "account_id"),
    )


class OutreachTemplate(Base):
    """Reusable outreach message with ``{variable}`` tokens."""
    __tablename__ = "outreach_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    seeding_type: Mapped[str] = mapped_column(String(10), default="all", nullable=False)
    content_type: Mapped[str] = mapped_column(String(10), default="all", nullable=False)
    brand: Mapped[str] = mapped_column(String(20), default="all", nullable=False)
    variables: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ProductGuide(Base):
    """Content brief shared with accepted influencers."""
    __tablename__ = "product_guides"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[Optional[str]] = mapped_column(String(36))
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand: Mapped[Brand] = mapped_column(String(20), nullable=False)
    content_type: Mapped[ContentType] = mapped_column(String(10), default=ContentType.STORY)
    description: Mapped[Optional[str]] = mapped_column(Text)
    key_points: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    hashtags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    mentions: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    dos: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    donts: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    link_url: Mapped[Optional[str]] = mapped_column(String(500))
    image_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    reference_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    public_slug: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_by: Mapped[Optional[str]] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SkuMaster(Base):
    """Priced, trackable product variant."""
    __tablename__ = "sku_masters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    sku_code: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand: Mapped[Brand] = mapped_column(String(20), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    cost_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    barcode: Mapped[Optional[str]] = mapped_column(String(100))
    supplier: Mapped[Optional[str]] = mapped_column(String(255))
    min_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
