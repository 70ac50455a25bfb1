"""Seeding project and influencer management service."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog
from prometheus_client import Counter
from sqlalchemy.ext.asyncio import AsyncSession

from seedboard.config import settings
from seedboard.logging_config import get_activity_logger
from seedboard.models import (
    SeedingInfluencer,
    SeedingProject,
    SeedingStatus,
    SeedingType,
    default_performance,
    default_shipping,
)
from seedboard.repositories.influencer_repository import InfluencerRepository
from seedboard.repositories.project_repository import ProjectRepository
from seedboard.services.bulk_import_service import BulkParseResult, parse_lines
from seedboard.services.csv_service import export_influencers_csv
from seedboard.services.funnel_service import aggregate, compute_project_stats, count_completed_at, flag_counts
from seedboard.services.seeding_exceptions import (
    InfluencerNotFoundError,
    ProjectNotFoundError,
    ValidationError,
)
from seedboard.services.seeding_report_formatter import DailyKpi, compute_daily_kpi
from seedboard.services.status_machine import as_status, status_change_updates
from seedboard.services.validation import validate_influencer
from seedboard.utils.parsing import normalize_account_id

STATUS_TRANSITIONS = Counter(
    "seeding_status_transitions_total",
    "Influencer status changes",
    ["status"],
)

PERFORMANCE_COUNTERS = ("views", "likes", "comments", "saves", "shares", "story_views", "link_clicks")


@dataclass
class BulkResult:
    """Outcome of N independent updates; there is no rollback across the batch."""
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "errors": dict(self.failed),
        }


def merge_shipping(
    current: Optional[Dict[str, Any]],
    updates: Dict[str, Any],
    now: datetime,
) -> Dict[str, Any]:
    """Merge partial shipping fields, stamping ``shipped_at`` on the first tracking number."""
    merged = {**default_shipping(), **(current or {}), **updates}
    if updates.get("tracking_number") and not (current or {}).get("shipped_at"):
        merged["shipped_at"] = now.isoformat()
    try:
        merged["quantity"] = max(1, int(merged.get("quantity") or 1))
    except (TypeError, ValueError):
        merged["quantity"] = 1
    return merged


def merge_performance(
    current: Optional[Dict[str, Any]],
    updates: Dict[str, Any],
    now: datetime,
) -> Dict[str, Any]:
    """Merge counter updates into the stored performance and stamp ``measured_at``."""
    merged = {**default_performance(), **(current or {})}
    for key in PERFORMANCE_COUNTERS:
        if key in updates and updates[key] is not None:
            merged[key] = int(updates[key])
    merged["measured_at"] = now.isoformat()
    return merged


class SeedingService:
    """Service for seeding campaign workflows."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.influencers = InfluencerRepository(session)
        self.projects = ProjectRepository(session)
        self.logger = structlog.get_logger(__name__)
        self.activity = get_activity_logger("seeding")

    # ===== Projects =====

    async def get_project(self, project_id: str) -> SeedingProject:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def create_project(self, **fields: Any) -> SeedingProject:
        """Create a project; prices are a snapshot of the product at this time."""
        return await self.projects.create(**fields)

    async def delete_project(self, project_id: str) -> None:
        project = await self.get_project(project_id)
        await self.influencers.delete_by_project(project_id)
        await self.projects.delete(project)

    # ===== Influencers =====

    async def get_influencer(self, influencer_id: str) -> SeedingInfluencer:
        influencer = await self.influencers.get_by_id(influencer_id)
        if influencer is None:
            raise InfluencerNotFoundError(influencer_id)
        return influencer

    async def add_influencer(self, project_id: str, **fields: Any) -> SeedingInfluencer:
        """Validate and create a listed influencer."""
        shipping = {**default_shipping(), **(fields.pop("shipping", None) or {})}
        issues = validate_influencer(
            account_id=fields.get("account_id"),
            seeding_type=fields.get("seeding_type", SeedingType.FREE),
            fee=fields.get("fee", 0),
            quantity=shipping.get("quantity", 1),
        )
        if issues:
            raise ValidationError(issues)

        fields["account_id"] = normalize_account_id(fields["account_id"])
        if fields.get("seeding_type", SeedingType.FREE) != SeedingType.PAID:
            fields["fee"] = 0

        return await self.influencers.create(
            project_id=project_id,
            status=SeedingStatus.LISTED.value,
            listed_at=datetime.now(timezone.utc),
            shipping=shipping,
            performance=default_performance(),
            **fields,
        )

    async def add_influencers_from_text(
        self,
        project_id: str,
        text: str,
        **defaults: Any,
    ) -> Tuple[BulkParseResult, List[SeedingInfluencer]]:
        """Create influencers from pasted rows (account, name, followers, email, phone)."""
        project = await self.get_project(project_id)
        parsed = parse_lines(text)
        now = datetime.now(timezone.utc)

        rows = []
        for row in parsed.parsed:
            values = {key: value or None for key, value in row.values.items()}
            values["follower_count"] = row.values["follower_count"]
            rows.append({
                "project_id": project_id,
                "status": SeedingStatus.LISTED.value,
                "listed_at": now,
                "seeding_type": SeedingType.FREE.value,
                "fee": 0,
                "product_name": project.product_name,
                "product_price": project.cost_price,
                "shipping": default_shipping(),
                "performance": default_performance(),
                **defaults,
                **values,
            })

        created = await self.influencers.create_many(rows) if rows else []
        self.activity.info(
            "대량 등록 완료",
            project_id=project_id,
            valid=parsed.valid,
            invalid=parsed.invalid,
        )
        return parsed, created

    async def update_status(
        self,
        influencer_id: str,
        status: Any,
        *,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SeedingInfluencer:
        """Move an influencer to a new status, stamping the stage timestamp once."""
        influencer = await self.get_influencer(influencer_id)
        previous = influencer.status
        updates = status_change_updates(
            influencer, status, now=now, rejection_reason=rejection_reason
        )
        influencer = await self.influencers.update(influencer, updates)

        STATUS_TRANSITIONS.labels(status=updates["status"]).inc()
        self.activity.info(
            "상태 변경",
            influencer_id=influencer.id,
            project_id=influencer.project_id,
            previous_status=previous,
            status=updates["status"],
            rejection_reason=updates.get("rejection_reason"),
        )
        return influencer

    async def bulk_update_status(
        self,
        influencer_ids: Iterable[str],
        status: Any,
        *,
        rejection_reason: Optional[str] = None,
    ) -> BulkResult:
        """Update each influencer in its own savepoint; failures are reported, not rolled back."""
        as_status(status)
        result = BulkResult()
        for influencer_id in influencer_ids:
            try:
                async with self.session.begin_nested():
                    await self.update_status(influencer_id, status, rejection_reason=rejection_reason)
            except Exception as exc:
                self.logger.warning(
                    "Bulk status update failed",
                    influencer_id=influencer_id,
                    error=str(exc),
                )
                result.failed[influencer_id] = str(exc)
            else:
                result.succeeded.append(influencer_id)
        return result

    async def update_shipping(
        self,
        influencer_id: str,
        shipping: Dict[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> SeedingInfluencer:
        """Merge shipping info; a tracking number moves an accepted influencer to shipped."""
        now = now or datetime.now(timezone.utc)
        influencer = await self.get_influencer(influencer_id)
        merged = merge_shipping(influencer.shipping, shipping, now)
        influencer = await self.influencers.update(influencer, {"shipping": merged})

        if shipping.get("tracking_number"):
            self.activity.info(
                "송장 등록",
                influencer_id=influencer.id,
                tracking_number=shipping["tracking_number"],
            )
            if as_status(influencer.status) is SeedingStatus.ACCEPTED:
                influencer = await self.update_status(influencer.id, SeedingStatus.SHIPPED, now=now)
        return influencer

    async def apply_bulk_tracking(
        self,
        project_id: str,
        text: str,
        *,
        carrier: Optional[str] = None,
    ) -> Tuple[BulkParseResult, BulkResult]:
        """Parse pasted tracking numbers against a project's table and apply them."""
        carrier = carrier or settings.default_carrier
        existing = await self.influencers.list_by_project(project_id)
        parsed = parse_lines(text, existing)

        result = BulkResult()
        for row in parsed.parsed:
            shipping = dict(row.values)
            if carrier and not shipping.get("carrier"):
                shipping["carrier"] = carrier
            try:
                async with self.session.begin_nested():
                    await self.update_shipping(row.target_id, shipping)
            except Exception as exc:
                self.logger.warning(
                    "Tracking number update failed",
                    influencer_id=row.target_id,
                    line=row.line,
                    error=str(exc),
                )
                result.failed[str(row.target_id)] = str(exc)
            else:
                result.succeeded.append(str(row.target_id))

        self.activity.info(
            "송장 일괄 등록",
            project_id=project_id,
            carrier=carrier,
            valid=parsed.valid,
            invalid=parsed.invalid,
            failed=len(result.failed),
        )
        return parsed, result

    async def update_performance(
        self,
        influencer_id: str,
        performance: Dict[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> SeedingInfluencer:
        now = now or datetime.now(timezone.utc)
        influencer = await self.get_influencer(influencer_id)
        merged = merge_performance(influencer.performance, performance, now)
        return await self.influencers.update(influencer, {"performance": merged})

    async def delete_influencers(self, influencer_ids: Iterable[str]) -> BulkResult:
        result = BulkResult()
        for influencer_id in influencer_ids:
            try:
                async with self.session.begin_nested():
                    influencer = await self.get_influencer(influencer_id)
                    await self.influencers.delete(influencer)
            except Exception as exc:
                self.logger.warning("Influencer delete failed", influencer_id=influencer_id, error=str(exc))
                result.failed[influencer_id] = str(exc)
            else:
                result.succeeded.append(influencer_id)
        return result

    # ===== Reporting =====

    async def get_project_report(self, project_id: str) -> Dict[str, Any]:
        """Funnel, tab counters and statistics for one project."""
        project = await self.get_project(project_id)
        influencers = await self.influencers.list_by_project(project_id)

        funnel = aggregate(influencers, completed_at_count=count_completed_at(influencers))
        return {
            "project_id": project_id,
            "project_name": project.name,
            "target_count": project.target_count,
            "funnel": funnel.to_dict(),
            "completed_consistent": funnel.completed_consistent,
            "tabs": flag_counts(influencers),
            "stats": compute_project_stats(influencers, project).to_dict(),
        }

    async def export_project_csv(self, project_id: str) -> bytes:
        await self.get_project(project_id)
        influencers = await self.influencers.list_by_project(project_id)
        return export_influencers_csv(influencers)

    async def get_daily_kpi(self, brand: str, day: date) -> DailyKpi:
        """List-up and acceptance counts of one brand's projects on ``day``."""
        influencers: List[SeedingInfluencer] = []
        for project in await self.projects.list_all(brand):
            influencers.extend(await self.influencers.list_by_project(project.id))
        return compute_daily_kpi(influencers, day, brand=brand)
