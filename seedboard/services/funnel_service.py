"""Funnel aggregation and campaign statistics over influencer snapshots."""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog

from seedboard.models import ContentType, SeedingStatus, SeedingType
from seedboard.services.status_machine import (
    FORWARD_STAGES,
    as_status,
    dm_sent,
    is_accepted,
    is_posted,
    is_reached_stage,
    is_shipped,
    response_received,
)

logger = structlog.get_logger(__name__)


@dataclass
class FunnelCounts:
    """Cumulative per-stage counts plus the rejected bucket."""

    stages: Dict[SeedingStatus, int]
    rejected: int
    total: int
    completed_at: Optional[int] = None

    def __getitem__(self, stage: Any) -> int:
        stage = as_status(stage)
        if stage is SeedingStatus.REJECTED:
            return self.rejected
        return self.stages[stage]

    @property
    def completed(self) -> int:
        return self.stages[SeedingStatus.COMPLETED]

    @property
    def completed_consistent(self) -> bool:
        """Status-based and timestamp-based completed counts agree."""
        return self.completed_at is None or self.completed_at == self.completed

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {stage.value: count for stage, count in self.stages.items()}
        payload["rejected"] = self.rejected
        payload["total"] = self.total
        if self.completed_at is not None:
            payload["completed_at"] = self.completed_at
        return payload


def count_completed_at(records: Iterable[Any]) -> int:
    """Records carrying a completion timestamp, regardless of status."""
    return sum(1 for record in records if getattr(record, "completed_at", None))


def aggregate(records: Sequence[Any], completed_at_count: Optional[int] = None) -> FunnelCounts:
    """Count records that reached each forward stage.

    ``completed_at_count`` is the caller's independently computed completion
    count; it is kept alongside the status-based count and a divergence is
    logged rather than coalesced.
    """
    statuses = [as_status(record.status) for record in records]

    stages = {
        stage: sum(1 for status in statuses if is_reached_stage(status, stage))
        for stage in FORWARD_STAGES
    }
    rejected = sum(1 for status in statuses if status is SeedingStatus.REJECTED)

    counts = FunnelCounts(
        stages=stages,
        rejected=rejected,
        total=len(statuses),
        completed_at=completed_at_count,
    )

    if not counts.completed_consistent:
        logger.warning(
            "Completed counts diverge",
            status_completed=counts.completed,
            completed_at=completed_at_count,
        )

    return counts


def flag_counts(records: Sequence[Any]) -> Dict[str, int]:
    """Counters shown on the status tabs, computed from the derived flags.

    Unlike :func:`aggregate`, rejected records count as contacted and as
    having responded.
    """
    return {
        "total": len(records),
        "dm_sent": sum(1 for record in records if dm_sent(record.status)),
        "response_received": sum(1 for record in records if response_received(record.status)),
        "accepted": sum(1 for record in records if is_accepted(record)),
        "shipped": sum(1 for record in records if is_shipped(record.status)),
        "completed": sum(1 for record in records if as_status(record.status) is SeedingStatus.COMPLETED),
        "completed_at": count_completed_at(records),
    }


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


@dataclass
class SeedingStats:
    """Statistics over a project or over every project."""

    total: int = 0
    by_status: Dict[str, int] = field(default_factory=lambda: {status.value: 0 for status in SeedingStatus})
    by_type: Dict[str, int] = field(default_factory=lambda: {kind.value: 0 for kind in SeedingType})
    by_content: Dict[str, int] = field(default_factory=lambda: {kind.value: 0 for kind in ContentType})
    total_cost: float = 0.0
    total_value: float = 0.0
    total_fee: float = 0.0
    total_reach: int = 0
    total_engagement: int = 0
    progress_rate: float = 0.0
    acceptance_rate: float = 0.0
    posting_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "by_type": dict(self.by_type),
            "by_content": dict(self.by_content),
            "total_cost": self.total_cost,
            "total_value": self.total_value,
            "total_fee": self.total_fee,
            "total_reach": self.total_reach,
            "total_engagement": self.total_engagement,
            "progress_rate": round(self.progress_rate, 1),
            "acceptance_rate": round(self.acceptance_rate, 1),
            "posting_rate": round(self.posting_rate, 1),
        }


def _accumulate(stats: SeedingStats, record: Any, project: Optional[Any]) -> None:
    status = as_status(record.status)
    stats.by_status[status.value] += 1

    seeding_type = _enum_value(getattr(record, "seeding_type", None))
    if seeding_type in stats.by_type:
        stats.by_type[seeding_type] += 1
    content_type = _enum_value(getattr(record, "content_type", None))
    if content_type in stats.by_content:
        stats.by_content[content_type] += 1

    # Product cost only counts once the product actually left the warehouse
    if is_shipped(status):
        shipping = getattr(record, "shipping", None) or {}
        quantity = int(shipping.get("quantity") or 1)
        unit_cost = _number(getattr(record, "product_price", None)) or _number(
            getattr(project, "cost_price", None)
        )
        stats.total_cost += quantity * unit_cost
        stats.total_value += quantity * _number(getattr(project, "selling_price", None))

    stats.total_fee += _number(getattr(record, "fee", None))

    performance = getattr(record, "performance", None) or {}
    stats.total_reach += int(performance.get("views") or 0) + int(performance.get("story_views") or 0)
    stats.total_engagement += sum(
        int(performance.get(key) or 0) for key in ("likes", "comments", "saves", "shares")
    )


def _finalize(stats: SeedingStats, statuses: List[SeedingStatus]) -> SeedingStats:
    contacted = sum(1 for status in statuses if dm_sent(status))
    accepted = sum(1 for status in statuses if is_reached_stage(status, SeedingStatus.ACCEPTED))
    posted = sum(1 for status in statuses if is_posted(status))

    stats.progress_rate = _percent(posted, stats.total)
    stats.acceptance_rate = _percent(accepted, contacted)
    stats.posting_rate = _percent(posted, accepted)
    return stats


def compute_project_stats(records: Sequence[Any], project: Optional[Any] = None) -> SeedingStats:
    """Statistics for the influencers of a single project."""
    stats = SeedingStats(total=len(records))
    for record in records:
        _accumulate(stats, record, project)
    return _finalize(stats, [as_status(record.status) for record in records])


def compute_overall_stats(records: Sequence[Any], projects: Iterable[Any]) -> SeedingStats:
    """Statistics across projects, resolving each record's own project prices."""
    projects_by_id = {project.id: project for project in projects}
    stats = SeedingStats(total=len(records))
    for record in records:
        _accumulate(stats, record, projects_by_id.get(getattr(record, "project_id", None)))
    return _finalize(stats, [as_status(record.status) for record in records])


def status_breakdown(records: Iterable[Any]) -> Dict[str, int]:
    """Plain per-status counts (not cumulative)."""
    counter = Counter(as_status(record.status).value for record in records)
    return {status.value: counter.get(status.value, 0) for status in SeedingStatus}
