"""Tests for funnel aggregation, tab counters and project statistics."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from seedboard.models import SeedingStatus
from seedboard.services.funnel_service import (
    aggregate,
    compute_overall_stats,
    compute_project_stats,
    count_completed_at,
    flag_counts,
    status_breakdown,
)
from seedboard.services.status_machine import FORWARD_STAGES

NOW = datetime(2026, 3, 5, tzinfo=timezone.utc)

ALL_STATUSES = [status.value for status in SeedingStatus]


def _records(make_influencer, statuses):
    return [make_influencer(status=status) for status in statuses]


def test_mixed_statuses_with_one_rejected(make_influencer):
    records = _records(make_influencer, ["listed", "contacted", "accepted", "rejected", "shipped"])

    counts = aggregate(records)

    assert counts["listed"] == 4
    assert counts["contacted"] == 3
    assert counts["accepted"] == 2
    assert counts["shipped"] == 1
    assert counts["rejected"] == 1
    assert counts.total == 5


def test_flag_counts_for_tab_headers(make_influencer):
    records = _records(make_influencer, ["listed", "contacted", "accepted", "rejected", "shipped"])

    tabs = flag_counts(records)

    assert tabs["total"] == 5
    assert tabs["dm_sent"] == 4
    assert tabs["response_received"] == 3
    assert tabs["accepted"] == 2
    assert tabs["shipped"] == 1


@pytest.mark.parametrize("statuses", [ALL_STATUSES, ALL_STATUSES * 3 + ["posted", "listed"], []])
def test_funnel_is_monotonic(make_influencer, statuses):
    counts = aggregate(_records(make_influencer, statuses))

    for earlier, later in zip(FORWARD_STAGES, FORWARD_STAGES[1:]):
        assert counts[earlier] >= counts[later]


def test_rejected_record_only_hits_rejected_bucket(make_influencer):
    counts = aggregate(_records(make_influencer, ["rejected"]))

    assert all(counts[stage] == 0 for stage in FORWARD_STAGES)
    assert counts.rejected == 1
    assert counts.total == 1


def test_completed_paths_agree(make_influencer):
    records = [
        make_influencer(status="completed", completed_at=NOW),
        make_influencer(status="posted"),
    ]

    counts = aggregate(records, completed_at_count=count_completed_at(records))

    assert counts.completed == 1
    assert counts.completed_at == 1
    assert counts.completed_consistent


def test_completed_paths_diverge_are_kept_apart(make_influencer):
    """상태 기반 완료 수와 완료일 기반 완료 수가 다르면 둘 다 보존하고 경고한다."""
    records = [
        make_influencer(status="completed"),
        make_influencer(status="posted", completed_at=NOW),
        make_influencer(status="posted", completed_at=NOW),
    ]

    with patch("seedboard.services.funnel_service.logger") as logger:
        counts = aggregate(records, completed_at_count=count_completed_at(records))

    logger.warning.assert_called_once()
    assert counts.completed == 1
    assert counts.completed_at == 2
    assert not counts.completed_consistent
    assert counts.to_dict()["completed_at"] == 2


def test_to_dict_contains_every_bucket(make_influencer):
    payload = aggregate(_records(make_influencer, ["listed", "rejected"])).to_dict()

    assert payload["listed"] == 1
    assert payload["rejected"] == 1
    assert payload["total"] == 2
    assert "completed_at" not in payload


def test_project_stats_costs_and_rates(make_influencer, make_project):
    project = make_project(cost_price=Decimal("3000"), selling_price=Decimal("12000"))
    shipped = make_influencer(status="shipped")
    shipped.shipping = {**shipped.shipping, "quantity": 2}
    records = [
        make_influencer(status="listed"),
        make_influencer(status="contacted"),
        make_influencer(status="rejected"),
        make_influencer(status="accepted"),
        shipped,
        make_influencer(
            status="posted",
            seeding_type="paid",
            fee=Decimal("50000"),
            product_price=Decimal("2500"),
            performance={"views": 1000, "story_views": 200, "likes": 50, "comments": 5},
        ),
    ]

    stats = compute_project_stats(records, project)

    assert stats.total == 6
    assert stats.by_status["rejected"] == 1
    assert stats.by_type == {"free": 5, "paid": 1}
    assert stats.total_cost == 2 * 3000 + 2500
    assert stats.total_value == 3 * 12000
    assert stats.total_fee == 50000
    assert stats.total_reach == 1200
    assert stats.total_engagement == 55
    assert stats.progress_rate == pytest.approx(100 / 6)
    # 수락 3 / DM 발송 5
    assert stats.acceptance_rate == pytest.approx(60.0)
    assert stats.posting_rate == pytest.approx(100 / 3)


def test_project_stats_empty():
    stats = compute_project_stats([])

    assert stats.total == 0
    assert stats.to_dict()["progress_rate"] == 0.0


def test_overall_stats_uses_each_records_project(make_influencer, make_project):
    projects = [
        make_project(id="p1", cost_price=Decimal("1000"), selling_price=Decimal("5000")),
        make_project(id="p2", cost_price=Decimal("2000"), selling_price=Decimal("9000")),
    ]
    records = [
        make_influencer(project_id="p1", status="shipped"),
        make_influencer(project_id="p2", status="completed"),
    ]

    stats = compute_overall_stats(records, projects)

    assert stats.total_cost == 3000
    assert stats.total_value == 14000


def test_status_breakdown_is_not_cumulative(make_influencer):
    breakdown = status_breakdown(_records(make_influencer, ["listed", "shipped", "shipped"]))

    assert breakdown["listed"] == 1
    assert breakdown["shipped"] == 2
    assert breakdown["contacted"] == 0
