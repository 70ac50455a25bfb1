"""Tests for the seeding service with repository doubles."""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from seedboard.services.seeding_exceptions import InfluencerNotFoundError, ProjectNotFoundError, ValidationError
from seedboard.services.seeding_service import SeedingService, merge_performance, merge_shipping

NOW = datetime(2026, 3, 5, 9, 0, tzinfo=timezone.utc)


async def _apply_updates(influencer, updates):
    for key, value in updates.items():
        setattr(influencer, key, value)
    return influencer


@pytest.fixture
def service(mock_session):
    svc = SeedingService(mock_session)
    svc.influencers = MagicMock()
    svc.influencers.update = AsyncMock(side_effect=_apply_updates)
    svc.projects = MagicMock()
    return svc


def _store(service, *influencers):
    by_id = {influencer.id: influencer for influencer in influencers}
    service.influencers.get_by_id = AsyncMock(side_effect=lambda influencer_id: by_id.get(influencer_id))
    service.influencers.list_by_project = AsyncMock(return_value=list(influencers))
    return by_id


def test_merge_shipping_stamps_first_tracking_number():
    merged = merge_shipping({"quantity": 2, "shipped_at": None}, {"tracking_number": "123"}, NOW)

    assert merged["tracking_number"] == "123"
    assert merged["shipped_at"] == NOW.isoformat()
    assert merged["quantity"] == 2


def test_merge_shipping_keeps_existing_shipped_at():
    merged = merge_shipping({"shipped_at": "2026-03-01T00:00:00+00:00"}, {"tracking_number": "999"}, NOW)

    assert merged["shipped_at"] == "2026-03-01T00:00:00+00:00"


def test_merge_shipping_clamps_quantity():
    assert merge_shipping(None, {"quantity": 0}, NOW)["quantity"] == 1
    assert merge_shipping(None, {"quantity": "많이"}, NOW)["quantity"] == 1


def test_merge_performance_updates_counters():
    merged = merge_performance({"views": 10, "likes": 1}, {"views": 120, "likes": None}, NOW)

    assert merged["views"] == 120
    assert merged["likes"] == 1
    assert merged["measured_at"] == NOW.isoformat()


@pytest.mark.asyncio
async def test_update_status_stamps_timestamp(service, make_influencer):
    influencer = make_influencer(id="inf-1", status="listed")
    _store(service, influencer)

    updated = await service.update_status("inf-1", "contacted", now=NOW)

    assert updated.status == "contacted"
    assert updated.contacted_at == NOW
    service.influencers.update.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_status_unknown_influencer(service):
    _store(service)

    with pytest.raises(InfluencerNotFoundError):
        await service.update_status("missing", "contacted")


@pytest.mark.asyncio
async def test_bulk_update_reports_partial_failure(service, make_influencer):
    """일부 실패해도 나머지는 그대로 반영되고 롤백하지 않는다."""
    first = make_influencer(id="inf-1", status="listed")
    second = make_influencer(id="inf-2", status="listed")
    _store(service, first, second)

    result = await service.bulk_update_status(["inf-1", "missing", "inf-2"], "contacted")

    assert result.succeeded == ["inf-1", "inf-2"]
    assert list(result.failed) == ["missing"]
    assert result.total == 3
    assert first.status == "contacted"
    assert second.status == "contacted"


@pytest.mark.asyncio
async def test_bulk_update_rejects_unknown_status(service):
    with pytest.raises(ValueError):
        await service.bulk_update_status(["inf-1"], "archived")


@pytest.mark.asyncio
async def test_bulk_reject_keeps_reason(service, make_influencer):
    first = make_influencer(id="inf-1", status="contacted")
    second = make_influencer(id="inf-2", status="contacted")
    _store(service, first, second)

    result = await service.bulk_update_status(["inf-1", "inf-2"], "rejected", rejection_reason="일정 불가")

    assert result.succeeded == ["inf-1", "inf-2"]
    assert [first.rejection_reason, second.rejection_reason] == ["일정 불가", "일정 불가"]
    assert first.rejected_at is not None


def _recording_savepoints(session):
    savepoints = []

    def _begin_nested():
        savepoint = MagicMock()
        savepoint.__aenter__ = AsyncMock(return_value=savepoint)
        savepoint.__aexit__ = AsyncMock(return_value=False)
        savepoints.append(savepoint)
        return savepoint

    session.begin_nested = MagicMock(side_effect=_begin_nested)
    return savepoints


@pytest.mark.asyncio
async def test_bulk_update_database_failure_rolls_back_only_that_item(service, mock_session, make_influencer):
    """DB 오류는 해당 항목의 세이브포인트만 롤백하고 나머지는 계속 진행한다."""
    records = [make_influencer(id=f"inf-{n}", status="listed") for n in (1, 2, 3)]
    _store(service, *records)
    savepoints = _recording_savepoints(mock_session)

    async def _update(influencer, updates):
        if influencer.id == "inf-2":
            raise RuntimeError("flush failed")
        return await _apply_updates(influencer, updates)

    service.influencers.update = AsyncMock(side_effect=_update)

    result = await service.bulk_update_status(["inf-1", "inf-2", "inf-3"], "contacted")

    assert result.succeeded == ["inf-1", "inf-3"]
    assert result.failed == {"inf-2": "flush failed"}
    assert len(savepoints) == 3
    assert savepoints[0].__aexit__.await_args.args[0] is None
    assert savepoints[1].__aexit__.await_args.args[0] is RuntimeError
    assert savepoints[2].__aexit__.await_args.args[0] is None
    assert records[2].status == "contacted"
    mock_session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_influencers_uses_savepoint_per_item(service, mock_session, make_influencer):
    _store(service, make_influencer(id="inf-1"), make_influencer(id="inf-2"))
    savepoints = _recording_savepoints(mock_session)
    service.influencers.delete = AsyncMock(side_effect=[RuntimeError("fk violation"), None])

    result = await service.delete_influencers(["inf-1", "inf-2"])

    assert result.succeeded == ["inf-2"]
    assert result.failed == {"inf-1": "fk violation"}
    assert savepoints[0].__aexit__.await_args.args[0] is RuntimeError
    assert savepoints[1].__aexit__.await_args.args[0] is None


@pytest.mark.asyncio
async def test_tracking_number_moves_accepted_to_shipped(service, make_influencer):
    influencer = make_influencer(id="inf-1", status="accepted")
    _store(service, influencer)

    updated = await service.update_shipping("inf-1", {"tracking_number": "555", "carrier": "CJ대한통운"}, now=NOW)

    assert updated.status == "shipped"
    assert updated.shipping["tracking_number"] == "555"
    assert updated.shipping["shipped_at"] == NOW.isoformat()


@pytest.mark.asyncio
async def test_tracking_number_keeps_other_statuses(service, make_influencer):
    influencer = make_influencer(id="inf-1", status="guide_sent")
    _store(service, influencer)

    updated = await service.update_shipping("inf-1", {"tracking_number": "555"}, now=NOW)

    assert updated.status == "guide_sent"


@pytest.mark.asyncio
async def test_apply_bulk_tracking(service, make_influencer):
    jane = make_influencer(id="inf-jane", account_id="jane", status="accepted")
    john = make_influencer(id="inf-john", account_id="john", status="accepted")
    _store(service, jane, john)

    parsed, result = await service.apply_bulk_tracking("project-1", "@jane, 111\nnobody, 222", carrier="한진택배")

    assert (parsed.valid, parsed.invalid) == (1, 1)
    assert result.succeeded == ["inf-jane"]
    assert jane.shipping["tracking_number"] == "111"
    assert jane.shipping["carrier"] == "한진택배"
    assert jane.status == "shipped"
    assert john.shipping["tracking_number"] is None


@pytest.mark.asyncio
async def test_add_influencer_validates(service):
    service.influencers.create = AsyncMock()

    with pytest.raises(ValidationError) as excinfo:
        await service.add_influencer("project-1", account_id="jane", seeding_type="paid", fee=0)

    assert [issue.field for issue in excinfo.value.issues] == ["fee"]
    service.influencers.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_influencer_creates_listed_record(service):
    service.influencers.create = AsyncMock(side_effect=lambda **fields: fields)

    created = await service.add_influencer("project-1", account_id="@jane", seeding_type="free", fee=10000)

    assert created["account_id"] == "jane"
    assert created["status"] == "listed"
    assert created["fee"] == 0
    assert created["listed_at"] is not None
    assert created["shipping"]["quantity"] == 1


@pytest.mark.asyncio
async def test_add_influencers_from_text(service, make_project):
    service.projects.get_by_id = AsyncMock(return_value=make_project(cost_price=Decimal("3000")))
    service.influencers.create_many = AsyncMock(side_effect=lambda rows: rows)

    parsed, created = await service.add_influencers_from_text(
        "project-1", "@jane\t제인\t1,200\n\n\t빈 계정", seeding_type="paid"
    )

    assert (parsed.valid, parsed.invalid) == (1, 1)
    assert created[0]["account_id"] == "jane"
    assert created[0]["follower_count"] == 1200
    assert created[0]["email"] is None
    assert created[0]["seeding_type"] == "paid"
    assert created[0]["product_price"] == Decimal("3000")


@pytest.mark.asyncio
async def test_project_report_keeps_both_completed_counts(service, make_influencer, make_project):
    service.projects.get_by_id = AsyncMock(return_value=make_project())
    _store(
        service,
        make_influencer(status="completed", completed_at=NOW),
        make_influencer(status="posted", completed_at=NOW),
        make_influencer(status="rejected"),
    )

    report = await service.get_project_report("project-1")

    assert report["funnel"]["completed"] == 1
    assert report["funnel"]["completed_at"] == 2
    assert report["completed_consistent"] is False
    assert report["funnel"]["rejected"] == 1
    assert report["tabs"]["dm_sent"] == 3
    assert report["stats"]["total"] == 3


@pytest.mark.asyncio
async def test_project_report_unknown_project(service):
    service.projects.get_by_id = AsyncMock(return_value=None)

    with pytest.raises(ProjectNotFoundError):
        await service.get_project_report("missing")


@pytest.mark.asyncio
async def test_daily_kpi_collects_brand_projects(service, make_influencer, make_project):
    today = datetime(2026, 3, 5, 2, 0, tzinfo=timezone.utc)
    service.projects.list_all = AsyncMock(return_value=[make_project(id="p1"), make_project(id="p2")])
    service.influencers.list_by_project = AsyncMock(side_effect=[
        [make_influencer(listed_at=today, accepted_at=today)],
        [make_influencer(listed_at=today), make_influencer(listed_at=datetime(2026, 3, 1, tzinfo=timezone.utc))],
    ])

    kpi = await service.get_daily_kpi("howpapa", date(2026, 3, 5))

    assert kpi.listup_actual == 2
    assert kpi.acceptance_actual == 1
    service.projects.list_all.assert_awaited_once_with("howpapa")
