"""Tests for stage ordering, derived flags and status transitions."""

from datetime import datetime, timezone

import pytest

from seedboard.models import SeedingStatus
from seedboard.services.status_machine import (
    FORWARD_STAGES,
    dm_sent,
    flag_mark,
    is_accepted,
    is_reached_stage,
    is_shipped,
    response_received,
    stage_index,
    status_change_updates,
)

NOW = datetime(2026, 3, 5, 9, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "current, target, expected",
    [
        ("listed", "listed", True),
        ("shipped", "contacted", True),
        ("completed", "listed", True),
        ("contacted", "accepted", False),
        ("guide_sent", "posted", False),
        ("rejected", "listed", False),
        ("rejected", "contacted", False),
        ("rejected", "rejected", True),
        ("accepted", "rejected", False),
    ],
)
def test_is_reached_stage(current, target, expected):
    assert is_reached_stage(current, target) is expected


def test_is_reached_stage_accepts_enum_members():
    assert is_reached_stage(SeedingStatus.POSTED, SeedingStatus.SHIPPED)


def test_unknown_status_is_a_programming_error():
    with pytest.raises(ValueError):
        is_reached_stage("archived", "listed")


def test_stage_index_excludes_rejected():
    assert stage_index("listed") == 0
    assert stage_index("completed") == len(FORWARD_STAGES) - 1
    assert stage_index("rejected") is None


@pytest.mark.parametrize("status", [status.value for status in SeedingStatus])
def test_flags_imply_each_other(status):
    """발송 ⟹ 응답 ⟹ DM발송 관계는 모든 상태에서 유지된다."""
    if is_shipped(status):
        assert response_received(status)
    if response_received(status):
        assert dm_sent(status)


def test_rejected_counts_as_contacted_and_responded():
    assert dm_sent("rejected")
    assert response_received("rejected")
    assert not is_shipped("rejected")


def test_listed_and_contacted_flags():
    assert not dm_sent("listed")
    assert dm_sent("contacted")
    assert not response_received("contacted")


def test_is_accepted_uses_timestamp_or_stage(make_influencer):
    assert is_accepted(make_influencer(status="guide_sent"))
    assert not is_accepted(make_influencer(status="contacted"))
    # 수락 후 거절된 경우 accepted_at 이 남아 있으면 수락으로 본다
    assert is_accepted(make_influencer(status="rejected", accepted_at=NOW))


def test_flag_mark():
    assert flag_mark(True) == "O"
    assert flag_mark(False) == ""


def test_status_change_stamps_timestamp_once(make_influencer):
    record = make_influencer(status="listed")

    updates = status_change_updates(record, "contacted", now=NOW)

    assert updates == {"status": "contacted", "contacted_at": NOW}


def test_status_change_keeps_existing_timestamp(make_influencer):
    earlier = datetime(2026, 3, 1, tzinfo=timezone.utc)
    record = make_influencer(status="contacted", accepted_at=earlier)

    updates = status_change_updates(record, SeedingStatus.ACCEPTED, now=NOW)

    assert updates == {"status": "accepted"}


def test_status_change_to_shipped_stamps_shipping(make_influencer):
    record = make_influencer(status="accepted")

    updates = status_change_updates(record, "shipped", now=NOW)

    assert updates["status"] == "shipped"
    assert updates["shipping"]["shipped_at"] == NOW.isoformat()
    assert updates["shipping"]["quantity"] == 1
    assert record.shipping["shipped_at"] is None


def test_status_change_to_rejected_records_reason(make_influencer):
    record = make_influencer(status="contacted")

    updates = status_change_updates(record, "rejected", now=NOW, rejection_reason="일정 불가")

    assert updates == {"status": "rejected", "rejected_at": NOW, "rejection_reason": "일정 불가"}
