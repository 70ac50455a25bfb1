"""Seeding stage ordering, derived flags and status transitions.

Every screen that needs to know whether an influencer "was contacted" or
"has shipped" goes through the predicates here, so the table sort, the status
tabs and the CSV export always agree.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from seedboard.models import SeedingStatus

StatusLike = Union[SeedingStatus, str]

FORWARD_STAGES: Tuple[SeedingStatus, ...] = (
    SeedingStatus.LISTED,
    SeedingStatus.CONTACTED,
    SeedingStatus.ACCEPTED,
    SeedingStatus.SHIPPED,
    SeedingStatus.GUIDE_SENT,
    SeedingStatus.POSTED,
    SeedingStatus.COMPLETED,
)

_STAGE_INDEX: Dict[SeedingStatus, int] = {stage: index for index, stage in enumerate(FORWARD_STAGES)}

# Table ordering, rejected sits between accepted and shipped.
STATUS_SORT_ORDER: Dict[SeedingStatus, int] = {
    SeedingStatus.LISTED: 0,
    SeedingStatus.CONTACTED: 1,
    SeedingStatus.ACCEPTED: 2,
    SeedingStatus.REJECTED: 3,
    SeedingStatus.SHIPPED: 4,
    SeedingStatus.GUIDE_SENT: 5,
    SeedingStatus.POSTED: 6,
    SeedingStatus.COMPLETED: 7,
}

DM_SENT_STATUSES = frozenset(set(SeedingStatus) - {SeedingStatus.LISTED})
RESPONSE_STATUSES = frozenset(DM_SENT_STATUSES - {SeedingStatus.CONTACTED})
ACCEPTED_STATUSES = frozenset(FORWARD_STAGES[_STAGE_INDEX[SeedingStatus.ACCEPTED]:])
SHIPPED_STATUSES = frozenset(FORWARD_STAGES[_STAGE_INDEX[SeedingStatus.SHIPPED]:])
POSTED_STATUSES = frozenset({SeedingStatus.POSTED, SeedingStatus.COMPLETED})

# Timestamp column stamped when a record enters the status.
STATUS_TIMESTAMP_FIELDS: Dict[SeedingStatus, Optional[str]] = {
    SeedingStatus.LISTED: "listed_at",
    SeedingStatus.CONTACTED: "contacted_at",
    SeedingStatus.ACCEPTED: "accepted_at",
    SeedingStatus.REJECTED: "rejected_at",
    SeedingStatus.SHIPPED: None,  # lives in shipping.shipped_at
    SeedingStatus.GUIDE_SENT: "guide_sent_at",
    SeedingStatus.POSTED: "posted_at",
    SeedingStatus.COMPLETED: "completed_at",
}


def as_status(value: StatusLike) -> SeedingStatus:
    """Coerce a stored string to the closed status enum.

    Values outside the enum raise ``ValueError``; they are programming errors,
    not data to recover from.
    """
    if isinstance(value, SeedingStatus):
        return value
    return SeedingStatus(value)


def stage_index(status: StatusLike) -> Optional[int]:
    """Position in the forward funnel, ``None`` for rejected."""
    return _STAGE_INDEX.get(as_status(status))


def is_reached_stage(current_status: StatusLike, target_stage: StatusLike) -> bool:
    """Return True when ``current_status`` is at or past ``target_stage``.

    A rejected record never reaches a forward stage, even if it passed through
    contacted or accepted before being rejected.
    """
    current = as_status(current_status)
    target = as_status(target_stage)

    if target is SeedingStatus.REJECTED:
        return current is SeedingStatus.REJECTED
    if current is SeedingStatus.REJECTED:
        return False
    return _STAGE_INDEX[current] >= _STAGE_INDEX[target]


def dm_sent(status: StatusLike) -> bool:
    """Outreach DM went out (everything except listed)."""
    return as_status(status) in DM_SENT_STATUSES


def response_received(status: StatusLike) -> bool:
    """The influencer answered, positively or not."""
    return as_status(status) in RESPONSE_STATUSES


def is_accepted(record: Any) -> bool:
    """Accepted either by timestamp or by forward-stage membership."""
    if getattr(record, "accepted_at", None):
        return True
    return as_status(record.status) in ACCEPTED_STATUSES


def is_shipped(status: StatusLike) -> bool:
    return as_status(status) in SHIPPED_STATUSES


def is_posted(status: StatusLike) -> bool:
    return as_status(status) in POSTED_STATUSES


def flag_mark(value: bool) -> str:
    """CSV rendering of a boolean flag."""
    return "O" if value else ""


def status_change_updates(
    record: Any,
    new_status: StatusLike,
    *,
    now: Optional[datetime] = None,
    rejection_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the partial update for moving ``record`` to ``new_status``.

    The stage timestamp is stamped only when it is still empty; timestamps that
    are already present are never overwritten or cleared.
    """
    status = as_status(new_status)
    now = now or datetime.now(timezone.utc)
    updates: Dict[str, Any] = {"status": status.value}

    field = STATUS_TIMESTAMP_FIELDS[status]
    if field and not getattr(record, field, None):
        updates[field] = now

    if status is SeedingStatus.SHIPPED:
        shipping = dict(getattr(record, "shipping", None) or {})
        if not shipping.get("shipped_at"):
            shipping["shipped_at"] = now.isoformat()
            updates["shipping"] = shipping

    if status is SeedingStatus.REJECTED and rejection_reason:
        updates["rejection_reason"] = rejection_reason

    return updates
