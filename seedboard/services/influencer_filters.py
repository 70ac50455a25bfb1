"""Filtering and sorting of influencer lists for the seeding table."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from seedboard.services.status_machine import (
    STATUS_SORT_ORDER,
    as_status,
    dm_sent,
    is_accepted,
    is_shipped,
    response_received,
)

ALL = "all"


@dataclass
class InfluencerFilters:
    """Table filters; ``'all'`` leaves a dimension unscoped."""
    project_id: str = ALL
    status: str = ALL
    seeding_type: str = ALL
    content_type: str = ALL
    platform: str = ALL
    search: str = ""


def _value(raw: Any) -> Any:
    return getattr(raw, "value", raw)


def _matches_search(influencer: Any, search: str) -> bool:
    needle = search.lower()
    haystack = (
        influencer.account_id,
        influencer.account_name,
        influencer.email,
        getattr(influencer, "category", None),
    )
    return any(needle in value.lower() for value in haystack if value)


def filter_influencers(influencers: Sequence[Any], filters: InfluencerFilters) -> List[Any]:
    """Influencers matching every active filter."""
    scoped = (
        ("project_id", filters.project_id),
        ("status", filters.status),
        ("seeding_type", filters.seeding_type),
        ("content_type", filters.content_type),
        ("platform", filters.platform),
    )

    result = []
    for influencer in influencers:
        if any(
            wanted != ALL and _value(getattr(influencer, attr)) != _value(wanted)
            for attr, wanted in scoped
        ):
            continue
        if filters.search and not _matches_search(influencer, filters.search):
            continue
        result.append(influencer)
    return result


SORT_KEYS: Dict[str, Callable[[Any], Any]] = {
    "account_id": lambda inf: inf.account_id.lower(),
    "follower_count": lambda inf: inf.follower_count or 0,
    "status": lambda inf: STATUS_SORT_ORDER[as_status(inf.status)],
    "performance": lambda inf: int((inf.performance or {}).get("views") or 0),
    "dm_sent": lambda inf: int(dm_sent(inf.status)),
    "response_received": lambda inf: int(response_received(inf.status)),
    "accepted": lambda inf: int(is_accepted(inf)),
    "shipped": lambda inf: int(is_shipped(inf.status)),
}


def sort_influencers(influencers: Sequence[Any], field: str = "account_id", descending: bool = False) -> List[Any]:
    """Stable sort by a table column; records without ``posted_at`` always come last."""
    if field == "posted_at":
        present = [inf for inf in influencers if inf.posted_at is not None]
        missing = [inf for inf in influencers if inf.posted_at is None]
        return sorted(present, key=lambda inf: inf.posted_at, reverse=descending) + missing

    key = SORT_KEYS[field]
    return sorted(influencers, key=key, reverse=descending)
