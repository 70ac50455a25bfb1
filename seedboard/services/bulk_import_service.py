"""Parsing of pasted tabular text for bulk influencer and tracking imports."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import structlog

from seedboard.utils.parsing import account_key, normalize_account_id, parse_follower_count, split_fields

logger = structlog.get_logger(__name__)

ACTION_CREATE = "create"
ACTION_MATCH = "match"
ACTION_POSITION = "position"

# Fields filled, in order, by the columns after the account id.
DEFAULT_UPDATE_FIELDS = ("tracking_number", "carrier")


@dataclass
class ParsedRow:
    """One accepted input line."""
    line: int
    action: str
    account_id: str = ""
    values: Dict[str, Any] = field(default_factory=dict)
    target_id: Optional[Any] = None
    target_index: Optional[int] = None


@dataclass
class BulkParseResult:
    """Outcome of parsing a pasted block of text."""
    valid: int = 0
    invalid: int = 0
    parsed: List[ParsedRow] = field(default_factory=list)

    def preview(self, limit: int = 5) -> List[ParsedRow]:
        """First rows for on-screen confirmation; ``parsed`` stays complete."""
        return self.parsed[:limit]


def _new_influencer_row(line_number: int, fields: List[str]) -> Optional[ParsedRow]:
    account_id = normalize_account_id(fields[0])
    if not account_id:
        return None

    def column(index: int) -> str:
        return fields[index] if len(fields) > index else ""

    return ParsedRow(
        line=line_number,
        action=ACTION_CREATE,
        account_id=account_id,
        values={
            "account_id": account_id,
            "account_name": column(1),
            "follower_count": parse_follower_count(column(2)),
            "email": column(3),
            "phone": column(4),
        },
    )


def _update_row(
    line_number: int,
    line_index: int,
    fields: List[str],
    existing: Sequence[Any],
    by_account: Dict[str, int],
    update_fields: Sequence[str],
) -> Optional[ParsedRow]:
    if not fields[0]:
        return None

    if len(fields) >= 2:
        position = by_account.get(account_key(fields[0]))
        if position is None:
            return None
        target = existing[position]
        values = {
            name: value
            for name, value in zip(update_fields, fields[1:])
            if value
        }
        return ParsedRow(
            line=line_number,
            action=ACTION_MATCH,
            account_id=normalize_account_id(target.account_id),
            values=values,
            target_id=getattr(target, "id", None),
            target_index=position,
        )

    # A single column is applied to the table row with the same index
    if line_index < len(existing):
        target = existing[line_index]
        return ParsedRow(
            line=line_number,
            action=ACTION_POSITION,
            account_id=normalize_account_id(target.account_id),
            values={update_fields[0]: fields[0]},
            target_id=getattr(target, "id", None),
            target_index=line_index,
        )
    return None


def parse_lines(
    text: str,
    existing_records: Optional[Sequence[Any]] = None,
    *,
    update_fields: Sequence[str] = DEFAULT_UPDATE_FIELDS,
) -> BulkParseResult:
    """Parse pasted text into rows, counting lines that cannot be used.

    Without ``existing_records`` every line describes a new influencer
    (account id, name, followers, email, phone). With them, a line of two or
    more fields updates the record whose account id matches the first field,
    and a single-field line updates the record at the same position.
    Blank lines are ignored; malformed lines are counted as invalid.
    """
    result = BulkParseResult()
    lines = [line for line in (text or "").splitlines() if line.strip()]

    by_account: Dict[str, int] = {}
    if existing_records is not None:
        for position, record in enumerate(existing_records):
            by_account.setdefault(account_key(record.account_id), position)

    for line_index, line in enumerate(lines):
        fields = split_fields(line)
        if existing_records is None:
            row = _new_influencer_row(line_index + 1, fields)
        else:
            row = _update_row(line_index + 1, line_index, fields, existing_records, by_account, update_fields)

        if row is None:
            result.invalid += 1
            continue
        result.parsed.append(row)
        result.valid += 1

    logger.debug(
        "Bulk text parsed",
        lines=len(lines),
        valid=result.valid,
        invalid=result.invalid,
    )
    return result
