"""Helpers for normalizing pasted and imported values."""

import re
from typing import Any, List, Optional

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_account_id(raw: Optional[str]) -> str:
    """Trim and drop a single leading ``@`` from a platform handle."""
    value = (raw or "").strip()
    if value.startswith("@"):
        value = value[1:]
    return value


def account_key(raw: Optional[str]) -> str:
    """Case-insensitive comparison key for account ids."""
    return normalize_account_id(raw).lower()


def parse_follower_count(raw: Any) -> int:
    """Keep digits only, ``"1,234"`` -> 1234 and ``"없음"`` -> 0."""
    digits = _NON_DIGITS.sub("", str(raw or ""))
    return int(digits) if digits else 0


def parse_decimal(raw: Any, default: float = 0.0) -> float:
    """Lenient float parsing for price columns."""
    try:
        return float(str(raw).replace(",", "").strip())
    except (TypeError, ValueError):
        return default


def split_fields(line: str) -> List[str]:
    """Split on tab when the line has one, otherwise on comma; trim each field."""
    delimiter = "\t" if "\t" in line else ","
    return [part.strip() for part in line.split(delimiter)]


def parse_int(raw: Any) -> int:
    """Digits-only integer parsing shared by stock and counter columns."""
    return parse_follower_count(raw)
