"""Field-level validation for influencer forms."""

from dataclasses import dataclass
from typing import Any, List, Optional

from seedboard.models import SeedingType


@dataclass
class ValidationIssue:
    """Represents a single invalid form field."""
    field: str
    message: str


def requires_fee(seeding_type: Any, fee: Any) -> bool:
    """Paid seeding must carry a positive fee."""
    if getattr(seeding_type, "value", seeding_type) != SeedingType.PAID.value:
        return False
    try:
        return float(fee or 0) <= 0
    except (TypeError, ValueError):
        return True


def validate_influencer(
    *,
    account_id: Optional[str],
    seeding_type: Any = SeedingType.FREE,
    fee: Any = 0,
    quantity: Any = 1,
) -> List[ValidationIssue]:
    """Return the problems with an influencer form, empty when it is valid."""
    issues: List[ValidationIssue] = []

    if not (account_id or "").strip().lstrip("@"):
        issues.append(ValidationIssue("account_id", "계정 ID를 입력하세요."))

    if requires_fee(seeding_type, fee):
        issues.append(ValidationIssue("fee", "유료 시딩은 원고비를 입력해야 합니다."))

    try:
        if int(quantity) < 1:
            issues.append(ValidationIssue("quantity", "수량은 1개 이상이어야 합니다."))
    except (TypeError, ValueError):
        issues.append(ValidationIssue("quantity", "수량은 숫자여야 합니다."))

    return issues
