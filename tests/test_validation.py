"""Tests for influencer form validation."""

import pytest

from seedboard.models import SeedingType
from seedboard.services.validation import requires_fee, validate_influencer


@pytest.mark.parametrize(
    "seeding_type, fee, expected",
    [
        ("paid", 0, True),
        (SeedingType.PAID, None, True),
        ("paid", "abc", True),
        ("paid", 30000, False),
        ("free", 0, False),
    ],
)
def test_requires_fee(seeding_type, fee, expected):
    assert requires_fee(seeding_type, fee) is expected


def test_valid_form_has_no_issues():
    assert validate_influencer(account_id="@jane", seeding_type="paid", fee=50000, quantity=2) == []


def test_collects_all_field_issues():
    issues = validate_influencer(account_id=" @ ", seeding_type="paid", fee=0, quantity=0)

    assert [issue.field for issue in issues] == ["account_id", "fee", "quantity"]


def test_non_numeric_quantity():
    issues = validate_influencer(account_id="jane", quantity="두 개")

    assert [issue.field for issue in issues] == ["quantity"]
