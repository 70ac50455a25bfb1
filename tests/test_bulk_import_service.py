"""Tests for the pasted text parser used by bulk add and tracking imports."""

import pytest

from seedboard.services.bulk_import_service import (
    ACTION_CREATE,
    ACTION_MATCH,
    ACTION_POSITION,
    parse_lines,
)
from seedboard.utils.parsing import account_key, normalize_account_id, parse_follower_count, split_fields


@pytest.mark.parametrize(
    "raw, expected",
    [("1,234", 1234), ("없음", 0), ("", 0), (None, 0), ("12.5만", 125), (3400, 3400)],
)
def test_parse_follower_count(raw, expected):
    assert parse_follower_count(raw) == expected


def test_split_fields_prefers_tab():
    assert split_fields("abc\t1,234\t이름") == ["abc", "1,234", "이름"]
    assert split_fields(" abc , 123 ") == ["abc", "123"]


def test_account_normalization():
    assert normalize_account_id("  @Jane ") == "Jane"
    assert account_key("@JANE") == account_key("jane")


def test_match_by_account_id(make_influencer):
    existing = [make_influencer(id="inf-abc", account_id="abc")]

    result = parse_lines("@abc, 1234567890", existing)

    assert result.valid == 1
    assert result.invalid == 0
    row = result.parsed[0]
    assert row.action == ACTION_MATCH
    assert row.target_id == "inf-abc"
    assert row.values == {"tracking_number": "1234567890"}


def test_match_is_case_insensitive_and_fills_carrier(make_influencer):
    existing = [make_influencer(account_id="other"), make_influencer(id="inf-jane", account_id="Jane")]

    result = parse_lines("jane\t555\t롯데택배", existing)

    row = result.parsed[0]
    assert row.target_index == 1
    assert row.values == {"tracking_number": "555", "carrier": "롯데택배"}


def test_positional_assignment(make_influencer):
    existing = [make_influencer(id="first"), make_influencer(id="second")]

    result = parse_lines("1111111111\n2222222222", existing)

    assert result.valid == 2
    assert [row.action for row in result.parsed] == [ACTION_POSITION, ACTION_POSITION]
    assert [(row.target_id, row.values["tracking_number"]) for row in result.parsed] == [
        ("first", "1111111111"),
        ("second", "2222222222"),
    ]


def test_positional_line_beyond_table_is_invalid(make_influencer):
    result = parse_lines("111\n222", [make_influencer()])

    assert result.valid == 1
    assert result.invalid == 1


def test_unmatched_account_is_invalid(make_influencer):
    result = parse_lines("nobody, 123\n, 456", [make_influencer(account_id="abc")])

    assert result.valid == 0
    assert result.invalid == 2
    assert result.parsed == []


def test_blank_lines_are_ignored(make_influencer):
    existing = [make_influencer(account_id="abc")]

    result = parse_lines("\n  \nabc, 1\n\n", existing)

    assert result.valid == 1
    assert result.invalid == 0
    assert result.parsed[0].line == 1


def test_parsing_is_repeatable(make_influencer):
    existing = [make_influencer(account_id="a"), make_influencer(account_id="b")]
    text = "a, 100\nb, 200"

    assert parse_lines(text, existing).parsed == parse_lines(text, existing).parsed


def test_preview_does_not_truncate_parsed(make_influencer):
    existing = [make_influencer() for _ in range(8)]
    text = "\n".join(str(number) for number in range(8))

    result = parse_lines(text, existing)

    assert len(result.preview(5)) == 5
    assert len(result.parsed) == 8


def test_new_influencer_rows():
    result = parse_lines("@jane\t제인\t12,300\tjane@example.com\t010-1234-5678\n\t이름만")

    assert result.valid == 1
    assert result.invalid == 1
    row = result.parsed[0]
    assert row.action == ACTION_CREATE
    assert row.values == {
        "account_id": "jane",
        "account_name": "제인",
        "follower_count": 12300,
        "email": "jane@example.com",
        "phone": "010-1234-5678",
    }


def test_new_influencer_row_with_account_only():
    result = parse_lines("solo")

    assert result.parsed[0].values["follower_count"] == 0
    assert result.parsed[0].values["account_name"] == ""
