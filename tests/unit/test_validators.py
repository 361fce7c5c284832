from __future__ import annotations

from datetime import datetime

import pytest

from backend.app.core.validators import (
    MAX_ID,
    MAX_LIMIT,
    MAX_PAGE,
    MAX_STRING_LENGTH,
    is_in_range,
    is_not_future_date,
    is_valid_date,
    is_valid_date_range,
    is_valid_email,
    is_valid_level,
    is_valid_password,
    is_valid_rating,
    parse_int_or_default,
    parse_iso_datetime,
    sanitize_string,
    validate_pagination,
    validate_required_fields,
)


def test_required_fields_reports_absent_null_and_empty() -> None:
    data = {"email": "a@b.co", "password": "", "first_name": None}
    missing = validate_required_fields(data, ["email", "password", "first_name", "last_name"])
    assert missing == ["password", "first_name", "last_name"]


def test_required_fields_accepts_zero_and_false() -> None:
    assert validate_required_fields({"a": 0, "b": False}, ["a", "b"]) == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("teste@example.com", True),
        ("a@b.co", True),
        ("email-invalido", False),
        ("sem@ponto", False),
        ("com espaco@example.com", False),
        ("a@b.co\n", False),
        ("\na@b.co", False),
        ("", False),
        (None, False),
        (123, False),
    ],
)
def test_is_valid_email(value, expected) -> None:
    assert is_valid_email(value) is expected


def test_is_valid_password_requires_six_characters() -> None:
    assert is_valid_password("123456")
    assert not is_valid_password("12345")
    assert not is_valid_password(None)
    assert not is_valid_password(123456)


@pytest.mark.parametrize("value", [1, 10, 5.5, "7", " 3 "])
def test_levels_inside_range(value) -> None:
    assert is_valid_level(value)
    assert is_valid_rating(value)


@pytest.mark.parametrize("value", [0, 11, -1, "abc", "", None, True, [5], float("nan")])
def test_levels_outside_range_or_not_numeric(value) -> None:
    assert not is_valid_level(value)
    assert not is_valid_rating(value)


def test_is_in_range_custom_bounds() -> None:
    assert is_in_range(0, 0, 0)
    assert not is_in_range(2, 0, 1)


def test_parse_iso_datetime_variants() -> None:
    assert parse_iso_datetime("2024-01-15") == datetime(2024, 1, 15)
    assert parse_iso_datetime("2024-01-15T10:30:00") == datetime(2024, 1, 15, 10, 30)
    assert parse_iso_datetime("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30)
    assert parse_iso_datetime("2024-01-15T10:30:00+02:00") == datetime(2024, 1, 15, 8, 30)
    assert parse_iso_datetime("data-invalida") is None
    assert parse_iso_datetime(None) is None
    assert parse_iso_datetime(20240115) is None


def test_is_valid_date() -> None:
    assert is_valid_date("2024-02-29")
    assert not is_valid_date("2024-02-30")
    assert not is_valid_date("")


def test_is_not_future_date() -> None:
    now = datetime(2024, 6, 1, 12, 0)
    assert is_not_future_date("2024-06-01T12:00:00", now=now)
    assert is_not_future_date("2024-05-31", now=now)
    assert not is_not_future_date("2024-06-01T12:00:01", now=now)
    assert not is_not_future_date("nope", now=now)


def test_is_not_future_date_defaults_to_current_time() -> None:
    assert is_not_future_date("2000-01-01")
    assert not is_not_future_date("2999-01-01")


def test_is_valid_date_range() -> None:
    assert is_valid_date_range("2024-01-01", "2024-01-31")
    assert is_valid_date_range("2024-01-01", "2024-01-01")
    assert not is_valid_date_range("2024-02-01", "2024-01-01")
    assert not is_valid_date_range("2024-01-01", "bad")


def test_sanitize_string_trims_and_truncates() -> None:
    assert sanitize_string("  texto  ") == "texto"
    long_value = "x" * (MAX_STRING_LENGTH + 50)
    assert len(sanitize_string(long_value)) == MAX_STRING_LENGTH
    assert sanitize_string(None) == ""
    assert sanitize_string(42) == ""


def test_parse_int_or_default() -> None:
    assert parse_int_or_default("12") == 12
    assert parse_int_or_default(3.9) == 3
    assert parse_int_or_default("abc", 7) == 7
    assert parse_int_or_default(None, 1) == 1
    assert parse_int_or_default(True, 1) == 1
    assert parse_int_or_default("2.5") == 2
    assert parse_int_or_default(" 12abc") == 12
    assert parse_int_or_default("9" * 5000, 1) == 1


def test_validate_pagination_defaults() -> None:
    pagination = validate_pagination()
    assert (pagination.page, pagination.limit, pagination.offset) == (1, 20, 0)


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        ("2", "2", (2, 2, 2)),
        ("0", "200", (1, 100, 0)),
        ("-3", "0", (1, 1, 0)),
        ("abc", "xyz", (1, 20, 0)),
        (3, 10, (3, 10, 20)),
        ("2.5", "10", (2, 10, 10)),
    ],
)
def test_validate_pagination_clamps(page, limit, expected) -> None:
    pagination = validate_pagination(page, limit)
    assert (pagination.page, pagination.limit, pagination.offset) == expected


def test_validate_pagination_keeps_offset_within_int64() -> None:
    pagination = validate_pagination("99999999999999999999", MAX_LIMIT)
    assert pagination.page == MAX_PAGE
    assert pagination.offset <= MAX_ID
