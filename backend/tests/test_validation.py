"""Validation: shape checks and normalization of request values.

Invariants:
    - Month is YYYY-MM with a real month number
    - Dates are checked for shape only unless strict mode is on
    - Empty optional fields become None, never ""
    - Ids are strictly positive integers with no remainder
"""

from datetime import date

import pytest

from eventcal.errors import InvalidFieldError
from eventcal.validation import (
    EventFields, MonthKey,
    normalize_create_fields, validate_date_string, validate_id, validate_month,
)


def test_validate_month_accepts_year_month():
    assert validate_month("2024-01") == MonthKey(2024, 1)


@pytest.mark.parametrize("raw", ["2024-13", "24-01", "2024-1", "2024-00", "0000-01", "2024/01", "", None, " 2024-01"])
def test_validate_month_rejects_malformed(raw):
    with pytest.raises(InvalidFieldError) as exc:
        validate_month(raw)
    assert exc.value.field == "month"
    assert exc.value.http_status == 400


def test_month_key_range_is_half_open():
    key = validate_month("2024-02")
    assert key.start == date(2024, 2, 1)
    assert key.next_start == date(2024, 3, 1)
    assert str(key) == "2024-02"


def test_month_key_december_rolls_into_next_year():
    key = MonthKey(2023, 12)
    assert key.next_start == date(2024, 1, 1)


def test_month_key_last_representable_month_has_no_upper_bound():
    key = validate_month("9999-12")
    assert key.start == date(9999, 12, 1)
    assert key.next_start is None


def test_validate_date_string_accepts_shape_only():
    assert validate_date_string("2024-03-05") == "2024-03-05"
    # calendar validity is not checked by default
    assert validate_date_string("2024-02-31") == "2024-02-31"


def test_validate_date_string_strict_rejects_impossible_day():
    with pytest.raises(InvalidFieldError):
        validate_date_string("2024-02-31", strict=True)
    assert validate_date_string("2024-02-29", strict=True) == "2024-02-29"


@pytest.mark.parametrize("raw", ["2024-3-05", "05-03-2024", "2024-03-05T10:00", "", None])
def test_validate_date_string_rejects_malformed(raw):
    with pytest.raises(InvalidFieldError) as exc:
        validate_date_string(raw)
    assert exc.value.field == "event_date"


def test_normalize_create_fields_trims_and_drops_empty_optionals():
    fields = normalize_create_fields({
        "title": "  Standup ",
        "event_date": " 2024-03-05 ",
        "start_time": "09:00",
        "end_time": " ",
        "notes": "",
    })
    assert fields == EventFields(
        title="Standup", event_date="2024-03-05",
        start_time="09:00", end_time=None, notes=None,
    )


def test_normalize_create_fields_passes_times_through_unchecked():
    fields = normalize_create_fields({"title": "x", "event_date": "2024-03-05", "start_time": "later"})
    assert fields.start_time == "later"


@pytest.mark.parametrize("body", [{"title": "   ", "event_date": "2024-03-05"}, {"event_date": "2024-03-05"}])
def test_normalize_create_fields_requires_title(body):
    with pytest.raises(InvalidFieldError) as exc:
        normalize_create_fields(body)
    assert exc.value.field == "title"


def test_normalize_create_fields_requires_event_date():
    with pytest.raises(InvalidFieldError) as exc:
        normalize_create_fields({"title": "Standup"})
    assert exc.value.field == "event_date"


@pytest.mark.parametrize("body", [None, [], "title=Standup", 42])
def test_normalize_create_fields_treats_non_object_body_as_empty(body):
    with pytest.raises(InvalidFieldError) as exc:
        normalize_create_fields(body)
    assert exc.value.field == "title"


def test_normalize_create_fields_stringifies_scalars():
    fields = normalize_create_fields({"title": 2024, "event_date": "2024-03-05", "notes": 7})
    assert fields.title == "2024"
    assert fields.notes == "7"


@pytest.mark.parametrize("raw,expected", [("1", 1), ("42", 42), (" 7 ", 7), (99, 99), ("9223372036854775807", 2**63 - 1), ("0001", 1)])
def test_validate_id_accepts_positive_integers(raw, expected):
    assert validate_id(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-1", "1.5", "1.0", "abc", "12abc", "", None, 0, -3, True,
                                 "9223372036854775808", "9" * 5000, 2**63])
def test_validate_id_rejects_everything_else(raw):
    with pytest.raises(InvalidFieldError) as exc:
        validate_id(raw)
    assert exc.value.field == "id"
