# -*- coding: utf-8 -*-
from datetime import date, datetime, timedelta, timezone

import pytest

from utils.datetime_helpers import date_to_iso, datetime_to_iso, parse_date
from utils.exceptions import ValidationError


def test_naive_datetime_is_treated_as_utc():
    assert datetime_to_iso(datetime(2025, 10, 20, 16, 0, 0)) == "2025-10-20T16:00:00+00:00"


def test_aware_datetime_is_converted_to_utc():
    paris_tz = timezone(timedelta(hours=2))
    aware_dt = datetime(2025, 10, 20, 18, 0, 0, tzinfo=paris_tz)

    assert datetime_to_iso(aware_dt) == "2025-10-20T16:00:00+00:00"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-02-29", date(2024, 2, 29)),
        ("2024-02-29T10:00:00.000Z", date(2024, 2, 29)),
        (date(2024, 1, 1), date(2024, 1, 1)),
        (datetime(2024, 1, 1, 8, 30), date(2024, 1, 1)),
        ("", None),
        (None, None),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", ["2024-13-01", "yesterday", 20240101])
def test_parse_date_invalid(value):
    with pytest.raises(ValidationError):
        parse_date(value)


def test_none_passthrough():
    assert datetime_to_iso(None) is None
    assert date_to_iso(None) is None
