from datetime import date, datetime, timezone

import pytest

from cibercontrol.core.business_day import business_date, business_day_bounds, month_bounds, optional_bounds
from cibercontrol.core.errors import ValidationError


def test_single_day_covers_06_to_06_lima():
    start, end = business_day_bounds(date(2024, 5, 1))
    # 06:00 en Lima (UTC-5) = 11:00 UTC
    assert start == datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 2, 11, 0, tzinfo=timezone.utc)


def test_multi_day_range_ends_at_end_date_six_am():
    start, end = business_day_bounds(date(2024, 5, 1), date(2024, 5, 3))
    assert start == datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 3, 11, 0, tzinfo=timezone.utc)


def test_same_start_and_end_covers_one_full_day():
    assert business_day_bounds(date(2024, 5, 1), date(2024, 5, 1)) == business_day_bounds(date(2024, 5, 1))


def test_inverted_range_is_rejected():
    with pytest.raises(ValidationError):
        business_day_bounds(date(2024, 5, 3), date(2024, 5, 1))


def test_business_date_before_six_belongs_to_previous_day():
    # 2024-05-02 03:00 Lima = 08:00 UTC -> todavia es el dia 1
    assert business_date(datetime(2024, 5, 2, 8, 0, tzinfo=timezone.utc)) == date(2024, 5, 1)
    # 2024-05-02 06:00 Lima = 11:00 UTC -> ya es el dia 2
    assert business_date(datetime(2024, 5, 2, 11, 0, tzinfo=timezone.utc)) == date(2024, 5, 2)


def test_business_date_treats_naive_as_utc():
    assert business_date(datetime(2024, 5, 2, 10, 59)) == date(2024, 5, 1)


def test_month_bounds_december():
    start, end = month_bounds(2023, 12)
    assert start == datetime(2023, 12, 1, 11, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc)


def test_optional_bounds():
    assert optional_bounds(None, None) is None
    assert optional_bounds(date(2024, 5, 1), None) == business_day_bounds(date(2024, 5, 1))
    with pytest.raises(ValidationError):
        optional_bounds(None, date(2024, 5, 1))
