from datetime import datetime, time

import pytest

from orderboard.core.errors import ValidationError
from orderboard.models.order import OrderStatus, PaymentMethod
from orderboard.services.order_filters import OrderFilters, parse_datetime


def test_all_and_blank_values_mean_no_filter():
    filters = OrderFilters.from_query(status="all", payment_method="", customer_id="  ", search="   ")

    assert filters == OrderFilters()
    assert filters.criteria() == []


def test_enum_values_are_parsed_case_insensitively():
    filters = OrderFilters.from_query(status="In_Progress", payment_method="FULL")

    assert filters.status == OrderStatus.IN_PROGRESS
    assert filters.payment_method == PaymentMethod.FULL
    assert len(filters.criteria()) == 2


def test_unknown_status_is_rejected_with_field_error():
    with pytest.raises(ValidationError) as exc:
        OrderFilters.from_query(status="shipped")

    assert exc.value.errors[0]["field"] == "status"


def test_bare_end_date_covers_the_whole_day():
    filters = OrderFilters.from_query(start_date="2026-10-01", end_date="2026-10-31")

    assert filters.start_date == datetime(2026, 10, 1, 0, 0)
    assert filters.end_date == datetime.combine(datetime(2026, 10, 31).date(), time.max)


def test_explicit_end_datetime_is_kept():
    assert parse_datetime("2026-10-31T08:15:00", "endDate", is_end=True) == datetime(2026, 10, 31, 8, 15)


def test_aware_datetimes_become_naive_local_time():
    parsed = parse_datetime("2026-10-19T10:00:00Z", "startDate")

    assert parsed.tzinfo is None


def test_invalid_date_is_rejected():
    with pytest.raises(ValidationError) as exc:
        OrderFilters.from_query(end_date="31/10/2026")

    assert exc.value.errors == [{"field": "endDate", "message": "Fecha inválida"}]
