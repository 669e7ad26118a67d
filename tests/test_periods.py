"""Reporting period resolution."""

from datetime import datetime, timezone

import pytest

from tradeboost.core.errors import ConfigurationError
from tradeboost.core.money import Money
from tradeboost.core.periods import now_ms, resolve_month_period, resolve_now, to_epoch_ms


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_month_period_london_winter():
    period = resolve_month_period("Europe/London", now=_utc(2026, 3, 15, 12, 0))
    assert period.month_key == "2026-03"
    assert period.first_of_month == "2026-03-01"
    assert period.today_date == "2026-03-15"
    assert period.month_start == to_epoch_ms(_utc(2026, 3, 1))
    # April starts on BST, so local midnight is 23:00 UTC the day before
    assert period.month_end == to_epoch_ms(_utc(2026, 3, 31, 23, 0))


def test_december_rolls_into_next_year():
    period = resolve_month_period("Europe/London", now=_utc(2026, 12, 31, 23, 30))
    assert period.month_key == "2026-12"
    assert period.today_date == "2026-12-31"
    assert period.month_end == to_epoch_ms(_utc(2027, 1, 1))


def test_local_date_differs_from_utc_date():
    # 02:00 UTC on 1 April is still 31 March in New York
    period = resolve_month_period("America/New_York", now=_utc(2026, 4, 1, 2, 0))
    assert period.month_key == "2026-03"
    assert period.today_date == "2026-03-31"
    assert period.month_start == to_epoch_ms(_utc(2026, 3, 1, 5, 0))
    assert period.month_end == to_epoch_ms(_utc(2026, 4, 1, 4, 0))


@pytest.mark.parametrize(
    "tz_name",
    ["Europe/London", "America/New_York", "Asia/Kolkata", "Pacific/Auckland", "UTC"],
)
def test_now_falls_inside_period(tz_name):
    now = _utc(2026, 10, 25, 0, 30)
    period = resolve_month_period(tz_name, now=now)
    assert period.month_start <= to_epoch_ms(now) < period.month_end
    assert period.first_of_month <= period.today_date
    assert period.today_date.startswith(period.month_key)


def test_defaults_to_configured_timezone():
    period = resolve_month_period(now=_utc(2026, 3, 15, 12, 0))
    assert period.timezone == "Europe/London"


def test_invalid_timezone_raises():
    with pytest.raises(ConfigurationError):
        resolve_month_period("Mars/Olympus_Mons")


def test_clock_callable_and_naive_datetime():
    assert resolve_now(lambda: _utc(2026, 1, 2)) == _utc(2026, 1, 2)
    assert resolve_now(datetime(2026, 1, 2)) == _utc(2026, 1, 2)
    assert now_ms(_utc(1970, 1, 1, 0, 0, 1)) == 1000


def test_money_addition_and_formatting():
    total = Money(micros=1_500_000, currency_code="GBP") + Money.from_major(3.0, "GBP")
    assert total.micros == 4_500_000
    assert total.amount == 4.5
    assert str(total) == "4.50 GBP"

    with pytest.raises(ValueError):
        total + Money(micros=1, currency_code="EUR")
