"""TradeBoost — Reporting Period Resolver.

Computes the current month's boundaries in a reporting timezone. The spend
sync and the dashboard metrics both resolve their period through here so
they agree on what "this month" means within a request.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel

from tradeboost.config import settings
from tradeboost.core.errors import ConfigurationError

Clock = Callable[[], datetime]
NowLike = Union[datetime, Clock, None]


class MonthPeriod(BaseModel):
    """Current calendar month in a reporting timezone."""

    timezone: str
    month_key: str  # YYYY-MM
    month_start: int  # epoch ms, inclusive
    month_end: int  # epoch ms, exclusive
    today_date: str  # YYYY-MM-DD
    first_of_month: str  # YYYY-MM-01


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_ms(now: NowLike = None) -> int:
    """Epoch milliseconds for ``now`` (defaults to the wall clock)."""
    return to_epoch_ms(resolve_now(now))


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def resolve_now(now: NowLike) -> datetime:
    if now is None:
        moment = utc_now()
    elif callable(now):
        moment = now()
    else:
        moment = now
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Invalid reporting timezone: {name!r}") from e


def resolve_month_period(
    tz_name: Optional[str] = None,
    now: NowLike = None,
) -> MonthPeriod:
    """Resolve the current month for ``tz_name`` at instant ``now``.

    ``month_start`` and ``month_end`` are local midnights on the 1st of this
    month and the next, converted to epoch ms, so the pair forms a half-open
    interval. ``now`` may be an aware datetime or a zero-arg clock; naive
    datetimes are read as UTC.
    """
    tz_name = tz_name or settings.reporting_timezone
    zone = _load_zone(tz_name)
    local_now = resolve_now(now).astimezone(zone)

    year, month = local_now.year, local_now.month
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)

    start = datetime(year, month, 1, tzinfo=zone)
    end = datetime(next_year, next_month, 1, tzinfo=zone)

    return MonthPeriod(
        timezone=tz_name,
        month_key=f"{year:04d}-{month:02d}",
        month_start=to_epoch_ms(start),
        month_end=to_epoch_ms(end),
        today_date=f"{year:04d}-{month:02d}-{local_now.day:02d}",
        first_of_month=f"{year:04d}-{month:02d}-01",
    )
