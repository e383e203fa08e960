"""Trading-day calendar.

A trading day is any Monday–Friday. Exchange holidays are not modelled; the
data provider simply returns no bar for them and the scoring engine only ever
evaluates days that carry at least one bar.
"""

from datetime import date, datetime, timedelta
from typing import List, Union

DateLike = Union[str, date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def is_trading_day(day: DateLike) -> bool:
    """Return True for Monday through Friday."""
    return _as_date(day).weekday() < 5   # Mon=0 … Fri=4


def trading_days(start: DateLike, end: DateLike) -> List[str]:
    """Return Mon–Fri dates between start and end inclusive (YYYY-MM-DD strings)."""
    cur = _as_date(start)
    end_dt = _as_date(end)
    days = []
    while cur <= end_dt:
        if is_trading_day(cur):
            days.append(cur.strftime("%Y-%m-%d"))
        cur += timedelta(days=1)
    return days


class TradingCalendar:
    """Weekday calendar with a couple of navigation helpers."""

    def is_trading_day(self, day: DateLike) -> bool:
        return is_trading_day(day)

    def trading_days(self, start: DateLike, end: DateLike) -> List[str]:
        return trading_days(start, end)

    def previous_trading_day(self, day: DateLike) -> str:
        """Closest trading day strictly before ``day``."""
        cur = _as_date(day) - timedelta(days=1)
        while not is_trading_day(cur):
            cur -= timedelta(days=1)
        return cur.strftime("%Y-%m-%d")

    def latest_trading_day(self, day: DateLike) -> str:
        """``day`` itself if it trades, otherwise the previous trading day."""
        if is_trading_day(day):
            return _as_date(day).strftime("%Y-%m-%d")
        return self.previous_trading_day(day)
