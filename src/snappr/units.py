from __future__ import annotations

import calendar
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Tuple

from .durations import format_duration

__all__ = ["Unit", "Period", "prev_time", "time_equals"]


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Unit(IntEnum):
    """Retention granularity. Declaration order is the canonical sort order."""

    LAST = 0  # snapshot count
    SECONDLY = 1  # wallclock seconds
    DAILY = 2  # calendar days
    MONTHLY = 3  # calendar months
    YEARLY = 4  # calendar years

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return value in cls._value2member_map_

    @classmethod
    def from_name(cls, name: str) -> Unit:
        # ASCII only; Unicode case mapping folds letters like U+017F onto ASCII
        if name.isascii():
            for unit in cls:
                if unit.name.lower() == name.lower():
                    return unit
        raise ValueError(f"unknown unit {name!r}")


@dataclass(frozen=True, order=True)
class Period:
    """One retained snapshot every `interval` units."""

    unit: Unit
    interval: int = 1

    def normalize(self) -> Tuple[Period, bool]:
        if not Unit.is_valid(self.unit):
            return self, False
        p = replace(self, unit=Unit(self.unit))
        if p.unit == Unit.LAST:
            return replace(p, interval=1), True
        if isinstance(p.interval, bool) or not isinstance(p.interval, int) or p.interval <= 0:
            return p, False
        return p, True

    def compare(self, other: Period) -> int:
        a = (int(self.unit), self.interval)
        b = (int(other.unit), other.interval)
        return (a > b) - (a < b)

    def __str__(self) -> str:
        p, ok = self.normalize()
        if not ok:
            return ""
        if p.unit == Unit.LAST:
            return "last"
        if p.unit == Unit.SECONDLY:
            if p.interval == 1:
                return "every second"
            return f"every {format_duration(p.interval)}"
        noun = {Unit.DAILY: "day", Unit.MONTHLY: "month", Unit.YEARLY: "year"}[p.unit]
        if p.interval == 1:
            return f"every {noun}"
        return f"every {p.interval} {noun}s"


def _add_months(t: datetime, months: int) -> datetime:
    # Out-of-range days roll forward into the next month (Jan 31 + 1 month
    # is Mar 3, or Mar 2 in a leap year).
    total = t.year * 12 + (t.month - 1) + months
    year, month0 = divmod(total, 12)
    month = month0 + 1
    days_in_month = calendar.monthrange(year, month)[1]
    if t.day <= days_in_month:
        return t.replace(year=year, month=month)
    overflow = t.day - days_in_month
    return t.replace(year=year, month=month, day=days_in_month) + timedelta(days=overflow)


def prev_time(period: Period, t: datetime) -> datetime:
    """Return the instant one interval of `period` before `t`."""
    p, ok = period.normalize()
    if not ok:
        raise ValueError(f"invalid period {period!r}")
    if p.unit == Unit.LAST:
        return t - timedelta(microseconds=1)
    if p.unit == Unit.SECONDLY:
        if t.tzinfo is None:
            return t - timedelta(seconds=p.interval)
        # absolute seconds, not wall clock
        return (t.astimezone(timezone.utc) - timedelta(seconds=p.interval)).astimezone(t.tzinfo)
    if p.unit == Unit.DAILY:
        return t - timedelta(days=p.interval)
    if p.unit == Unit.MONTHLY:
        return _add_months(t, -p.interval)
    return _add_months(t, -12 * p.interval)


def _since_epoch(t: datetime) -> timedelta:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    return t - _EPOCH


def _unix_second(t: datetime) -> int:
    return _since_epoch(t) // timedelta(seconds=1)


def time_equals(unit: Unit, a: datetime, b: datetime) -> bool:
    """True if `a` and `b` fall in the same bucket for `unit`."""
    if unit == Unit.LAST:
        return _since_epoch(a) == _since_epoch(b)
    if unit == Unit.SECONDLY:
        return _unix_second(a) == _unix_second(b)
    if unit == Unit.DAILY:
        return a.date() == b.date()
    if unit == Unit.MONTHLY:
        return (a.year, a.month) == (b.year, b.month)
    if unit == Unit.YEARLY:
        return a.year == b.year
    raise ValueError(f"unknown unit {unit!r}")
