from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Hashable, List

from snappr import Policy, Unit

_MASK64 = (1 << 64) - 1
SEED = 0xABCDEF0123456789


def _int64(x: int) -> int:
    x &= _MASK64
    return x - (1 << 64) if x >> 63 else x


def prand(limit: int, i: int, seed: int) -> int:
    """Deterministic pseudo-random offset in (-limit, limit), with int64 wraparound."""
    not_even = (((seed & 0xAAAAAAAAAAAAAAAA) >> 1) | ((seed & 0x5555555555555555) << 1) | 1) & _MASK64
    v = _int64(_int64(i * _int64(not_even)) + _int64(seed))
    r = abs(v) % limit
    return -r if v < 0 else r


def jittered_half_hours(n: int) -> List[datetime]:
    """One snapshot every 30 minutes from 2000-01-01, each jittered by up to 30 minutes."""
    start = datetime(2000, 1, 1, tzinfo=timezone.utc)
    return [start + timedelta(minutes=30 * i, seconds=prand(30 * 60, i, SEED)) for i in range(n)]


def mixed_policy() -> Policy:
    policy = Policy()
    policy.must_set(Unit.YEARLY, 5, -1)
    policy.must_set(Unit.YEARLY, 2, 10)
    policy.must_set(Unit.YEARLY, 1, 3)
    policy.must_set(Unit.MONTHLY, 6, 4)
    policy.must_set(Unit.MONTHLY, 2, 6)
    policy.must_set(Unit.DAILY, 1, 7)
    policy.must_set(Unit.SECONDLY, 3600, 6)
    policy.must_set(Unit.LAST, 1, 3)
    return policy


def bucket(unit: Unit, t: datetime) -> Hashable:
    if unit == Unit.SECONDLY:
        return int(t.timestamp() // 1)
    if unit == Unit.DAILY:
        return date(t.year, t.month, t.day)
    if unit == Unit.MONTHLY:
        return (t.year, t.month)
    return t.year


def ansic(dt: datetime) -> str:
    return f"{dt:%a %b} {dt.day:2d} {dt:%H:%M:%S %Y}"
