from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional, Tuple

from .durations import duration_seconds, format_duration
from .logger import get_logger
from .units import Period, Unit

__all__ = ["INFINITE", "Policy", "PolicyError", "parse_policy"]

log = get_logger(__name__)


INFINITE = -1

_INT_RE = re.compile(r"[+-]?[0-9]+")


class PolicyError(ValueError):
    """A retention rule could not be parsed."""

    def __init__(self, rule: str, field: str, reason: str, detail: Optional[str] = None) -> None:
        self.rule = rule
        self.field = field
        self.reason = reason
        self.detail = detail
        msg = f"rule {rule!r}: {field}: {reason}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class Policy:
    """
    Retention counts keyed by normalized Period.

    Counts are positive, or INFINITE. A zero count is never stored.
    Iteration always follows the Period order.
    """

    def __init__(self, counts: Optional[Dict[Period, int]] = None) -> None:
        self._count: Dict[Period, int] = {}
        for period, count in (counts or {}).items():
            if not self.set(period, count):
                raise ValueError(f"invalid period {period!r}")

    def set(self, period: Period, count: int) -> bool:
        """Set the count for a period, replacing any existing one. Zero removes it."""
        period, ok = period.normalize()
        if not ok:
            return False
        if count < 0:
            count = INFINITE
        if count == 0:
            self._count.pop(period, None)
        else:
            self._count[period] = count
        return True

    def must_set(self, unit: Unit, interval: int, count: int) -> None:
        """Like set, but the period must be valid and not already present."""
        period = Period(unit, interval)
        if self.get(period) != 0:
            raise ValueError(f"duplicate period {period!r}")
        if not self.set(period, count):
            raise ValueError(f"invalid period {period!r}")

    def get(self, period: Period) -> int:
        period, ok = period.normalize()
        if not ok:
            return 0
        return self._count.get(period, 0)

    def each(self) -> Iterator[Tuple[Period, int]]:
        for period in sorted(self._count):
            yield period, self._count[period]

    def periods(self) -> List[Period]:
        return sorted(self._count)

    def clone(self) -> Policy:
        p = Policy()
        p._count = dict(self._count)
        return p

    def __iter__(self) -> Iterator[Tuple[Period, int]]:
        return self.each()

    def __len__(self) -> int:
        return len(self._count)

    def __contains__(self, period: object) -> bool:
        return isinstance(period, Period) and self.get(period) != 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return self._count == other._count

    def __repr__(self) -> str:
        return f"Policy({self.to_text()!r})"

    def __str__(self) -> str:
        parts = []
        for period, count in self.each():
            parts.append(f"{period} ({'inf' if count < 0 else count})")
        return ", ".join(parts)

    def to_text(self) -> str:
        """Canonical rule text; equivalent policies render identically."""
        rules = []
        for period, count in self.each():
            rule = f"{count}@" if count > 0 else ""
            rule += str(period.unit)
            if period.interval != 1:
                if period.unit == Unit.SECONDLY and period.interval >= 60:
                    rule += ":" + format_duration(period.interval)
                else:
                    rule += f":{period.interval}"
            rules.append(rule)
        return " ".join(rules)

    @classmethod
    def from_text(cls, text: str) -> Policy:
        return parse_policy(*text.split())


def _parse_rule(rule: str) -> Tuple[Period, int]:
    n, sep, u = rule.partition("@")
    if not sep:
        n, u = "-1", n
    u, sep, x = u.partition(":")
    if not sep:
        x = "1"

    try:
        unit = Unit.from_name(u)
    except ValueError:
        raise PolicyError(rule, "unit", "unknown unit", repr(u)) from None

    if not _INT_RE.fullmatch(n):
        raise PolicyError(rule, "count", "bad integer", repr(n))
    count = int(n)
    if count == 0:
        raise PolicyError(rule, "count", "zero count", "count must not be zero")

    if _INT_RE.fullmatch(x):
        interval = int(x)
    elif unit == Unit.SECONDLY:
        try:
            interval = duration_seconds(x)
        except ValueError:
            raise PolicyError(rule, "interval", "bad integer", f"{x!r} is neither an integer nor a duration") from None
    else:
        raise PolicyError(rule, "interval", "bad integer", repr(x))
    if interval < 1:
        raise PolicyError(rule, "interval", "invalid interval", "interval must be > 0")
    if unit == Unit.LAST and interval != 1:
        raise PolicyError(rule, "interval", "invalid interval", "interval must be 1 for unit last")

    return Period(unit, interval), count


def parse_policy(*rules: str) -> Policy:
    """
    Parse rules of the form N@unit:X into a Policy.

    N is the snapshot count (negative or omitted for infinite, never zero),
    unit is one of last/secondly/daily/monthly/yearly and X is the interval
    (default 1, must be 1 for last, may be a duration like 1h30m for
    secondly). Each unit:X may only appear once.
    """
    p = Policy()
    for rule in rules:
        period, count = _parse_rule(rule)
        if p.get(period) != 0:
            raise PolicyError(rule, "period", "duplicate period", f"{period.unit}:{period.interval}")
        if not p.set(period, count):
            raise PolicyError(rule, "period", "invalid period", f"{period.unit}:{period.interval}")
    log.debug("Parsed policy: %s", p.to_text())
    return p
