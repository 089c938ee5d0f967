from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

__all__ = ["parse_duration", "duration_seconds", "format_duration"]


DUR_RE = re.compile(r"(?P<num>\d+(?:\.\d*)?|\.\d+)(?P<unit>ns|us|µs|ms|s|m|h|d|w)")

# microseconds per unit
_UNIT_US = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "ms": Decimal(1000),
    "s": Decimal(1000000),
    "m": Decimal(60 * 1000000),
    "h": Decimal(3600 * 1000000),
    "d": Decimal(86400 * 1000000),
    "w": Decimal(7 * 86400 * 1000000),
}


def parse_duration(s: str) -> timedelta:
    """
    Parse a duration like '90s', '1h30m', '1.5h' or '250ms'.

    The whole string must consist of number+unit pairs, optionally preceded by
    a sign. A bare '0' is accepted. Sub-microsecond parts are truncated.
    """
    if not s or not isinstance(s, str):
        raise ValueError("duration must be a non-empty string")
    body = s
    sign = 1
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration: {s!r}")

    total = Decimal(0)
    pos = 0
    for m in DUR_RE.finditer(body):
        if m.start() != pos:
            break
        total += Decimal(m.group("num")) * _UNIT_US[m.group("unit")]
        pos = m.end()
    if pos != len(body):
        raise ValueError(f"invalid duration: {s!r}")
    return timedelta(microseconds=sign * int(total))


def duration_seconds(s: str) -> int:
    """Parse a duration and truncate it to whole seconds."""
    td = parse_duration(s)
    us = td // timedelta(microseconds=1)
    # truncate toward zero
    return -(-us // 1000000) if us < 0 else us // 1000000


def format_duration(seconds: int) -> str:
    """
    Render whole seconds compactly: 3600 -> '1h', 5400 -> '1h30m',
    90 -> '1m30s', 45 -> '45s'. Zero trailing minutes/seconds are dropped.
    """
    if seconds < 0:
        return "-" + format_duration(-seconds)
    h, rem = divmod(seconds, 3600)
    m, sec = divmod(rem, 60)
    if h:
        out = f"{h}h{m}m{sec}s"
    elif m:
        out = f"{m}m{sec}s"
    else:
        out = f"{sec}s"
    if out.endswith("m0s"):
        out = out[:-2]
    if out.endswith("h0m"):
        out = out[:-2]
    return out
