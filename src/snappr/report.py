from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from .policy import Policy
from .units import Period

__all__ = ["digits", "format_time", "select_lines", "why_lines", "summary_lines"]


def digits(n: int) -> int:
    """Number of decimal digits in n (the sign is not counted)."""
    return len(str(abs(n)))


def format_time(dt: datetime) -> str:
    # e.g. "Sun 2013 Sep  8 23:33:14"
    return f"{dt:%a %Y %b} {dt.day:2d} {dt:%H:%M:%S}"


def select_lines(
    lines: Sequence[str],
    index: Sequence[int],
    keep: Sequence[Sequence[Period]],
    invert: bool = False,
) -> List[str]:
    """
    Lines to print: the prunable ones, or with invert everything else.

    index maps each snapshot in keep back to its line. Lines that are not
    snapshots are never prunable.
    """
    discard = [False] * len(lines)
    for at, reason in enumerate(keep):
        discard[index[at]] = len(reason) == 0
    return [line for line, x in zip(lines, discard) if x != invert]


def why_lines(snapshots: Sequence[datetime], keep: Sequence[Sequence[Period]]) -> List[str]:
    out = []
    ndig = digits(len(keep))
    for at, reason in enumerate(keep):
        if reason:
            out.append(
                f"snappr: why: keep [{at + 1:>{ndig}}/{len(keep):>{ndig}}] "
                f"{format_time(snapshots[at])} :: {', '.join(str(p) for p in reason)}"
            )
    return out


def summary_lines(policy: Policy, need: Policy, keep: Sequence[Sequence[Period]]) -> List[str]:
    out = []
    cmax = max((count for _, count in policy.each()), default=0)
    cdig = digits(cmax)
    for period, count in policy.each():
        missing = need.get(period)
        if missing < 0:
            out.append(f"snappr: summary: ({'*' * cdig}) {period}")
        elif missing == 0:
            out.append(f"snappr: summary: ({count:>{cdig}}) {period}")
        else:
            out.append(f"snappr: summary: ({count:>{cdig}}) {period} (missing {missing})")
    pruned = sum(1 for reason in keep if not reason)
    out.append(f"snappr: summary: pruning {pruned}/{len(keep)} snapshots")
    return out
