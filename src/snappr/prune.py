from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .logger import get_logger
from .policy import Policy
from .units import Period, Unit, prev_time, time_equals

__all__ = ["PruneResult", "prune"]

log = get_logger(__name__)


class PruneResult(NamedTuple):
    keep: List[List[Period]]
    need: Policy


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _prepare(t: datetime, tz: Optional[tzinfo]) -> datetime:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    if tz is not None:
        t = t.astimezone(tz)
    return t


def _instant(t: datetime) -> timedelta:
    # Aware datetimes sharing a tzinfo compare by wall clock, which ignores
    # fold in a repeated DST hour. The offset from the epoch does not.
    return t - _EPOCH


def _boundary(period: Period, accepted: datetime) -> Optional[datetime]:
    try:
        return prev_time(period, accepted)
    except (OverflowError, ValueError):
        # before the representable range; everything older is due
        return None


def prune(snapshots: Sequence[datetime], policy: Policy, tz: Optional[tzinfo] = None) -> PruneResult:
    """
    Decide which snapshots the policy retains.

    Returns keep, where keep[i] lists the periods (in order) retaining
    snapshots[i] (empty means it can be pruned), and need, the number of
    additional snapshots each period still wants (INFINITE for unbounded
    periods). Satisfied periods are absent from need, so need.get() is 0.

    Snapshots are ordered by absolute time. Naive datetimes are taken as UTC.
    Calendar buckets use each snapshot's own timezone, or `tz` if given; it
    only affects where days/months/years are split.
    """
    need = policy.clone()
    keep: List[List[Period]] = [[] for _ in snapshots]
    if not snapshots:
        return PruneResult(keep, need)

    times = [_prepare(t, tz) for t in snapshots]
    instants = [_instant(t) for t in times]
    order = sorted(range(len(times)), key=lambda i: instants[i], reverse=True)

    periods = policy.periods()
    remaining: Dict[Period, int] = {period: count for period, count in policy.each()}

    # period -> boundary before its last accepted snapshot, and that boundary's instant
    accepted: Dict[Period, Tuple[Optional[datetime], Optional[timedelta]]] = {}
    # unit -> (time, index) of the last snapshot retained for any period of that unit
    last_unit: Dict[Unit, Optional[Tuple[datetime, int]]] = {unit: None for unit in Unit}

    for idx in order:
        at, at_instant = times[idx], instants[idx]
        for period in periods:
            count = remaining[period]
            if count == 0:
                continue

            if period.unit != Unit.LAST:
                if period in accepted:
                    boundary, boundary_instant = accepted[period]
                    if (
                        boundary is not None
                        and boundary_instant < at_instant
                        and not time_equals(period.unit, boundary, at)
                    ):
                        continue
                prev = last_unit[period.unit]
                if prev is not None and prev[1] != idx and time_equals(period.unit, prev[0], at):
                    continue
                boundary = _boundary(period, at)
                accepted[period] = (boundary, _instant(boundary) if boundary is not None else None)
                last_unit[period.unit] = (at, idx)

            keep[idx].append(period)
            if count > 0:
                remaining[period] = count - 1

    # satisfied periods drop out of need (need.get returns 0 for them)
    for period, count in remaining.items():
        need.set(period, count)

    log.debug(
        "Pruned %d snapshots: keeping %d",
        len(snapshots),
        sum(1 for reason in keep if reason),
    )
    return PruneResult(keep, need)
