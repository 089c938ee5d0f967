"""
Guarantees that hold for every prune: output shape, conservation of counts,
reproducibility, idempotence, monotonic need and one retained snapshot per
bucket for each unit.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo
from typing import List

import pytest

from helpers import SEED, bucket, jittered_half_hours, mixed_policy, prand
from snappr import INFINITE, Policy, Unit, parse_policy, prune


def check_prune_correctness(snapshots: List[datetime], policy: Policy) -> None:
    prev_need = None
    prev_subset = -1
    subset = 0
    i = 0
    while subset < len(snapshots):
        snaps = snapshots[:subset]
        keep, need = prune(snaps, policy)

        # keep is index-aligned, with sorted, unique periods from the policy
        assert len(keep) == len(snaps)
        for reason in keep:
            assert len(set(reason)) == len(reason)
            assert reason == sorted(reason)
            for period in reason:
                assert policy.get(period) != 0

        # need + kept == wanted for finite periods; infinite stays infinite
        for period, count in policy.each():
            missing = need.get(period)
            if count < 0:
                assert missing == INFINITE, period
                continue
            have = sum(1 for reason in keep if period in reason)
            assert 0 <= missing <= count
            assert missing + have == count, (subset, str(period))
        for period, _ in need.each():
            assert policy.get(period) != 0

        # reproducible
        r_keep, r_need = prune(snaps, policy)
        assert r_keep == keep
        assert r_need == need

        # adding newer snapshots never increases what is still needed
        if prev_need is not None:
            for period, _ in policy.each():
                before, after = prev_need.get(period), need.get(period)
                if before >= 0:
                    assert 0 <= after <= before, (prev_subset, subset, str(period))

        # pruning the kept snapshots again changes nothing
        filtered_keep = [reason for reason in keep if reason]
        filtered_snaps = [snaps[at] for at, reason in enumerate(keep) if reason]
        i_keep, i_need = prune(filtered_snaps, policy)
        assert i_keep == filtered_keep
        assert i_need == need

        # at most one retained snapshot per bucket for each unit
        for unit in Unit:
            if unit == Unit.LAST:
                continue
            buckets = [
                bucket(unit, snaps[at])
                for at, reason in enumerate(keep)
                if any(p.unit == unit for p in reason)
            ]
            assert len(buckets) == len(set(buckets)), (subset, str(unit))

        next_subset = min(subset + i * i * 2, len(snapshots) - 1)
        if prev_subset == next_subset:
            break
        prev_need = need
        prev_subset = subset
        subset = next_subset
        i += 1


def test_mixed_policy_over_jittered_snapshots():
    check_prune_correctness(jittered_half_hours(2500), mixed_policy())


def test_same_unit_intervals():
    policy = parse_policy("3@last", "5@daily", "4@daily:3", "daily:10", "2@monthly", "monthly:2")
    check_prune_correctness(jittered_half_hours(3000), policy)


def test_secondly_intervals():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    snaps = [start + timedelta(seconds=7 * i, milliseconds=(i * 389) % 1000) for i in range(1500)]
    policy = parse_policy("10@secondly", "20@secondly:1m", "secondly:15m", "2@last")
    check_prune_correctness(snaps, policy)


@pytest.mark.parametrize("offset_hours", [-8, 5, 13])
def test_offset_timezones(offset_hours):
    tz = timezone(timedelta(hours=offset_hours))
    snaps = [t.astimezone(tz) for t in jittered_half_hours(2000)]
    check_prune_correctness(snaps, parse_policy("1@last", "7@daily", "3@monthly", "yearly"))


def test_daylight_saving_zone():
    # Oct 1 to late Nov 2023, crossing the New York fall-back on Nov 5
    ny = ZoneInfo("America/New_York")
    start = datetime(2023, 10, 1, tzinfo=timezone.utc)
    snaps = [
        (start + timedelta(minutes=20 * i, seconds=prand(10 * 60, i, SEED))).astimezone(ny)
        for i in range(4000)
    ]
    policy = parse_policy("2@last", "12@secondly:1h", "10@daily", "daily:7", "3@monthly")
    check_prune_correctness(snaps, policy)
