"""Decide which snapshots to keep under a flexible retention policy."""

from .policy import INFINITE, Policy, PolicyError, parse_policy
from .prune import PruneResult, prune
from .units import Period, Unit, prev_time, time_equals

__all__ = [
    "INFINITE",
    "Period",
    "Policy",
    "PolicyError",
    "PruneResult",
    "Unit",
    "parse_policy",
    "prev_time",
    "prune",
    "time_equals",
]
