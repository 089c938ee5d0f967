from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Pattern, Tuple

from .logger import get_logger

__all__ = ["ScanResult", "compile_extract", "parse_timestamp", "scan_lines"]

log = get_logger(__name__)


_UNIX_RE = re.compile(r"[+-]?[0-9]+")

ISO_LAYOUT = "iso"


@dataclass
class ScanResult:
    """Input lines with the timestamp parsed from each (None if unparseable)."""

    times: List[Optional[datetime]] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def snapshots(self) -> Tuple[List[datetime], List[int]]:
        """Parsed timestamps, and the line index each one came from."""
        snaps: List[datetime] = []
        index: List[int] = []
        for i, t in enumerate(self.times):
            if t is not None:
                snaps.append(t)
                index.append(i)
        return snaps, index


def compile_extract(pattern: str) -> Pattern[str]:
    """Compile an --extract regexp, which may contain at most one capture group."""
    try:
        rx = re.compile(pattern)
    except re.error as e:
        raise ValueError(str(e)) from e
    if rx.groups > 1:
        raise ValueError("must contain up to one capture group")
    return rx


def _localize(dt: datetime, local_time: bool) -> datetime:
    if dt.tzinfo is not None:
        return dt
    if local_time:
        # naive values are read as local wall time
        return dt.astimezone()
    return dt.replace(tzinfo=timezone.utc)


def _parse_iso8601(s: str) -> datetime:
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return datetime.strptime(s, "%Y-%m-%d")


def parse_timestamp(ts: str, layout: Optional[str] = None, local_time: bool = False) -> datetime:
    """
    Parse a timestamp string.

    Without a layout, ts must be integer unix seconds. With layout 'iso', ts is
    ISO-8601. Otherwise layout is a strptime format. Values without an offset
    are placed in UTC, or the local timezone if local_time is set.
    """
    ts = ts.strip()
    if not layout:
        if not _UNIX_RE.fullmatch(ts):
            raise ValueError(f"failed to parse unix timestamp {ts!r}")
        dt = datetime.fromtimestamp(int(ts), tz=timezone.utc)
        return dt.astimezone() if local_time else dt
    if layout == ISO_LAYOUT:
        try:
            dt = _parse_iso8601(ts)
        except ValueError as e:
            raise ValueError(f"failed to parse ISO-8601 timestamp {ts!r}: {e}") from e
    else:
        try:
            dt = datetime.strptime(ts, layout)
        except ValueError as e:
            raise ValueError(f"failed to parse timestamp {ts!r} using layout {layout!r}: {e}") from e
    return _localize(dt, local_time)


def scan_lines(
    lines: Iterable[str],
    extract: Optional[Pattern[str]] = None,
    layout: Optional[str] = None,
    local_time: bool = False,
    only: bool = False,
) -> ScanResult:
    """
    Read snapshot lines, skipping empty ones.

    With extract, the timestamp is the capture group (or the whole match) of
    the first match in the line, and only replaces the line with the match.
    """
    res = ScanResult()
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            continue

        t: Optional[datetime] = None
        if extract is None:
            ts: Optional[str] = line.strip()
        else:
            m = extract.search(line)
            if m is None:
                ts = None
                res.warnings.append(f"line does not match --extract regexp: {line!r}")
            else:
                if only:
                    line = m.group(0)
                ts = (m.group(extract.groups) if extract.groups else m.group(0)) or ""

        if ts is not None:
            try:
                t = parse_timestamp(ts, layout, local_time)
            except (ValueError, OverflowError, OSError) as e:
                res.warnings.append(str(e))

        res.times.append(t)
        res.lines.append(line)

    log.debug("Scanned %d lines (%d unparseable)", len(res.lines), len(res.warnings))
    return res
