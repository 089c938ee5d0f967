from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

import pytest


@pytest.fixture()
def hourly_two_years() -> List[datetime]:
    """Hourly snapshots covering 2020 and 2021 (UTC)."""
    start = datetime(2020, 1, 1, tzinfo=timezone.utc)
    return [start + timedelta(hours=h) for h in range((366 + 365) * 24)]


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Keep stray snappr.yaml files and SNAPPR_* variables out of tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("SNAPPR_CONFIG", "SNAPPR_POLICY", "SNAPPR_LOCAL_TIME", "LOG_FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
