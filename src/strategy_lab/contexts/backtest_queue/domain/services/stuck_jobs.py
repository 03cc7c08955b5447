from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from strategy_lab.contexts.backtest_queue.domain.entities import BacktestJobSnapshot


def find_stuck_jobs(
    jobs: Iterable[BacktestJobSnapshot],
    *,
    now: datetime,
    stuck_after: timedelta,
) -> tuple[BacktestJobSnapshot, ...]:
    """
    Select processing jobs that exceeded the staleness window.

    Args:
        jobs: Snapshots from the operator listing.
        now: Current UTC time.
        stuck_after: Staleness window measured from `started_at`.
    Returns:
        tuple[BacktestJobSnapshot, ...]: Stuck jobs, longest running first.
    Assumptions:
        None.
    Raises:
        ValueError: If `stuck_after` is not positive.
    Side Effects:
        None.
    """
    if stuck_after <= timedelta(0):
        raise ValueError("stuck_after must be > 0")
    stuck = [item for item in jobs if item.is_stuck(now=now, stuck_after=stuck_after)]
    stuck.sort(key=lambda item: (item.started_at, item.job_id))
    return tuple(stuck)
