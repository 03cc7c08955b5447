from __future__ import annotations

from datetime import datetime
from typing import Protocol


class BacktestQueueClock(Protocol):
    """
    BacktestQueueClock — application port providing timezone-aware UTC timestamps.

    Related:
      - src/strategy_lab/platform/time/system_clock.py
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
    """

    def now(self) -> datetime:
        """
        Return current timezone-aware UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Current UTC timestamp.
        Assumptions:
            Returned datetime is timezone-aware with zero UTC offset.
        Raises:
            ValueError: If implementation cannot provide valid UTC datetime.
        Side Effects:
            None.
        """
        ...
