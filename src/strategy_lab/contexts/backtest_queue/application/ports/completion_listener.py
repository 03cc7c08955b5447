from __future__ import annotations

from typing import Protocol

from strategy_lab.contexts.backtest_queue.application.dto import BacktestCompletionNotice


class BacktestCompletionListener(Protocol):
    """
    BacktestCompletionListener — consumer of completion notices raised by the job monitor.

    Called on the monitor task; implementations must not block for long.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/notifications/
        log_only_completion_listener.py
    """

    def on_backtest_completed(self, *, notice: BacktestCompletionNotice) -> None:
        """
        Handle one completion notice.

        Args:
            notice: Notice raised exactly once for a job that left the live set.
        Returns:
            None.
        Assumptions:
            Delivery is best-effort; the monitor logs and continues on exceptions.
        Raises:
            Exception: Implementation-specific failures.
        Side Effects:
            Implementation-defined.
        """
        ...
