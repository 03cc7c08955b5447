from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class BacktestJobMonitorHooks:
    """
    BacktestJobMonitorHooks — optional callbacks for backtest job monitor counters.

    Related:
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
    """

    on_poll_success: Callable[[], None] | None = None
    on_poll_error: Callable[[], None] | None = None
    on_completion_notice: Callable[[], None] | None = None
    on_action_failed: Callable[[], None] | None = None
    on_live_jobs: Callable[[int], None] | None = None


def emit_hook(callback: Callable[[], None] | None) -> None:
    if callback is not None:
        callback()
