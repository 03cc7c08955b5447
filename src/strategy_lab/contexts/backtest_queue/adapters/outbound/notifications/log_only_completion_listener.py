from __future__ import annotations

import logging

from strategy_lab.contexts.backtest_queue.application.dto import BacktestCompletionNotice
from strategy_lab.contexts.backtest_queue.application.ports import BacktestCompletionListener

log = logging.getLogger(__name__)


class LogOnlyCompletionListener(BacktestCompletionListener):
    """
    LogOnlyCompletionListener — worker adapter that logs completion notices.

    Email and Telegram delivery happen on the simulation engine side; the client only
    surfaces the notice.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/ports/completion_listener.py
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
    """

    def on_backtest_completed(self, *, notice: BacktestCompletionNotice) -> None:
        """
        Log one completion notice.

        Args:
            notice: Completion notice raised by the job monitor.
        Returns:
            None.
        Assumptions:
            Heuristic attributions are logged at warning level because the referenced
            result may belong to a different job.
        Raises:
            None.
        Side Effects:
            Emits one structured log record.
        """
        result_id = notice.result.result_id if notice.result is not None else None
        if notice.attribution == "heuristic":
            log.warning(
                (
                    "backtest completion notice attribution=heuristic "
                    "job_id=%s status=%s strategy=%s result_id=%s"
                ),
                notice.job_id,
                notice.status,
                notice.strategy_name,
                result_id,
            )
            return
        log.info(
            (
                "backtest completion notice attribution=%s "
                "job_id=%s status=%s strategy=%s result_id=%s error=%s"
            ),
            notice.attribution,
            notice.job_id,
            notice.status,
            notice.strategy_name,
            result_id,
            notice.error_message,
        )
