from __future__ import annotations

from typing import Protocol

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestQueueReceipt,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.domain.entities import BacktestJobSnapshot
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    BacktestQueueStats,
    BacktestResultSummary,
)


class BacktestQueueGateway(Protocol):
    """
    BacktestQueueGateway — application port for the shared backtest job queue server.

    Implementations are synchronous; async services call them through
    `asyncio.to_thread`. Every method raises `BacktestQueueTransportError` for network
    failures and 5xx answers and `BacktestQueueRequestRejectedError` for 4xx answers.

    Related:
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/
        httpx_backtest_queue_gateway.py
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    def submit(self, *, request: BacktestSubmissionRequest) -> BacktestQueueReceipt:
        """
        Enqueue one simulation.

        Args:
            request: Serialized configuration and notification preference.
        Returns:
            BacktestQueueReceipt: Job id with initial queue position and wait estimate.
        Assumptions:
            Quota refusals are reported as rejection with `limit_reached=True`.
        Raises:
            BacktestQueueTransportError: On transport failure.
            BacktestQueueRequestRejectedError: On 4xx answer.
        Side Effects:
            Creates one job on the server.
        """
        ...

    def list_my_active(self) -> tuple[BacktestJobSnapshot, ...]:
        """Return every non-terminal job of the current user in one batched call."""
        ...

    def latest_completed_result(self, *, job_id: int | None) -> BacktestResultSummary | None:
        """
        Return the most recent completed result of the current user.

        Args:
            job_id: Job whose result is wanted; servers that track job ids return that
                job's result, older servers ignore it and return the latest one.
        Returns:
            BacktestResultSummary | None: Result or None when the user has none.
        Assumptions:
            None.
        Raises:
            BacktestQueueTransportError: On transport failure.
            BacktestQueueRequestRejectedError: On 4xx answer.
        Side Effects:
            None.
        """
        ...

    def cancel(self, *, job_id: int) -> None:
        """Request cancellation of a queued or processing job."""
        ...

    def delete(self, *, job_id: int) -> None:
        """Remove a terminal job from listings."""
        ...

    def force_fail(self, *, job_id: int, reason: str) -> None:
        """Mark a processing job failed (operator only)."""
        ...

    def reset_stuck(self) -> int:
        """Fail every job processing longer than the server staleness window; return count."""
        ...

    def list_all(self) -> tuple[BacktestJobSnapshot, ...]:
        """Return jobs of every user (operator only)."""
        ...

    def stats(self) -> BacktestQueueStats:
        """Return shared queue counters (operator only)."""
        ...
