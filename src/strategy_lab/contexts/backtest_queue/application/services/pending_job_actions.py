from __future__ import annotations

from typing import Iterable


class PendingJobActions:
    """
    PendingJobActions — job ids with an out-of-band action in flight or just completed.

    Poll results for a pending id are suppressed until the action response is known.
    After a successful cancel or delete the id stays dismissed, so a poll that was
    already in flight when the action finished cannot bring the job back; the id is
    forgotten once a poll no longer reports it.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
    """

    def __init__(self) -> None:
        self._pending: set[int] = set()
        self._dismissed: set[int] = set()

    def begin(self, job_id: int) -> bool:
        """
        Mark action start for a job.

        Args:
            job_id: Target job id.
        Returns:
            bool: `False` when another action for the same job is still in flight.
        Assumptions:
            Called on the event-loop task only.
        Raises:
            None.
        Side Effects:
            Adds id to the pending set.
        """
        if job_id in self._pending:
            return False
        self._pending.add(job_id)
        return True

    def finish(self, job_id: int, *, dismiss: bool) -> None:
        self._pending.discard(job_id)
        if dismiss:
            self._dismissed.add(job_id)

    def is_pending(self, job_id: int) -> bool:
        return job_id in self._pending

    def is_suppressed(self, job_id: int) -> bool:
        return job_id in self._pending or job_id in self._dismissed

    def prune(self, *, reported_job_ids: Iterable[int]) -> None:
        """Forget dismissed ids that the server stopped reporting."""
        reported = set(reported_job_ids)
        self._dismissed.intersection_update(reported)
