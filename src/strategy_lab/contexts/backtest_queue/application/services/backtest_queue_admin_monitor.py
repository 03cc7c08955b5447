from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Callable

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestJobAction,
    BacktestJobActionResult,
)
from strategy_lab.contexts.backtest_queue.application.ports import (
    BacktestQueueClock,
    BacktestQueueGateway,
)
from strategy_lab.contexts.backtest_queue.domain.entities import (
    BacktestJobSnapshot,
    accept_progress,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
)
from strategy_lab.contexts.backtest_queue.domain.services import find_stuck_jobs
from strategy_lab.contexts.backtest_queue.domain.value_objects import BacktestQueueStats

from .backtest_job_monitor import emit_live_jobs
from .backtest_job_monitor_hooks import BacktestJobMonitorHooks, emit_hook
from .pending_job_actions import PendingJobActions

log = logging.getLogger(__name__)

DEFAULT_FORCE_FAIL_REASON = "Force failed by administrator"

_MIN_POLL_INTERVAL_SECONDS = 1
_MAX_POLL_INTERVAL_SECONDS = 60


class BacktestQueueAdminMonitor:
    """
    BacktestQueueAdminMonitor — operator view over every user's queue jobs and counters.

    Refreshes on a slower timer than the per-user monitor. Force-fail and delete follow
    the same pending-action rules as user actions; reset of stuck jobs is a bulk call.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/domain/services/stuck_jobs.py
    """

    def __init__(
        self,
        *,
        gateway: BacktestQueueGateway,
        clock: BacktestQueueClock,
        stuck_after: timedelta,
        hooks: BacktestJobMonitorHooks | None = None,
        poll_interval_seconds: int = 10,
    ) -> None:
        """
        Initialize operator monitor dependencies.

        Args:
            gateway: Queue server port.
            clock: UTC clock port.
            stuck_after: Staleness window of processing jobs.
            hooks: Optional metrics callbacks.
            poll_interval_seconds: Delay between the end of one cycle and the next.
        Returns:
            None.
        Assumptions:
            Poll interval lies in `[1, 60]` seconds.
        Raises:
            ValueError: If dependencies are missing, `stuck_after` is not positive or
                interval is out of range.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("BacktestQueueAdminMonitor requires gateway")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("BacktestQueueAdminMonitor requires clock")
        if stuck_after <= timedelta(0):
            raise ValueError("BacktestQueueAdminMonitor.stuck_after must be > 0")
        if not _MIN_POLL_INTERVAL_SECONDS <= poll_interval_seconds <= _MAX_POLL_INTERVAL_SECONDS:
            raise ValueError(
                "BacktestQueueAdminMonitor.poll_interval_seconds must be in "
                f"[{_MIN_POLL_INTERVAL_SECONDS}, {_MAX_POLL_INTERVAL_SECONDS}]"
            )
        self._gateway = gateway
        self._clock = clock
        self._stuck_after = stuck_after
        self._hooks = hooks if hooks is not None else BacktestJobMonitorHooks()
        self._poll_interval_seconds = poll_interval_seconds
        self._jobs: dict[int, BacktestJobSnapshot] = {}
        self._stats: BacktestQueueStats | None = None
        self._pending = PendingJobActions()
        self._refreshing = False

    @property
    def poll_interval_seconds(self) -> int:
        return self._poll_interval_seconds

    def jobs(self) -> tuple[BacktestJobSnapshot, ...]:
        return tuple(
            sorted(self._jobs.values(), key=lambda item: (item.created_at, item.job_id))
        )

    def stats(self) -> BacktestQueueStats | None:
        return self._stats

    def stuck_jobs(self) -> tuple[BacktestJobSnapshot, ...]:
        return find_stuck_jobs(
            self._jobs.values(),
            now=self._clock.now(),
            stuck_after=self._stuck_after,
        )

    async def refresh_once(self) -> bool:
        """
        Reload the operator job list and queue counters.

        Args:
            None.
        Returns:
            bool: `True` when both calls succeeded, `False` when a call failed or
                another cycle was still in flight.
        Assumptions:
            Jobs with an action in flight keep their last rendered snapshot; so do jobs
            whose polled progress went backward within the same status.
        Raises:
            None.
        Side Effects:
            Replaces cached jobs and stats.
        """
        if self._refreshing:
            log.debug("event=poll_skipped component=backtest-admin reason=in_flight")
            return False
        self._refreshing = True
        try:
            return await self._refresh()
        finally:
            self._refreshing = False

    async def _refresh(self) -> bool:
        try:
            snapshots = await asyncio.to_thread(self._gateway.list_all)
            stats = await asyncio.to_thread(self._gateway.stats)
        except (BacktestQueueTransportError, BacktestQueueRequestRejectedError) as error:
            emit_hook(self._hooks.on_poll_error)
            log.warning("event=poll_failed component=backtest-admin error=%s", error)
            return False

        self._pending.prune(reported_job_ids=(item.job_id for item in snapshots))
        refreshed: dict[int, BacktestJobSnapshot] = {}
        for snapshot in snapshots:
            if self._pending.is_pending(snapshot.job_id):
                previous = self._jobs.get(snapshot.job_id)
                if previous is not None:
                    refreshed[snapshot.job_id] = previous
                continue
            if self._pending.is_suppressed(snapshot.job_id):
                continue
            previous = self._jobs.get(snapshot.job_id)
            if previous is not None and not accept_progress(
                previous=previous,
                candidate=snapshot,
            ):
                log.debug(
                    "event=stale_snapshot_discarded component=backtest-admin "
                    "job_id=%s progress=%s rendered=%s",
                    snapshot.job_id,
                    snapshot.progress_percent,
                    previous.progress_percent,
                )
                refreshed[snapshot.job_id] = previous
                continue
            refreshed[snapshot.job_id] = snapshot
        self._jobs = refreshed
        self._stats = stats
        emit_hook(self._hooks.on_poll_success)
        emit_live_jobs(
            self._hooks.on_live_jobs,
            sum(1 for job in refreshed.values() if job.is_active()),
        )
        stuck = self.stuck_jobs()
        if stuck:
            log.warning(
                "event=stuck_jobs_detected component=backtest-admin count=%s job_ids=%s",
                len(stuck),
                ",".join(str(job.job_id) for job in stuck),
            )
        return True

    async def force_fail(
        self,
        job_id: int,
        *,
        reason: str = DEFAULT_FORCE_FAIL_REASON,
    ) -> BacktestJobActionResult:
        """
        Mark an active job failed.

        Args:
            job_id: Target job id.
            reason: Error message stored on the job.
        Returns:
            BacktestJobActionResult: Outcome; jobs already final locally are refused
                without a gateway call.
        Assumptions:
            The job stays listed (now failed) after success, so it is not dismissed.
        Raises:
            None.
        Side Effects:
            Performs one gateway call when the job may transition to failed.
        """
        job = self._jobs.get(job_id)
        if job is not None and not job.can_transition_to(next_status="failed"):
            return BacktestJobActionResult(
                action="force_fail",
                job_id=job_id,
                succeeded=False,
                message=f"Job in status {job.status} cannot be force-failed",
            )
        normalized_reason = reason.strip() or DEFAULT_FORCE_FAIL_REASON
        return await self._run_action(
            action="force_fail",
            job_id=job_id,
            call=lambda: self._gateway.force_fail(job_id=job_id, reason=normalized_reason),
            dismiss=False,
        )

    async def delete(self, job_id: int) -> BacktestJobActionResult:
        return await self._run_action(
            action="delete",
            job_id=job_id,
            call=lambda: self._gateway.delete(job_id=job_id),
            dismiss=True,
        )

    async def reset_stuck(self) -> BacktestJobActionResult:
        """
        Fail every job processing longer than the server staleness window.

        Args:
            None.
        Returns:
            BacktestJobActionResult: Outcome with the number of reset jobs.
        Assumptions:
            The server applies its own staleness window; local `stuck_jobs()` is a preview.
        Raises:
            None.
        Side Effects:
            Performs one gateway call.
        """
        try:
            affected = await asyncio.to_thread(self._gateway.reset_stuck)
        except BacktestQueueRequestRejectedError as error:
            return self._failed(action="reset_stuck", job_id=None, message=error.message)
        except BacktestQueueTransportError as error:
            return self._failed(action="reset_stuck", job_id=None, message=str(error))
        log.info("event=stuck_jobs_reset component=backtest-admin affected=%s", affected)
        return BacktestJobActionResult(
            action="reset_stuck",
            job_id=None,
            succeeded=True,
            affected_jobs=affected,
        )

    async def _run_action(
        self,
        *,
        action: BacktestJobAction,
        job_id: int,
        call: Callable[[], None],
        dismiss: bool,
    ) -> BacktestJobActionResult:
        if not self._pending.begin(job_id):
            return BacktestJobActionResult(
                action=action,
                job_id=job_id,
                succeeded=False,
                message="Another action for this job is still in progress",
            )
        succeeded = False
        message: str | None = None
        try:
            await asyncio.to_thread(call)
            succeeded = True
        except BacktestQueueRequestRejectedError as error:
            if action == "delete" and error.is_not_found:
                succeeded = True
            else:
                message = error.message
        except BacktestQueueTransportError as error:
            message = str(error)
        finally:
            self._pending.finish(job_id, dismiss=succeeded and dismiss)

        if not succeeded:
            return self._failed(action=action, job_id=job_id, message=message)
        if dismiss:
            self._jobs.pop(job_id, None)
        log.info(
            "event=job_action_succeeded component=backtest-admin action=%s job_id=%s",
            action,
            job_id,
        )
        return BacktestJobActionResult(action=action, job_id=job_id, succeeded=True)

    def _failed(
        self,
        *,
        action: BacktestJobAction,
        job_id: int | None,
        message: str | None,
    ) -> BacktestJobActionResult:
        emit_hook(self._hooks.on_action_failed)
        log.warning(
            "event=job_action_failed component=backtest-admin action=%s job_id=%s error=%s",
            action,
            job_id,
            message,
        )
        return BacktestJobActionResult(
            action=action,
            job_id=job_id,
            succeeded=False,
            message=message or f"Backtest job {action} failed",
        )

    async def run(self, stop_event: asyncio.Event) -> None:
        """Refresh operator view until stop event is set."""
        while not stop_event.is_set():
            try:
                await self.refresh_once()
            except Exception:  # noqa: BLE001
                emit_hook(self._hooks.on_poll_error)
                log.exception("event=poll_crashed component=backtest-admin")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval_seconds)
            except TimeoutError:
                continue
