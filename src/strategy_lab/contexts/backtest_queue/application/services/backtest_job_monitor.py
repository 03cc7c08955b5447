from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestCompletionNotice,
    BacktestJobAction,
    BacktestJobActionResult,
    BacktestJobHandle,
    BacktestJobView,
    CompletionAttribution,
    format_duration_seconds,
)
from strategy_lab.contexts.backtest_queue.application.ports import (
    BacktestCompletionListener,
    BacktestQueueClock,
    BacktestQueueGateway,
)
from strategy_lab.contexts.backtest_queue.domain.entities import (
    BacktestJobSnapshot,
    BacktestJobStatus,
    accept_progress,
)
from strategy_lab.contexts.backtest_queue.domain.errors import (
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
)
from strategy_lab.contexts.backtest_queue.domain.value_objects import BacktestResultSummary
from strategy_lab.shared_kernel.primitives import UserId

from .backtest_job_monitor_hooks import BacktestJobMonitorHooks, emit_hook
from .pending_job_actions import PendingJobActions

log = logging.getLogger(__name__)

_MIN_POLL_INTERVAL_SECONDS = 1
_MAX_POLL_INTERVAL_SECONDS = 60
# Polls a locally seeded job may be missing from before it counts as vanished.
_UNCONFIRMED_JOB_GRACE_POLLS = 2
# Most recent notified job ids kept to suppress duplicate notices.
_NOTIFIED_HISTORY_LIMIT = 1000


class BacktestJobMonitor:
    """
    BacktestJobMonitor — live set of the current user's queue jobs refreshed on one timer.

    One refresh cycle is one batched `list_my_active` call. Gateway IO runs in worker
    threads; every mutation of the live set happens on the event-loop task, so readers
    only ever see immutable `BacktestJobView` tuples. A job that ends, either seen in a
    terminal status or vanished between two polls, raises exactly one completion notice.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/ports/backtest_queue_gateway.py
      - src/strategy_lab/contexts/backtest_queue/application/services/pending_job_actions.py
      - src/strategy_lab/contexts/backtest_queue/domain/entities/backtest_job_snapshot.py
      - apps/worker/backtest_monitor/wiring/modules/backtest_monitor.py
    """

    def __init__(
        self,
        *,
        gateway: BacktestQueueGateway,
        clock: BacktestQueueClock,
        owner_id: UserId,
        listener: BacktestCompletionListener | None = None,
        hooks: BacktestJobMonitorHooks | None = None,
        poll_interval_seconds: int = 3,
        notified_history_limit: int = _NOTIFIED_HISTORY_LIMIT,
    ) -> None:
        """
        Initialize monitor dependencies and empty live set.

        Args:
            gateway: Queue server port.
            clock: UTC clock port.
            owner_id: Current user id used for locally seeded snapshots.
            listener: Optional completion notice consumer.
            hooks: Optional metrics callbacks.
            poll_interval_seconds: Delay between the end of one cycle and the next.
            notified_history_limit: How many notified job ids are remembered.
        Returns:
            None.
        Assumptions:
            Poll interval lies in `[1, 60]` seconds.
        Raises:
            ValueError: If dependencies are missing or interval is out of range.
        Side Effects:
            None.
        """
        if gateway is None:  # type: ignore[truthy-bool]
            raise ValueError("BacktestJobMonitor requires gateway")
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("BacktestJobMonitor requires clock")
        if not isinstance(owner_id, UserId):
            raise ValueError("BacktestJobMonitor requires owner_id")
        if not _MIN_POLL_INTERVAL_SECONDS <= poll_interval_seconds <= _MAX_POLL_INTERVAL_SECONDS:
            raise ValueError(
                "BacktestJobMonitor.poll_interval_seconds must be in "
                f"[{_MIN_POLL_INTERVAL_SECONDS}, {_MAX_POLL_INTERVAL_SECONDS}]"
            )
        if notified_history_limit <= 0:
            raise ValueError("BacktestJobMonitor.notified_history_limit must be > 0")
        self._gateway = gateway
        self._clock = clock
        self._owner_id = owner_id
        self._listener = listener
        self._hooks = hooks if hooks is not None else BacktestJobMonitorHooks()
        self._poll_interval_seconds = poll_interval_seconds
        self._jobs: dict[int, BacktestJobSnapshot] = {}
        self._notified: dict[int, None] = {}
        self._notified_limit = notified_history_limit
        self._notices: list[BacktestCompletionNotice] = []
        self._pending = PendingJobActions()
        self._unconfirmed: dict[int, int] = {}
        self._refreshing = False

    @property
    def poll_interval_seconds(self) -> int:
        return self._poll_interval_seconds

    def live_job_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self._jobs))

    def job(self, job_id: int) -> BacktestJobSnapshot | None:
        return self._jobs.get(job_id)

    def track_submitted(self, handle: BacktestJobHandle, *, created_at: datetime) -> None:
        """
        Seed the awaiting state of a freshly submitted job.

        Args:
            handle: Submission result with initial queue position.
            created_at: UTC submission time.
        Returns:
            None.
        Assumptions:
            A job already known from a poll keeps its polled snapshot.
        Raises:
            BacktestJobTransitionError: If `created_at` is not UTC-aware.
        Side Effects:
            Adds job to the live set.
        """
        if handle.job_id in self._jobs or handle.job_id in self._notified:
            return
        self._jobs[handle.job_id] = BacktestJobSnapshot(
            job_id=handle.job_id,
            owner_id=self._owner_id,
            strategy_name=handle.strategy_name,
            status="queued",
            created_at=created_at,
            queue_position=handle.queue_position,
            notify_via=handle.notify_via,
        )
        self._unconfirmed[handle.job_id] = 0
        emit_live_jobs(self._hooks.on_live_jobs, len(self._jobs))

    async def refresh_once(self) -> bool:
        """
        Run one refresh cycle.

        Args:
            None.
        Returns:
            bool: `True` when the poll succeeded, `False` when it failed or another
                cycle was still in flight.
        Assumptions:
            Transport failures and rejections are transient; the next cycle retries.
        Raises:
            None.
        Side Effects:
            Replaces cached snapshots, removes ended jobs and raises completion notices.
        """
        if self._refreshing:
            log.debug("event=poll_skipped component=backtest-monitor reason=in_flight")
            return False
        self._refreshing = True
        try:
            return await self._refresh()
        finally:
            self._refreshing = False

    async def _refresh(self) -> bool:
        try:
            snapshots = await asyncio.to_thread(self._gateway.list_my_active)
        except (BacktestQueueTransportError, BacktestQueueRequestRejectedError) as error:
            emit_hook(self._hooks.on_poll_error)
            log.warning(
                "event=poll_failed component=backtest-monitor live_jobs=%s error=%s",
                len(self._jobs),
                error,
            )
            return False

        reported_ids = {snapshot.job_id for snapshot in snapshots}
        self._pending.prune(reported_job_ids=reported_ids)

        for snapshot in snapshots:
            job_id = snapshot.job_id
            if self._pending.is_suppressed(job_id) or job_id in self._notified:
                continue
            previous = self._jobs.get(job_id)
            if not accept_progress(previous=previous, candidate=snapshot):
                log.debug(
                    "event=stale_snapshot_discarded component=backtest-monitor "
                    "job_id=%s progress=%s rendered=%s",
                    job_id,
                    snapshot.progress_percent,
                    previous.progress_percent if previous is not None else None,
                )
                continue
            if snapshot.is_terminal():
                if previous is None:
                    continue
                self._jobs.pop(job_id, None)
                self._unconfirmed.pop(job_id, None)
                await self._finish_job(
                    job=snapshot,
                    status=snapshot.status,
                    fetch_result=snapshot.status == "completed",
                )
                continue
            self._jobs[job_id] = snapshot

        vanished: list[BacktestJobSnapshot] = []
        for job_id, job in sorted(self._jobs.items()):
            if job_id in reported_ids:
                self._unconfirmed.pop(job_id, None)
                continue
            if self._pending.is_pending(job_id):
                continue
            misses = self._unconfirmed.get(job_id)
            if misses is not None:
                misses += 1
                if misses < _UNCONFIRMED_JOB_GRACE_POLLS:
                    self._unconfirmed[job_id] = misses
                    continue
                del self._unconfirmed[job_id]
            vanished.append(job)
        for job in vanished:
            self._jobs.pop(job.job_id, None)
            await self._finish_job(job=job, status="completed", fetch_result=True)

        emit_hook(self._hooks.on_poll_success)
        emit_live_jobs(self._hooks.on_live_jobs, len(self._jobs))
        return True

    async def _finish_job(
        self,
        *,
        job: BacktestJobSnapshot,
        status: BacktestJobStatus,
        fetch_result: bool,
    ) -> None:
        """
        Raise the single completion notice of an ended job.

        Args:
            job: Last known snapshot of the job.
            status: Final status; vanished jobs are treated as completed.
            fetch_result: Whether to reconcile with the latest completed result.
        Returns:
            None.
        Assumptions:
            When the server does not tag results with job ids, the latest result of the
            user may belong to another job that finished close by; such notices are
            marked `heuristic`.
        Raises:
            None.
        Side Effects:
            Performs one gateway call when `fetch_result` is set and notifies listener.
        """
        if job.job_id in self._notified:
            return
        result: BacktestResultSummary | None = None
        if fetch_result:
            try:
                result = await asyncio.to_thread(
                    self._gateway.latest_completed_result,
                    job_id=job.job_id,
                )
            except (BacktestQueueTransportError, BacktestQueueRequestRejectedError) as error:
                log.warning(
                    "event=result_fetch_failed component=backtest-monitor job_id=%s error=%s",
                    job.job_id,
                    error,
                )
        # The fetch may have raced with another path that already ended this job.
        if job.job_id in self._notified:
            return
        notice = BacktestCompletionNotice(
            job_id=job.job_id,
            strategy_name=job.strategy_name,
            status=status,
            observed_at=self._clock.now(),
            result=result,
            attribution=_attribution(job_id=job.job_id, result=result),
            error_message=job.error_message,
        )
        self._remember_notified(job.job_id)
        self._notices.append(notice)
        emit_hook(self._hooks.on_completion_notice)
        log.info(
            "event=job_finished component=backtest-monitor job_id=%s status=%s attribution=%s",
            notice.job_id,
            notice.status,
            notice.attribution,
        )
        if self._listener is None:
            return
        try:
            self._listener.on_backtest_completed(notice=notice)
        except Exception:  # noqa: BLE001
            log.exception(
                "event=listener_failed component=backtest-monitor job_id=%s",
                notice.job_id,
            )

    def _remember_notified(self, job_id: int) -> None:
        """Record notified job id; the oldest ids are evicted past the history limit."""
        self._notified[job_id] = None
        while len(self._notified) > self._notified_limit:
            del self._notified[next(iter(self._notified))]

    def drain_notices(self) -> tuple[BacktestCompletionNotice, ...]:
        """Return notices raised since the previous drain."""
        notices = tuple(self._notices)
        self._notices.clear()
        return notices

    def view(self) -> tuple[BacktestJobView, ...]:
        """
        Build immutable rows for the floating job monitor.

        Args:
            None.
        Returns:
            tuple[BacktestJobView, ...]: Live jobs ordered by creation time then id.
        Assumptions:
            Jobs with an action in flight are shown but cannot be acted on again.
        Raises:
            None.
        Side Effects:
            None.
        """
        jobs = sorted(self._jobs.values(), key=lambda item: (item.created_at, item.job_id))
        return tuple(
            BacktestJobView(
                job_id=job.job_id,
                strategy_name=job.strategy_name,
                status=job.status,
                queue_position=job.queue_position,
                progress_percent=job.progress_percent,
                estimated_duration_text=format_duration_seconds(job.estimated_duration_seconds),
                estimated_completion_at=job.estimated_completion_at,
                notify_via=job.notify_via,
                cancellable=job.is_cancellable() and not self._pending.is_pending(job.job_id),
                action_pending=self._pending.is_pending(job.job_id),
                error_message=job.error_message,
            )
            for job in jobs
        )

    async def cancel(self, job_id: int) -> BacktestJobActionResult:
        """
        Cancel a queued or processing job.

        Args:
            job_id: Target job id.
        Returns:
            BacktestJobActionResult: Success removes the job locally right away; failure
                keeps it and carries the message to display.
        Assumptions:
            Cancelling a job that is already final succeeds.
        Raises:
            None.
        Side Effects:
            Performs one gateway call unless the job already ended locally.
        """
        if job_id in self._notified:
            return BacktestJobActionResult(action="cancel", job_id=job_id, succeeded=True)
        return await self._run_action(
            action="cancel",
            job_id=job_id,
            call=lambda: self._gateway.cancel(job_id=job_id),
        )

    async def delete(self, job_id: int) -> BacktestJobActionResult:
        """Remove a job from listings; same local semantics as `cancel`."""
        return await self._run_action(
            action="delete",
            job_id=job_id,
            call=lambda: self._gateway.delete(job_id=job_id),
        )

    async def _run_action(
        self,
        *,
        action: BacktestJobAction,
        job_id: int,
        call: Callable[[], None],
    ) -> BacktestJobActionResult:
        """
        Execute one out-of-band job action under the pending-action guard.

        Args:
            action: Action name.
            job_id: Target job id.
            call: Blocking gateway call.
        Returns:
            BacktestJobActionResult: Action outcome.
        Assumptions:
            409 and 404 answers mean the job already reached the requested end state.
        Raises:
            None.
        Side Effects:
            Suppresses poll results for the job while the call is in flight.
        """
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
            if error.is_conflict or error.is_not_found:
                succeeded = True
            else:
                message = error.message
        except BacktestQueueTransportError as error:
            message = str(error) or "Backtest queue is unavailable"
        finally:
            self._pending.finish(job_id, dismiss=succeeded)

        if succeeded:
            self._jobs.pop(job_id, None)
            self._unconfirmed.pop(job_id, None)
            emit_live_jobs(self._hooks.on_live_jobs, len(self._jobs))
            log.info(
                "event=job_action_succeeded component=backtest-monitor action=%s job_id=%s",
                action,
                job_id,
            )
            return BacktestJobActionResult(action=action, job_id=job_id, succeeded=True)

        emit_hook(self._hooks.on_action_failed)
        log.warning(
            "event=job_action_failed component=backtest-monitor action=%s job_id=%s error=%s",
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
        """
        Refresh the live set until stop event is set.

        Args:
            stop_event: Cooperative shutdown signal shared with process entrypoint.
        Returns:
            None.
        Assumptions:
            The next cycle is scheduled only after the previous one settled.
        Raises:
            None.
        Side Effects:
            Performs gateway IO every cycle.
        """
        while not stop_event.is_set():
            try:
                await self.refresh_once()
            except Exception:  # noqa: BLE001
                emit_hook(self._hooks.on_poll_error)
                log.exception("event=poll_crashed component=backtest-monitor")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval_seconds)
            except TimeoutError:
                continue


def emit_live_jobs(callback: Callable[[int], None] | None, count: int) -> None:
    if callback is not None:
        callback(count)


def _attribution(
    *,
    job_id: int,
    result: BacktestResultSummary | None,
) -> CompletionAttribution:
    if result is None:
        return "missing"
    if result.matches_job(job_id):
        return "exact"
    return "heuristic"
