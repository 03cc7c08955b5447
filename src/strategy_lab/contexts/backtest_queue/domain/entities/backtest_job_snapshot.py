from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from strategy_lab.contexts.backtest_queue.domain.errors import BacktestJobTransitionError
from strategy_lab.contexts.backtest_queue.domain.value_objects import NotificationChannel
from strategy_lab.shared_kernel.primitives import UserId

BacktestJobStatus = Literal["queued", "processing", "completed", "failed", "cancelled"]

_ACTIVE_JOB_STATUSES: frozenset[str] = frozenset({"queued", "processing"})
_TERMINAL_JOB_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})
_ALLOWED_JOB_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "queued": frozenset({"processing", "cancelled", "failed"}),
    "processing": frozenset({"completed", "failed", "cancelled"}),
    "completed": frozenset(),
    "failed": frozenset(),
    "cancelled": frozenset(),
}


@dataclass(frozen=True, slots=True)
class BacktestJobSnapshot:
    """
    BacktestJobSnapshot — read-only view of one queue job as last reported by the server.

    Jobs are mutated only by the external engine; the client replaces snapshots and
    never edits them. Queue position is meaningful only while the job is queued and
    is dropped in every other status regardless of what the server sent.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/backtest_queue_wire.py
    """

    job_id: int
    owner_id: UserId
    strategy_name: str
    status: BacktestJobStatus
    created_at: datetime
    queue_position: int | None = None
    progress_percent: float = 0.0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    estimated_duration_seconds: float | None = None
    estimated_completion_at: datetime | None = None
    notify_via: NotificationChannel = NotificationChannel.EMAIL
    error_message: str | None = None

    def __post_init__(self) -> None:
        """
        Validate lifecycle invariants and normalize server-provided values.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            All timestamps are UTC-aware. Progress outside 0..100 is clamped because
            it is informational server data. A queued job always has a rank; a
            missing or non-positive rank is shown as the head of the queue.
        Raises:
            BacktestJobTransitionError: If one invariant is violated.
        Side Effects:
            Normalizes `queue_position`, `progress_percent` and `strategy_name`.
        """
        if isinstance(self.job_id, bool) or not isinstance(self.job_id, int):
            raise BacktestJobTransitionError(
                f"BacktestJobSnapshot.job_id must be int, got {self.job_id!r}"
            )
        if self.status not in _ALLOWED_JOB_STATUS_TRANSITIONS:
            raise BacktestJobTransitionError(
                f"BacktestJobSnapshot.status is unsupported: {self.status!r}"
            )
        if self.owner_id is None:  # type: ignore[truthy-bool]
            raise BacktestJobTransitionError("BacktestJobSnapshot.owner_id is required")
        if not isinstance(self.notify_via, NotificationChannel):
            raise BacktestJobTransitionError(
                f"BacktestJobSnapshot.notify_via is unsupported: {self.notify_via!r}"
            )

        _ensure_utc_datetime(name="created_at", value=self.created_at)
        _ensure_optional_utc_datetime(name="started_at", value=self.started_at)
        _ensure_optional_utc_datetime(name="completed_at", value=self.completed_at)
        _ensure_optional_utc_datetime(
            name="estimated_completion_at",
            value=self.estimated_completion_at,
        )

        object.__setattr__(self, "strategy_name", self.strategy_name.strip())

        if self.status != "queued":
            object.__setattr__(self, "queue_position", None)
        elif self.queue_position is None:
            # The server omits the rank for the head of the queue.
            object.__setattr__(self, "queue_position", 1)
        else:
            if isinstance(self.queue_position, bool) or not isinstance(self.queue_position, int):
                raise BacktestJobTransitionError("BacktestJobSnapshot.queue_position must be int")
            object.__setattr__(self, "queue_position", max(1, self.queue_position))

        progress = self.progress_percent
        if isinstance(progress, bool) or not isinstance(progress, (int, float)):
            raise BacktestJobTransitionError(
                f"BacktestJobSnapshot.progress_percent must be numeric, got {progress!r}"
            )
        if math.isnan(progress):
            progress = 0.0
        object.__setattr__(self, "progress_percent", float(min(100.0, max(0.0, progress))))

        if self.estimated_duration_seconds is not None and self.estimated_duration_seconds < 0:
            raise BacktestJobTransitionError(
                "BacktestJobSnapshot.estimated_duration_seconds must be >= 0"
            )

    def is_active(self) -> bool:
        return self.status in _ACTIVE_JOB_STATUSES

    def is_terminal(self) -> bool:
        return self.status in _TERMINAL_JOB_STATUSES

    def can_transition_to(self, *, next_status: BacktestJobStatus) -> bool:
        """
        Check whether status change is allowed by the lifecycle graph.

        Args:
            next_status: Target status.
        Returns:
            bool: `True` when transition is valid.
        Assumptions:
            `queued -> failed` is allowed for operator force-fail and staleness timeouts.
        Raises:
            None.
        Side Effects:
            None.
        """
        return next_status in _ALLOWED_JOB_STATUS_TRANSITIONS[self.status]

    def is_cancellable(self) -> bool:
        return self.is_active()

    def is_stuck(self, *, now: datetime, stuck_after: timedelta) -> bool:
        """
        Check whether a processing job exceeded the staleness window.

        Args:
            now: Current UTC time.
            stuck_after: Staleness window measured from `started_at`.
        Returns:
            bool: `True` when job is processing and started longer ago than the window.
        Assumptions:
            Processing jobs without `started_at` are not classified as stuck.
        Raises:
            None.
        Side Effects:
            None.
        """
        if self.status != "processing" or self.started_at is None:
            return False
        return now - self.started_at > stuck_after


def accept_progress(
    *,
    previous: BacktestJobSnapshot | None,
    candidate: BacktestJobSnapshot,
) -> bool:
    """
    Decide whether a freshly polled snapshot may replace the rendered one.

    Args:
        previous: Snapshot currently rendered for the same job id, if any.
        candidate: Newly polled snapshot.
    Returns:
        bool: `False` when the candidate has the same status and lower progress,
            which indicates a stale out-of-order response.
    Assumptions:
        A status change is always authoritative.
    Raises:
        ValueError: If snapshots belong to different jobs.
    Side Effects:
        None.
    """
    if previous is None:
        return True
    if previous.job_id != candidate.job_id:
        raise ValueError("accept_progress requires snapshots of the same job")
    if previous.status != candidate.status:
        return True
    return candidate.progress_percent >= previous.progress_percent


def is_backtest_job_status_terminal(*, status: BacktestJobStatus) -> bool:
    return status in _TERMINAL_JOB_STATUSES


def _ensure_utc_datetime(*, name: str, value: datetime) -> None:
    """
    Validate timezone-aware UTC datetime field.

    Args:
        name: Field name for deterministic error messages.
        value: Datetime value to validate.
    Returns:
        None.
    Assumptions:
        Wire adapters convert server timestamps to UTC before building snapshots.
    Raises:
        BacktestJobTransitionError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    if not isinstance(value, datetime):
        raise BacktestJobTransitionError(f"{name} must be datetime")
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise BacktestJobTransitionError(f"{name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise BacktestJobTransitionError(f"{name} must be UTC datetime")


def _ensure_optional_utc_datetime(*, name: str, value: datetime | None) -> None:
    if value is None:
        return
    _ensure_utc_datetime(name=name, value=value)
