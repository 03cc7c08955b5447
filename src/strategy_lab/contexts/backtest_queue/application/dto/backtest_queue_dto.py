from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal, Mapping

from strategy_lab.contexts.backtest_queue.domain.entities import BacktestJobStatus
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    BacktestResultSummary,
    NotificationChannel,
)

# Shown when the submission response leaves these out.
DEFAULT_QUEUE_POSITION = 1
DEFAULT_ESTIMATED_WAIT_MINUTES = 10.0

SubmissionRejectionReason = Literal["quota_limit", "failure"]
BacktestJobAction = Literal["cancel", "delete", "force_fail", "reset_stuck"]
CompletionAttribution = Literal["exact", "heuristic", "missing"]


@dataclass(frozen=True, slots=True)
class BacktestSubmissionRequest:
    """
    BacktestSubmissionRequest — body of one queue submission.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/ports/backtest_queue_gateway.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/backtest_queue_wire.py
    """

    payload: Mapping[str, Any]
    notify_via: NotificationChannel
    notify_email: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))


@dataclass(frozen=True, slots=True)
class BacktestQueueReceipt:
    """Server acknowledgement of an accepted submission."""

    job_id: int
    queue_position: int | None = None
    estimated_wait_minutes: float | None = None


@dataclass(frozen=True, slots=True)
class BacktestJobHandle:
    """
    BacktestJobHandle — what the UI shows right after a successful submission.

    The notification channel is fixed here; nothing changes it after submission.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
    """

    job_id: int
    queue_position: int
    estimated_wait_minutes: float
    notify_via: NotificationChannel
    strategy_name: str


@dataclass(frozen=True, slots=True)
class BacktestSubmissionRejection:
    """
    BacktestSubmissionRejection — structured refusal of a submission.

    `quota_limit` asks the caller to present `upgrade_url` instead of a retry;
    `failure` carries the raw server or transport message.
    """

    reason: SubmissionRejectionReason
    message: str
    upgrade_url: str | None = None

    @property
    def is_quota_limit(self) -> bool:
        return self.reason == "quota_limit"


@dataclass(frozen=True, slots=True)
class BacktestJobActionResult:
    """
    BacktestJobActionResult — outcome of a user or operator action on queue jobs.

    Failures carry the message to show next to the action that triggered them.
    """

    action: BacktestJobAction
    job_id: int | None
    succeeded: bool
    message: str | None = None
    affected_jobs: int = 0


@dataclass(frozen=True, slots=True)
class BacktestCompletionNotice:
    """
    BacktestCompletionNotice — raised exactly once per job that left the live set.

    `attribution` tells whether `result` was matched to the job by id (`exact`), is
    simply the most recent result of the user (`heuristic`), or could not be loaded
    (`missing`).

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
      - src/strategy_lab/contexts/backtest_queue/application/ports/completion_listener.py
    """

    job_id: int
    strategy_name: str
    status: BacktestJobStatus
    observed_at: datetime
    result: BacktestResultSummary | None = None
    attribution: CompletionAttribution = "missing"
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class BacktestJobView:
    """Immutable row rendered by the floating job monitor."""

    job_id: int
    strategy_name: str
    status: BacktestJobStatus
    queue_position: int | None
    progress_percent: float
    estimated_duration_text: str
    estimated_completion_at: datetime | None
    notify_via: NotificationChannel
    cancellable: bool
    action_pending: bool = False
    error_message: str | None = None


def format_duration_seconds(seconds: float | None) -> str:
    """
    Render an ETA duration the way the job monitor displays it.

    Args:
        seconds: Server-estimated duration or None.
    Returns:
        str: `calculating...`, `42s`, `7 min` or `1h 5m`.
    Assumptions:
        Partial seconds and minutes are rounded up.
    Raises:
        None.
    Side Effects:
        None.
    """
    if seconds is None or seconds <= 0:
        return "calculating..."
    if seconds < 60:
        return f"{math.ceil(seconds)}s"
    minutes = math.ceil(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m"
