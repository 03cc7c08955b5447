"""
Pydantic models and mappers for the backtest queue HTTP API.

The queue server speaks camelCase JSON. Unknown fields are ignored so that server
additions never break polling, and naive timestamps are read as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from strategy_lab.contexts.backtest_queue.application.dto import (
    BacktestQueueReceipt,
    BacktestSubmissionRequest,
)
from strategy_lab.contexts.backtest_queue.domain.entities import BacktestJobSnapshot
from strategy_lab.contexts.backtest_queue.domain.value_objects import (
    BacktestQueueStats,
    BacktestResultSummary,
    NotificationChannel,
)
from strategy_lab.shared_kernel.primitives import UserId

BacktestJobStatusLiteral = Literal["queued", "processing", "completed", "failed", "cancelled"]


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BacktestJobSnapshotWire(_WireModel):
    """
    One job row of `/backtest/queue/my-active` and `/backtest/queue/all`.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/entities/backtest_job_snapshot.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/http/
        httpx_backtest_queue_gateway.py
    """

    id: int
    user_id: int = Field(alias="userId")
    strategy_name: str = Field(default="", alias="strategyName")
    status: BacktestJobStatusLiteral
    queue_position: int | None = Field(default=None, alias="queuePosition")
    progress: float | None = None
    notify_via: NotificationChannel = Field(default=NotificationChannel.EMAIL, alias="notifyVia")
    created_at: datetime = Field(alias="createdAt")
    started_at: datetime | None = Field(default=None, alias="startedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    error_message: str | None = Field(default=None, alias="errorMessage")
    estimated_seconds: float | None = Field(default=None, alias="estimatedSeconds")
    estimated_completion: datetime | None = Field(default=None, alias="estimatedCompletion")

    def to_domain(self) -> BacktestJobSnapshot:
        return BacktestJobSnapshot(
            job_id=self.id,
            owner_id=UserId(self.user_id),
            strategy_name=self.strategy_name,
            status=self.status,
            created_at=_as_utc(self.created_at),
            queue_position=self.queue_position,
            progress_percent=self.progress if self.progress is not None else 0.0,
            started_at=_as_optional_utc(self.started_at),
            completed_at=_as_optional_utc(self.completed_at),
            estimated_duration_seconds=(
                max(self.estimated_seconds, 0.0) if self.estimated_seconds is not None else None
            ),
            estimated_completion_at=_as_optional_utc(self.estimated_completion),
            notify_via=self.notify_via,
            error_message=self.error_message,
        )


class BacktestQueueReceiptWire(_WireModel):
    """Body of a successful `POST /backtest/queue` answer."""

    queue_id: int = Field(alias="queueId")
    queue_position: int | None = Field(default=None, alias="queuePosition")
    estimated_wait_minutes: float | None = Field(default=None, alias="estimatedWaitMinutes")

    def to_domain(self) -> BacktestQueueReceipt:
        return BacktestQueueReceipt(
            job_id=self.queue_id,
            queue_position=self.queue_position,
            estimated_wait_minutes=self.estimated_wait_minutes,
        )


class BacktestQueueStatsWire(_WireModel):
    queued: int = 0
    processing: int = 0
    completed: int = 0
    total_in_queue: int = Field(default=0, alias="totalInQueue")
    estimated_wait_minutes: float = Field(default=0.0, alias="estimatedWaitMinutes")

    def to_domain(self) -> BacktestQueueStats:
        return BacktestQueueStats(
            queued=self.queued,
            processing=self.processing,
            completed=self.completed,
            total_in_queue=self.total_in_queue,
            estimated_wait_minutes=max(self.estimated_wait_minutes, 0.0),
        )


class BacktestResultWire(_WireModel):
    """
    One row of `GET /backtest/results`.

    `queueId` is only present on servers that link results to queue jobs; `createdAt`
    is used when `completedAt` is missing.
    """

    id: int
    queue_id: int | None = Field(default=None, alias="queueId")
    strategy_name: str = Field(default="", alias="strategyName")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    metrics: dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> BacktestResultSummary:
        completed_at = self.completed_at if self.completed_at is not None else self.created_at
        return BacktestResultSummary(
            result_id=self.id,
            job_id=self.queue_id,
            strategy_name=self.strategy_name.strip(),
            completed_at=_as_optional_utc(completed_at),
            metrics=self.metrics,
        )


class BacktestQueueErrorWire(_WireModel):
    """Error body of a 4xx answer; every field is optional."""

    error: str | None = None
    message: str | None = None
    limit_reached: bool = Field(default=False, alias="limitReached")
    upgrade: str | None = None

    def text(self) -> str | None:
        for candidate in (self.error, self.message):
            if candidate is not None and candidate.strip():
                return candidate.strip()
        return None


def submission_body(request: BacktestSubmissionRequest) -> dict[str, Any]:
    """
    Build JSON body of `POST /backtest/queue`.

    Args:
        request: Submission request.
    Returns:
        dict[str, Any]: `{"payload", "notifyVia", "notifyEmail"}` body.
    Assumptions:
        Missing profile email is sent as empty string.
    Raises:
        None.
    Side Effects:
        None.
    """
    return {
        "payload": dict(request.payload),
        "notifyVia": request.notify_via.value,
        "notifyEmail": request.notify_email or "",
    }


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _as_optional_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return _as_utc(value)
