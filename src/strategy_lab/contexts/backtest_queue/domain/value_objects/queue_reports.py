from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class BacktestQueueStats:
    """
    BacktestQueueStats — shared queue counters shown on the operator dashboard.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/
        backtest_queue_admin_monitor.py
    """

    queued: int = 0
    processing: int = 0
    completed: int = 0
    total_in_queue: int = 0
    estimated_wait_minutes: float = 0.0

    def __post_init__(self) -> None:
        for name in ("queued", "processing", "completed", "total_in_queue"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"BacktestQueueStats.{name} must be int >= 0, got {value!r}")
        if self.estimated_wait_minutes < 0:
            raise ValueError("BacktestQueueStats.estimated_wait_minutes must be >= 0")


@dataclass(frozen=True, slots=True)
class BacktestResultSummary:
    """
    BacktestResultSummary — most recent finished simulation result of a user.

    `job_id` is the queue job that produced the result when the server reports it;
    results stored before that field existed carry None and can only be matched to a
    disappeared job heuristically.

    Related:
      - src/strategy_lab/contexts/backtest_queue/application/services/backtest_job_monitor.py
    """

    result_id: int
    job_id: int | None
    strategy_name: str
    completed_at: datetime | None = None
    metrics: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.result_id, bool) or not isinstance(self.result_id, int):
            raise ValueError(f"BacktestResultSummary.result_id must be int, got {self.result_id!r}")
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    def matches_job(self, job_id: int) -> bool:
        return self.job_id is not None and self.job_id == job_id
