from .backtest_job_snapshot import (
    BacktestJobSnapshot,
    BacktestJobStatus,
    accept_progress,
    is_backtest_job_status_terminal,
)

__all__ = [
    "BacktestJobSnapshot",
    "BacktestJobStatus",
    "accept_progress",
    "is_backtest_job_status_terminal",
]
