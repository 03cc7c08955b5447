from .errors import (
    backtest_job_action_failed,
    map_backtest_queue_exception,
    notification_channel_unavailable,
    validation_error,
)
from .submit_backtest_job import SubmitBacktestJobUseCase

__all__ = [
    "SubmitBacktestJobUseCase",
    "backtest_job_action_failed",
    "map_backtest_queue_exception",
    "notification_channel_unavailable",
    "validation_error",
]
