from .dto import (
    BacktestCompletionNotice,
    BacktestJobActionResult,
    BacktestJobHandle,
    BacktestJobView,
    BacktestQueueReceipt,
    BacktestSubmissionRejection,
    BacktestSubmissionRequest,
)
from .ports import BacktestCompletionListener, BacktestQueueClock, BacktestQueueGateway
from .services import (
    BacktestJobMonitor,
    BacktestJobMonitorHooks,
    BacktestQueueAdminMonitor,
    PendingJobActions,
)
from .use_cases import SubmitBacktestJobUseCase, map_backtest_queue_exception

__all__ = [
    "BacktestCompletionListener",
    "BacktestCompletionNotice",
    "BacktestJobActionResult",
    "BacktestJobHandle",
    "BacktestJobMonitor",
    "BacktestJobMonitorHooks",
    "BacktestJobView",
    "BacktestQueueAdminMonitor",
    "BacktestQueueClock",
    "BacktestQueueGateway",
    "BacktestQueueReceipt",
    "BacktestSubmissionRejection",
    "BacktestSubmissionRequest",
    "PendingJobActions",
    "SubmitBacktestJobUseCase",
    "map_backtest_queue_exception",
]
