from .backtest_queue_dto import (
    DEFAULT_ESTIMATED_WAIT_MINUTES,
    DEFAULT_QUEUE_POSITION,
    BacktestCompletionNotice,
    BacktestJobAction,
    BacktestJobActionResult,
    BacktestJobHandle,
    BacktestJobView,
    BacktestQueueReceipt,
    BacktestSubmissionRejection,
    BacktestSubmissionRequest,
    CompletionAttribution,
    SubmissionRejectionReason,
    format_duration_seconds,
)

__all__ = [
    "BacktestCompletionNotice",
    "BacktestJobAction",
    "BacktestJobActionResult",
    "BacktestJobHandle",
    "BacktestJobView",
    "BacktestQueueReceipt",
    "BacktestSubmissionRejection",
    "BacktestSubmissionRequest",
    "CompletionAttribution",
    "DEFAULT_ESTIMATED_WAIT_MINUTES",
    "DEFAULT_QUEUE_POSITION",
    "SubmissionRejectionReason",
    "format_duration_seconds",
]
