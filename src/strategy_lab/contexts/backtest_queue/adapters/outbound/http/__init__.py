from .backtest_queue_wire import (
    BacktestJobSnapshotWire,
    BacktestQueueErrorWire,
    BacktestQueueReceiptWire,
    BacktestQueueStatsWire,
    BacktestResultWire,
    submission_body,
)
from .httpx_backtest_queue_gateway import HttpxBacktestQueueGateway

__all__ = [
    "BacktestJobSnapshotWire",
    "BacktestQueueErrorWire",
    "BacktestQueueReceiptWire",
    "BacktestQueueStatsWire",
    "BacktestResultWire",
    "HttpxBacktestQueueGateway",
    "submission_body",
]
