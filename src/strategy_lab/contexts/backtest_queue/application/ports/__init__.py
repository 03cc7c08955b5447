from .backtest_queue_gateway import BacktestQueueGateway
from .clock import BacktestQueueClock
from .completion_listener import BacktestCompletionListener

__all__ = [
    "BacktestCompletionListener",
    "BacktestQueueClock",
    "BacktestQueueGateway",
]
