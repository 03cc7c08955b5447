from .backtest_queue_errors import (
    BacktestConfigurationInvalidError,
    BacktestJobTransitionError,
    BacktestQueueDomainError,
    BacktestQueueRequestRejectedError,
    BacktestQueueTransportError,
    NotificationChannelUnavailableError,
)

__all__ = [
    "BacktestConfigurationInvalidError",
    "BacktestJobTransitionError",
    "BacktestQueueDomainError",
    "BacktestQueueRequestRejectedError",
    "BacktestQueueTransportError",
    "NotificationChannelUnavailableError",
]
