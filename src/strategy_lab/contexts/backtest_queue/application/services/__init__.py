from .backtest_job_monitor import BacktestJobMonitor
from .backtest_job_monitor_hooks import BacktestJobMonitorHooks
from .backtest_queue_admin_monitor import DEFAULT_FORCE_FAIL_REASON, BacktestQueueAdminMonitor
from .pending_job_actions import PendingJobActions

__all__ = [
    "DEFAULT_FORCE_FAIL_REASON",
    "BacktestJobMonitor",
    "BacktestJobMonitorHooks",
    "BacktestQueueAdminMonitor",
    "PendingJobActions",
]
