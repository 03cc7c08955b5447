from .backtest_monitor import (
    BacktestMonitorApp,
    BacktestMonitorMetrics,
    build_backtest_admin_monitor_app,
    build_backtest_monitor_app,
)

__all__ = [
    "BacktestMonitorApp",
    "BacktestMonitorMetrics",
    "build_backtest_admin_monitor_app",
    "build_backtest_monitor_app",
]
