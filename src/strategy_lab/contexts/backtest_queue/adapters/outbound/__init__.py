from .config import (
    BacktestClientRuntimeConfig,
    load_backtest_client_runtime_config,
    resolve_api_token,
    resolve_backtest_client_config_path,
)
from .http import HttpxBacktestQueueGateway
from .notifications import LogOnlyCompletionListener

__all__ = [
    "BacktestClientRuntimeConfig",
    "HttpxBacktestQueueGateway",
    "LogOnlyCompletionListener",
    "load_backtest_client_runtime_config",
    "resolve_api_token",
    "resolve_backtest_client_config_path",
]
