from .backtest_client_runtime_config import (
    BacktestAdminConfig,
    BacktestClientApiConfig,
    BacktestClientRuntimeConfig,
    BacktestMonitorConfig,
    load_backtest_client_runtime_config,
    resolve_api_token,
    resolve_backtest_client_config_path,
)
from .scalar_env_overrides import resolve_bounded_int_override, resolve_trading_mode_override

__all__ = [
    "BacktestAdminConfig",
    "BacktestClientApiConfig",
    "BacktestClientRuntimeConfig",
    "BacktestMonitorConfig",
    "load_backtest_client_runtime_config",
    "resolve_api_token",
    "resolve_backtest_client_config_path",
    "resolve_bounded_int_override",
    "resolve_trading_mode_override",
]
