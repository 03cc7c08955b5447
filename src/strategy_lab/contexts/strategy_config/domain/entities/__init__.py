from .strategy_configuration import (
    DEFAULT_FEE_RATE_PERCENT,
    DEFAULT_INITIAL_CAPITAL,
    DEFAULT_STRATEGY_NAME,
    StrategyConfiguration,
    months_before,
)

__all__ = [
    "DEFAULT_FEE_RATE_PERCENT",
    "DEFAULT_INITIAL_CAPITAL",
    "DEFAULT_STRATEGY_NAME",
    "StrategyConfiguration",
    "months_before",
]
