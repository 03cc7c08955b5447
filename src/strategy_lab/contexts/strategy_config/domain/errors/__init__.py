from .strategy_config_errors import StrategyConfigurationError

__all__ = ["StrategyConfigurationError"]
