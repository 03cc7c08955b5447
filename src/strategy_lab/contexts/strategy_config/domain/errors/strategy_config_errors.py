from __future__ import annotations


class StrategyConfigurationError(ValueError):
    """
    Raised when a strategy configuration is structurally malformed or misused.

    User-entered values that are merely out of range are not errors of this type;
    they are reported by the configuration validator as field-level messages.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/entities/strategy_configuration.py
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
    """
