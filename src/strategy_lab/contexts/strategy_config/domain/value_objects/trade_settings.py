from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError

ProfitBase = Literal["percentage-total", "percentage-base"]
_PROFIT_BASES = ("percentage-total", "percentage-base")


@dataclass(frozen=True, slots=True)
class TakeProfitSettings:
    """
    TakeProfitSettings — how and when an open deal is closed in profit.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/entities/strategy_configuration.py
      - src/strategy_lab/contexts/strategy_config/domain/services/engine_payload.py
    """

    price_change_active: bool = True
    target_profit: float = 5.0
    take_profit_type: ProfitBase = "percentage-total"
    trailing_toggle: bool = False
    trailing_deviation: float = 1.0
    minimal_profit_toggle: bool = False
    minimal_profit: float = 1.0

    def __post_init__(self) -> None:
        """
        Validate field types and normalize numbers to float.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Numeric ranges are user input and are not enforced here.
        Raises:
            StrategyConfigurationError: If a field has the wrong type or literal.
        Side Effects:
            Normalizes numeric fields in frozen dataclass slots.
        """
        _require_bool(self.price_change_active, "take_profit.price_change_active")
        _require_bool(self.trailing_toggle, "take_profit.trailing_toggle")
        _require_bool(self.minimal_profit_toggle, "take_profit.minimal_profit_toggle")
        _require_profit_base(self.take_profit_type, "take_profit.take_profit_type")
        for name in ("target_profit", "trailing_deviation", "minimal_profit"):
            object.__setattr__(
                self, name, require_number(getattr(self, name), f"take_profit.{name}")
            )


@dataclass(frozen=True, slots=True)
class StopLossSettings:
    """
    StopLossSettings — loss limit of an open deal.

    `timeout_minutes` delays the stop-loss after it is first hit; zero closes at once.
    """

    toggle: bool = True
    value: float = 3.0
    stop_loss_type: ProfitBase = "percentage-total"
    timeout_minutes: float = 0.0

    def __post_init__(self) -> None:
        _require_bool(self.toggle, "stop_loss.toggle")
        _require_profit_base(self.stop_loss_type, "stop_loss.stop_loss_type")
        object.__setattr__(self, "value", require_number(self.value, "stop_loss.value"))
        object.__setattr__(
            self,
            "timeout_minutes",
            require_number(self.timeout_minutes, "stop_loss.timeout_minutes"),
        )


@dataclass(frozen=True, slots=True)
class SafetyOrderSettings:
    """
    SafetyOrderSettings — averaging orders added to a deal that moves against it.

    `volume_scale` multiplies the size of each subsequent safety order and
    `step_scale` multiplies the price deviation between consecutive orders.
    """

    toggle: bool = False
    order_size: float = 50.0
    price_deviation: float = 2.0
    max_orders_count: int = 3
    volume_scale: float = 1.5
    step_scale: float = 1.0

    def __post_init__(self) -> None:
        _require_bool(self.toggle, "safety_orders.toggle")
        if isinstance(self.max_orders_count, bool) or not isinstance(self.max_orders_count, int):
            raise StrategyConfigurationError(
                f"safety_orders.max_orders_count must be int, got {self.max_orders_count!r}"
            )
        for name in ("order_size", "price_deviation", "volume_scale", "step_scale"):
            object.__setattr__(
                self, name, require_number(getattr(self, name), f"safety_orders.{name}")
            )


@dataclass(frozen=True, slots=True)
class DealSettings:
    """
    DealSettings — deal lifecycle options that do not belong to exits or averaging.

    `conditions_active` makes exit conditions close deals in addition to take-profit.
    """

    reinvest_profit: bool = False
    risk_reduction: float = 0.0
    min_daily_volume: float = 0.0
    cooldown_between_deals: float = 0.0
    close_deal_after_timeout: float = 0.0
    conditions_active: bool = False

    def __post_init__(self) -> None:
        _require_bool(self.reinvest_profit, "deal.reinvest_profit")
        _require_bool(self.conditions_active, "deal.conditions_active")
        for name in (
            "risk_reduction",
            "min_daily_volume",
            "cooldown_between_deals",
            "close_deal_after_timeout",
        ):
            object.__setattr__(self, name, require_number(getattr(self, name), f"deal.{name}"))


def require_number(value: object, field_name: str) -> float:
    """
    Return numeric value as float, rejecting bools and non-numbers.

    Args:
        value: Candidate value.
        field_name: Dotted field path for diagnostics.
    Returns:
        float: Value converted to float. NaN is preserved for the validator.
    Assumptions:
        None.
    Raises:
        StrategyConfigurationError: If value is not int or float.
    Side Effects:
        None.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StrategyConfigurationError(f"{field_name} must be a number, got {value!r}")
    return float(value)


def _require_bool(value: object, field_name: str) -> None:
    if not isinstance(value, bool):
        raise StrategyConfigurationError(f"{field_name} must be bool, got {value!r}")


def _require_profit_base(value: object, field_name: str) -> None:
    if value not in _PROFIT_BASES:
        raise StrategyConfigurationError(
            f"{field_name} must be one of {list(_PROFIT_BASES)}, got {value!r}"
        )
