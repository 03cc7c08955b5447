from __future__ import annotations

import math
from datetime import date
from types import MappingProxyType
from typing import Callable, Mapping

from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.shared_kernel.primitives import TradingMode

MIN_INITIAL_CAPITAL = 100.0

# Fixed order in which the UI moves focus to the first invalid field.
FIELD_PRIORITY = (
    "name",
    "max_concurrent_positions",
    "initial_capital",
    "date_range",
    "asset_selection",
    "entry_conditions",
)

_Rule = Callable[[StrategyConfiguration, date, TradingMode], "str | None"]


def validate_strategy_configuration(
    configuration: StrategyConfiguration,
    *,
    today: date,
    trading_mode: TradingMode,
) -> Mapping[str, str]:
    """
    Check whether a configuration may be submitted for simulation.

    Args:
        configuration: Configuration as currently edited.
        today: Current calendar date; end dates after it are rejected.
        trading_mode: Market family defining the earliest supported data date.
    Returns:
        Mapping[str, str]: Read-only `field -> message` map ordered by `FIELD_PRIORITY`;
            empty when the configuration is submittable.
    Assumptions:
        Every rule is evaluated; failures are never short-circuited.
    Raises:
        None.
    Side Effects:
        None.
    """
    errors: dict[str, str] = {}
    for field_name in FIELD_PRIORITY:
        message = _RULES[field_name](configuration, today, trading_mode)
        if message is not None:
            errors[field_name] = message
    return MappingProxyType(errors)


def first_invalid_field(errors: Mapping[str, str]) -> str | None:
    """Return the field that should receive focus, or None when there are no errors."""
    for field_name in FIELD_PRIORITY:
        if field_name in errors:
            return field_name
    return None


def is_submittable(
    configuration: StrategyConfiguration,
    *,
    today: date,
    trading_mode: TradingMode,
) -> bool:
    return not validate_strategy_configuration(
        configuration,
        today=today,
        trading_mode=trading_mode,
    )


def _check_name(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    if not configuration.name.strip():
        return "Strategy name is required"
    return None


def _check_positions(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    value = configuration.max_concurrent_positions
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        return "Max concurrent positions must be a whole number"
    if value < 1:
        return "Max concurrent positions must be at least 1"
    return None


def _check_capital(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    value = configuration.initial_capital
    if math.isnan(value) or value < MIN_INITIAL_CAPITAL:
        return f"Initial capital must be at least {MIN_INITIAL_CAPITAL:g}"
    return None


def _check_dates(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    date_range = configuration.date_range
    if date_range.start is None or date_range.end is None:
        return "Start and end dates are required"
    if date_range.start >= date_range.end:
        return "Start date must be before end date"
    if date_range.end > today:
        return "End date cannot be in the future"
    earliest = mode.earliest_data_date()
    if date_range.start < earliest:
        return f"Start date cannot be before {earliest.isoformat()}"
    return None


def _check_assets(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    selection = configuration.asset_selection
    if not selection.use_all_assets and not selection.assets:
        return "Select at least one asset or enable all assets"
    return None


def _check_entry_conditions(
    configuration: StrategyConfiguration,
    today: date,
    mode: TradingMode,
) -> str | None:
    if configuration.signal_conditions.has_entry_conditions():
        return None
    if configuration.condition_mode == "market_state":
        return "Add at least one bullish or bearish entry condition"
    return "Add at least one entry condition"


_RULES: Mapping[str, _Rule] = MappingProxyType(
    {
        "name": _check_name,
        "max_concurrent_positions": _check_positions,
        "initial_capital": _check_capital,
        "date_range": _check_dates,
        "asset_selection": _check_assets,
        "entry_conditions": _check_entry_conditions,
    }
)
