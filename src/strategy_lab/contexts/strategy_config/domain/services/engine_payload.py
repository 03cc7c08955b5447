from __future__ import annotations

from typing import Any

from strategy_lab.contexts.conditions.domain.services import conditions_to_wire
from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError
from strategy_lab.contexts.strategy_config.domain.value_objects import (
    FlatConditions,
    MarketStateConditions,
)
from strategy_lab.shared_kernel.primitives import TradingMode

# reinvest_profit is a percentage on the engine side; the client only offers all or none.
_REINVEST_ALL_PERCENT = 100
_REINVEST_NONE_PERCENT = 0


def serialize_engine_payload(
    configuration: StrategyConfiguration,
    *,
    trading_mode: TradingMode,
) -> dict[str, Any]:
    """
    Serialize a validated configuration into the flat namespace of the simulation engine.

    Args:
        configuration: Configuration that passed `validate_strategy_configuration`.
        trading_mode: Market family providing the asset universe for "use all assets".
    Returns:
        dict[str, Any]: JSON-compatible payload.
    Assumptions:
        Only the active condition branch is serialized; lists of the other mode are
        sent as empty arrays because the engine expects all seven keys.
    Raises:
        StrategyConfigurationError: If the date range is incomplete.
    Side Effects:
        None.
    """
    start_date, end_date = configuration.date_range.to_iso_pair()
    if start_date is None or end_date is None:
        raise StrategyConfigurationError("date_range must be complete before serialization")

    signals = configuration.signal_conditions
    flat = signals if isinstance(signals, FlatConditions) else FlatConditions()
    market = signals if isinstance(signals, MarketStateConditions) else MarketStateConditions()

    take_profit = configuration.take_profit
    stop_loss = configuration.stop_loss
    safety = configuration.safety_orders
    deal = configuration.deal

    return {
        "strategy_name": configuration.name.strip(),
        "pairs": list(
            configuration.asset_selection.resolve(universe=trading_mode.asset_universe())
        ),
        "max_active_deals": int(configuration.max_concurrent_positions),
        "initial_balance": configuration.initial_capital,
        "base_order_size": configuration.base_order_size,
        "trading_fee": configuration.fee_rate_percent,
        "start_date": start_date,
        "end_date": end_date,
        "entry_conditions": conditions_to_wire(flat.entry),
        "exit_conditions": conditions_to_wire(flat.exit),
        "safety_conditions": conditions_to_wire(configuration.safety_conditions),
        "bullish_entry_conditions": conditions_to_wire(market.bullish_entry),
        "bearish_entry_conditions": conditions_to_wire(market.bearish_entry),
        "bullish_exit_conditions": conditions_to_wire(market.bullish_exit),
        "bearish_exit_conditions": conditions_to_wire(market.bearish_exit),
        "use_market_state": isinstance(signals, MarketStateConditions),
        "price_change_active": take_profit.price_change_active,
        "target_profit": take_profit.target_profit,
        "take_profit_type": take_profit.take_profit_type,
        "trailing_toggle": take_profit.trailing_toggle,
        "trailing_deviation": take_profit.trailing_deviation,
        "conditions_active": deal.conditions_active,
        "minprof_toggle": take_profit.minimal_profit_toggle,
        "minimal_profit": take_profit.minimal_profit,
        "stop_loss_toggle": stop_loss.toggle,
        "stop_loss_value": stop_loss.value,
        "stop_loss_type": stop_loss.stop_loss_type,
        "stop_loss_timeout": stop_loss.timeout_minutes,
        "safety_order_toggle": safety.toggle,
        "safety_order_size": safety.order_size,
        "price_deviation": safety.price_deviation,
        "max_safety_orders_count": safety.max_orders_count,
        "safety_order_volume_scale": safety.volume_scale,
        "safety_order_step_scale": safety.step_scale,
        "reinvest_profit": (
            _REINVEST_ALL_PERCENT if deal.reinvest_profit else _REINVEST_NONE_PERCENT
        ),
        "risk_reduction": deal.risk_reduction,
        "min_daily_volume": deal.min_daily_volume,
        "cooldown_between_deals": deal.cooldown_between_deals,
        "close_deal_after_timeout": deal.close_deal_after_timeout,
    }
