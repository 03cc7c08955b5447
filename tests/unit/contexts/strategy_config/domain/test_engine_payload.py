from datetime import date

import pytest

from strategy_lab.contexts.conditions.domain.entities import IndicatorKind
from strategy_lab.contexts.conditions.domain.services import new_condition
from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError
from strategy_lab.contexts.strategy_config.domain.services import serialize_engine_payload
from strategy_lab.contexts.strategy_config.domain.value_objects import (
    AssetSelection,
    DealSettings,
)
from strategy_lab.shared_kernel.primitives import DateRange, TradingMode

_TODAY = date(2024, 6, 15)

_CONDITION_KEYS = (
    "entry_conditions",
    "exit_conditions",
    "safety_conditions",
    "bullish_entry_conditions",
    "bearish_entry_conditions",
    "bullish_exit_conditions",
    "bearish_exit_conditions",
)


def _default() -> StrategyConfiguration:
    return StrategyConfiguration.create_default(today=_TODAY, trading_mode=TradingMode.CRYPTO)


def test_flat_payload_contains_core_fields_and_derived_order_size() -> None:
    """
    Verify flat-mode payload fields consumed by the simulation engine.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Inactive market-state lists are sent as empty arrays.
    Raises:
        AssertionError: If payload fields differ.
    Side Effects:
        None.
    """
    configuration = _default().with_updates(
        name="  Dip Buyer  ",
        initial_capital=10000,
        max_concurrent_positions=4,
    )

    payload = serialize_engine_payload(configuration, trading_mode=TradingMode.CRYPTO)

    assert payload["strategy_name"] == "Dip Buyer"
    assert payload["pairs"] == ["BTC/USDT"]
    assert payload["max_active_deals"] == 4
    assert payload["initial_balance"] == 10000.0
    assert payload["base_order_size"] == 2500.0
    assert payload["trading_fee"] == 0.1
    assert payload["start_date"] == "2023-12-15"
    assert payload["end_date"] == "2024-06-15"
    assert payload["use_market_state"] is False
    assert payload["entry_conditions"] == [
        {
            "indicator": "RSI",
            "subfields": {
                "Timeframe": "1m",
                "Condition": "Less Than",
                "RSI Length": 14,
                "Signal Value": 30.0,
            },
        }
    ]
    assert payload["exit_conditions"][0]["subfields"]["Condition"] == "Greater Than"
    for key in _CONDITION_KEYS[2:]:
        assert payload[key] == []


def test_market_state_payload_omits_flat_branch() -> None:
    configuration = (
        _default()
        .switch_condition_mode("market_state")
        .add_condition("bullish_entry", new_condition(kind=IndicatorKind.MACD))
        .add_condition("bearish_exit")
    )

    payload = serialize_engine_payload(configuration, trading_mode=TradingMode.CRYPTO)

    assert payload["use_market_state"] is True
    assert payload["entry_conditions"] == []
    assert payload["exit_conditions"] == []
    assert [item["indicator"] for item in payload["bullish_entry_conditions"]] == ["MACD"]
    assert [item["indicator"] for item in payload["bearish_exit_conditions"]] == ["RSI"]
    assert payload["bearish_entry_conditions"] == []


def test_use_all_assets_expands_trading_mode_universe() -> None:
    configuration = _default().with_updates(
        asset_selection=AssetSelection(use_all_assets=True, assets=("BTC/USDT",)),
    )

    payload = serialize_engine_payload(configuration, trading_mode=TradingMode.STOCKS)

    assert payload["pairs"] == list(TradingMode.STOCKS.asset_universe())


def test_deal_settings_are_flattened_with_reinvest_percentage() -> None:
    """
    Verify deal options map to engine keys.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Reinvest flag is encoded as 100 or 0 percent.
    Raises:
        AssertionError: If deal fields differ.
    Side Effects:
        None.
    """
    configuration = _default().with_updates(
        deal=DealSettings(reinvest_profit=True, cooldown_between_deals=15, conditions_active=True)
    )

    payload = serialize_engine_payload(configuration, trading_mode=TradingMode.CRYPTO)

    assert payload["reinvest_profit"] == 100
    assert payload["cooldown_between_deals"] == 15.0
    assert payload["conditions_active"] is True
    assert payload["stop_loss_toggle"] is True
    assert payload["safety_order_toggle"] is False
    assert payload["take_profit_type"] == "percentage-total"

    default_payload = serialize_engine_payload(_default(), trading_mode=TradingMode.CRYPTO)
    assert default_payload["reinvest_profit"] == 0


def test_incomplete_date_range_cannot_be_serialized() -> None:
    configuration = _default().with_updates(date_range=DateRange(start=date(2024, 1, 1)))

    with pytest.raises(StrategyConfigurationError):
        serialize_engine_payload(configuration, trading_mode=TradingMode.CRYPTO)
