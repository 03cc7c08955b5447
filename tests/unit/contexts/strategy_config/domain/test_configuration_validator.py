from datetime import date

import pytest

from strategy_lab.contexts.strategy_config.domain.entities import StrategyConfiguration
from strategy_lab.contexts.strategy_config.domain.services import (
    FIELD_PRIORITY,
    first_invalid_field,
    is_submittable,
    validate_strategy_configuration,
)
from strategy_lab.contexts.strategy_config.domain.value_objects import (
    AssetSelection,
    FlatConditions,
)
from strategy_lab.shared_kernel.primitives import DateRange, TradingMode

_TODAY = date(2024, 6, 15)


def _default() -> StrategyConfiguration:
    return StrategyConfiguration.create_default(today=_TODAY, trading_mode=TradingMode.CRYPTO)


def _validate(
    configuration: StrategyConfiguration,
    mode: TradingMode = TradingMode.CRYPTO,
) -> dict[str, str]:
    return dict(
        validate_strategy_configuration(configuration, today=_TODAY, trading_mode=mode)
    )


def test_default_configuration_is_submittable() -> None:
    configuration = _default()

    assert _validate(configuration) == {}
    assert is_submittable(configuration, today=_TODAY, trading_mode=TradingMode.CRYPTO)
    assert first_invalid_field({}) is None


def test_validator_reports_every_failure_without_short_circuit() -> None:
    """
    Verify all rules run and the error map follows focus priority.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Empty name, zero positions and no entry conditions are three independent errors.
    Raises:
        AssertionError: If error set or order differs.
    Side Effects:
        None.
    """
    configuration = _default().with_updates(
        name="   ",
        max_concurrent_positions=0,
        signal_conditions=FlatConditions(),
    )

    errors = _validate(configuration)

    assert list(errors) == ["name", "max_concurrent_positions", "entry_conditions"]
    assert errors["name"] == "Strategy name is required"
    assert errors["entry_conditions"] == "Add at least one entry condition"
    assert first_invalid_field(errors) == "name"


def test_first_invalid_field_follows_fixed_priority() -> None:
    errors = {"entry_conditions": "x", "date_range": "y", "initial_capital": "z"}

    assert first_invalid_field(errors) == "initial_capital"
    assert FIELD_PRIORITY[0] == "name"
    assert FIELD_PRIORITY[-1] == "entry_conditions"


@pytest.mark.parametrize(
    ("positions", "message"),
    [
        (0, "Max concurrent positions must be at least 1"),
        (-2, "Max concurrent positions must be at least 1"),
        (2.5, "Max concurrent positions must be a whole number"),
        (float("nan"), "Max concurrent positions must be a whole number"),
    ],
)
def test_positions_must_be_positive_whole_number(positions: float, message: str) -> None:
    errors = _validate(_default().with_updates(max_concurrent_positions=positions))

    assert errors == {"max_concurrent_positions": message}


def test_whole_float_positions_are_accepted() -> None:
    assert _validate(_default().with_updates(max_concurrent_positions=3.0)) == {}


def test_initial_capital_has_lower_bound() -> None:
    assert _validate(_default().with_updates(initial_capital=100)) == {}
    assert list(_validate(_default().with_updates(initial_capital=99.99))) == [
        "initial_capital"
    ]
    assert list(_validate(_default().with_updates(initial_capital=float("nan")))) == [
        "initial_capital"
    ]


@pytest.mark.parametrize(
    ("date_range", "message"),
    [
        (DateRange(start=None, end=_TODAY), "Start and end dates are required"),
        (DateRange(start=_TODAY, end=_TODAY), "Start date must be before end date"),
        (
            DateRange(start=date(2024, 6, 1), end=date(2024, 5, 1)),
            "Start date must be before end date",
        ),
        (
            DateRange(start=date(2024, 1, 1), end=date(2024, 6, 16)),
            "End date cannot be in the future",
        ),
        (
            DateRange(start=date(2017, 8, 16), end=date(2018, 1, 1)),
            "Start date cannot be before 2017-08-17",
        ),
    ],
)
def test_date_range_rules(date_range: DateRange, message: str) -> None:
    errors = _validate(_default().with_updates(date_range=date_range))

    assert errors == {"date_range": message}


def test_earliest_date_depends_on_trading_mode() -> None:
    """
    Verify the earliest start date is taken from the trading mode.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Stock data starts on 2000-01-01 and crypto data on 2017-08-17.
    Raises:
        AssertionError: If mode-specific bound is not applied.
    Side Effects:
        None.
    """
    configuration = _default().with_updates(
        date_range=DateRange(start=date(2010, 1, 4), end=date(2011, 1, 4)),
        asset_selection=AssetSelection(assets=("SPY",)),
    )

    assert _validate(configuration, TradingMode.STOCKS) == {}
    assert list(_validate(configuration, TradingMode.CRYPTO)) == ["date_range"]


def test_asset_selection_requires_asset_or_use_all() -> None:
    empty = _default().with_updates(asset_selection=AssetSelection())
    assert _validate(empty) == {"asset_selection": "Select at least one asset or enable all assets"}

    use_all = _default().with_updates(asset_selection=AssetSelection(use_all_assets=True))
    assert _validate(use_all) == {}


def test_market_state_requires_bullish_or_bearish_entry() -> None:
    market = _default().switch_condition_mode("market_state")

    assert _validate(market) == {
        "entry_conditions": "Add at least one bullish or bearish entry condition"
    }
    assert _validate(market.add_condition("bearish_entry")) == {}
    assert list(_validate(market.add_condition("bullish_exit"))) == ["entry_conditions"]


@pytest.mark.parametrize(
    ("attribute", "broken_value", "error_key"),
    [
        ("name", "", "name"),
        ("max_concurrent_positions", 0, "max_concurrent_positions"),
        ("initial_capital", 50, "initial_capital"),
        ("date_range", DateRange(start=_TODAY, end=_TODAY), "date_range"),
        ("asset_selection", AssetSelection(), "asset_selection"),
        ("signal_conditions", FlatConditions(), "entry_conditions"),
    ],
)
def test_fixing_one_field_clears_only_its_error(
    attribute: str,
    broken_value: object,
    error_key: str,
) -> None:
    """
    Verify breaking then restoring one field adds and removes exactly its error key.

    Args:
        attribute: Configuration attribute to break.
        broken_value: Invalid value for the attribute.
        error_key: Error map key expected for the broken attribute.
    Returns:
        None.
    Assumptions:
        An unrelated error stays reported so clearing is checked against a non-empty map.
    Raises:
        AssertionError: If errors of other fields change when one field is fixed.
    Side Effects:
        None.
    """
    default = _default()
    unrelated = {"initial_capital": 1} if attribute == "name" else {"name": "  "}
    baseline = default.with_updates(**unrelated)
    baseline_errors = _validate(baseline)

    broken_errors = _validate(baseline.with_updates(**{attribute: broken_value}))
    fixed_errors = _validate(
        baseline.with_updates(**{attribute: broken_value}).with_updates(
            **{attribute: getattr(default, attribute)}
        )
    )

    assert error_key not in baseline_errors
    assert error_key in broken_errors
    assert {key: value for key, value in broken_errors.items() if key != error_key} == (
        baseline_errors
    )
    assert fixed_errors == baseline_errors
