from __future__ import annotations

import calendar
import dataclasses
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from strategy_lab.contexts.conditions.domain.entities import Comparator
from strategy_lab.contexts.conditions.domain.services import new_condition
from strategy_lab.contexts.conditions.domain.value_objects import IndicatorCondition
from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError
from strategy_lab.contexts.strategy_config.domain.value_objects import (
    AssetSelection,
    ConditionListName,
    ConditionMode,
    DealSettings,
    FlatConditions,
    MarketStateConditions,
    SafetyOrderSettings,
    SignalConditions,
    StopLossSettings,
    TakeProfitSettings,
    empty_signal_conditions,
    require_number,
)
from strategy_lab.shared_kernel.primitives import DateRange, TradingMode

DEFAULT_STRATEGY_NAME = "My Strategy"
DEFAULT_INITIAL_CAPITAL = 10000.0
DEFAULT_FEE_RATE_PERCENT = 0.1
DEFAULT_LOOKBACK_MONTHS = 6

_SAFETY_LIST: ConditionListName = "safety"
_DERIVED_FIELDS = frozenset({"base_order_size"})


@dataclass(frozen=True, slots=True)
class StrategyConfiguration:
    """
    StrategyConfiguration — aggregate root of one rule-based strategy being edited.

    Construction enforces structure only (types, closed literals, condition variants);
    user-entered values such as an empty name or zero positions are representable so
    that the form state can be held and reported on by the configuration validator.
    Every edit returns a new instance.

    `base_order_size` is derived from capital and position count and is never stored.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/contexts/strategy_config/domain/services/engine_payload.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    name: str
    asset_selection: AssetSelection
    max_concurrent_positions: int | float
    initial_capital: float
    fee_rate_percent: float
    date_range: DateRange
    take_profit: TakeProfitSettings = field(default_factory=TakeProfitSettings)
    stop_loss: StopLossSettings = field(default_factory=StopLossSettings)
    safety_orders: SafetyOrderSettings = field(default_factory=SafetyOrderSettings)
    deal: DealSettings = field(default_factory=DealSettings)
    signal_conditions: SignalConditions = field(default_factory=FlatConditions)
    safety_conditions: tuple[IndicatorCondition, ...] = ()

    def __post_init__(self) -> None:
        """
        Validate aggregate structure.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Numeric ranges are checked by the configuration validator, not here.
        Raises:
            StrategyConfigurationError: If a field has the wrong type.
        Side Effects:
            Normalizes `initial_capital`, `fee_rate_percent` and `safety_conditions`.
        """
        if not isinstance(self.name, str):
            raise StrategyConfigurationError(f"name must be str, got {self.name!r}")
        _require_instance(self.asset_selection, AssetSelection, "asset_selection")
        _require_instance(self.date_range, DateRange, "date_range")
        _require_instance(self.take_profit, TakeProfitSettings, "take_profit")
        _require_instance(self.stop_loss, StopLossSettings, "stop_loss")
        _require_instance(self.safety_orders, SafetyOrderSettings, "safety_orders")
        _require_instance(self.deal, DealSettings, "deal")
        _require_instance(
            self.signal_conditions,
            (FlatConditions, MarketStateConditions),
            "signal_conditions",
        )

        if isinstance(self.max_concurrent_positions, bool) or not isinstance(
            self.max_concurrent_positions, (int, float)
        ):
            raise StrategyConfigurationError(
                "max_concurrent_positions must be a number, "
                f"got {self.max_concurrent_positions!r}"
            )
        object.__setattr__(
            self, "initial_capital", require_number(self.initial_capital, "initial_capital")
        )
        object.__setattr__(
            self, "fee_rate_percent", require_number(self.fee_rate_percent, "fee_rate_percent")
        )

        safety = tuple(self.safety_conditions)
        for item in safety:
            _require_instance(item, IndicatorCondition, "safety_conditions item")
        object.__setattr__(self, "safety_conditions", safety)

    @classmethod
    def create_default(
        cls,
        *,
        today: date,
        trading_mode: TradingMode,
    ) -> StrategyConfiguration:
        """
        Build the configuration a user starts from.

        Args:
            today: Current calendar date of the user.
            trading_mode: Market family selecting the preselected asset.
        Returns:
            StrategyConfiguration: Valid, submittable configuration.
        Assumptions:
            Date window covers the last six months ending today.
        Raises:
            None.
        Side Effects:
            None.
        """
        entry = new_condition()
        exit_condition = new_condition(comparator=Comparator.GREATER_THAN).replace(
            signal_value=70.0
        )
        return cls(
            name=DEFAULT_STRATEGY_NAME,
            asset_selection=AssetSelection(assets=(trading_mode.default_asset(),)),
            max_concurrent_positions=1,
            initial_capital=DEFAULT_INITIAL_CAPITAL,
            fee_rate_percent=DEFAULT_FEE_RATE_PERCENT,
            date_range=DateRange(
                start=months_before(today, months=DEFAULT_LOOKBACK_MONTHS),
                end=today,
            ),
            signal_conditions=FlatConditions(entry=(entry,), exit=(exit_condition,)),
        )

    @property
    def base_order_size(self) -> float:
        """Capital committed per position: `initial_capital / max_concurrent_positions`."""
        if self.max_concurrent_positions < 1:
            return 0.0
        return self.initial_capital / self.max_concurrent_positions

    @property
    def condition_mode(self) -> ConditionMode:
        return self.signal_conditions.mode

    def with_updates(self, **changes: Any) -> StrategyConfiguration:
        """
        Return a copy with changed fields.

        Args:
            **changes: Aggregate field values.
        Returns:
            StrategyConfiguration: Updated configuration.
        Assumptions:
            Derived values cannot be set.
        Raises:
            StrategyConfigurationError: If a change targets a derived or unknown field.
        Side Effects:
            None.
        """
        derived = sorted(_DERIVED_FIELDS.intersection(changes))
        if derived:
            raise StrategyConfigurationError(f"{derived} are derived and cannot be set")
        known = {item.name for item in dataclasses.fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise StrategyConfigurationError(f"unknown configuration fields {unknown}")
        return dataclasses.replace(self, **changes)

    def conditions(self, list_name: ConditionListName) -> tuple[IndicatorCondition, ...]:
        """
        Return one condition list.

        Args:
            list_name: `safety` or a list of the active condition mode.
        Returns:
            tuple[IndicatorCondition, ...]: Conditions in display order.
        Assumptions:
            Lists of the inactive mode do not exist.
        Raises:
            StrategyConfigurationError: If list is not part of the active mode.
        Side Effects:
            None.
        """
        if list_name == _SAFETY_LIST:
            return self.safety_conditions
        return self.signal_conditions.get(list_name)

    def add_condition(
        self,
        list_name: ConditionListName,
        condition: IndicatorCondition | None = None,
    ) -> StrategyConfiguration:
        """Append a condition (default RSI condition when omitted) to one list."""
        item = condition if condition is not None else new_condition()
        return self._with_conditions(list_name, (*self.conditions(list_name), item))

    def replace_condition(
        self,
        list_name: ConditionListName,
        *,
        index: int,
        condition: IndicatorCondition,
    ) -> StrategyConfiguration:
        """Replace the condition at `index` of one list with an edited condition."""
        items = list(self.conditions(list_name))
        _require_index(items, index, list_name)
        items[index] = condition
        return self._with_conditions(list_name, tuple(items))

    def remove_condition(
        self,
        list_name: ConditionListName,
        *,
        index: int,
    ) -> StrategyConfiguration:
        items = list(self.conditions(list_name))
        _require_index(items, index, list_name)
        del items[index]
        return self._with_conditions(list_name, tuple(items))

    def switch_condition_mode(self, mode: ConditionMode) -> StrategyConfiguration:
        """
        Select the flat or market-state condition branch.

        Args:
            mode: Target mode.
        Returns:
            StrategyConfiguration: Same instance when mode is unchanged, otherwise a
                copy whose branch is empty in the target mode.
        Assumptions:
            Conditions of the previous branch are dropped and cannot leak into a
            later submission.
        Raises:
            StrategyConfigurationError: If mode is unknown.
        Side Effects:
            None.
        """
        if mode == self.condition_mode:
            return self
        return dataclasses.replace(self, signal_conditions=empty_signal_conditions(mode))

    def _with_conditions(
        self,
        list_name: ConditionListName,
        items: tuple[IndicatorCondition, ...],
    ) -> StrategyConfiguration:
        if list_name == _SAFETY_LIST:
            return dataclasses.replace(self, safety_conditions=items)
        return dataclasses.replace(
            self,
            signal_conditions=self.signal_conditions.with_list(list_name, items),
        )


def months_before(value: date, *, months: int) -> date:
    """
    Shift a date back by whole calendar months, clamping the day to month length.

    Args:
        value: Anchor date.
        months: Non-negative number of months.
    Returns:
        date: Shifted date.
    Assumptions:
        None.
    Raises:
        ValueError: If `months` is negative.
    Side Effects:
        None.
    """
    if months < 0:
        raise ValueError("months must be >= 0")
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _require_instance(value: object, expected: type | tuple[type, ...], label: str) -> None:
    if not isinstance(value, expected):
        raise StrategyConfigurationError(f"{label} has unexpected type {type(value).__name__}")


def _require_index(items: list[IndicatorCondition], index: int, list_name: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise StrategyConfigurationError(
            f"{list_name} condition index {index!r} is out of range (size={len(items)})"
        )
