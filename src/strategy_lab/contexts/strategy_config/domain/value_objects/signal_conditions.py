from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

from strategy_lab.contexts.conditions.domain.value_objects import IndicatorCondition
from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError

ConditionMode = Literal["flat", "market_state"]
ConditionListName = Literal[
    "entry",
    "exit",
    "safety",
    "bullish_entry",
    "bearish_entry",
    "bullish_exit",
    "bearish_exit",
]

CONDITION_MODES: tuple[ConditionMode, ...] = ("flat", "market_state")


@dataclass(frozen=True, slots=True)
class FlatConditions:
    """
    FlatConditions — one entry list and one exit list, regardless of market regime.

    Related:
      - .MarketStateConditions
      - src/strategy_lab/contexts/strategy_config/domain/entities/strategy_configuration.py
    """

    mode: ClassVar[ConditionMode] = "flat"
    list_names: ClassVar[tuple[ConditionListName, ...]] = ("entry", "exit")

    entry: tuple[IndicatorCondition, ...] = ()
    exit: tuple[IndicatorCondition, ...] = ()

    def __post_init__(self) -> None:
        _freeze_lists(self)

    def get(self, list_name: ConditionListName) -> tuple[IndicatorCondition, ...]:
        _require_list_name(self, list_name)
        return getattr(self, list_name)

    def with_list(
        self,
        list_name: ConditionListName,
        conditions: tuple[IndicatorCondition, ...],
    ) -> FlatConditions:
        _require_list_name(self, list_name)
        return dataclasses.replace(self, **{list_name: conditions})

    def has_entry_conditions(self) -> bool:
        return len(self.entry) > 0


@dataclass(frozen=True, slots=True)
class MarketStateConditions:
    """
    MarketStateConditions — separate entry/exit lists per bullish and bearish regime.

    Related:
      - .FlatConditions
      - src/strategy_lab/contexts/strategy_config/domain/entities/strategy_configuration.py
    """

    mode: ClassVar[ConditionMode] = "market_state"
    list_names: ClassVar[tuple[ConditionListName, ...]] = (
        "bullish_entry",
        "bearish_entry",
        "bullish_exit",
        "bearish_exit",
    )

    bullish_entry: tuple[IndicatorCondition, ...] = ()
    bearish_entry: tuple[IndicatorCondition, ...] = ()
    bullish_exit: tuple[IndicatorCondition, ...] = ()
    bearish_exit: tuple[IndicatorCondition, ...] = ()

    def __post_init__(self) -> None:
        _freeze_lists(self)

    def get(self, list_name: ConditionListName) -> tuple[IndicatorCondition, ...]:
        _require_list_name(self, list_name)
        return getattr(self, list_name)

    def with_list(
        self,
        list_name: ConditionListName,
        conditions: tuple[IndicatorCondition, ...],
    ) -> MarketStateConditions:
        _require_list_name(self, list_name)
        return dataclasses.replace(self, **{list_name: conditions})

    def has_entry_conditions(self) -> bool:
        return len(self.bullish_entry) > 0 or len(self.bearish_entry) > 0


SignalConditions = Union[FlatConditions, MarketStateConditions]


def empty_signal_conditions(mode: ConditionMode) -> SignalConditions:
    """
    Return an empty condition branch for a mode.

    Args:
        mode: `flat` or `market_state`.
    Returns:
        SignalConditions: Branch with all lists empty.
    Assumptions:
        None.
    Raises:
        StrategyConfigurationError: If mode is unknown.
    Side Effects:
        None.
    """
    if mode == "flat":
        return FlatConditions()
    if mode == "market_state":
        return MarketStateConditions()
    raise StrategyConfigurationError(
        f"condition mode must be one of {list(CONDITION_MODES)}, got {mode!r}"
    )


def _freeze_lists(branch: FlatConditions | MarketStateConditions) -> None:
    for list_name in branch.list_names:
        raw = getattr(branch, list_name)
        items = tuple(raw)
        for item in items:
            if not isinstance(item, IndicatorCondition):
                raise StrategyConfigurationError(
                    f"{list_name} conditions must be IndicatorCondition, got {item!r}"
                )
        object.__setattr__(branch, list_name, items)


def _require_list_name(branch: FlatConditions | MarketStateConditions, list_name: str) -> None:
    if list_name not in branch.list_names:
        raise StrategyConfigurationError(
            f"condition list {list_name!r} is not part of {branch.mode} mode; "
            f"available: {list(branch.list_names)}"
        )
