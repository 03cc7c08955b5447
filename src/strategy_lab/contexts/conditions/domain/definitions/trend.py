"""
Condition schemas for trend-following indicators.

Related: strategy_lab.contexts.conditions.domain.entities.indicator_def,
  strategy_lab.contexts.conditions.domain.entities.param_def
"""

from __future__ import annotations

from strategy_lab.contexts.conditions.domain.entities import (
    ALL_COMPARATORS,
    Comparator,
    IndicatorDef,
    IndicatorKind,
    ParamDef,
    ParamKind,
)

_FAST_MA_LENGTHS = (5, 10, 14, 20, 25, 50)
_SLOW_MA_LENGTHS = (25, 50, 75, 100, 150, 200, 250)
_MACD_PRESETS = (
    "12,26,9",
    "6,20,9",
    "8,17,9",
    "5,35,5",
    "9,30,9",
    "10,26,9",
    "15,35,9",
    "18,40,9",
)
_MACD_LINE_TRIGGERS = ("", "Greater Than 0", "Less Than 0")
_PSAR_PRESETS = ("0.02,0.2", "0.01,0.1", "0.03,0.3")


def defs() -> tuple[IndicatorDef, ...]:
    """
    Return trend-family condition schemas.

    Args:
        None.
    Returns:
        tuple[IndicatorDef, ...]: MA crossover, MACD and Parabolic SAR definitions.
    Assumptions:
        MACD and Parabolic SAR only support crossing comparators.
    Raises:
        ValueError: If any definition violates domain invariants.
    Side Effects:
        None.
    """
    return (
        IndicatorDef(
            kind=IndicatorKind.MOVING_AVERAGE_CROSSOVER,
            title="Moving Average Crossover",
            params=(
                ParamDef(
                    name="ma_type",
                    wire_name="MA Type",
                    kind=ParamKind.ENUM,
                    default="SMA",
                    enum_values=("SMA", "EMA"),
                ),
                ParamDef(
                    name="fast_ma",
                    wire_name="Fast MA",
                    kind=ParamKind.INT,
                    default=14,
                    choices=_FAST_MA_LENGTHS,
                ),
                ParamDef(
                    name="slow_ma",
                    wire_name="Slow MA",
                    kind=ParamKind.INT,
                    default=50,
                    choices=_SLOW_MA_LENGTHS,
                ),
            ),
            comparator_field="Condition",
            comparator_labels={item: item.default_label for item in ALL_COMPARATORS},
            default_comparator=Comparator.CROSSING_UP,
        ),
        IndicatorDef(
            kind=IndicatorKind.MACD,
            title="MACD",
            params=(
                ParamDef(
                    name="macd_preset",
                    wire_name="MACD Preset",
                    kind=ParamKind.ENUM,
                    default="12,26,9",
                    enum_values=_MACD_PRESETS,
                ),
                ParamDef(
                    name="line_trigger",
                    wire_name="Line Trigger",
                    kind=ParamKind.ENUM,
                    default="",
                    enum_values=_MACD_LINE_TRIGGERS,
                ),
            ),
            comparator_field="MACD Trigger",
            comparator_labels={
                Comparator.CROSSING_UP: Comparator.CROSSING_UP.default_label,
                Comparator.CROSSING_DOWN: Comparator.CROSSING_DOWN.default_label,
            },
            default_comparator=Comparator.CROSSING_UP,
        ),
        IndicatorDef(
            kind=IndicatorKind.PARABOLIC_SAR,
            title="Parabolic SAR",
            params=(
                ParamDef(
                    name="psar_preset",
                    wire_name="PSAR Preset",
                    kind=ParamKind.ENUM,
                    default="0.02,0.2",
                    enum_values=_PSAR_PRESETS,
                ),
            ),
            comparator_field="Condition",
            comparator_labels={
                Comparator.CROSSING_UP: "Crossing (Long)",
                Comparator.CROSSING_DOWN: "Crossing (Short)",
            },
            default_comparator=Comparator.CROSSING_UP,
        ),
    )
