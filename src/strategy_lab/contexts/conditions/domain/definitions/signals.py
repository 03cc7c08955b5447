"""
Condition schemas for externally computed signals and smoothed candles.

Related: strategy_lab.contexts.conditions.domain.entities.indicator_def
"""

from __future__ import annotations

from strategy_lab.contexts.conditions.domain.entities import (
    Comparator,
    IndicatorDef,
    IndicatorKind,
    ParamDef,
    ParamKind,
)

_EXTERNAL_SIGNALS = ("Buy", "Strong Buy", "Sell", "Strong Sell", "Neutral")


def defs() -> tuple[IndicatorDef, ...]:
    """
    Return signal-family condition schemas.

    Args:
        None.
    Returns:
        tuple[IndicatorDef, ...]: External rating signal and Heiken Ashi definitions.
    Assumptions:
        External signal conditions match on the rating value and have no comparator.
    Raises:
        ValueError: If any definition violates domain invariants.
    Side Effects:
        None.
    """
    return (
        IndicatorDef(
            kind=IndicatorKind.EXTERNAL_SIGNAL,
            title="TradingView Signal",
            params=(
                ParamDef(
                    name="signal_value",
                    wire_name="Signal Value",
                    kind=ParamKind.ENUM,
                    default="Buy",
                    enum_values=_EXTERNAL_SIGNALS,
                ),
            ),
        ),
        IndicatorDef(
            kind=IndicatorKind.SMOOTHED_CANDLE,
            title="Heiken Ashi",
            params=(
                ParamDef(
                    name="signal_value",
                    wire_name="Signal Value",
                    kind=ParamKind.FLOAT,
                    default=0.0,
                ),
            ),
            comparator_field="Condition",
            comparator_labels={
                Comparator.GREATER_THAN: Comparator.GREATER_THAN.default_label,
                Comparator.LESS_THAN: Comparator.LESS_THAN.default_label,
            },
            default_comparator=Comparator.GREATER_THAN,
        ),
    )
