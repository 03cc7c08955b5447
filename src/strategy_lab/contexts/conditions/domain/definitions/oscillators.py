"""
Condition schemas for bounded oscillators.

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

# Lengths precomputed by the engine's indicator store.
_RSI_LENGTHS = (7, 14, 21, 28)
_BB_PERIODS = (10, 14, 20, 50, 100)
_BB_DEVIATIONS = (1, 1.5, 2, 2.5, 3)
_STOCHASTIC_PRESETS = ("14,3,3", "9,3,3", "21,3,3")
_KD_CROSSOVERS = ("", "K Crossing Up D", "K Crossing Down D")


def defs() -> tuple[IndicatorDef, ...]:
    """
    Return oscillator-family condition schemas.

    Args:
        None.
    Returns:
        tuple[IndicatorDef, ...]: RSI, Bollinger %B and Stochastic definitions.
    Assumptions:
        All three support the full comparator set with default labels.
    Raises:
        ValueError: If any definition violates domain invariants.
    Side Effects:
        None.
    """
    default_labels = {item: item.default_label for item in ALL_COMPARATORS}
    return (
        IndicatorDef(
            kind=IndicatorKind.RSI,
            title="RSI (Relative Strength Index)",
            params=(
                ParamDef(
                    name="rsi_length",
                    wire_name="RSI Length",
                    kind=ParamKind.INT,
                    default=14,
                    choices=_RSI_LENGTHS,
                ),
                ParamDef(
                    name="signal_value",
                    wire_name="Signal Value",
                    kind=ParamKind.FLOAT,
                    default=30.0,
                    hard_min=0,
                    hard_max=100,
                ),
            ),
            comparator_field="Condition",
            comparator_labels=default_labels,
            default_comparator=Comparator.LESS_THAN,
        ),
        IndicatorDef(
            kind=IndicatorKind.BOLLINGER_BANDS_PERCENT_B,
            title="Bollinger Bands %B",
            params=(
                ParamDef(
                    name="bb_period",
                    wire_name="BB% Period",
                    kind=ParamKind.INT,
                    default=20,
                    choices=_BB_PERIODS,
                ),
                ParamDef(
                    name="deviation",
                    wire_name="Deviation",
                    kind=ParamKind.FLOAT,
                    default=2.0,
                    choices=_BB_DEVIATIONS,
                ),
                ParamDef(
                    name="signal_value",
                    wire_name="Signal Value",
                    kind=ParamKind.FLOAT,
                    default=0.0,
                    hard_min=0,
                    hard_max=1,
                ),
            ),
            comparator_field="Condition",
            comparator_labels=default_labels,
            default_comparator=Comparator.LESS_THAN,
        ),
        IndicatorDef(
            kind=IndicatorKind.STOCHASTIC,
            title="Stochastic Oscillator",
            params=(
                ParamDef(
                    name="stochastic_preset",
                    wire_name="Stochastic Preset",
                    kind=ParamKind.ENUM,
                    default="14,3,3",
                    enum_values=_STOCHASTIC_PRESETS,
                ),
                ParamDef(
                    name="k_signal_value",
                    wire_name="K Signal Value",
                    kind=ParamKind.FLOAT,
                    default=20.0,
                    hard_min=0,
                    hard_max=100,
                ),
                # The engine reads the optional K/D crossover from the plain
                # "Condition" subfield; the comparator lives in "K Condition".
                ParamDef(
                    name="kd_crossover",
                    wire_name="Condition",
                    kind=ParamKind.ENUM,
                    default="",
                    enum_values=_KD_CROSSOVERS,
                ),
            ),
            comparator_field="K Condition",
            comparator_labels=default_labels,
            default_comparator=Comparator.LESS_THAN,
        ),
    )
