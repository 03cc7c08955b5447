from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Union

from strategy_lab.contexts.conditions.domain.definitions import indicator_def
from strategy_lab.contexts.conditions.domain.entities import (
    TIMEFRAME_WIRE_NAME,
    Comparator,
    IndicatorDef,
    IndicatorKind,
    ParamValue,
)
from strategy_lab.contexts.conditions.domain.errors import ConditionSchemaError
from strategy_lab.shared_kernel.primitives import Timeframe


@dataclass(frozen=True, slots=True)
class IndicatorCondition:
    """
    IndicatorCondition — one indicator bound to a timeframe, comparator and parameters.

    Each indicator kind has its own frozen variant carrying only the parameters that
    kind declares, so a condition can never hold a missing or foreign parameter.
    Values are validated against the kind schema on construction; edits produce a
    new instance.

    Related:
      - src/strategy_lab/contexts/conditions/domain/definitions/__init__.py
      - src/strategy_lab/contexts/conditions/domain/services/condition_editing.py
      - src/strategy_lab/contexts/strategy_config/domain/entities/strategy_configuration.py
    """

    kind: ClassVar[IndicatorKind]

    timeframe: Timeframe
    comparator: Comparator | None

    def __post_init__(self) -> None:
        """
        Validate condition against the schema of its indicator kind.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Float parameters accept ints and are stored as floats.
        Raises:
            ConditionSchemaError: If timeframe, comparator or any parameter is invalid.
        Side Effects:
            Normalizes numeric parameter values in frozen dataclass slots.
        """
        definition = self.definition()
        if not isinstance(self.timeframe, Timeframe):
            raise ConditionSchemaError(
                f"{self.kind.value} condition requires Timeframe, got {self.timeframe!r}"
            )

        if definition.has_comparator:
            if self.comparator not in definition.comparator_labels:
                raise ConditionSchemaError(
                    f"{self.kind.value} condition supports comparators "
                    f"{[item.value for item in definition.comparators]}, got {self.comparator!r}"
                )
        elif self.comparator is not None:
            raise ConditionSchemaError(f"{self.kind.value} condition has no comparator")

        for param in definition.params:
            value = getattr(self, param.name)
            problem = param.validate_value(value)
            if problem is not None:
                raise ConditionSchemaError(f"{self.kind.value}.{param.name} {problem}")
            object.__setattr__(self, param.name, param.normalize_value(value))

    @classmethod
    def definition(cls) -> IndicatorDef:
        return indicator_def(cls.kind)

    @property
    def parameters(self) -> Mapping[str, ParamValue]:
        """Read-only `name -> value` map in schema order."""
        return MappingProxyType(
            {param.name: getattr(self, param.name) for param in self.definition().params}
        )

    def replace(self, **changes: Any) -> IndicatorCondition:
        """
        Return a copy with changed fields, validated like a fresh condition.

        Args:
            **changes: `timeframe`, `comparator` or parameter names of this kind.
        Returns:
            IndicatorCondition: New condition of the same kind.
        Assumptions:
            None.
        Raises:
            ConditionSchemaError: If a change names an unknown field or is invalid.
        Side Effects:
            None.
        """
        allowed = {"timeframe", "comparator", *self.definition().param_names()}
        unknown = sorted(set(changes) - allowed)
        if unknown:
            raise ConditionSchemaError(
                f"{self.kind.value} condition has no parameters {unknown}"
            )
        return dataclasses.replace(self, **changes)

    def to_wire(self) -> dict[str, Any]:
        """
        Serialize condition into the engine `{indicator, subfields}` shape.

        Args:
            None.
        Returns:
            dict[str, Any]: Engine condition payload.
        Assumptions:
            Timeframe and comparator are stored as subfields next to parameters.
        Raises:
            None.
        Side Effects:
            None.
        """
        definition = self.definition()
        subfields: dict[str, Any] = {TIMEFRAME_WIRE_NAME: self.timeframe.code}
        if definition.comparator_field is not None and self.comparator is not None:
            subfields[definition.comparator_field] = definition.comparator_label(
                self.comparator
            )
        for param in definition.params:
            subfields[param.wire_name] = getattr(self, param.name)
        return {"indicator": self.kind.value, "subfields": subfields}


@dataclass(frozen=True, slots=True)
class RsiCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.RSI

    rsi_length: int
    signal_value: float


@dataclass(frozen=True, slots=True)
class MovingAverageCrossoverCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.MOVING_AVERAGE_CROSSOVER

    ma_type: str
    fast_ma: int
    slow_ma: int


@dataclass(frozen=True, slots=True)
class MacdCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.MACD

    macd_preset: str
    line_trigger: str


@dataclass(frozen=True, slots=True)
class BollingerBandsPercentBCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.BOLLINGER_BANDS_PERCENT_B

    bb_period: int
    deviation: float
    signal_value: float


@dataclass(frozen=True, slots=True)
class StochasticCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.STOCHASTIC

    stochastic_preset: str
    k_signal_value: float
    kd_crossover: str


@dataclass(frozen=True, slots=True)
class ParabolicSarCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.PARABOLIC_SAR

    psar_preset: str


@dataclass(frozen=True, slots=True)
class ExternalSignalCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.EXTERNAL_SIGNAL

    signal_value: str


@dataclass(frozen=True, slots=True)
class SmoothedCandleCondition(IndicatorCondition):
    kind: ClassVar[IndicatorKind] = IndicatorKind.SMOOTHED_CANDLE

    signal_value: float


Condition = Union[
    RsiCondition,
    MovingAverageCrossoverCondition,
    MacdCondition,
    BollingerBandsPercentBCondition,
    StochasticCondition,
    ParabolicSarCondition,
    ExternalSignalCondition,
    SmoothedCandleCondition,
]

_CONDITION_TYPES: Mapping[IndicatorKind, type[IndicatorCondition]] = MappingProxyType(
    {
        IndicatorKind.RSI: RsiCondition,
        IndicatorKind.MOVING_AVERAGE_CROSSOVER: MovingAverageCrossoverCondition,
        IndicatorKind.MACD: MacdCondition,
        IndicatorKind.BOLLINGER_BANDS_PERCENT_B: BollingerBandsPercentBCondition,
        IndicatorKind.STOCHASTIC: StochasticCondition,
        IndicatorKind.PARABOLIC_SAR: ParabolicSarCondition,
        IndicatorKind.EXTERNAL_SIGNAL: ExternalSignalCondition,
        IndicatorKind.SMOOTHED_CANDLE: SmoothedCandleCondition,
    }
)


def condition_type(kind: IndicatorKind) -> type[IndicatorCondition]:
    """Return the condition variant class of an indicator kind."""
    return _CONDITION_TYPES[IndicatorKind.parse(kind)]


def build_condition(
    *,
    kind: IndicatorKind,
    timeframe: Timeframe,
    comparator: Comparator | None,
    parameters: Mapping[str, ParamValue],
) -> IndicatorCondition:
    """
    Build condition variant from a generic parameter map.

    Args:
        kind: Indicator kind.
        timeframe: Evaluation timeframe.
        comparator: Comparator or None for kinds without one.
        parameters: Parameter values keyed by snake_case name.
    Returns:
        IndicatorCondition: Validated condition variant.
    Assumptions:
        Key set must equal the declared parameter set of the kind exactly.
    Raises:
        ConditionSchemaError: If keys are missing/unknown or values are invalid.
        UnknownIndicatorKindError: If `kind` is outside the closed kind set.
    Side Effects:
        None.
    """
    variant = condition_type(kind)
    declared = set(variant.definition().param_names())
    provided = set(parameters)
    missing = sorted(declared - provided)
    unknown = sorted(provided - declared)
    if missing or unknown:
        raise ConditionSchemaError(
            f"{variant.kind.value} condition parameters mismatch: "
            f"missing={missing} unknown={unknown}"
        )
    return variant(timeframe=timeframe, comparator=comparator, **dict(parameters))


__all__ = [
    "BollingerBandsPercentBCondition",
    "Condition",
    "ExternalSignalCondition",
    "IndicatorCondition",
    "MacdCondition",
    "MovingAverageCrossoverCondition",
    "ParabolicSarCondition",
    "RsiCondition",
    "SmoothedCandleCondition",
    "StochasticCondition",
    "build_condition",
    "condition_type",
]
