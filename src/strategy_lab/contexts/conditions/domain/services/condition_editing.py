from __future__ import annotations

from typing import Any, Mapping, Sequence

from strategy_lab.contexts.conditions.domain.definitions import indicator_def
from strategy_lab.contexts.conditions.domain.entities import (
    TIMEFRAME_WIRE_NAME,
    Comparator,
    IndicatorKind,
    ParamKind,
    ParamValue,
)
from strategy_lab.contexts.conditions.domain.errors import ConditionSchemaError
from strategy_lab.contexts.conditions.domain.value_objects import (
    IndicatorCondition,
    build_condition,
)
from strategy_lab.shared_kernel.primitives import Timeframe

_DEFAULT_TIMEFRAME = "1m"


def new_condition(
    *,
    kind: IndicatorKind = IndicatorKind.RSI,
    timeframe: Timeframe | str = _DEFAULT_TIMEFRAME,
    comparator: Comparator | None = None,
) -> IndicatorCondition:
    """
    Create a condition with every declared parameter at its default.

    Args:
        kind: Indicator kind, RSI when omitted.
        timeframe: Evaluation timeframe, `1m` when omitted.
        comparator: Optional comparator; kind default when omitted.
    Returns:
        IndicatorCondition: Valid condition ready to append to a list.
    Assumptions:
        Schema defaults are valid by construction (checked by `ParamDef`).
    Raises:
        ConditionSchemaError: If `comparator` is not supported by the kind.
        UnknownIndicatorKindError: If `kind` is outside the closed kind set.
    Side Effects:
        None.
    """
    definition = indicator_def(kind)
    return build_condition(
        kind=definition.kind,
        timeframe=_coerce_timeframe(timeframe),
        comparator=comparator if comparator is not None else definition.default_comparator,
        parameters=definition.default_parameters(),
    )


def change_condition_kind(
    condition: IndicatorCondition,
    *,
    kind: IndicatorKind,
) -> IndicatorCondition:
    """
    Switch a condition to another indicator kind.

    Args:
        condition: Current condition.
        kind: Target indicator kind.
    Returns:
        IndicatorCondition: Condition of the target kind with default parameters and
            comparator; only the timeframe is carried over.
    Assumptions:
        No parameter value survives a kind change, even when names coincide.
    Raises:
        UnknownIndicatorKindError: If `kind` is outside the closed kind set.
    Side Effects:
        None.
    """
    return new_condition(kind=kind, timeframe=condition.timeframe)


def update_condition_parameter(
    condition: IndicatorCondition,
    *,
    name: str,
    value: ParamValue,
) -> IndicatorCondition:
    """
    Return a copy of the condition with one parameter changed.

    Args:
        condition: Current condition.
        name: Snake_case parameter name declared by the condition kind.
        value: New value.
    Returns:
        IndicatorCondition: Updated condition.
    Assumptions:
        None.
    Raises:
        ConditionSchemaError: If the parameter is not declared or the value is invalid.
    Side Effects:
        None.
    """
    if name not in condition.definition().param_names():
        raise ConditionSchemaError(f"{condition.kind.value} condition has no parameter {name!r}")
    return condition.replace(**{name: value})


def update_condition_comparator(
    condition: IndicatorCondition,
    *,
    comparator: Comparator,
) -> IndicatorCondition:
    return condition.replace(comparator=comparator)


def update_condition_timeframe(
    condition: IndicatorCondition,
    *,
    timeframe: Timeframe | str,
) -> IndicatorCondition:
    return condition.replace(timeframe=_coerce_timeframe(timeframe))


def condition_from_wire(payload: Mapping[str, Any]) -> IndicatorCondition:
    """
    Decode one engine condition payload `{indicator, subfields}`.

    Args:
        payload: Serialized condition.
    Returns:
        IndicatorCondition: Validated condition variant.
    Assumptions:
        Subfield set must match the kind schema exactly. Whole floats are accepted
        for integer parameters because JSON encoders may emit `14.0`.
    Raises:
        ConditionSchemaError: If payload shape, subfields or values are invalid.
        UnknownIndicatorKindError: If `indicator` is outside the closed kind set.
    Side Effects:
        None.
    """
    if not isinstance(payload, Mapping):
        raise ConditionSchemaError("condition payload must be a mapping")
    definition = indicator_def(IndicatorKind.parse(payload.get("indicator")))
    subfields = payload.get("subfields")
    if not isinstance(subfields, Mapping):
        raise ConditionSchemaError(f"{definition.kind.value} condition requires subfields mapping")

    expected = {TIMEFRAME_WIRE_NAME, *(item.wire_name for item in definition.params)}
    if definition.comparator_field is not None:
        expected.add(definition.comparator_field)
    missing = sorted(expected - set(subfields))
    unknown = sorted(set(subfields) - expected)
    if missing or unknown:
        raise ConditionSchemaError(
            f"{definition.kind.value} condition subfields mismatch: "
            f"missing={missing} unknown={unknown}"
        )

    comparator: Comparator | None = None
    if definition.comparator_field is not None:
        try:
            comparator = definition.comparator_from_label(subfields[definition.comparator_field])
        except KeyError as error:
            raise ConditionSchemaError(str(error.args[0])) from error

    try:
        timeframe = Timeframe(subfields[TIMEFRAME_WIRE_NAME])
    except ValueError as error:
        raise ConditionSchemaError(str(error)) from error

    parameters: dict[str, ParamValue] = {}
    for param in definition.params:
        value = subfields[param.wire_name]
        if param.kind is ParamKind.INT and isinstance(value, float) and value.is_integer():
            value = int(value)
        parameters[param.name] = value

    return build_condition(
        kind=definition.kind,
        timeframe=timeframe,
        comparator=comparator,
        parameters=parameters,
    )


def conditions_to_wire(conditions: Sequence[IndicatorCondition]) -> list[dict[str, Any]]:
    """Serialize a condition list preserving order and duplicates."""
    return [item.to_wire() for item in conditions]


def _coerce_timeframe(timeframe: Timeframe | str) -> Timeframe:
    if isinstance(timeframe, Timeframe):
        return timeframe
    try:
        return Timeframe(timeframe)
    except ValueError as error:
        raise ConditionSchemaError(str(error)) from error
