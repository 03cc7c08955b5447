from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .comparator import Comparator
from .indicator_kind import IndicatorKind
from .param_def import ParamDef, ParamValue

TIMEFRAME_WIRE_NAME = "Timeframe"


@dataclass(frozen=True, slots=True)
class IndicatorDef:
    """
    Parameter schema of one indicator kind.

    `params` is the exact, ordered parameter set of every condition of this kind.
    `comparator_labels` lists the supported comparators in display order together
    with the kind-specific subfield label; an empty mapping means the kind is
    triggered by its parameters alone and carries no comparator.

    Related: .param_def, .comparator, ..definitions, ..value_objects.condition
    """

    kind: IndicatorKind
    title: str
    params: tuple[ParamDef, ...]
    comparator_field: str | None = None
    comparator_labels: Mapping[Comparator, str] = field(default_factory=dict)
    default_comparator: Comparator | None = None

    def __post_init__(self) -> None:
        """
        Validate definition invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Parameter names and subfield labels must be unique within one kind,
            including the reserved timeframe and comparator subfields.
        Raises:
            ValueError: If names collide or comparator settings are inconsistent.
        Side Effects:
            Freezes `comparator_labels` into a read-only mapping.
        """
        if not self.title.strip():
            raise ValueError("IndicatorDef requires a non-empty title")

        names = [item.name for item in self.params]
        if len(set(names)) != len(names):
            raise ValueError(f"IndicatorDef {self.kind.value} has duplicate param names")

        wire_names = [TIMEFRAME_WIRE_NAME, *(item.wire_name for item in self.params)]
        if self.comparator_field is not None:
            wire_names.append(self.comparator_field)
        if len(set(wire_names)) != len(wire_names):
            raise ValueError(f"IndicatorDef {self.kind.value} has colliding subfield labels")

        labels = dict(self.comparator_labels)
        if self.comparator_field is None:
            if labels or self.default_comparator is not None:
                raise ValueError(
                    f"IndicatorDef {self.kind.value} without comparator_field "
                    "must not declare comparators"
                )
        else:
            if not labels:
                raise ValueError(
                    f"IndicatorDef {self.kind.value} requires at least one comparator"
                )
            if self.default_comparator not in labels:
                raise ValueError(
                    f"IndicatorDef {self.kind.value} default_comparator must be supported"
                )
            if len(set(labels.values())) != len(labels):
                raise ValueError(
                    f"IndicatorDef {self.kind.value} comparator labels must be unique"
                )
        object.__setattr__(self, "comparator_labels", MappingProxyType(labels))

    @property
    def has_comparator(self) -> bool:
        return self.comparator_field is not None

    @property
    def comparators(self) -> tuple[Comparator, ...]:
        """Supported comparators in display order."""
        return tuple(self.comparator_labels.keys())

    def param_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.params)

    def param(self, name: str) -> ParamDef:
        """
        Return parameter definition by snake_case name.

        Args:
            name: Parameter name.
        Returns:
            ParamDef: Matching definition.
        Assumptions:
            None.
        Raises:
            KeyError: If the kind does not declare the parameter.
        Side Effects:
            None.
        """
        for item in self.params:
            if item.name == name:
                return item
        raise KeyError(f"{self.kind.value} has no parameter {name!r}")

    def default_parameters(self) -> dict[str, ParamValue]:
        """Return a fresh `name -> default` map covering every declared parameter."""
        return {item.name: item.default for item in self.params}

    def comparator_label(self, comparator: Comparator) -> str:
        return self.comparator_labels[comparator]

    def comparator_from_label(self, label: object) -> Comparator:
        """
        Resolve comparator from its kind-specific subfield label.

        Args:
            label: Label as found in serialized subfields.
        Returns:
            Comparator: Matching comparator.
        Assumptions:
            Labels are case-sensitive.
        Raises:
            KeyError: If label is not supported by this kind.
        Side Effects:
            None.
        """
        for comparator, candidate in self.comparator_labels.items():
            if candidate == label:
                return comparator
        raise KeyError(f"{self.kind.value} does not support comparator label {label!r}")
