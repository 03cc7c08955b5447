from __future__ import annotations

import math
from dataclasses import dataclass

from .param_kind import ParamKind

ParamValue = int | float | str


@dataclass(frozen=True, slots=True)
class ParamDef:
    """
    Domain declaration of a single condition parameter.

    `name` is the snake_case attribute of the condition variant, `wire_name` is the
    subfield label the simulation engine expects in serialized payloads.

    Related: .param_kind, .indicator_def, ..value_objects.condition
    """

    name: str
    wire_name: str
    kind: ParamKind
    default: ParamValue
    hard_min: float | int | None = None
    hard_max: float | int | None = None
    choices: tuple[float | int, ...] | None = None
    enum_values: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        """
        Validate parameter definition invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Enum and numeric parameter families are mutually exclusive.
        Raises:
            ValueError: If names are invalid or kind-specific invariants are violated.
        Side Effects:
            Normalizes `name` and `wire_name` by stripping spaces.
        """
        normalized_name = self.name.strip()
        normalized_wire_name = self.wire_name.strip()
        object.__setattr__(self, "name", normalized_name)
        object.__setattr__(self, "wire_name", normalized_wire_name)
        if not normalized_name:
            raise ValueError("ParamDef requires a non-empty name")
        if not normalized_wire_name:
            raise ValueError("ParamDef requires a non-empty wire_name")

        if (
            self.hard_min is not None
            and self.hard_max is not None
            and self.hard_min > self.hard_max
        ):
            raise ValueError("ParamDef requires hard_min <= hard_max")

        if self.kind is ParamKind.ENUM:
            self._validate_enum_param()
            return

        self._validate_numeric_param()

    def _validate_numeric_param(self) -> None:
        """
        Validate numeric parameter invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Numeric kinds do not accept enum values and their default is itself valid.
        Raises:
            ValueError: If numeric constraints are violated.
        Side Effects:
            None.
        """
        if self.enum_values is not None:
            raise ValueError("Numeric ParamDef must not define enum_values")
        if self.choices is not None:
            if len(self.choices) == 0:
                raise ValueError("Numeric ParamDef choices must be non-empty when provided")
            if len(set(self.choices)) != len(self.choices):
                raise ValueError("Numeric ParamDef choices must be unique")

        problem = self.validate_value(self.default)
        if problem is not None:
            raise ValueError(f"ParamDef {self.name} default is invalid: {problem}")

    def _validate_enum_param(self) -> None:
        """
        Validate enum parameter invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Enum kind disallows numeric bounds. An empty-string member is allowed and
            stands for "no additional trigger".
        Raises:
            ValueError: If enum constraints are violated.
        Side Effects:
            None.
        """
        if (
            self.hard_min is not None
            or self.hard_max is not None
            or self.choices is not None
        ):
            raise ValueError("Enum ParamDef does not allow hard_min, hard_max, or choices")

        if self.enum_values is None or len(self.enum_values) == 0:
            raise ValueError("Enum ParamDef requires non-empty enum_values")
        if len(set(self.enum_values)) != len(self.enum_values):
            raise ValueError("Enum ParamDef values must be unique")
        if self.default not in self.enum_values:
            raise ValueError("Enum ParamDef default must belong to enum_values")

    def validate_value(self, value: object) -> str | None:
        """
        Check one candidate value against the parameter domain.

        Args:
            value: Candidate value from a form edit or a decoded payload.
        Returns:
            str | None: Human-readable problem description, or None when valid.
        Assumptions:
            Bool values are never accepted as numbers.
        Raises:
            None.
        Side Effects:
            None.
        """
        if self.kind is ParamKind.ENUM:
            if not isinstance(value, str) or value not in (self.enum_values or ()):
                return f"must be one of {list(self.enum_values or ())}, got {value!r}"
            return None

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"must be a number, got {value!r}"
        if self.kind is ParamKind.INT and not isinstance(value, int):
            return f"must be an integer, got {value!r}"
        if isinstance(value, float) and not math.isfinite(value):
            return f"must be finite, got {value!r}"

        if self.choices is not None and value not in self.choices:
            return f"must be one of {list(self.choices)}, got {value!r}"
        if self.hard_min is not None and value < self.hard_min:
            return f"must be >= {self.hard_min}, got {value!r}"
        if self.hard_max is not None and value > self.hard_max:
            return f"must be <= {self.hard_max}, got {value!r}"
        return None

    def normalize_value(self, value: ParamValue) -> ParamValue:
        """Coerce an already valid value to the canonical Python type of the kind."""
        if self.kind is ParamKind.FLOAT:
            return float(value)
        return value
