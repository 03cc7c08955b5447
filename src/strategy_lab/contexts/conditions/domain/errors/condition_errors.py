from __future__ import annotations


class ConditionSchemaError(ValueError):
    """
    Raised when a condition does not match the parameter schema of its indicator kind.

    Covers missing or unknown parameters, out-of-domain values, unsupported
    comparators and malformed serialized conditions.

    Related:
      - src/strategy_lab/contexts/conditions/domain/value_objects/condition.py
      - src/strategy_lab/contexts/conditions/domain/services/condition_editing.py
    """


class UnknownIndicatorKindError(ConditionSchemaError):
    """
    Raised when an indicator identifier is outside the closed indicator kind set.

    Related:
      - src/strategy_lab/contexts/conditions/domain/entities/indicator_kind.py
    """
