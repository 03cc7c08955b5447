from .condition_errors import ConditionSchemaError, UnknownIndicatorKindError

__all__ = [
    "ConditionSchemaError",
    "UnknownIndicatorKindError",
]
