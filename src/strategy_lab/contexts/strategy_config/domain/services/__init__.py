from .configuration_validator import (
    FIELD_PRIORITY,
    MIN_INITIAL_CAPITAL,
    first_invalid_field,
    is_submittable,
    validate_strategy_configuration,
)
from .engine_payload import serialize_engine_payload

__all__ = [
    "FIELD_PRIORITY",
    "MIN_INITIAL_CAPITAL",
    "first_invalid_field",
    "is_submittable",
    "serialize_engine_payload",
    "validate_strategy_configuration",
]
