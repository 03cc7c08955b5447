from .condition_editing import (
    change_condition_kind,
    condition_from_wire,
    conditions_to_wire,
    new_condition,
    update_condition_comparator,
    update_condition_parameter,
    update_condition_timeframe,
)

__all__ = [
    "change_condition_kind",
    "condition_from_wire",
    "conditions_to_wire",
    "new_condition",
    "update_condition_comparator",
    "update_condition_parameter",
    "update_condition_timeframe",
]
