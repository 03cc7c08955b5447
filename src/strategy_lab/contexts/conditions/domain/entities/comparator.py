from __future__ import annotations

from enum import Enum

_DEFAULT_LABELS = {
    "less_than": "Less Than",
    "greater_than": "Greater Than",
    "crossing_up": "Crossing Up",
    "crossing_down": "Crossing Down",
}


class Comparator(str, Enum):
    """
    Relation between an indicator series and its threshold that triggers a condition.

    Indicator kinds may restrict the set and rename labels (see `IndicatorDef`).

    Related: .indicator_def, ..definitions
    """

    LESS_THAN = "less_than"
    GREATER_THAN = "greater_than"
    CROSSING_UP = "crossing_up"
    CROSSING_DOWN = "crossing_down"

    @property
    def default_label(self) -> str:
        """Label used in serialized subfields unless the kind overrides it."""
        return _DEFAULT_LABELS[self.value]


ALL_COMPARATORS = (
    Comparator.LESS_THAN,
    Comparator.GREATER_THAN,
    Comparator.CROSSING_UP,
    Comparator.CROSSING_DOWN,
)
