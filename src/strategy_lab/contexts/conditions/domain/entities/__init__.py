from .comparator import ALL_COMPARATORS, Comparator
from .indicator_def import TIMEFRAME_WIRE_NAME, IndicatorDef
from .indicator_kind import IndicatorKind
from .param_def import ParamDef, ParamValue
from .param_kind import ParamKind

__all__ = [
    "ALL_COMPARATORS",
    "Comparator",
    "IndicatorDef",
    "IndicatorKind",
    "ParamDef",
    "ParamKind",
    "ParamValue",
    "TIMEFRAME_WIRE_NAME",
]
