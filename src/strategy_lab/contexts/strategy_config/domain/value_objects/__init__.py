from .asset_selection import AssetSelection
from .signal_conditions import (
    CONDITION_MODES,
    ConditionListName,
    ConditionMode,
    FlatConditions,
    MarketStateConditions,
    SignalConditions,
    empty_signal_conditions,
)
from .trade_settings import (
    DealSettings,
    ProfitBase,
    SafetyOrderSettings,
    StopLossSettings,
    TakeProfitSettings,
    require_number,
)

__all__ = [
    "AssetSelection",
    "CONDITION_MODES",
    "ConditionListName",
    "ConditionMode",
    "DealSettings",
    "FlatConditions",
    "MarketStateConditions",
    "ProfitBase",
    "SafetyOrderSettings",
    "SignalConditions",
    "StopLossSettings",
    "TakeProfitSettings",
    "empty_signal_conditions",
    "require_number",
]
