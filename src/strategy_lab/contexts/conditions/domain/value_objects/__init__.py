from .condition import (
    BollingerBandsPercentBCondition,
    Condition,
    ExternalSignalCondition,
    IndicatorCondition,
    MacdCondition,
    MovingAverageCrossoverCondition,
    ParabolicSarCondition,
    RsiCondition,
    SmoothedCandleCondition,
    StochasticCondition,
    build_condition,
    condition_type,
)

__all__ = [
    "BollingerBandsPercentBCondition",
    "Condition",
    "ExternalSignalCondition",
    "IndicatorCondition",
    "MacdCondition",
    "MovingAverageCrossoverCondition",
    "ParabolicSarCondition",
    "RsiCondition",
    "SmoothedCandleCondition",
    "StochasticCondition",
    "build_condition",
    "condition_type",
]
