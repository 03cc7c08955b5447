from __future__ import annotations

from enum import Enum

from ..errors import UnknownIndicatorKindError


class IndicatorKind(str, Enum):
    """
    Closed set of indicator kinds a condition can be built on.

    Values are the indicator identifiers the simulation engine reads from the
    `indicator` key of a serialized condition.

    Related: .indicator_def, ..definitions, ..value_objects.condition
    """

    RSI = "RSI"
    MOVING_AVERAGE_CROSSOVER = "MA"
    MACD = "MACD"
    BOLLINGER_BANDS_PERCENT_B = "BollingerBands"
    STOCHASTIC = "Stochastic"
    PARABOLIC_SAR = "ParabolicSAR"
    EXTERNAL_SIGNAL = "TradingView"
    SMOOTHED_CANDLE = "HeikenAshi"

    @classmethod
    def parse(cls, raw_value: object) -> IndicatorKind:
        """
        Resolve indicator kind from its wire identifier.

        Args:
            raw_value: Identifier as found in a serialized condition.
        Returns:
            IndicatorKind: Matching kind.
        Assumptions:
            Identifiers are case-sensitive, matching the engine contract.
        Raises:
            UnknownIndicatorKindError: If identifier is not part of the closed set.
        Side Effects:
            None.
        """
        if isinstance(raw_value, IndicatorKind):
            return raw_value
        for member in cls:
            if member.value == raw_value:
                return member
        raise UnknownIndicatorKindError(
            f"Unknown indicator kind {raw_value!r}. Supported: {[item.value for item in cls]}"
        )
