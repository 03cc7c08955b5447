from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# Candle resolutions the simulation engine ships precomputed indicator columns for.
_SUPPORTED_SECONDS = {
    "1m": 60,
    "5m": 5 * 60,
    "15m": 15 * 60,
    "1h": 60 * 60,
    "4h": 4 * 60 * 60,
    "1d": 24 * 60 * 60,
}


@dataclass(frozen=True, slots=True)
class Timeframe:
    """
    Timeframe — candle resolution a condition is evaluated on.

    Representation:
    - code: "1m", "5m", ...
    """

    code: str

    def __post_init__(self) -> None:
        if not isinstance(self.code, str):
            raise ValueError(f"Timeframe code must be a string, got {self.code!r}")
        normalized = self.code.strip().lower()
        object.__setattr__(self, "code", normalized)

        if normalized not in _SUPPORTED_SECONDS:
            raise ValueError(
                f"Unsupported timeframe={normalized!r}. Supported: {supported_timeframe_codes()}"
            )

    def duration(self) -> timedelta:
        """Duration of one candle."""
        return timedelta(seconds=_SUPPORTED_SECONDS[self.code])

    def __str__(self) -> str:
        return self.code


def supported_timeframe_codes() -> tuple[str, ...]:
    """Supported codes ordered from finest to coarsest."""
    return tuple(_SUPPORTED_SECONDS.keys())
