from __future__ import annotations

from typing import Mapping

from strategy_lab.shared_kernel.primitives import TradingMode


def resolve_bounded_int_override(
    *,
    environ: Mapping[str, str],
    key: str,
    default: int,
    min_value: int,
    max_value: int,
) -> int:
    """
    Resolve bounded integer override from environment mapping.

    Related:
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/config/
        backtest_client_runtime_config.py

    Args:
        environ: Runtime environment mapping.
        key: Environment variable key.
        default: Fallback when override is missing or blank.
        min_value: Inclusive lower bound.
        max_value: Inclusive upper bound.
    Returns:
        int: Resolved integer value.
    Assumptions:
        Integer parsing uses base-10 representation. Blank env values are "not set".
    Raises:
        ValueError: If value is not an integer or is out of bounds.
    Side Effects:
        None.
    """
    raw_override = environ.get(key, "").strip()
    if not raw_override:
        return default
    try:
        parsed = int(raw_override, 10)
    except ValueError as error:
        raise ValueError(f"{key} must be int, got {raw_override!r}") from error
    if not min_value <= parsed <= max_value:
        raise ValueError(f"{key} must be in [{min_value}, {max_value}], got {parsed}")
    return parsed


def resolve_trading_mode_override(
    *,
    environ: Mapping[str, str],
    key: str,
    default: TradingMode,
) -> TradingMode:
    """
    Resolve trading mode override from environment mapping.

    Args:
        environ: Runtime environment mapping.
        key: Environment variable key.
        default: Fallback when override is missing or blank.
    Returns:
        TradingMode: Resolved trading mode.
    Assumptions:
        Literal comparison is case-insensitive.
    Raises:
        ValueError: If value is not `crypto` or `stocks`.
    Side Effects:
        None.
    """
    raw_override = environ.get(key, "").strip().lower()
    if not raw_override:
        return default
    try:
        return TradingMode(raw_override)
    except ValueError as error:
        allowed = tuple(item.value for item in TradingMode)
        raise ValueError(f"{key} must be one of {allowed}, got {raw_override!r}") from error


__all__ = [
    "resolve_bounded_int_override",
    "resolve_trading_mode_override",
]
