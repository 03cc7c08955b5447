"""
Condition schema registry grouped by indicator family.

Related: strategy_lab.contexts.conditions.domain.entities.indicator_def
"""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from strategy_lab.contexts.conditions.domain.entities import (
    IndicatorDef,
    IndicatorKind,
    ParamDef,
)

from .oscillators import defs as oscillator_defs
from .signals import defs as signal_defs
from .trend import defs as trend_defs


@lru_cache(maxsize=1)
def _defs_by_kind() -> Mapping[IndicatorKind, IndicatorDef]:
    """
    Build the kind -> definition index once.

    Args:
        None.
    Returns:
        Mapping[IndicatorKind, IndicatorDef]: Read-only index.
    Assumptions:
        Every `IndicatorKind` member is defined exactly once across the families.
    Raises:
        ValueError: If a kind is missing or defined twice.
    Side Effects:
        None.
    """
    index: dict[IndicatorKind, IndicatorDef] = {}
    for item in (*oscillator_defs(), *trend_defs(), *signal_defs()):
        if item.kind in index:
            raise ValueError(f"duplicate condition schema for {item.kind.value}")
        index[item.kind] = item
    missing = [kind.value for kind in IndicatorKind if kind not in index]
    if missing:
        raise ValueError(f"missing condition schemas for {missing}")
    return MappingProxyType(index)


def all_indicator_defs() -> tuple[IndicatorDef, ...]:
    """Return every condition schema ordered as `IndicatorKind` declares kinds."""
    index = _defs_by_kind()
    return tuple(index[kind] for kind in IndicatorKind)


def indicator_def(kind: IndicatorKind) -> IndicatorDef:
    """
    Return condition schema for one indicator kind.

    Args:
        kind: Indicator kind.
    Returns:
        IndicatorDef: Schema of the kind.
    Assumptions:
        Registry covers the closed kind set.
    Raises:
        UnknownIndicatorKindError: If `kind` is not an `IndicatorKind` identifier.
    Side Effects:
        None.
    """
    return _defs_by_kind()[IndicatorKind.parse(kind)]


def param_defs(kind: IndicatorKind) -> tuple[ParamDef, ...]:
    """Return the ordered parameter definitions of one indicator kind."""
    return indicator_def(kind).params


__all__ = ["all_indicator_defs", "indicator_def", "param_defs"]
