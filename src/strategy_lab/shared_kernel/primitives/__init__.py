"""
Shared Kernel primitives.

This package re-exports the minimal set of domain primitives so that other
modules can import them from one place:

    from strategy_lab.shared_kernel.primitives import Timeframe, TradingMode
"""

from .date_range import DateRange
from .timeframe import Timeframe, supported_timeframe_codes
from .trading_mode import TradingMode
from .user_id import UserId

__all__ = [
    "DateRange",
    "Timeframe",
    "TradingMode",
    "UserId",
    "supported_timeframe_codes",
]
