from __future__ import annotations

from datetime import date
from enum import Enum

_CRYPTO_ASSETS = (
    "BTC/USDT",
    "ETH/USDT",
    "SOL/USDT",
    "XRP/USDT",
    "ADA/USDT",
    "DOGE/USDT",
    "AVAX/USDT",
    "LINK/USDT",
    "DOT/USDT",
    "NEAR/USDT",
    "LTC/USDT",
    "HBAR/USDT",
    "SUI/USDT",
    "RENDER/USDT",
    "ATOM/USDT",
)

_STOCK_ASSETS = (
    # US stocks
    "AAPL",
    "MSFT",
    "GOOGL",
    "AMZN",
    "NVDA",
    "META",
    "TSLA",
    "JPM",
    "V",
    "MA",
    "JNJ",
    "WMT",
    "PG",
    "HD",
    "DIS",
    "NFLX",
    "PYPL",
    # ETFs
    "SPY",
    "QQQ",
    "IWM",
    "DIA",
    "VTI",
    "VOO",
    "EEM",
    # commodity ETFs
    "GLD",
    "SLV",
    "USO",
)


class TradingMode(str, Enum):
    """
    Market family the platform is configured for.

    The mode selects the tradable asset universe and the earliest date the
    historical data source can serve.

    Related:
      - src/strategy_lab/contexts/strategy_config/domain/services/configuration_validator.py
      - src/strategy_lab/contexts/backtest_queue/adapters/outbound/config/
        backtest_client_runtime_config.py
    """

    CRYPTO = "crypto"
    STOCKS = "stocks"

    def asset_universe(self) -> tuple[str, ...]:
        """Return every asset a strategy may trade in this mode."""
        if self is TradingMode.CRYPTO:
            return _CRYPTO_ASSETS
        return _STOCK_ASSETS

    def default_asset(self) -> str:
        """Return the asset preselected on a fresh configuration."""
        if self is TradingMode.CRYPTO:
            return "BTC/USDT"
        return "SPY"

    def earliest_data_date(self) -> date:
        """Return the first calendar day with historical candles."""
        if self is TradingMode.CRYPTO:
            # First Binance spot candles.
            return date(2017, 8, 17)
        return date(2000, 1, 1)
