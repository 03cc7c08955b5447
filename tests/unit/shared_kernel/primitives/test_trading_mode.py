from __future__ import annotations

from datetime import date

from strategy_lab.shared_kernel.primitives import TradingMode


def test_crypto_mode_constants() -> None:
    """
    Verify crypto trading mode exposes USDT universe, default pair and data start.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Universe order is the order shown in the asset picker.
    Raises:
        AssertionError: If one of mode constants differs.
    Side Effects:
        None.
    """
    universe = TradingMode.CRYPTO.asset_universe()

    assert len(universe) == 15
    assert all(asset.endswith("/USDT") for asset in universe)
    assert TradingMode.CRYPTO.default_asset() == "BTC/USDT"
    assert TradingMode.CRYPTO.default_asset() in universe
    assert TradingMode.CRYPTO.earliest_data_date() == date(2017, 8, 17)


def test_stocks_mode_constants() -> None:
    universe = TradingMode.STOCKS.asset_universe()

    assert len(universe) == 27
    assert len(set(universe)) == len(universe)
    assert TradingMode.STOCKS.default_asset() == "SPY"
    assert "SPY" in universe
    assert TradingMode.STOCKS.earliest_data_date() == date(2000, 1, 1)


def test_trading_mode_parses_wire_value() -> None:
    assert TradingMode("crypto") is TradingMode.CRYPTO
    assert TradingMode("stocks") is TradingMode.STOCKS
