from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from strategy_lab.contexts.strategy_config.domain.errors import StrategyConfigurationError


@dataclass(frozen=True, slots=True)
class AssetSelection:
    """
    AssetSelection — assets a strategy trades.

    With `use_all_assets` on, the explicit list is kept but ignored and the whole
    universe of the trading mode is traded instead.

    Related:
      - src/strategy_lab/shared_kernel/primitives/trading_mode.py
      - src/strategy_lab/contexts/strategy_config/domain/services/engine_payload.py
    """

    use_all_assets: bool = False
    assets: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """
        Validate flag type and normalize the explicit asset list.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Order of selection is preserved; repeated symbols are collapsed.
        Raises:
            StrategyConfigurationError: If flag or symbols have wrong types.
        Side Effects:
            Replaces `assets` with a stripped, de-duplicated tuple.
        """
        if not isinstance(self.use_all_assets, bool):
            raise StrategyConfigurationError(
                f"asset_selection.use_all_assets must be bool, got {self.use_all_assets!r}"
            )
        if isinstance(self.assets, str):
            raise StrategyConfigurationError("asset_selection.assets must be a sequence of symbols")

        normalized: list[str] = []
        for raw in self.assets:
            if not isinstance(raw, str) or not raw.strip():
                raise StrategyConfigurationError(
                    f"asset_selection.assets items must be non-empty strings, got {raw!r}"
                )
            symbol = raw.strip()
            if symbol not in normalized:
                normalized.append(symbol)
        object.__setattr__(self, "assets", tuple(normalized))

    def with_assets(self, assets: Iterable[str]) -> AssetSelection:
        return AssetSelection(use_all_assets=self.use_all_assets, assets=tuple(assets))

    def resolve(self, *, universe: Iterable[str]) -> tuple[str, ...]:
        """Return the assets the engine should trade."""
        if self.use_all_assets:
            return tuple(universe)
        return self.assets
