from __future__ import annotations

from dataclasses import dataclass

from strategy_lab.shared_kernel.primitives import UserId


@dataclass(frozen=True, slots=True)
class UserProfileSnapshot:
    """
    UserProfileSnapshot — profile facts captured once when the backtest form is opened.

    Passed explicitly into notification and submission code; it is not refreshed if the
    profile changes later in the same session.

    Related:
      - src/strategy_lab/contexts/backtest_queue/domain/services/notification_policy.py
      - src/strategy_lab/contexts/backtest_queue/application/use_cases/submit_backtest_job.py
    """

    user_id: UserId
    email: str | None = None
    telegram_configured: bool = False

    def __post_init__(self) -> None:
        """
        Validate snapshot field types and normalize email.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Blank email is stored as None.
        Raises:
            ValueError: If fields have wrong types.
        Side Effects:
            Normalizes `email`.
        """
        if not isinstance(self.user_id, UserId):
            raise ValueError(f"UserProfileSnapshot.user_id must be UserId, got {self.user_id!r}")
        if not isinstance(self.telegram_configured, bool):
            raise ValueError("UserProfileSnapshot.telegram_configured must be bool")
        if self.email is not None:
            normalized = self.email.strip()
            object.__setattr__(self, "email", normalized or None)
